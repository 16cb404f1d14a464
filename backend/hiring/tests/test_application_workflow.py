"""
Application workflow: creation preconditions, status mapping and updates.
"""
import uuid
from unittest.mock import patch

import pytest
from django.db.models.query import QuerySet

from hiring.application_workflow import (
    EXTERNAL_STATUSES,
    ApplicationWorkflow,
    WorkflowConfig,
    to_external_status,
    to_internal_status,
)
from hiring.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStatusError,
    JobNotOpenError,
    MissingRequiredAnswersError,
    NotFoundError,
)
from hiring.models import Application, ApplicationStatusChange
from hiring.tests.fixtures import (
    ApplicationFactory,
    CandidateProfileFactory,
    JobFactory,
    RecruiterAccountFactory,
    UserAccountFactory,
)

QUESTIONS = {
    'supplementalQuestions': [
        {'id': 'q1', 'question': 'Why us?', 'type': 'textarea', 'required': True},
        {'id': 'q2', 'question': 'Referral?', 'type': 'text', 'required': False},
    ]
}


@pytest.mark.unit
class TestStatusMapping:
    def test_round_trip(self):
        for external in EXTERNAL_STATUSES:
            assert to_external_status(to_internal_status(external)) == external

    def test_known_values(self):
        assert to_internal_status('Under Review') == 'under_review'
        assert to_external_status('hired') == 'Hired'
        assert EXTERNAL_STATUSES == ['Applied', 'Under Review', 'Interview', 'Offer', 'Hired', 'Rejected']

    def test_unknown_status(self):
        with pytest.raises(InvalidStatusError) as exc_info:
            to_internal_status('under_review')
        assert exc_info.value.extra['valid_statuses'] == EXTERNAL_STATUSES

    def test_config_defaults_from_settings(self, settings):
        settings.HIRING_WORKFLOW = {'ALLOW_LEGACY_JOB_STATUS': False}
        config = WorkflowConfig.from_settings()
        assert config.allow_legacy_job_status is False
        assert config.allow_unowned_job_access is True
        assert config.candidate_can_update_status is True


@pytest.mark.django_db
class TestCreateApplication:
    def setup_method(self):
        self.workflow = ApplicationWorkflow(WorkflowConfig())
        self.candidate = UserAccountFactory()
        self.job = JobFactory()

    def test_creates_applied_application(self):
        result = self.workflow.create_application(self.job.id, self.candidate)

        assert result.created is True
        assert result.status == 'Applied'
        assert result.job == self.job
        application = Application.objects.get(job=self.job, candidate=self.candidate)
        assert application.status == 'applied'
        assert result.application.pk == application.pk

    def test_resume_defaults_to_profile(self):
        profile = CandidateProfileFactory(account=self.candidate)
        result = self.workflow.create_application(self.job.id, self.candidate)
        assert result.application.resume_url == profile.resume_url

    def test_explicit_resume_wins(self):
        CandidateProfileFactory(account=self.candidate)
        url = 'https://files.example.com/custom.pdf'
        result = self.workflow.create_application(self.job.id, self.candidate, resume_url=url)
        assert result.application.resume_url == url

    def test_duplicate_is_rejected(self):
        self.workflow.create_application(self.job.id, self.candidate)
        with pytest.raises(ConflictError) as exc_info:
            self.workflow.create_application(self.job.id, self.candidate)
        assert exc_info.value.default_code == 'duplicate_application'
        assert Application.objects.filter(job=self.job, candidate=self.candidate).count() == 1

    def test_concurrent_duplicate_hits_unique_constraint(self):
        ApplicationFactory(job=self.job, candidate=self.candidate)
        # The other request inserted after this one's existence check
        with patch.object(QuerySet, 'exists', return_value=False):
            with pytest.raises(ConflictError) as exc_info:
                self.workflow.create_application(self.job.id, self.candidate)
        assert exc_info.value.default_code == 'duplicate_application'
        assert exc_info.value.status_code == 409
        assert Application.objects.filter(job=self.job, candidate=self.candidate).count() == 1

    def test_duplicate_checked_before_job_state(self):
        ApplicationFactory(job=self.job, candidate=self.candidate)
        self.job.status = 'closed'
        self.job.save()
        with pytest.raises(ConflictError):
            self.workflow.create_application(self.job.id, self.candidate)

    def test_unknown_job(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.workflow.create_application(uuid.uuid4(), self.candidate)
        assert exc_info.value.default_code == 'job_not_found'

    @pytest.mark.parametrize('job_status', ['closed', 'draft'])
    def test_job_not_open(self, job_status):
        job = JobFactory(status=job_status)
        with pytest.raises(JobNotOpenError) as exc_info:
            self.workflow.create_application(job.id, self.candidate)
        assert exc_info.value.extra['job_status'] == job_status
        assert exc_info.value.status_code == 403
        assert not Application.objects.filter(job=job).exists()

    def test_legacy_job_without_status_accepts(self):
        job = JobFactory(status=None)
        result = self.workflow.create_application(job.id, self.candidate)
        assert result.created is True

    def test_legacy_job_rejected_when_disabled(self):
        workflow = ApplicationWorkflow(WorkflowConfig(allow_legacy_job_status=False))
        job = JobFactory(status=None)
        with pytest.raises(JobNotOpenError) as exc_info:
            workflow.create_application(job.id, self.candidate)
        assert exc_info.value.extra['job_status'] is None

    def test_missing_required_answers(self):
        job = JobFactory(requirements=QUESTIONS)
        with pytest.raises(MissingRequiredAnswersError) as exc_info:
            self.workflow.create_application(job.id, self.candidate, answers={'q1': '   ', 'q2': 'Yes'})
        assert exc_info.value.extra['missing_required_questions'] == ['q1']
        assert not Application.objects.filter(job=job).exists()

    def test_required_answers_supplied(self):
        job = JobFactory(requirements=QUESTIONS)
        answers = {'q1': 'Great team'}
        result = self.workflow.create_application(job.id, self.candidate, answers=answers)
        assert result.application.supplemental_answers == answers

    def test_malformed_requirements_mean_no_questions(self):
        job = JobFactory(requirements={'supplementalQuestions': 'oops'})
        assert self.workflow.create_application(job.id, self.candidate).created is True


@pytest.mark.django_db
class TestUpdateStatus:
    def setup_method(self):
        self.workflow = ApplicationWorkflow(WorkflowConfig())
        self.owner = RecruiterAccountFactory()
        self.job = JobFactory(employer=self.owner)
        self.candidate = UserAccountFactory()
        self.application = ApplicationFactory(job=self.job, candidate=self.candidate)

    def test_owner_updates_status(self):
        updated = self.workflow.update_status('Interview', self.owner, application_id=self.application.id)
        assert updated.status == 'interview'
        self.application.refresh_from_db()
        assert self.application.status == 'interview'

    def test_status_change_is_recorded(self):
        self.workflow.update_status('Under Review', self.owner, application_id=self.application.id)
        change = ApplicationStatusChange.objects.get(application=self.application)
        assert change.old_status == 'applied'
        assert change.new_status == 'under_review'
        assert change.changed_by == self.owner

    def test_same_status_is_noop(self):
        self.workflow.update_status('Applied', self.owner, application_id=self.application.id)
        assert not ApplicationStatusChange.objects.exists()

    def test_lookup_by_job_and_candidate(self):
        updated = self.workflow.update_status(
            'Offer', self.owner, job_id=self.job.id, candidate_id=self.candidate.id,
        )
        assert updated.pk == self.application.pk
        assert updated.status == 'offer'

    def test_any_status_order_is_allowed(self):
        self.workflow.update_status('Hired', self.owner, application_id=self.application.id)
        updated = self.workflow.update_status('Applied', self.owner, application_id=self.application.id)
        assert updated.status == 'applied'

    def test_invalid_status_checked_before_lookup(self):
        with pytest.raises(InvalidStatusError):
            self.workflow.update_status('Ghosted', self.owner, application_id=uuid.uuid4())

    def test_missing_application(self):
        with pytest.raises(NotFoundError) as exc_info:
            self.workflow.update_status('Offer', self.owner, application_id=uuid.uuid4())
        assert exc_info.value.default_code == 'application_not_found'

    def test_other_recruiter_forbidden(self):
        with pytest.raises(AuthorizationError):
            self.workflow.update_status('Rejected', RecruiterAccountFactory(), application_id=self.application.id)
        self.application.refresh_from_db()
        assert self.application.status == 'applied'

    def test_other_candidate_forbidden(self):
        with pytest.raises(AuthorizationError):
            self.workflow.update_status('Rejected', UserAccountFactory(), application_id=self.application.id)

    def test_candidate_updates_own_application(self):
        updated = self.workflow.update_status('Rejected', self.candidate, application_id=self.application.id)
        assert updated.status == 'rejected'

    def test_candidate_update_can_be_disabled(self):
        workflow = ApplicationWorkflow(WorkflowConfig(candidate_can_update_status=False))
        with pytest.raises(AuthorizationError):
            workflow.update_status('Rejected', self.candidate, application_id=self.application.id)

    def test_unowned_job_managed_by_any_recruiter(self):
        application = ApplicationFactory(job=JobFactory(employer=None))
        updated = self.workflow.update_status('Interview', RecruiterAccountFactory(), application_id=application.id)
        assert updated.status == 'interview'

    def test_unowned_job_access_can_be_disabled(self):
        workflow = ApplicationWorkflow(WorkflowConfig(allow_unowned_job_access=False))
        application = ApplicationFactory(job=JobFactory(employer=None))
        with pytest.raises(AuthorizationError):
            workflow.update_status('Interview', RecruiterAccountFactory(), application_id=application.id)


@pytest.mark.django_db
class TestVisibility:
    def test_can_view_application(self):
        workflow = ApplicationWorkflow(WorkflowConfig())
        application = ApplicationFactory()
        assert workflow.can_view_application(application, application.candidate)
        assert workflow.can_view_application(application, application.job.employer)
        assert not workflow.can_view_application(application, UserAccountFactory())
        assert not workflow.can_view_application(application, None)
