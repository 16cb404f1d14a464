"""
Application status workflow.

Owns the status vocabulary, the preconditions for creating an application,
status updates and the authorization rule shared by every route that touches
an application or a job's applicant list.

Statuses: Applied, Under Review, Interview, Offer, Hired, Rejected. Any
authorized caller may move an application to any of the six statuses; the
order is not enforced.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from hiring.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStatusError,
    JobNotOpenError,
    MissingRequiredAnswersError,
    NotFoundError,
)
from hiring.models import Application, ApplicationStatusChange, CandidateProfile, Job

logger = logging.getLogger(__name__)


INTERNAL_TO_EXTERNAL = dict(Application.STATUS_CHOICES)
EXTERNAL_TO_INTERNAL = {label: value for value, label in Application.STATUS_CHOICES}
EXTERNAL_STATUSES = list(EXTERNAL_TO_INTERNAL)


def to_internal_status(external_status: str) -> str:
    """Map a display status ("Under Review") to its stored value ("under_review")."""
    try:
        return EXTERNAL_TO_INTERNAL[external_status]
    except (KeyError, TypeError):
        raise InvalidStatusError(
            f"Invalid status. Must be one of: {', '.join(EXTERNAL_STATUSES)}",
            valid_statuses=EXTERNAL_STATUSES,
        )


def to_external_status(internal_status: str) -> str:
    try:
        return INTERNAL_TO_EXTERNAL[internal_status]
    except KeyError:
        raise InvalidStatusError(f"Unknown stored status: {internal_status}")


@dataclass(frozen=True)
class WorkflowConfig:
    # Jobs with a null status predate the status column and still accept applications
    allow_legacy_job_status: bool = True
    # Jobs with a null employer may be managed by any recruiter
    allow_unowned_job_access: bool = True
    # The applying candidate may set the status of their own application
    candidate_can_update_status: bool = True

    @classmethod
    def from_settings(cls):
        conf = getattr(settings, 'HIRING_WORKFLOW', {}) or {}
        return cls(
            allow_legacy_job_status=conf.get('ALLOW_LEGACY_JOB_STATUS', True),
            allow_unowned_job_access=conf.get('ALLOW_UNOWNED_JOB_ACCESS', True),
            candidate_can_update_status=conf.get('CANDIDATE_CAN_UPDATE_STATUS', True),
        )


@dataclass
class ApplicationResult:
    created: bool
    status: str
    application: Application
    job: Job


class ApplicationWorkflow:
    """Creates applications and changes their status under one set of rules."""

    def __init__(self, config: Optional[WorkflowConfig] = None):
        self.config = config or WorkflowConfig.from_settings()

    # Jobs

    def get_job(self, job_id) -> Job:
        try:
            return Job.objects.get(pk=job_id)
        except (Job.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError('Job not found.', code='job_not_found')

    def ensure_job_open(self, job: Job):
        if job.status is None or job.status == '':
            if self.config.allow_legacy_job_status:
                logger.info("Accepting application for legacy job %s with no status", job.id)
                return
            raise JobNotOpenError(job_status=None)
        if job.status != 'open':
            raise JobNotOpenError(
                job_status=job.status,
                detail=f"This job is not accepting applications (status: {job.status}).",
            )

    def can_manage_job(self, job: Job, account) -> bool:
        """True when ``account`` owns ``job``, or the job is unowned and ``account`` is a recruiter."""
        if account is None:
            return False
        if job.employer_id is not None:
            return job.employer_id == account.id
        return self.config.allow_unowned_job_access and account.is_recruiter

    def check_required_answers(self, job: Job, answers: Optional[dict]):
        provided = answers or {}
        missing = []
        for question in job.supplemental_questions:
            if not isinstance(question, dict) or not question.get('required'):
                continue
            qid = question.get('id')
            value = provided.get(qid)
            if not isinstance(value, str) or not value.strip():
                missing.append(qid)
        if missing:
            raise MissingRequiredAnswersError(missing)

    # Applications

    def create_application(self, job_id, candidate, answers=None, resume_url=None, cover_letter=None) -> ApplicationResult:
        """Submit ``candidate``'s application to a job.

        Checks run in order: duplicate (409), job exists (404), job open (403),
        required supplemental answers (400).
        """
        if Application.objects.filter(job_id=job_id, candidate=candidate).exists():
            raise ConflictError('You have already applied to this job.', code='duplicate_application')

        job = self.get_job(job_id)
        self.ensure_job_open(job)
        self.check_required_answers(job, answers)

        if not resume_url:
            resume_url = self._profile_resume_url(candidate)

        try:
            with transaction.atomic():
                application = Application.objects.create(
                    job=job,
                    candidate=candidate,
                    status='applied',
                    resume_url=resume_url or None,
                    cover_letter=cover_letter or None,
                    supplemental_answers=answers or None,
                )
        except IntegrityError:
            # A concurrent request inserted the same pair after the read check
            logger.warning("Duplicate application race for job %s candidate %s", job.id, candidate.id)
            raise ConflictError('You have already applied to this job.', code='duplicate_application')

        logger.info("Application %s created for job %s by %s", application.id, job.id, candidate.id)
        return ApplicationResult(
            created=True,
            status=to_external_status(application.status),
            application=application,
            job=job,
        )

    def _profile_resume_url(self, candidate):
        profile = CandidateProfile.objects.filter(account=candidate).only('resume_url').first()
        return profile.resume_url if profile else None

    def get_application(self, application_id=None, job_id=None, candidate_id=None) -> Application:
        qs = Application.objects.select_related('job', 'candidate')
        try:
            if application_id is not None:
                return qs.get(pk=application_id)
            if job_id is not None and candidate_id is not None:
                return qs.get(job_id=job_id, candidate_id=candidate_id)
        except (Application.DoesNotExist, ValueError, DjangoValidationError):
            pass
        raise NotFoundError('Application not found.', code='application_not_found')

    def can_view_application(self, application: Application, account) -> bool:
        if account is None:
            return False
        return application.candidate_id == account.id or self.can_manage_job(application.job, account)

    def can_update_status(self, application: Application, account) -> bool:
        if account is None:
            return False
        if application.candidate_id == account.id and self.config.candidate_can_update_status:
            return True
        return self.can_manage_job(application.job, account)

    def update_status(self, new_status, acting_account, application_id=None, job_id=None, candidate_id=None) -> Application:
        """Set an application's status from its display name.

        The status is checked before the lookup so an invalid value never
        reaches the database.
        """
        internal = to_internal_status(new_status)
        application = self.get_application(application_id=application_id, job_id=job_id, candidate_id=candidate_id)

        if not self.can_update_status(application, acting_account):
            raise AuthorizationError('You are not allowed to update this application.')

        old_status = application.status
        if old_status == internal:
            return application

        with transaction.atomic():
            application.status = internal
            application.save(update_fields=['status', 'updated_at'])
            ApplicationStatusChange.objects.create(
                application=application,
                old_status=old_status,
                new_status=internal,
                changed_by=acting_account,
            )

        logger.info(
            "Application %s status %s -> %s by %s",
            application.id, old_status, internal, acting_account.id,
        )
        return application
