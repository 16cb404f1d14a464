"""
Job posting endpoints and recruiter profile.
"""
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from hiring.models import Job
from hiring.tests.fixtures import (
    ApplicationFactory,
    CandidateProfileFactory,
    JobFactory,
    RecruiterAccountFactory,
    RecruiterProfileFactory,
    UserAccountFactory,
)


def _job_payload(**overrides):
    payload = {
        'title': 'Backend Engineer',
        'company': 'Acme',
        'location': 'Remote',
        'description': 'Build APIs',
        'status': 'open',
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestJobList:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse('jobs-list-create')

    def test_public_list_shows_open_jobs(self):
        open_job = JobFactory(title='Open role')
        legacy_job = JobFactory(title='Legacy role', status=None)
        JobFactory(title='Closed role', status='closed')
        JobFactory(title='Draft role', status='draft')

        response = self.client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        ids = {job['id'] for job in response.data}
        assert ids == {str(open_job.id), str(legacy_job.id)}

    def test_expired_jobs_hidden(self):
        JobFactory(deadline=timezone.now() - timedelta(days=1))
        live = JobFactory(deadline=timezone.now() + timedelta(days=10))
        response = self.client.get(self.url)
        assert [job['id'] for job in response.data] == [str(live.id)]
        assert response.data[0]['deadline_status'] == 'normal'

    def test_deadline_filter_and_sort(self):
        now = timezone.now()
        later = JobFactory(deadline=now + timedelta(days=5))
        sooner = JobFactory(deadline=now + timedelta(days=1))
        JobFactory(deadline=now + timedelta(days=20))
        JobFactory(deadline=None)

        response = self.client.get(self.url, {'deadline': 'week', 'sort': 'deadline'})

        assert [job['id'] for job in response.data] == [str(sooner.id), str(later.id)]
        assert response.data[0]['deadline_status'] == 'urgent'

    def test_invalid_deadline_filter(self):
        response = self.client.get(self.url, {'deadline': 'someday'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'deadline' in response.data['error']['details']

    def test_search(self):
        match = JobFactory(title='Data Scientist', company='Initech')
        JobFactory(title='Chef', company='Bistro', location='Paris')
        response = self.client.get(self.url, {'q': 'data'})
        assert [job['id'] for job in response.data] == [str(match.id)]


@pytest.mark.django_db
class TestJobCreateAndEdit:
    def setup_method(self):
        self.client = APIClient()
        self.recruiter = RecruiterAccountFactory()
        self.url = reverse('jobs-list-create')

    def test_recruiter_creates_job(self):
        self.client.force_authenticate(user=self.recruiter.user)
        payload = _job_payload(supplementalQuestions=[
            {'id': 'q1', 'question': 'Why us?', 'type': 'text', 'required': True},
        ])
        response = self.client.post(self.url, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['employer_id'] == str(self.recruiter.id)
        assert response.data['supplemental_questions'][0]['id'] == 'q1'
        job = Job.objects.get(pk=response.data['id'])
        assert job.requirements['supplementalQuestions'][0]['required'] is True

    def test_anonymous_cannot_create(self):
        response = self.client.post(self.url, _job_payload(), format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_candidate_cannot_create(self):
        self.client.force_authenticate(user=UserAccountFactory().user)
        response = self.client.post(self.url, _job_payload(), format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error']['message'] == 'Only recruiters can perform this action.'

    def test_location_required(self):
        self.client.force_authenticate(user=self.recruiter.user)
        response = self.client.post(self.url, _job_payload(location=''), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'location' in response.data['error']['details']

    def test_unknown_status_rejected(self):
        self.client.force_authenticate(user=self.recruiter.user)
        response = self.client.post(self.url, _job_payload(status='paused'), format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'status' in response.data['error']['details']

    def test_select_question_needs_options(self):
        self.client.force_authenticate(user=self.recruiter.user)
        payload = _job_payload(requirements={'supplementalQuestions': [
            {'id': 'q1', 'question': 'Shift?', 'type': 'select'},
        ]})
        response = self.client.post(self.url, payload, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'requirements' in response.data['error']['details']

    def test_owner_closes_job(self):
        job = JobFactory(employer=self.recruiter)
        self.client.force_authenticate(user=self.recruiter.user)
        response = self.client.patch(reverse('job-detail', args=[job.id]), {'status': 'closed'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        job.refresh_from_db()
        assert job.status == 'closed'

    def test_other_recruiter_cannot_edit(self):
        job = JobFactory(employer=self.recruiter)
        self.client.force_authenticate(user=RecruiterAccountFactory().user)
        response = self.client.patch(reverse('job-detail', args=[job.id]), {'title': 'Hijacked'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_public_detail(self):
        job = JobFactory(requirements={'supplementalQuestions': [
            {'id': 'q1', 'question': 'Why?', 'type': 'text', 'required': False},
        ]})
        response = self.client.get(reverse('job-detail', args=[job.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['supplemental_questions'][0]['question'] == 'Why?'
        assert response.data['deadline_text'] == 'No deadline'

    def test_recruiter_jobs_counts_applications(self):
        job = JobFactory(employer=self.recruiter)
        ApplicationFactory(job=job)
        ApplicationFactory(job=job)
        JobFactory()
        self.client.force_authenticate(user=self.recruiter.user)
        response = self.client.get(reverse('recruiter-jobs'))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['application_count'] == 2


@pytest.mark.django_db
class TestJobApplications:
    def setup_method(self):
        self.client = APIClient()
        self.owner = RecruiterAccountFactory()
        self.job = JobFactory(employer=self.owner)
        self.url = reverse('job-applications', args=[self.job.id])

    def test_owner_sees_applicants(self):
        profile = CandidateProfileFactory()
        ApplicationFactory(job=self.job, candidate=profile.account)
        self.client.force_authenticate(user=self.owner.user)

        response = self.client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['job']['id'] == str(self.job.id)
        applicant = response.data['applications'][0]
        assert applicant['candidate']['email'] == profile.email
        assert applicant['status'] == 'Applied'

    def test_non_owner_forbidden(self):
        self.client.force_authenticate(user=RecruiterAccountFactory().user)
        response = self.client.get(self.url)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestRecruiterProfile:
    def setup_method(self):
        self.client = APIClient()
        self.account = UserAccountFactory(role='')
        self.client.force_authenticate(user=self.account.user)
        self.url = reverse('recruiter-profile')

    def test_create_sets_role(self):
        response = self.client.post(self.url, {
            'name': 'Rita Recruiter',
            'email': 'rita@acme.example.com',
            'company_name': 'Acme',
            'job_title': 'Talent Partner',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        self.account.refresh_from_db()
        assert self.account.role == 'recruiter'

    def test_create_twice_conflicts(self):
        RecruiterProfileFactory(account=self.account)
        response = self.client.post(self.url, {
            'name': 'Rita', 'email': 'rita@acme.example.com', 'company_name': 'Acme', 'job_title': 'TP',
        }, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error']['code'] == 'profile_exists'

    def test_invalid_phone(self):
        RecruiterProfileFactory(account=self.account)
        response = self.client.put(self.url, {'phone': 'call me'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['messages'] == ['Phone: Invalid phone number format.']
