"""
Resume upload, replacement and deletion.
"""
from unittest.mock import patch

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from hiring.models import CandidateProfile
from hiring.storage_utils import safe_file_name, validate_resume_file
from hiring.tests.fixtures import CandidateProfileFactory, UserAccountFactory

PDF = 'application/pdf'


def _pdf(name='resume.pdf', size=1024, content_type=PDF):
    return SimpleUploadedFile(name, b'%PDF-1.4\n' + b'0' * size, content_type=content_type)


@pytest.mark.unit
class TestValidateResumeFile:
    def test_accepts_pdf(self):
        assert validate_resume_file(_pdf()) == (True, None)

    def test_rejects_type(self):
        ok, message = validate_resume_file(_pdf('resume.png', content_type='image/png'))
        assert ok is False
        assert message == 'Invalid file type. Allowed types: PDF, DOC, DOCX'

    def test_rejects_size(self, settings):
        settings.RESUME_MAX_BYTES = 512
        ok, message = validate_resume_file(_pdf(size=1024))
        assert ok is False
        assert 'File size exceeds' in message

    def test_default_limit_message(self):
        ok, message = validate_resume_file(_pdf(size=5 * 1024 * 1024 + 1))
        assert ok is False
        assert message == 'File size exceeds 5MB limit'

    def test_safe_file_name(self):
        assert safe_file_name('../../my resume (final).pdf') == 'my_resume__final_.pdf'


@pytest.mark.django_db
class TestResumeEndpoint:
    @pytest.fixture(autouse=True)
    def _media(self, settings, tmp_path):
        settings.MEDIA_ROOT = str(tmp_path)

    def setup_method(self):
        self.client = APIClient()
        self.account = UserAccountFactory()
        self.client.force_authenticate(user=self.account.user)
        self.url = reverse('resume')

    def test_requires_profile(self):
        response = self.client.post(self.url, {'resume': _pdf()}, format='multipart')
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error']['code'] == 'profile_not_found'

    def test_upload_stores_file(self):
        profile = CandidateProfileFactory(account=self.account, resume_url=None)

        response = self.client.post(self.url, {'resume': _pdf('My CV.pdf')}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['resume']['original_name'] == 'My CV.pdf'
        assert response.data['resume']['mime_type'] == PDF
        profile.refresh_from_db()
        assert profile.resume_path.startswith(f'resumes/{self.account.id}/')
        assert profile.resume_path.endswith('My_CV.pdf')
        assert profile.resume_url.startswith('http://testserver/media/resumes/')
        assert default_storage.exists(profile.resume_path)

    def test_replacing_removes_previous_file(self):
        profile = CandidateProfileFactory(account=self.account)
        self.client.post(self.url, {'resume': _pdf('first.pdf')}, format='multipart')
        profile.refresh_from_db()
        first_path = profile.resume_path

        self.client.post(self.url, {'resume': _pdf('second.pdf')}, format='multipart')
        profile.refresh_from_db()

        assert profile.resume_path != first_path
        assert not default_storage.exists(first_path)
        assert default_storage.exists(profile.resume_path)

    def test_failed_save_removes_new_file(self):
        profile = CandidateProfileFactory(account=self.account, resume_url=None, resume_path=None)

        with patch.object(CandidateProfile, 'save', side_effect=DatabaseError('disk full')):
            response = self.client.post(self.url, {'resume': _pdf()}, format='multipart')

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error']['code'] == 'storage_error'
        profile.refresh_from_db()
        assert profile.resume_path is None
        folder = f'resumes/{self.account.id}'
        assert not default_storage.exists(folder) or default_storage.listdir(folder)[1] == []

    def test_invalid_type_rejected(self):
        CandidateProfileFactory(account=self.account)
        upload = _pdf('photo.png', content_type='image/png')
        response = self.client.post(self.url, {'resume': upload}, format='multipart')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['code'] == 'invalid_file'

    def test_missing_file(self):
        CandidateProfileFactory(account=self.account)
        response = self.client.post(self.url, {}, format='multipart')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'resume' in response.data['error']['details']

    def test_delete_clears_fields(self):
        profile = CandidateProfileFactory(account=self.account)
        self.client.post(self.url, {'resume': _pdf()}, format='multipart')
        profile.refresh_from_db()
        path = profile.resume_path

        response = self.client.delete(self.url)

        assert response.status_code == status.HTTP_200_OK
        profile.refresh_from_db()
        assert profile.resume_url is None
        assert profile.resume_path is None
        assert profile.resume_size is None
        assert not default_storage.exists(path)

    def test_delete_without_resume(self):
        CandidateProfileFactory(account=self.account, resume_url=None)
        response = self.client.delete(self.url)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error']['code'] == 'no_resume'
