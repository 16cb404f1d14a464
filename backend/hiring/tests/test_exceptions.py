"""
Error envelope produced by the custom exception handler.
"""
import pytest
from django.db import OperationalError
from rest_framework import exceptions as drf_exceptions

from hiring.exceptions import (
    AuthorizationError,
    ConflictError,
    InputValidationError,
    JobNotOpenError,
    MissingRequiredAnswersError,
    NotFoundError,
    StorageError,
    custom_exception_handler,
)


def _handle(exc):
    return custom_exception_handler(exc, {'view': None})


@pytest.mark.unit
class TestExceptionHandler:
    def test_domain_error_code_and_message(self):
        response = _handle(ConflictError('You have already applied to this job.', code='duplicate_application'))
        assert response.status_code == 409
        assert response.data == {
            'error': {
                'code': 'duplicate_application',
                'message': 'You have already applied to this job.',
                'messages': ['You have already applied to this job.'],
            }
        }

    def test_default_detail(self):
        response = _handle(NotFoundError())
        assert response.status_code == 404
        assert response.data['error']['code'] == 'not_found'
        assert response.data['error']['message'] == 'Resource not found.'

    def test_extra_fields_are_merged(self):
        response = _handle(JobNotOpenError(job_status='closed'))
        assert response.status_code == 403
        assert response.data['error']['job_status'] == 'closed'

        response = _handle(MissingRequiredAnswersError(['q1', 'q3']))
        assert response.status_code == 400
        assert response.data['error']['missing_required_questions'] == ['q1', 'q3']

    def test_validation_details_keep_every_message(self):
        exc = InputValidationError({
            'email': ['Enter a valid email address.'],
            'experience.0.company': ['This field is required.', 'Second problem.'],
        })
        response = _handle(exc)
        error = response.data['error']
        assert response.status_code == 400
        assert error['code'] == 'validation_error'
        assert error['details']['experience.0.company'] == ['This field is required.', 'Second problem.']
        assert 'Email: Enter a valid email address.' in error['messages']

    def test_not_authenticated_is_401(self):
        response = _handle(drf_exceptions.NotAuthenticated())
        assert response.status_code == 401
        assert response.data['error']['code'] == 'not_authenticated'

    def test_authorization_error(self):
        response = _handle(AuthorizationError())
        assert response.status_code == 403
        assert response.data['error']['code'] == 'forbidden'

    def test_database_error_becomes_storage_error(self):
        response = _handle(OperationalError('connection refused'))
        assert response.status_code == 500
        assert response.data['error']['code'] == 'storage_error'
        assert 'connection refused' not in str(response.data)

    def test_storage_error_hides_cause(self):
        response = _handle(StorageError())
        assert response.data['error']['message'] == StorageError.default_detail

    def test_unexpected_exception(self):
        response = _handle(RuntimeError('boom'))
        assert response.status_code == 500
        assert response.data == {
            'error': {
                'code': 'internal_server_error',
                'message': 'An unexpected error occurred. Please try again later.',
            }
        }
