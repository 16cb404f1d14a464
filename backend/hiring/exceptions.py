"""
Domain errors and the DRF exception handler that renders them.

Every error leaves the API as:

    {
        "error": {
            "code": "error_code",
            "message": "User-friendly error message",
            "messages": ["Field: message", ...],
            "details": {...}
        }
    }

plus any extra keys an exception carries (``job_status``,
``missing_required_questions``).
"""
import logging

from django.db import DatabaseError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class HiringError(drf_exceptions.APIException):
    """Base class for domain errors; ``extra`` is merged into the error body."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'bad_request'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail=detail, code=code)
        if code:
            self.default_code = code
        self.extra = extra


class InputValidationError(drf_exceptions.ValidationError):
    """Schema violations keyed by field path (``experience.1.company``)."""
    default_code = 'validation_error'

    def __init__(self, field_errors):
        self.field_errors = {str(k): [str(m) for m in v] for k, v in field_errors.items()}
        self.extra = {}
        super().__init__(detail=self.field_errors, code='validation_error')


class InvalidStatusError(HiringError):
    default_detail = 'Invalid application status.'
    default_code = 'invalid_status'


class AuthorizationError(HiringError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class NotFoundError(HiringError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class ConflictError(HiringError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'conflict'


class BusinessRuleError(HiringError):
    default_detail = 'Request violates a business rule.'
    default_code = 'business_rule_violation'


class JobNotOpenError(BusinessRuleError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'This job is not accepting applications.'
    default_code = 'job_not_open'

    def __init__(self, job_status, detail=None):
        super().__init__(detail=detail, job_status=job_status)


class MissingRequiredAnswersError(BusinessRuleError):
    default_detail = 'Please answer all required supplemental questions.'
    default_code = 'missing_required_answers'

    def __init__(self, question_ids, detail=None):
        super().__init__(detail=detail, missing_required_questions=list(question_ids))


class StorageError(HiringError):
    """The persistence collaborator failed; the cause is logged, not returned."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'A storage error occurred. Please try again later.'
    default_code = 'storage_error'


def _collect_messages_from_response_data(response_data):
    """Build a list of human-readable messages from DRF error response data."""
    messages = []
    if isinstance(response_data, dict):
        # DRF returns {'field': ['msg']} or {'detail': 'msg'}
        if 'detail' in response_data and not isinstance(response_data.get('detail'), (dict, list)):
            messages.append(str(response_data['detail']))
        for field, value in response_data.items():
            if field == 'detail':
                continue
            if isinstance(value, (list, tuple)) and value:
                msg = str(value[0])
            else:
                msg = str(value)
            if field == 'non_field_errors':
                messages.append(msg)
            else:
                field_label = str(field).replace('_', ' ').capitalize()
                messages.append(f"{field_label}: {msg}")
    elif isinstance(response_data, (list, tuple)):
        messages.extend(str(v) for v in response_data if v)
    elif response_data:
        messages.append(str(response_data))
    return messages


def _details_from_response_data(response_data):
    details = {}
    if isinstance(response_data, dict):
        for field, errors in response_data.items():
            if field == 'detail':
                continue
            if isinstance(errors, list):
                details[field] = [str(e) for e in errors] or ['Invalid value']
            else:
                details[field] = str(errors)
    return details


def custom_exception_handler(exc, context):
    """Render every API error in the shared ``{'error': {...}}`` envelope."""
    if isinstance(exc, DatabaseError):
        logger.error("Database error in %s: %s", _view_name(context), exc, exc_info=True)
        exc = StorageError()

    response = exception_handler(exc, context)

    if response is not None:
        # Auth failures always return 401 so clients can re-auth
        if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
            response.status_code = status.HTTP_401_UNAUTHORIZED

        messages = _collect_messages_from_response_data(response.data)
        body = {
            'code': get_error_code(exc, response.status_code),
            'message': messages[0] if messages else get_error_message(exc, response.data),
        }
        if messages:
            body['messages'] = messages
        details = _details_from_response_data(response.data)
        if details:
            body['details'] = details
        body.update(getattr(exc, 'extra', None) or {})

        if isinstance(exc, AuthorizationError):
            logger.warning("Authorization denied in %s: %s", _view_name(context), exc.detail)

        response.data = {'error': body}
        return response

    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return Response(
        {
            'error': {
                'code': 'internal_server_error',
                'message': 'An unexpected error occurred. Please try again later.',
            }
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _view_name(context):
    view = (context or {}).get('view')
    return type(view).__name__ if view is not None else 'unknown view'


def get_error_code(exc, status_code):
    """Generate error code from exception."""
    if hasattr(exc, 'default_code'):
        return exc.default_code

    code_map = {
        400: 'bad_request',
        401: 'unauthorized',
        403: 'forbidden',
        404: 'not_found',
        405: 'method_not_allowed',
        409: 'conflict',
        422: 'validation_error',
        429: 'too_many_requests',
        500: 'internal_server_error',
    }
    return code_map.get(status_code, 'error')


def get_error_message(exc, response_data):
    """Extract user-friendly error message."""
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, dict):
        for value in detail.values():
            if isinstance(value, list) and value:
                return str(value[0])
            return str(value)
    if detail is not None:
        return str(detail)
    if isinstance(response_data, dict) and 'detail' in response_data:
        return str(response_data['detail'])
    return 'An error occurred'
