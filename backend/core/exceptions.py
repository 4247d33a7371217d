"""
Error types shared by the store layer and the API views.

The store raises ``StoreError`` tagged with a ``StoreErrorKind``; resource
handlers translate those into the API exceptions below, and
``api_exception_handler`` renders every API error as ``{"message": ...}``.
"""
import enum
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('backend.core')


class StoreErrorKind(enum.Enum):
    NOT_FOUND = 'not_found'
    UNIQUE_VIOLATION = 'unique_violation'
    FOREIGN_KEY_VIOLATION = 'foreign_key_violation'
    OTHER = 'other'


class StoreError(Exception):
    """Failure reported by the persistence gateway"""

    def __init__(self, kind, detail='', entity=None):
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.entity = entity

    def __repr__(self):
        return f"StoreError(kind={self.kind.name}, entity={self.entity!r}, detail={self.detail!r})"


class ValidationFailed(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'invalid'


class ResourceNotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


class ResourceConflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict.'
    default_code = 'conflict'


class InternalError(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'
    default_code = 'error'


def error_message(detail):
    """Flatten a DRF error detail (str, list or dict) into one line of text"""
    if isinstance(detail, dict):
        for field, errors in detail.items():
            text = error_message(errors)
            if field in ('non_field_errors', 'detail'):
                return text
            return f"{field}: {text}"
        return ''
    if isinstance(detail, (list, tuple)):
        return error_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF exception handler producing ``{"message": ...}`` bodies.

    Exceptions DRF does not know about are logged and turned into a generic 500
    so that no traceback text leaks into the response.
    """
    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {type(view).__name__ if view else 'unknown view'}: {str(exc)}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            {'message': InternalError.default_detail},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    response.data = {'message': error_message(response.data)}
    return response
