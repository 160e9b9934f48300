"""
Domain errors and the DRF exception handler.

Raising one of these inside ``transaction.atomic()`` rolls the transaction
back; the handler renders it in the same ``{'error': ...}`` shape the views
return for inline validation failures.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class KasalError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'invalid'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail, code)
        self.extra = extra


class BusinessRuleViolation(KasalError):
    default_code = 'business_rule'


class StockConflict(KasalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient stock.'
    default_code = 'insufficient_stock'


class AvailabilityConflict(KasalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Some items are not available for the selected dates.'
    default_code = 'unavailable'

    def __init__(self, conflicting_items, detail=None):
        super().__init__(detail, conflicting_items=conflicting_items)


class DuplicateName(KasalError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'An entry with this name already exists.'
    default_code = 'duplicate'


def api_exception_handler(exc, context):
    """Render API errors as {'error': message, ...}"""
    response = exception_handler(exc, context)
    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
        return None

    if isinstance(exc, KasalError):
        response.data = {'error': str(exc.detail), **exc.extra}
        return response

    data = response.data
    if isinstance(data, dict) and 'detail' in data and len(data) == 1:
        response.data = {'error': str(data['detail'])}
    elif isinstance(data, dict) and 'error' not in data:
        response.data = {'error': 'Validation failed.', 'details': data}
    elif isinstance(data, list):
        response.data = {'error': ' '.join(str(item) for item in data)}

    if response.status_code >= 500:
        logger.error(f"API error {response.status_code}: {exc}")
    return response
