"""Shared helpers: audit logging, reference numbers, date parsing"""
import logging
import uuid
from datetime import datetime, date

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, stock_reserve, status_change, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        object_reference: Reference identifier (e.g., rental number)
    """
    if not action or not model_name or not object_id:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    return AuditLog.objects.create(
        user=audit_user if audit_user and audit_user.is_authenticated else None,
        action=action,
        model_name=model_name,
        object_id=str(object_id),
        object_name=object_name,
        object_reference=object_reference,
        changes=changes or {},
        ip_address=get_client_ip(request) if request else None,
    )


def generate_reference(prefix, model, field='id', length=8):
    """Generate an unused reference like KSL_1A2B3C4D for the given model"""
    while True:
        reference = f"{prefix}{uuid.uuid4().hex[:length].upper()}"
        if not model.objects.filter(**{field: reference}).exists():
            return reference


def parse_date(value, field_name='date'):
    """Parse YYYY-MM-DD (or an ISO datetime) into a date, raising ValueError with a readable message"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError(f'{field_name} is required.')
    text = str(value).strip()
    try:
        return datetime.strptime(text[:10], '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f'Invalid {field_name}: {value}. Expected YYYY-MM-DD.')
