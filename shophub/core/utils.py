"""Utility functions shared by the API apps: audit logging and pagination"""
import logging

from django.core.paginator import Paginator

from .models import AuditLog

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100


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
                     changes=None, user=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (order_create, payment_status, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_reference: Reference identifier (e.g., order number)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_reference=object_reference,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def paginate(request, queryset, default_limit=20):
    """
    Slice a queryset using the ``page`` and ``limit`` query params.

    Returns a tuple of (page items, pagination dict). Invalid or
    non-positive values fall back to the defaults, and limit is capped
    at MAX_PAGE_LIMIT. Pages past the end are empty rather than an error.
    """
    page = _positive_int(request.query_params.get('page'), 1)
    limit = min(_positive_int(request.query_params.get('limit'), default_limit), MAX_PAGE_LIMIT)

    paginator = Paginator(queryset, limit)
    total = paginator.count
    if page > paginator.num_pages:
        items = []
    else:
        items = list(paginator.page(page).object_list)

    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'total_pages': paginator.num_pages if total else 0,
    }
