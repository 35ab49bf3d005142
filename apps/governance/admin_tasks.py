from datetime import timedelta
from django.conf import settings
from django.utils import timezone

from apps.core.container import with_container
from apps.core.problem import Problem
from apps.core.registry import register_task
from .audit_service import AuditAction


@register_task(AuditAction.PURGE_AUDIT_LOGS, audit=AuditAction.PURGE_AUDIT_LOGS)
@with_container
async def purge_audit_logs(container, days=None):
    """Delete audit logs older than `days` (default AUDIT_LOG_RETENTION_DAYS)."""
    if days is None:
        days = settings.AUDIT_LOG_RETENTION_DAYS
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise Problem(400, f"Invalid number of days: {days!r}", details={'days': days})
    if days < 0:
        raise Problem(400, "Number of days must not be negative", details={'days': days})

    cutoff = timezone.now() - timedelta(days=days)
    deleted = await container.audit.purge(cutoff)
    return {'deleted': deleted, 'older_than': cutoff}
