"""
Audit trail service.

AuditService is bound to one task database handle and is reached through the
task container as `container.audit`. Unlike request-time logging, log()
raises on failure: the audit wrapper decides how a failed append is reported.

Usage:
    await container.audit.log(None, AuditAction.CREATE_USER, None, {"success": True})
"""
import logging
from datetime import datetime
from typing import Optional

from .models import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """Action names shared by the task registry and the audit trail."""
    # ── Accounts ──────────────────────────────────────────────────────
    CREATE_USER = "account.create"
    PROMOTE_USER = "account.promote"
    SET_USER_PASSWORD = "account.set_password"

    # ── Maintenance ───────────────────────────────────────────────────
    PURGE_AUDIT_LOGS = "audit.purge"


def _target_fields(target) -> dict:
    if target is None:
        return {'target_type': '', 'target_id': ''}
    return {
        'target_type': type(target).__name__,
        'target_id': str(getattr(target, 'pk', target)),
    }


class AuditService:
    def __init__(self, db):
        self.db = db

    @property
    def objects(self):
        return AuditLog.objects.using(self.db.alias)

    async def log(self, actor, action: str, target, details: Optional[dict] = None) -> AuditLog:
        """Append one audit record; errors propagate to the caller."""
        entry = await self.objects.acreate(
            actor=actor,
            action=action,
            details=details or {},
            **_target_fields(target),
        )
        logger.debug(f"[AUDIT] Logged {action} ({entry.id})")
        return entry

    async def purge(self, older_than: datetime) -> int:
        """Delete audit records logged before `older_than`; returns the count."""
        deleted, _ = await self.objects.filter(logged_at__lt=older_than).adelete()
        logger.info(f"[AUDIT] Purged {deleted} audit logs older than {older_than.isoformat()}")
        return deleted
