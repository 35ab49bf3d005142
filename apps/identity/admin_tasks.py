from apps.core.container import with_container
from apps.core.registry import register_task
from apps.governance.audit_service import AuditAction


@register_task(AuditAction.CREATE_USER, audit=AuditAction.CREATE_USER)
@with_container
async def create_user(container, email, password):
    """Create a user account with the given password."""
    return await container.accounts.create(email, password)


@register_task(AuditAction.PROMOTE_USER, audit=AuditAction.PROMOTE_USER)
@with_container
async def promote_user(container, email):
    """Grant an existing account administrator rights."""
    return await container.accounts.promote(email)


@register_task(AuditAction.SET_USER_PASSWORD, audit=AuditAction.SET_USER_PASSWORD)
@with_container
async def set_user_password(container, email, password):
    """Replace the password of an existing account."""
    return await container.accounts.set_password(email, password)
