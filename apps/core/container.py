"""
Container - the backend resources an admin task runs against.

A container bundles one database handle, the crypto helper and the domain
services bound to that handle. It is created lazily by the first step of a
task chain that needs it and is shared by every dependent step of that
chain; only the step that created it (the owner) closes it, once, after its
own work has settled.

The active container lives in a ContextVar, so each asyncio task sees its
own chain. Steps may also pass the container explicitly.

Usage:
    from apps.core.container import with_container

    @with_container
    async def promote_user(container, email):
        return await container.accounts.promote(email)

    # Reuse the caller's container instead of opening a new one:
    await promote_user(email, container=container)
"""
import functools
import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections
from django.utils.module_loading import import_string

from apps.core import crypto as default_crypto

logger = logging.getLogger(__name__)

_active: ContextVar[Optional['Container']] = ContextVar('task_container', default=None)


class Database:
    """Handle on one Django connection alias."""

    def __init__(self, alias: str = DEFAULT_DB_ALIAS):
        self.alias = alias

    @property
    def connection(self):
        return connections[self.alias]

    def open(self) -> 'Database':
        self.connection.ensure_connection()
        return self

    def close(self) -> None:
        self.connection.close()

    def __repr__(self):
        return f"<Database alias={self.alias!r}>"


async def connect(alias: str = DEFAULT_DB_ALIAS) -> Database:
    # Run on the thread the async ORM uses so open/close hit its connection.
    return await sync_to_async(Database(alias).open)()


@dataclass
class Container:
    db: Any
    crypto: Any
    audit: Any
    accounts: Any

    async def close(self) -> None:
        await sync_to_async(self.db.close)()


def assemble(db, crypto=default_crypto) -> Container:
    """Bind the domain services to a database handle."""
    from apps.governance.audit_service import AuditService
    from apps.identity.services import AccountService

    return Container(
        db=db,
        crypto=crypto,
        audit=AuditService(db),
        accounts=AccountService(db, crypto),
    )


async def build_container() -> Container:
    """Default factory: open the task database and assemble services on it."""
    db = await connect(settings.TASK_DATABASE_ALIAS)
    return assemble(db)


def get_container_factory():
    return import_string(settings.TASK_CONTAINER_FACTORY)


def current_container() -> Optional[Container]:
    return _active.get()


class ContainerLease:
    """
    A container plus whether this lease owns (and must close) it.

    Usable as an async context manager; leaving the block releases the
    lease without touching the exception being propagated.
    """

    def __init__(self, container: Container, owner: bool, token=None):
        self.container = container
        self.owner = owner
        self._token = token
        self._released = False

    async def release(self) -> None:
        if not self.owner or self._released:
            return
        self._released = True
        _active.reset(self._token)
        try:
            await self.container.close()
            logger.debug("[TASK] Container closed")
        except Exception:
            logger.exception("[TASK] Failed to close task container")

    async def __aenter__(self) -> Container:
        return self.container

    async def __aexit__(self, exc_type, exc, tb):
        await self.release()
        return False


async def acquire(container: Optional[Container] = None) -> ContainerLease:
    """
    Get the container for the current step.

    An explicit or already active container is shared without ownership.
    Otherwise a new one is built and registered; a failed build registers
    nothing and propagates.
    """
    if container is None:
        container = _active.get()
    if container is not None:
        return ContainerLease(container, owner=False)

    container = await get_container_factory()()
    token = _active.set(container)
    logger.debug("[TASK] Container opened")
    return ContainerLease(container, owner=True, token=token)


def with_container(taskdef):
    """
    Decorate `async def taskdef(container, *args, **kwargs)`.

    The returned coroutine function keeps the caller-facing signature and
    accepts an optional `container=` keyword for explicit handle passing.
    """
    @functools.wraps(taskdef)
    async def step(*args, container: Optional[Container] = None, **kwargs):
        async with await acquire(container) as active:
            return await taskdef(active, *args, **kwargs)

    return step
