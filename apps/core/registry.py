"""
Registry of named admin tasks.

Apps declare their tasks in an `admin_tasks` module; CoreConfig.ready()
imports those modules so the decorators below run at startup.

Usage:
    from apps.core.registry import register_task

    @register_task("audit.purge", audit=AuditAction.PURGE_AUDIT_LOGS)
    @with_container
    async def purge_audit_logs(container, days=None):
        ...
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from apps.core.task import Deferred

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredTask:
    name: str
    func: Callable
    audit: Optional[str] = None

    @property
    def description(self) -> str:
        doc = (self.func.__doc__ or '').strip()
        return doc.splitlines()[0] if doc else ''

    def build(self, **payload) -> Deferred:
        return Deferred(lambda: self.func(**payload))


# Task registry - maps task names to registered tasks
TASK_REGISTRY: Dict[str, RegisteredTask] = {}


def register_task(name: str, audit: Optional[str] = None):
    """Decorator to register an admin task under `name`."""
    def decorator(func):
        if name in TASK_REGISTRY and TASK_REGISTRY[name].func is not func:
            raise ValueError(f"Admin task already registered: {name}")
        TASK_REGISTRY[name] = RegisteredTask(name=name, func=func, audit=audit)
        logger.debug(f"[REGISTRY] Registered admin task {name}")
        return func
    return decorator


def get_task(name: str) -> RegisteredTask:
    try:
        return TASK_REGISTRY[name]
    except KeyError:
        raise LookupError(f"No admin task registered as: {name}") from None


def registered_tasks() -> List[RegisteredTask]:
    return sorted(TASK_REGISTRY.values(), key=lambda entry: entry.name)
