"""
Task - a single-shot unit of asynchronous work for admin operations.

A task is either Deferred (a zero-argument producer, called only when the
task is driven) or InFlight (an awaitable that already exists, usually a
coroutine). Every entry point that accepts a task goes through resolve(),
so the two forms are handled in exactly one place.

Usage:
    from apps.core.task import Deferred, noop, run_sync

    run(Deferred(lambda: purge_audit_logs(days=30)))
    run(run_sync(call_command, 'clearsessions'))
"""
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from asgiref.sync import sync_to_async


@dataclass(frozen=True)
class Deferred:
    producer: Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class InFlight:
    awaitable: Awaitable[Any]


Task = Union[Deferred, InFlight]


def as_task(obj) -> Task:
    if isinstance(obj, (Deferred, InFlight)):
        return obj
    if inspect.isawaitable(obj):
        return InFlight(obj)
    raise TypeError(
        f"Expected a Deferred, InFlight or awaitable, got {type(obj).__name__}. "
        "Wrap task producers in Deferred(...)."
    )


def resolve(task) -> Awaitable[Any]:
    """Turn any task into the awaitable that drives it."""
    task = as_task(task)
    if isinstance(task, InFlight):
        return task.awaitable

    awaitable = task.producer()
    if not inspect.isawaitable(awaitable):
        raise TypeError(
            f"Task producer {task.producer!r} returned {type(awaitable).__name__}, "
            "not an awaitable"
        )
    return awaitable


async def drive(task):
    """Await a task; errors raised by a Deferred producer surface here too."""
    return await resolve(task)


@dataclass(frozen=True)
class Outcome:
    """Settled result of a task: a value on success, an error on failure."""
    value: Any = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value) -> 'Outcome':
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> 'Outcome':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.value


async def settle(awaitable: Awaitable[Any]) -> Outcome:
    try:
        return Outcome.success(await awaitable)
    except Exception as e:
        return Outcome.failure(e)


async def _none():
    return None


def noop() -> InFlight:
    """A task that resolves to None."""
    return InFlight(_none())


def run_sync(func: Callable[..., Any], *args, **kwargs) -> Deferred:
    """Wrap a synchronous callable as a task run through sync_to_async."""
    return Deferred(lambda: sync_to_async(func)(*args, **kwargs))
