"""
Audit-logging wrapper for admin tasks.

auditing() settles the wrapped task, then commits one audit record describing
the outcome, then hands back the original outcome. The commit can fail on its
own; that failure is reported on stderr and otherwise ignored, so a broken
audit trail never turns a success into a failure or hides the real error.

Usage:
    from apps.core.auditing import auditing
    from apps.core.runner import run
    from apps.core.task import Deferred

    run(auditing(AuditAction.PURGE_AUDIT_LOGS, Deferred(lambda: purge(days=30))))
"""
import logging
import sys
from collections.abc import Mapping
from typing import Any, Optional

from asgiref.sync import sync_to_async

from apps.core import problem
from apps.core.container import Container, with_container
from apps.core.runner import report, write_to
from apps.core.serializers import serialize
from apps.core.task import Outcome, drive, settle

logger = logging.getLogger(__name__)


@with_container
async def audit_log(container, action: str, success: bool, details: Optional[Any] = None):
    payload = {'success': success}
    if isinstance(details, Mapping):
        payload.update(details)
    elif details is not None:
        payload['result'] = details
    return await container.audit.log(None, action, None, payload)


def _describe(outcome: Outcome):
    if outcome.ok:
        return serialize(outcome.value)
    return problem.serializable(outcome.error)


async def _commit(action: str, outcome: Outcome, container: Optional[Container]):
    # Results may be models or querysets that still have to hit the database
    details = await sync_to_async(_describe)(outcome)
    return await audit_log(action, outcome.ok, details, container=container)


async def auditing(action: str, task, *, container: Optional[Container] = None, stderr=None):
    """
    Run `task` and record its outcome under `action`.

    Resolves or raises exactly as the unaudited task would.
    """
    if stderr is None:
        stderr = sys.stderr
    outcome = await settle(drive(task))

    commit = await settle(_commit(action, outcome, container))
    if not commit.ok:
        kind = 'success' if outcome.ok else 'failure'
        logger.warning(f"[AUDIT] Could not record {action} ({kind}): {commit.error!r}")
        write_to(stderr)(f"Failed to audit-log task {kind} message!")
        report(commit.error, stderr)

    return outcome.unwrap()
