from celery import shared_task
import io
import logging

from apps.core.auditing import auditing
from apps.core.registry import get_task
from apps.core.runner import run

logger = logging.getLogger(__name__)


@shared_task
def run_registered_task(task_name, payload=None):
    """
    Run a registered admin task from a worker or beat schedule.

    Returns the runner's exit status; output is captured into the worker log.
    """
    entry = get_task(task_name)
    stdout, stderr = io.StringIO(), io.StringIO()

    task = entry.build(**(payload or {}))
    if entry.audit:
        task = auditing(entry.audit, task, stderr=stderr)

    logger.info(f"[CELERY] Running admin task {task_name}")
    exit_code = run(task, stdout=stdout, stderr=stderr)

    if exit_code:
        logger.error(f"[CELERY] Admin task {task_name} failed:\n{stderr.getvalue().rstrip()}")
    else:
        logger.info(f"[CELERY] Admin task {task_name} completed: {stdout.getvalue().rstrip()}")
    return exit_code
