"""
Task runner - drives a task to completion and reports on the console.

On success the repr of the serialized result is the single line written to
stdout. On failure a diagnostic goes to stderr and the exit status is 1.
The runner is the only place where task outcomes become exit statuses.
"""
import logging
import sys
import traceback
from pprint import pformat

from asgiref.sync import async_to_sync

from apps.core.problem import classify
from apps.core.serializers import serialize
from apps.core.task import drive, settle

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def write_to(stream):
    def write(text):
        stream.write(f"{text}\n")
    return write


def _describe(error: BaseException) -> str:
    return ''.join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()


def report(error: BaseException, stderr=None) -> None:
    """
    Write a diagnostic for `error` to stderr.

    Problems below 500 get their message (and details); everything else gets
    the full traceback. Never raises.
    """
    if stderr is None:
        stderr = sys.stderr
    write = write_to(stderr)
    try:
        problem = classify(error)
        if problem is not None and not problem.is_internal:
            write(problem.message)
            if problem.details is not None:
                write(pformat(problem.details))
        else:
            write(_describe(error))
    except Exception:
        # Last line of defense before exit; fall back to the bare repr.
        logger.exception("[TASK] Failed to format task error")
        try:
            write(repr(error))
        except Exception:
            logger.exception("[TASK] Failed to write task error")


def fault(error: BaseException, stderr=None) -> int:
    report(error, stderr)
    return EXIT_FAILURE


def run(task, *, stdout=None, stderr=None) -> int:
    """
    Drive `task` once and print its outcome.

    Returns the process exit status: 0 on success, 1 on failure.
    """
    if stdout is None:
        stdout = sys.stdout
    outcome = async_to_sync(settle)(drive(task))

    if not outcome.ok:
        logger.info(f"[TASK] Task failed: {outcome.error!r}")
        return fault(outcome.error, stderr)

    try:
        write_to(stdout)(repr(serialize(outcome.value)))
    except Exception as e:
        return fault(e, stderr)
    return EXIT_OK
