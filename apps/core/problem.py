"""
Problem - user-facing errors raised by domain code and admin tasks.

A problem carries an HTTP-style status code, a human message and optional
structured details. Anything that cannot be classified as a problem is an
opaque internal error and is reported with its full traceback.

Usage:
    from apps.core.problem import Problem

    raise Problem(404, f"No account with email {email}", details={"email": email})
"""
from dataclasses import dataclass
from typing import Any, Optional

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from ninja.errors import HttpError

from apps.core.serializers import serialize


class Problem(HttpError):
    """HttpError with optional structured details."""

    def __init__(self, status_code: int, message: str, details: Optional[Any] = None):
        super().__init__(status_code, message)
        self.status_code = status_code
        self.message = message
        self.details = details

    def __str__(self):
        return self.message


@dataclass(frozen=True)
class ProblemInfo:
    status_code: int
    message: str
    details: Optional[Any] = None

    @property
    def is_internal(self) -> bool:
        return self.status_code >= 500


def classify(error: BaseException) -> Optional[ProblemInfo]:
    """
    Classify an error as a user-facing problem.

    Returns None for opaque errors, which callers render verbatim.
    """
    if isinstance(error, HttpError):
        return ProblemInfo(
            status_code=error.status_code,
            message=getattr(error, 'message', str(error)),
            details=getattr(error, 'details', None),
        )
    if isinstance(error, ValidationError):
        details = error.message_dict if hasattr(error, 'error_dict') else None
        return ProblemInfo(400, '; '.join(error.messages), details)
    if isinstance(error, PermissionDenied):
        return ProblemInfo(403, str(error) or 'Permission denied')
    if isinstance(error, ObjectDoesNotExist):
        return ProblemInfo(404, str(error) or 'Not found')
    return None


def serializable(error: BaseException) -> dict:
    """
    Structured description of an error for the audit trail.

    Problems keep their code and details; opaque errors are recorded by type
    and message only.
    """
    problem = classify(error)
    if problem is None:
        return {
            'type': type(error).__name__,
            'message': str(error),
        }
    return {
        'code': problem.status_code,
        'message': problem.message,
        'details': serialize(problem.details),
    }
