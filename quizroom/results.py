"""
Outcome types returned by every service operation.

An operation returns exactly one of:

  - Success(value)            the operation completed
  - Rejected(reason, message) an expected, user-correctable outcome
                              (bad input, duplicate name, unknown record)
  - Failure(detail)           the store could not be reached or returned
                              something unusable; retrying later may help
"""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Any, Union

from google.api_core.exceptions import GoogleAPIError

from quizroom.firestore_models import MalformedDocument

logger = logging.getLogger(__name__)


class Reason(str, enum.Enum):
    INVALID_NAME = 'invalid_name'
    DUPLICATE_NAME = 'duplicate_name'
    INVALID_DEADLINE = 'invalid_deadline'
    INVALID_QUESTIONS = 'invalid_questions'
    INVALID_PASSWORD = 'invalid_password'
    ALREADY_MEMBER = 'already_member'
    NOT_FOUND = 'not_found'
    NOT_ALLOWED = 'not_allowed'


@dataclass(frozen=True)
class Success:
    value: Any = None

    ok = True


@dataclass(frozen=True)
class Rejected:
    reason: Reason
    message: str = ''

    ok = False


@dataclass(frozen=True)
class Failure:
    detail: str = ''

    ok = False


Result = Union[Success, Rejected, Failure]


class StoreUnavailable(Exception):
    """A record the operation depends on could not be read."""


def store_operation(f):
    """Turn store faults raised inside a service method into a Failure.

    Validation and duplicate checks return Rejected themselves; anything
    raised by the Firestore client or by model parsing ends up here.
    """
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (GoogleAPIError, MalformedDocument, StoreUnavailable) as e:
            logger.error('%s failed: %s', f.__qualname__, e)
            return Failure(str(e))
    return decorated
