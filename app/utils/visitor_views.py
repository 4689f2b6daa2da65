"""
Helpers for presenting a visitor together with its check-in history.

Used by both the API (ORM rows) and the client cache (response models);
anything with ``check_in_time`` and ``check_out_time`` attributes works.
"""

from datetime import datetime
from typing import Iterable, Optional, TypeVar

LogT = TypeVar("LogT")


def select_relevant_log(logs: Iterable[LogT]) -> Optional[LogT]:
    """
    Pick the log that best describes a visitor's current presence.

    An open session wins; otherwise the latest check-in. Rows without a
    check-in time are ignored.
    """
    best = None
    best_key: tuple[bool, datetime] | None = None

    for log in logs:
        check_in = getattr(log, "check_in_time", None)
        if check_in is None:
            continue
        key = (getattr(log, "check_out_time", None) is None, check_in)
        if best_key is None or key > best_key:
            best, best_key = log, key

    return best
