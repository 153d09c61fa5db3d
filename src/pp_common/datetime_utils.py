"""UTC datetime utilities.

Round timestamps are integer UNIX seconds; `now_ts` is the default clock
injected into the prediction engine.
"""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], int]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def now_ts() -> int:
    """Return the current UTC time as whole UNIX seconds."""
    return int(utc_now().timestamp())
