"""Date helpers."""

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import TypeAdapter

_datetime_adapter = TypeAdapter(datetime)

DateLike = Union[datetime, str]


def _to_naive_utc(value: DateLike) -> datetime:
    if isinstance(value, str):
        value = _datetime_adapter.validate_python(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def calc_difference_in_days(left: DateLike, right: Optional[DateLike] = None) -> int:
    """Return the absolute number of calendar days between two dates.

    Args:
        left: Datetime or ISO 8601 string
        right: Datetime or ISO 8601 string, defaults to now

    Returns:
        Calendar-day difference, never negative
    """
    if right is None:
        right = datetime.now(timezone.utc)

    delta = _to_naive_utc(left).date() - _to_naive_utc(right).date()
    return abs(delta.days)
