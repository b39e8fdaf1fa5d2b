"""Spread an amount of hours over consecutive work days.

The allocator is pure: it knows nothing about Teamwork or the terminal. It is
given a start date and an hour count and returns an AllocationPlan, one
TimeEntry per work day, weekends and excluded dates skipped.
"""

from __future__ import annotations

import datetime
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from .errors import InvalidInput
from .models import AllocationPlan, RemoteTimeEntry, TimeEntry, TimeOff

logger = logging.getLogger(__name__)

DEFAULT_HOURS_PER_DAY = Decimal("8")

_ONE_DAY = datetime.timedelta(days=1)
_DURATION_RE = re.compile(r"^(?:(?P<days>\d+)d)?(?:(?P<hours>\d+(?:\.\d+)?)h)?$")


def to_decimal(value, name: str = "value") -> Decimal:
    """Coerce user/config numbers to Decimal, raising InvalidInput on garbage."""
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            # str() so that floats like 7.1 stay 7.1 instead of 7.0999...
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidInput(f"{name} must be a number, got {value!r}") from None
    if not number.is_finite():
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")
    return number


def _as_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise InvalidInput(f"Expected a date, got {value!r}")


def is_working_day(day: datetime.date) -> bool:
    """Monday to Friday."""
    return day.weekday() < 5


def working_days(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Yield working days in [start, end)."""
    day = start
    while day < end:
        if is_working_day(day):
            yield day
        day += _ONE_DAY


def _check_hours(value: Decimal, name: str) -> None:
    if value <= 0:
        raise InvalidInput(f"{name} must be greater than 0, got {value}")
    # Teamwork stores hours and minutes; anything finer would be lost
    if (value * 60) % 1:
        raise InvalidInput(f"{name} must be a whole number of minutes, got {value}")


def validate_hours(total_hours, hours_per_day=DEFAULT_HOURS_PER_DAY) -> Tuple[Decimal, Decimal]:
    """Check both hour values without allocating anything.

    Returns them as Decimals; raises InvalidInput as ``allocate`` would.
    """
    total = to_decimal(total_hours, "total_hours")
    per_day = to_decimal(hours_per_day, "hours_per_day")
    _check_hours(total, "total_hours")
    _check_hours(per_day, "hours_per_day")
    return total, per_day


def allocate(
    start_date,
    total_hours,
    hours_per_day=DEFAULT_HOURS_PER_DAY,
    excluded_dates: Optional[Iterable[datetime.date]] = None,
    booked_hours: Optional[Mapping[datetime.date, object]] = None,
) -> AllocationPlan:
    """Build the AllocationPlan for ``total_hours`` starting at ``start_date``.

    Each working day that is not in ``excluded_dates`` receives
    ``hours_per_day`` (less whatever ``booked_hours`` already holds for that
    day); the last day gets the remainder. The hours of the plan always sum to
    ``total_hours`` exactly.

    Raises InvalidInput if either hour value is not strictly positive or is
    not a whole number of minutes.
    """
    start = _as_date(start_date)
    total, per_day = validate_hours(total_hours, hours_per_day)

    excluded = {_as_date(d) for d in (excluded_dates or ())}
    booked = {
        _as_date(d): to_decimal(h, f"booked hours on {d}")
        for d, h in (booked_hours or {}).items()
    }

    entries = []
    allocated = Decimal("0")
    day = start
    while allocated < total:
        if is_working_day(day) and day not in excluded:
            capacity = per_day - booked.get(day, Decimal("0"))
            if capacity > 0:
                hours = min(capacity, total - allocated)
                entries.append(TimeEntry(date=day, hours=hours))
                allocated += hours
            else:
                logger.debug("Skipping %s, already fully booked", day)
        try:
            day += _ONE_DAY
        except OverflowError:
            raise InvalidInput("Ran out of calendar before allocating all hours") from None

    logger.debug(
        "Allocated %s hours over %d day(s) starting %s", total, len(entries), start
    )
    return AllocationPlan(entries=tuple(entries), total_hours=total)


def parse_duration(text: str, hours_per_day=DEFAULT_HOURS_PER_DAY) -> Decimal:
    """Parse ``8d4h`` style durations (or a plain hour count) into hours.

    >>> parse_duration("8d4h")
    Decimal('68')
    >>> parse_duration("7.5")
    Decimal('7.5')
    """
    raw = (text or "").strip().lower().replace(" ", "")
    if not raw:
        raise InvalidInput("Duration is empty. Expected e.g. 8d4h, 3d, 6h or 12")

    match = _DURATION_RE.match(raw)
    if match and (match.group("days") or match.group("hours")):
        days = Decimal(match.group("days") or "0")
        hours = Decimal(match.group("hours") or "0")
        return days * to_decimal(hours_per_day, "hours_per_day") + hours

    try:
        return to_decimal(raw, "duration")
    except InvalidInput:
        raise InvalidInput(
            f"Could not parse {text!r}. Expected format xxdyyh, "
            "for example 8d4h for 8 days and 4 hours."
        ) from None


def split_days(hours, hours_per_day=DEFAULT_HOURS_PER_DAY) -> Tuple[int, Decimal]:
    """Express ``hours`` as (full days, leftover hours)."""
    total = to_decimal(hours, "hours")
    per_day = to_decimal(hours_per_day, "hours_per_day")
    days, rest = divmod(total, per_day)
    return int(days), rest


def remaining_workload(
    day: datetime.date,
    entries: Iterable[RemoteTimeEntry],
    time_off: Iterable[TimeOff],
    hours_per_day=DEFAULT_HOURS_PER_DAY,
) -> Decimal:
    """Hours still to be logged on ``day``, never below zero."""
    remaining = to_decimal(hours_per_day, "hours_per_day")
    remaining -= sum((e.hours for e in entries if e.date == day), Decimal("0"))
    remaining -= sum((t.hours for t in time_off if t.date == day), Decimal("0"))
    return max(remaining, Decimal("0"))
