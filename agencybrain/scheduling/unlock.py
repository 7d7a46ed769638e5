"""
Business-day unlock calculator.

Shared by every curriculum surface that time-gates content (staff sales
lessons, owner sales experience, quiz submission, lesson completion, the
6-Week Challenge and the lesson reminder job).

All functions are pure. "Today" is always an explicit argument; use
local_today() to derive it from an agency timezone.

Counting rules:
- Business days are Monday through Friday; no holiday calendar.
- Counting is inclusive of both start_date and today.
- A start_date on a weekend is not rolled forward: a program that starts
  on a Saturday has 0 business days elapsed on its first day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 5
DEFAULT_MAX_WEEKS = 8
FALLBACK_TIMEZONE = "America/New_York"

AssignmentStatus = Literal["pending", "active", "completed"]


class InvalidDate(ValueError):
    """Raised when a start date is missing or cannot be parsed."""


# =============================================================================
# DATE INPUTS
# =============================================================================


def parse_start_date(value: date | datetime | str | None) -> date:
    """
    Normalize a start date to a calendar date.

    Accepts a date, a datetime (its date part is used) or an ISO
    "YYYY-MM-DD" string. A trailing time component in the string is ignored.

    Raises:
        InvalidDate: if value is None or cannot be parsed
    """
    if value is None:
        raise InvalidDate("start_date is required")

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        raw = value.strip()
        try:
            return date.fromisoformat(raw[:10])
        except ValueError as e:
            raise InvalidDate(f"Invalid start_date: {value!r}") from e

    raise InvalidDate(f"Unsupported start_date type: {type(value).__name__}")


def resolve_timezone(timezone_name: str | None) -> ZoneInfo:
    """Look up an IANA zone, falling back to America/New_York."""
    try:
        return ZoneInfo(timezone_name or FALLBACK_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to %s", timezone_name, FALLBACK_TIMEZONE)
        return ZoneInfo(FALLBACK_TIMEZONE)


def local_now(timezone_name: str | None, now: datetime | None = None) -> datetime:
    """
    Convert an instant to wall-clock time in the given IANA timezone.

    Naive datetimes are treated as UTC. Defaults to the current UTC time.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return now.astimezone(resolve_timezone(timezone_name))


def local_today(timezone_name: str | None, now: datetime | None = None) -> date:
    """
    Return the calendar date in the given IANA timezone.

    Args:
        timezone_name: Agency timezone (e.g. "America/Chicago"). Empty or
            unknown zones fall back to America/New_York.
        now: Instant to convert. Naive datetimes are treated as UTC.
            Defaults to the current UTC time.
    """
    return local_now(timezone_name, now).date()


# =============================================================================
# BUSINESS DAY ARITHMETIC
# =============================================================================


def is_business_day(day: date) -> bool:
    """Monday (0) through Friday (4)."""
    return day.weekday() < 5


def count_business_days(start_date: date, today: date) -> int:
    """
    Count weekdays from start_date to today, inclusive of both.

    Returns 0 when today is before start_date.
    """
    if today < start_date:
        return 0

    # Whole weeks contribute five days each; walk only the remainder
    total_days = (today - start_date).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    count = full_weeks * DAYS_PER_WEEK

    cursor = start_date + timedelta(days=full_weeks * 7)
    for offset in range(remainder):
        if is_business_day(cursor + timedelta(days=offset)):
            count += 1

    return count


def business_day_date(start_date: date, day_number: int) -> date:
    """
    Calendar date on which business day `day_number` (1-indexed) falls.

    Day 1 is the first weekday on or after start_date.
    """
    if day_number < 1:
        raise ValueError(f"day_number must be >= 1, got {day_number}")

    cursor = start_date
    seen = 0
    while True:
        if is_business_day(cursor):
            seen += 1
            if seen == day_number:
                return cursor
        cursor += timedelta(days=1)


def scheduled_lesson_date(start_date: date, week_number: int, day_of_week: int) -> date:
    """
    Calendar date a lesson is scheduled for, assuming start_date is a Monday.

    Week W, day D (1=Mon, 3=Wed, 5=Fri) falls on start + (W-1)*7 + (D-1).
    """
    return start_date + timedelta(days=(week_number - 1) * 7 + (day_of_week - 1))


# =============================================================================
# SCHEDULE STATE
# =============================================================================


@dataclass(frozen=True)
class ScheduleState:
    """
    Where an assignment stands in its program on a given date.

    current_week is 1-indexed and clamped to [1, max_weeks].
    day_in_week is 1-5, or 0 when no business day has elapsed.
    """

    program_started: bool
    business_days_elapsed: int
    current_week: int
    day_in_week: int
    all_unlocked: bool = False

    def as_response_fields(self) -> dict[str, int | bool]:
        """Fields the curriculum endpoints merge into their JSON payloads."""
        return {
            "program_started": self.program_started,
            "current_week": self.current_week,
            "current_business_day": self.business_days_elapsed,
            "day_in_week": self.day_in_week,
        }


def _week_and_day(business_days: int, max_weeks: int) -> tuple[int, int]:
    # ceil(bd / 5) without floats
    week = -(-business_days // DAYS_PER_WEEK)
    if week > max_weeks:
        # Past the last week the position stays pinned on its final day
        return max_weeks, DAYS_PER_WEEK
    week = max(1, week)
    day = ((business_days - 1) % DAYS_PER_WEEK) + 1 if business_days > 0 else 0
    return week, day


def compute_schedule(
    start_date: date | datetime | str | None,
    today: date,
    status: str = "active",
    max_weeks: int = DEFAULT_MAX_WEEKS,
) -> ScheduleState:
    """
    Compute the program position for an assignment on `today`.

    Status policy:
    - pending: not started, nothing unlocked
    - completed: everything unlocked, positioned at the final week
    - anything else is evaluated against the dates

    Raises:
        InvalidDate: if start_date is missing or unparseable
    """
    start = parse_start_date(start_date)

    if status == "pending":
        return ScheduleState(
            program_started=False,
            business_days_elapsed=0,
            current_week=1,
            day_in_week=0,
        )

    business_days = count_business_days(start, today)

    if status == "completed":
        _, day = _week_and_day(business_days, max_weeks)
        return ScheduleState(
            program_started=True,
            business_days_elapsed=business_days,
            current_week=max_weeks,
            day_in_week=day,
            all_unlocked=True,
        )

    if today < start:
        return ScheduleState(
            program_started=False,
            business_days_elapsed=0,
            current_week=1,
            day_in_week=0,
        )

    week, day = _week_and_day(business_days, max_weeks)
    return ScheduleState(
        program_started=True,
        business_days_elapsed=business_days,
        current_week=week,
        day_in_week=day,
    )


def is_lesson_unlocked(state: ScheduleState, week_number: int, day_of_week: int) -> bool:
    """
    Whether a lesson tagged (week_number, day_of_week) is available.

    Past weeks are fully unlocked; in the current week a lesson unlocks once
    day_in_week reaches its day slot; future weeks stay locked.
    """
    if state.all_unlocked:
        return True
    if not state.program_started:
        return False
    if week_number < state.current_week:
        return True
    if week_number == state.current_week:
        return state.day_in_week >= day_of_week
    return False
