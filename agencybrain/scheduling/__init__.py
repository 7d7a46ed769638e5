"""
Curriculum scheduling.

Exports the business-day unlock calculator used by every time-gated
curriculum endpoint.
"""

from .unlock import (
    InvalidDate,
    ScheduleState,
    business_day_date,
    compute_schedule,
    count_business_days,
    is_business_day,
    is_lesson_unlocked,
    local_now,
    local_today,
    parse_start_date,
    resolve_timezone,
    scheduled_lesson_date,
)

__all__ = [
    "InvalidDate",
    "ScheduleState",
    "business_day_date",
    "compute_schedule",
    "count_business_days",
    "is_business_day",
    "is_lesson_unlocked",
    "local_now",
    "local_today",
    "parse_start_date",
    "resolve_timezone",
    "scheduled_lesson_date",
]
