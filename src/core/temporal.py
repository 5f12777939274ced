"""
Temporal Classifier

Pure functions that place a timestamp relative to "now" on the calendar of
the evaluation timezone. Nothing here reads the clock.
"""
import datetime as dt
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional
from zoneinfo import ZoneInfo

UTC = dt.UTC
_DAY_SECONDS = 86400


class DueCategory(StrEnum):
    PAST_DUE = "past_due"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    FUTURE = "future"
    UNDATED = "undated"


# Undated sorts last in any due-date ordering
_UNDATED_RANK = 1


@dataclass(frozen=True)
class DueClassification:
    """Urgency of a due date plus what a badge should say."""
    category: DueCategory
    days_overdue: Optional[int] = None
    label: Optional[str] = None

    @property
    def is_overdue(self) -> bool:
        return self.category == DueCategory.PAST_DUE


def resolve_timezone(tz: dt.tzinfo | str | None) -> dt.tzinfo:
    if tz is None:
        return UTC
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def as_aware(value: dt.datetime) -> dt.datetime:
    """Naive datetimes are UTC (MongoDB returns them that way)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def local_date(value: dt.datetime, tz: dt.tzinfo | str | None = None) -> dt.date:
    return as_aware(value).astimezone(resolve_timezone(tz)).date()


def short_date(day: dt.date) -> str:
    return f"{day:%b} {day.day}"


def long_date(day: dt.date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


def days_overdue(due: dt.datetime, now: dt.datetime) -> int:
    """Whole days elapsed since the due time, never less than one."""
    elapsed = (as_aware(now) - as_aware(due)).total_seconds()
    return max(1, int(elapsed // _DAY_SECONDS))


def classify_due(
    due: Optional[dt.datetime],
    now: dt.datetime,
    tz: dt.tzinfo | str | None = None,
) -> DueClassification:
    """
    Classify a due date relative to now.

    A due time earlier today is due today, not overdue; past-due means before
    the start of today in the evaluation timezone.

    Args:
        due: Due timestamp, or None for undated tasks
        now: Reference time
        tz: Evaluation timezone (name or tzinfo, default UTC)

    Returns:
        Exactly one category, with overdue magnitude and badge label
    """
    if due is None:
        return DueClassification(category=DueCategory.UNDATED)

    zone = resolve_timezone(tz)
    due_day = local_date(due, zone)
    today = local_date(now, zone)
    delta = (due_day - today).days

    if delta < 0:
        overdue = days_overdue(due, now)
        return DueClassification(
            category=DueCategory.PAST_DUE,
            days_overdue=overdue,
            label=f"{overdue}d overdue",
        )
    if delta == 0:
        return DueClassification(category=DueCategory.DUE_TODAY, label="Today")
    if delta == 1:
        return DueClassification(category=DueCategory.DUE_TOMORROW, label="Tomorrow")
    return DueClassification(category=DueCategory.FUTURE, label=short_date(due_day))


def is_past_due(due: Optional[dt.datetime], now: dt.datetime, tz: dt.tzinfo | str | None = None) -> bool:
    return classify_due(due, now, tz).category == DueCategory.PAST_DUE


def due_sort_key(due: Optional[dt.datetime]) -> tuple:
    """Ascending by due time with undated last."""
    if due is None:
        return (_UNDATED_RANK, dt.datetime.max.replace(tzinfo=UTC))
    return (0, as_aware(due))


def day_label(value: dt.datetime, now: dt.datetime, tz: dt.tzinfo | str | None = None) -> str:
    """'Today', 'Yesterday' or a calendar date like 'Jan 5, 2024'."""
    zone = resolve_timezone(tz)
    day = local_date(value, zone)
    today = local_date(now, zone)
    if day == today:
        return "Today"
    if day == today - dt.timedelta(days=1):
        return "Yesterday"
    return long_date(day)
