from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RecurrenceType(str, Enum):
    weekly = "weekly"
    alternate = "alternate"
    custom = "custom"


class WeekPattern(str, Enum):
    odd = "odd"
    even = "even"


@dataclass(frozen=True)
class Recurrence:
    type: RecurrenceType = RecurrenceType.weekly
    pattern: WeekPattern | None = None
    custom_weeks: tuple[int, ...] = field(default_factory=tuple)


WEEKLY = Recurrence()


def recurrence_errors(
    recurrence_type: RecurrenceType,
    pattern: WeekPattern | None,
    custom_weeks: list[int] | tuple[int, ...] | None,
    *,
    max_week_number: int = 16,
) -> list[str]:
    weeks = list(custom_weeks or [])
    errors: list[str] = []
    if recurrence_type == RecurrenceType.weekly:
        if pattern is not None or weeks:
            errors.append("Weekly recurrence cannot carry a week pattern or custom weeks")
    elif recurrence_type == RecurrenceType.alternate:
        if pattern is None:
            errors.append("Alternate recurrence requires an odd or even week pattern")
        if weeks:
            errors.append("Alternate recurrence cannot list custom weeks")
    elif recurrence_type == RecurrenceType.custom:
        if pattern is not None:
            errors.append("Custom recurrence cannot carry a week pattern")
        if not weeks:
            errors.append("Custom recurrence requires at least one week number")
        out_of_range = sorted({week for week in weeks if week < 1 or week > max_week_number})
        if out_of_range:
            errors.append(
                f"Custom weeks must be between 1 and {max_week_number}: "
                f"{', '.join(str(week) for week in out_of_range)}"
            )
    return errors


def applies_to_week(recurrence: Recurrence | None, week_number: int) -> bool:
    if recurrence is None or recurrence.type == RecurrenceType.weekly:
        return True
    if recurrence.type == RecurrenceType.alternate:
        is_odd_week = week_number % 2 == 1
        return is_odd_week == (recurrence.pattern == WeekPattern.odd)
    if recurrence.type == RecurrenceType.custom:
        return week_number in recurrence.custom_weeks
    return True


def recurrences_overlap(first: Recurrence | None, second: Recurrence | None, *, max_week_number: int = 16) -> bool:
    """Week-precise overlap; only used when a caller asks for recurrence-aware checks."""
    return any(
        applies_to_week(first, week) and applies_to_week(second, week)
        for week in range(1, max_week_number + 1)
    )


def describe_recurrence(recurrence: Recurrence | None) -> str:
    if recurrence is None or recurrence.type == RecurrenceType.weekly:
        return "Weekly"
    if recurrence.type == RecurrenceType.alternate:
        pattern = recurrence.pattern.value if recurrence.pattern else WeekPattern.odd.value
        return f"Alternate weeks ({pattern})"
    weeks = ", ".join(str(week) for week in sorted(recurrence.custom_weeks))
    return f"Weeks {weeks}" if weeks else "Custom pattern"
