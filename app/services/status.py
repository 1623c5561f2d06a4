import math
from typing import Any, Optional

from app.schemas.habit import Habit
from app.schemas.log import DayLog, HabitStatus, LegacyStatus, Status, parse_status_entry


def resolve_status(entry: Any) -> Status:
    """Canonical three-valued status for one stored entry.

    Legacy ``{"done": bool}`` entries map to ``done``/``none``; ``skip`` cannot
    be expressed in that format.
    """
    if entry is None:
        return Status.none
    if isinstance(entry, HabitStatus):
        return entry.status
    if isinstance(entry, LegacyStatus):
        return Status.done if entry.done else Status.none
    parsed = parse_status_entry(entry)
    if parsed is None:
        return Status.none
    return resolve_status(parsed)


def habit_status_in(log: Optional[DayLog], habit_id: str) -> Status:
    if log is None:
        return Status.none
    return resolve_status(log.habit_status.get(habit_id))


def build_status_entry(habit: Habit, status: Status, count: Optional[int] = None) -> HabitStatus:
    if not habit.is_numeric:
        return HabitStatus(status=status, count=1 if status == Status.done else 0)

    if count is None:
        count = math.ceil(habit.target_value) if status == Status.done else 0
        return HabitStatus(status=status, count=count)

    count = max(0, int(count))
    if count >= habit.target_value:
        return HabitStatus(status=Status.done, count=count)
    if status == Status.done:
        status = Status.none
    return HabitStatus(status=status, count=count)
