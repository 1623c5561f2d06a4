"""Single "N days x M minutes" challenge.

A challenge is ``active`` until the midnight that ends its last day (in the
reference timezone). After that it is ``completed`` when every day of the run
has at least ``target_minutes`` logged and ``not-completed`` otherwise. No
challenge at all is represented by ``None``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.schemas.challenge import ChallengeState, ChallengeStatus
from app.schemas.habit import Habit
from app.services.dates import EXPORT_GUARD_DAYS, add_days, date_range, end_exclusive, is_date_string


class ChallengeError(ValueError):
    pass


def _aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def start_challenge(
    current: Optional[ChallengeState],
    habit: Optional[Habit],
    duration_days: int,
    target_minutes: float,
    today: str,
) -> ChallengeState:
    if current is not None and current.status == ChallengeStatus.active:
        raise ChallengeError("A challenge is already running.")
    if habit is None or not habit.active:
        raise ChallengeError("Select an active habit.")
    if target_minutes <= 0:
        raise ChallengeError("Enter valid minutes target.")
    if duration_days <= 0:
        raise ChallengeError("Duration must be at least one day.")

    return ChallengeState(
        habit_id=habit.id,
        habit_name=habit.title,
        duration_days=duration_days,
        target_minutes=target_minutes,
        start_date=today,
        end_date=add_days(today, duration_days - 1),
        daily={},
        status=ChallengeStatus.active,
    )


def log_minutes(state: Optional[ChallengeState], date_string: str, minutes: float) -> ChallengeState:
    if state is None:
        raise ChallengeError("No challenge is running.")
    if state.status != ChallengeStatus.active:
        raise ChallengeError(f"Challenge is already {state.status.value}.")
    if minutes < 0:
        raise ChallengeError("Enter valid minutes.")
    if not is_date_string(date_string):
        raise ChallengeError(f"Invalid date: {date_string!r}")

    daily = dict(state.daily)
    daily[date_string] = minutes
    return state.model_copy(update={"daily": daily})


def mark_complete(state: Optional[ChallengeState], date_string: str) -> ChallengeState:
    if state is None:
        raise ChallengeError("No challenge is running.")
    return log_minutes(state, date_string, state.target_minutes)


def mark_not_complete(state: Optional[ChallengeState], date_string: str) -> ChallengeState:
    return log_minutes(state, date_string, 0)


def challenge_end(state: ChallengeState, zone: str) -> datetime:
    return end_exclusive(state.end_date, zone)


def evaluate(state: ChallengeState, now: datetime, zone: str) -> ChallengeStatus:
    """Status derived from the stored days and ``now`` only; the stored status is ignored."""
    if _aware(now) < challenge_end(state, zone):
        return ChallengeStatus.active

    days = date_range(state.start_date, state.end_date, limit=EXPORT_GUARD_DAYS)
    if all(state.daily.get(day, 0) >= state.target_minutes for day in days):
        return ChallengeStatus.completed
    return ChallengeStatus.not_completed


def refresh(state: ChallengeState, now: datetime, zone: str) -> ChallengeState:
    status = evaluate(state, now, zone)
    if status == state.status:
        return state
    return state.model_copy(update={"status": status})


def countdown(state: Optional[ChallengeState], now: datetime, zone: str) -> timedelta:
    if state is None:
        return timedelta(0)
    return max(challenge_end(state, zone) - _aware(now), timedelta(0))


def format_countdown(remaining: timedelta) -> str:
    total_seconds = int(remaining.total_seconds())
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
