"""Derived dashboard views.

Every function here is pure: it reads a habit sequence, a sparse mapping of
date string to :class:`DayLog` and a reference date, and returns immutable view
models. Callers refetch or recompute instead of mutating results.
"""

import math
from typing import Dict, List, Mapping, Optional, Sequence

from app.schemas.analytics import (
    AnalyticsSnapshot,
    Bucket,
    CalendarCell,
    DayAggregate,
    HabitDayStatus,
    HabitStats,
    MonthCalendar,
    TodayOverview,
    TrendPoint,
    WeekdayAverage,
    WeekdayRanking,
)
from app.schemas.habit import Habit
from app.schemas.log import DayLog, Status
from app.services.dates import (
    WEEKDAY_NAMES,
    WINDOW_GUARD_DAYS,
    days_in_month,
    last_n_days,
    month_bounds,
    parse_date_string,
    to_date_string,
    weekday_index,
    weekday_name,
)
from app.services.status import habit_status_in

DEFAULT_WINDOW_DAYS = 30
WEEKDAY_WINDOW_DAYS = 30
TREND_DAYS = 30
MONTH_BUCKET_LABELS = ["W1", "W2", "W3", "W4"]

Logs = Mapping[str, DayLog]


def _percent(part: int, whole: int) -> int:
    # half-up, so 12.5 reads as 13
    if whole <= 0:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


def resolve_day(habits: Sequence[Habit], log: Optional[DayLog]) -> List[HabitDayStatus]:
    return [HabitDayStatus(habit_id=habit.id, status=habit_status_in(log, habit.id)) for habit in habits]


def day_completion_percent(habits: Sequence[Habit], log: Optional[DayLog]) -> float:
    if log is None or not habits:
        return 0
    done = sum(1 for habit in habits if habit_status_in(log, habit.id) == Status.done)
    return done * 100 / len(habits)


def day_aggregate_status(habits: Sequence[Habit], log: Optional[DayLog]) -> DayAggregate:
    # A present log with nothing marked counts as missed, not none.
    if log is None or not habits:
        return DayAggregate.none
    if all(habit_status_in(log, habit.id) == Status.done for habit in habits):
        return DayAggregate.done
    return DayAggregate.missed


def habit_stats(
    habits: Sequence[Habit],
    logs: Logs,
    reference_date: str,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> List[HabitStats]:
    days = last_n_days(reference_date, window_days, limit=WINDOW_GUARD_DAYS)
    stats: List[HabitStats] = []
    for habit in habits:
        done = 0
        current = 0
        longest = 0
        for day in days:
            if habit_status_in(logs.get(day), habit.id) == Status.done:
                done += 1
                current += 1
                longest = max(longest, current)
            else:
                current = 0
        stats.append(
            HabitStats(
                habit_id=habit.id,
                title=habit.title,
                current_streak=current,
                longest_streak=longest,
                done_days=done,
                missed_days=max(len(days) - done, 0),
                completion_percent=_percent(done, len(days)),
            )
        )
    return stats


def most_consistent_habit(stats: Sequence[HabitStats]) -> Optional[str]:
    if not stats:
        return None
    ranked = sorted(stats, key=lambda item: item.completion_percent, reverse=True)
    return ranked[0].title


def weekly_buckets(habits: Sequence[Habit], logs: Logs, reference_date: str, zone: str) -> List[Bucket]:
    return [
        Bucket(label=weekday_name(day, zone), value=day_completion_percent(habits, logs.get(day)))
        for day in last_n_days(reference_date, 7)
    ]


def week_average(habits: Sequence[Habit], logs: Logs, reference_date: str) -> float:
    days = last_n_days(reference_date, 7)
    if not days:
        return 0
    return sum(day_completion_percent(habits, logs.get(day)) for day in days) / len(days)


def monthly_buckets(habits: Sequence[Habit], logs: Logs, reference_date: str) -> List[Bucket]:
    reference = parse_date_string(reference_date)
    totals = [0.0, 0.0, 0.0, 0.0]
    counts = [0, 0, 0, 0]
    for day in range(1, days_in_month(reference.year, reference.month) + 1):
        index = min(3, (day - 1) // 7)
        date_string = to_date_string(reference.replace(day=day))
        totals[index] += day_completion_percent(habits, logs.get(date_string))
        counts[index] += 1
    return [
        Bucket(label=label, value=totals[idx] / counts[idx] if counts[idx] else 0)
        for idx, label in enumerate(MONTH_BUCKET_LABELS)
    ]


def trend(habits: Sequence[Habit], logs: Logs, reference_date: str, days: int = TREND_DAYS) -> List[TrendPoint]:
    return [
        TrendPoint(date_string=day, label=day[5:], value=day_completion_percent(habits, logs.get(day)))
        for day in last_n_days(reference_date, days)
    ]


def weekday_ranking(habits: Sequence[Habit], logs: Logs, reference_date: str, zone: str) -> WeekdayRanking:
    totals: Dict[str, float] = {name: 0.0 for name in WEEKDAY_NAMES}
    counts: Dict[str, int] = {name: 0 for name in WEEKDAY_NAMES}
    for day in last_n_days(reference_date, WEEKDAY_WINDOW_DAYS):
        name = weekday_name(day, zone)
        totals[name] += day_completion_percent(habits, logs.get(day))
        counts[name] += 1

    averages = [
        WeekdayAverage(day=name, average=totals[name] / counts[name] if counts[name] else 0)
        for name in WEEKDAY_NAMES
    ]
    # sorted() is stable, so ties keep Mon..Sun order
    ranked = sorted(averages, key=lambda item: item.average, reverse=True)
    return WeekdayRanking(best=ranked[0].day, worst=ranked[-1].day, averages=ranked)


def today_overview(habits: Sequence[Habit], log: Optional[DayLog], date_string: str) -> TodayOverview:
    statuses = resolve_day(habits, log)
    done = sum(1 for item in statuses if item.status == Status.done)
    return TodayOverview(
        date_string=date_string,
        done_count=done,
        remaining_count=max(len(habits) - done, 0),
        progress_percent=_percent(done, len(habits)),
        statuses=statuses,
    )


def month_calendar(habits: Sequence[Habit], logs: Logs, year: int, month: int, zone: str) -> MonthCalendar:
    start, _ = month_bounds(year, month)
    cells: List[CalendarCell] = []
    for day in range(1, days_in_month(year, month) + 1):
        date_string = f"{start[:8]}{day:02d}"
        log = logs.get(date_string)
        cells.append(
            CalendarCell(
                date_string=date_string,
                day=day,
                status=day_aggregate_status(habits, log),
                percent=day_completion_percent(habits, log),
            )
        )
    return MonthCalendar(
        year=year,
        month=month,
        leading_blanks=weekday_index(year, month, 1, zone),
        cells=cells,
    )


def build_snapshot(
    habits: Sequence[Habit],
    logs: Logs,
    reference_date: str,
    zone: str,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> AnalyticsSnapshot:
    window_days = min(window_days, WINDOW_GUARD_DAYS)
    stats = habit_stats(habits, logs, reference_date, window_days)
    return AnalyticsSnapshot(
        reference_date=reference_date,
        time_zone=zone,
        window_days=window_days,
        habit_stats=stats,
        weekly=weekly_buckets(habits, logs, reference_date, zone),
        week_average=week_average(habits, logs, reference_date),
        monthly=monthly_buckets(habits, logs, reference_date),
        trend=trend(habits, logs, reference_date),
        weekday=weekday_ranking(habits, logs, reference_date, zone),
        most_consistent=most_consistent_habit(stats),
        today=today_overview(habits, logs.get(reference_date), reference_date),
    )
