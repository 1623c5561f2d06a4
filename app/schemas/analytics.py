from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.log import Status


class DayAggregate(str, Enum):
    done = "done"
    missed = "missed"
    none = "none"


class _ViewModel(BaseModel):
    class Config:
        frozen = True


class HabitStats(_ViewModel):
    habit_id: str
    title: str
    current_streak: int
    longest_streak: int
    done_days: int
    missed_days: int
    completion_percent: int


class Bucket(_ViewModel):
    label: str
    value: float


class WeekdayAverage(_ViewModel):
    day: str
    average: float


class WeekdayRanking(_ViewModel):
    best: str
    worst: str
    averages: List[WeekdayAverage]


class TrendPoint(_ViewModel):
    date_string: str
    label: str
    value: float


class HabitDayStatus(_ViewModel):
    habit_id: str
    status: Status


class TodayOverview(_ViewModel):
    date_string: str
    done_count: int
    remaining_count: int
    progress_percent: int
    statuses: List[HabitDayStatus]


class CalendarCell(_ViewModel):
    date_string: str
    day: int
    status: DayAggregate
    percent: float


class MonthCalendar(_ViewModel):
    year: int
    month: int
    leading_blanks: int
    cells: List[CalendarCell]


class AnalyticsSnapshot(_ViewModel):
    reference_date: str
    time_zone: str
    window_days: int
    habit_stats: List[HabitStats]
    weekly: List[Bucket]
    week_average: float
    monthly: List[Bucket]
    trend: List[TrendPoint]
    weekday: WeekdayRanking
    most_consistent: Optional[str] = None
    today: TodayOverview


class ExportRow(_ViewModel):
    date_string: str
    done: int
    skipped: int
    unmarked: int
    statuses: List[Status]
