from app.schemas.analytics import AnalyticsSnapshot, DayAggregate, ExportRow, HabitStats, MonthCalendar
from app.schemas.challenge import ChallengeState, ChallengeStatus
from app.schemas.habit import Habit, HabitCategory, HabitIn, HabitPatch, TargetType
from app.schemas.log import DayLog, DayLogIn, HabitStatus, LegacyStatus, Mood, Status
from app.schemas.profile import ProfileIn, ProfileOut

__all__ = [
    "AnalyticsSnapshot",
    "ChallengeState",
    "ChallengeStatus",
    "DayAggregate",
    "DayLog",
    "DayLogIn",
    "ExportRow",
    "Habit",
    "HabitCategory",
    "HabitIn",
    "HabitPatch",
    "HabitStats",
    "HabitStatus",
    "LegacyStatus",
    "MonthCalendar",
    "Mood",
    "ProfileIn",
    "ProfileOut",
    "Status",
    "TargetType",
]
