from app.models.base import Base
from app.models.day_log import DayLog
from app.models.habit import Habit
from app.models.user_profile import UserProfile

__all__ = [
    "Base",
    "DayLog",
    "Habit",
    "UserProfile",
]
