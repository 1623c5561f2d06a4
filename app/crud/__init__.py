from app.crud.habits import (
    create_habit,
    delete_habit,
    get_habit,
    list_habits,
    seed_default_habits_if_empty,
    update_habit,
)
from app.crud.logs import get_log, get_logs_in_range, upsert_log
from app.crud.profile import get_profile, upsert_profile

__all__ = [
    "get_profile",
    "upsert_profile",
    "list_habits",
    "get_habit",
    "create_habit",
    "update_habit",
    "delete_habit",
    "seed_default_habits_if_empty",
    "get_log",
    "upsert_log",
    "get_logs_in_range",
]
