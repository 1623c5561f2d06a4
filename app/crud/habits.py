import re
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models import Habit, UserProfile

DEFAULT_HABITS = [
    "Drink Water",
    "Exercise",
    "Read Book",
    "Meditation",
    "Wake Up Early",
    "No Junk Food",
    "Study / Skill Practice",
    "Sleep before 11",
]

_HABIT_FIELDS = ("title", "category", "target_type", "target_value", "active", "created_at")


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def new_habit_id() -> str:
    return str(uuid.uuid4())


def list_habits(db: Session, user_id: str) -> list[Habit]:
    return list(
        db.scalars(select(Habit).where(Habit.user_id == user_id).order_by(Habit.created_at, Habit.pk))
    )


def get_habit(db: Session, user_id: str, habit_id: str) -> Optional[Habit]:
    return db.scalar(select(Habit).where(Habit.user_id == user_id, Habit.habit_id == habit_id))


def create_habit(db: Session, user_id: str, data: Dict[str, Any]) -> Habit:
    """Create-or-merge: writing an existing id overwrites the supplied fields."""
    habit_id = data.get("id") or new_habit_id()
    habit = get_habit(db, user_id, habit_id)
    if habit is None:
        habit = Habit(user_id=user_id, habit_id=habit_id)
    for field in _HABIT_FIELDS:
        if data.get(field) is not None:
            setattr(habit, field, _plain(data[field]))
    if habit.created_at is None:
        habit.created_at = datetime.utcnow()
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def update_habit(db: Session, user_id: str, habit_id: str, patch: Dict[str, Any]) -> Optional[Habit]:
    habit = get_habit(db, user_id, habit_id)
    if not habit:
        return None

    for field in _HABIT_FIELDS:
        if field in patch and patch[field] is not None:
            setattr(habit, field, _plain(patch[field]))
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def delete_habit(db: Session, user_id: str, habit_id: str) -> bool:
    result = db.execute(delete(Habit).where(Habit.user_id == user_id, Habit.habit_id == habit_id))
    db.commit()
    return bool(result.rowcount)


def seed_default_habits_if_empty(db: Session, user_id: str) -> bool:
    existing = db.scalar(select(Habit.pk).where(Habit.user_id == user_id).limit(1))
    if existing:
        return False

    now = datetime.utcnow()
    for title in DEFAULT_HABITS:
        db.add(
            Habit(
                user_id=user_id,
                habit_id=slugify(title),
                title=title,
                category="common",
                target_type="daily",
                target_value=1,
                active=True,
                created_at=now,
            )
        )

    profile = db.scalar(select(UserProfile).where(UserProfile.user_id == user_id))
    if profile is None:
        profile = UserProfile(user_id=user_id, created_at=now, last_login_at=now)
    profile.seeded_at = now
    db.add(profile)
    db.commit()
    return True


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)
