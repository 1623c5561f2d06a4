"""Day log schemas.

A stored status entry is one of two shapes:

* the current ``{"status": "done" | "skip" | "none", "count": n}`` form
  (:class:`HabitStatus`);
* the legacy ``{"done": true | false}`` form (:class:`LegacyStatus`), kept
  readable so old logs keep counting the same way.

Entries matching neither shape are dropped when a log is parsed and read
as "no data" for that habit.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

DATE_STRING_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class Status(str, Enum):
    done = "done"
    skip = "skip"
    none = "none"


class Mood(str, Enum):
    happy = "happy"
    angry = "angry"
    rest = "rest"


_STATUS_VALUES = {item.value for item in Status}
_MOOD_VALUES = {item.value for item in Mood}


class HabitStatus(BaseModel):
    status: Status
    count: int = Field(0, ge=0)

    class Config:
        frozen = True


class LegacyStatus(BaseModel):
    done: bool

    class Config:
        frozen = True


StatusEntry = Union[HabitStatus, LegacyStatus]


def _coerce_count(value: Any) -> int:
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if isinstance(value, int):
        return max(0, value)
    if not isinstance(value, float) or not math.isfinite(value):
        return 0
    return max(0, int(value))


def parse_status_entry(raw: Any) -> Optional[StatusEntry]:
    if isinstance(raw, (HabitStatus, LegacyStatus)):
        return raw
    if not isinstance(raw, dict):
        return None

    status = raw.get("status")
    if isinstance(status, Status):
        status = status.value
    if isinstance(status, str) and status in _STATUS_VALUES:
        return HabitStatus(status=Status(status), count=_coerce_count(raw.get("count")))

    done = raw.get("done")
    if isinstance(done, bool):
        return LegacyStatus(done=done)
    return None


class DayLog(BaseModel):
    date_string: str = Field(..., pattern=DATE_STRING_PATTERN)
    updated_at: Optional[datetime] = None
    habit_status: Dict[str, StatusEntry] = Field(default_factory=dict)
    mood: Optional[Mood] = None
    note: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("habit_status", mode="before")
    @classmethod
    def _parse_entries(cls, value: Any) -> Dict[str, StatusEntry]:
        if not isinstance(value, dict):
            return {}
        parsed: Dict[str, StatusEntry] = {}
        for key, raw in value.items():
            entry = parse_status_entry(raw)
            if entry is not None:
                parsed[str(key)] = entry
        return parsed

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood(cls, value: Any) -> Optional[str]:
        if isinstance(value, Mood):
            return value.value
        if isinstance(value, str) and value in _MOOD_VALUES:
            return value
        return None

    @classmethod
    def from_row(cls, row) -> "DayLog":
        return cls(
            date_string=row.date_string,
            updated_at=row.updated_at,
            habit_status=row.habit_status or {},
            mood=row.mood,
            note=row.note,
        )


class DayLogIn(BaseModel):
    """Partial write; only fields that were set are merged into the stored log."""

    habit_status: Optional[Dict[str, HabitStatus]] = None
    mood: Optional[Mood] = None
    note: Optional[str] = Field(None, max_length=5000)


def dump_habit_status(habit_status: Dict[str, StatusEntry]) -> Dict[str, Dict[str, Any]]:
    return {key: entry.model_dump(mode="json") for key, entry in habit_status.items()}
