from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class HabitCategory(str, Enum):
    common = "common"
    custom = "custom"


class TargetType(str, Enum):
    daily = "daily"
    weekly = "weekly"


class Habit(BaseModel):
    id: str
    title: str
    category: HabitCategory = HabitCategory.custom
    target_type: TargetType = TargetType.daily
    target_value: float = Field(1, gt=0)
    active: bool = True
    created_at: datetime

    class Config:
        frozen = True

    @property
    def is_numeric(self) -> bool:
        return self.target_value > 1

    @classmethod
    def from_row(cls, row) -> "Habit":
        return cls(
            id=row.habit_id,
            title=row.title,
            category=row.category,
            target_type=row.target_type,
            target_value=row.target_value,
            active=row.active,
            created_at=row.created_at,
        )


class HabitIn(BaseModel):
    id: Optional[str] = Field(None, max_length=64)
    title: str = Field(..., min_length=1, max_length=255)
    category: HabitCategory = HabitCategory.custom
    target_type: TargetType = TargetType.daily
    target_value: float = Field(1, gt=0)
    active: bool = True
    created_at: Optional[datetime] = None


class HabitPatch(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[HabitCategory] = None
    target_type: Optional[TargetType] = None
    target_value: Optional[float] = Field(None, gt=0)
    active: Optional[bool] = None
