from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field

from app.schemas.log import DATE_STRING_PATTERN


class ChallengeStatus(str, Enum):
    active = "active"
    completed = "completed"
    not_completed = "not-completed"


class ChallengeState(BaseModel):
    habit_id: str = Field(..., min_length=1)
    habit_name: str
    duration_days: int = Field(..., gt=0)
    target_minutes: float = Field(..., gt=0)
    start_date: str = Field(..., pattern=DATE_STRING_PATTERN)
    end_date: str = Field(..., pattern=DATE_STRING_PATTERN)
    daily: Dict[str, float] = Field(default_factory=dict)
    status: ChallengeStatus = ChallengeStatus.active

    class Config:
        frozen = True
