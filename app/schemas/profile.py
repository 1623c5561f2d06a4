from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ProfileIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None


class ProfileOut(BaseModel):
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime
    last_login_at: datetime
    seeded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
