from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import UserProfile

_PROFILE_FIELDS = ("name", "email", "photo_url")


def get_profile(db: Session, user_id: str) -> Optional[UserProfile]:
    return db.scalar(select(UserProfile).where(UserProfile.user_id == user_id))


def upsert_profile(db: Session, user_id: str, data: Dict[str, Any]) -> UserProfile:
    """Create on first call; afterwards refresh ``last_login_at`` and only the keys in ``data``."""
    now = datetime.utcnow()
    profile = get_profile(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id, created_at=now)

    for field in _PROFILE_FIELDS:
        if field in data:
            setattr(profile, field, data[field])
    profile.last_login_at = now
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile
