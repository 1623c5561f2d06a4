from typing import Generator, Optional

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from app.db import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    # Identity is asserted by the auth proxy in front of the API.
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    if len(user_id) > 128:
        raise HTTPException(status_code=400, detail="X-User-Id too long")
    return user_id
