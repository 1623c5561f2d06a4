from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import DayLog

_LOG_FIELDS = ("habit_status", "mood", "note")


def get_log(db: Session, user_id: str, date_string: str) -> Optional[DayLog]:
    return db.scalar(select(DayLog).where(DayLog.user_id == user_id, DayLog.date_string == date_string))


def upsert_log(db: Session, user_id: str, date_string: str, data: Dict[str, Any]) -> DayLog:
    """Merge ``data`` into the log for ``date_string``.

    Keys present in ``data`` replace the stored value (``habit_status`` as a
    whole document); keys absent keep what is stored.
    """
    log = get_log(db, user_id, date_string)
    if log is None:
        log = DayLog(user_id=user_id, date_string=date_string, habit_status={})

    for field in _LOG_FIELDS:
        if field in data:
            value = data[field]
            if field == "habit_status":
                value = dict(value or {})
            setattr(log, field, getattr(value, "value", value))
    log.updated_at = datetime.utcnow()

    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def get_logs_in_range(db: Session, user_id: str, start: str, end: str) -> list[DayLog]:
    # date strings sort lexicographically in calendar order
    return list(
        db.scalars(
            select(DayLog)
            .where(DayLog.user_id == user_id, DayLog.date_string >= start, DayLog.date_string <= end)
            .order_by(DayLog.date_string)
        )
    )
