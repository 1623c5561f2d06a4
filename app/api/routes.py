import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.api.deps import get_db, get_user_id
from app.schemas.habit import Habit, HabitIn, HabitPatch
from app.schemas.log import DayLog, DayLogIn
from app.schemas.profile import ProfileIn, ProfileOut
from app.services.dates import EXPORT_GUARD_DAYS, is_date_string, parse_date_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/app", tags=["app"])


def require_date(value: str, field: str = "date") -> str:
    if not is_date_string(value):
        raise HTTPException(status_code=400, detail=f"{field} format: YYYY-MM-DD")
    return value


def require_range(start: str, end: str) -> None:
    require_date(start, "start")
    require_date(end, "end")
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    if (parse_date_string(end) - parse_date_string(start)).days >= EXPORT_GUARD_DAYS:
        raise HTTPException(status_code=400, detail=f"range is limited to {EXPORT_GUARD_DAYS} days")


def _write_failed(exc: SQLAlchemyError, what: str) -> HTTPException:
    logger.error("Writing %s failed: %s", what, exc)
    return HTTPException(status_code=503, detail=f"{what} save failed, try again")


def load_habits(db: Session, user_id: str) -> List[Habit]:
    try:
        return [Habit.from_row(row) for row in crud.list_habits(db, user_id)]
    except (SQLAlchemyError, ValueError):
        logger.warning("Reading habits for %s failed", user_id, exc_info=True)
        db.rollback()
        return []


def load_logs(db: Session, user_id: str, start: str, end: str) -> Dict[str, DayLog]:
    try:
        rows = crud.get_logs_in_range(db, user_id, start, end)
        return {row.date_string: DayLog.from_row(row) for row in rows}
    except (SQLAlchemyError, ValueError):
        logger.warning("Reading logs %s..%s for %s failed", start, end, user_id, exc_info=True)
        db.rollback()
        return {}


@router.get("/profile")
def get_profile(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> Optional[ProfileOut]:
    try:
        profile = crud.get_profile(db, user_id)
    except SQLAlchemyError:
        logger.warning("Reading profile for %s failed", user_id, exc_info=True)
        return None
    return ProfileOut.model_validate(profile) if profile else None


@router.put("/profile")
def put_profile(
    payload: ProfileIn,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> ProfileOut:
    try:
        profile = crud.upsert_profile(db, user_id, payload.model_dump(exclude_unset=True))
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "profile") from exc
    return ProfileOut.model_validate(profile)


@router.get("/habits")
def list_habits(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> List[Habit]:
    return load_habits(db, user_id)


@router.post("/habits/seed")
def seed_habits(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)) -> Dict[str, Any]:
    try:
        seeded = crud.seed_default_habits_if_empty(db, user_id)
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "habits") from exc
    return {"ok": True, "seeded": seeded, "habits": load_habits(db, user_id)}


@router.post("/habits", status_code=201)
def create_habit(
    payload: HabitIn,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> Habit:
    try:
        row = crud.create_habit(db, user_id, payload.model_dump())
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "habit") from exc
    return Habit.from_row(row)


@router.patch("/habits/{habit_id}")
def update_habit(
    habit_id: str,
    payload: HabitPatch,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> Habit:
    try:
        row = crud.update_habit(db, user_id, habit_id, payload.model_dump(exclude_unset=True))
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "habit") from exc
    if not row:
        raise HTTPException(status_code=404, detail="habit not found")
    return Habit.from_row(row)


@router.delete("/habits/{habit_id}")
def delete_habit(
    habit_id: str,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        deleted = crud.delete_habit(db, user_id, habit_id)
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "habit") from exc
    if not deleted:
        raise HTTPException(status_code=404, detail="habit not found")
    return {"ok": True, "id": habit_id}


@router.get("/logs")
def get_logs_in_range(
    start: str,
    end: str,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> List[DayLog]:
    require_range(start, end)
    return list(load_logs(db, user_id, start, end).values())


@router.get("/logs/{date_string}")
def get_log(
    date_string: str,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> Optional[DayLog]:
    require_date(date_string)
    try:
        row = crud.get_log(db, user_id, date_string)
        return DayLog.from_row(row) if row else None
    except (SQLAlchemyError, ValueError):
        logger.warning("Reading log %s for %s failed", date_string, user_id, exc_info=True)
        return None


@router.put("/logs/{date_string}")
def put_log(
    date_string: str,
    payload: DayLogIn,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> DayLog:
    require_date(date_string)
    data = payload.model_dump(mode="json", exclude_unset=True)
    try:
        row = crud.upsert_log(db, user_id, date_string, data)
    except SQLAlchemyError as exc:
        raise _write_failed(exc, "day log") from exc
    return DayLog.from_row(row)
