from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_user_id
from app.api.routes import load_habits, load_logs, require_date, require_range
from app.config import settings
from app.schemas.analytics import AnalyticsSnapshot, MonthCalendar
from app.services import analytics, export
from app.services.dates import add_days, month_bounds, today_in_zone

router = APIRouter(prefix="/v1/app", tags=["dashboard"])


def _reference_date(today: Optional[str]) -> str:
    if today is None:
        return today_in_zone(settings.TIME_ZONE)
    return require_date(today, "today")


def _default_range(start: Optional[str], end: Optional[str]) -> tuple[str, str]:
    end = end or today_in_zone(settings.TIME_ZONE)
    start = start or add_days(require_date(end, "end"), -29)
    require_range(start, end)
    return start, end


@router.get("/analytics")
def get_analytics(
    today: Optional[str] = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> AnalyticsSnapshot:
    reference = _reference_date(today)
    start = add_days(reference, -(settings.ANALYTICS_FETCH_DAYS - 1))
    return analytics.build_snapshot(
        load_habits(db, user_id),
        load_logs(db, user_id, start, reference),
        reference,
        settings.TIME_ZONE,
        settings.ANALYTICS_WINDOW_DAYS,
    )


@router.get("/calendar")
def get_calendar(
    year: int,
    month: int,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> MonthCalendar:
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise HTTPException(status_code=400, detail="year/month out of range")
    start, end = month_bounds(year, month)
    return analytics.month_calendar(
        load_habits(db, user_id),
        load_logs(db, user_id, start, end),
        year,
        month,
        settings.TIME_ZONE,
    )


@router.get("/export/csv")
def export_csv(
    start: Optional[str] = None,
    end: Optional[str] = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> Response:
    start, end = _default_range(start, end)
    habits = load_habits(db, user_id)
    if not habits:
        raise HTTPException(status_code=404, detail="No habits to export.")
    rows = export.build_export_rows(habits, load_logs(db, user_id, start, end), start, end)
    return Response(
        content=export.render_csv(habits, rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="habit-analytics-{end}.csv"'},
    )


@router.get("/export/report", response_class=HTMLResponse)
def export_report(
    start: Optional[str] = None,
    end: Optional[str] = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
) -> str:
    start, end = _default_range(start, end)
    habits = load_habits(db, user_id)
    rows = export.build_export_rows(habits, load_logs(db, user_id, start, end), start, end)
    return export.render_report_html(rows, start, end, settings.TIME_ZONE)
