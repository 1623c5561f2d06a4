import csv
import io
from html import escape
from typing import List, Mapping, Sequence

from app.schemas.analytics import ExportRow
from app.schemas.habit import Habit
from app.schemas.log import DayLog, Status
from app.services.dates import EXPORT_GUARD_DAYS, date_range
from app.services.status import habit_status_in

CSV_FIXED_HEADERS = ["Date", "Done", "Skipped", "NotMarked"]


def build_export_rows(
    habits: Sequence[Habit],
    logs: Mapping[str, DayLog],
    start: str,
    end: str,
) -> List[ExportRow]:
    if start > end:
        raise ValueError("Start date must be before end date.")

    rows: List[ExportRow] = []
    for day in date_range(start, end, limit=EXPORT_GUARD_DAYS):
        statuses = [habit_status_in(logs.get(day), habit.id) for habit in habits]
        done = statuses.count(Status.done)
        skipped = statuses.count(Status.skip)
        rows.append(
            ExportRow(
                date_string=day,
                done=done,
                skipped=skipped,
                unmarked=max(len(statuses) - done - skipped, 0),
                statuses=statuses,
            )
        )
    return rows


def render_csv(habits: Sequence[Habit], rows: Sequence[ExportRow]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_FIXED_HEADERS + [habit.title for habit in habits])
    for row in rows:
        writer.writerow(
            [row.date_string, row.done, row.skipped, row.unmarked] + [status.value for status in row.statuses]
        )
    return buffer.getvalue()


def render_report_html(rows: Sequence[ExportRow], start: str, end: str, zone: str) -> str:
    body = "".join(
        f"<tr><td>{row.date_string}</td><td>{row.done}</td><td>{row.skipped}</td><td>{row.unmarked}</td></tr>"
        for row in rows
    )
    return f"""
<!doctype html>
<html lang='en'>
<head>
  <meta charset='utf-8'>
  <title>Habit Export {escape(start)} to {escape(end)}</title>
  <style>
    body {{ font-family: Arial, sans-serif; padding: 24px; color: #111; }}
    h1 {{ font-size: 18px; margin: 0 0 6px; }}
    p {{ font-size: 12px; color: #555; margin: 0 0 16px; }}
    table {{ width: 100%; border-collapse: collapse; font-size: 12px; }}
    th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
    th {{ background: #f4f4f5; }}
  </style>
</head>
<body>
  <h1>Habit Tracker Report</h1>
  <p>Range: {escape(start)} to {escape(end)} ({escape(zone)})</p>
  <table>
    <thead><tr><th>Date</th><th>Done</th><th>Skipped</th><th>Unmarked</th></tr></thead>
    <tbody>{body}</tbody>
  </table>
  <script>window.onload = function () {{ window.print(); }};</script>
</body>
</html>
"""
