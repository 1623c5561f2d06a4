from app.config import settings
from app.models import DayLog as DayLogRow
from conftest import USER

HEADERS = {"X-User-Id": USER}


def _create(client, **payload):
    response = client.post("/v1/app/habits", json=payload, headers=HEADERS)
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health/live").json() == {"status": "alive", "time_zone": settings.TIME_ZONE}


def test_user_header_is_required(client):
    assert client.get("/v1/app/habits").status_code == 401
    assert client.get("/v1/app/habits", headers={"X-User-Id": "x" * 200}).status_code == 400


def test_seed_defaults_once(client):
    first = client.post("/v1/app/habits/seed", headers=HEADERS).json()
    second = client.post("/v1/app/habits/seed", headers=HEADERS).json()

    assert first["seeded"] is True
    assert second["seeded"] is False
    assert [habit["title"] for habit in second["habits"]][:2] == ["Drink Water", "Exercise"]
    assert client.get("/v1/app/profile", headers=HEADERS).json()["seeded_at"] is not None


def test_habit_crud(client):
    created = _create(client, title="Pushups", target_value=20)
    assert created["id"]
    assert created["active"] is True

    patched = client.patch(f"/v1/app/habits/{created['id']}", json={"active": False}, headers=HEADERS)
    assert patched.json()["active"] is False
    assert patched.json()["target_value"] == 20

    assert client.patch("/v1/app/habits/ghost", json={"active": False}, headers=HEADERS).status_code == 404
    assert client.delete("/v1/app/habits/ghost", headers=HEADERS).status_code == 404
    assert client.delete(f"/v1/app/habits/{created['id']}", headers=HEADERS).json()["ok"] is True
    assert client.get("/v1/app/habits", headers=HEADERS).json() == []


def test_rejects_invalid_habits(client):
    assert client.post("/v1/app/habits", json={"title": ""}, headers=HEADERS).status_code == 422
    assert client.post("/v1/app/habits", json={"title": "Run", "target_value": 0}, headers=HEADERS).status_code == 422


def test_log_writes_merge(client):
    url = "/v1/app/logs/2024-03-01"
    client.put(url, json={"habit_status": {"read": {"status": "done", "count": 1}}}, headers=HEADERS)
    client.put(url, json={"mood": "happy", "note": "solid day"}, headers=HEADERS)

    log = client.get(url, headers=HEADERS).json()

    assert log["habit_status"] == {"read": {"status": "done", "count": 1}}
    assert log["mood"] == "happy"
    assert log["note"] == "solid day"


def test_missing_log_is_null(client):
    assert client.get("/v1/app/logs/2024-03-01", headers=HEADERS).json() is None


def test_bad_dates_are_rejected(client):
    assert client.put("/v1/app/logs/2024-3-1", json={"mood": "happy"}, headers=HEADERS).status_code == 400
    bad_range = client.get("/v1/app/logs", params={"start": "2024-03-02", "end": "2024-03-01"}, headers=HEADERS)
    assert bad_range.status_code == 400
    too_long = client.get("/v1/app/logs", params={"start": "2020-01-01", "end": "2024-01-01"}, headers=HEADERS)
    assert too_long.status_code == 400


def test_range_read(client):
    for day in ("2024-02-28", "2024-03-01", "2024-03-05"):
        client.put(f"/v1/app/logs/{day}", json={"note": day}, headers=HEADERS)

    logs = client.get("/v1/app/logs", params={"start": "2024-02-28", "end": "2024-03-01"}, headers=HEADERS).json()

    assert [log["date_string"] for log in logs] == ["2024-02-28", "2024-03-01"]


def test_analytics_and_calendar(client):
    _create(client, id="read", title="Read")
    _create(client, id="walk", title="Walk")
    client.put(
        "/v1/app/logs/2024-03-01",
        json={"habit_status": {"read": {"status": "done", "count": 1}, "walk": {"status": "skip"}}},
        headers=HEADERS,
    )

    snapshot = client.get("/v1/app/analytics", params={"today": "2024-03-01"}, headers=HEADERS).json()
    assert snapshot["today"]["done_count"] == 1
    assert snapshot["today"]["progress_percent"] == 50
    assert snapshot["most_consistent"] == "Read"

    calendar = client.get("/v1/app/calendar", params={"year": 2024, "month": 3}, headers=HEADERS).json()
    assert calendar["leading_blanks"] == 4
    assert calendar["cells"][0]["status"] == "missed"
    assert calendar["cells"][1]["status"] == "none"

    assert client.get("/v1/app/calendar", params={"year": 2024, "month": 13}, headers=HEADERS).status_code == 400
    assert client.get("/v1/app/analytics", params={"today": "nope"}, headers=HEADERS).status_code == 400


def test_exports(client):
    params = {"start": "2024-03-01", "end": "2024-03-02"}
    assert client.get("/v1/app/export/csv", params=params, headers=HEADERS).status_code == 404

    _create(client, id="read", title="Read")
    client.put("/v1/app/logs/2024-03-01", json={"habit_status": {"read": {"status": "done"}}}, headers=HEADERS)

    csv_response = client.get("/v1/app/export/csv", params=params, headers=HEADERS)
    assert csv_response.status_code == 200
    assert "habit-analytics-2024-03-02.csv" in csv_response.headers["content-disposition"]
    assert csv_response.text.splitlines() == [
        "Date,Done,Skipped,NotMarked,Read",
        "2024-03-01,1,0,0,done",
        "2024-03-02,0,0,1,none",
    ]

    report = client.get("/v1/app/export/report", params=params, headers=HEADERS)
    assert report.headers["content-type"].startswith("text/html")
    assert "Range: 2024-03-01 to 2024-03-02" in report.text


def test_non_canonical_dates_never_reach_the_store(client):
    for value in ("2024-0_1-5", "2024-1-05%20", "%2B024-01-05"):
        assert client.put(f"/v1/app/logs/{value}", json={"note": "x"}, headers=HEADERS).status_code == 400
    assert client.get("/v1/app/logs", params={"start": "2024-0_1-5", "end": "2024-03-01"}, headers=HEADERS).status_code == 400


def test_unreadable_stored_log_degrades_reads(client, db):
    db.add(DayLogRow(user_id=USER, date_string="2024-03-0x", habit_status={}))
    db.commit()
    _create(client, id="read", title="Read")

    logs = client.get("/v1/app/logs", params={"start": "2024-03-01", "end": "2024-03-31"}, headers=HEADERS)
    assert logs.status_code == 200
    assert logs.json() == []

    snapshot = client.get("/v1/app/analytics", params={"today": "2024-03-31"}, headers=HEADERS)
    assert snapshot.status_code == 200
    assert snapshot.json()["today"]["done_count"] == 0


def test_profile_put_keeps_omitted_fields(client):
    client.put("/v1/app/profile", json={"name": "Sam", "email": "sam@example.com"}, headers=HEADERS)
    profile = client.put("/v1/app/profile", json={"photo_url": "https://img.example/sam.png"}, headers=HEADERS).json()

    assert profile["name"] == "Sam"
    assert profile["email"] == "sam@example.com"
    assert profile["photo_url"] == "https://img.example/sam.png"
