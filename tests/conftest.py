from datetime import datetime
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_db
from app.db import build_engine, build_session_factory
from app.models import Base
from app.schemas.habit import Habit
from app.schemas.log import DayLog

ZONE = "Asia/Kathmandu"
USER = "user-1"


@pytest.fixture()
def session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = build_session_factory(engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def client(session_factory):
    from api_main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_habit(habit_id: str, title: Optional[str] = None, target_value: float = 1, active: bool = True) -> Habit:
    return Habit(
        id=habit_id,
        title=title or habit_id.title(),
        target_value=target_value,
        active=active,
        created_at=datetime(2024, 1, 1),
    )


def make_log(date_string: str, statuses: Dict[str, str]) -> DayLog:
    return DayLog(
        date_string=date_string,
        habit_status={key: {"status": value, "count": 1 if value == "done" else 0} for key, value in statuses.items()},
    )
