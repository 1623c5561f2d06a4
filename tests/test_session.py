import asyncio
from datetime import datetime, timezone
from typing import Dict, List

import pytest

from app.schemas.challenge import ChallengeStatus
from app.schemas.habit import Habit, HabitIn, HabitPatch
from app.schemas.log import DayLog, Mood, Status
from app.services.challenge import ChallengeError
from app.services.local_state import ChallengeSlot, LocalStateFile
from app.services.session import DashboardSession
from app.services.store import HabitStore, RecordNotFound, StoreWriteError
from conftest import USER, ZONE, make_habit, make_log

# 2024-03-10 09:00 in Kathmandu
MORNING = datetime(2024, 3, 10, 3, 15, tzinfo=timezone.utc)


class FakeStore:
    """In-memory store whose failures are switched on per method."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.habits: List[Habit] = [make_habit("read"), make_habit("walk")]
        self.logs: Dict[str, DayLog] = {}
        self.fail: Dict[str, Exception] = {}
        self.gate: asyncio.Event = None
        self.calls: List[str] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    async def seed_default_habits_if_empty(self) -> bool:
        return False

    async def list_habits(self) -> List[Habit]:
        return list(self.habits)

    async def get_logs_in_range(self, start: str, end: str) -> List[DayLog]:
        if self.gate is not None:
            await self.gate.wait()
        return [log for day, log in sorted(self.logs.items()) if start <= day <= end]

    async def upsert_log(self, log: DayLog, fields=None) -> DayLog:
        self._check("upsert_log")
        self.logs[log.date_string] = log
        return log

    async def create_habit(self, habit: HabitIn) -> Habit:
        self._check("create_habit")
        created = Habit(
            id=habit.id or "new",
            title=habit.title,
            target_value=habit.target_value,
            active=habit.active,
            created_at=habit.created_at or datetime(2024, 1, 1),
        )
        self.habits.append(created)
        return created

    async def update_habit(self, habit_id: str, patch: HabitPatch) -> Habit:
        self._check("update_habit")
        for idx, habit in enumerate(self.habits):
            if habit.id == habit_id:
                self.habits[idx] = habit.model_copy(update=patch.model_dump(exclude_unset=True))
                return self.habits[idx]
        raise RecordNotFound(habit_id)

    async def delete_habit(self, habit_id: str) -> None:
        self._check("delete_habit")
        self.habits = [habit for habit in self.habits if habit.id != habit_id]


def _session(clock=lambda: MORNING, **kwargs) -> DashboardSession:
    session = DashboardSession(FakeStore, ZONE, clock=clock, **kwargs)
    session.switch_user(USER)
    asyncio.run(session.load_habits())
    return session


def test_today_follows_the_zone():
    assert _session().today == "2024-03-10"


def test_reads_without_a_user_are_noops():
    session = DashboardSession(FakeStore, ZONE, clock=lambda: MORNING)
    assert asyncio.run(session.load_habits()) is False
    assert asyncio.run(session.refresh_analytics()) is False
    with pytest.raises(StoreWriteError):
        asyncio.run(session.save_journal(Mood.happy, "hi"))


def test_fetch_for_a_previous_user_is_discarded():
    session = _session()
    old_store = session.store
    old_store.logs["2024-03-10"] = make_log("2024-03-10", {"read": "done"})
    old_store.gate = asyncio.Event()

    async def scenario():
        pending = asyncio.ensure_future(session.refresh_analytics())
        await asyncio.sleep(0)
        session.switch_user("user-2")
        old_store.gate.set()
        return await pending

    assert asyncio.run(scenario()) is False
    assert len(session.analytics_logs) == 0
    assert session.user_id == "user-2"


def test_save_statuses_fills_unlisted_habits_and_updates_views():
    session = _session()
    saved = asyncio.run(session.save_statuses("2024-03-10", {"read": Status.done}))

    assert saved.habit_status["walk"].status == Status.none
    overview = session.day_overview()
    assert overview.done_count == 1
    assert overview.remaining_count == 1
    assert session.snapshot().today.progress_percent == 50


def test_save_journal_trims_the_note():
    session = _session()
    saved = asyncio.run(session.save_journal(Mood.rest, "  slept in  "))
    assert saved.note == "slept in"
    assert saved.date_string == "2024-03-10"


def test_toggle_creates_a_habit_missing_remotely():
    session = _session()
    session.store.habits = [make_habit("walk")]

    updated = asyncio.run(session.toggle_active("read"))

    assert updated.id == "read"
    assert updated.active is False
    assert session.store.calls == ["update_habit", "create_habit"]
    assert session.habits[0].active is False


def test_toggle_rolls_back_on_failure():
    session = _session()
    session.store.fail["update_habit"] = StoreWriteError("down")

    with pytest.raises(StoreWriteError):
        asyncio.run(session.toggle_active("read"))

    assert session.habits[0].active is True


def test_edit_validates_and_rolls_back():
    session = _session()
    with pytest.raises(ValueError):
        asyncio.run(session.edit_habit("read", "   ", 1))
    with pytest.raises(ValueError):
        asyncio.run(session.edit_habit("read", "Read", 0))

    session.store.fail["update_habit"] = StoreWriteError("down")
    with pytest.raises(StoreWriteError):
        asyncio.run(session.edit_habit("read", "Read more", 2))
    assert session.habits[0].title == "Read"


def test_failed_delete_restores_position():
    session = _session()
    session.store.fail["delete_habit"] = StoreWriteError("down")

    with pytest.raises(StoreWriteError):
        asyncio.run(session.delete_habit("read"))

    assert [habit.id for habit in session.habits] == ["read", "walk"]


def test_delete_removes_the_habit():
    session = _session()
    asyncio.run(session.delete_habit("read"))
    assert [habit.id for habit in session.habits] == ["walk"]


def test_day_rollover_refreshes_analytics():
    now = [MORNING]
    session = _session(clock=lambda: now[0])
    session.store.logs["2024-03-11"] = make_log("2024-03-11", {"read": "done"})

    assert asyncio.run(session.tick_today()) is False
    now[0] = datetime(2024, 3, 10, 18, 30, tzinfo=timezone.utc)
    assert asyncio.run(session.tick_today()) is True

    assert session.today == "2024-03-11"
    assert session.analytics_logs.get("2024-03-11") is not None


def test_challenge_flow_persists_and_expires(tmp_path):
    now = [MORNING]
    slot = ChallengeSlot(LocalStateFile(tmp_path / "state.json"))
    session = _session(clock=lambda: now[0], challenge_slot=slot)

    session.start_challenge("read", 1, 30)
    session.mark_challenge_complete()
    assert session.tick_challenge() == "15:00:00"
    assert slot.load().daily == {"2024-03-10": 30}

    with pytest.raises(ChallengeError):
        session.start_challenge("walk", 1, 30)

    now[0] = datetime(2024, 3, 10, 18, 15, tzinfo=timezone.utc)
    assert session.tick_challenge() == "00:00:00"
    assert session.challenge.status == ChallengeStatus.completed
    assert slot.load().status == ChallengeStatus.completed

    session.reset_challenge()
    assert slot.load() is None


def test_clocks_start_and_stop():
    session = _session()

    async def scenario():
        session.start_clocks(today_interval=60, challenge_interval=60)
        await asyncio.sleep(0.05)
        running = {name: task.running for name, task in session.clocks.items()}
        await session.stop_clocks()
        return running

    assert asyncio.run(scenario()) == {"today-clock": True, "challenge-clock": True}
    assert session.clocks == {}


def test_session_over_the_real_store(session_factory):
    session = DashboardSession(lambda user_id: HabitStore(user_id, session_factory), ZONE, clock=lambda: MORNING)
    session.switch_user(USER)

    assert asyncio.run(session.load_habits()) is True
    assert len(session.habits) == 8

    first = session.habits[0].id
    asyncio.run(session.save_statuses("2024-03-10", {first: Status.done}))
    assert asyncio.run(session.refresh_month(2024, 3)) is True
    assert session.month_view(2024, 3).cells[9].percent == 12.5
