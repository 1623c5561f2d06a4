"""Client-side dashboard state for one signed-in user.

``DashboardSession`` owns the cached habits and day logs, the local challenge
slot and the two clocks (today rollover and challenge countdown). Derived
views are always recomputed from the cached snapshot via
:mod:`app.services.analytics`.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional

from app.schemas.analytics import AnalyticsSnapshot, MonthCalendar, TodayOverview
from app.schemas.challenge import ChallengeState
from app.schemas.habit import Habit, HabitIn, HabitPatch
from app.schemas.log import DayLog, Mood, Status
from app.services import analytics, challenge as challenge_rules
from app.services.dates import add_days, month_bounds, today_in_zone
from app.services.local_state import ChallengeSlot
from app.services.log_cache import LogCache
from app.services.status import build_status_entry
from app.services.store import HabitStore, RecordNotFound, StoreWriteError
from app.services.ticker import PeriodicTask

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardSession:
    def __init__(
        self,
        store_factory: Callable[[str], HabitStore],
        zone: str,
        window_days: int = analytics.DEFAULT_WINDOW_DAYS,
        fetch_days: int = 90,
        challenge_slot: Optional[ChallengeSlot] = None,
        clock: Clock = _utcnow,
    ):
        self.store_factory = store_factory
        self.zone = zone
        self.window_days = window_days
        self.fetch_days = fetch_days
        self.challenge_slot = challenge_slot
        self.clock = clock

        self.user_id: Optional[str] = None
        self.store: Optional[HabitStore] = None
        self.habits: List[Habit] = []
        self.month_logs = LogCache()
        self.analytics_logs = LogCache()
        self.today = today_in_zone(zone, clock())
        self.countdown_text = "00:00:00"
        self.challenge: Optional[ChallengeState] = challenge_slot.load() if challenge_slot else None

        self._generation = 0
        self._tasks: List[PeriodicTask] = []

    # -- user context ---------------------------------------------------------

    def switch_user(self, user_id: Optional[str]) -> None:
        """Point the session at another user; in-flight fetches for the old one are dropped."""
        self._generation += 1
        self.user_id = user_id
        self.store = self.store_factory(user_id) if user_id else None
        self.habits = []
        self.month_logs.clear()
        self.analytics_logs.clear()

    def _require_store(self) -> HabitStore:
        if self.store is None:
            raise StoreWriteError("Please login first.")
        return self.store

    # -- reads ----------------------------------------------------------------

    async def load_habits(self, seed_if_empty: bool = True) -> bool:
        if self.store is None:
            return False
        store, generation = self.store, self._generation
        if seed_if_empty:
            try:
                await store.seed_default_habits_if_empty()
            except StoreWriteError:
                logger.warning("Seeding default habits for %s failed", store.user_id)
        habits = await store.list_habits()
        if generation != self._generation:
            return False
        self.habits = habits
        return True

    async def _refresh(self, cache: LogCache, start: str, end: str) -> bool:
        if self.store is None:
            return False
        store, generation = self.store, self._generation
        token = cache.begin_read()
        logs = await store.get_logs_in_range(start, end)
        if generation != self._generation:
            logger.debug("Discarding logs %s..%s fetched for a previous user", start, end)
            return False
        cache.apply_read(logs, token)
        return True

    async def refresh_month(self, year: int, month: int) -> bool:
        start, end = month_bounds(year, month)
        return await self._refresh(self.month_logs, start, end)

    async def refresh_analytics(self) -> bool:
        start = add_days(self.today, -(self.fetch_days - 1))
        return await self._refresh(self.analytics_logs, start, self.today)

    def cached_log(self, date_string: str) -> Optional[DayLog]:
        return self.month_logs.get(date_string) or self.analytics_logs.get(date_string)

    # -- derived views --------------------------------------------------------

    def snapshot(self) -> AnalyticsSnapshot:
        return analytics.build_snapshot(
            self.habits, self.analytics_logs.snapshot(), self.today, self.zone, self.window_days
        )

    def month_view(self, year: int, month: int) -> MonthCalendar:
        return analytics.month_calendar(self.habits, self.month_logs.snapshot(), year, month, self.zone)

    def day_overview(self, date_string: Optional[str] = None) -> TodayOverview:
        date_string = date_string or self.today
        return analytics.today_overview(self.habits, self.cached_log(date_string), date_string)

    # -- log writes -----------------------------------------------------------

    def _remember(self, log: DayLog) -> None:
        self.month_logs.record_write(log)
        self.analytics_logs.record_write(log)

    async def save_statuses(
        self,
        date_string: str,
        statuses: Mapping[str, Status],
        counts: Optional[Mapping[str, int]] = None,
    ) -> DayLog:
        """Rewrite the whole status map for ``date_string``; unlisted habits become ``none``."""
        store, generation = self._require_store(), self._generation
        counts = counts or {}
        habit_status = {
            habit.id: build_status_entry(habit, statuses.get(habit.id, Status.none), counts.get(habit.id))
            for habit in self.habits
        }
        saved = await store.upsert_log(
            DayLog(date_string=date_string, habit_status=habit_status),
            fields=["habit_status"],
        )
        if generation == self._generation:
            self._remember(saved)
        return saved

    async def save_journal(self, mood: Mood, note: str, date_string: Optional[str] = None) -> DayLog:
        store, generation = self._require_store(), self._generation
        date_string = date_string or self.today
        saved = await store.upsert_log(
            DayLog(date_string=date_string, mood=mood, note=note.strip()),
            fields=["mood", "note"],
        )
        if generation == self._generation:
            self._remember(saved)
        return saved

    # -- habit writes (optimistic, rolled back on failure) --------------------

    def _index_of(self, habit_id: str) -> int:
        for idx, habit in enumerate(self.habits):
            if habit.id == habit_id:
                return idx
        raise RecordNotFound(f"habit {habit_id} not found")

    def _replace(self, habit: Habit) -> None:
        try:
            idx = self._index_of(habit.id)
        except RecordNotFound:
            return
        habits = list(self.habits)
        habits[idx] = habit
        self.habits = habits

    async def create_habit(self, habit: HabitIn) -> Habit:
        store = self._require_store()
        created = await store.create_habit(habit)
        self.habits = [h for h in self.habits if h.id != created.id] + [created]
        await self.load_habits(seed_if_empty=False)
        return created

    async def toggle_active(self, habit_id: str) -> Habit:
        store = self._require_store()
        previous = self.habits[self._index_of(habit_id)]
        optimistic = previous.model_copy(update={"active": not previous.active})
        self._replace(optimistic)

        try:
            updated = await store.update_habit(habit_id, HabitPatch(active=optimistic.active))
        except RecordNotFound:
            logger.info("Habit %s missing remotely, creating it", habit_id)
            try:
                updated = await store.create_habit(
                    HabitIn(
                        id=previous.id,
                        title=previous.title,
                        category=previous.category,
                        target_type=previous.target_type,
                        target_value=previous.target_value,
                        active=optimistic.active,
                        created_at=_utcnow().replace(tzinfo=None),
                    )
                )
            except StoreWriteError:
                self._replace(previous)
                raise
        except StoreWriteError:
            self._replace(previous)
            raise

        self._replace(updated)
        return updated

    async def edit_habit(self, habit_id: str, title: str, target_value: float) -> Habit:
        title = title.strip()
        if not title:
            raise ValueError("Habit name required.")
        if target_value <= 0:
            raise ValueError("Invalid target.")

        store = self._require_store()
        previous = self.habits[self._index_of(habit_id)]
        self._replace(previous.model_copy(update={"title": title, "target_value": target_value}))
        try:
            updated = await store.update_habit(habit_id, HabitPatch(title=title, target_value=target_value))
        except StoreWriteError:
            self._replace(previous)
            raise
        self._replace(updated)
        return updated

    async def delete_habit(self, habit_id: str) -> None:
        store = self._require_store()
        idx = self._index_of(habit_id)
        previous = self.habits[idx]
        self.habits = self.habits[:idx] + self.habits[idx + 1 :]
        try:
            await store.delete_habit(habit_id)
        except StoreWriteError:
            habits = list(self.habits)
            habits.insert(min(idx, len(habits)), previous)
            self.habits = habits
            raise

    # -- challenge ------------------------------------------------------------

    def _set_challenge(self, state: Optional[ChallengeState]) -> Optional[ChallengeState]:
        self.challenge = state
        if self.challenge_slot is not None:
            self.challenge_slot.save(state)
        return state

    def _habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def start_challenge(self, habit_id: str, duration_days: int, target_minutes: float) -> ChallengeState:
        state = challenge_rules.start_challenge(
            self.challenge, self._habit(habit_id), duration_days, target_minutes, self.today
        )
        return self._set_challenge(state)

    def log_challenge_minutes(self, minutes: float, date_string: Optional[str] = None) -> ChallengeState:
        return self._set_challenge(challenge_rules.log_minutes(self.challenge, date_string or self.today, minutes))

    def mark_challenge_complete(self, date_string: Optional[str] = None) -> ChallengeState:
        return self._set_challenge(challenge_rules.mark_complete(self.challenge, date_string or self.today))

    def mark_challenge_not_complete(self, date_string: Optional[str] = None) -> ChallengeState:
        return self._set_challenge(challenge_rules.mark_not_complete(self.challenge, date_string or self.today))

    def reset_challenge(self) -> None:
        self._set_challenge(None)

    # -- clocks ---------------------------------------------------------------

    async def tick_today(self) -> bool:
        today = today_in_zone(self.zone, self.clock())
        if today == self.today:
            return False
        logger.info("Day rolled over from %s to %s", self.today, today)
        self.today = today
        await self.refresh_analytics()
        return True

    def tick_challenge(self) -> str:
        now = self.clock()
        if self.challenge is not None:
            refreshed = challenge_rules.refresh(self.challenge, now, self.zone)
            if refreshed is not self.challenge:
                logger.info("Challenge for %s is now %s", refreshed.habit_name, refreshed.status.value)
                self._set_challenge(refreshed)
        self.countdown_text = challenge_rules.format_countdown(
            challenge_rules.countdown(self.challenge, now, self.zone)
        )
        return self.countdown_text

    def start_clocks(self, today_interval: float = 60, challenge_interval: float = 1) -> None:
        if self._tasks:
            return
        self._tasks = [
            PeriodicTask("today-clock", today_interval, self.tick_today),
            PeriodicTask("challenge-clock", challenge_interval, self.tick_challenge),
        ]
        for task in self._tasks:
            task.start()

    async def stop_clocks(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            await task.stop()

    @property
    def clocks(self) -> Dict[str, PeriodicTask]:
        return {task.name: task for task in self._tasks}
