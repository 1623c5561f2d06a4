import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

from app.config import settings
from app.schemas.challenge import ChallengeState
from app.services.challenge import ChallengeError, countdown, format_countdown
from app.services.local_state import ChallengeSlot, LocalStateFile
from app.services.session import DashboardSession
from app.services.store import HabitStore

logger = logging.getLogger("habit_dashboard")


def _print_json(obj: Any) -> None:
    json.dump(obj, sys.stdout, ensure_ascii=False, indent=2, default=str)
    sys.stdout.write("\n")


def build_session(user_id: str) -> DashboardSession:
    session = DashboardSession(
        store_factory=HabitStore,
        zone=settings.TIME_ZONE,
        window_days=settings.ANALYTICS_WINDOW_DAYS,
        fetch_days=settings.ANALYTICS_FETCH_DAYS,
        challenge_slot=ChallengeSlot(LocalStateFile(settings.LOCAL_STATE_PATH)),
    )
    session.switch_user(user_id)
    return session


def _challenge_view(session: DashboardSession) -> Optional[dict]:
    state: Optional[ChallengeState] = session.challenge
    if state is None:
        return None
    data = state.model_dump(mode="json")
    data["countdown"] = format_countdown(countdown(state, session.clock(), session.zone))
    return data


async def cmd_summary(session: DashboardSession, args: argparse.Namespace) -> None:
    await session.load_habits()
    await session.refresh_analytics()
    _print_json(session.snapshot().model_dump(mode="json"))


async def cmd_challenge(session: DashboardSession, args: argparse.Namespace) -> None:
    session.tick_challenge()
    action = args.action
    if action == "start":
        await session.load_habits()
        session.start_challenge(args.habit, args.days, args.minutes)
    elif action == "log":
        session.log_challenge_minutes(args.minutes, args.date)
    elif action == "complete":
        session.mark_challenge_complete(args.date)
    elif action == "not-complete":
        session.mark_challenge_not_complete(args.date)
    elif action == "reset":
        session.reset_challenge()
    _print_json({"ok": True, "challenge": _challenge_view(session)})


async def cmd_watch(session: DashboardSession, args: argparse.Namespace) -> None:
    await session.load_habits()
    await session.refresh_analytics()
    session.start_clocks(settings.TODAY_TICK_SECONDS, settings.CHALLENGE_TICK_SECONDS)
    logger.info("Watching dashboard for %s (today %s, %s)", session.user_id, session.today, session.zone)
    try:
        while True:
            await asyncio.sleep(60)
            snapshot = session.snapshot()
            logger.info(
                "today %s: %s/%s done, challenge %s",
                snapshot.reference_date,
                snapshot.today.done_count,
                len(session.habits),
                session.countdown_text if session.challenge else "none",
            )
    finally:
        await session.stop_clocks()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habit-dashboard")
    parser.add_argument("--user", default=settings.DASHBOARD_USER_ID, help="user id (DASHBOARD_USER_ID)")
    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="print the analytics snapshot")
    summary.set_defaults(handler=cmd_summary)

    watch = sub.add_parser("watch", help="keep the day and challenge clocks running")
    watch.set_defaults(handler=cmd_watch)

    challenge = sub.add_parser("challenge", help="manage the local challenge")
    challenge.set_defaults(handler=cmd_challenge)
    actions = challenge.add_subparsers(dest="action", required=True)

    start = actions.add_parser("start")
    start.add_argument("--habit", required=True)
    start.add_argument("--days", type=int, default=7)
    start.add_argument("--minutes", type=float, default=30)

    log = actions.add_parser("log")
    log.add_argument("minutes", type=float)
    log.add_argument("--date")

    for name in ("complete", "not-complete"):
        action = actions.add_parser(name)
        action.add_argument("--date")

    actions.add_parser("status")
    actions.add_parser("reset")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    if not args.user:
        _print_json({"ok": False, "error": "user id required (--user or DASHBOARD_USER_ID)"})
        return 2

    session = build_session(args.user)
    try:
        asyncio.run(args.handler(session, args))
    except ChallengeError as exc:
        _print_json({"ok": False, "error": str(exc)})
        return 1
    except KeyboardInterrupt:
        logger.info("Stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
