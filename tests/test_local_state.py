from app.schemas.challenge import ChallengeStatus
from app.services import challenge
from app.services.local_state import ChallengeSlot, LocalStateFile
from conftest import make_habit


def test_challenge_survives_a_reload(tmp_path):
    path = tmp_path / "state.json"
    state = challenge.start_challenge(None, make_habit("read"), 3, 30, "2024-03-01")
    state = challenge.log_minutes(state, "2024-03-01", 45)

    ChallengeSlot(LocalStateFile(path)).save(state)
    loaded = ChallengeSlot(LocalStateFile(path)).load()

    assert loaded == state
    assert loaded.status == ChallengeStatus.active


def test_clear_removes_only_the_challenge(tmp_path):
    state_file = LocalStateFile(tmp_path / "state.json")
    state_file.set("theme", "dark")
    slot = ChallengeSlot(state_file)
    slot.save(challenge.start_challenge(None, make_habit("read"), 3, 30, "2024-03-01"))

    slot.save(None)

    assert slot.load() is None
    assert state_file.get("theme") == "dark"


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    assert ChallengeSlot(LocalStateFile(path)).load() is None


def test_malformed_challenge_is_ignored(tmp_path):
    state_file = LocalStateFile(tmp_path / "state.json")
    state_file.set("habit_challenge_v1", {"habit_id": "read", "duration_days": -1})
    assert ChallengeSlot(state_file).load() is None
