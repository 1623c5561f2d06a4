import json

import pytest

import main
from app.config import settings


@pytest.fixture(autouse=True)
def local_state(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOCAL_STATE_PATH", str(tmp_path / "state.json"))
    monkeypatch.setattr(settings, "DASHBOARD_USER_ID", "")


def test_user_is_required(capsys):
    assert main.run(["challenge", "status"]) == 2
    assert json.loads(capsys.readouterr().out)["ok"] is False


def test_status_without_challenge(capsys):
    assert main.run(["--user", "u1", "challenge", "status"]) == 0
    assert json.loads(capsys.readouterr().out) == {"ok": True, "challenge": None}


def test_logging_without_challenge_fails(capsys):
    assert main.run(["--user", "u1", "challenge", "log", "15"]) == 1
    assert json.loads(capsys.readouterr().out)["error"] == "No challenge is running."
