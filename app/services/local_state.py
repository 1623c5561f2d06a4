import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from app.schemas.challenge import ChallengeState

logger = logging.getLogger(__name__)

CHALLENGE_STORAGE_KEY = "habit_challenge_v1"


class LocalStateFile:
    """Small key/value JSON file standing in for the client's local storage."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            logger.warning("Local state file %s is unreadable, starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Any:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class ChallengeSlot:
    """The one persisted challenge; an absent key means no challenge."""

    def __init__(self, state_file: LocalStateFile, key: str = CHALLENGE_STORAGE_KEY):
        self.state_file = state_file
        self.key = key

    def load(self) -> Optional[ChallengeState]:
        raw = self.state_file.get(self.key)
        if raw is None:
            return None
        try:
            return ChallengeState.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring malformed challenge in %s", self.state_file.path)
            return None

    def save(self, state: Optional[ChallengeState]) -> None:
        if state is None:
            self.clear()
            return
        self.state_file.set(self.key, state.model_dump(mode="json"))

    def clear(self) -> None:
        self.state_file.remove(self.key)
