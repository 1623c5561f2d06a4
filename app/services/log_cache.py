from typing import Dict, Iterable, List, Optional

from app.schemas.log import DayLog


class LogCache:
    """In-memory sparse ``date -> DayLog`` snapshot.

    Range reads are applied against a sequence token taken when the read
    started. Any date written locally after that token keeps its local value,
    so a slow read cannot clobber a newer write to the same date.
    """

    def __init__(self) -> None:
        self._logs: Dict[str, DayLog] = {}
        self._written_at: Dict[str, int] = {}
        self._seq = 0

    def begin_read(self) -> int:
        return self._seq

    def apply_read(self, logs: Iterable[DayLog], token: int) -> None:
        fresh: Dict[str, DayLog] = {log.date_string: log for log in logs}
        for date_string, seq in self._written_at.items():
            if seq > token and date_string in self._logs:
                fresh[date_string] = self._logs[date_string]
        self._logs = fresh

    def record_write(self, log: DayLog) -> None:
        self._seq += 1
        self._written_at[log.date_string] = self._seq
        logs = dict(self._logs)
        logs[log.date_string] = log
        self._logs = logs

    def clear(self) -> None:
        self._logs = {}
        self._written_at = {}

    def get(self, date_string: str) -> Optional[DayLog]:
        return self._logs.get(date_string)

    def snapshot(self) -> Dict[str, DayLog]:
        return dict(self._logs)

    def dates(self) -> List[str]:
        return sorted(self._logs)

    def __len__(self) -> int:
        return len(self._logs)
