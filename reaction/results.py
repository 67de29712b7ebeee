from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TrialRecord:
    timestamp: datetime       # when the stimulus appeared (wall clock)
    reaction_time_ms: float
    stimulus_label: str
    ignored: bool = False

    def __post_init__(self):
        if self.reaction_time_ms < 0:
            raise ValueError(
                f"reaction_time_ms must be >= 0, got {self.reaction_time_ms}")


class ResultStore:
    """
    Append-only, insertion-ordered list of TrialRecords for one session.
    Records are never removed; "ignored" only hides them from export.
    """

    def __init__(self):
        self._records: List[TrialRecord] = []

    def append(self, record: TrialRecord) -> None:
        self._records.append(record)
        logger.info("stored trial #%d: %.2f ms (%s)", len(self._records),
                    record.reaction_time_ms, record.stimulus_label)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TrialRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> TrialRecord:
        return self._records[index]

    @property
    def last(self) -> Optional[TrialRecord]:
        return self._records[-1] if self._records else None

    def exportable(self) -> Iterator[TrialRecord]:
        return (r for r in self._records if not r.ignored)

    def mark_last_ignored(self, record: Optional[TrialRecord] = None) -> bool:
        """
        Flag the most recent record as ignored. When `record` is given it must
        be that most recent record, otherwise nothing changes.
        """
        last = self.last
        if last is None or last.ignored:
            return False
        if record is not None and record is not last:
            return False
        last.ignored = True
        logger.info("trial #%d marked ignored", len(self._records))
        return True
