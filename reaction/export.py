"""
JSON export of trial results.

The file is a bare JSON array, one object per record:

    [{"timestamp": "2024-05-01 14:03:22", "reactionTimeMs": 251.37,
      "stimulusLabel": "Green", "ignored": false}, ...]

Timestamps are local time with second precision.
"""
from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Union

from reaction.results import TrialRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_EXPORT_NAME = "ReactionData.json"
DEFAULT_EXPORT_DIR = Path(__file__).resolve().parents[1] / "runtime" / "exports"

FIELDS = ("timestamp", "reactionTimeMs", "stimulusLabel", "ignored")

Destination = Union[str, Path, BinaryIO]


@dataclass
class ExportResult:
    ok: bool
    destination: str
    count: int
    error: Optional[str] = None


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone()  # to local time
    return ts.strftime(TIMESTAMP_FORMAT)


def record_to_dict(record: TrialRecord) -> dict:
    return {
        "timestamp": _format_timestamp(record.timestamp),
        "reactionTimeMs": float(record.reaction_time_ms),
        "stimulusLabel": record.stimulus_label,
        "ignored": bool(record.ignored),
    }


def serialize(records: Iterable[TrialRecord]) -> bytes:
    payload = [record_to_dict(r) for r in records]
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def parse(data: Union[bytes, str]) -> List[TrialRecord]:
    """Inverse of serialize(). Raises ValueError on anything malformed."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    items = json.loads(data)
    if not isinstance(items, list):
        raise ValueError("export document must be a JSON array")

    records: List[TrialRecord] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or set(item) != set(FIELDS):
            raise ValueError(f"entry {i}: expected exactly the keys {FIELDS}")
        rt = item["reactionTimeMs"]
        if isinstance(rt, bool) or not isinstance(rt, (int, float)):
            raise ValueError(f"entry {i}: reactionTimeMs must be a number")
        if not isinstance(item["ignored"], bool):
            raise ValueError(f"entry {i}: ignored must be a boolean")
        if not isinstance(item["timestamp"], str):
            raise ValueError(f"entry {i}: timestamp must be a string")
        if not isinstance(item["stimulusLabel"], str):
            raise ValueError(f"entry {i}: stimulusLabel must be a string")
        records.append(TrialRecord(
            timestamp=datetime.strptime(item["timestamp"], TIMESTAMP_FORMAT),
            reaction_time_ms=float(rt),
            stimulus_label=item["stimulusLabel"],
            ignored=item["ignored"],
        ))
    return records


def default_destination() -> Path:
    return DEFAULT_EXPORT_DIR / DEFAULT_EXPORT_NAME


def export_to_destination(records: Iterable[TrialRecord], destination: Destination) -> ExportResult:
    """
    Write serialized records to a file path or a writable binary stream.
    Failures are logged and reported in the result, never raised.
    """
    records = list(records)
    data = serialize(records)

    if isinstance(destination, (str, Path)):
        path = Path(destination)
        name = str(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error("Failed to save data to %s: %s", name, e)
            return ExportResult(ok=False, destination=name, count=0, error=str(e))
    else:
        name = getattr(destination, "name", repr(destination))
        try:
            destination.write(data)
            destination.flush()
        except OSError as e:
            logger.error("Failed to save data to %s: %s", name, e)
            return ExportResult(ok=False, destination=str(name), count=0, error=str(e))

    logger.info("Data saved to %s (%d records)", name, len(records))
    return ExportResult(ok=True, destination=str(name), count=len(records))
