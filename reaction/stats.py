from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import numpy as np

from reaction.results import TrialRecord


@dataclass
class SessionSummary:
    count: int
    mean_ms: Optional[float] = None
    median_ms: Optional[float] = None
    std_ms: Optional[float] = None
    best_ms: Optional[float] = None


def summarize(records: Iterable[TrialRecord]) -> SessionSummary:
    """
    Summary statistics over the given records. Pass store.exportable() to
    leave ignored trials out. std is the population standard deviation.
    """
    times = np.array([r.reaction_time_ms for r in records], dtype=float)
    if times.size == 0:
        return SessionSummary(count=0)
    return SessionSummary(
        count=int(times.size),
        mean_ms=float(np.mean(times)),
        median_ms=float(np.median(times)),
        std_ms=float(np.std(times)),
        best_ms=float(np.min(times)),
    )


def summarize_by_stimulus(records: Iterable[TrialRecord]) -> Dict[str, SessionSummary]:
    groups: Dict[str, list] = {}
    for r in records:
        groups.setdefault(r.stimulus_label, []).append(r)
    return {label: summarize(rs) for label, rs in groups.items()}
