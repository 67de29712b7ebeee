from __future__ import annotations
from dataclasses import dataclass, field
from typing import List


@dataclass
class Tap:
    x: float
    y: float
    t: float        # scheduler clock reading when the event was handled
    source: str     # "mouse", "touch" or "key"


@dataclass
class FrameData:
    timestamp: float
    # taps collected since the previous frame, in logical (unmirrored) screen coords
    taps: List[Tap] = field(default_factory=list)
