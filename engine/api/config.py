from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass
class EngineConfig:
    screen_size: Tuple[int, int]
    fps: int = 60
    mirror: bool = False
    fullscreen: bool = False
    # merged over the manifest's `options:` block
    option_overrides: Dict[str, Any] = field(default_factory=dict)
