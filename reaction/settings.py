from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from reaction.export import default_destination
from reaction.trial import DEFAULT_DELAY_RANGE, DEFAULT_STIMULI, Stimulus


def _parse_color(label: str, value: Any) -> Tuple[int, int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"stimulus {label!r}: color must be [r, g, b]")
    rgb = []
    for c in value:
        if isinstance(c, bool) or not isinstance(c, int) or not 0 <= c <= 255:
            raise ValueError(f"stimulus {label!r}: color channels must be ints 0-255")
        rgb.append(c)
    return tuple(rgb)  # type: ignore[return-value]


@dataclass
class TrialSettings:
    delay_min_sec: float = DEFAULT_DELAY_RANGE[0]
    delay_max_sec: float = DEFAULT_DELAY_RANGE[1]
    stimuli: Tuple[Stimulus, ...] = DEFAULT_STIMULI
    export_path: Path = field(default_factory=default_destination)

    @property
    def delay_range(self) -> Tuple[float, float]:
        return (self.delay_min_sec, self.delay_max_sec)

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]]) -> "TrialSettings":
        """
        Build from the `options:` block of a game manifest, e.g.

            options:
              delay_min_sec: 2.0
              delay_max_sec: 6.0
              export_path: runtime/exports/ReactionData.json
              stimuli:
                - {label: Red, color: [255, 59, 48]}
        """
        options = options or {}
        lo = float(options.get("delay_min_sec", DEFAULT_DELAY_RANGE[0]))
        hi = float(options.get("delay_max_sec", DEFAULT_DELAY_RANGE[1]))
        if lo < 0:
            raise ValueError(f"delay_min_sec must be >= 0, got {lo}")
        if lo > hi:
            raise ValueError(f"delay_min_sec ({lo}) is greater than delay_max_sec ({hi})")

        stimuli = DEFAULT_STIMULI
        if "stimuli" in options:
            raw = options["stimuli"] or []
            if not raw:
                raise ValueError("at least one stimulus is required")
            parsed = []
            for entry in raw:
                if not isinstance(entry, dict):
                    raise ValueError(f"stimulus entry {entry!r} must be a mapping with label and color")
                label = str(entry.get("label", "")).strip()
                if not label:
                    raise ValueError("every stimulus needs a label")
                parsed.append(Stimulus(label, _parse_color(label, entry.get("color"))))
            stimuli = tuple(parsed)

        export_path = options.get("export_path")
        return cls(
            delay_min_sec=lo,
            delay_max_sec=hi,
            stimuli=stimuli,
            export_path=Path(export_path) if export_path else default_destination(),
        )
