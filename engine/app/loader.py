from __future__ import annotations
import importlib.util
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

logger = logging.getLogger(__name__)

GAMES_DIR = Path(__file__).resolve().parents[2] / "games"


@dataclass
class GameManifest:
    id: str
    title: str
    options: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "GameManifest":
        merged = dict(self.options)
        merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
        return GameManifest(id=self.id, title=self.title, options=merged, raw=self.raw)

    def as_dict(self) -> Dict[str, Any]:
        d = dict(self.raw)
        d.update(id=self.id, title=self.title, options=dict(self.options))
        return d


def load_game_manifest(game_root: Path) -> GameManifest:
    manifest = game_root / "manifest.yaml"
    if not manifest.exists():
        raise FileNotFoundError(f"Missing manifest.yaml in {game_root}")
    with open(manifest, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{manifest} must contain a mapping")
    options = data.get("options") or {}
    if not isinstance(options, dict):
        raise ValueError(f"{manifest}: 'options' must be a mapping")
    return GameManifest(
        id=str(data.get("id", game_root.name)),
        title=str(data.get("title", game_root.name)),
        options=options,
        raw=data,
    )


def load_game_module(game_root: Path):
    """
    Loads games/<id>/main.py module and returns the module object.
    The file must define a get_game() -> Game factory.
    """
    main_py = game_root / "main.py"
    if not main_py.exists():
        raise FileNotFoundError(f"Missing main.py in {game_root}")
    spec = importlib.util.spec_from_file_location(
        f"games.{game_root.name.replace('-', '_')}.main", main_py)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load {main_py}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    if not hasattr(module, "get_game"):
        raise AttributeError("Game module must define get_game()")
    logger.debug("loaded game module %s", main_py)
    return module
