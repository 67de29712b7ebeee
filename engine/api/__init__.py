from .game_base import Game
from .frame_data import FrameData, Tap
from .config import EngineConfig

__all__ = ["Game", "FrameData", "Tap", "EngineConfig"]
