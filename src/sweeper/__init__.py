"""
Minesweeper board engine.

Provides the board state machine, snapshot persistence, game sessions
and a Gymnasium environment.
"""
from .cell import Cell, CellBit
from .board import (
    Board,
    BoardConfig,
    CellAction,
    Stage,
    Timer,
    BEGINNER,
    INTERMEDIATE,
    EXPERT,
    DIFFICULTIES,
)
from .snapshot import Snapshot
from .storage import KeyValueStore, MemoryStore, JsonFileStore
from .settings import SessionSettings, load_settings, update_settings, reset_settings
from .session import GameSession
from .environment import MinesweeperEnv, make_vec_env
from .utils import format_counter, render_text

__all__ = [
    "Cell",
    "CellBit",
    "Board",
    "BoardConfig",
    "CellAction",
    "Stage",
    "Timer",
    "BEGINNER",
    "INTERMEDIATE",
    "EXPERT",
    "DIFFICULTIES",
    "Snapshot",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "SessionSettings",
    "load_settings",
    "update_settings",
    "reset_settings",
    "GameSession",
    "MinesweeperEnv",
    "make_vec_env",
    "format_counter",
    "render_text",
]
