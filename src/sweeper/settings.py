"""
Player settings for game sessions.

Settings are stored as a dictionary in a key-value store and merged over
the defaults on load, so older stored settings pick up new fields.
"""
import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from .board import DIFFICULTIES, BoardConfig
from .storage import KeyValueStore


logger = logging.getLogger(__name__)

SETTINGS_KEY = "minesweeper-settings"
CUSTOM = "custom"


# ============================================================================
# Settings Data Class
# ============================================================================

@dataclass
class SessionSettings:
    """
    Options for a game session.

    Attributes:
        difficulty: Preset name or "custom".
        width: Columns for a custom board.
        height: Rows for a custom board.
        num_mines: Mines for a custom board.
        allow_open_around: Let a no-op open or flag act as open-around.
        auto_save: Save an unfinished game when the session ends.
    """

    difficulty: str = "beginner"
    width: int = 9
    height: int = 9
    num_mines: int = 10
    allow_open_around: bool = False
    auto_save: bool = True

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.difficulty != CUSTOM and self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {self.difficulty!r}")
        self.board_config()

    def board_config(self) -> BoardConfig:
        """Resolve the difficulty to a board configuration."""
        if self.difficulty == CUSTOM:
            return BoardConfig(self.width, self.height, self.num_mines)
        return DIFFICULTIES[self.difficulty]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored dictionary layout."""
        return asdict(self)


# ============================================================================
# Store Helpers
# ============================================================================

def _merge(base: SessionSettings, values: Dict[str, Any]) -> SessionSettings:
    """Overlay known, correctly typed values onto base settings."""
    merged = base.to_dict()
    for f in fields(SessionSettings):
        if f.name not in values:
            continue
        value = values[f.name]
        default = merged[f.name]
        if type(value) is not type(default):
            logger.warning("Ignoring setting %s=%r", f.name, value)
            continue
        merged[f.name] = value
    return SessionSettings(**merged)


def load_settings(
    store: KeyValueStore, key: str = SETTINGS_KEY
) -> SessionSettings:
    """
    Load settings from a store.

    Stored values override the defaults; missing, unknown or invalid
    values fall back to the defaults.
    """
    stored = store.get(key)
    if not stored:
        return SessionSettings()
    try:
        return _merge(SessionSettings(), stored)
    except ValueError as e:
        logger.warning("Stored settings rejected, using defaults: %s", e)
        return SessionSettings()


def update_settings(
    store: KeyValueStore, key: str = SETTINGS_KEY, **changes: Any
) -> SessionSettings:
    """Apply changes to the stored settings and persist them."""
    unknown = set(changes) - {f.name for f in fields(SessionSettings)}
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    settings = SessionSettings(**{**load_settings(store, key).to_dict(), **changes})
    store.set(key, settings.to_dict())
    return settings


def reset_settings(
    store: KeyValueStore, key: str = SETTINGS_KEY
) -> SessionSettings:
    """Restore and persist the default settings."""
    settings = SessionSettings()
    store.set(key, settings.to_dict())
    return settings
