"""
Game session module.

Binds a board to a store: reloads the last unfinished game when a
session starts and saves it once when the session ends.
"""
import logging
from typing import Callable, Optional, Union

from .board import Board, BoardConfig, CellAction, Stage, now_ms
from .settings import SessionSettings
from .snapshot import Snapshot
from .storage import KeyValueStore


logger = logging.getLogger(__name__)

LAST_STATE_KEY = "minesweeper-last-state"


class GameSession:
    """
    A player's session around one board.

    The session owns the store interaction; the board itself never
    touches storage.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[SessionSettings] = None,
        last_state_key: str = LAST_STATE_KEY,
        seed: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """
        Initialize the session with a fresh board.

        Args:
            store: Where the last unfinished game is kept.
            settings: Session settings (default: SessionSettings()).
            last_state_key: Store key of the saved game.
            seed: Random seed for mine placement.
            clock: Millisecond clock, injectable for tests.
        """
        self.store = store
        self.settings = settings or SessionSettings()
        self.last_state_key = last_state_key
        self.board = Board(self.settings.board_config(), seed=seed, clock=clock)
        self._saved = False

    @property
    def stage(self) -> Stage:
        """Stage of the current game."""
        return self.board.stage

    @property
    def remaining_mines(self) -> int:
        """Mine counter shown to the player."""
        return self.board.remaining_mines

    @property
    def timer_ms(self) -> int:
        """Displayed time: zero before the first action."""
        if self.board.is_ready:
            return 0
        return self.board.elapsed_ms()

    def try_reload(self) -> bool:
        """
        Resume the saved game, if any.

        The saved state is removed whether or not it could be used.

        Returns:
            True if a game was restored.
        """
        try:
            data = self.store.get(self.last_state_key)
            if not data:
                return False
            snapshot = Snapshot.from_dict(data)
            if snapshot is None or snapshot.is_empty:
                logger.warning("Discarding malformed saved game")
                return False
            config = BoardConfig(
                snapshot.width, snapshot.height, snapshot.num_mines
            )
            self.board.init(config, restore=snapshot)
            return self.board.is_playing
        except ValueError as e:
            logger.error("Could not reload saved game: %s", e)
            return False
        finally:
            self.store.remove(self.last_state_key)

    def save_on_exit(self) -> bool:
        """
        Save the game if it is still in progress.

        Only the first call per session has an effect.

        Returns:
            True if a snapshot was written.
        """
        if self._saved:
            return False
        self._saved = True
        if not self.settings.auto_save or not self.board.is_playing:
            return False
        self.store.set(self.last_state_key, self.board.dump().to_dict())
        return True

    def new_game(self, config: Optional[BoardConfig] = None) -> None:
        """
        Start a fresh game (new mines on the first action).

        Args:
            config: Board configuration (default: the current board's,
                so a resumed or custom-sized game keeps its size).
        """
        self.board.init(config or self.board.config)

    def restart(self) -> None:
        """Replay the current layout from the beginning."""
        self.board.restart()

    def operate(self, index: int, action: Union[CellAction, str]) -> bool:
        """Apply an action using the session's open-around preference."""
        return self.board.operate(
            index, action, allow_open_around=self.settings.allow_open_around
        )
