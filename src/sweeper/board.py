"""
Board module for Minesweeper game.

Implements the board engine: lazy mine placement on the first action,
cascading reveal, flagging, chording, win/lose handling, the play timer
and snapshot dump/restore.
"""
import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

import numpy as np

from .cell import Cell, CellBit
from .snapshot import Snapshot


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class Stage(Enum):
    """Lifecycle of a single game."""

    READY = "ready"
    PLAYING = "playing"
    LOST = "lost"
    WON = "won"


class CellAction(Enum):
    """Player actions on a cell."""

    OPEN = "open"
    FLAG = "flag"
    OPEN_AROUND = "open-around"


NEIGHBOR_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


@dataclass
class BoardConfig:
    """
    Configuration for a Minesweeper board.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        num_mines: Total mines to place.
    """

    width: int = 9
    height: int = 9
    num_mines: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be positive")
        if self.num_mines < 1:
            raise ValueError("Number of mines must be positive")
        max_mines = self.width * self.height - 1
        if self.num_mines > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")

    @property
    def total_cells(self) -> int:
        """Number of cells on the board."""
        return self.width * self.height


# Preset difficulty levels
BEGINNER = BoardConfig(9, 9, 10)
INTERMEDIATE = BoardConfig(16, 16, 40)
EXPERT = BoardConfig(30, 16, 99)

DIFFICULTIES: Dict[str, BoardConfig] = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


def now_ms() -> int:
    """Wall-clock time in milliseconds."""
    return int(time.time() * 1000)


# ============================================================================
# Timer
# ============================================================================

@dataclass
class Timer:
    """
    Play timer.

    Attributes:
        duration: Milliseconds accumulated before start_at.
        start_at: Timestamp (ms) the timer has been running since, or
            None when stopped.
    """

    duration: int = 0
    start_at: Optional[int] = None

    @property
    def running(self) -> bool:
        """Check if the timer is counting."""
        return self.start_at is not None

    def elapsed(self, now: int) -> int:
        """Elapsed milliseconds at time `now`."""
        if self.start_at is None:
            return self.duration
        return self.duration + max(0, now - self.start_at)

    def stop(self, now: int) -> None:
        """Fold the running time into duration."""
        self.duration = self.elapsed(now)
        self.start_at = None


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Minesweeper game board.

    Owns the cells, the mine layout, the flags, the timer and the game
    stage. Cells are addressed by flat index (x + y * width).
    """

    config: BoardConfig = field(default_factory=BoardConfig)
    seed: Optional[int] = None
    clock: Callable[[], int] = field(default=now_ms, repr=False)
    cells: List[Cell] = field(default_factory=list, init=False, repr=False)
    mine_indexes: List[int] = field(default_factory=list, init=False)
    flagged_indexes: Set[int] = field(default_factory=set, init=False)
    timer: Timer = field(default_factory=Timer, init=False)
    stage: Stage = field(default=Stage.READY, init=False)
    _dims: Tuple[int, int] = field(default=(0, 0), init=False, repr=False)
    _unopened_count: int = field(default=0, init=False, repr=False)
    _around_cache: List[Optional[Tuple[int, ...]]] = field(
        default_factory=list, init=False, repr=False
    )

    def __post_init__(self) -> None:
        """Seed the mine RNG and lay out the grid."""
        self._rng = random.Random(self.seed)
        self.init(self.config)

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Snapshot,
        seed: Optional[int] = None,
        clock: Callable[[], int] = now_ms,
    ) -> "Board":
        """Create a board sized by a snapshot and restore it."""
        config = BoardConfig(snapshot.width, snapshot.height, snapshot.num_mines)
        board = cls(config, seed=seed, clock=clock)
        board.init(config, restore=snapshot)
        return board

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def init(
        self,
        config: Optional[BoardConfig] = None,
        restore: Optional[Snapshot] = None,
    ) -> None:
        """
        Start a new game, optionally resuming a dumped one.

        Cells are reallocated only when the dimensions change; otherwise
        they are cleared in place.

        Args:
            config: Board configuration (default: keep the current one).
            restore: Snapshot from `dump()` to replay onto the board.
        """
        config = config or self.config
        dims = (config.width, config.height)
        if dims != self._dims:
            self.cells = [Cell(index) for index in range(config.total_cells)]
            self._around_cache = [None] * config.total_cells
            self._dims = dims
        else:
            for cell in self.cells:
                cell.reset()

        self.config = config
        self._unopened_count = config.total_cells - config.num_mines
        self.mine_indexes.clear()
        self.flagged_indexes.clear()
        self.timer = Timer()
        self.stage = Stage.READY

        if restore is not None and not restore.is_empty:
            self._restore(restore)

    def restart(self) -> None:
        """Cover every cell again, keeping the mine layout."""
        if self.stage is Stage.READY:
            return

        for cell in self.cells:
            cell.cover()

        self.flagged_indexes.clear()
        self._unopened_count = self.config.total_cells - self.config.num_mines
        self.timer = Timer(start_at=self.clock())
        self.stage = Stage.PLAYING

    def dump(self) -> Snapshot:
        """Encode the board as a sparse snapshot."""
        cell_bits = []
        for cell in self.cells:
            bits = cell.to_bits()
            if bits:
                cell_bits.append((cell.index, bits))
        return Snapshot(
            width=self.config.width,
            height=self.config.height,
            num_mines=self.config.num_mines,
            cell_bits=cell_bits,
            duration=self.elapsed_ms(),
        )

    def _restore(self, snapshot: Snapshot) -> None:
        """Replay snapshot bits onto freshly reset cells."""
        expected = (self.config.width, self.config.height, self.config.num_mines)
        actual = (snapshot.width, snapshot.height, snapshot.num_mines)
        if actual != expected:
            logger.warning(
                "Ignoring snapshot for %dx%d/%d on a %dx%d/%d board",
                *actual, *expected,
            )
            return
        if not snapshot.is_consistent():
            logger.warning("Ignoring snapshot with corrupt cell data")
            return

        opened: List[Cell] = []
        for index, bits in snapshot.cell_bits:
            cell = self.cells[index]
            if bits & CellBit.OPEN:
                cell.open = True
                opened.append(cell)
            if bits & CellBit.MINE:
                cell.mine = True
                self.mine_indexes.append(index)
            if bits & CellBit.FLAG:
                cell.flag = True
                self.flagged_indexes.add(index)

        for cell in opened:
            self.get_around_mine_count(cell.index)
        self._unopened_count -= sum(1 for cell in opened if not cell.mine)

        # A dump of a finished game comes back finished, clock stopped.
        if any(cell.mine for cell in opened):
            self.timer = Timer(duration=snapshot.duration)
            self.stage = Stage.LOST
        elif self._unopened_count <= 0:
            self.timer = Timer(duration=snapshot.duration)
            self.stage = Stage.WON
        else:
            self.timer = Timer(duration=snapshot.duration, start_at=self.clock())
            self.stage = Stage.PLAYING
        logger.debug(
            "Restored %d opened and %d flagged cells",
            len(opened), len(self.flagged_indexes),
        )

    # ========================================================================
    # Position & Neighbor Utilities
    # ========================================================================

    def index_to_pos(self, index: int) -> Tuple[int, int]:
        """Convert flat index to (x, y)."""
        return index % self.config.width, index // self.config.width

    def pos_to_index(self, x: int, y: int) -> int:
        """Convert (x, y) to flat index."""
        return x + y * self.config.width

    def _around_indexes(self, index: int) -> Tuple[int, ...]:
        """Indices of the in-bounds neighbors of a cell, memoized."""
        cached = self._around_cache[index]
        if cached is not None:
            return cached

        x, y = self.index_to_pos(index)
        around = tuple(
            self.pos_to_index(x + dx, y + dy)
            for dx, dy in NEIGHBOR_DIRECTIONS
            if 0 <= x + dx < self.config.width and 0 <= y + dy < self.config.height
        )
        self._around_cache[index] = around
        return around

    def get_around_cells(self, index: int) -> List[Cell]:
        """Get the neighboring cells of a cell."""
        return [self.cells[i] for i in self._around_indexes(index)]

    def get_around_mine_count(self, index: int) -> int:
        """Count mines next to a cell, caching the result on the cell."""
        cell = self.cells[index]
        if cell.around_mine_count is None:
            cell.around_mine_count = sum(
                1 for neighbor in self.get_around_cells(index) if neighbor.mine
            )
        return cell.around_mine_count

    # ========================================================================
    # Game Actions
    # ========================================================================

    def operate(
        self,
        index: int,
        action: Union[CellAction, str],
        allow_open_around: bool = False,
    ) -> bool:
        """
        Apply a player action to a cell.

        The first action of a game places the mines around `index` and
        starts the timer.

        Args:
            index: Flat index of the target cell.
            action: "open", "flag" or "open-around".
            allow_open_around: Fall back to open-around when an open or
                flag has no effect (touch devices).

        Returns:
            True if the board changed, False otherwise.
        """
        action = CellAction(action)
        if not 0 <= index < len(self.cells):
            raise IndexError(f"Cell index {index} out of range")
        if self.is_over:
            return False

        started = False
        if self.stage is Stage.READY:
            self._place_mines(index)
            self.timer = Timer(start_at=self.clock())
            self.stage = Stage.PLAYING
            started = True

        if action is CellAction.OPEN_AROUND:
            return self._open_around(index) or started

        if action is CellAction.OPEN:
            changed = self._open(index)
        else:
            changed = self._toggle_flag(index)

        if not changed and allow_open_around:
            changed = self._open_around(index)
        return changed or started

    def _place_mines(self, first_index: int) -> None:
        """Place mines away from the first cell and its neighbors."""
        excluded = {first_index, *self._around_indexes(first_index)}
        candidates = [i for i in range(len(self.cells)) if i not in excluded]
        if len(candidates) < self.config.num_mines:
            # Board too dense to spare the neighbors; spare the cell only.
            candidates = [i for i in range(len(self.cells)) if i != first_index]

        for index in self._rng.sample(candidates, self.config.num_mines):
            self.cells[index].mine = True
            self.mine_indexes.append(index)
        logger.debug(
            "Placed %d mines, first action at %d",
            len(self.mine_indexes), first_index,
        )

    def _open(self, index: int) -> bool:
        """
        Open a cell, cascading through zero-count regions.

        Returns:
            True if the cell was opened, False if it was already open
            or flagged.
        """
        if self.cells[index].open or self.cells[index].flag:
            return False

        stack = [index]
        while stack:
            cell = self.cells[stack.pop()]
            if cell.open or cell.flag:
                continue
            cell.open = True

            if cell.mine:
                cell.boom = True
                self._end_game(won=False)
                break

            self._unopened_count -= 1
            if self._unopened_count == 0:
                self._end_game(won=True)
                break

            if self.get_around_mine_count(cell.index) == 0:
                stack.extend(self._around_indexes(cell.index))

        return True

    def _toggle_flag(self, index: int) -> bool:
        """Toggle the flag on a covered cell."""
        cell = self.cells[index]
        if cell.open:
            return False

        if cell.flag:
            cell.flag = False
            self.flagged_indexes.discard(index)
        else:
            cell.flag = True
            self.flagged_indexes.add(index)
        return True

    def _open_around(self, index: int) -> bool:
        """Open unflagged neighbors when the flag count matches."""
        if not self.cells[index].open:
            return False

        around = self.get_around_cells(index)
        flag_count = sum(1 for cell in around if cell.flag)
        if flag_count == 0 or flag_count != self.get_around_mine_count(index):
            return False

        opened_any = False
        for cell in around:
            if self.is_over:
                break
            if self._open(cell.index):
                opened_any = True
        return opened_any

    def _end_game(self, won: bool) -> None:
        """Finish the game and expose the final layout."""
        self.timer.stop(self.clock())

        if won:
            self.stage = Stage.WON
            self.flagged_indexes.clear()
            for cell in self.cells:
                if cell.mine:
                    cell.flag = True
                    self.flagged_indexes.add(cell.index)
                else:
                    cell.open = True
                    cell.flag = False
                    self.get_around_mine_count(cell.index)
        else:
            self.stage = Stage.LOST
            for index in self.mine_indexes:
                self.cells[index].open = True
            for index in self.flagged_indexes:
                self.cells[index].open = True

        logger.debug(
            "Game %s after %d ms", self.stage.value, self.timer.duration
        )

    # ========================================================================
    # Queries
    # ========================================================================

    @property
    def is_ready(self) -> bool:
        """Check if no action has been taken yet."""
        return self.stage is Stage.READY

    @property
    def is_playing(self) -> bool:
        """Check if the game is in progress."""
        return self.stage is Stage.PLAYING

    @property
    def is_won(self) -> bool:
        """Check if game was won."""
        return self.stage is Stage.WON

    @property
    def is_lost(self) -> bool:
        """Check if a mine was opened."""
        return self.stage is Stage.LOST

    @property
    def is_over(self) -> bool:
        """Check if the game has been won or lost."""
        return self.stage in (Stage.WON, Stage.LOST)

    @property
    def remaining_mines(self) -> int:
        """Mines not yet accounted for by flags."""
        return self.config.num_mines - len(self.flagged_indexes)

    def elapsed_ms(self) -> int:
        """Elapsed play time in milliseconds."""
        return self.timer.elapsed(self.clock())

    def get_cell(self, index: int) -> Optional[Cell]:
        """Get cell at index, or None if out of range."""
        if not 0 <= index < len(self.cells):
            return None
        return self.cells[index]

    def get_cell_grid(self) -> List[List[Cell]]:
        """Cells arranged as rows."""
        width = self.config.width
        return [
            self.cells[row * width:(row + 1) * width]
            for row in range(self.config.height)
        ]

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array.

        Returns:
            2D int8 array of shape (height, width), see
            `Cell.to_observation` for values.
        """
        obs = np.fromiter(
            (cell.to_observation() for cell in self.cells),
            dtype=np.int8,
            count=len(self.cells),
        )
        return obs.reshape(self.config.height, self.config.width)

    def get_valid_actions(self) -> List[int]:
        """Indices of covered, unflagged cells."""
        return [cell.index for cell in self.cells if cell.is_hidden]
