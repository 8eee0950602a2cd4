"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path
from typing import Callable, Iterable

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sweeper import (
    Board,
    BoardConfig,
    Cell,
    CellBit,
    GameSession,
    MemoryStore,
    SessionSettings,
    Snapshot,
)


# ============================================================================
# Clock
# ============================================================================

class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at a fixed time."""
    return FakeClock()


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def default_board(clock: FakeClock) -> Board:
    """Create a default 9x9 board with 10 mines."""
    return Board(seed=1234, clock=clock)


@pytest.fixture
def small_board(clock: FakeClock) -> Board:
    """Create a small 3x3 board with 1 mine."""
    return Board(BoardConfig(3, 3, 1), seed=7, clock=clock)


BoardFactory = Callable[..., Board]


@pytest.fixture
def board_factory(clock: FakeClock) -> BoardFactory:
    """
    Build a board with a known mine layout.

    The board is restored from a snapshot, so it starts in the playing
    stage with the given cells already opened or flagged.
    """
    def make(
        width: int,
        height: int,
        mines: Iterable[int],
        opened: Iterable[int] = (),
        flagged: Iterable[int] = (),
    ) -> Board:
        mines = list(mines)
        bits = {}
        for index in mines:
            bits[index] = bits.get(index, 0) | CellBit.MINE
        for index in opened:
            bits[index] = bits.get(index, 0) | CellBit.OPEN
        for index in flagged:
            bits[index] = bits.get(index, 0) | CellBit.FLAG
        snapshot = Snapshot(
            width,
            height,
            len(mines),
            [(index, int(value)) for index, value in sorted(bits.items())],
        )
        return Board.from_snapshot(snapshot, clock=clock)

    return make


@pytest.fixture
def wall_board(board_factory: BoardFactory) -> Board:
    """
    5x5 board with a mine in the top-left corner and a wall of mines
    down column 3; cell 6 (x=1, y=1) is already open.

        * . . * .
        . o . * .
        . . . * .
        . . . * .
        . . . * .
    """
    return board_factory(5, 5, mines=[0, 3, 8, 13, 18, 23], opened=[6])


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a covered cell."""
    return Cell(index=0)


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(index=0, mine=True)


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def store() -> MemoryStore:
    """An empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def session(store: MemoryStore, clock: FakeClock) -> GameSession:
    """A beginner session over an in-memory store."""
    return GameSession(store, SessionSettings(), seed=42, clock=clock)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def valid_config() -> BoardConfig:
    """Create a valid board configuration."""
    return BoardConfig(9, 9, 10)
