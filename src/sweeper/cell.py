"""
Cell module for Minesweeper game.

Represents individual cells on the game board: whether they are
opened, mined, flagged or exploded, and their neighbor mine count.
"""
from enum import IntFlag
from dataclasses import dataclass
from typing import Optional


# ============================================================================
# Constants
# ============================================================================

class CellBit(IntFlag):
    """Bits used to encode a cell in a persisted snapshot."""

    OPEN = 0x1
    MINE = 0x2
    FLAG = 0x4


ALL_BITS = int(CellBit.OPEN | CellBit.MINE | CellBit.FLAG)


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    Represents a single cell in the Minesweeper grid.

    Attributes:
        index: Flat position on the board (x + y * width).
        open: Whether the cell has been uncovered.
        mine: Whether this cell contains a mine.
        flag: Whether the player marked this cell.
        boom: Set only on the mine that ended the game.
        around_mine_count: Mines among the neighbors (0-8), None until
            the board computes it.
    """

    index: int
    open: bool = False
    mine: bool = False
    flag: bool = False
    boom: bool = False
    around_mine_count: Optional[int] = None

    def reset(self) -> None:
        """Clear every field except the index."""
        self.open = False
        self.mine = False
        self.flag = False
        self.boom = False
        self.around_mine_count = None

    def cover(self) -> None:
        """Hide the cell again, keeping mine and count."""
        self.open = False
        self.flag = False
        self.boom = False

    @property
    def is_hidden(self) -> bool:
        """Check if cell is covered and unflagged."""
        return not self.open and not self.flag

    def to_bits(self) -> int:
        """Encode open/mine/flag as snapshot bits."""
        bits = 0
        if self.open:
            bits |= CellBit.OPEN
        if self.mine:
            bits |= CellBit.MINE
        if self.flag:
            bits |= CellBit.FLAG
        return int(bits)

    def to_observation(self) -> int:
        """
        Convert cell to observation value for agents.

        Returns:
            -1: Covered cell
            -2: Flagged cell (not opened)
            0-8: Opened cell with neighbor mine count
            9: Opened mine
        """
        if not self.open:
            return -2 if self.flag else -1
        if self.mine:
            return 9
        return self.around_mine_count or 0
