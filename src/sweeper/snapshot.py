"""
Snapshot module for Minesweeper game.

A snapshot is the compact persisted form of a board: its dimensions,
mine count, a sparse list of per-cell bits and the elapsed time.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .cell import ALL_BITS, CellBit


CellBits = List[Tuple[int, int]]


# ============================================================================
# Snapshot Data Class
# ============================================================================

@dataclass
class Snapshot:
    """
    Persisted state of a board.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        num_mines: Mines on the board.
        cell_bits: (index, bits) for every cell with a bit set, where
            bit 0 = open, bit 1 = mine, bit 2 = flag.
        duration: Elapsed play time in milliseconds.
    """

    width: int
    height: int
    num_mines: int
    cell_bits: CellBits = field(default_factory=list)
    duration: int = 0

    @property
    def is_empty(self) -> bool:
        """True when no cell carries any bit."""
        return not self.cell_bits

    def is_consistent(self) -> bool:
        """
        Check that the cell data describes a playable board.

        Every entry must address a distinct cell and use known bits,
        and exactly `num_mines` cells must carry the mine bit.
        """
        total_cells = self.width * self.height
        seen = set()
        mine_total = 0
        for index, bits in self.cell_bits:
            if not 0 <= index < total_cells or index in seen:
                return False
            if bits <= 0 or bits & ~ALL_BITS:
                return False
            seen.add(index)
            if bits & CellBit.MINE:
                mine_total += 1
        return mine_total == self.num_mines

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored dictionary layout."""
        return {
            "w": self.width,
            "h": self.height,
            "m": self.num_mines,
            "cellBits": [[index, bits] for index, bits in self.cell_bits],
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Snapshot"]:
        """
        Build a snapshot from its stored dictionary layout.

        Returns:
            The snapshot, or None if the data is malformed.
        """
        if not isinstance(data, dict):
            return None

        dims = [data.get(key) for key in ("w", "h", "m")]
        if not all(_is_int(value) and value > 0 for value in dims):
            return None

        duration = data.get("duration", 0)
        if not _is_number(duration) or duration < 0:
            return None

        raw_bits = data.get("cellBits", [])
        if not isinstance(raw_bits, list):
            return None

        cell_bits: CellBits = []
        for entry in raw_bits:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                return None
            index, bits = entry
            if not (_is_int(index) and _is_int(bits)):
                return None
            cell_bits.append((index, bits))

        width, height, num_mines = dims
        return cls(width, height, num_mines, cell_bits, int(duration))

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Optional["Snapshot"]:
        """Parse a JSON string, returning None if it is not a snapshot."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return None
        return cls.from_dict(data)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return _is_int(value) or isinstance(value, float)
