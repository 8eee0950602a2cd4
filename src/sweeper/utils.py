"""Display helpers."""
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .board import Board


def format_counter(value: float) -> str:
    """Format a counter as three digits, clamped to 0-999."""
    clamped = min(999, max(0, math.floor(value)))
    return str(clamped).zfill(3)


def render_text(board: "Board") -> str:
    """
    Render board as rows of characters.

    '.' covered, 'F' flag, '!' wrong flag after a loss, '*' mine,
    'X' the exploded mine, digits for counts, space for zero.
    """
    lines = []
    for row in board.get_cell_grid():
        chars = []
        for cell in row:
            if cell.boom:
                chars.append("X")
            elif cell.flag:
                chars.append("!" if cell.open and not cell.mine else "F")
            elif not cell.open:
                chars.append(".")
            elif cell.mine:
                chars.append("*")
            elif cell.around_mine_count:
                chars.append(str(cell.around_mine_count))
            else:
                chars.append(" ")
        lines.append(" ".join(chars))
    return "\n".join(lines)
