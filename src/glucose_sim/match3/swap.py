"""Swap validation."""

from glucose_sim.match3.detector import find_matches
from glucose_sim.match3.types import (
    Board,
    Position,
    SimpleTile,
    freeze,
    in_bounds,
    is_simple_tile,
    thaw,
)


def is_adjacent(pos1: Position, pos2: Position) -> bool:
    """True when the positions are orthogonal neighbours."""
    return abs(pos1.row - pos2.row) + abs(pos1.col - pos2.col) == 1


def swap_tiles(board: Board, pos1: Position, pos2: Position) -> Board:
    """Return a copy of ``board`` with two cells exchanged."""
    grid = thaw(board)
    grid[pos1.row][pos1.col], grid[pos2.row][pos2.col] = (
        grid[pos2.row][pos2.col],
        grid[pos1.row][pos1.col],
    )
    return freeze(grid)


def is_valid_swap(board: Board, pos1: Position, pos2: Position) -> bool:
    """Check whether swapping two cells is a legal move.

    Rules:
    - Positions must be adjacent and on the board
    - Both cells must hold a tile, at least one of them simple
    - Two simple tiles of the same shape cannot be swapped
    - The swapped board must contain at least one match

    The board itself is never modified.
    """
    if not is_adjacent(pos1, pos2):
        return False
    if not (in_bounds(board, pos1) and in_bounds(board, pos2)):
        return False

    tile1 = board[pos1.row][pos1.col]
    tile2 = board[pos2.row][pos2.col]
    if tile1 is None or tile2 is None:
        return False
    if not is_simple_tile(tile1) and not is_simple_tile(tile2):
        return False
    if isinstance(tile1, SimpleTile) and isinstance(tile2, SimpleTile) and tile1.shape == tile2.shape:
        return False

    return len(find_matches(swap_tiles(board, pos1, pos2))) > 0
