"""Match detection on a match-3 board."""

from typing import Iterable, Optional

from glucose_sim.match3.types import (
    Board,
    Grid,
    MatchResult,
    Position,
    SimpleTile,
    Tile,
    TileShape,
    board_size,
    freeze,
    in_bounds,
    thaw,
)

MIN_RUN = 3


def _shape_of(tile: Optional[Tile]) -> Optional[TileShape]:
    return tile.shape if isinstance(tile, SimpleTile) else None


def _scan_line(
    cells: list[tuple[Position, Optional[Tile]]]
) -> list[tuple[TileShape, set[Position]]]:
    """Maximal runs of 3+ equal shapes along one row or column.

    Food tiles and empty cells break runs.
    """
    runs = []
    start = 0
    while start < len(cells):
        shape = _shape_of(cells[start][1])
        if shape is None:
            start += 1
            continue

        end = start + 1
        while end < len(cells) and _shape_of(cells[end][1]) == shape:
            end += 1

        if end - start >= MIN_RUN:
            runs.append((shape, {pos for pos, _ in cells[start:end]}))
        start = end
    return runs


def find_matches(board: Board) -> list[MatchResult]:
    """Find all groups of 3+ matching simple tiles.

    Horizontal and vertical runs are found independently, then runs of the
    same shape that share a position are merged so L and T shapes come back
    as a single group.

    Args:
        board: Board to scan

    Returns:
        Match groups, positions sorted, groups ordered by first position
    """
    rows, cols = board_size(board)
    if rows == 0 or cols == 0:
        return []

    groups: list[tuple[TileShape, set[Position]]] = []
    for r in range(rows):
        groups.extend(_scan_line([(Position(r, c), board[r][c]) for c in range(cols)]))
    for c in range(cols):
        groups.extend(_scan_line([(Position(r, c), board[r][c]) for r in range(rows)]))

    merged: list[tuple[TileShape, set[Position]]] = []
    used: set[int] = set()

    for i, (shape, positions) in enumerate(groups):
        if i in used:
            continue
        used.add(i)
        current = set(positions)

        changed = True
        while changed:
            changed = False
            for j, (other_shape, other_positions) in enumerate(groups):
                if j in used or other_shape != shape:
                    continue
                if current.isdisjoint(other_positions):
                    continue
                current |= other_positions
                used.add(j)
                changed = True

        merged.append((shape, current))

    results = [
        MatchResult(positions=tuple(sorted(positions)), shape=shape)
        for shape, positions in merged
    ]
    results.sort(key=lambda m: m.positions[0])
    return results


def remove_matches(board: Board, matches: Iterable[MatchResult]) -> Board:
    """Return a new board with every matched position emptied."""
    grid = thaw(board)
    for match in matches:
        for pos in match.positions:
            if in_bounds(board, pos):
                grid[pos.row][pos.col] = None
    return freeze(grid)


def would_complete_run(grid: Grid, row: int, col: int, shape: TileShape) -> bool:
    """Check whether placing ``shape`` at (row, col) creates a run of 3+.

    Only the current non-empty neighbours are considered.
    """
    rows = len(grid)
    cols = len(grid[0]) if rows else 0

    def count(dr: int, dc: int) -> int:
        n = 0
        r, c = row + dr, col + dc
        while 0 <= r < rows and 0 <= c < cols and _shape_of(grid[r][c]) == shape:
            n += 1
            r += dr
            c += dc
        return n

    horizontal = count(0, -1) + count(0, 1) + 1
    vertical = count(-1, 0) + count(1, 0) + 1
    return horizontal >= MIN_RUN or vertical >= MIN_RUN
