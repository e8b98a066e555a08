"""Gravity resolution and food collection."""

from glucose_sim.match3.types import (
    Board,
    FoodTile,
    GravityResult,
    Position,
    TileMovement,
    board_size,
    freeze,
    thaw,
)


def apply_gravity(board: Board) -> GravityResult:
    """Let tiles fall into gaps and collect food tiles that reach the bottom.

    Each column is compacted downward, keeping tile order. Any food tile
    that ends up on the bottom row is removed and reported as dropped, and
    gravity runs again until no food tile rests on the bottom row.

    Args:
        board: Board with gaps

    Returns:
        GravityResult with the settled board, collected food and every move
    """
    rows, cols = board_size(board)
    if rows == 0 or cols == 0:
        return GravityResult(board=board)

    grid = thaw(board)
    movements: list[TileMovement] = []
    dropped: list[FoodTile] = []
    bottom = rows - 1

    while True:
        for c in range(cols):
            write_row = bottom
            for r in range(bottom, -1, -1):
                tile = grid[r][c]
                if tile is None:
                    continue
                if r != write_row:
                    movements.append(
                        TileMovement(from_pos=Position(r, c), to_pos=Position(write_row, c), tile=tile)
                    )
                    grid[write_row][c] = tile
                    grid[r][c] = None
                write_row -= 1

        collected = False
        for c in range(cols):
            tile = grid[bottom][c]
            if isinstance(tile, FoodTile):
                dropped.append(tile)
                # Row ``rows`` marks a tile leaving the board
                movements.append(
                    TileMovement(from_pos=Position(bottom, c), to_pos=Position(rows, c), tile=tile)
                )
                grid[bottom][c] = None
                collected = True

        if not collected:
            break

    return GravityResult(board=freeze(grid), dropped_food_tiles=dropped, movements=movements)
