"""Board generation and refilling."""

import logging
import math
import random
from typing import Optional, Sequence

from glucose_sim.core.constants import MAX_FOOD_FRACTION
from glucose_sim.core.determinism import make_rng
from glucose_sim.match3.detector import would_complete_run
from glucose_sim.match3.types import (
    Board,
    FoodTile,
    Grid,
    Match3Config,
    NewTile,
    Position,
    RefillResult,
    SimpleTile,
    Tile,
    TileShape,
    count_food_tiles,
    freeze,
    thaw,
)

logger = logging.getLogger(__name__)


def _pick_shape(
    grid: Grid, row: int, col: int, shapes: Sequence[TileShape], rng: random.Random
) -> TileShape:
    """Uniform pick among shapes that do not complete a run at (row, col)."""
    allowed = [s for s in shapes if not would_complete_run(grid, row, col, s)]
    return rng.choice(allowed or list(shapes))


def max_food_tiles(config: Match3Config) -> int:
    """Food tile cap for a board of this size."""
    return math.floor(config.rows * config.columns * MAX_FOOD_FRACTION)


def generate_board(
    config: Match3Config,
    food_ship_ids: Sequence[str] = (),
    rng: Optional[random.Random] = None,
) -> Board:
    """Generate a board with no pre-existing matches.

    Food tiles go to ``config.initial_food_tiles`` (out-of-bounds entries are
    skipped); every other cell gets a simple tile.

    Args:
        config: Board configuration
        food_ship_ids: Ship ids for food tiles without an explicit id
        rng: Random source (fresh unseeded RNG if None)

    Returns:
        New board
    """
    rng = rng or make_rng()
    rows, cols = config.rows, config.columns
    grid: Grid = [[None] * cols for _ in range(rows)]

    for ft in config.initial_food_tiles:
        if not (0 <= ft.row < rows and 0 <= ft.col < cols):
            continue
        ship_id = ft.ship_id or (rng.choice(list(food_ship_ids)) if food_ship_ids else None)
        if ship_id is None:
            continue
        grid[ft.row][ft.col] = FoodTile(ship_id=ship_id)

    for r in range(rows):
        for c in range(cols):
            if grid[r][c] is not None:
                continue
            grid[r][c] = SimpleTile(shape=_pick_shape(grid, r, c, config.shapes, rng))

    return freeze(grid)


def refill_board(
    board: Board,
    config: Match3Config,
    food_ship_ids: Sequence[str] = (),
    rng: Optional[random.Random] = None,
) -> RefillResult:
    """Fill empty cells, column by column, top down.

    Each new cell becomes food with ``food_spawn_chance`` while the board
    holds fewer food tiles than the cap; once the cap is reached only simple
    tiles spawn.

    Args:
        board: Board after gravity
        config: Board configuration
        food_ship_ids: Ship ids new food tiles draw from
        rng: Random source

    Returns:
        RefillResult with the full board and the spawned tiles
    """
    rng = rng or make_rng()
    grid = thaw(board)
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    new_tiles = []

    food_cap = max_food_tiles(config)
    food_count = count_food_tiles(board)
    ship_ids = list(food_ship_ids)

    for c in range(cols):
        for r in range(rows):
            if grid[r][c] is not None:
                continue

            tile: Tile
            spawn_food = (
                bool(ship_ids)
                and food_count < food_cap
                and rng.random() < config.food_spawn_chance
            )
            if spawn_food:
                tile = FoodTile(ship_id=rng.choice(ship_ids))
                food_count += 1
            else:
                tile = SimpleTile(shape=_pick_shape(grid, r, c, config.shapes, rng))

            grid[r][c] = tile
            new_tiles.append(NewTile(position=Position(r, c), tile=tile))

    if new_tiles:
        logger.debug("Refilled %d cells (%d food on board)", len(new_tiles), food_count)
    return RefillResult(board=freeze(grid), new_tiles=new_tiles)
