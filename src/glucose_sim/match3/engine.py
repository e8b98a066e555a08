"""Swap execution and cascade resolution."""

import logging
import random
from typing import Optional, Sequence

from glucose_sim.core.constants import MAX_CASCADE_DEPTH
from glucose_sim.core.determinism import make_rng
from glucose_sim.match3.detector import find_matches, remove_matches
from glucose_sim.match3.generator import refill_board
from glucose_sim.match3.gravity import apply_gravity
from glucose_sim.match3.swap import is_valid_swap, swap_tiles
from glucose_sim.match3.types import (
    Board,
    CascadeStep,
    FoodTile,
    Match3Config,
    Position,
    SwapResult,
    board_size,
)

logger = logging.getLogger(__name__)


def resolve_cascades(
    board: Board,
    config: Match3Config,
    food_ship_ids: Sequence[str] = (),
    rng: Optional[random.Random] = None,
    max_depth: int = MAX_CASCADE_DEPTH,
) -> tuple[Board, list[CascadeStep]]:
    """Run match -> remove -> gravity -> refill until the board is stable.

    Stops after ``max_depth`` steps even if matches remain.

    Returns:
        (final board, cascade steps)
    """
    rng = rng or make_rng()
    steps: list[CascadeStep] = []

    for _ in range(max_depth):
        matches = find_matches(board)
        if not matches:
            break

        board = remove_matches(board, matches)
        gravity = apply_gravity(board)
        refill = refill_board(gravity.board, config, food_ship_ids, rng)
        board = refill.board

        steps.append(
            CascadeStep(
                matches=matches,
                movements=gravity.movements,
                dropped_food_tiles=gravity.dropped_food_tiles,
                new_tiles=refill.new_tiles,
            )
        )
    else:
        if find_matches(board):
            logger.warning("Cascade depth limit (%d) reached with matches left", max_depth)

    return board, steps


def execute_swap(
    board: Board,
    pos1: Position,
    pos2: Position,
    config: Match3Config,
    food_ship_ids: Sequence[str] = (),
    rng: Optional[random.Random] = None,
) -> SwapResult:
    """Execute a swap and resolve every cascade it triggers.

    An invalid swap returns ``valid=False`` with the board unchanged. A valid
    swap returns the settled board, the cascade steps for playback and the
    food collected on the way.

    Args:
        board: Current board
        pos1: First position
        pos2: Second position
        config: Board configuration (used by the refill)
        food_ship_ids: Ship ids refilled food tiles draw from
        rng: Random source for the refill

    Returns:
        SwapResult
    """
    if not is_valid_swap(board, pos1, pos2):
        return SwapResult(valid=False, board=board)

    final_board, steps = resolve_cascades(
        swap_tiles(board, pos1, pos2), config, food_ship_ids, rng
    )

    dropped: list[FoodTile] = []
    for step in steps:
        dropped.extend(step.dropped_food_tiles)

    logger.debug(
        "Swap %s<->%s resolved in %d cascade steps, %d food collected",
        (pos1.row, pos1.col),
        (pos2.row, pos2.col),
        len(steps),
        len(dropped),
    )
    return SwapResult(valid=True, board=final_board, cascade_steps=steps, dropped_food_tiles=dropped)


def find_valid_move(board: Board) -> Optional[tuple[Position, Position]]:
    """First legal swap in row-major order, checking right and down neighbours."""
    rows, cols = board_size(board)
    for r in range(rows):
        for c in range(cols):
            here = Position(r, c)
            if c + 1 < cols and is_valid_swap(board, here, Position(r, c + 1)):
                return here, Position(r, c + 1)
            if r + 1 < rows and is_valid_swap(board, here, Position(r + 1, c)):
                return here, Position(r + 1, c)
    return None


def has_valid_moves(board: Board) -> bool:
    """True when at least one adjacent pair is a legal swap."""
    return find_valid_move(board) is not None
