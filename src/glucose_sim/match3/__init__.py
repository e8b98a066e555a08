"""Match-3 board engine: generation, matching, gravity, cascades."""

from glucose_sim.match3.types import (
    ALL_SHAPES,
    Board,
    CascadeStep,
    FoodTile,
    GravityResult,
    InitialFoodTile,
    Match3Config,
    MatchResult,
    NewTile,
    Position,
    RefillResult,
    SimpleTile,
    SwapResult,
    Tile,
    TileMovement,
    TileShape,
    board_size,
    count_food_tiles,
    empty_board,
    is_food_tile,
    is_simple_tile,
)
from glucose_sim.match3.detector import find_matches, remove_matches
from glucose_sim.match3.generator import generate_board, max_food_tiles, refill_board
from glucose_sim.match3.gravity import apply_gravity
from glucose_sim.match3.swap import is_adjacent, is_valid_swap, swap_tiles
from glucose_sim.match3.engine import (
    execute_swap,
    find_valid_move,
    has_valid_moves,
    resolve_cascades,
)
from glucose_sim.match3.session import Match3Session

__all__ = [
    # Types
    "ALL_SHAPES",
    "Board",
    "CascadeStep",
    "FoodTile",
    "GravityResult",
    "InitialFoodTile",
    "Match3Config",
    "MatchResult",
    "NewTile",
    "Position",
    "RefillResult",
    "SimpleTile",
    "SwapResult",
    "Tile",
    "TileMovement",
    "TileShape",
    "board_size",
    "count_food_tiles",
    "empty_board",
    "is_food_tile",
    "is_simple_tile",
    # Engine
    "find_matches",
    "remove_matches",
    "generate_board",
    "max_food_tiles",
    "refill_board",
    "apply_gravity",
    "is_adjacent",
    "is_valid_swap",
    "swap_tiles",
    "execute_swap",
    "find_valid_move",
    "has_valid_moves",
    "resolve_cascades",
    # Session
    "Match3Session",
]
