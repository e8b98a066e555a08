"""Match-3 board types.

The board is an immutable value: a tuple of row tuples, row 0 at the top,
each cell a ``SimpleTile``, a ``FoodTile`` or ``None`` (empty). Engine
functions take a board and return a new one; they copy into lists internally
and freeze the result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class TileShape(str, Enum):
    """Shapes of simple tiles, in the order they are enabled by ``tile_types``."""

    SQUARE = "square"
    TRIANGLE = "triangle"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"


ALL_SHAPES: tuple[TileShape, ...] = tuple(TileShape)


@dataclass(frozen=True)
class SimpleTile:
    """Plain tile that matches with tiles of the same shape."""

    shape: TileShape


@dataclass(frozen=True)
class FoodTile:
    """Reward tile. Never matches; collected when it reaches the bottom row."""

    ship_id: str


Tile = Union[SimpleTile, FoodTile]
Board = tuple[tuple[Optional[Tile], ...], ...]
Grid = list[list[Optional[Tile]]]


@dataclass(frozen=True, order=True)
class Position:
    """Grid position (row 0 = top)."""

    row: int
    col: int


@dataclass
class MatchResult:
    """Connected group of 3+ same-shape simple tiles."""

    positions: tuple[Position, ...]
    shape: TileShape


@dataclass
class TileMovement:
    """Tile moved by gravity. ``to_pos.row == rows`` means it fell off the board."""

    from_pos: Position
    to_pos: Position
    tile: Tile


@dataclass
class GravityResult:
    board: Board
    dropped_food_tiles: list[FoodTile] = field(default_factory=list)
    movements: list[TileMovement] = field(default_factory=list)


@dataclass
class NewTile:
    position: Position
    tile: Tile


@dataclass
class RefillResult:
    board: Board
    new_tiles: list[NewTile] = field(default_factory=list)


@dataclass
class CascadeStep:
    """One match -> remove -> gravity -> refill iteration.

    Attributes:
        matches: Groups removed in this step
        movements: Gravity movements, including food tiles falling off
        dropped_food_tiles: Food tiles collected in this step
        new_tiles: Tiles spawned by the refill
    """

    matches: list[MatchResult]
    movements: list[TileMovement]
    dropped_food_tiles: list[FoodTile]
    new_tiles: list[NewTile] = field(default_factory=list)


@dataclass
class SwapResult:
    """Fully resolved swap.

    Attributes:
        valid: False when the swap was rejected (board unchanged)
        board: Board after all cascades
        cascade_steps: Ordered steps for animated playback
        dropped_food_tiles: Food collected across all steps
    """

    valid: bool
    board: Board
    cascade_steps: list[CascadeStep] = field(default_factory=list)
    dropped_food_tiles: list[FoodTile] = field(default_factory=list)


@dataclass
class InitialFoodTile:
    """Food tile placed at board generation (random ship if ``ship_id`` is None)."""

    row: int
    col: int
    ship_id: Optional[str] = None


@dataclass
class Match3Config:
    """Match-3 board configuration.

    Attributes:
        rows: Number of rows
        columns: Number of columns
        tile_types: How many shapes are in play (3-5)
        food_spawn_chance: Probability a refilled cell becomes food (0-1)
        initial_food_tiles: Food tiles placed at generation
    """

    rows: int
    columns: int
    tile_types: int = 5
    food_spawn_chance: float = 0.0
    initial_food_tiles: list[InitialFoodTile] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.rows < 0 or self.columns < 0:
            raise ValueError(f"Board size must be non-negative, got {self.rows}x{self.columns}")
        if not 3 <= self.tile_types <= len(ALL_SHAPES):
            raise ValueError(f"tile_types must be between 3 and {len(ALL_SHAPES)}, got {self.tile_types}")
        if not 0.0 <= self.food_spawn_chance <= 1.0:
            raise ValueError(f"food_spawn_chance must be in [0, 1], got {self.food_spawn_chance}")

    @property
    def shapes(self) -> tuple[TileShape, ...]:
        """Shapes enabled by ``tile_types``."""
        return ALL_SHAPES[: self.tile_types]


# Helpers


def is_simple_tile(tile: Optional[Tile]) -> bool:
    return isinstance(tile, SimpleTile)


def is_food_tile(tile: Optional[Tile]) -> bool:
    return isinstance(tile, FoodTile)


def board_size(board: Board) -> tuple[int, int]:
    """Board dimensions (rows, cols)."""
    if not board:
        return 0, 0
    return len(board), len(board[0])


def in_bounds(board: Board, pos: Position) -> bool:
    rows, cols = board_size(board)
    return 0 <= pos.row < rows and 0 <= pos.col < cols


def thaw(board: Board) -> Grid:
    """Mutable copy of a board."""
    return [list(row) for row in board]


def freeze(grid: Grid) -> Board:
    """Immutable board from a grid."""
    return tuple(tuple(row) for row in grid)


def empty_board(rows: int, cols: int) -> Board:
    return tuple(tuple(None for _ in range(cols)) for _ in range(rows))


def count_food_tiles(board: Board) -> int:
    return sum(1 for row in board for tile in row if is_food_tile(tile))
