"""Stateful match-3 controller that owns the board across a day."""

import logging
import random
from typing import Optional, Sequence

from glucose_sim.core.constants import DEFAULT_MOVE_BUDGET
from glucose_sim.core.determinism import make_rng
from glucose_sim.match3.engine import execute_swap, has_valid_moves
from glucose_sim.match3.generator import generate_board
from glucose_sim.match3.types import Board, FoodTile, Match3Config, Position, SwapResult

logger = logging.getLogger(__name__)


class Match3Session:
    """Owns a board, a move budget and the food collected so far.

    The engine functions are pure; this class is the single place where the
    board is replaced. A deadlocked board is reported through
    ``no_valid_moves`` and left as is for the host to handle.

    Attributes:
        config: Board configuration
        food_ship_ids: Ship ids food tiles draw from
        move_budget: Swaps allowed per board
    """

    def __init__(
        self,
        config: Match3Config,
        food_ship_ids: Sequence[str] = (),
        move_budget: int = DEFAULT_MOVE_BUDGET,
        rng: Optional[random.Random] = None,
    ):
        """Initialize session and generate the first board.

        Args:
            config: Board configuration
            food_ship_ids: Ship ids food tiles draw from
            move_budget: Swaps allowed per board
            rng: Random source for generation and refills
        """
        if move_budget < 0:
            raise ValueError(f"move_budget must be non-negative, got {move_budget}")

        self.config = config
        self.food_ship_ids = list(food_ship_ids)
        self.move_budget = move_budget
        self._rng = rng or make_rng()

        self._board: Board = ()
        self._moves_remaining = move_budget
        self._collected: list[FoodTile] = []
        self._selected: Optional[Position] = None
        self._no_valid_moves = False
        self._last_result: Optional[SwapResult] = None

        self.reset_board()

    @property
    def board(self) -> Board:
        """Current board."""
        return self._board

    @property
    def moves_remaining(self) -> int:
        return self._moves_remaining

    @property
    def is_out_of_moves(self) -> bool:
        return self._moves_remaining <= 0

    @property
    def no_valid_moves(self) -> bool:
        """True when no adjacent pair on the board is a legal swap."""
        return self._no_valid_moves

    @property
    def selected_position(self) -> Optional[Position]:
        return self._selected

    @property
    def collected_food(self) -> list[FoodTile]:
        """Food tiles collected since the last reset."""
        return self._collected.copy()

    @property
    def last_result(self) -> Optional[SwapResult]:
        """Result of the most recent accepted swap, for playback."""
        return self._last_result

    def select_position(self, pos: Optional[Position]) -> None:
        """Set or clear the selected cell."""
        self._selected = pos

    def attempt_swap(self, pos1: Position, pos2: Position) -> SwapResult:
        """Try a swap and apply it when legal.

        A rejected swap, or any swap once the budget is spent, leaves the
        board and move count unchanged.

        Returns:
            SwapResult from the engine (``valid=False`` if rejected)
        """
        if self.is_out_of_moves:
            return SwapResult(valid=False, board=self._board)

        result = execute_swap(
            self._board, pos1, pos2, self.config, self.food_ship_ids, self._rng
        )
        self._selected = None
        if not result.valid:
            return result

        self._board = result.board
        self._moves_remaining -= 1
        self._collected.extend(result.dropped_food_tiles)
        self._last_result = result
        self._refresh_deadlock()
        return result

    def reset_board(self) -> None:
        """Generate a fresh board and restore the move budget.

        Collected food is cleared as well.
        """
        self._board = generate_board(self.config, self.food_ship_ids, self._rng)
        self._moves_remaining = self.move_budget
        self._collected.clear()
        self._selected = None
        self._last_result = None
        self._refresh_deadlock()

    def _refresh_deadlock(self) -> None:
        self._no_valid_moves = not has_valid_moves(self._board)
        if self._no_valid_moves:
            logger.debug("Board has no valid moves")
