"""Tests for the stateful match-3 session."""

import random

import pytest

from glucose_sim.match3 import (
    Match3Config,
    Match3Session,
    Position,
    find_matches,
    find_valid_move,
)


@pytest.fixture
def session():
    config = Match3Config(rows=8, columns=8, tile_types=4, food_spawn_chance=0.2)
    return Match3Session(config, food_ship_ids=["apple"], move_budget=3, rng=random.Random(42))


def test_starts_with_full_budget(session):
    assert session.moves_remaining == 3
    assert not session.is_out_of_moves
    assert session.collected_food == []
    assert find_matches(session.board) == []


def test_valid_swap_spends_a_move(session):
    move = find_valid_move(session.board)
    assert move is not None

    result = session.attempt_swap(*move)

    assert result.valid
    assert session.moves_remaining == 2
    assert session.board == result.board
    assert session.last_result is result


def test_invalid_swap_is_free(session):
    board = session.board
    result = session.attempt_swap(Position(0, 0), Position(5, 5))

    assert not result.valid
    assert session.moves_remaining == 3
    assert session.board == board


def test_out_of_moves_blocks_swaps():
    config = Match3Config(rows=8, columns=8, tile_types=4)
    session = Match3Session(config, move_budget=1, rng=random.Random(3))

    session.attempt_swap(*find_valid_move(session.board))
    assert session.is_out_of_moves

    move = find_valid_move(session.board)
    if move is not None:
        board = session.board
        assert not session.attempt_swap(*move).valid
        assert session.board == board


def test_collected_food_accumulates(session):
    results = []
    for _ in range(3):
        move = find_valid_move(session.board)
        if move is None:
            break
        results.append(session.attempt_swap(*move))

    assert len(session.collected_food) == sum(len(r.dropped_food_tiles) for r in results)
    assert all(tile.ship_id == "apple" for tile in session.collected_food)


def test_selection_is_cleared_by_swap(session):
    session.select_position(Position(1, 1))
    assert session.selected_position == Position(1, 1)

    session.attempt_swap(Position(0, 0), Position(7, 7))
    assert session.selected_position is None


def test_reset_board_restores_budget(session):
    session.attempt_swap(*find_valid_move(session.board))
    session.reset_board()

    assert session.moves_remaining == 3
    assert session.collected_food == []
    assert session.last_result is None


def test_deadlock_is_reported_not_fixed():
    config = Match3Config(rows=2, columns=2, tile_types=3)
    session = Match3Session(config, rng=random.Random(0))

    assert session.no_valid_moves
    assert len(session.board) == 2


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        Match3Session(Match3Config(rows=3, columns=3), move_budget=-1)
