"""Shared fixtures for glucose_sim tests."""

import random

import pytest

from glucose_sim.core.types import FoodCard, FoodModifiers
from glucose_sim.match3.types import FoodTile, SimpleTile, TileShape, freeze

SHAPE_CODES = {
    "S": TileShape.SQUARE,
    "T": TileShape.TRIANGLE,
    "C": TileShape.CIRCLE,
    "D": TileShape.DIAMOND,
    "H": TileShape.HEXAGON,
}


def make_board(*rows: str):
    """Build a board from strings.

    ``S T C D H`` are simple shapes, ``F`` is a food tile (ship 'apple') and
    ``.`` is an empty cell.
    """
    grid = []
    for row in rows:
        cells = []
        for ch in row.replace(" ", ""):
            if ch == ".":
                cells.append(None)
            elif ch == "F":
                cells.append(FoodTile(ship_id="apple"))
            else:
                cells.append(SimpleTile(shape=SHAPE_CODES[ch]))
        grid.append(cells)
    return freeze(grid)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def toast():
    return FoodCard(
        id="toast",
        name="Toast",
        glucose=40.0,
        glucose_speed=5.0,
        release_duration=2.0,
        tier=1,
        tag="grain",
    )


@pytest.fixture
def sample_cards():
    """A small pool covering every tier, tag and modifier."""
    return [
        FoodCard(id="apple", name="Apple", glucose=20, glucose_speed=1.0, release_duration=4.0,
                 tier=1, tag="fruit", modifiers=FoodModifiers(fiber=True)),
        FoodCard(id="banana", name="Banana", glucose=30, glucose_speed=1.2, release_duration=4.0,
                 tier=1, tag="fruit"),
        FoodCard(id="pear", name="Pear", glucose=25, glucose_speed=1.0, release_duration=4.0,
                 tier=1, tag="fruit", modifiers=FoodModifiers(fiber=True)),
        FoodCard(id="egg", name="Egg", glucose=5, glucose_speed=0.8, release_duration=6.0,
                 tier=2, tag="protein", modifiers=FoodModifiers(protein=True)),
        FoodCard(id="cheese", name="Cheese", glucose=5, glucose_speed=0.8, release_duration=6.0,
                 tier=2, tag="dairy", modifiers=FoodModifiers(fat=True)),
        FoodCard(id="soda", name="Soda", glucose=60, glucose_speed=2.0, release_duration=2.0,
                 tier=3, tag="drink", modifiers=FoodModifiers(sugar=True)),
    ]
