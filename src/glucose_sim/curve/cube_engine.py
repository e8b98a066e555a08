"""Cube curves for the planning graph.

A food dropped on the graph becomes a column-by-column stack of cubes: a
linear ramp up to its peak, followed either by a plateau (pancreas OFF) or by
a linear decay (pancreas digesting). Interventions produce the same shape
measured as cubes removed.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from glucose_sim.core.constants import (
    PANCREAS_DECAY_RATES,
    PENALTY_ORANGE_ROW,
    PENALTY_ORANGE_WEIGHT,
    PENALTY_RED_ROW,
    PENALTY_RED_WEIGHT,
    STAR_THRESHOLDS,
)
from glucose_sim.core.rounding import round_half_away
from glucose_sim.core.types import (
    GraphConfig,
    Intervention,
    LoadType,
    Medication,
    MedicationModifiers,
    MedicationType,
    PlacedFood,
    PlacedIntervention,
    Ship,
)


@dataclass
class CubeColumn:
    """Cube count at an offset from the drop column."""

    column_offset: int
    cube_count: int


@dataclass
class FoodCurve:
    """Curve of one placed food, for rendering."""

    placement_id: str
    ship_id: str
    drop_column: int
    columns: list[CubeColumn] = field(default_factory=list)


@dataclass
class PenaltyResult:
    """Penalty score of a graph skyline.

    Attributes:
        total_penalty: Weighted cube count above the high threshold
        orange_count: Cubes in the 200-300 mg/dL zone
        red_count: Cubes at 300 mg/dL and above
        stars: Star rating (0-3)
        label: Perfect, Good, Pass or Defeat
    """

    total_penalty: float
    orange_count: int
    red_count: int
    stars: int
    label: str


def decay_rate_for_tier(tier: int) -> float:
    """Per-column decay rate for a pancreas tier (unknown tiers plateau)."""
    return PANCREAS_DECAY_RATES.get(tier, 0.0)


def _ramp_heights(
    peak: float, rise_cols: int, decay_rate: float, limit: int
) -> Iterator[float]:
    for i in range(max(0, limit)):
        if i < rise_cols:
            yield peak * (i + 1) / rise_cols
        elif decay_rate > 0:
            yield peak - decay_rate * (i - rise_cols + 1)
        else:
            yield float(peak)


def calculate_curve(
    glucose: float,
    duration_minutes: float,
    drop_column: int = 0,
    decay_rate: float = 0.0,
    graph: Optional[GraphConfig] = None,
) -> list[CubeColumn]:
    """Calculate the cube curve of a food.

    Args:
        glucose: Glucose amount in mg/dL
        duration_minutes: Time to reach the peak
        drop_column: Column where the food lands
        decay_rate: Cubes lost per column after the ramp (0 = plateau)
        graph: Graph geometry (defaults if None)

    Returns:
        Columns with a positive cube count, in offset order
    """
    graph = graph or GraphConfig()
    peak = round_half_away(glucose / graph.cell_height_mgdl)
    if peak <= 0:
        return []
    rise_cols = max(1, round_half_away(duration_minutes / graph.cell_width_min))

    columns = []
    limit = graph.total_columns - drop_column
    for offset, height in enumerate(_ramp_heights(peak, rise_cols, decay_rate, limit)):
        cubes = round_half_away(height)
        if cubes <= 0:
            break
        columns.append(CubeColumn(column_offset=offset, cube_count=cubes))
    return columns


def calculate_intervention_curve(
    depth: float,
    duration_minutes: float,
    drop_column: int = 0,
    decay_rate: float = 0.0,
    boost_cols: int = 0,
    boost_extra: float = 0.0,
    graph: Optional[GraphConfig] = None,
) -> list[CubeColumn]:
    """Calculate the cubes an intervention removes, per column.

    The first ``boost_cols`` columns remove ``boost_extra`` additional cubes
    on top of the ramp.
    """
    graph = graph or GraphConfig()
    peak = round_half_away(depth)
    if peak <= 0 and (boost_cols <= 0 or boost_extra <= 0):
        return []
    rise_cols = max(1, round_half_away(duration_minutes / graph.cell_width_min))

    columns = []
    limit = graph.total_columns - drop_column
    for offset, height in enumerate(_ramp_heights(peak, rise_cols, decay_rate, limit)):
        if offset < boost_cols:
            height += boost_extra
        cubes = round_half_away(height)
        if cubes <= 0:
            break
        columns.append(CubeColumn(column_offset=offset, cube_count=cubes))
    return columns


def compute_medication_modifiers(
    medications: Sequence[Medication],
    graph: Optional[GraphConfig] = None,
) -> MedicationModifiers:
    """Combine active medications into one set of modifiers."""
    graph = graph or GraphConfig()
    mods = MedicationModifiers()

    for med in medications:
        if med.type == MedicationType.PEAK_REDUCTION:
            mods.glucose_multiplier *= med.multiplier if med.multiplier is not None else 1.0
        elif med.type == MedicationType.SLOW_ABSORPTION:
            duration_mult = med.duration_multiplier or 1.0
            # Peak scales with 1 / duration multiplier
            mods.duration_multiplier *= duration_mult
            mods.glucose_multiplier *= 1.0 / duration_mult
            mods.kcal_multiplier *= med.kcal_multiplier if med.kcal_multiplier is not None else 1.0
            mods.wp_bonus += med.wp_bonus or 0
        elif med.type == MedicationType.THRESHOLD_DRAIN:
            floor_mgdl = med.floor_mgdl if med.floor_mgdl is not None else graph.bg_min
            floor_row = max(0, round_half_away((floor_mgdl - graph.bg_min) / graph.cell_height_mgdl))
            if (med.depth or 0) > mods.drain_depth:
                mods.drain_depth = int(med.depth or 0)
                mods.drain_floor_row = floor_row

    return mods


def calculate_graph_state(
    placed_foods: Sequence[PlacedFood],
    ships: Sequence[Ship],
    decay_rate: float = 0.0,
    medications: Optional[MedicationModifiers] = None,
    graph: Optional[GraphConfig] = None,
) -> NDArray[np.float64]:
    """Sum the curves of all placed foods.

    Args:
        placed_foods: Foods on the graph
        ships: Ship definitions (unknown ids are skipped)
        decay_rate: Pancreas decay rate applied to every curve
        medications: Combined medication modifiers
        graph: Graph geometry

    Returns:
        Array of shape (total_columns,) with stack height in mg/dL
    """
    graph = graph or GraphConfig()
    mods = medications or MedicationModifiers()
    ships_by_id = {s.id: s for s in ships}
    bg_values = np.zeros(graph.total_columns, dtype=np.float64)

    for placed in placed_foods:
        ship = ships_by_id.get(placed.ship_id)
        if ship is None or ship.load_type != LoadType.GLUCOSE:
            continue

        curve = calculate_curve(
            ship.load * mods.glucose_multiplier,
            ship.duration * mods.duration_multiplier,
            placed.drop_column,
            decay_rate,
            graph,
        )
        for col in curve:
            graph_column = placed.drop_column + col.column_offset
            if 0 <= graph_column < graph.total_columns:
                bg_values[graph_column] += col.cube_count * graph.cell_height_mgdl

    return bg_values


def calculate_intervention_reduction(
    placed_interventions: Sequence[PlacedIntervention],
    interventions: Sequence[Intervention],
    graph: Optional[GraphConfig] = None,
) -> NDArray[np.int64]:
    """Sum the cubes removed by all placed interventions, per column."""
    graph = graph or GraphConfig()
    by_id = {i.id: i for i in interventions}
    reduction = np.zeros(graph.total_columns, dtype=np.int64)

    for placed in placed_interventions:
        intervention = by_id.get(placed.intervention_id)
        if intervention is None:
            continue

        curve = calculate_intervention_curve(
            intervention.depth,
            intervention.duration,
            placed.drop_column,
            intervention.decay_rate,
            intervention.boost_cols,
            intervention.boost_extra,
            graph,
        )
        for col in curve:
            graph_column = placed.drop_column + col.column_offset
            if 0 <= graph_column < graph.total_columns:
                reduction[graph_column] += col.cube_count

    return reduction


def apply_reductions(
    graph_state: NDArray[np.float64],
    reduction: Optional[NDArray[np.int64]] = None,
    medications: Optional[MedicationModifiers] = None,
    graph: Optional[GraphConfig] = None,
) -> NDArray[np.int64]:
    """Turn a graph state into the final cube skyline.

    Intervention cubes are subtracted first. A threshold-drain medication
    then removes up to its depth per column without going below its floor
    row. Heights never go negative.
    """
    graph = graph or GraphConfig()
    cubes = np.array(
        [round_half_away(v / graph.cell_height_mgdl) for v in graph_state],
        dtype=np.int64,
    )
    if reduction is not None:
        cubes = np.clip(cubes - reduction, 0, None)

    if medications is not None and medications.has_drain:
        above_floor = np.clip(cubes - medications.drain_floor_row, 0, None)
        cubes = cubes - np.minimum(above_floor, medications.drain_depth)

    return cubes


def skyline_to_bg(
    skyline: NDArray[np.int64], graph: Optional[GraphConfig] = None
) -> NDArray[np.float64]:
    """Convert a cube skyline to mg/dL readings (stack sits on bg_min)."""
    graph = graph or GraphConfig()
    return graph.bg_min + skyline.astype(np.float64) * graph.cell_height_mgdl


def calculate_stars(penalty: float) -> tuple[int, str]:
    """Star rating and label for a penalty score."""
    for bound, stars, label in STAR_THRESHOLDS:
        if penalty <= bound:
            return stars, label
    return 0, "Defeat"


def calculate_penalty(skyline: NDArray[np.int64]) -> PenaltyResult:
    """Score a cube skyline by the cubes it stacks into the danger zones."""
    heights = np.asarray(skyline, dtype=np.int64)
    zone_size = PENALTY_RED_ROW - PENALTY_ORANGE_ROW

    orange = int(np.clip(heights - PENALTY_ORANGE_ROW, 0, zone_size).sum())
    red = int(np.clip(heights - PENALTY_RED_ROW, 0, None).sum())

    total = orange * PENALTY_ORANGE_WEIGHT + red * PENALTY_RED_WEIGHT
    stars, label = calculate_stars(total)

    return PenaltyResult(
        total_penalty=total,
        orange_count=orange,
        red_count=red,
        stars=stars,
        label=label,
    )


def kcal_assessment(kcal_used: float, kcal_budget: float) -> str:
    """Describe how full the character is after eating ``kcal_used``."""
    if kcal_used <= 0:
        return "Fasting"
    if kcal_budget <= 0:
        return "Stuffed"

    pct = kcal_used / kcal_budget * 100
    if pct < 25:
        return "Starving"
    if pct < 50:
        return "Hungry"
    if pct < 75:
        return "Light"
    if pct < 100:
        return "Well Fed"
    if pct < 120:
        return "Full"
    if pct < 150:
        return "Overeating"
    return "Stuffed"


def build_food_curves(
    placed_foods: Sequence[PlacedFood],
    ships: Sequence[Ship],
    decay_rate: float = 0.0,
    medications: Optional[MedicationModifiers] = None,
    graph: Optional[GraphConfig] = None,
) -> list[FoodCurve]:
    """Per-placement curves, built the same way ``calculate_graph_state`` sums them.

    Unknown ships and treatment ships get an empty curve.
    """
    mods = medications or MedicationModifiers()
    ships_by_id = {s.id: s for s in ships}
    curves = []
    for placed in placed_foods:
        ship = ships_by_id.get(placed.ship_id)
        columns = []
        if ship is not None and ship.load_type == LoadType.GLUCOSE:
            columns = calculate_curve(
                ship.load * mods.glucose_multiplier,
                ship.duration * mods.duration_multiplier,
                placed.drop_column,
                decay_rate,
                graph,
            )
        curves.append(
            FoodCurve(
                placement_id=placed.id,
                ship_id=placed.ship_id,
                drop_column=placed.drop_column,
                columns=columns,
            )
        )
    return curves
