"""Curve engine for the planning graph."""

from glucose_sim.curve.cube_engine import (
    CubeColumn,
    FoodCurve,
    PenaltyResult,
    decay_rate_for_tier,
    calculate_curve,
    calculate_intervention_curve,
    compute_medication_modifiers,
    calculate_graph_state,
    calculate_intervention_reduction,
    apply_reductions,
    skyline_to_bg,
    calculate_stars,
    calculate_penalty,
    kcal_assessment,
    build_food_curves,
)

__all__ = [
    "CubeColumn",
    "FoodCurve",
    "PenaltyResult",
    "decay_rate_for_tier",
    "calculate_curve",
    "calculate_intervention_curve",
    "compute_medication_modifiers",
    "calculate_graph_state",
    "calculate_intervention_reduction",
    "apply_reductions",
    "skyline_to_bg",
    "calculate_stars",
    "calculate_penalty",
    "kcal_assessment",
    "build_food_curves",
]
