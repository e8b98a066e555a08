"""Results module: day metrics, degradation and BG analysis."""

from glucose_sim.results.calculator import (
    RANK_MESSAGES,
    apply_degradation,
    calculate_assessment,
    calculate_day_results,
    calculate_degradation_buffer,
    calculate_metrics,
    calculate_rank,
    compute_degradation_circles,
    convert_circles_to_points,
    convert_points_to_tier,
    distribute_degradation_circles,
    evaluate_segment,
    get_rank_message,
    sample_excess,
)
from glucose_sim.results.bg_analysis import BGAnalyzer, ExcursionEvent

__all__ = [
    "RANK_MESSAGES",
    "apply_degradation",
    "calculate_assessment",
    "calculate_day_results",
    "calculate_degradation_buffer",
    "calculate_metrics",
    "calculate_rank",
    "compute_degradation_circles",
    "convert_circles_to_points",
    "convert_points_to_tier",
    "distribute_degradation_circles",
    "evaluate_segment",
    "get_rank_message",
    "sample_excess",
    "BGAnalyzer",
    "ExcursionEvent",
]
