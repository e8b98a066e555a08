"""Day metrics, degradation and assessment.

Everything here is a pure function of its inputs. The degradation pipeline
runs excess BG -> circles (buffer) -> per-organ circles -> points -> tier.
"""

import math
from typing import Optional, Sequence

import numpy as np

from glucose_sim.core.constants import (
    DEGRADATION_MAX_CIRCLES,
    DEGRADATION_ORDER,
    DEGRADATION_THRESHOLD_PER_CIRCLE,
    MAX_ORGAN_TIER,
    POINTS_PER_CIRCLE,
    POINTS_PER_TIER,
    SEGMENT_DEFEAT_CIRCLES,
)
from glucose_sim.core.rounding import round_half_away
from glucose_sim.core.types import (
    DayAssessment,
    DayMetrics,
    DayResults,
    DegradationState,
    ResultsConfig,
    SegmentResult,
    SimpleDegradation,
)

RANK_MESSAGES = {
    1: "Dangerous glucose levels! Review your meal plan.",
    2: "Room for improvement. Try balancing your meals.",
    3: "Decent day. Keep working on consistency.",
    4: "Good job! Your planning is paying off.",
    5: "Excellent! Perfect glucose management!",
}


def sample_excess(bg: float, config: ResultsConfig) -> float:
    """Weighted excess of a single BG sample above the high threshold."""
    if bg <= config.bg_high:
        return 0.0
    if bg <= config.bg_critical:
        return (bg - config.bg_high) * config.high_weight
    return (
        (config.bg_critical - config.bg_high) * config.high_weight
        + (bg - config.bg_critical) * config.critical_weight
    )


def calculate_metrics(
    bg_history: Sequence[float], config: Optional[ResultsConfig] = None
) -> DayMetrics:
    """Summarize a BG series.

    Time-in-zone values are whole percentages of samples. Average, min and
    max are rounded half away from zero.

    Args:
        bg_history: BG samples in mg/dL
        config: Thresholds and weights (uses defaults if None)

    Returns:
        DayMetrics (all zeros for an empty series)
    """
    config = config or ResultsConfig()
    if len(bg_history) == 0:
        return DayMetrics(
            average_bg=0,
            min_bg=0,
            max_bg=0,
            time_in_range=0,
            time_above_high=0,
            time_above_critical=0,
            time_below_low=0,
            excess_bg=0.0,
        )

    bg = np.asarray(bg_history, dtype=np.float64)
    total = bg.size

    def percent(mask: np.ndarray) -> int:
        return round_half_away(np.count_nonzero(mask) / total * 100)

    excess = sum(sample_excess(float(v), config) for v in bg)

    return DayMetrics(
        average_bg=round_half_away(float(np.mean(bg))),
        min_bg=round_half_away(float(np.min(bg))),
        max_bg=round_half_away(float(np.max(bg))),
        time_in_range=percent((bg >= config.bg_low) & (bg <= config.bg_high)),
        time_above_high=percent(bg > config.bg_high),
        time_above_critical=percent(bg > config.bg_critical),
        time_below_low=percent(bg < config.bg_low),
        excess_bg=float(round_half_away(excess)),
    )


def calculate_degradation_buffer(
    excess_bg: float,
    threshold_per_circle: float = DEGRADATION_THRESHOLD_PER_CIRCLE,
    max_circles: int = DEGRADATION_MAX_CIRCLES,
) -> int:
    """Circles earned by ``excess_bg``: one per full threshold, capped."""
    if excess_bg <= 0 or threshold_per_circle <= 0:
        return 0
    return max(0, min(max_circles, math.floor(excess_bg / threshold_per_circle)))


def distribute_degradation_circles(
    circles: int, order: Sequence[str] = DEGRADATION_ORDER
) -> dict[str, int]:
    """Round-robin circles across organs, one per organ per round.

    Every organ in ``order`` appears in the result, with 0 if it got none.
    """
    result = {organ: 0 for organ in order}
    if not order:
        return result
    for i in range(max(0, circles)):
        result[order[i % len(order)]] += 1
    return result


def convert_circles_to_points(circles: dict[str, int]) -> dict[str, int]:
    return {organ: count * POINTS_PER_CIRCLE for organ, count in circles.items()}


def convert_points_to_tier(points: float) -> int:
    """Organ tier for accumulated points: 1 (healthy) to 5 (critical)."""
    if points <= 0:
        return 1
    return min(MAX_ORGAN_TIER, math.floor(points / POINTS_PER_TIER) + 1)


def calculate_assessment(
    total_circles: int, max_circles: int = DEGRADATION_MAX_CIRCLES
) -> DayAssessment:
    """Label for the circles earned.

    0 is Excellent, 1 is Decent, anything below ``max_circles`` is Poor and
    a full buffer is Defeat.
    """
    if total_circles <= 0:
        return DayAssessment.EXCELLENT
    if total_circles >= max_circles:
        return DayAssessment.DEFEAT
    if total_circles == 1:
        return DayAssessment.DECENT
    return DayAssessment.POOR


def compute_degradation_circles(excess_glucose: float, thresholds: Sequence[float]) -> int:
    """Number of level thresholds that ``excess_glucose`` reaches."""
    return sum(1 for t in thresholds if excess_glucose >= t)


def apply_degradation(state: DegradationState, new_circles: int) -> DegradationState:
    """Add circles to a copy of ``state``, continuing the organ cycle.

    The cycle position comes from ``state.total_circles``, so damage keeps
    rotating through liver, pancreas and kidneys across segments.
    """
    result = DegradationState(
        total_circles=state.total_circles,
        liver_circles=state.liver_circles,
        pancreas_circles=state.pancreas_circles,
        kidneys_circles=state.kidneys_circles,
    )
    for _ in range(max(0, new_circles)):
        organ = DEGRADATION_ORDER[result.total_circles % len(DEGRADATION_ORDER)]
        result.total_circles += 1
        attr = f"{organ}_circles"
        setattr(result, attr, getattr(result, attr) + 1)
    return result


def evaluate_segment(
    excess_glucose: float,
    degradation: DegradationState,
    thresholds: Sequence[float],
    defeat_threshold: float = math.inf,
) -> SegmentResult:
    """Turn a finished simulation's excess glucose into a segment result.

    Four or more new circles lose the segment, as does reaching
    ``defeat_threshold``.

    Args:
        excess_glucose: Excess glucose from the run
        degradation: Degradation before this segment
        thresholds: Level's per-circle excess thresholds
        defeat_threshold: Excess at or above which the segment is lost

    Returns:
        SegmentResult with the updated degradation
    """
    new_circles = compute_degradation_circles(excess_glucose, thresholds)
    if excess_glucose >= defeat_threshold:
        assessment = DayAssessment.DEFEAT
    else:
        assessment = calculate_assessment(new_circles, SEGMENT_DEFEAT_CIRCLES)

    return SegmentResult(
        excess_glucose=excess_glucose,
        new_degradation_circles=new_circles,
        assessment=assessment,
        degradation=apply_degradation(degradation, new_circles),
    )


def calculate_rank(metrics: DayMetrics) -> int:
    """Day rank from 1 (dangerous) to 5 (excellent)."""
    if metrics.time_below_low > 20 or metrics.time_above_critical > 30:
        return 1
    if metrics.time_below_low > 10 or metrics.time_above_critical > 20:
        return 2
    if metrics.time_in_range >= 80:
        return 5
    if metrics.time_in_range >= 60:
        return 4
    if metrics.time_in_range >= 40:
        return 3
    return 2


def get_rank_message(rank: int) -> str:
    if rank not in RANK_MESSAGES:
        raise ValueError(f"Rank must be 1-5, got {rank}")
    return RANK_MESSAGES[rank]


def calculate_day_results(
    day: int, bg_history: Sequence[float], config: Optional[ResultsConfig] = None
) -> DayResults:
    """Metrics, degradation points and rank for one day.

    Args:
        day: Day number
        bg_history: BG samples in mg/dL
        config: Thresholds and weights

    Returns:
        DayResults
    """
    metrics = calculate_metrics(bg_history, config)
    circles = distribute_degradation_circles(calculate_degradation_buffer(metrics.excess_bg))
    points = convert_circles_to_points(circles)
    rank = calculate_rank(metrics)

    return DayResults(
        day=day,
        bg_history=list(bg_history),
        metrics=metrics,
        degradation=SimpleDegradation(**points),
        rank=rank,
        message=get_rank_message(rank),
    )
