"""Temporal analysis of a blood-glucose series."""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from glucose_sim.core.constants import BG_HIGH, CELL_WIDTH_MIN


@dataclass
class ExcursionEvent:
    """A continuous stretch of BG above a threshold."""

    start_time: float
    end_time: float
    peak_bg: float
    average_bg: float

    @property
    def duration(self) -> float:
        """Duration of the excursion in minutes."""
        return self.end_time - self.start_time


class BGAnalyzer:
    """Analyzes a BG series sampled at a fixed interval.

    Sample ``i`` is taken at ``i * sample_interval`` minutes.
    """

    def __init__(
        self,
        bg_history: Optional[Sequence[float]] = None,
        threshold: float = BG_HIGH,
        sample_interval: float = CELL_WIDTH_MIN,
    ):
        """Initialize BG analyzer.

        Args:
            bg_history: BG samples in mg/dL
            threshold: BG threshold for excursion tracking
            sample_interval: Minutes between samples
        """
        if sample_interval <= 0:
            raise ValueError(f"sample_interval must be positive, got {sample_interval}")
        self.history: list[float] = list(bg_history or [])
        self.threshold = threshold
        self.sample_interval = sample_interval

    def add_sample(self, bg: float) -> None:
        self.history.append(bg)

    def clear_history(self) -> None:
        self.history.clear()

    @property
    def times(self) -> NDArray[np.float64]:
        """Sample times in minutes."""
        return np.arange(len(self.history), dtype=np.float64) * self.sample_interval

    @property
    def duration(self) -> float:
        """Time spanned by the samples, in minutes."""
        if len(self.history) < 2:
            return 0.0
        return (len(self.history) - 1) * self.sample_interval

    def time_above(self, threshold: Optional[float] = None) -> float:
        """Minutes spent above ``threshold``, one interval per sample."""
        threshold = self.threshold if threshold is None else threshold
        return sum(1 for bg in self.history if bg > threshold) * self.sample_interval

    def area_above(self, threshold: Optional[float] = None) -> float:
        """Area above ``threshold`` in mg/dL x minutes."""
        threshold = self.threshold if threshold is None else threshold
        return sum(bg - threshold for bg in self.history if bg > threshold) * self.sample_interval

    def find_excursions(
        self,
        threshold: Optional[float] = None,
        min_duration: float = 0.0,
    ) -> list[ExcursionEvent]:
        """Find continuous periods above ``threshold``.

        An excursion ends at the first sample back at or below the threshold;
        one still running at the last sample ends there.

        Args:
            threshold: BG threshold (uses the analyzer's if None)
            min_duration: Minimum excursion length in minutes

        Returns:
            List of ExcursionEvent objects
        """
        if not self.history:
            return []

        threshold = self.threshold if threshold is None else threshold
        times = self.times
        events = []

        start: Optional[float] = None
        values: list[float] = []

        for t, bg in zip(times, self.history):
            if bg > threshold:
                if start is None:
                    start = float(t)
                    values = []
                values.append(bg)
            elif start is not None:
                if float(t) - start >= min_duration:
                    events.append(
                        ExcursionEvent(
                            start_time=start,
                            end_time=float(t),
                            peak_bg=max(values),
                            average_bg=float(np.mean(values)),
                        )
                    )
                start = None

        if start is not None:
            end = float(times[-1])
            if end - start >= min_duration:
                events.append(
                    ExcursionEvent(
                        start_time=start,
                        end_time=end,
                        peak_bg=max(values),
                        average_bg=float(np.mean(values)),
                    )
                )

        return events

    def relief_periods(
        self,
        threshold: Optional[float] = None,
        min_duration: float = 0.0,
    ) -> list[tuple[float, float]]:
        """Find periods at or below ``threshold``.

        Returns:
            List of (start_time, end_time) tuples in minutes
        """
        if not self.history:
            return []

        threshold = self.threshold if threshold is None else threshold
        times = self.times
        periods = []
        start: Optional[float] = None

        for t, bg in zip(times, self.history):
            in_relief = bg <= threshold
            if in_relief and start is None:
                start = float(t)
            elif not in_relief and start is not None:
                if float(t) - start >= min_duration:
                    periods.append((start, float(t)))
                start = None

        if start is not None and float(times[-1]) - start >= min_duration:
            periods.append((start, float(times[-1])))

        return periods

    def variability(self) -> dict[str, float]:
        """Standard deviation, coefficient of variation and range."""
        if not self.history:
            return {"std": 0.0, "cv": 0.0, "range": 0.0}

        values = np.asarray(self.history, dtype=np.float64)
        mean_val = float(np.mean(values))
        std_val = float(np.std(values))

        return {
            "std": std_val,
            "cv": std_val / mean_val if mean_val > 0 else 0.0,
            "range": float(np.max(values) - np.min(values)),
        }

    def trend(self) -> float:
        """Least-squares slope of BG over time (mg/dL per minute)."""
        if len(self.history) < 2:
            return 0.0
        slope, _ = np.polyfit(self.times, np.asarray(self.history, dtype=np.float64), 1)
        return float(slope)

    def get_summary(self) -> dict[str, float]:
        """Get summary of temporal metrics.

        Returns:
            Dictionary of metric names to values
        """
        variability = self.variability()
        events = self.find_excursions()

        return {
            "duration": self.duration,
            "time_above": self.time_above(),
            "area_above": self.area_above(),
            "num_excursions": len(events),
            "max_excursion_duration": max((e.duration for e in events), default=0.0),
            "max_excursion_peak": max((e.peak_bg for e in events), default=0.0),
            "bg_std": variability["std"],
            "bg_cv": variability["cv"],
            "bg_trend": self.trend(),
        }
