"""Fixed-timestep driver for frame-based hosts."""

from typing import Callable, Optional, Protocol


class Tickable(Protocol):
    """Anything advanced by a fixed time step."""

    def tick(self, dt: float): ...


class TimeController:
    """Turns variable frame deltas into fixed simulation steps.

    Frame time accumulates and is spent in ``time_step`` chunks, so a target
    ticked at 30 fps and one ticked at 144 fps see the same sequence of
    steps. At most ``max_steps_per_frame`` steps run per frame; leftover
    time beyond that is dropped.

    Attributes:
        time_step: Simulation time step in seconds
        max_steps_per_frame: Step cap per ``advance`` call
        current_time: Simulated time advanced so far
        paused: Whether stepping is paused
    """

    def __init__(
        self,
        target: Optional[Tickable] = None,
        time_step: float = 1.0 / 60.0,
        max_steps_per_frame: int = 10,
    ):
        """Initialize time controller.

        Args:
            target: Object whose ``tick(dt)`` is called each step
            time_step: Simulation time step in seconds
            max_steps_per_frame: Step cap per frame
        """
        if time_step <= 0:
            raise ValueError(f"time_step must be positive, got {time_step}")
        if max_steps_per_frame < 1:
            raise ValueError(f"max_steps_per_frame must be at least 1, got {max_steps_per_frame}")

        self.target = target
        self.time_step = time_step
        self.max_steps_per_frame = max_steps_per_frame

        self._current_time = 0.0
        self._accumulator = 0.0
        self._paused = False
        self._on_time_tick: Optional[Callable[[float], None]] = None

    @property
    def current_time(self) -> float:
        """Simulated time in seconds."""
        return self._current_time

    @property
    def accumulator(self) -> float:
        """Frame time not yet spent on a step."""
        return self._accumulator

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        """Pause stepping."""
        self._paused = True

    def resume(self) -> None:
        """Resume stepping."""
        self._paused = False

    def toggle_pause(self) -> bool:
        """Toggle pause state.

        Returns:
            New pause state
        """
        self._paused = not self._paused
        return self._paused

    def step(self) -> float:
        """Run a single fixed step regardless of accumulated time.

        Returns:
            New current time
        """
        if self.target is not None:
            self.target.tick(self.time_step)
        self._current_time += self.time_step

        if self._on_time_tick:
            self._on_time_tick(self._current_time)

        return self._current_time

    def advance(self, frame_dt: float) -> int:
        """Feed one frame's elapsed time and run the steps it pays for.

        Args:
            frame_dt: Real time since the previous frame, in seconds

        Returns:
            Number of steps run
        """
        if self._paused or frame_dt <= 0:
            return 0

        self._accumulator += frame_dt
        steps = 0
        while self._accumulator >= self.time_step and steps < self.max_steps_per_frame:
            self.step()
            self._accumulator -= self.time_step
            steps += 1

        if steps == self.max_steps_per_frame and self._accumulator >= self.time_step:
            self._accumulator = 0.0

        return steps

    def reset(self) -> None:
        """Reset time and the accumulator to zero."""
        self._current_time = 0.0
        self._accumulator = 0.0

    def set_time_tick_callback(self, callback: Callable[[float], None]) -> None:
        """Set callback for steps.

        Args:
            callback: Function called after each step with current time
        """
        self._on_time_tick = callback
