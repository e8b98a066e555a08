"""Tests for the fixed-timestep controller."""

import pytest

from glucose_sim.core.types import DegradationState
from glucose_sim.simulation import TimeController, TowerDefenseSimulation


class Counter:
    def __init__(self):
        self.steps = []

    def tick(self, dt):
        self.steps.append(dt)


def test_frame_pays_for_whole_steps():
    target = Counter()
    controller = TimeController(target, time_step=1 / 60)

    assert controller.advance(1 / 30) == 2
    assert target.steps == [1 / 60, 1 / 60]
    assert controller.current_time == pytest.approx(1 / 30)


def test_short_frames_accumulate():
    target = Counter()
    controller = TimeController(target, time_step=0.1)

    assert controller.advance(0.06) == 0
    assert controller.accumulator == pytest.approx(0.06)
    assert controller.advance(0.06) == 1
    assert controller.accumulator == pytest.approx(0.02)


def test_step_cap_drops_backlog():
    target = Counter()
    controller = TimeController(target, time_step=0.01, max_steps_per_frame=10)

    assert controller.advance(1.0) == 10
    assert controller.accumulator == 0.0


def test_pause_and_resume():
    target = Counter()
    controller = TimeController(target, time_step=0.1)

    controller.pause()
    assert controller.advance(1.0) == 0
    assert controller.toggle_pause() is False
    assert controller.advance(0.1) == 1
    controller.pause()
    controller.resume()
    assert not controller.paused


def test_tick_callback_and_reset():
    seen = []
    controller = TimeController(time_step=0.5)
    controller.set_time_tick_callback(seen.append)

    controller.advance(1.0)
    assert seen == [0.5, 1.0]

    controller.reset()
    assert controller.current_time == 0.0
    assert controller.accumulator == 0.0


def test_invalid_settings():
    with pytest.raises(ValueError):
        TimeController(time_step=0)
    with pytest.raises(ValueError):
        TimeController(max_steps_per_frame=0)


def test_frame_rate_does_not_change_result(toast):
    def drive(frame_dt, frames):
        sim = TowerDefenseSimulation([toast], DegradationState())
        controller = TimeController(sim, time_step=1 / 60)
        for _ in range(frames):
            controller.advance(frame_dt)
        return sim.get_state().time, sim.excess_glucose

    slow = drive(1 / 30, 60)
    fast = drive(1 / 120, 240)

    assert slow[0] == pytest.approx(fast[0])
    assert slow[1] == pytest.approx(fast[1])
