"""Tests for the hour-based container simulation."""

import pytest

from glucose_sim.core.types import (
    ContainerSimConfig,
    DaySegment,
    LoadType,
    PlacedFood,
    Ship,
    SimpleDegradation,
)
from glucose_sim.results import calculate_day_results
from glucose_sim.simulation import (
    ContainerSimulation,
    organ_tiers,
    predict_bg_history,
    segment_for_hour,
    unload_hours,
)

BREAD = Ship(id="bread", name="Bread", load=60, duration=60)
FEAST = Ship(id="feast", name="Feast", load=100, duration=60)
WALK = Ship(
    id="walk",
    name="Walk",
    load=60,
    duration=60,
    load_type=LoadType.TREATMENT,
    target_container="exercise_effect",
)


def place(ship_id, column=0, placement_id=None):
    return PlacedFood(id=placement_id or f"{ship_id}-{column}", ship_id=ship_id, drop_column=column)


class TestHelpers:
    @pytest.mark.parametrize("duration, hours", [(10, 1), (60, 1), (90, 2), (180, 3)])
    def test_unload_hours(self, duration, hours):
        assert unload_hours(Ship(id="s", name="S", load=10, duration=duration)) == hours

    def test_organ_tiers(self):
        tiers = organ_tiers(SimpleDegradation(liver=50, pancreas=100), ContainerSimConfig())

        assert tiers.liver_tier == 3
        assert tiers.pancreas_tier == 5
        assert tiers.liver_capacity_reduction == 20.0
        assert tiers.pancreas_max_tier_reduction == 4

    @pytest.mark.parametrize(
        "hour, segment",
        [(0, DaySegment.MORNING), (5, DaySegment.MORNING), (6, DaySegment.DAY), (17, DaySegment.EVENING), (18, DaySegment.EVENING)],
    )
    def test_segment_for_hour(self, hour, segment):
        assert segment_for_hour(hour, 6) == segment

    def test_config_validation(self):
        with pytest.raises(ValueError):
            ContainerSimConfig(substeps_per_hour=0)
        with pytest.raises(ValueError):
            ContainerSimConfig(liver_capacity_reduction_by_tier=(0.0, 10.0))


class TestConstruction:
    def test_treatment_without_target_rejected(self):
        ship = Ship(id="pill", name="Pill", load=10, duration=60, load_type=LoadType.TREATMENT)
        with pytest.raises(ValueError):
            ContainerSimulation([place("pill")], [ship])

    def test_unknown_ships_are_skipped(self):
        sim = ContainerSimulation([place("ghost"), place("bread", 3)], [BREAD])
        assert [p.ship_id for p in sim.get_state().queue] == ["bread"]

    def test_queue_follows_slot_order(self):
        sim = ContainerSimulation([place("feast", 5), place("bread", 1)], [BREAD, FEAST])
        assert [p.ship_id for p in sim.get_state().queue] == ["bread", "feast"]


class TestRun:
    def test_empty_day_is_flat(self):
        history = ContainerSimulation([], []).run()
        assert history == [100.0] * 19

    def test_meal_raises_bg(self):
        sim = ContainerSimulation([place("bread")], [BREAD])
        history = sim.run()

        assert len(history) == 19
        assert max(history) > 100.0
        assert sim.is_complete()
        assert sim.get_summary()["hours"] == 18

    def test_ships_unload_one_after_another(self):
        sim = ContainerSimulation([place("bread", 0), place("feast", 1)], [BREAD, FEAST])

        state = sim.tick()
        assert state.unloading.ship_id == "bread"
        assert [p.ship_id for p in state.queue] == ["feast"]

        for _ in range(9):
            state = sim.tick()
        assert state.unloading is None
        assert state.hour == 1

        state = sim.tick()
        assert state.unloading.ship_id == "feast"

    def test_callback_once_per_hour(self):
        hours = []
        ContainerSimulation([], []).run(callback=lambda s: hours.append(s.hour))
        assert hours == list(range(1, 19))

    def test_tick_after_completion_is_noop(self):
        sim = ContainerSimulation([], [])
        sim.run()
        state = sim.tick()
        assert state.hour == 18
        assert len(state.bg_history) == 19

    def test_segments(self):
        sim = ContainerSimulation([], [])
        for _ in range(6 * 10):
            state = sim.tick()
        assert state.segment == DaySegment.DAY
        for _ in range(6 * 10):
            state = sim.tick()
        assert state.segment == DaySegment.EVENING

    def test_reset(self):
        sim = ContainerSimulation([place("bread")], [BREAD])
        sim.run()
        sim.reset()

        assert sim.bg_history == [100.0]
        assert not sim.is_complete()
        assert len(sim.get_state().queue) == 1

    def test_snapshot_is_a_copy(self):
        sim = ContainerSimulation([], [])
        sim.get_state().containers.bg = 999.0
        assert sim.get_state().containers.bg == 100.0

    def test_history_feeds_day_results(self):
        history = predict_bg_history([place("feast"), place("feast", 1, "second")], [FEAST])
        results = calculate_day_results(1, history)

        assert results.bg_history == history
        assert results.metrics.max_bg >= 100


class TestLiver:
    def test_passthrough_when_full(self):
        sim = ContainerSimulation([place("feast")], [FEAST], config=ContainerSimConfig(liver_capacity=10))
        state = sim.tick()

        assert state.is_liver_passthrough
        assert state.liver_rate == 100.0
        assert state.containers.liver == pytest.approx(0.0)
        assert state.containers.bg == pytest.approx(110.0 - 3.0)

    def test_degradation_shrinks_liver(self):
        sim = ContainerSimulation([place("feast")], [FEAST], degradation=SimpleDegradation(liver=50))
        assert sim.effective_liver_capacity == 80.0

    def test_liver_boost_charges_and_cooldown(self):
        sim = ContainerSimulation([], [])

        assert sim.activate_liver_boost()
        assert not sim.activate_liver_boost()
        state = sim.get_state()
        assert state.liver_boost.charges == 2
        assert state.liver_boost.is_active

        for _ in range(10):
            state = sim.tick()
        assert not state.liver_boost.is_active
        assert state.liver_boost.cooldown_hours == 2

        for _ in range(20):
            sim.tick()
        assert sim.activate_liver_boost()


class TestPancreasAndMuscles:
    def test_healthy_pancreas_drives_muscles(self):
        sim = ContainerSimulation([], [], config=ContainerSimConfig(initial_bg=350))
        state = sim.tick()

        assert state.pancreas_tier == 4
        assert state.muscle_tier == 4
        assert state.muscle_rate == 45.0

    def test_degraded_pancreas_caps_muscles(self):
        sim = ContainerSimulation(
            [], [], degradation=SimpleDegradation(pancreas=100), config=ContainerSimConfig(initial_bg=350)
        )
        state = sim.tick()

        assert state.pancreas_tier == 4
        assert state.muscle_tier == 1
        assert state.muscle_rate == 30.0

    def test_fast_insulin_ignores_degradation(self):
        sim = ContainerSimulation(
            [], [], degradation=SimpleDegradation(pancreas=100), config=ContainerSimConfig(initial_bg=350)
        )
        assert sim.activate_pancreas_boost()
        state = sim.tick()

        assert state.is_fast_insulin_active
        assert state.muscle_tier == 5
        assert state.muscle_rate == 50.0

    def test_exercise_adds_a_tier(self):
        sim = ContainerSimulation([place("walk")], [WALK], config=ContainerSimConfig(initial_bg=350))
        state = sim.tick()

        assert state.containers.exercise_effect == pytest.approx(4.0)
        assert state.muscle_tier == 5
