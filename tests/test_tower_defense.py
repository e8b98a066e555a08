"""Tests for the tower-defense glucose simulation."""

import pytest

from glucose_sim.core.types import (
    DegradationState,
    FoodCard,
    FoodModifiers,
    SimulationConfig,
)
from glucose_sim.simulation import (
    TowerDefenseSimulation,
    initial_organs,
    meal_speed_multiplier,
    pancreas_tier,
)

DT = 1.0 / 60.0


def card(card_id="toast", glucose=40.0, tag="grain", release=2.0, speed=5.0, **mods):
    return FoodCard(
        id=card_id,
        name=card_id.title(),
        glucose=glucose,
        glucose_speed=speed,
        release_duration=release,
        tag=tag,
        modifiers=FoodModifiers(**mods),
    )


class TestConstruction:
    def test_none_cards_rejected(self):
        with pytest.raises(ValueError):
            TowerDefenseSimulation(None, DegradationState())

    def test_none_degradation_rejected(self, toast):
        with pytest.raises(ValueError):
            TowerDefenseSimulation([toast], None)

    def test_empty_meal_is_complete(self):
        sim = TowerDefenseSimulation([], DegradationState())

        assert sim.is_complete()
        state = sim.tick(1.0)
        assert state.time == 0.0
        assert state.excess_glucose == 0.0

    @pytest.mark.parametrize(
        "overrides",
        [
            dict(projectile_size=0),
            dict(impact_lifetime=-0.1),
            dict(liver_capacity=-1),
            dict(muscle_max_targets=-1),
            dict(kidney_range_start=0.9, kidney_range_end=0.8),
            dict(pancreas_tier_thresholds=()),
        ],
    )
    def test_invalid_config_rejected(self, overrides):
        with pytest.raises(ValueError):
            SimulationConfig(**overrides)

    def test_negative_degradation_rejected(self):
        with pytest.raises(ValueError):
            DegradationState(pancreas_circles=-2)


class TestHelpers:
    @pytest.mark.parametrize(
        "active, max_tier, expected",
        [(0, 4, 0), (1, 4, 1), (2, 4, 1), (3, 4, 2), (5, 4, 3), (20, 4, 4), (20, 2, 2), (20, 0, 0)],
    )
    def test_pancreas_tier(self, active, max_tier, expected):
        assert pancreas_tier(active, max_tier, (0, 1, 3, 5, 8)) == expected

    def test_meal_modifiers_do_not_stack(self):
        config = SimulationConfig()
        cards = [card("a", fiber=True), card("b", fiber=True)]
        assert meal_speed_multiplier(cards, config) == pytest.approx(0.7)

        cards.append(card("c", sugar=True))
        assert meal_speed_multiplier(cards, config) == pytest.approx(0.7 * 1.4)

    def test_degradation_weakens_organs(self):
        config = SimulationConfig()
        organs = initial_organs(
            DegradationState(total_circles=4, liver_circles=2, pancreas_circles=1, kidneys_circles=1), config
        )

        assert organs.liver.slow_factor == pytest.approx(0.8)
        assert organs.pancreas.max_tier == 3
        assert organs.kidneys.dps == pytest.approx(3.0)

    def test_degradation_floors_and_caps(self):
        organs = initial_organs(
            DegradationState(liver_circles=10, pancreas_circles=9, kidneys_circles=9), SimulationConfig()
        )

        assert organs.liver.slow_factor == 1.0
        assert organs.pancreas.max_tier == 0
        assert organs.kidneys.dps == 0.0

    def test_degradation_never_beats_baseline(self):
        config = SimulationConfig(liver_slow_penalty=-0.5, pancreas_tier_penalty=-1, kidneys_dps_penalty=-5.0)
        organs = initial_organs(
            DegradationState(liver_circles=3, pancreas_circles=2, kidneys_circles=2), config
        )

        assert organs.liver.slow_factor == pytest.approx(config.liver_slow_factor)
        assert organs.pancreas.max_tier == config.pancreas_max_tier
        assert organs.kidneys.dps == pytest.approx(config.kidney_dps)


class TestTick:
    def test_first_tick_spawns_and_activates(self, toast):
        sim = TowerDefenseSimulation([toast, card("rice")], DegradationState(), segment_delay=3.0)
        state = sim.tick(0.1)

        assert state.next_slot_to_activate == 1
        assert [p.id for p in state.projectiles] == [0]
        assert state.projectiles[0].glucose == pytest.approx(10.0)

    def test_slots_are_staggered(self, toast):
        sim = TowerDefenseSimulation([toast, card("rice")], DegradationState(), segment_delay=3.0)
        for _ in range(int(3.0 / 0.1) + 1):
            state = sim.tick(0.1)

        assert state.next_slot_to_activate == 2
        assert {p.source_slot for p in state.projectiles} >= {1}

    def test_snapshot_is_isolated(self, toast):
        sim = TowerDefenseSimulation([toast], DegradationState())
        state = sim.tick(0.1)
        state.projectiles.clear()
        state.organs.liver.capacity = 0

        fresh = sim.get_state()
        assert len(fresh.projectiles) == 1
        assert fresh.organs.liver.capacity == 4

    def test_projectile_ids_are_per_instance(self, toast):
        first = TowerDefenseSimulation([toast], DegradationState())
        second = TowerDefenseSimulation([toast], DegradationState())
        first.tick(0.1)

        assert second.tick(0.1).projectiles[0].id == 0

    def test_protein_tag_boosts_muscles(self):
        plain = TowerDefenseSimulation([card()], DegradationState()).tick(0.1)
        boosted = TowerDefenseSimulation([card(tag="protein")], DegradationState()).tick(0.1)

        assert plain.organs.pancreas.current_tier == 1
        assert plain.organs.muscles.dps == pytest.approx(7.0)
        assert boosted.organs.muscles.dps == pytest.approx(7.0 * 1.25)

    def test_liver_capacity_limits_slowed_projectiles(self):
        config = SimulationConfig(liver_capacity=1, liver_zone_start=0.0, liver_zone_end=1.0)
        sim = TowerDefenseSimulation([card(glucose=100, release=0.0)], DegradationState(), config=config)
        state = sim.tick(0.1)

        slowed = [p for p in state.projectiles if p.speed < p.base_speed]
        assert state.organs.liver.active_count == 1
        assert [p.id for p in slowed] == [0]


class TestRun:
    def test_excess_is_monotonic_and_matches_impacts(self, toast):
        sim = TowerDefenseSimulation([toast, card("soda", glucose=60, sugar=True)], DegradationState(pancreas_circles=2))
        impacts = {}
        tiers_ok = []

        def record(state):
            for imp in state.impacts:
                impacts[imp.projectile_id] = imp.glucose
            tiers_ok.append(state.organs.pancreas.current_tier <= state.organs.pancreas.max_tier)
            assert all(state.time - imp.time < 0.6 for imp in state.impacts)

        sim.run(max_time=120.0, dt=DT, callback=record)

        history = sim.history
        assert sim.is_complete()
        assert all(b >= a for a, b in zip(history, history[1:]))
        assert sim.excess_glucose == pytest.approx(sum(impacts.values()))
        assert all(tiers_ok)

    def test_without_defenders_everything_reaches_base(self, toast):
        degradation = DegradationState(total_circles=6, pancreas_circles=4, kidneys_circles=2)
        sim = TowerDefenseSimulation([toast], degradation)

        excess = sim.run(max_time=120.0, dt=DT)

        assert sim.is_complete()
        assert excess == pytest.approx(40.0)

    def test_run_is_bounded(self):
        sim = TowerDefenseSimulation([card(release=1000.0)], DegradationState())
        progress = []

        sim.run(max_time=5.0, dt=0.1, progress_callback=progress.append)

        assert not sim.is_complete()
        assert sim.get_state().time == pytest.approx(5.0, abs=0.11)
        assert progress[-1] == pytest.approx(1.0)

    def test_tick_after_completion_is_noop(self, toast):
        sim = TowerDefenseSimulation([toast], DegradationState())
        sim.run(max_time=120.0, dt=DT)
        done = sim.get_state()

        after = sim.tick(1.0)

        assert after.time == done.time
        assert after.excess_glucose == done.excess_glucose

    def test_same_inputs_same_result(self, toast):
        a = TowerDefenseSimulation([toast], DegradationState(kidneys_circles=1)).run(120.0, DT)
        b = TowerDefenseSimulation([toast], DegradationState(kidneys_circles=1)).run(120.0, DT)
        assert a == b

    def test_reset_and_summary(self, toast):
        sim = TowerDefenseSimulation([toast], DegradationState())
        sim.run(max_time=120.0, dt=DT)

        summary = sim.get_summary()
        assert summary["projectiles_spawned"] == 4
        assert summary["is_complete"]
        assert summary["num_ticks"] == len(sim.history)

        sim.reset()
        assert sim.get_state().time == 0.0
        assert sim.history == []
        assert sim.get_summary()["projectiles_spawned"] == 0

    def test_bad_dt_rejected(self, toast):
        with pytest.raises(ValueError):
            TowerDefenseSimulation([toast], DegradationState()).run(10.0, dt=0.0)
