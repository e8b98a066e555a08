"""Tower-defense glucose simulation."""

import copy
import logging
import math
from typing import Callable, Optional, Sequence

from glucose_sim.core.constants import SEGMENT_DELAY
from glucose_sim.core.types import (
    DegradationState,
    FoodCard,
    ImpactEvent,
    KidneysState,
    LiverState,
    MusclesState,
    OrganState,
    PancreasState,
    Projectile,
    SimulationConfig,
    SimulationState,
    SlotSpawnState,
)

logger = logging.getLogger(__name__)


def meal_speed_multiplier(cards: Sequence[FoodCard], config: SimulationConfig) -> float:
    """Whole-meal speed multiplier. Fiber and sugar count once each."""
    multiplier = 1.0
    if any(c.modifiers.fiber for c in cards):
        multiplier *= config.fiber_speed_multiplier
    if any(c.modifiers.sugar for c in cards):
        multiplier *= config.sugar_speed_multiplier
    return multiplier


def card_multipliers(card: FoodCard, config: SimulationConfig) -> tuple[float, float]:
    """Per-card (speed, duration) multipliers from protein and fat."""
    speed = 1.0
    duration = 1.0
    if card.modifiers.protein:
        duration *= config.protein_duration_multiplier
    if card.modifiers.fat:
        speed *= config.fat_speed_multiplier
        duration *= config.fat_duration_multiplier
    return speed, duration


def pancreas_tier(active_count: int, max_tier: int, thresholds: Sequence[int]) -> int:
    """Highest tier whose threshold ``active_count`` reaches, capped at ``max_tier``."""
    tier = 0
    for i in range(len(thresholds) - 1, -1, -1):
        if active_count >= thresholds[i]:
            tier = i
            break
    return max(0, min(tier, max_tier))


def initial_organs(degradation: DegradationState, config: SimulationConfig) -> OrganState:
    """Organ state at the start of a run, weakened by prior degradation.

    Each organ stays between its configured baseline and its fully
    degraded floor.
    """
    slow_factor = config.liver_slow_factor + degradation.liver_circles * config.liver_slow_penalty
    max_tier = config.pancreas_max_tier - degradation.pancreas_circles * config.pancreas_tier_penalty
    kidney_dps = config.kidney_dps - degradation.kidneys_circles * config.kidneys_dps_penalty

    return OrganState(
        liver=LiverState(
            slow_factor=min(1.0, max(config.liver_slow_factor, slow_factor)),
            zone_start=config.liver_zone_start,
            zone_end=config.liver_zone_end,
            capacity=config.liver_capacity,
        ),
        pancreas=PancreasState(
            max_tier=max(0, min(config.pancreas_max_tier, max_tier)),
        ),
        muscles=MusclesState(
            dps=0.0,
            range_start=config.muscle_range_start,
            range_end=config.muscle_range_end,
            max_targets=config.muscle_max_targets,
        ),
        kidneys=KidneysState(
            dps=max(0.0, min(config.kidney_dps, kidney_dps)),
            range_start=config.kidney_range_start,
            range_end=config.kidney_range_end,
            max_targets=config.kidney_max_targets,
        ),
    )


class TowerDefenseSimulation:
    """Glucose projectiles flowing past organs toward the base.

    Each meal card is a slot that spawns projectiles after a staggered
    delay. Organs slow or destroy projectiles; whatever reaches position 1.0
    adds to ``excess_glucose``.

    The state is owned by this instance. ``tick`` and ``get_state`` hand out
    deep copies so callers cannot change a running simulation.

    Attributes:
        meal_cards: Cards to simulate, one slot each, in order
        degradation: Degradation carried in from previous days
        segment_delay: Seconds between slot activations
        config: Simulation tunables
    """

    def __init__(
        self,
        meal_cards: Sequence[FoodCard],
        degradation: DegradationState,
        segment_delay: float = SEGMENT_DELAY,
        config: Optional[SimulationConfig] = None,
    ):
        """Initialize simulation.

        Args:
            meal_cards: Ordered meal cards
            degradation: Prior-day degradation state
            segment_delay: Seconds between slot activations
            config: Simulation tunables (uses defaults if None)

        Raises:
            ValueError: If meal_cards or degradation is None, or the delay is negative
        """
        if meal_cards is None:
            raise ValueError("meal_cards is required")
        if degradation is None:
            raise ValueError("degradation is required")
        if segment_delay < 0:
            raise ValueError(f"segment_delay must be non-negative, got {segment_delay}")

        self.meal_cards = list(meal_cards)
        self.degradation = degradation
        self.segment_delay = segment_delay
        self.config = config or SimulationConfig()

        self._speed_multiplier = meal_speed_multiplier(self.meal_cards, self.config)
        self._muscle_boost = (
            self.config.protein_tag_muscle_boost
            if any(c.tag == self.config.protein_tag for c in self.meal_cards)
            else 1.0
        )

        self._init_run()

    def _init_run(self) -> None:
        self._state = SimulationState(organs=initial_organs(self.degradation, self.config))
        self._next_projectile_id = 0
        self._history: list[float] = []
        self._projectiles_spawned = 0
        self._peak_active = 0
        self._peak_tier = 0
        self._check_completion()

    @property
    def history(self) -> list[float]:
        """``excess_glucose`` after each tick."""
        return self._history.copy()

    @property
    def excess_glucose(self) -> float:
        return self._state.excess_glucose

    def is_complete(self) -> bool:
        return self._state.is_complete

    def get_state(self) -> SimulationState:
        """Read-only snapshot of the current state."""
        return copy.deepcopy(self._state)

    def tick(self, dt: float) -> SimulationState:
        """Advance the simulation by ``dt`` seconds.

        Sub-steps run in a fixed order: activate slots, spawn, move, update
        pancreas, organ fire, resolve impacts, check completion. A completed
        simulation is not advanced.

        Args:
            dt: Time step in seconds

        Returns:
            Snapshot of the state after the tick
        """
        if self._state.is_complete:
            return self.get_state()

        self._state.time += dt

        self._activate_slots()
        self._spawn_projectiles(dt)
        self._move_projectiles(dt)
        self._update_pancreas()
        self._fire(self._state.organs.muscles, dt)
        self._fire(self._state.organs.kidneys, dt)
        self._resolve_impacts()
        self._check_completion()

        self._history.append(self._state.excess_glucose)
        return self.get_state()

    def run(
        self,
        max_time: float,
        dt: float = 1.0 / 60.0,
        callback: Optional[Callable[[SimulationState], None]] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> float:
        """Tick until complete or ``max_time`` of simulated time has passed.

        Args:
            max_time: Upper bound on simulated seconds
            dt: Fixed time step
            callback: Optional callback with each snapshot
            progress_callback: Optional progress callback (0-1, by time)

        Returns:
            Final excess glucose
        """
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        start_time = self._state.time
        while not self._state.is_complete and self._state.time - start_time < max_time:
            snapshot = self.tick(dt)

            if callback:
                callback(snapshot)

            if progress_callback:
                progress = (self._state.time - start_time) / max_time if max_time > 0 else 1.0
                progress_callback(min(1.0, progress))

        if not self._state.is_complete:
            logger.debug("Run stopped at t=%.2fs before completion", self._state.time)
        return self._state.excess_glucose

    def reset(self) -> None:
        """Restart the run from the construction inputs."""
        self._init_run()

    def get_summary(self) -> dict:
        """Summary statistics of the run so far.

        Returns:
            Dictionary with summary statistics
        """
        return {
            "num_ticks": len(self._history),
            "duration": self._state.time,
            "excess_glucose": self._state.excess_glucose,
            "projectiles_spawned": self._projectiles_spawned,
            "projectiles_in_flight": len(self._state.projectiles),
            "peak_active_projectiles": self._peak_active,
            "peak_pancreas_tier": self._peak_tier,
            "is_complete": self._state.is_complete,
        }

    # Sub-steps

    def _activate_slots(self) -> None:
        state = self._state
        while (
            state.next_slot_to_activate < len(self.meal_cards)
            and state.time >= state.next_slot_activation_time
        ):
            slot_index = state.next_slot_to_activate
            card = self.meal_cards[slot_index]

            speed_mult, duration_mult = card_multipliers(card, self.config)
            effective_duration = card.release_duration * duration_mult
            effective_speed = card.glucose_speed * self._speed_multiplier * speed_mult
            total = max(0.0, card.glucose)
            count = max(1, math.ceil(total / self.config.projectile_size))

            state.slot_spawn_states.append(
                SlotSpawnState(
                    slot_index=slot_index,
                    remaining_glucose=total,
                    spawn_timer=0.0,
                    spawn_interval=effective_duration / count,
                    projectile_glucose=total / count,
                    base_speed=effective_speed,
                )
            )
            logger.debug(
                "Slot %d (%s) active at t=%.2fs: %d projectiles",
                slot_index,
                card.id,
                state.time,
                count,
            )

            state.next_slot_to_activate += 1
            state.next_slot_activation_time = state.next_slot_to_activate * self.segment_delay

    def _spawn_projectiles(self, dt: float) -> None:
        state = self._state
        active = []

        for slot in state.slot_spawn_states:
            slot.spawn_timer -= dt

            while slot.spawn_timer <= 0 and slot.remaining_glucose > 0:
                glucose = min(slot.projectile_glucose, slot.remaining_glucose)
                speed = slot.base_speed * self.config.speed_scale
                state.projectiles.append(
                    Projectile(
                        id=self._next_projectile_id,
                        source_slot=slot.slot_index,
                        glucose=glucose,
                        position=0.0,
                        speed=speed,
                        base_speed=speed,
                    )
                )
                self._next_projectile_id += 1
                self._projectiles_spawned += 1

                slot.remaining_glucose -= glucose
                slot.spawn_timer += slot.spawn_interval

            # Float residue from splitting the total is not worth a projectile
            if slot.remaining_glucose > 1e-9:
                active.append(slot)

        state.slot_spawn_states = active

    def _move_projectiles(self, dt: float) -> None:
        liver = self._state.organs.liver
        slowed = 0

        # Capacity goes to projectiles in insertion order
        for p in self._state.projectiles:
            speed = p.base_speed
            if liver.zone_start <= p.position <= liver.zone_end and slowed < liver.capacity:
                speed *= liver.slow_factor
                slowed += 1
            p.speed = speed
            p.position += speed * dt

        liver.active_count = slowed

    def _update_pancreas(self) -> None:
        organs = self._state.organs
        active = len(self._state.projectiles)
        organs.pancreas.current_tier = pancreas_tier(
            active, organs.pancreas.max_tier, self.config.pancreas_tier_thresholds
        )
        organs.muscles.dps = (
            organs.pancreas.current_tier * self.config.muscle_dps_per_tier * self._muscle_boost
        )

        self._peak_active = max(self._peak_active, active)
        self._peak_tier = max(self._peak_tier, organs.pancreas.current_tier)

    def _fire(self, organ: MusclesState | KidneysState, dt: float) -> None:
        """Damage up to ``max_targets`` in-range projectiles, closest to base first."""
        in_range = [
            p for p in self._state.projectiles if organ.range_start <= p.position <= organ.range_end
        ]
        # Stable sort keeps insertion order among equal positions
        in_range.sort(key=lambda p: p.position, reverse=True)
        targets = in_range[: organ.max_targets]

        organ.targets = [p.id for p in targets]
        for p in targets:
            p.glucose -= organ.dps * dt

    def _resolve_impacts(self) -> None:
        state = self._state
        surviving = []

        for p in state.projectiles:
            if p.glucose <= 0:
                continue
            if p.position >= 1.0:
                state.excess_glucose += p.glucose
                state.impacts.append(
                    ImpactEvent(
                        projectile_id=p.id,
                        source_slot=p.source_slot,
                        time=state.time,
                        glucose=p.glucose,
                    )
                )
                continue
            surviving.append(p)

        state.projectiles = surviving
        state.impacts = [
            imp for imp in state.impacts if state.time - imp.time < self.config.impact_lifetime
        ]

    def _check_completion(self) -> None:
        state = self._state
        if (
            state.next_slot_to_activate >= len(self.meal_cards)
            and not state.slot_spawn_states
            and not state.projectiles
        ):
            if not state.is_complete:
                logger.debug(
                    "Simulation complete at t=%.2fs, excess glucose %.1f",
                    state.time,
                    state.excess_glucose,
                )
            state.is_complete = True
