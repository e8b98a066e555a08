"""Hour-based container simulation that produces the day's BG series."""

import copy
import logging
from typing import Callable, Optional, Sequence

from glucose_sim.core.rounding import round_half_away
from glucose_sim.core.types import (
    BoostState,
    ContainerId,
    ContainerLevels,
    ContainerSimConfig,
    ContainerSimState,
    DaySegment,
    LoadType,
    OrganTiers,
    PlacedFood,
    Ship,
    SimpleDegradation,
    UnloadingShip,
)
from glucose_sim.results.calculator import convert_points_to_tier
from glucose_sim.simulation.rules import (
    RuleContext,
    RulesConfig,
    apply_modifiers,
    default_rules,
    evaluate_organ_rules,
)

logger = logging.getLogger(__name__)

SEGMENTS = (DaySegment.MORNING, DaySegment.DAY, DaySegment.EVENING)


def organ_tiers(points: SimpleDegradation, config: ContainerSimConfig) -> OrganTiers:
    """Liver and pancreas tiers for degradation points, with their effects."""
    liver_tier = convert_points_to_tier(points.liver)
    pancreas_tier = convert_points_to_tier(points.pancreas)
    return OrganTiers(
        liver_tier=liver_tier,
        pancreas_tier=pancreas_tier,
        liver_capacity_reduction=config.liver_capacity_reduction_by_tier[liver_tier - 1],
        pancreas_max_tier_reduction=config.pancreas_max_tier_reduction_by_tier[pancreas_tier - 1],
    )


def unload_hours(ship: Ship) -> int:
    """Interpreted hours a ship takes to unload (at least one)."""
    return max(1, round_half_away(ship.duration / 60))


def segment_for_hour(hour: int, segment_hours: int) -> DaySegment:
    return SEGMENTS[min(hour // segment_hours, len(SEGMENTS) - 1)]


class ContainerSimulation:
    """Liver, BG and effect containers driven by organ rules.

    Placed ships unload one after another, in slot order, starting on hour
    boundaries. Every substep the liver releases into BG, the pancreas
    picks a tier from BG and the muscles drain BG at that tier. BG is
    recorded at the start and at every hour boundary.

    Attributes:
        placed_ships: Placements in the order given
        ships: Ship definitions by id
        degradation: Degradation points carried into the day
        config: Simulation tunables
        rules: Organ rules
    """

    def __init__(
        self,
        placed_ships: Sequence[PlacedFood],
        ships: Sequence[Ship],
        degradation: Optional[SimpleDegradation] = None,
        config: Optional[ContainerSimConfig] = None,
        rules: Optional[RulesConfig] = None,
    ):
        """Initialize simulation.

        Args:
            placed_ships: Placements; ``drop_column`` gives the slot order
            ships: Ship definitions
            degradation: Degradation points (healthy if None)
            config: Simulation tunables (uses defaults if None)
            rules: Organ rules (uses ``default_rules()`` if None)

        Raises:
            ValueError: If a placed treatment ship has no valid target container
        """
        self.ships = {s.id: s for s in ships}
        self.degradation = degradation or SimpleDegradation()
        self.config = config or ContainerSimConfig()
        self.rules = rules or default_rules()

        self.placed_ships = []
        for placed in placed_ships:
            ship = self.ships.get(placed.ship_id)
            if ship is None:
                logger.debug("Skipping placement %s of unknown ship %s", placed.id, placed.ship_id)
                continue
            self._target_for(ship)
            self.placed_ships.append(placed)

        self._init_run()

    def _init_run(self) -> None:
        config = self.config
        self._state = ContainerSimState(
            containers=ContainerLevels(liver=config.initial_liver, bg=config.initial_bg),
            liver_boost=BoostState(
                charges=config.liver_boost_charges, max_charges=config.liver_boost_charges
            ),
            pancreas_boost=BoostState(
                charges=config.pancreas_boost_charges, max_charges=config.pancreas_boost_charges
            ),
            tiers=organ_tiers(self.degradation, config),
            queue=sorted(self.placed_ships, key=lambda p: p.drop_column),
            bg_history=[config.initial_bg],
        )

    @property
    def bg_history(self) -> list[float]:
        """BG at the start and after every completed hour."""
        return self._state.bg_history.copy()

    @property
    def effective_liver_capacity(self) -> float:
        return max(0.0, self.config.liver_capacity - self._state.tiers.liver_capacity_reduction)

    def is_complete(self) -> bool:
        return self._state.is_complete

    def get_state(self) -> ContainerSimState:
        """Read-only snapshot of the current state."""
        return copy.deepcopy(self._state)

    def tick(self) -> ContainerSimState:
        """Advance the simulation by one substep.

        Order: start the next ship (hour boundary only), unload, decay
        effects, liver release, pancreas regulation, muscle drain. Boost
        timers, BG history and the clock advance on hour boundaries.

        Returns:
            Snapshot of the state after the substep
        """
        state = self._state
        if state.is_complete:
            return self.get_state()

        fraction = 1.0 / self.config.substeps_per_hour

        if state.substep == 0:
            self._start_next_ship()

        self._unload(fraction)
        self._decay_effects(fraction)
        self._release_liver(fraction)
        self._regulate_pancreas()
        self._drain_muscles(fraction)

        state.substep += 1
        if state.substep >= self.config.substeps_per_hour:
            state.substep = 0
            self._update_boosts()
            state.bg_history.append(state.containers.bg)
            state.hour += 1
            state.segment = segment_for_hour(state.hour, self.config.segment_hours)
            if state.hour >= self.config.total_hours:
                state.is_complete = True
                logger.debug("Container simulation complete, final BG %.1f", state.containers.bg)

        return self.get_state()

    def run(
        self,
        callback: Optional[Callable[[ContainerSimState], None]] = None,
    ) -> list[float]:
        """Tick to completion.

        Args:
            callback: Called with the state after each completed hour

        Returns:
            BG history
        """
        while not self._state.is_complete:
            state = self.tick()
            if callback and state.substep == 0:
                callback(state)
        return self.bg_history

    def activate_liver_boost(self) -> bool:
        """Spend a liver boost charge. False if none is ready."""
        return self._activate(
            self._state.liver_boost, self.config.liver_boost_duration, self.config.liver_boost_cooldown
        )

    def activate_pancreas_boost(self) -> bool:
        """Spend a fast insulin charge. False if none is ready."""
        return self._activate(
            self._state.pancreas_boost,
            self.config.pancreas_boost_duration,
            self.config.pancreas_boost_cooldown,
        )

    def reset(self) -> None:
        """Restart from the construction inputs."""
        self._init_run()

    def get_summary(self) -> dict:
        """Summary of the run so far."""
        history = self._state.bg_history
        return {
            "hours": self._state.hour,
            "final_bg": history[-1],
            "max_bg": max(history),
            "min_bg": min(history),
            "liver_boost_charges": self._state.liver_boost.charges,
            "pancreas_boost_charges": self._state.pancreas_boost.charges,
            "is_complete": self._state.is_complete,
        }

    # Internals

    def _target_for(self, ship: Ship) -> ContainerId:
        if ship.load_type == LoadType.GLUCOSE:
            return ContainerId.LIVER
        try:
            return ContainerId(ship.target_container)
        except ValueError as e:
            raise ValueError(
                f"Treatment ship {ship.id} has no valid target container: {ship.target_container!r}"
            ) from e

    def _context(self) -> RuleContext:
        state = self._state
        return RuleContext(
            containers=state.containers,
            capacities={
                ContainerId.LIVER.value: self.effective_liver_capacity,
                ContainerId.BG.value: self.config.bg_capacity,
            },
            boosts={"liver_boost": state.liver_boost, "pancreas_boost": state.pancreas_boost},
            degradation={"liver": self.degradation.liver, "pancreas": self.degradation.pancreas},
        )

    def _start_next_ship(self) -> None:
        state = self._state
        if state.unloading is not None or not state.queue:
            return

        placed = state.queue.pop(0)
        ship = self.ships[placed.ship_id]
        hours = unload_hours(ship)
        state.unloading = UnloadingShip(
            placement_id=placed.id,
            ship_id=ship.id,
            remaining_substeps=hours * self.config.substeps_per_hour,
            total_hours=hours,
            load_per_hour=ship.load / hours,
            target=self._target_for(ship),
        )
        logger.debug("Hour %d: unloading %s into %s", state.hour, ship.id, state.unloading.target.value)

    def _unload(self, fraction: float) -> None:
        state = self._state
        unloading = state.unloading
        if unloading is None:
            return

        state.containers.add(unloading.target, unloading.load_per_hour * fraction)
        if unloading.target == ContainerId.LIVER:
            state.containers.liver = min(state.containers.liver, self.effective_liver_capacity)

        unloading.remaining_substeps -= 1
        if unloading.remaining_substeps <= 0:
            state.unloading = None

    def _decay_effects(self, fraction: float) -> None:
        c = self._state.containers
        c.metformin_effect = max(0.0, c.metformin_effect - self.config.metformin_decay_rate * fraction)
        c.exercise_effect = max(0.0, c.exercise_effect - self.config.exercise_decay_rate * fraction)
        c.intense_exercise_effect = max(
            0.0, c.intense_exercise_effect - self.config.intense_exercise_decay_rate * fraction
        )

    def _release_liver(self, fraction: float) -> None:
        state = self._state
        result = evaluate_organ_rules(self.rules.liver, self._context())
        rate = result.final_rate

        # A nearly full liver passes its input straight through unless boosted
        capacity = self.effective_liver_capacity
        fill = state.containers.liver / capacity if capacity > 0 else 0.0
        inflow = 0.0
        if state.unloading is not None and state.unloading.target == ContainerId.LIVER:
            inflow = state.unloading.load_per_hour
        passthrough = (
            fill >= self.config.liver_passthrough_fill and inflow > 0 and not state.liver_boost.is_active
        )
        if passthrough:
            rate = inflow

        state.is_liver_passthrough = passthrough
        state.liver_rate = rate

        transfer = min(rate * fraction, state.containers.liver)
        state.containers.liver -= transfer
        state.containers.bg = min(state.containers.bg + transfer, self.config.bg_capacity)

    def _regulate_pancreas(self) -> None:
        state = self._state
        result = evaluate_organ_rules(self.rules.pancreas, self._context())
        state.pancreas_tier = result.tier
        state.is_fast_insulin_active = state.pancreas_boost.is_active

        tier = result.tier
        if not state.is_fast_insulin_active:
            cap = max(0, self.config.pancreas_base_max_tier - state.tiers.pancreas_max_tier_reduction)
            tier = min(tier, cap)
        state.muscle_tier = tier

    def _drain_muscles(self, fraction: float) -> None:
        state = self._state
        muscles = self.rules.muscles

        tier, _ = apply_modifiers(muscles, state.muscle_tier, self._context())
        if state.is_fast_insulin_active:
            max_tier = muscles.boosted_upper_tier
        else:
            max_tier = max(muscles.min_tier, muscles.upper_tier - state.tiers.pancreas_max_tier_reduction)
        tier = max(muscles.min_tier, min(tier, max_tier))

        state.muscle_tier = tier
        state.muscle_rate = muscles.rate_for(tier)
        state.containers.bg = max(0.0, state.containers.bg - state.muscle_rate * fraction)

    def _activate(self, boost: BoostState, duration: int, cooldown: int) -> bool:
        if not boost.is_ready:
            return False
        boost.charges -= 1
        boost.is_active = True
        boost.active_hours = duration
        boost.cooldown_hours = cooldown
        return True

    def _update_boosts(self) -> None:
        for boost in (self._state.liver_boost, self._state.pancreas_boost):
            if boost.is_active:
                boost.active_hours -= 1
                if boost.active_hours <= 0:
                    boost.is_active = False
            if boost.cooldown_hours > 0:
                boost.cooldown_hours -= 1


def predict_bg_history(
    placed_ships: Sequence[PlacedFood],
    ships: Sequence[Ship],
    degradation: Optional[SimpleDegradation] = None,
    config: Optional[ContainerSimConfig] = None,
    rules: Optional[RulesConfig] = None,
) -> list[float]:
    """Run a fresh simulation to completion and return its BG history."""
    return ContainerSimulation(placed_ships, ships, degradation, config, rules).run()
