"""Core type definitions for the glucose simulator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from glucose_sim.core import constants as C


class LoadType(str, Enum):
    """What a planning-graph ship carries."""

    GLUCOSE = "Glucose"
    TREATMENT = "Treatment"


class MedicationType(str, Enum):
    """Medication effect families."""

    PEAK_REDUCTION = "peakReduction"
    THRESHOLD_DRAIN = "thresholdDrain"
    SLOW_ABSORPTION = "slowAbsorption"


class DayAssessment(str, Enum):
    """Assessment label for a finished meal segment or day."""

    EXCELLENT = "Excellent"
    DECENT = "Decent"
    POOR = "Poor"
    DEFEAT = "Defeat"


@dataclass
class GraphConfig:
    """Planning graph geometry.

    Attributes:
        start_hour: First hour shown on the graph
        end_hour: Last hour shown on the graph
        cell_width_min: Minutes covered by one column
        cell_height_mgdl: mg/dL represented by one cube
        bg_min: Y axis minimum in mg/dL
        bg_max: Y axis maximum in mg/dL
    """

    start_hour: int = C.GRAPH_START_HOUR
    end_hour: int = C.GRAPH_END_HOUR
    cell_width_min: float = C.CELL_WIDTH_MIN
    cell_height_mgdl: float = C.CELL_HEIGHT_MGDL
    bg_min: float = C.BG_MIN_MGDL
    bg_max: float = C.BG_MAX_MGDL

    def __post_init__(self) -> None:
        """Validate geometry."""
        if self.cell_width_min <= 0 or self.cell_height_mgdl <= 0:
            raise ValueError(
                f"Cell size must be positive, got {self.cell_width_min} min x {self.cell_height_mgdl} mg/dL"
            )
        if self.end_hour < self.start_hour:
            raise ValueError(f"end_hour ({self.end_hour}) is before start_hour ({self.start_hour})")

    @property
    def total_minutes(self) -> float:
        """Minutes spanned by the graph."""
        return (self.end_hour - self.start_hour) * 60

    @property
    def total_columns(self) -> int:
        """Number of time columns."""
        return int(self.total_minutes // self.cell_width_min)

    @property
    def total_rows(self) -> int:
        """Number of cube rows between bg_min and bg_max."""
        return int((self.bg_max - self.bg_min) // self.cell_height_mgdl)


# Planning graph models


@dataclass
class Ship:
    """Food or treatment placed on the planning graph.

    Attributes:
        id: Unique ship id
        name: Display name
        load: Glucose amount in mg/dL
        duration: Unload duration in minutes (curve ramp width)
        kcal: Kilocalories
        load_type: Glucose or treatment
        target_container: Container a treatment ship fills in the container
            simulation (glucose ships always fill the liver)
    """

    id: str
    name: str
    load: float
    duration: float
    kcal: float = 0.0
    load_type: LoadType = LoadType.GLUCOSE
    emoji: str = ""
    target_container: Optional[str] = None


@dataclass
class PlacedFood:
    """A ship dropped onto a graph column."""

    id: str
    ship_id: str
    drop_column: int


@dataclass
class Intervention:
    """Exercise-style intervention that removes cubes from the graph.

    Attributes:
        id: Unique intervention id
        name: Display name
        depth: Cubes removed at full effect
        duration: Ramp-up duration in minutes
        wp_cost: Willpower cost
        boost_cols: Number of leading columns with extra depth
        boost_extra: Extra cubes removed inside the boost window
        decay_rate: Cubes per column the effect fades after ramp (0 = holds all day)
    """

    id: str
    name: str
    depth: float
    duration: float
    wp_cost: int = 0
    boost_cols: int = 0
    boost_extra: float = 0.0
    decay_rate: float = 0.0


@dataclass
class PlacedIntervention:
    """An intervention dropped onto a graph column."""

    id: str
    intervention_id: str
    drop_column: int


@dataclass
class Medication:
    """Medication definition.

    Only the fields relevant to ``type`` are read.
    """

    id: str
    name: str
    type: MedicationType
    multiplier: Optional[float] = None  # peakReduction
    depth: Optional[int] = None  # thresholdDrain, cubes per column
    floor_mgdl: Optional[float] = None  # thresholdDrain
    duration_multiplier: Optional[float] = None  # slowAbsorption
    kcal_multiplier: Optional[float] = None  # slowAbsorption
    wp_bonus: Optional[int] = None  # slowAbsorption


@dataclass
class MedicationModifiers:
    """Combined effect of all active medications."""

    glucose_multiplier: float = 1.0
    duration_multiplier: float = 1.0
    drain_depth: int = 0
    drain_floor_row: int = 0
    kcal_multiplier: float = 1.0
    wp_bonus: int = 0

    @property
    def has_drain(self) -> bool:
        return self.drain_depth > 0


# Meal cards (tower-defense input)


@dataclass
class FoodModifiers:
    """Boolean modifier flags on a food card.

    Attributes:
        fiber: Whole meal, slows every projectile
        sugar: Whole meal, speeds every projectile up
        protein: This card only, extends release duration
        fat: This card only, slows speed and extends duration
    """

    fiber: bool = False
    sugar: bool = False
    protein: bool = False
    fat: bool = False


@dataclass
class FoodCard:
    """Meal card offered to the player and simulated as projectiles.

    Attributes:
        id: Unique card id
        name: Display name
        glucose: Total glucose released (mg)
        glucose_speed: Projectile speed rating (1-4)
        release_duration: Seconds needed to release all glucose
        tier: 1 = healthy, 2 = neutral, 3 = junk
        tag: Food family (grain, meat, dairy, protein, ...)
        modifiers: Modifier flags
    """

    id: str
    name: str
    glucose: float
    glucose_speed: float
    release_duration: float
    tier: int = 1
    tag: str = ""
    modifiers: FoodModifiers = field(default_factory=FoodModifiers)
    carbs: float = 0.0
    emoji: str = ""


# Tower-defense state


@dataclass
class Projectile:
    """Packet of glucose travelling from position 0.0 to the base at 1.0."""

    id: int
    source_slot: int
    glucose: float
    position: float = 0.0
    speed: float = 0.0
    base_speed: float = 0.0


@dataclass
class LiverState:
    slow_factor: float
    zone_start: float
    zone_end: float
    capacity: int
    active_count: int = 0


@dataclass
class PancreasState:
    max_tier: int
    current_tier: int = 0


@dataclass
class MusclesState:
    dps: float
    range_start: float
    range_end: float
    max_targets: int
    targets: list[int] = field(default_factory=list)


@dataclass
class KidneysState:
    dps: float
    range_start: float
    range_end: float
    max_targets: int
    targets: list[int] = field(default_factory=list)


@dataclass
class OrganState:
    """Mutable state of all four organs."""

    liver: LiverState
    pancreas: PancreasState
    muscles: MusclesState
    kidneys: KidneysState


@dataclass
class SlotSpawnState:
    """Spawn schedule of one activated meal slot."""

    slot_index: int
    remaining_glucose: float
    spawn_timer: float
    spawn_interval: float
    projectile_glucose: float
    base_speed: float


@dataclass
class ImpactEvent:
    """Projectile that reached the base, kept briefly for display."""

    projectile_id: int
    source_slot: int
    time: float
    glucose: float


@dataclass
class SimulationState:
    """Complete state of a tower-defense run at a point in time.

    Attributes:
        time: Elapsed seconds
        projectiles: Projectiles in flight, in spawn order
        organs: Organ state
        excess_glucose: Glucose that reached the base (never decreases)
        impacts: Recent base impacts
        slot_spawn_states: Spawn schedulers of active slots
        next_slot_to_activate: Index of the next meal slot to start
        next_slot_activation_time: When that slot starts
        is_complete: Terminal flag
    """

    organs: OrganState
    time: float = 0.0
    projectiles: list[Projectile] = field(default_factory=list)
    excess_glucose: float = 0.0
    impacts: list[ImpactEvent] = field(default_factory=list)
    slot_spawn_states: list[SlotSpawnState] = field(default_factory=list)
    next_slot_to_activate: int = 0
    next_slot_activation_time: float = 0.0
    is_complete: bool = False


@dataclass
class SimulationConfig:
    """Tower-defense tunables (defaults match the shipped balance)."""

    speed_scale: float = C.SPEED_SCALE
    projectile_size: float = C.PROJECTILE_SIZE
    impact_lifetime: float = C.IMPACT_LIFETIME

    liver_slow_factor: float = C.LIVER_SLOW_FACTOR
    liver_zone_start: float = C.LIVER_ZONE_START
    liver_zone_end: float = C.LIVER_ZONE_END
    liver_capacity: int = C.LIVER_CAPACITY

    pancreas_tier_thresholds: tuple[int, ...] = C.PANCREAS_TIER_THRESHOLDS
    pancreas_max_tier: int = C.PANCREAS_MAX_TIER

    muscle_range_start: float = C.MUSCLE_RANGE_START
    muscle_range_end: float = C.MUSCLE_RANGE_END
    muscle_max_targets: int = C.MUSCLE_MAX_TARGETS
    muscle_dps_per_tier: float = C.MUSCLE_DPS_PER_TIER

    kidney_range_start: float = C.KIDNEY_RANGE_START
    kidney_range_end: float = C.KIDNEY_RANGE_END
    kidney_max_targets: int = C.KIDNEY_MAX_TARGETS
    kidney_dps: float = C.KIDNEY_DPS

    fiber_speed_multiplier: float = C.FIBER_SPEED_MULTIPLIER
    sugar_speed_multiplier: float = C.SUGAR_SPEED_MULTIPLIER
    protein_duration_multiplier: float = C.PROTEIN_DURATION_MULTIPLIER
    fat_speed_multiplier: float = C.FAT_SPEED_MULTIPLIER
    fat_duration_multiplier: float = C.FAT_DURATION_MULTIPLIER
    protein_tag: str = C.PROTEIN_TAG
    protein_tag_muscle_boost: float = C.PROTEIN_TAG_MUSCLE_BOOST

    liver_slow_penalty: float = C.LIVER_SLOW_PENALTY
    pancreas_tier_penalty: int = C.PANCREAS_TIER_PENALTY
    kidneys_dps_penalty: float = C.KIDNEYS_DPS_PENALTY

    def __post_init__(self) -> None:
        """Validate tunables so bad values fail here rather than inside tick()."""
        if self.projectile_size <= 0:
            raise ValueError(f"projectile_size must be positive, got {self.projectile_size}")
        if self.speed_scale < 0:
            raise ValueError(f"speed_scale must be non-negative, got {self.speed_scale}")
        if self.impact_lifetime < 0:
            raise ValueError(f"impact_lifetime must be non-negative, got {self.impact_lifetime}")
        if not self.pancreas_tier_thresholds:
            raise ValueError("pancreas_tier_thresholds must not be empty")
        if self.pancreas_max_tier < 0:
            raise ValueError(f"pancreas_max_tier must be non-negative, got {self.pancreas_max_tier}")

        for name in ("liver_capacity", "muscle_max_targets", "kidney_max_targets"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

        for name in ("liver_zone", "muscle_range", "kidney_range"):
            start = getattr(self, f"{name}_start")
            end = getattr(self, f"{name}_end")
            if start > end:
                raise ValueError(f"{name} starts after it ends ({start} > {end})")


# Container simulation


class ContainerId(str, Enum):
    """Containers tracked by the hour-based simulation."""

    LIVER = "liver"
    BG = "bg"
    METFORMIN_EFFECT = "metformin_effect"
    EXERCISE_EFFECT = "exercise_effect"
    INTENSE_EXERCISE_EFFECT = "intense_exercise_effect"


class DaySegment(str, Enum):
    """Part of the simulated day, six interpreted hours each."""

    MORNING = "Morning"
    DAY = "Day"
    EVENING = "Evening"


@dataclass
class ContainerLevels:
    """Fill level of every container (mg/dL for liver and bg)."""

    liver: float = C.INITIAL_LIVER
    bg: float = C.INITIAL_BG
    metformin_effect: float = 0.0
    exercise_effect: float = 0.0
    intense_exercise_effect: float = 0.0

    def get(self, container: ContainerId) -> float:
        return getattr(self, ContainerId(container).value)

    def add(self, container: ContainerId, amount: float) -> None:
        name = ContainerId(container).value
        setattr(self, name, getattr(self, name) + amount)


@dataclass
class UnloadingShip:
    """Ship currently emptying into a container.

    Attributes:
        placement_id: Placement being unloaded
        ship_id: Ship definition id
        remaining_substeps: Substeps left before the ship is empty
        total_hours: Unload length
        load_per_hour: Load added per interpreted hour
        target: Container receiving the load
    """

    placement_id: str
    ship_id: str
    remaining_substeps: int
    total_hours: int
    load_per_hour: float
    target: ContainerId


@dataclass
class BoostState:
    """Charges and timers of a player boost (timers count hours)."""

    charges: int
    max_charges: int
    cooldown_hours: int = 0
    is_active: bool = False
    active_hours: int = 0

    @property
    def is_ready(self) -> bool:
        return self.charges > 0 and self.cooldown_hours == 0 and not self.is_active


@dataclass
class OrganTiers:
    """Organ health tiers (1 = healthy, 5 = worst) and their effects."""

    liver_tier: int = 1
    pancreas_tier: int = 1
    liver_capacity_reduction: float = 0.0
    pancreas_max_tier_reduction: int = 0


@dataclass
class ContainerSimConfig:
    """Tunables of the container simulation.

    Rates are per interpreted hour. The tier effect tables are indexed by
    organ tier minus one.
    """

    liver_capacity: float = C.LIVER_CONTAINER_CAPACITY
    bg_capacity: float = C.BG_CONTAINER_CAPACITY
    initial_bg: float = C.INITIAL_BG
    initial_liver: float = C.INITIAL_LIVER

    bg_low: float = C.BG_LOW
    bg_target: float = C.BG_TARGET
    bg_high: float = C.BG_HIGH
    bg_critical: float = C.BG_CRITICAL

    metformin_decay_rate: float = C.METFORMIN_DECAY_RATE
    exercise_decay_rate: float = C.EXERCISE_DECAY_RATE
    intense_exercise_decay_rate: float = C.INTENSE_EXERCISE_DECAY_RATE

    liver_boost_charges: int = C.LIVER_BOOST_CHARGES
    liver_boost_cooldown: int = C.LIVER_BOOST_COOLDOWN
    liver_boost_duration: int = C.LIVER_BOOST_DURATION
    pancreas_boost_charges: int = C.PANCREAS_BOOST_CHARGES
    pancreas_boost_cooldown: int = C.PANCREAS_BOOST_COOLDOWN
    pancreas_boost_duration: int = C.PANCREAS_BOOST_DURATION

    liver_passthrough_fill: float = C.LIVER_PASSTHROUGH_FILL
    pancreas_base_max_tier: int = C.MUSCLE_MAX_TIER

    substeps_per_hour: int = C.SUBSTEPS_PER_HOUR
    total_hours: int = C.SIM_HOURS
    segment_hours: int = C.SEGMENT_HOURS

    liver_capacity_reduction_by_tier: tuple[float, ...] = C.LIVER_CAPACITY_REDUCTION_BY_TIER
    pancreas_max_tier_reduction_by_tier: tuple[int, ...] = C.PANCREAS_MAX_TIER_REDUCTION_BY_TIER

    def __post_init__(self) -> None:
        """Validate tunables."""
        if self.substeps_per_hour <= 0:
            raise ValueError(f"substeps_per_hour must be positive, got {self.substeps_per_hour}")
        if self.total_hours <= 0 or self.segment_hours <= 0:
            raise ValueError("total_hours and segment_hours must be positive")
        if self.liver_capacity < 0 or self.bg_capacity < 0:
            raise ValueError("Container capacities must be non-negative")
        for name in ("liver_capacity_reduction_by_tier", "pancreas_max_tier_reduction_by_tier"):
            if len(getattr(self, name)) != C.MAX_ORGAN_TIER:
                raise ValueError(f"{name} needs one entry per organ tier ({C.MAX_ORGAN_TIER})")


@dataclass
class ContainerSimState:
    """State of the container simulation.

    Attributes:
        hour: Completed interpreted hours
        substep: Substep within the current hour
        segment: Part of the day the current hour belongs to
        containers: Container levels
        unloading: Ship being unloaded, if any
        queue: Placements waiting to unload, in slot order
        bg_history: BG at the start and at every hour boundary
        liver_boost: Liver boost charges and timers
        pancreas_boost: Pancreas boost charges and timers
        tiers: Organ tiers derived from degradation points
        liver_rate: Liver to BG transfer rate this substep
        muscle_rate: BG drain rate this substep
        pancreas_tier: Raw pancreas tier from the rules
        muscle_tier: Final muscle tier after modifiers
        is_fast_insulin_active: Pancreas boost running
        is_liver_passthrough: Full liver passing input straight to BG
        is_complete: Terminal flag
    """

    containers: ContainerLevels
    liver_boost: BoostState
    pancreas_boost: BoostState
    tiers: OrganTiers
    hour: int = 0
    substep: int = 0
    segment: DaySegment = DaySegment.MORNING
    unloading: Optional[UnloadingShip] = None
    queue: list[PlacedFood] = field(default_factory=list)
    bg_history: list[float] = field(default_factory=list)
    liver_rate: float = 0.0
    muscle_rate: float = 0.0
    pancreas_tier: int = 0
    muscle_tier: int = 0
    is_fast_insulin_active: bool = False
    is_liver_passthrough: bool = False
    is_complete: bool = False


# Degradation


@dataclass
class DegradationState:
    """Degradation circles accumulated across days, per organ."""

    total_circles: int = 0
    liver_circles: int = 0
    pancreas_circles: int = 0
    kidneys_circles: int = 0

    def __post_init__(self) -> None:
        """Validate circle counts."""
        for name in ("total_circles", "liver_circles", "pancreas_circles", "kidneys_circles"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")


@dataclass
class SimpleDegradation:
    """Degradation points per organ."""

    liver: int = 0
    pancreas: int = 0
    kidneys: int = 0


# Results


@dataclass
class ResultsConfig:
    """Thresholds used by the results calculator.

    Attributes:
        bg_low: Lower bound of the target range
        bg_target: Ideal glucose level
        bg_high: Upper bound of the target range
        bg_critical: Critical level, excess above it is weighted more
        high_weight: Weight for excursions in (high, critical]
        critical_weight: Weight for the part above critical
    """

    bg_low: float = C.BG_LOW
    bg_target: float = C.BG_TARGET
    bg_high: float = C.BG_HIGH
    bg_critical: float = C.BG_CRITICAL
    high_weight: float = C.EXCESS_HIGH_WEIGHT
    critical_weight: float = C.EXCESS_CRITICAL_WEIGHT


@dataclass
class DayMetrics:
    """Summary of a blood glucose series. Time values are percentages."""

    average_bg: int
    min_bg: int
    max_bg: int
    time_in_range: int
    time_above_high: int
    time_above_critical: int
    time_below_low: int
    excess_bg: float


@dataclass
class SegmentResult:
    """Outcome of one simulated meal segment."""

    excess_glucose: float
    new_degradation_circles: int
    assessment: DayAssessment
    degradation: DegradationState


@dataclass
class DayResults:
    """Results screen data for a finished day."""

    day: int
    bg_history: list[float]
    metrics: DayMetrics
    degradation: SimpleDegradation
    rank: int
    message: str


# Offers and levels


@dataclass
class OfferConstraints:
    """Constraints for one batch of offers."""

    no_repeat_card_ids: list[str] = field(default_factory=list)
    max_same_tag: int = C.DEFAULT_MAX_SAME_TAG


@dataclass
class SegmentConfig:
    """One meal segment of a day (Breakfast, Lunch, Dinner)."""

    segment: str
    offer_templates: list[tuple[int, ...]] = field(default_factory=list)
    segment_delay: float = C.SEGMENT_DELAY


@dataclass
class DayConfig:
    day: int
    segments: list[SegmentConfig] = field(default_factory=list)


@dataclass
class LevelConfig:
    """Level definition supplied by the host.

    Attributes:
        id: Level id
        name: Display name
        days: Per-day segment configuration
        initial_inventory: Food card ids the player starts with
        defeat_threshold: Excess glucose that ends the run
        degradation_thresholds: Excess glucose needed for each new circle
    """

    id: str
    name: str
    days: list[DayConfig] = field(default_factory=list)
    initial_inventory: list[str] = field(default_factory=list)
    defeat_threshold: float = float("inf")
    degradation_thresholds: list[float] = field(default_factory=list)

    def get_day(self, day: int) -> Optional[DayConfig]:
        """Find configuration for a day number."""
        for day_config in self.days:
            if day_config.day == day:
                return day_config
        return None
