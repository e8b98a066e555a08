"""Core types, constants and helpers for the glucose simulator."""

from glucose_sim.core.constants import (
    BG_LOW,
    BG_TARGET,
    BG_HIGH,
    BG_CRITICAL,
    CELL_HEIGHT_MGDL,
    CELL_WIDTH_MIN,
    SEGMENT_DELAY,
    MAX_CASCADE_DEPTH,
    DEGRADATION_ORDER,
)
from glucose_sim.core.determinism import make_rng, derive_rng
from glucose_sim.core.rounding import round_half_away
from glucose_sim.core.types import (
    LoadType,
    MedicationType,
    DayAssessment,
    GraphConfig,
    Ship,
    PlacedFood,
    Intervention,
    PlacedIntervention,
    Medication,
    MedicationModifiers,
    FoodModifiers,
    FoodCard,
    Projectile,
    LiverState,
    PancreasState,
    MusclesState,
    KidneysState,
    OrganState,
    SlotSpawnState,
    ImpactEvent,
    SimulationState,
    SimulationConfig,
    ContainerId,
    DaySegment,
    ContainerLevels,
    UnloadingShip,
    BoostState,
    OrganTiers,
    ContainerSimConfig,
    ContainerSimState,
    DegradationState,
    SimpleDegradation,
    ResultsConfig,
    DayMetrics,
    SegmentResult,
    DayResults,
    OfferConstraints,
    SegmentConfig,
    DayConfig,
    LevelConfig,
)

__all__ = [
    # Constants
    "BG_LOW",
    "BG_TARGET",
    "BG_HIGH",
    "BG_CRITICAL",
    "CELL_HEIGHT_MGDL",
    "CELL_WIDTH_MIN",
    "SEGMENT_DELAY",
    "MAX_CASCADE_DEPTH",
    "DEGRADATION_ORDER",
    # Helpers
    "make_rng",
    "derive_rng",
    "round_half_away",
    # Types
    "LoadType",
    "MedicationType",
    "DayAssessment",
    "GraphConfig",
    "Ship",
    "PlacedFood",
    "Intervention",
    "PlacedIntervention",
    "Medication",
    "MedicationModifiers",
    "FoodModifiers",
    "FoodCard",
    "Projectile",
    "LiverState",
    "PancreasState",
    "MusclesState",
    "KidneysState",
    "OrganState",
    "SlotSpawnState",
    "ImpactEvent",
    "SimulationState",
    "SimulationConfig",
    "ContainerId",
    "DaySegment",
    "ContainerLevels",
    "UnloadingShip",
    "BoostState",
    "OrganTiers",
    "ContainerSimConfig",
    "ContainerSimState",
    "DegradationState",
    "SimpleDegradation",
    "ResultsConfig",
    "DayMetrics",
    "SegmentResult",
    "DayResults",
    "OfferConstraints",
    "SegmentConfig",
    "DayConfig",
    "LevelConfig",
]
