"""Game constants and default values for the glucose simulator."""

# Graph geometry (planning board)
GRAPH_START_HOUR = 8  # 8 AM
GRAPH_END_HOUR = 20  # 8 PM
CELL_WIDTH_MIN = 15  # minutes per column
CELL_HEIGHT_MGDL = 20  # mg/dL per cube
BG_MIN_MGDL = 60  # Y axis minimum
BG_MAX_MGDL = 400  # Y axis maximum

# Blood glucose thresholds (mg/dL)
BG_LOW = 70.0
BG_TARGET = 100.0
BG_HIGH = 200.0
BG_CRITICAL = 300.0

# Progressive excess weights
EXCESS_HIGH_WEIGHT = 1.5
EXCESS_CRITICAL_WEIGHT = 3.0

# Penalty zones on the planning graph (rows counted from BG_MIN_MGDL)
PENALTY_ORANGE_ROW = 7  # 200 mg/dL
PENALTY_RED_ROW = 12  # 300 mg/dL
PENALTY_ORANGE_WEIGHT = 0.5
PENALTY_RED_WEIGHT = 1.5

# Star rating (upper penalty bound, stars, label), checked in order
STAR_THRESHOLDS = (
    (10.0, 3, "Perfect"),
    (40.0, 2, "Good"),
    (80.0, 1, "Pass"),
)

# Pancreas digestion tiers for the planning graph (decay rate per column)
PANCREAS_DECAY_RATES = {
    0: 0.0,  # OFF, plateau
    1: 0.5,
    2: 1.0,
    3: 1.5,
}

# Tower-defense simulation
SPEED_SCALE = 0.04  # glucoseSpeed 1 -> 0.04 track/sec, ~25 s to cross
PROJECTILE_SIZE = 10.0  # mg per projectile
SEGMENT_DELAY = 3.0  # seconds between meal slot activations
IMPACT_LIFETIME = 0.6  # seconds an impact record is kept

LIVER_SLOW_FACTOR = 0.6
LIVER_ZONE_START = 0.15
LIVER_ZONE_END = 0.35
LIVER_CAPACITY = 4

# Active-projectile count needed for each pancreas tier (index = tier)
PANCREAS_TIER_THRESHOLDS = (0, 1, 3, 5, 8)
PANCREAS_MAX_TIER = 4

MUSCLE_RANGE_START = 0.3
MUSCLE_RANGE_END = 0.75
MUSCLE_MAX_TARGETS = 2
MUSCLE_DPS_PER_TIER = 7.0  # mg/sec per pancreas tier

KIDNEY_RANGE_START = 0.8
KIDNEY_RANGE_END = 0.95
KIDNEY_MAX_TARGETS = 1
KIDNEY_DPS = 8.0  # mg/sec

# Food modifiers
FIBER_SPEED_MULTIPLIER = 0.7  # whole meal
SUGAR_SPEED_MULTIPLIER = 1.4  # whole meal
PROTEIN_DURATION_MULTIPLIER = 1.5  # own card
FAT_SPEED_MULTIPLIER = 0.85  # own card
FAT_DURATION_MULTIPLIER = 1.3  # own card

# Muscle DPS multiplier when any card carries the "protein" tag
PROTEIN_TAG = "protein"
PROTEIN_TAG_MUSCLE_BOOST = 1.25

# Degradation effects per circle
LIVER_SLOW_PENALTY = 0.1
PANCREAS_TIER_PENALTY = 1
KIDNEYS_DPS_PENALTY = 5.0

# Degradation bookkeeping
DEGRADATION_ORDER = ("liver", "pancreas", "kidneys")
DEGRADATION_THRESHOLD_PER_CIRCLE = 100.0
DEGRADATION_MAX_CIRCLES = 3
SEGMENT_DEFEAT_CIRCLES = 4  # new circles in one segment that lose it
POINTS_PER_CIRCLE = 25
POINTS_PER_TIER = 25
MAX_ORGAN_TIER = 5

# Match-3
MAX_CASCADE_DEPTH = 10
MAX_FOOD_FRACTION = 0.2
DEFAULT_MOVE_BUDGET = 10

# Offers
DEFAULT_MAX_SAME_TAG = 3

# Container simulation (hour-based BG prediction)
SIM_HOURS = 18  # interpreted hours per day
SUBSTEPS_PER_HOUR = 10
SEGMENT_HOURS = 6  # Morning, Day, Evening

LIVER_CONTAINER_CAPACITY = 100.0
BG_CONTAINER_CAPACITY = 400.0
INITIAL_BG = 100.0
INITIAL_LIVER = 0.0

LIVER_TRANSFER_RATES = (0.0, 50.0, 75.0)  # mg/dL per hour, by tier
MUSCLE_DRAIN_RATES = (0.0, 30.0, 35.0, 40.0, 45.0, 50.0, 60.0)  # tier 6 needs a boost
MUSCLE_MAX_TIER = 5
MUSCLE_BOOSTED_MAX_TIER = 6

METFORMIN_DECAY_RATE = 7.0  # per hour
EXERCISE_DECAY_RATE = 20.0
INTENSE_EXERCISE_DECAY_RATE = 0.0  # lasts all day

LIVER_BOOST_CHARGES = 3
LIVER_BOOST_COOLDOWN = 3  # hours
LIVER_BOOST_DURATION = 1
PANCREAS_BOOST_CHARGES = 2
PANCREAS_BOOST_COOLDOWN = 3
PANCREAS_BOOST_DURATION = 1

LIVER_PASSTHROUGH_FILL = 0.95

# Organ tier (1-5) effects inside the container simulation, index = tier - 1
LIVER_CAPACITY_REDUCTION_BY_TIER = (0.0, 10.0, 20.0, 30.0, 40.0)
PANCREAS_MAX_TIER_REDUCTION_BY_TIER = (0, 1, 2, 3, 4)
