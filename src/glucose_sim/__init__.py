"""
Glucose Simulator

Core engine for a blood-glucose management game: meals become glucose
projectiles that organs fight off, and a day's BG curve decides how much
damage the organs carry into the next day.

Main components:
- core: Shared types, constants and deterministic helpers
- curve: Planning-graph cube curves, medications and penalties
- match3: Match-3 board engine that awards food tiles
- simulation: Tower-defense glucose simulation, fixed-step driver and the
  rule-driven container model that predicts the BG curve
- results: Day metrics, degradation and BG analysis
- offers: Food card offer generation
- config: YAML content repository

Quick start:
    from glucose_sim.core.types import DegradationState, FoodCard
    from glucose_sim.simulation import TowerDefenseSimulation
    from glucose_sim.results import calculate_degradation_buffer

    cards = [FoodCard(id="toast", name="Toast", glucose=40,
                      glucose_speed=1.0, release_duration=6.0)]
    sim = TowerDefenseSimulation(cards, DegradationState())
    excess = sim.run(max_time=120.0)
    circles = calculate_degradation_buffer(excess)
"""

__version__ = "0.1.0"

# Core types
from glucose_sim.core.types import (
    DayAssessment,
    DegradationState,
    FoodCard,
    FoodModifiers,
    GraphConfig,
    LevelConfig,
    ContainerSimConfig,
    ResultsConfig,
    SimulationConfig,
    SimulationState,
)

# Curve engine
from glucose_sim.curve import calculate_curve, calculate_graph_state

# Match-3
from glucose_sim.match3 import Match3Config, Match3Session, execute_swap, generate_board

# Simulation
from glucose_sim.simulation import ContainerSimulation, TimeController, TowerDefenseSimulation

# Results
from glucose_sim.results import BGAnalyzer, calculate_day_results, calculate_metrics

# Offers
from glucose_sim.offers import generate_offers

# Config
from glucose_sim.config import ConfigRepository

__all__ = [
    # Version
    "__version__",
    # Core types
    "DayAssessment",
    "DegradationState",
    "FoodCard",
    "FoodModifiers",
    "GraphConfig",
    "LevelConfig",
    "ContainerSimConfig",
    "ResultsConfig",
    "SimulationConfig",
    "SimulationState",
    # Curve engine
    "calculate_curve",
    "calculate_graph_state",
    # Match-3
    "Match3Config",
    "Match3Session",
    "execute_swap",
    "generate_board",
    # Simulation
    "ContainerSimulation",
    "TimeController",
    "TowerDefenseSimulation",
    # Results
    "BGAnalyzer",
    "calculate_day_results",
    "calculate_metrics",
    # Offers
    "generate_offers",
    # Config
    "ConfigRepository",
]
