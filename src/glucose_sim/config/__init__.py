"""Configuration loading for foods, ships, interventions, medications, levels and organ rules."""

from glucose_sim.config.repository import (
    ConfigRepository,
    food_card_from_config,
    intervention_from_config,
    level_from_config,
    load_yaml,
    medication_from_config,
    organ_rules_from_config,
    rules_from_config,
    ship_from_config,
)

__all__ = [
    "ConfigRepository",
    "food_card_from_config",
    "intervention_from_config",
    "level_from_config",
    "load_yaml",
    "medication_from_config",
    "organ_rules_from_config",
    "rules_from_config",
    "ship_from_config",
]
