"""Simulation module: the tower-defense run and the hour-based container model."""

from glucose_sim.simulation.tower_defense import (
    TowerDefenseSimulation,
    card_multipliers,
    initial_organs,
    meal_speed_multiplier,
    pancreas_tier,
)
from glucose_sim.simulation.time_controller import Tickable, TimeController
from glucose_sim.simulation.rules import (
    ActionType,
    ConditionType,
    OrganRuleSet,
    Rule,
    RuleAction,
    RuleCondition,
    RuleContext,
    RuleResult,
    RulesConfig,
    TierModifier,
    apply_modifiers,
    default_rules,
    evaluate_condition,
    evaluate_organ_rules,
    execute_action,
)
from glucose_sim.simulation.container_engine import (
    ContainerSimulation,
    organ_tiers,
    predict_bg_history,
    segment_for_hour,
    unload_hours,
)

__all__ = [
    # Tower defense
    "TowerDefenseSimulation",
    "card_multipliers",
    "initial_organs",
    "meal_speed_multiplier",
    "pancreas_tier",
    "Tickable",
    "TimeController",
    # Organ rules
    "ActionType",
    "ConditionType",
    "OrganRuleSet",
    "Rule",
    "RuleAction",
    "RuleCondition",
    "RuleContext",
    "RuleResult",
    "RulesConfig",
    "TierModifier",
    "apply_modifiers",
    "default_rules",
    "evaluate_condition",
    "evaluate_organ_rules",
    "execute_action",
    # Container simulation
    "ContainerSimulation",
    "organ_tiers",
    "predict_bg_history",
    "segment_for_hour",
    "unload_hours",
]
