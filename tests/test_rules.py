"""Tests for organ rule evaluation."""

import pytest

from glucose_sim.core.types import BoostState, ContainerId, ContainerLevels
from glucose_sim.simulation import (
    ActionType,
    ConditionType,
    OrganRuleSet,
    Rule,
    RuleAction,
    RuleCondition,
    RuleContext,
    TierModifier,
    apply_modifiers,
    default_rules,
    evaluate_condition,
    evaluate_organ_rules,
    execute_action,
)


def context(bg=100.0, liver=0.0, exercise=0.0, liver_boost=None, degradation=None):
    return RuleContext(
        containers=ContainerLevels(liver=liver, bg=bg, exercise_effect=exercise),
        capacities={"liver": 100.0, "bg": 400.0},
        boosts={
            "liver_boost": liver_boost or BoostState(charges=3, max_charges=3),
            "pancreas_boost": BoostState(charges=2, max_charges=2),
        },
        degradation=degradation or {"liver": 0.0, "pancreas": 0.0},
    )


def bg_at_least(value):
    return RuleCondition(type=ConditionType.CONTAINER, container=ContainerId.BG, operator=">=", value=value)


def set_tier(tier):
    return RuleAction(type=ActionType.SET_TIER, tier=tier)


class TestConditions:
    def test_container_comparison(self):
        assert evaluate_condition(bg_at_least(200), context(bg=200))
        assert not evaluate_condition(bg_at_least(200), context(bg=199.9))

    def test_relative_to_capacity(self):
        half_full = RuleCondition(
            type=ConditionType.CONTAINER,
            container="liver",
            operator=">=",
            value=0.5,
            relative_to_capacity=True,
        )
        assert evaluate_condition(half_full, context(liver=50))
        assert not evaluate_condition(half_full, context(liver=49))

    @pytest.mark.parametrize(
        "boost, state, expected",
        [
            (BoostState(charges=1, max_charges=3), "ready", True),
            (BoostState(charges=0, max_charges=3), "ready", False),
            (BoostState(charges=1, max_charges=3, cooldown_hours=2), "cooldown", True),
            (BoostState(charges=1, max_charges=3, is_active=True), "active", True),
            (BoostState(charges=1, max_charges=3), "inactive", True),
        ],
    )
    def test_boost_states(self, boost, state, expected):
        condition = RuleCondition(type=ConditionType.BOOST, boost="liver_boost", state=state)
        assert evaluate_condition(condition, context(liver_boost=boost)) is expected

    def test_degradation_points(self):
        condition = RuleCondition(type=ConditionType.DEGRADATION, organ="pancreas", operator=">=", value=25)
        assert evaluate_condition(condition, context(degradation={"liver": 0, "pancreas": 30}))
        assert not evaluate_condition(condition, context())

    def test_default_always_holds(self):
        assert evaluate_condition(RuleCondition(), context())

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(type="container"),
            dict(type="container", container="spleen"),
            dict(type="boost", boost="kidney_boost", state="active"),
            dict(type="boost", boost="liver_boost", state="sleepy"),
            dict(type="degradation", organ="kidneys"),
            dict(type="container", container="bg", operator="=>"),
            dict(type="weather"),
        ],
    )
    def test_invalid_conditions_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RuleCondition(**kwargs)


class TestOrganRules:
    @pytest.fixture
    def rule_set(self):
        return OrganRuleSet(
            organ="pancreas",
            rates=(0, 10, 20, 30),
            rules=[
                Rule(id="normal", priority=100, condition=RuleCondition(), action=set_tier(0)),
                Rule(id="high", priority=10, condition=bg_at_least(200), action=set_tier(2)),
                Rule(id="very_high", priority=0, condition=bg_at_least(300), action=set_tier(3), enabled=False),
            ],
            modifiers=[
                TierModifier(
                    id="exercise",
                    condition=RuleCondition(
                        type=ConditionType.EFFECT, container="exercise_effect", operator=">", value=0
                    ),
                    effect=RuleAction(type=ActionType.ADD_TIER, amount=2),
                    min_base_tier=1,
                ),
            ],
        )

    def test_lowest_priority_match_wins(self, rule_set):
        result = evaluate_organ_rules(rule_set, context(bg=350))

        assert result.matched_rules == ["high"]
        assert result.tier == 2
        assert result.final_rate == 20.0

    def test_fallback_rule(self, rule_set):
        result = evaluate_organ_rules(rule_set, context(bg=120))
        assert result.matched_rules == ["normal"]
        assert result.tier == 0

    def test_modifier_clamped_to_max_tier(self, rule_set):
        result = evaluate_organ_rules(rule_set, context(bg=250, exercise=10))

        assert result.applied_modifiers == ["exercise"]
        assert result.tier == 3

    def test_modifier_needs_min_base_tier(self, rule_set):
        result = evaluate_organ_rules(rule_set, context(bg=120, exercise=10))
        assert result.applied_modifiers == []
        assert result.tier == 0

    def test_execute_action(self):
        assert execute_action(RuleAction(type=ActionType.ADD_TIER, amount=2), 1) == 3
        assert execute_action(RuleAction(type=ActionType.SUBTRACT_TIER, amount=1), 1) == 0
        assert execute_action(set_tier(4), 1) == 4

    def test_apply_modifiers_reports_ids(self, rule_set):
        tier, applied = apply_modifiers(rule_set, 1, context(exercise=5))
        assert tier == 3
        assert applied == ["exercise"]

    def test_rate_past_table_uses_last_entry(self, rule_set):
        assert rule_set.rate_for(9) == 30.0
        assert rule_set.rate_for(-1) == 0.0

    def test_modifier_must_change_tiers(self):
        with pytest.raises(ValueError):
            TierModifier(id="bad", effect=set_tier(1))

    def test_empty_rates_rejected(self):
        with pytest.raises(ValueError):
            OrganRuleSet(organ="liver", rates=())


class TestDefaultRules:
    def test_liver_boost_beats_empty_liver(self):
        rules = default_rules()
        boost = BoostState(charges=2, max_charges=3, is_active=True)

        assert evaluate_organ_rules(rules.liver, context(liver=0)).tier == 0
        assert evaluate_organ_rules(rules.liver, context(liver=10)).final_rate == 50.0
        assert evaluate_organ_rules(rules.liver, context(liver=0, liver_boost=boost)).final_rate == 75.0

    @pytest.mark.parametrize("bg, tier", [(90, 0), (100, 0), (120, 1), (160, 2), (250, 3), (300, 4)])
    def test_pancreas_follows_bg(self, bg, tier):
        assert evaluate_organ_rules(default_rules().pancreas, context(bg=bg)).tier == tier
