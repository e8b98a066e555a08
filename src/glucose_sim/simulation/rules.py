"""
Configuration-driven organ rules for the container simulation.

An organ's rate tier is chosen by:
1. The first enabled rule (lowest priority number) whose condition holds
2. Modifiers, applied in order, that add or subtract tiers
3. A clamp to the rule set's tier range

The tier indexes the rule set's ``rates`` table.
"""

import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from glucose_sim.core import constants as C
from glucose_sim.core.types import BoostState, ContainerId, ContainerLevels

OPERATORS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

BOOSTS = ("liver_boost", "pancreas_boost")
BOOST_STATES = ("active", "inactive", "ready", "cooldown")
DEGRADATION_ORGANS = ("liver", "pancreas")


class ConditionType(str, Enum):
    CONTAINER = "container"
    BOOST = "boost"
    EFFECT = "effect"
    DEGRADATION = "degradation"
    DEFAULT = "default"


class ActionType(str, Enum):
    SET_TIER = "setTier"
    ADD_TIER = "addTier"
    SUBTRACT_TIER = "subtractTier"
    TRANSFER = "transfer"
    ACTIVATE = "activate"


@dataclass
class RuleCondition:
    """Condition of a rule or modifier.

    Only the fields relevant to ``type`` are read.

    Attributes:
        type: Condition family
        container: Container compared (container, effect)
        operator: Comparison operator (container, effect, degradation)
        value: Right-hand side of the comparison
        relative_to_capacity: Treat ``value`` as a fraction of capacity
        boost: Boost checked (boost)
        state: Required boost state (boost)
        organ: Organ whose degradation points are compared (degradation)
    """

    type: ConditionType = ConditionType.DEFAULT
    container: Optional[ContainerId] = None
    operator: str = ">="
    value: float = 0.0
    relative_to_capacity: bool = False
    boost: Optional[str] = None
    state: Optional[str] = None
    organ: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate fields for the condition type."""
        self.type = ConditionType(self.type)
        if self.type in (ConditionType.CONTAINER, ConditionType.EFFECT):
            if self.container is None:
                raise ValueError(f"{self.type.value} condition needs a container")
            self.container = ContainerId(self.container)
        if self.type == ConditionType.BOOST:
            if self.boost not in BOOSTS:
                raise ValueError(f"Unknown boost: {self.boost}")
            if self.state not in BOOST_STATES:
                raise ValueError(f"Unknown boost state: {self.state}")
        if self.type == ConditionType.DEGRADATION and self.organ not in DEGRADATION_ORGANS:
            raise ValueError(f"Unknown degradation organ: {self.organ}")
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown operator: {self.operator}")


@dataclass
class RuleAction:
    """Action of a rule, or the effect of a modifier.

    ``transfer`` and ``activate`` select ``tier`` like ``setTier``; their
    container and organ fields are descriptive.
    """

    type: ActionType
    tier: int = 0
    amount: int = 0
    source: Optional[ContainerId] = None
    target: Optional[ContainerId] = None
    organ: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = ActionType(self.type)


@dataclass
class Rule:
    id: str
    condition: RuleCondition
    action: RuleAction
    priority: int = 0
    enabled: bool = True
    description: str = ""


@dataclass
class TierModifier:
    """Tier adjustment applied after the base rule.

    Attributes:
        id: Modifier id
        effect: addTier or subtractTier action
        condition: Applies only when this holds (always when None)
        enabled: Disabled modifiers are skipped
        min_base_tier: Applies only when the base tier reaches this value
        description: Free text
    """

    id: str
    effect: RuleAction
    condition: Optional[RuleCondition] = None
    enabled: bool = True
    min_base_tier: Optional[int] = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.effect.type not in (ActionType.ADD_TIER, ActionType.SUBTRACT_TIER):
            raise ValueError(f"Modifier {self.id} effect must add or subtract tiers")


@dataclass
class OrganRuleSet:
    """Rules, modifiers and rate table of one organ.

    Attributes:
        organ: Organ name
        rates: Rate per tier (mg/dL per hour)
        rules: Base rules
        modifiers: Modifiers applied after the base rule
        min_tier: Lowest tier
        max_tier: Highest tier (last rate index when None)
        boosted_max_tier: Highest tier while a boost lifts the cap
    """

    organ: str
    rates: tuple[float, ...]
    rules: list[Rule] = field(default_factory=list)
    modifiers: list[TierModifier] = field(default_factory=list)
    min_tier: int = 0
    max_tier: Optional[int] = None
    boosted_max_tier: Optional[int] = None

    def __post_init__(self) -> None:
        self.rates = tuple(float(r) for r in self.rates)
        if not self.rates:
            raise ValueError(f"{self.organ} rule set needs at least one rate")
        if self.upper_tier < self.min_tier:
            raise ValueError(f"{self.organ} max_tier is below min_tier")

    @property
    def upper_tier(self) -> int:
        return self.max_tier if self.max_tier is not None else len(self.rates) - 1

    @property
    def boosted_upper_tier(self) -> int:
        return self.boosted_max_tier if self.boosted_max_tier is not None else self.upper_tier

    def rate_for(self, tier: int) -> float:
        """Rate of ``tier``; tiers past the table use its last entry."""
        if tier < 0:
            return 0.0
        return self.rates[min(tier, len(self.rates) - 1)]


@dataclass
class RulesConfig:
    version: str
    liver: OrganRuleSet
    pancreas: OrganRuleSet
    muscles: OrganRuleSet


@dataclass
class RuleContext:
    """Snapshot the rules are evaluated against.

    Attributes:
        containers: Container levels
        capacities: Capacity per container id (liver, bg)
        boosts: Boost state per boost name
        degradation: Degradation points per organ
    """

    containers: ContainerLevels
    capacities: dict[str, float]
    boosts: dict[str, BoostState]
    degradation: dict[str, float]


@dataclass
class RuleResult:
    tier: int
    final_rate: float
    matched_rules: list[str] = field(default_factory=list)
    applied_modifiers: list[str] = field(default_factory=list)


def evaluate_condition(condition: RuleCondition, context: RuleContext) -> bool:
    """True when ``condition`` holds in ``context``."""
    compare = OPERATORS[condition.operator]

    if condition.type == ConditionType.DEFAULT:
        return True

    if condition.type in (ConditionType.CONTAINER, ConditionType.EFFECT):
        level = context.containers.get(condition.container)
        target = condition.value
        if condition.type == ConditionType.CONTAINER and condition.relative_to_capacity:
            capacity = context.capacities.get(condition.container.value)
            if capacity is not None:
                target = capacity * condition.value
        return compare(level, target)

    if condition.type == ConditionType.BOOST:
        boost = context.boosts[condition.boost]
        if condition.state == "active":
            return boost.is_active
        if condition.state == "inactive":
            return not boost.is_active
        if condition.state == "ready":
            return boost.charges > 0 and boost.cooldown_hours == 0
        return boost.cooldown_hours > 0

    # degradation
    return compare(context.degradation.get(condition.organ, 0.0), condition.value)


def execute_action(action: RuleAction, current_tier: int) -> int:
    """Tier after applying ``action`` to ``current_tier``."""
    if action.type == ActionType.ADD_TIER:
        return current_tier + action.amount
    if action.type == ActionType.SUBTRACT_TIER:
        return current_tier - action.amount
    return action.tier


def apply_modifiers(
    rule_set: OrganRuleSet, base_tier: int, context: RuleContext
) -> tuple[int, list[str]]:
    """Apply the rule set's modifiers to ``base_tier``.

    Returns:
        (unclamped tier, ids of applied modifiers)
    """
    tier = base_tier
    applied = []
    for modifier in rule_set.modifiers:
        if not modifier.enabled:
            continue
        if modifier.min_base_tier is not None and base_tier < modifier.min_base_tier:
            continue
        if modifier.condition is not None and not evaluate_condition(modifier.condition, context):
            continue
        tier = execute_action(modifier.effect, tier)
        applied.append(modifier.id)
    return tier, applied


def evaluate_organ_rules(rule_set: OrganRuleSet, context: RuleContext) -> RuleResult:
    """Pick the organ's tier and rate for the current context.

    Args:
        rule_set: Organ rules
        context: Container levels, boosts and degradation

    Returns:
        RuleResult with the clamped tier and its rate
    """
    matched = []
    base_tier = 0
    enabled = sorted((r for r in rule_set.rules if r.enabled), key=lambda r: r.priority)
    for rule in enabled:
        if evaluate_condition(rule.condition, context):
            base_tier = execute_action(rule.action, base_tier)
            matched.append(rule.id)
            break

    tier, applied = apply_modifiers(rule_set, base_tier, context)
    tier = max(rule_set.min_tier, min(rule_set.upper_tier, tier))

    return RuleResult(
        tier=tier,
        final_rate=rule_set.rate_for(tier),
        matched_rules=matched,
        applied_modifiers=applied,
    )


def _when(container: ContainerId, op: str, value: float) -> RuleCondition:
    return RuleCondition(type=ConditionType.CONTAINER, container=container, operator=op, value=value)


def _set(tier: int) -> RuleAction:
    return RuleAction(type=ActionType.SET_TIER, tier=tier)


def _add(amount: int) -> RuleAction:
    return RuleAction(type=ActionType.ADD_TIER, amount=amount)


def default_rules() -> RulesConfig:
    """Shipped organ rules.

    Liver releases at tier 1 while it holds glucose and at tier 2 while
    boosted; metformin takes a tier off. The pancreas tier follows BG and
    becomes the muscles' base tier, which exercise and fast insulin raise.
    """
    bg = ContainerId.BG
    liver = OrganRuleSet(
        organ="liver",
        rates=C.LIVER_TRANSFER_RATES,
        rules=[
            Rule(
                id="liver_boost",
                priority=0,
                condition=RuleCondition(type=ConditionType.BOOST, boost="liver_boost", state="active"),
                action=_set(2),
            ),
            Rule(id="liver_empty", priority=10, condition=_when(ContainerId.LIVER, "<=", 0.0), action=_set(0)),
            Rule(id="liver_release", priority=100, condition=RuleCondition(), action=_set(1)),
        ],
        modifiers=[
            TierModifier(
                id="metformin",
                condition=RuleCondition(
                    type=ConditionType.EFFECT, container=ContainerId.METFORMIN_EFFECT, operator=">", value=0.0
                ),
                effect=RuleAction(type=ActionType.SUBTRACT_TIER, amount=1),
            ),
        ],
    )
    pancreas = OrganRuleSet(
        organ="pancreas",
        rates=(0.0, 1.0, 2.0, 3.0, 4.0, 5.0),
        rules=[
            Rule(id="bg_critical", priority=0, condition=_when(bg, ">=", C.BG_CRITICAL), action=_set(4)),
            Rule(id="bg_high", priority=10, condition=_when(bg, ">=", C.BG_HIGH), action=_set(3)),
            Rule(id="bg_elevated", priority=20, condition=_when(bg, ">=", 150.0), action=_set(2)),
            Rule(id="bg_above_target", priority=30, condition=_when(bg, ">", C.BG_TARGET), action=_set(1)),
            Rule(id="bg_normal", priority=100, condition=RuleCondition(), action=_set(0)),
        ],
    )
    muscles = OrganRuleSet(
        organ="muscles",
        rates=C.MUSCLE_DRAIN_RATES,
        max_tier=C.MUSCLE_MAX_TIER,
        boosted_max_tier=C.MUSCLE_BOOSTED_MAX_TIER,
        modifiers=[
            TierModifier(
                id="exercise",
                condition=RuleCondition(
                    type=ConditionType.EFFECT, container=ContainerId.EXERCISE_EFFECT, operator=">", value=0.0
                ),
                effect=_add(1),
                min_base_tier=1,
            ),
            TierModifier(
                id="intense_exercise",
                condition=RuleCondition(
                    type=ConditionType.EFFECT,
                    container=ContainerId.INTENSE_EXERCISE_EFFECT,
                    operator=">",
                    value=0.0,
                ),
                effect=_add(1),
                min_base_tier=1,
            ),
            TierModifier(
                id="fast_insulin",
                condition=RuleCondition(type=ConditionType.BOOST, boost="pancreas_boost", state="active"),
                effect=_add(1),
            ),
        ],
    )
    return RulesConfig(version="1", liver=liver, pancreas=pancreas, muscles=muscles)
