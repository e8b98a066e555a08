"""YAML configuration repository for game content.

Layout under the repository root::

    foods.yaml           # list of food cards
    ships.yaml           # list of planning-graph ships
    interventions.yaml   # list of interventions
    medications.yaml     # list of medications
    rules.yaml           # organ rules for the container simulation (optional)
    levels/<id>.yaml     # one level per file

Each list file holds either a bare list or a mapping with a single key
(``foods``, ``ships`` ...) whose value is the list.
"""

import logging
import math
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

import yaml

from glucose_sim.core.types import (
    DayConfig,
    FoodCard,
    FoodModifiers,
    Intervention,
    LevelConfig,
    LoadType,
    Medication,
    MedicationType,
    SegmentConfig,
    Ship,
)
from glucose_sim.simulation.rules import (
    ActionType,
    ConditionType,
    OrganRuleSet,
    Rule,
    RuleAction,
    RuleCondition,
    RulesConfig,
    TierModifier,
    default_rules,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_yaml(path: Union[str, Path]) -> Any:
    """Load a YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Parsed document
    """
    path = Path(path)
    with open(path, "r") as f:
        return yaml.safe_load(f)


def _require(record: dict, key: str, kind: str) -> Any:
    if key not in record:
        raise ValueError(f"{kind} record is missing '{key}': {record!r}")
    return record[key]


def _as_mapping(record: Any, kind: str) -> dict:
    if not isinstance(record, dict):
        raise ValueError(f"{kind} record must be a mapping, got {type(record).__name__}")
    return record


def food_card_from_config(record: dict[str, Any]) -> FoodCard:
    """Create FoodCard from a configuration record."""
    record = _as_mapping(record, "Food")
    mods = record.get("modifiers") or {}
    try:
        return FoodCard(
            id=str(_require(record, "id", "Food")),
            name=str(record.get("name", record["id"])),
            glucose=float(_require(record, "glucose", "Food")),
            glucose_speed=float(record.get("glucose_speed", 1.0)),
            release_duration=float(record.get("release_duration", 1.0)),
            tier=int(record.get("tier", 1)),
            tag=str(record.get("tag", "")),
            modifiers=FoodModifiers(
                fiber=bool(mods.get("fiber", False)),
                sugar=bool(mods.get("sugar", False)),
                protein=bool(mods.get("protein", False)),
                fat=bool(mods.get("fat", False)),
            ),
            carbs=float(record.get("carbs", 0.0)),
            emoji=str(record.get("emoji", "")),
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Malformed food record {record!r}: {e}") from e


def ship_from_config(record: dict[str, Any]) -> Ship:
    """Create Ship from a configuration record."""
    record = _as_mapping(record, "Ship")
    load_type = record.get("load_type", LoadType.GLUCOSE.value)
    try:
        return Ship(
            id=str(_require(record, "id", "Ship")),
            name=str(record.get("name", record["id"])),
            load=float(_require(record, "load", "Ship")),
            duration=float(_require(record, "duration", "Ship")),
            kcal=float(record.get("kcal", 0.0)),
            load_type=LoadType(load_type),
            emoji=str(record.get("emoji", "")),
            target_container=record.get("target_container"),
        )
    except TypeError as e:
        raise ValueError(f"Malformed ship record {record!r}: {e}") from e


def intervention_from_config(record: dict[str, Any]) -> Intervention:
    """Create Intervention from a configuration record."""
    record = _as_mapping(record, "Intervention")
    try:
        return Intervention(
            id=str(_require(record, "id", "Intervention")),
            name=str(record.get("name", record["id"])),
            depth=float(_require(record, "depth", "Intervention")),
            duration=float(_require(record, "duration", "Intervention")),
            wp_cost=int(record.get("wp_cost", 0)),
            boost_cols=int(record.get("boost_cols", 0)),
            boost_extra=float(record.get("boost_extra", 0.0)),
            decay_rate=float(record.get("decay_rate", 0.0)),
        )
    except TypeError as e:
        raise ValueError(f"Malformed intervention record {record!r}: {e}") from e


def medication_from_config(record: dict[str, Any]) -> Medication:
    """Create Medication from a configuration record."""
    record = _as_mapping(record, "Medication")

    def opt(key: str, cast: Callable[[Any], T]) -> Any:
        value = record.get(key)
        return None if value is None else cast(value)

    try:
        return Medication(
            id=str(_require(record, "id", "Medication")),
            name=str(record.get("name", record["id"])),
            type=MedicationType(_require(record, "type", "Medication")),
            multiplier=opt("multiplier", float),
            depth=opt("depth", int),
            floor_mgdl=opt("floor_mgdl", float),
            duration_multiplier=opt("duration_multiplier", float),
            kcal_multiplier=opt("kcal_multiplier", float),
            wp_bonus=opt("wp_bonus", int),
        )
    except TypeError as e:
        raise ValueError(f"Malformed medication record {record!r}: {e}") from e


def level_from_config(record: dict[str, Any]) -> LevelConfig:
    """Create LevelConfig from a configuration record.

    Args:
        record: Level mapping, optionally wrapped under a 'level' key

    Returns:
        Configured level
    """
    record = _as_mapping(record.get("level", record) if isinstance(record, dict) else record, "Level")

    days = []
    for day in record.get("days", []) or []:
        day = _as_mapping(day, "Day")
        segments = []
        for seg in day.get("segments", []) or []:
            seg = _as_mapping(seg, "Segment")
            segments.append(
                SegmentConfig(
                    segment=str(_require(seg, "segment", "Segment")),
                    offer_templates=[tuple(int(t) for t in tpl) for tpl in seg.get("offer_templates", [])],
                    **({"segment_delay": float(seg["segment_delay"])} if "segment_delay" in seg else {}),
                )
            )
        days.append(DayConfig(day=int(_require(day, "day", "Day")), segments=segments))

    defeat = record.get("defeat_threshold")
    return LevelConfig(
        id=str(_require(record, "id", "Level")),
        name=str(record.get("name", record["id"])),
        days=days,
        initial_inventory=[str(i) for i in record.get("initial_inventory", []) or []],
        defeat_threshold=math.inf if defeat is None else float(defeat),
        degradation_thresholds=[float(t) for t in record.get("degradation_thresholds", []) or []],
    )


def _condition_from_config(record: dict[str, Any]) -> RuleCondition:
    record = _as_mapping(record, "Condition")
    return RuleCondition(
        type=ConditionType(record.get("type", ConditionType.DEFAULT.value)),
        container=record.get("container"),
        operator=str(record.get("operator", ">=")),
        value=float(record.get("value", 0.0)),
        relative_to_capacity=record.get("relative") == "capacity",
        boost=record.get("boost"),
        state=record.get("state"),
        organ=record.get("organ"),
    )


def _action_from_config(record: dict[str, Any]) -> RuleAction:
    record = _as_mapping(record, "Action")
    return RuleAction(
        type=ActionType(_require(record, "type", "Action")),
        tier=int(record.get("tier", record.get("rate_tier", 0))),
        amount=int(record.get("amount", 0)),
        source=record.get("from"),
        target=record.get("to"),
        organ=record.get("organ"),
    )


def organ_rules_from_config(organ: str, record: dict[str, Any]) -> OrganRuleSet:
    """Create OrganRuleSet from a configuration record.

    Args:
        organ: Organ name
        record: Mapping with ``rates``, ``rules`` and optional ``modifiers``
            and tier limits

    Returns:
        Parsed rule set
    """
    record = _as_mapping(record, f"{organ} rules")
    rules = []
    for rule in record.get("rules", []) or []:
        rule = _as_mapping(rule, "Rule")
        rules.append(
            Rule(
                id=str(_require(rule, "id", "Rule")),
                condition=_condition_from_config(rule.get("condition") or {}),
                action=_action_from_config(_require(rule, "action", "Rule")),
                priority=int(rule.get("priority", 0)),
                enabled=bool(rule.get("enabled", True)),
                description=str(rule.get("description", "")),
            )
        )

    modifiers = []
    for mod in record.get("modifiers", []) or []:
        mod = _as_mapping(mod, "Modifier")
        condition = mod.get("condition")
        min_base = mod.get("min_base_tier")
        modifiers.append(
            TierModifier(
                id=str(_require(mod, "id", "Modifier")),
                effect=_action_from_config(_require(mod, "effect", "Modifier")),
                condition=_condition_from_config(condition) if condition is not None else None,
                enabled=bool(mod.get("enabled", True)),
                min_base_tier=None if min_base is None else int(min_base),
                description=str(mod.get("description", "")),
            )
        )

    def opt_int(key: str) -> Optional[int]:
        return None if record.get(key) is None else int(record[key])

    return OrganRuleSet(
        organ=organ,
        rates=tuple(float(r) for r in _require(record, "rates", f"{organ} rules")),
        rules=rules,
        modifiers=modifiers,
        min_tier=int(record.get("min_tier", 0)),
        max_tier=opt_int("max_tier"),
        boosted_max_tier=opt_int("boosted_max_tier"),
    )


def rules_from_config(record: dict[str, Any]) -> RulesConfig:
    """Create RulesConfig from a mapping with liver, pancreas and muscles rule sets."""
    record = _as_mapping(record, "Rules")
    try:
        return RulesConfig(
            version=str(record.get("version", "1")),
            liver=organ_rules_from_config("liver", _require(record, "liver", "Rules")),
            pancreas=organ_rules_from_config("pancreas", _require(record, "pancreas", "Rules")),
            muscles=organ_rules_from_config("muscles", _require(record, "muscles", "Rules")),
        )
    except TypeError as e:
        raise ValueError(f"Malformed rules record: {e}") from e


class ConfigRepository:
    """Loads and caches game content from a directory of YAML files.

    Parsed records are cached per repository instance. ``clear()`` drops the
    cache; ``reload()`` drops it and re-reads every list file.

    Attributes:
        root: Directory holding the YAML files
    """

    LIST_FILES = {
        "foods": ("foods.yaml", food_card_from_config),
        "ships": ("ships.yaml", ship_from_config),
        "interventions": ("interventions.yaml", intervention_from_config),
        "medications": ("medications.yaml", medication_from_config),
    }

    def __init__(self, root: Union[str, Path]):
        """Initialize repository.

        Args:
            root: Content directory
        """
        self.root = Path(root)
        self._lists: dict[str, dict[str, Any]] = {}
        self._levels: dict[str, LevelConfig] = {}
        self._rules: Optional[RulesConfig] = None

    def _load_list(self, kind: str) -> dict[str, Any]:
        if kind in self._lists:
            return self._lists[kind]

        filename, factory = self.LIST_FILES[kind]
        path = self.root / filename
        if not path.exists():
            logger.debug("No %s file at %s", kind, path)
            records = []
        else:
            data = load_yaml(path)
            if isinstance(data, dict):
                data = data.get(kind, [])
            if data is None:
                data = []
            if not isinstance(data, list):
                raise ValueError(f"{path} must hold a list of {kind}")
            records = data

        items: dict[str, Any] = {}
        for record in records:
            item = factory(record)
            if item.id in items:
                raise ValueError(f"Duplicate {kind} id '{item.id}' in {path}")
            items[item.id] = item

        logger.debug("Loaded %d %s from %s", len(items), kind, path)
        self._lists[kind] = items
        return items

    def _get(self, kind: str, item_id: str) -> Any:
        items = self._load_list(kind)
        if item_id not in items:
            raise KeyError(f"Unknown {kind} id: {item_id}")
        return items[item_id]

    def load_food_cards(self) -> list[FoodCard]:
        return list(self._load_list("foods").values())

    def load_ships(self) -> list[Ship]:
        return list(self._load_list("ships").values())

    def load_interventions(self) -> list[Intervention]:
        return list(self._load_list("interventions").values())

    def load_medications(self) -> list[Medication]:
        return list(self._load_list("medications").values())

    def get_food_card(self, card_id: str) -> FoodCard:
        return self._get("foods", card_id)

    def get_ship(self, ship_id: str) -> Ship:
        return self._get("ships", ship_id)

    def get_intervention(self, intervention_id: str) -> Intervention:
        return self._get("interventions", intervention_id)

    def get_medication(self, medication_id: str) -> Medication:
        return self._get("medications", medication_id)

    def load_level(self, level_id: str) -> LevelConfig:
        """Load a level by id.

        Args:
            level_id: Level id (file stem under ``levels/``)

        Returns:
            LevelConfig

        Raises:
            KeyError: If no level file exists for the id
            ValueError: If the file is malformed
        """
        if level_id in self._levels:
            return self._levels[level_id]

        path = self.root / "levels" / f"{level_id}.yaml"
        if not path.exists():
            raise KeyError(f"Unknown level id: {level_id}")

        level = level_from_config(load_yaml(path) or {})
        logger.debug("Loaded level %s (%d days)", level.id, len(level.days))
        self._levels[level_id] = level
        return level

    def load_rules(self) -> RulesConfig:
        """Organ rules from ``rules.yaml``, or the shipped defaults when absent."""
        if self._rules is not None:
            return self._rules

        path = self.root / "rules.yaml"
        if path.exists():
            self._rules = rules_from_config(load_yaml(path) or {})
            logger.debug("Loaded organ rules version %s from %s", self._rules.version, path)
        else:
            self._rules = default_rules()
        return self._rules

    def list_levels(self) -> list[str]:
        """Ids of the level files present."""
        levels_dir = self.root / "levels"
        if not levels_dir.is_dir():
            return []
        return sorted(p.stem for p in levels_dir.glob("*.yaml"))

    def clear(self) -> None:
        """Drop every cached record."""
        self._lists.clear()
        self._levels.clear()
        self._rules = None

    def reload(self) -> None:
        """Drop the cache and re-read the list files."""
        self.clear()
        for kind in self.LIST_FILES:
            self._load_list(kind)
