"""Tests for the YAML configuration repository."""

import math

import pytest
import yaml

from glucose_sim.config import ConfigRepository, food_card_from_config, level_from_config
from glucose_sim.core.types import LoadType, MedicationType
from glucose_sim.simulation import default_rules

FOODS = {
    "foods": [
        {
            "id": "apple",
            "name": "Apple",
            "glucose": 20,
            "glucose_speed": 1.0,
            "release_duration": 4,
            "tier": 1,
            "tag": "fruit",
            "modifiers": {"fiber": True},
        },
        {"id": "soda", "glucose": 60, "tier": 3, "tag": "drink", "modifiers": {"sugar": True}},
    ]
}

LEVEL = {
    "level": {
        "id": "level-1",
        "name": "First Steps",
        "initial_inventory": ["apple"],
        "defeat_threshold": 300,
        "degradation_thresholds": [50, 100, 150],
        "days": [
            {
                "day": 1,
                "segments": [
                    {"segment": "breakfast", "offer_templates": [[1, 1, 2]]},
                    {"segment": "lunch", "offer_templates": [[1, 2], [2, 3]], "segment_delay": 2.5},
                ],
            }
        ],
    }
}


def write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


@pytest.fixture
def content(tmp_path):
    write(tmp_path / "foods.yaml", FOODS)
    write(
        tmp_path / "ships.yaml",
        [
            {"id": "bread", "name": "Bread", "load": 60, "duration": 30, "kcal": 200},
            {"id": "walk", "name": "Walk", "load": 2, "duration": 30, "load_type": "Treatment"},
        ],
    )
    write(tmp_path / "interventions.yaml", [{"id": "walk", "name": "Walk", "depth": 2, "duration": 30, "boost_cols": 1}])
    write(
        tmp_path / "medications.yaml",
        [{"id": "metformin", "name": "Metformin", "type": "thresholdDrain", "depth": 2, "floor_mgdl": 120}],
    )
    write(tmp_path / "levels" / "level-1.yaml", LEVEL)
    return tmp_path


def test_loads_every_list(content):
    repo = ConfigRepository(content)

    foods = repo.load_food_cards()
    assert [f.id for f in foods] == ["apple", "soda"]
    assert foods[0].modifiers.fiber
    assert foods[1].name == "soda"
    assert repo.get_ship("walk").load_type == LoadType.TREATMENT
    assert repo.get_intervention("walk").boost_cols == 1
    assert repo.get_medication("metformin").type == MedicationType.THRESHOLD_DRAIN


def test_level(content):
    level = ConfigRepository(content).load_level("level-1")

    assert level.name == "First Steps"
    assert level.defeat_threshold == 300
    assert level.degradation_thresholds == [50, 100, 150]
    lunch = level.days[0].segments[1]
    assert lunch.offer_templates == [(1, 2), (2, 3)]
    assert lunch.segment_delay == 2.5
    assert level.days[0].segments[0].segment_delay == 3.0
    assert level.get_day(1) is level.days[0]
    assert level.get_day(2) is None


def test_unknown_ids_raise_key_error(content):
    repo = ConfigRepository(content)
    with pytest.raises(KeyError):
        repo.get_food_card("pizza")
    with pytest.raises(KeyError):
        repo.load_level("level-99")


def test_missing_files_are_empty(tmp_path):
    repo = ConfigRepository(tmp_path)
    assert repo.load_food_cards() == []
    assert repo.list_levels() == []


def test_malformed_records_raise_value_error(tmp_path):
    write(tmp_path / "foods.yaml", [{"id": "broken", "tier": 1}])
    with pytest.raises(ValueError):
        ConfigRepository(tmp_path).load_food_cards()

    with pytest.raises(ValueError):
        food_card_from_config({"id": "x", "glucose": "lots"})

    write(tmp_path / "medications.yaml", [{"id": "m", "type": "magic"}])
    with pytest.raises(ValueError):
        ConfigRepository(tmp_path).load_medications()


def test_duplicate_ids_rejected(tmp_path):
    write(tmp_path / "foods.yaml", [{"id": "a", "glucose": 1}, {"id": "a", "glucose": 2}])
    with pytest.raises(ValueError):
        ConfigRepository(tmp_path).load_food_cards()


def test_cache_until_clear(content):
    repo = ConfigRepository(content)
    assert len(repo.load_food_cards()) == 2

    write(content / "foods.yaml", {"foods": [{"id": "rice", "glucose": 40}]})
    assert len(repo.load_food_cards()) == 2

    repo.clear()
    assert [f.id for f in repo.load_food_cards()] == ["rice"]


def test_reload_rereads(content):
    repo = ConfigRepository(content)
    repo.load_ships()
    write(content / "ships.yaml", [{"id": "rice", "load": 40, "duration": 15}])

    repo.reload()

    assert [s.id for s in repo.load_ships()] == ["rice"]


def test_level_without_defeat_threshold():
    level = level_from_config({"id": "free", "days": []})
    assert math.isinf(level.defeat_threshold)
    assert level.name == "free"


RULES = {
    "version": "2",
    "liver": {
        "rates": [0, 40, 80],
        "rules": [
            {
                "id": "liver_empty",
                "priority": 0,
                "condition": {"type": "container", "container": "liver", "operator": "<=", "value": 0},
                "action": {"type": "setTier", "rate_tier": 0},
            },
            {"id": "liver_normal", "priority": 10, "action": {"type": "setTier", "rate_tier": 1}},
        ],
    },
    "pancreas": {
        "rates": [0, 1],
        "rules": [{"id": "pancreas_idle", "action": {"type": "setTier", "tier": 0}}],
    },
    "muscles": {
        "rates": [0, 30, 35],
        "max_tier": 1,
        "boosted_max_tier": 2,
        "rules": [],
        "modifiers": [
            {
                "id": "exercise",
                "condition": {"type": "effect", "container": "exercise_effect", "operator": ">", "value": 0},
                "effect": {"type": "addTier", "amount": 1},
                "min_base_tier": 1,
            }
        ],
    },
}


def test_rules_file(tmp_path):
    write(tmp_path / "rules.yaml", RULES)
    rules = ConfigRepository(tmp_path).load_rules()

    assert rules.version == "2"
    assert rules.liver.rates == (0.0, 40.0, 80.0)
    assert [r.id for r in rules.liver.rules] == ["liver_empty", "liver_normal"]
    assert rules.liver.rules[0].condition.operator == "<="
    assert rules.muscles.boosted_max_tier == 2
    assert rules.muscles.modifiers[0].min_base_tier == 1


def test_missing_rules_file_uses_defaults(tmp_path):
    rules = ConfigRepository(tmp_path).load_rules()
    assert rules.liver.rates == default_rules().liver.rates


def test_malformed_rules_raise_value_error(tmp_path):
    write(tmp_path / "rules.yaml", {"liver": RULES["liver"], "pancreas": RULES["pancreas"]})
    with pytest.raises(ValueError):
        ConfigRepository(tmp_path).load_rules()
