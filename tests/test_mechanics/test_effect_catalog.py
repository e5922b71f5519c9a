"""Tests for src/battle_engine/mechanics/effect_catalog.py."""
from __future__ import annotations

import pytest

from battle_engine.mechanics.effect_catalog import (
    combo_effect_bonus,
    effect_power,
    get_spell_effect,
    get_tool_effect,
    power_level,
    visual_key,
)
from battle_engine.models.effect import PowerLevel


class TestToolLookup:
    @pytest.mark.parametrize("tool_type", ["energy", "strength", "magic", "stamina", "speed"])
    @pytest.mark.parametrize("tool_effect", ["Surge", "Shield", "Echo", "Drain", "Charge"])
    def test_every_pair_has_a_duration(self, tool_type, tool_effect):
        template = get_tool_effect(tool_type, tool_effect)
        assert template["duration"] >= 1

    def test_stamina_charge_targets_defenses(self):
        charge = get_tool_effect("stamina", "Charge")["charge"]
        assert charge["target_stats"] == ["physical_defense", "magical_defense", "max_health"]
        assert charge["max_turns"] == 4

    def test_lookup_returns_fresh_copies(self):
        first = get_tool_effect("strength", "Drain")
        first["stat_changes"]["physical_attack"] = 999
        assert get_tool_effect("strength", "Drain")["stat_changes"]["physical_attack"] == 10

    def test_missing_data_falls_back(self):
        assert get_tool_effect(None, "Surge") == {"stat_changes": {"physical_defense": 2}, "duration": 1}


class TestSpellLookup:
    def test_surge_is_instant(self):
        template = get_spell_effect("energy", "Surge", caster_magic=5)
        assert template["duration"] == 0
        assert template["armor_piercing"]
        assert template["damage"] == pytest.approx(52.5)

    def test_magic_scales_amounts(self):
        low = get_spell_effect("strength", "Drain", caster_magic=2)
        high = get_spell_effect("strength", "Drain", caster_magic=10)
        assert high["damage_over_time"] > low["damage_over_time"]

    def test_unknown_effect_spreads_damage(self):
        template = get_spell_effect("energy", "Ripple")
        assert template["damage"] == 0
        assert template["damage_over_time"] > 0


class TestPower:
    @pytest.mark.parametrize("difficulty,expected", [
        ("easy", 0.9), ("medium", 1.0), ("hard", 1.1), ("expert", 1.2), ("unknown", 1.0),
    ])
    def test_difficulty_factor(self, difficulty, expected):
        assert effect_power(difficulty) == pytest.approx(expected)

    def test_caster_stat_factor(self):
        assert effect_power("medium", caster_stat=9) == pytest.approx(1.2)
        assert effect_power("medium", caster_stat=5) == pytest.approx(1.0)

    @pytest.mark.parametrize("multiplier,level", [
        (0.9, PowerLevel.WEAK),
        (1.1, PowerLevel.NORMAL),
        (1.29, PowerLevel.NORMAL),
        (1.3, PowerLevel.STRONG),
    ])
    def test_power_level(self, multiplier, level):
        assert power_level(multiplier) == level

    def test_visual_key(self):
        assert visual_key("Charge") == "charge"
        assert visual_key(None) == "default"


class TestComboEffectBonus:
    def test_synergy_pair(self):
        bonus = combo_effect_bonus([
            {"name": "Surge", "stat_changes": {"physical_attack": 5}},
            {"name": "Drain"},
        ])
        assert bonus["damage"] == 5
        assert bonus["healing"] == 3
        assert bonus["stat_changes"] == {"physical_attack": 1}

    def test_reversed_pair_counts(self):
        assert combo_effect_bonus([{"name": "Echo"}, {"name": "Shield"}]) is not None

    def test_no_synergy(self):
        assert combo_effect_bonus([{"name": "Surge"}, {"name": "Shield"}]) is None
        assert combo_effect_bonus([{"name": "Surge"}]) is None
