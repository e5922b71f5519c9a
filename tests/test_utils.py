"""Tests for src/battle_engine/utils.py and errors.py."""
from __future__ import annotations

import pytest

from battle_engine.errors import BattleEngineError, InvalidCombatant
from battle_engine.models.creature import Rarity
from battle_engine.utils import clamp, enum_value, round_half_up, safe_get


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,expected", [
        (2.5, 3), (3.5, 4), (2.4999, 2), (-0.5, 0), (-1.5, -1), (7.0, 7),
    ])
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


class TestHelpers:
    def test_clamp(self):
        assert clamp(120, 0, 100) == 100
        assert clamp(-3, 0, 100) == 0
        assert clamp(40, 0, 100) == 40

    def test_safe_get_dict_and_object(self):
        class Template:
            name = "Whetstone"
            tool_type = None

        assert safe_get({"name": "Bell"}, "name") == "Bell"
        assert safe_get({"name": None}, "name", "Tool") == "Tool"
        assert safe_get(Template(), "name") == "Whetstone"
        assert safe_get(Template(), "tool_type", "strength") == "strength"
        assert safe_get(None, "name", "x") == "x"

    def test_enum_value(self):
        assert enum_value(Rarity.EPIC) == "Epic"
        assert enum_value("Epic") == "Epic"


class TestErrors:
    def test_details_in_message(self):
        err = InvalidCombatant("Combatant is missing battle stats", details={"creature": "abc"})
        assert str(err) == "Combatant is missing battle stats [creature='abc']"
        assert err.message == "Combatant is missing battle stats"

    def test_is_value_error(self):
        assert issubclass(BattleEngineError, ValueError)
