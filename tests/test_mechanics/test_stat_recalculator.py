"""Tests for src/battle_engine/mechanics/stat_recalculator.py."""
from __future__ import annotations

import pytest

from battle_engine.mechanics.stat_recalculator import (
    creature_power,
    derive_anchor_stats,
    form_multiplier,
    rarity_multiplier,
    recompute,
    refresh,
)
from battle_engine.models.creature import Rarity
from battle_engine.models.effect import StandardEffect


def _buff(value: int, stat: str = "physical_attack") -> StandardEffect:
    return StandardEffect(name="Buff", duration=3, stat_changes={stat: value}, stat_modifications={stat: value})


class TestAnchor:
    def test_default_creature(self, testling):
        anchor = derive_anchor_stats(testling)
        assert anchor == {
            "physical_attack": 15,
            "magical_attack": 15,
            "physical_defense": 11,
            "magical_defense": 11,
            "max_health": 75,
            "initiative": 20,
            "critical_chance": 8,
            "dodge_chance": 5,
            "energy_cost": 4,
        }

    @pytest.mark.parametrize("rarity,expected", [
        (Rarity.COMMON, 1.0),
        (Rarity.RARE, 1.03),
        (Rarity.EPIC, 1.06),
        (Rarity.LEGENDARY, 1.1),
        ("Legendary", 1.1),
    ])
    def test_rarity_multiplier(self, rarity, expected):
        assert rarity_multiplier(rarity) == expected

    def test_form_scales_stats(self, make_creature):
        base = make_creature()
        evolved = make_creature(form=2)
        assert form_multiplier(2) == pytest.approx(1.3)
        assert evolved.battle_stats.physical_attack > base.battle_stats.physical_attack
        assert evolved.battle_stats.max_health > base.battle_stats.max_health

    def test_anchor_ignores_effects(self, testling):
        buffed = testling.model_copy(update={"active_effects": (_buff(50),)})
        assert derive_anchor_stats(buffed) == derive_anchor_stats(testling)


class TestRecompute:
    def test_no_double_application(self, testling):
        buffed = testling.model_copy(update={"active_effects": (_buff(2), _buff(2), _buff(2))})
        first = recompute(buffed)
        second = recompute(buffed)
        assert first == second
        assert first.physical_attack == 15 + 3 * 2

    def test_refresh_is_idempotent(self, testling):
        buffed = testling.model_copy(update={"active_effects": (_buff(4),)})
        once = refresh(buffed)
        twice = refresh(once)
        assert once.battle_stats == twice.battle_stats
        assert twice.battle_stats.physical_attack == 19

    @pytest.mark.parametrize("stat,delta,floor", [
        ("physical_attack", -100, 1),
        ("magical_defense", -100, 1),
        ("max_health", -500, 10),
        ("initiative", -100, 0),
        ("dodge_chance", -100, 0),
        ("critical_chance", -100, 0),
    ])
    def test_floors(self, testling, stat, delta, floor):
        debuffed = testling.model_copy(update={"active_effects": (_buff(delta, stat),)})
        assert getattr(recompute(debuffed), stat) == floor

    def test_energy_cost_never_below_one(self, testling):
        cheap = testling.model_copy(update={"active_effects": (_buff(-10, "energy_cost"),)})
        assert recompute(cheap).energy_cost == 1

    def test_permanent_modifications_are_flat(self, testling):
        upgraded = testling.model_copy(update={"permanent_modifications": {"physical_attack": 5}})
        assert recompute(upgraded).physical_attack == 20

    def test_combination_level_skips_chances_and_cost(self, testling):
        combined = testling.model_copy(update={"combination_level": 2})
        stats = recompute(combined)
        assert stats.physical_attack == 17  # 15 * 1.16 = 17.4
        assert stats.max_health == 87  # 75 * 1.16 = 87.0
        assert stats.critical_chance == 8
        assert stats.dodge_chance == 5
        assert stats.energy_cost == 4

    def test_unknown_stat_keys_ignored(self, testling):
        odd = testling.model_copy(update={"active_effects": (_buff(5, "luck"),)})
        assert recompute(odd) == recompute(testling)


class TestRefresh:
    def test_clamps_health_when_max_shrinks(self, testling):
        shielded = refresh(testling.model_copy(update={"active_effects": (_buff(20, "max_health"),)}))
        healed = shielded.model_copy(update={"current_health": 95})
        expired = refresh(healed.model_copy(update={"active_effects": ()}))
        assert expired.battle_stats.max_health == 75
        assert expired.current_health == 75

    def test_does_not_heal(self, testling):
        hurt = testling.model_copy(update={"current_health": 30})
        assert refresh(hurt).current_health == 30


class TestCreaturePower:
    def test_default_power(self, testling):
        # 15*2 + 11 + 7.5 + (20+8+5)*0.5 + 0 + 10
        assert creature_power(testling) == 75

    def test_no_stats_is_zero(self, make_fighter):
        assert creature_power(make_fighter().model_copy(update={"battle_stats": None})) == 0
