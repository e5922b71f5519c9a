"""Damage formula — pure functions, no I/O.

This is the default damage collaborator used by the combat resolver. The
resolver only relies on the call shape of ``calculate_damage`` and on
``combo_multiplier`` being >= 1.0 and non-decreasing, so callers can swap
either one out.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from battle_engine.models.creature import Creature
from battle_engine.models.effect import DefenseEffect
from battle_engine.utils import round_half_up


class Element(str, Enum):
    FIRE = "fire"
    WATER = "water"
    EARTH = "earth"
    AIR = "air"
    LIGHT = "light"
    DARK = "dark"
    NEUTRAL = "neutral"


# Each element is strong against the one it maps to.
ELEMENT_ADVANTAGES: dict[str, str] = {
    "water": "fire",
    "fire": "earth",
    "earth": "air",
    "air": "water",
}

# Mutually opposed elements hit each other very effectively.
ELEMENT_OPPOSITIONS: dict[str, str] = {
    "light": "dark",
    "dark": "light",
}

EFFECTIVENESS_MULTIPLIERS: dict[str, float] = {
    "very effective": 1.5,
    "effective": 1.25,
    "normal": 1.0,
    "not very effective": 0.8,
}

CRITICAL_MULTIPLIER = 1.5


@dataclass
class DamageResult:
    damage: int = 0
    is_dodged: bool = False
    is_critical: bool = False
    effectiveness: str = "normal"
    damage_type: str = "normal"


class DamageFormula(Protocol):
    def __call__(
        self,
        attacker: Creature,
        defender: Creature,
        attack_type: str,
        combo: float,
        rng: random.Random,
    ) -> DamageResult: ...


def combo_multiplier(combo_level: int) -> float:
    """Damage multiplier for consecutive attacks by the same side.

    Approaches 1.5 with diminishing returns: 1.0, 1.1, 1.18, 1.244, ...
    """
    level = max(0, combo_level)
    return round(1.0 + 0.5 * (1 - 0.8 ** level), 4)


def elemental_effectiveness(attack_element: str, defend_element: str) -> str:
    """Label the matchup between an attacker's and defender's elements."""
    a = (attack_element or "neutral").lower()
    d = (defend_element or "neutral").lower()
    if ELEMENT_OPPOSITIONS.get(a) == d:
        return "very effective"
    if ELEMENT_ADVANTAGES.get(a) == d:
        return "effective"
    if ELEMENT_ADVANTAGES.get(d) == a:
        return "not very effective"
    return "normal"


def damage_reduction(creature: Creature) -> float:
    """Strongest damage reduction granted by an active defensive stance."""
    reductions = [e.damage_reduction for e in creature.active_effects if isinstance(e, DefenseEffect)]
    return max(reductions, default=0.0)


def calculate_damage(
    attacker: Creature,
    defender: Creature,
    attack_type: str,
    combo: float = 1.0,
    rng: random.Random | None = None,
) -> DamageResult:
    """Roll dodge and critical, then compute damage for one hit.

    Dodge is checked first against the defender's dodge chance; a dodged
    attack deals nothing. Attack and defense are read from the stat pair
    matching ``attack_type``.
    """
    rng = rng or random.Random()
    atk_stats = attacker.battle_stats
    def_stats = defender.battle_stats

    if rng.random() * 100 < def_stats.dodge_chance:
        return DamageResult(is_dodged=True)

    is_critical = rng.random() * 100 < atk_stats.critical_chance

    if attack_type == "magical":
        attack, defense = atk_stats.magical_attack, def_stats.magical_defense
    else:
        attack, defense = atk_stats.physical_attack, def_stats.physical_defense
    attack = max(1, attack)
    defense = max(1, defense)

    effectiveness = elemental_effectiveness(attacker.element, defender.element)

    raw = attack * attack / (attack + defense) * 1.5
    raw *= combo
    raw *= EFFECTIVENESS_MULTIPLIERS[effectiveness]
    if is_critical:
        raw *= CRITICAL_MULTIPLIER
    raw *= 1.0 - damage_reduction(defender)

    if attack >= defense * 2:
        damage_type = "overwhelming"
    elif defense >= attack * 2:
        damage_type = "glancing"
    else:
        damage_type = "normal"

    return DamageResult(
        damage=max(1, round_half_up(raw)),
        is_critical=is_critical,
        effectiveness=effectiveness,
        damage_type=damage_type,
    )
