"""Effect catalog — pure lookup from (item type, item effect) to a template.

Templates are plain dicts, like the condition and trait-effect tables:

    stat_changes        per-turn stat deltas (keys are Stat values)
    health_change       one-off heal applied when a tool is used
    health_over_time    per-turn heal (tools)
    damage              instant damage (spells, duration 0)
    damage_over_time    per-turn damage (spells)
    healing_over_time   per-turn heal (spells)
    self_stat_changes   per-turn stat deltas on the caster's mirrored copy
    self_heal_over_time per-turn heal on the caster's mirrored copy
    charge / echo       progression parameters for Charge / Echo effects
    duration            0 means instant

No I/O, no state.
"""
from __future__ import annotations

import copy
from typing import Any

from battle_engine.models.creature import Difficulty
from battle_engine.models.effect import PowerLevel
from battle_engine.utils import enum_value

# Per-turn tool effects, keyed by tool type.
TOOL_BASE_EFFECTS: dict[str, dict[str, Any]] = {
    "energy": {
        "stat_changes": {"energy_cost": -1},
        "health_over_time": 2,
        "duration": 4,
    },
    "strength": {
        "stat_changes": {"physical_attack": 10, "physical_defense": 5},
        "health_over_time": 3,
        "duration": 3,
    },
    "magic": {
        "stat_changes": {"physical_defense": 10, "magical_defense": 10, "max_health": 15},
        "health_over_time": 5,
        "duration": 3,
    },
    "stamina": {
        "stat_changes": {"physical_defense": 5},
        "health_over_time": 10,
        "duration": 4,
    },
    "speed": {
        "stat_changes": {
            "physical_attack": 8, "magical_attack": 8,
            "physical_defense": -2, "magical_defense": -2,
        },
        "health_over_time": 5,
        "duration": 4,
    },
}

_DEFAULT_TOOL_EFFECT: dict[str, Any] = {
    "stat_changes": {"physical_attack": 3},
    "duration": 3,
}

_FALLBACK_TOOL_EFFECT: dict[str, Any] = {
    "stat_changes": {"physical_defense": 2},
    "duration": 1,
}

# Spell tables are built per call because amounts scale with caster magic.
SPELL_CRITICAL_CAP = 15


def magic_power(caster_magic: int) -> float:
    return 1 + caster_magic * 0.15


def _scaled_stats(stat_changes: dict[str, int], factor: float) -> dict[str, int]:
    return {stat: value * factor for stat, value in stat_changes.items()}


def get_tool_effect(tool_type: str | None, tool_effect: str | None) -> dict[str, Any]:
    """Return the template for a tool, or a safe default when data is missing."""
    if not tool_type or not tool_effect:
        return copy.deepcopy(_FALLBACK_TOOL_EFFECT)

    base = copy.deepcopy(TOOL_BASE_EFFECTS.get(tool_type, _DEFAULT_TOOL_EFFECT))

    if tool_effect == "Surge":
        if tool_type == "strength":
            return {
                "stat_changes": {"physical_attack": 15, "physical_defense": 8},
                "health_over_time": 5,
                "health_change": 5,
                "duration": 2,
            }
        return {
            "stat_changes": _scaled_stats(base.get("stat_changes", {}), 2),
            "health_over_time": base.get("health_over_time", 3) * 2,
            "duration": 2,
        }

    if tool_effect == "Shield":
        if tool_type == "magic":
            return {
                "stat_changes": {"physical_defense": 12, "magical_defense": 12, "max_health": 20},
                "health_over_time": 8,
                "health_change": 10,
                "duration": 3,
            }
        return {
            "stat_changes": {"physical_defense": 12, "magical_defense": 12, "max_health": 20},
            "health_over_time": 10,
            "health_change": 10,
            "duration": 4,
        }

    if tool_effect == "Echo":
        if tool_type == "energy":
            return {
                "stat_changes": {"energy_cost": -1},
                "echo": {"stat_multiplier": 1.0, "decay_rate": 0.7, "healing_base": 5},
                "duration": 4,
            }
        return {
            **base,
            "echo": {
                "stat_multiplier": 1.5,
                "decay_rate": 0.7,
                "healing_base": base.get("health_over_time", 5) * 1.5,
            },
            "duration": 6,
        }

    if tool_effect == "Drain":
        if tool_type == "speed":
            return {
                "stat_changes": {
                    "physical_attack": 10, "magical_attack": 10,
                    "physical_defense": -3, "magical_defense": -3,
                },
                "health_over_time": 7,
                "duration": 4,
            }
        return {
            "stat_changes": {
                "physical_attack": 10, "magical_attack": 10,
                "physical_defense": -4, "magical_defense": -4,
            },
            "health_over_time": 8,
            "duration": 4,
        }

    if tool_effect == "Charge":
        if tool_type == "stamina":
            return {
                "charge": {
                    "target_stats": ["physical_defense", "magical_defense", "max_health"],
                    "base_value": 3,
                    "per_turn_increase": 5,
                    "max_turns": 4,
                    "final_burst": 30,
                    "healing_base": 5,
                    "healing_increase": 5,
                },
                "duration": 4,
            }
        return {
            "charge": {
                "target_stats": list(base.get("stat_changes") or {"physical_attack": 0}),
                "base_value": 5,
                "per_turn_increase": 5,
                "max_turns": 3,
                "final_burst": 20,
                "healing_base": 3,
                "healing_increase": 3,
            },
            "duration": 4,
        }

    # Unknown effect name: a slightly stronger, longer version of the base.
    return {
        "stat_changes": _scaled_stats(base.get("stat_changes", {}), 1.1),
        "health_over_time": base.get("health_over_time", 5) * 1.1,
        "duration": base.get("duration", 2) + 1,
    }


def get_spell_effect(spell_type: str | None, spell_effect: str | None, caster_magic: int = 5) -> dict[str, Any]:
    """Return the template for a spell cast with the given caster magic."""
    if not spell_type or not spell_effect:
        return {"damage": 5, "duration": 1}

    power = magic_power(caster_magic)
    base_effects: dict[str, dict[str, Any]] = {
        "energy": {
            "damage": 25 * power,
            "critical_chance": 15,
            "armor_piercing": True,
            "duration": 0,
        },
        "strength": {
            "damage_over_time": 10 * power,
            "self_heal_over_time": 5 * power,
            "stat_changes": {"physical_attack": -3, "magical_attack": -3},
            "self_stat_changes": {"physical_attack": 2, "magical_attack": 2},
            "duration": 3,
        },
        "magic": {
            "charge": {
                "damage_base": 10 * power,
                "damage_increase": 10 * power,
                "max_turns": 2,
                "final_burst": 35 * power,
            },
            "duration": 2,
        },
        "stamina": {
            "stat_changes": {"physical_defense": 8, "magical_defense": 8, "max_health": 15},
            "healing_over_time": 15 * power,
            "duration": 4,
        },
        "speed": {
            "stat_changes": {"initiative": 5, "dodge_chance": 3, "critical_chance": 3},
            "healing_over_time": 5,
            "duration": 4,
        },
    }
    base = base_effects.get(spell_type, {"damage": 10 * power, "duration": 2})

    if spell_effect == "Surge":
        if spell_type == "energy":
            return {"damage": 30 * power, "critical_chance": 20, "armor_piercing": True, "duration": 0}
        return {
            "damage": base.get("damage", 15) * 2.5,
            "critical_chance": 15,
            "armor_piercing": True,
            "duration": 0,
        }

    if spell_effect == "Shield":
        if spell_type == "stamina":
            return {
                "stat_changes": {"physical_defense": 10, "magical_defense": 10, "max_health": 20},
                "healing_over_time": 20 * power,
                "duration": 4,
            }
        return {
            "stat_changes": {"physical_defense": 15, "magical_defense": 15, "max_health": 25},
            "healing_over_time": 18 * power,
            "duration": 4,
        }

    if spell_effect == "Echo":
        if spell_type == "speed":
            return {
                "echo": {
                    "stat_base": {"initiative": 8, "dodge_chance": 5, "critical_chance": 5},
                    "decay_rate": 0.7,
                    "healing_base": 10,
                },
                "duration": 4,
            }
        return {
            "echo": {
                "damage_base": base.get("damage", 20) * power,
                "decay_rate": 0.7,
                "healing_base": 15,
            },
            "duration": 4,
        }

    if spell_effect == "Drain":
        if spell_type == "strength":
            return {
                "damage_over_time": 12 * power,
                "self_heal_over_time": 10 * power,
                "stat_changes": {"physical_attack": -4, "magical_attack": -4},
                "self_stat_changes": {"physical_attack": 3, "magical_attack": 3},
                "duration": 3,
            }
        return {
            "damage_over_time": 10 * power,
            "self_heal_over_time": 8 * power,
            "stat_changes": {"physical_attack": -3, "magical_attack": -3},
            "self_stat_changes": {"physical_attack": 2, "magical_attack": 2},
            "duration": 3,
        }

    if spell_effect == "Charge":
        if spell_type == "magic":
            return {
                "charge": {
                    "damage_base": 5 * power,
                    "damage_increase": 10 * power,
                    "max_turns": 2,
                    "final_burst": 40 * power,
                },
                "duration": 2,
            }
        return {
            "charge": {
                "damage_base": 8 * power,
                "damage_increase": 8 * power,
                "max_turns": 3,
                "final_burst": 35 * power,
            },
            "duration": 3,
        }

    # Unknown effect name: spread the base over a longer window.
    return {
        **base,
        "damage_over_time": base["damage"] / 2 if base.get("damage") else 0,
        "damage": 0,
        "duration": base.get("duration", 2) + 1,
    }


DIFFICULTY_POWER: dict[str, float] = {
    Difficulty.EASY.value: 0.9,
    Difficulty.MEDIUM.value: 1.0,
    Difficulty.HARD.value: 1.1,
    Difficulty.EXPERT.value: 1.2,
}


def effect_power(difficulty: str, caster_stat: int | None = None) -> float:
    """Power multiplier: difficulty factor times the caster-stat factor.

    ``caster_stat`` is only given for spells; 5 is neutral.
    """
    power = DIFFICULTY_POWER.get(enum_value(difficulty), 1.0)
    if caster_stat is not None:
        power *= 1 + (caster_stat - 5) * 0.05
    return power


def power_level(power_multiplier: float) -> PowerLevel:
    if power_multiplier >= 1.3:
        return PowerLevel.STRONG
    if power_multiplier >= 1.1:
        return PowerLevel.NORMAL
    return PowerLevel.WEAK


def visual_key(item_effect: str | None) -> str:
    """Lookup key handed to the presentation layer for animations."""
    return (item_effect or "default").lower()


SYNERGY_PAIRS: tuple[tuple[str, str], ...] = (
    ("Surge", "Drain"),
    ("Shield", "Echo"),
    ("Charge", "Surge"),
    ("Drain", "Echo"),
    ("Shield", "Charge"),
)


def combo_effect_bonus(effects: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Bonus for using synergistic item effects together.

    Each entry needs a ``name`` (the item effect) and optionally
    ``stat_changes``. Returns None when no pair synergizes.
    """
    if not effects or len(effects) < 2:
        return None

    bonus: dict[str, Any] = {"stat_changes": {}, "damage": 0, "healing": 0, "duration": 0}
    for i, effect in enumerate(effects):
        for other in effects[i + 1:]:
            pair = (effect.get("name"), other.get("name"))
            if pair not in SYNERGY_PAIRS and pair[::-1] not in SYNERGY_PAIRS:
                continue
            bonus["damage"] += 5
            bonus["healing"] += 3
            bonus["duration"] += 1
            for stat in effect.get("stat_changes") or {}:
                bonus["stat_changes"][stat] = bonus["stat_changes"].get(stat, 0) + 1

    if bonus["stat_changes"] or bonus["damage"] or bonus["healing"]:
        return bonus
    return None
