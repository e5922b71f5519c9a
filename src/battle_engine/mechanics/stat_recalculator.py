"""Battle stat derivation — pure functions, no I/O.

Battle stats are always rebuilt from base stats. The effect contributions
folded in are whatever each active effect reports for the current turn, so
running ``recompute`` any number of times on the same creature gives the
same answer.
"""
from __future__ import annotations

from battle_engine.models.creature import (
    ATTACK_STATS,
    CHANCE_STATS,
    DEFENSE_STATS,
    BattleStats,
    Creature,
    Rarity,
    Stat,
)
from battle_engine.utils import enum_value, round_half_up

RARITY_MULTIPLIERS: dict[str, float] = {
    Rarity.COMMON.value: 1.0,
    Rarity.RARE.value: 1.03,
    Rarity.EPIC.value: 1.06,
    Rarity.LEGENDARY.value: 1.1,
}

COMBINATION_BONUS_PER_LEVEL = 0.08

_STAT_NAMES = tuple(s.value for s in Stat)


def rarity_multiplier(rarity: str) -> float:
    return RARITY_MULTIPLIERS.get(enum_value(rarity), 1.0)


def form_multiplier(form: int) -> float:
    return 1 + max(0, form) * 0.15


def derive_anchor_stats(creature: Creature) -> dict[str, int]:
    """Battle stats from base stats, rarity and form alone, ignoring effects."""
    base = creature.base_stats
    mult = rarity_multiplier(creature.rarity) * form_multiplier(creature.form)
    return {
        "physical_attack": round_half_up((5 + base.strength * 2) * mult),
        "magical_attack": round_half_up((5 + base.magic * 2) * mult),
        "physical_defense": round_half_up((3 + base.stamina * 1.5) * mult),
        "magical_defense": round_half_up((3 + (base.magic + base.stamina) * 0.75) * mult),
        "max_health": round_half_up((50 + base.stamina * 5) * mult),
        "initiative": round_half_up((10 + base.speed * 2) * mult),
        "critical_chance": round_half_up(5 + base.speed * 0.5),
        "dodge_chance": round_half_up(3 + base.speed * 0.3),
        "energy_cost": max(1, 3 + creature.form + round_half_up(base.energy * 0.2)),
    }


def _floor_for(stat: str) -> int | None:
    if stat in ATTACK_STATS or stat in DEFENSE_STATS:
        return 1
    if stat == Stat.MAX_HEALTH.value:
        return 10
    if stat == Stat.INITIATIVE.value or stat in CHANCE_STATS:
        return 0
    return None


def sum_effect_modifications(creature: Creature) -> dict[str, int]:
    totals: dict[str, int] = {}
    for effect in creature.active_effects:
        for stat, value in effect.stat_modifications.items():
            totals[stat] = totals.get(stat, 0) + value
    return totals


def recompute(creature: Creature) -> BattleStats:
    """Rebuild battle stats from the anchor plus this turn's effect deltas.

    Order: anchor, effect deltas (then per-stat floors), permanent
    modifications, combination multiplier.
    """
    stats = derive_anchor_stats(creature)

    for stat, value in sum_effect_modifications(creature).items():
        if stat not in stats:
            continue
        stats[stat] += value
        floor = _floor_for(stat)
        if floor is not None:
            stats[stat] = max(floor, stats[stat])

    for stat, value in creature.permanent_modifications.items():
        if stat in stats:
            stats[stat] += value

    if creature.combination_level > 0:
        multiplier = 1 + creature.combination_level * COMBINATION_BONUS_PER_LEVEL
        for stat in _STAT_NAMES:
            if stat in CHANCE_STATS or stat == Stat.ENERGY_COST.value:
                continue
            stats[stat] = round_half_up(stats[stat] * multiplier)

    stats["energy_cost"] = max(1, stats["energy_cost"])
    return BattleStats(**stats)


def refresh(creature: Creature) -> Creature:
    """Return a copy with recomputed stats and health clamped to the new max."""
    battle_stats = recompute(creature)
    health = min(creature.current_health, battle_stats.max_health)
    return creature.model_copy(update={"battle_stats": battle_stats, "current_health": health})


def deploy(creature: Creature) -> Creature:
    """Prepare a freshly deployed creature: derived stats and full health."""
    battle_stats = recompute(creature)
    return creature.model_copy(update={"battle_stats": battle_stats, "current_health": battle_stats.max_health})


def creature_power(creature: Creature) -> int:
    """Single power score used for roster comparisons."""
    if not creature.battle_stats:
        return 0
    stats = creature.battle_stats
    attack = max(stats.physical_attack, stats.magical_attack)
    defense = max(stats.physical_defense, stats.magical_defense)
    utility = stats.initiative + stats.critical_chance + stats.dodge_chance
    rarity_value = {"Legendary": 4, "Epic": 3, "Rare": 2}.get(enum_value(creature.rarity), 1)
    return round_half_up(
        attack * 2
        + defense
        + stats.max_health * 0.1
        + utility * 0.5
        + creature.form * 5
        + rarity_value * 10
    )
