"""Attack and defend resolution.

Orchestrates one attack: picks the attack type, spends a pending charged
bonus, asks the damage collaborator for the hit, applies it, and rolls the
on-hit debuffs. The formula itself lives in ``mechanics.damage``.
"""
from __future__ import annotations

import logging
import random

from battle_engine.errors import InvalidCombatant
from battle_engine.mechanics.damage import DamageFormula, calculate_damage, combo_multiplier
from battle_engine.mechanics.stat_recalculator import rarity_multiplier, refresh
from battle_engine.models.action import AttackResult, AttackType, DefendResult
from battle_engine.models.creature import Creature, Difficulty, Rarity
from battle_engine.models.effect import DefenseEffect, EffectSource, StandardEffect
from battle_engine.utils import enum_value, round_half_up

logger = logging.getLogger(__name__)

CRITICAL_TRAUMA_CHANCE = 0.2
ELEMENTAL_WEAKNESS_CHANCE = 0.25


def validate_combatants(*creatures: Creature | None) -> None:
    for creature in creatures:
        if creature is None or not creature.battle_stats:
            raise InvalidCombatant(
                "Combatant is missing battle stats",
                details={"creature": getattr(creature, "id", None)},
            )


def choose_attack_type(attacker: Creature, attack_type: str) -> str:
    """Resolve ``auto`` to the attacker's stronger side; unknown types count as auto."""
    try:
        attack_type = AttackType(enum_value(attack_type)).value
    except ValueError:
        logger.warning(f"Unknown attack type {attack_type!r}, choosing automatically")
        attack_type = AttackType.AUTO.value
    if attack_type != AttackType.AUTO.value:
        return attack_type
    stats = attacker.battle_stats
    if stats.physical_attack >= stats.magical_attack:
        return AttackType.PHYSICAL.value
    return AttackType.MAGICAL.value


def _with_charged_bonus(attacker: Creature, attack_type: str) -> Creature:
    """Snapshot used only for the damage roll, with the pending bonus added."""
    stat = "magical_attack" if attack_type == AttackType.MAGICAL.value else "physical_attack"
    stats = attacker.battle_stats
    boosted = stats.model_copy(update={stat: getattr(stats, stat) + attacker.next_attack_bonus})
    return attacker.model_copy(update={"battle_stats": boosted})


def critical_trauma(turn: int) -> StandardEffect:
    changes = {"physical_defense": -2, "magical_defense": -2}
    return StandardEffect(
        name="Critical Strike Trauma",
        duration=1,
        start_turn=turn,
        source=EffectSource.STATUS,
        visual_key="critical_trauma",
        stat_changes=changes,
        stat_modifications=changes,
    )


def elemental_weakness(turn: int) -> StandardEffect:
    changes = {"physical_defense": -1, "magical_defense": -1}
    return StandardEffect(
        name="Elemental Weakness",
        duration=2,
        start_turn=turn,
        source=EffectSource.STATUS,
        visual_key="elemental_weakness",
        stat_changes=changes,
        stat_modifications=changes,
    )


def _attack_log(
    attacker: Creature,
    defender: Creature,
    attack_type: str,
    combo_level: int,
    damage: int,
    is_dodged: bool,
    is_critical: bool,
    effectiveness: str,
    damage_type: str,
) -> str:
    if is_dodged:
        return f"{attacker.species}'s {attack_type} attack was dodged by {defender.species}!"

    log = f"{attacker.species} used {attack_type} attack on {defender.species}"
    if is_critical:
        log += " (Critical Hit!)"
    if combo_level > 1:
        log += f" [Combo x{combo_level}!]"
    if effectiveness != "normal":
        log += f" - {effectiveness}!"
    if damage_type and damage_type != "normal":
        log += f" [{damage_type}]"
    log += f" dealing {damage} damage."

    max_health = defender.battle_stats.max_health
    if defender.current_health <= 0:
        if defender.rarity == Rarity.LEGENDARY:
            log += f" {defender.species} falls in battle!"
        elif defender.rarity == Rarity.EPIC:
            log += f" {defender.species} has been defeated!"
        else:
            log += f" {defender.species} was defeated!"
    elif defender.current_health < max_health * 0.2:
        log += f" {defender.species} is critically wounded!"
    elif defender.current_health < max_health * 0.5:
        log += f" {defender.species} is wounded!"
    return log


def resolve_attack(
    attacker: Creature,
    defender: Creature,
    attack_type: str = AttackType.AUTO.value,
    combo_level: int = 0,
    rng: random.Random | None = None,
    damage_fn: DamageFormula = calculate_damage,
    current_turn: int | None = None,
) -> AttackResult:
    """Resolve one attack and return new attacker/defender snapshots.

    On-hit debuffs start at ``current_turn`` (the defender's own turn when
    omitted) and count against the defender's stats right away.

    Invalid combatants produce a zero-damage result with the inputs
    returned untouched.
    """
    rng = rng or random.Random()
    try:
        validate_combatants(attacker, defender)
    except InvalidCombatant as e:
        logger.warning(f"Attack skipped: {e}")
        return AttackResult(attacker=attacker, defender=defender, log="Invalid attack - missing stats")

    chosen = choose_attack_type(attacker, attack_type)
    roller = attacker
    if attacker.next_attack_bonus:
        roller = _with_charged_bonus(attacker, chosen)
        logger.debug(f"{attacker.species} unleashes a charged attack (+{attacker.next_attack_bonus})")

    multiplier = combo_multiplier(combo_level)
    hit = damage_fn(roller, defender, chosen, multiplier, rng)

    updated_defender = defender
    actual_damage = 0
    if not hit.is_dodged:
        health = max(0, defender.current_health - hit.damage)
        actual_damage = defender.current_health - health
        turn = defender.current_turn if current_turn is None else current_turn
        new_effects = list(defender.active_effects)
        # Independent trials; neither is guaranteed.
        if hit.is_critical and rng.random() < CRITICAL_TRAUMA_CHANCE:
            new_effects.append(critical_trauma(turn))
        if hit.effectiveness in ("effective", "very effective") and rng.random() < ELEMENTAL_WEAKNESS_CHANCE:
            new_effects.append(elemental_weakness(turn))
        updated_defender = defender.model_copy(update={
            "current_health": health,
            "active_effects": tuple(new_effects),
        })
        if len(new_effects) > len(defender.active_effects):
            updated_defender = refresh(updated_defender.model_copy(update={"current_turn": turn}))
        logger.debug(
            f"{attacker.species} hit {defender.species} for {actual_damage}: "
            f"{defender.current_health} -> {health}"
        )

    updated_attacker = attacker.model_copy(update={"next_attack_bonus": 0})

    log = _attack_log(
        updated_attacker,
        updated_defender,
        chosen,
        combo_level,
        actual_damage,
        hit.is_dodged,
        hit.is_critical,
        hit.effectiveness,
        hit.damage_type,
    )
    return AttackResult(
        attacker=updated_attacker,
        defender=updated_defender,
        attack_type=chosen,
        damage=actual_damage,
        is_critical=hit.is_critical,
        is_dodged=hit.is_dodged,
        effectiveness=hit.effectiveness,
        damage_type=hit.damage_type,
        combo_multiplier=multiplier,
        log=log,
    )


def defend(creature: Creature, difficulty: str = Difficulty.MEDIUM.value, current_turn: int | None = None) -> DefendResult:
    """Put a creature in a defensive stance lasting through the opponent's turn.

    The stance adds half of each defense stat (plus a rarity bonus) as a
    Persistent-Defense effect with a two-turn lifetime.
    """
    try:
        validate_combatants(creature)
    except InvalidCombatant as e:
        logger.warning(f"Defend skipped: {e}")
        return DefendResult(creature=creature, log="Invalid defend - missing stats")

    turn = creature.current_turn if current_turn is None else current_turn
    stats = creature.battle_stats
    rarity_bonus = rarity_multiplier(creature.rarity) - 1
    physical_boost = round_half_up(stats.physical_defense * 0.5)
    magical_boost = round_half_up(stats.magical_defense * 0.5)
    hard_mode = enum_value(difficulty) in (Difficulty.HARD.value, Difficulty.EXPERT.value)

    changes = {
        "physical_defense": physical_boost + round_half_up(physical_boost * rarity_bonus),
        "magical_defense": magical_boost + round_half_up(magical_boost * rarity_bonus),
    }
    stance = DefenseEffect(
        name="Defensive Stance",
        start_turn=turn,
        visual_key="shield",
        stat_changes=changes,
        stat_modifications=changes,
        damage_reduction=0.4 if hard_mode else 0.2,
    )
    defended = creature.model_copy(update={
        "is_defending": True,
        "current_turn": turn,
        "active_effects": (*creature.active_effects, stance),
    })
    defended = refresh(defended)
    log = (
        f"{creature.species} takes a defensive stance "
        f"(+{changes['physical_defense']} physical, +{changes['magical_defense']} magical defense)."
    )
    return DefendResult(creature=defended, log=log)
