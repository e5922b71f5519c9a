"""Turn advance — the fixed per-turn pipeline.

1. energy regen for both sides
2. advance every active effect on every creature (expired ones dropped)
3. recompute battle stats from base stats plus this turn's deltas
4. apply this turn's net health change from effects
5. death cascade, player field first, then enemy field

Effects created by step 5 already carry their first contribution and are
not advanced again until the next call.
"""
from __future__ import annotations

import logging

from battle_engine.mechanics import effect_processor
from battle_engine.mechanics.death_cascade import resolve_deaths
from battle_engine.mechanics.energy import replenish
from battle_engine.mechanics.stat_recalculator import refresh
from battle_engine.models.action import TurnResult
from battle_engine.models.creature import Creature, Difficulty
from battle_engine.models.effect import DefenseEffect
from battle_engine.models.field import FieldState
from battle_engine.utils import clamp, enum_value, round_half_up

logger = logging.getLogger(__name__)

DIFFICULTY_HEALTH_SCALE: dict[str, float] = {
    Difficulty.HARD.value: 1.15,
    Difficulty.EXPERT.value: 1.25,
}

RARITY_HEALTH_SCALE: dict[str, float] = {
    "Legendary": 1.2,
    "Epic": 1.15,
    "Rare": 1.1,
}


def _scale_health_amounts(healing: int, damage: int, creature: Creature, difficulty: str) -> tuple[int, int]:
    factor = DIFFICULTY_HEALTH_SCALE.get(enum_value(difficulty))
    if factor:
        healing, damage = round_half_up(healing * factor), round_half_up(damage * factor)
    factor = RARITY_HEALTH_SCALE.get(enum_value(creature.rarity))
    if factor:
        healing, damage = round_half_up(healing * factor), round_half_up(damage * factor)
    return healing, damage


def tick_creature(creature: Creature, turn: int, difficulty: str) -> tuple[Creature, list[str]]:
    """Advance one creature's effects for ``turn`` and apply the results."""
    log: list[str] = []
    if not creature.battle_stats:
        logger.warning(f"Skipping {creature.species}: no battle stats")
        return creature, log

    kept = []
    healing = 0
    damage = 0
    bonus = 0
    for effect in creature.active_effects:
        if effect_processor.is_expired(effect, turn):
            logger.debug(f"{effect.name} expired on {creature.species}")
            continue
        processed = effect_processor.advance(effect, turn)
        healing += max(0, processed.healing_this_turn)
        if effect_processor.burst_empowers(processed):
            bonus += processed.damage_this_turn
            log.append(f"{creature.species}'s {processed.name} is fully charged (+{processed.damage_this_turn} to next attack)!")
        else:
            damage += max(0, processed.damage_this_turn)
            if processed.is_final_burst:
                log.append(f"{creature.species}'s {processed.name} bursts for {processed.damage_this_turn} damage!")
        if effect_processor.is_retired(processed, turn):
            continue
        kept.append(processed)

    updated = creature.model_copy(update={
        "active_effects": tuple(kept),
        "current_turn": turn,
        "is_defending": any(isinstance(e, DefenseEffect) for e in kept),
        "next_attack_bonus": creature.next_attack_bonus + bonus,
    })
    updated = refresh(updated)

    if healing or damage:
        healing, damage = _scale_health_amounts(healing, damage, updated, difficulty)
        before = updated.current_health
        health = clamp(before + healing - damage, 0, updated.battle_stats.max_health)
        updated = updated.model_copy(update={"current_health": health})
        if damage and healing:
            log.append(f"{creature.species} took {damage} damage and healed {healing} from effects ({before} -> {health}).")
        elif damage:
            log.append(f"{creature.species} took {damage} damage from effects.")
        elif health != before:
            log.append(f"{creature.species} healed {health - before} from effects.")

    return updated, log


def tick_field(field: tuple[Creature, ...], turn: int, difficulty: str) -> tuple[tuple[Creature, ...], list[str]]:
    creatures = []
    log: list[str] = []
    for creature in field:
        updated, lines = tick_creature(creature, turn, difficulty)
        creatures.append(updated)
        log.extend(lines)
    return tuple(creatures), log


def advance_turn(state: FieldState, difficulty: str = Difficulty.MEDIUM.value) -> TurnResult:
    """Resolve the end of ``state.turn`` and return the state for the next one."""
    turn = state.turn
    log: list[str] = [f"--- Turn {turn} ---"]

    player_energy = replenish(state.player_energy, state.player_field, difficulty, state.player_momentum)
    enemy_energy = replenish(state.enemy_energy, state.enemy_field, difficulty, state.enemy_momentum)

    player_field, player_log = tick_field(state.player_field, turn, difficulty)
    enemy_field, enemy_log = tick_field(state.enemy_field, turn, difficulty)
    log.extend(player_log)
    log.extend(enemy_log)

    player_field, enemy_field, death_log = resolve_deaths(player_field, enemy_field, turn)
    log.extend(death_log)
    enemy_field, player_field, death_log = resolve_deaths(enemy_field, player_field, turn)
    log.extend(death_log)

    logger.info(
        f"Turn {turn} resolved: player {len(player_field)} creatures / {player_energy} energy, "
        f"enemy {len(enemy_field)} creatures / {enemy_energy} energy"
    )
    new_state = state.model_copy(update={
        "turn": turn + 1,
        "player_field": player_field,
        "enemy_field": enemy_field,
        "player_energy": player_energy,
        "enemy_energy": enemy_energy,
    })
    return TurnResult(state=new_state, log=tuple(log))
