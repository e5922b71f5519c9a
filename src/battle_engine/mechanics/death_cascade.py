"""Death cascade: defeated creatures leave effects on allies and opponents."""
from __future__ import annotations

import logging

from battle_engine.mechanics.stat_recalculator import refresh
from battle_engine.models.creature import Creature, Rarity
from battle_engine.models.effect import EffectSource, StandardEffect

logger = logging.getLogger(__name__)


def _cascade_effect(name: str, visual_key: str, duration: int, changes: dict[str, int], receiver: Creature) -> StandardEffect:
    # Contributes immediately; the turn loop will not process it again this turn.
    return StandardEffect(
        name=name,
        duration=duration,
        start_turn=receiver.current_turn,
        source=EffectSource.CASCADE,
        visual_key=visual_key,
        stat_changes=changes,
        stat_modifications=changes,
    )


def ally_blessing(fallen: Creature, receiver: Creature) -> StandardEffect | None:
    """Effect a fallen creature leaves on each surviving ally, if any."""
    if fallen.rarity == Rarity.LEGENDARY:
        return _cascade_effect(
            f"{fallen.species}'s Final Gift",
            "legendary_blessing",
            5,
            {"physical_attack": 2, "magical_attack": 2},
            receiver,
        )
    if "energy" in fallen.specialty_stats:
        return _cascade_effect("Energy Release", "energy_burst", 2, {"energy_cost": -1}, receiver)
    if fallen.rarity == Rarity.EPIC:
        return _cascade_effect(
            "Epic Essence",
            "epic_blessing",
            3,
            {"physical_attack": 1, "magical_attack": 1},
            receiver,
        )
    return None


def guilty_conscience(fallen: Creature, receiver: Creature) -> StandardEffect | None:
    if fallen.rarity not in (Rarity.LEGENDARY, Rarity.EPIC):
        return None
    return _cascade_effect(
        "Guilty Conscience",
        "debuff",
        2,
        {"initiative": -2, "dodge_chance": -1},
        receiver,
    )


def _attach(creature: Creature, effect: StandardEffect) -> Creature:
    return creature.model_copy(update={"active_effects": (*creature.active_effects, effect)})


def resolve_deaths(
    own_field: tuple[Creature, ...],
    opposing_field: tuple[Creature, ...],
    current_turn: int = 0,
) -> tuple[tuple[Creature, ...], tuple[Creature, ...], list[str]]:
    """Remove defeated creatures from ``own_field`` and emit their cascades.

    Returns ``(survivors, opposing_field, log)``. Every survivor receives
    each fallen ally's blessing regardless of field order, and every
    opposing creature receives Guilty Conscience for each fallen Epic or
    Legendary. Creatures that received anything are re-derived.
    """
    survivors = [c for c in own_field if c.current_health > 0]
    fallen = [c for c in own_field if c.current_health <= 0]
    opposing = list(opposing_field)
    log: list[str] = []

    if not fallen:
        return tuple(survivors), tuple(opposing), log

    touched_allies: set[str] = set()
    touched_enemies: set[str] = set()

    for dead in fallen:
        logger.info(f"{dead.species} ({dead.rarity.value}) was removed from the field on turn {current_turn}")
        blessed = False
        for i, ally in enumerate(survivors):
            effect = ally_blessing(dead, ally)
            if effect is None:
                break
            survivors[i] = _attach(ally, effect)
            touched_allies.add(ally.id)
            blessed = True
        if blessed:
            log.append(f"{dead.species} was defeated! Its allies gain {survivors[0].active_effects[-1].name}.")
        else:
            log.append(f"{dead.species} was defeated!")

        shaken = False
        for i, enemy in enumerate(opposing):
            effect = guilty_conscience(dead, enemy)
            if effect is None:
                break
            opposing[i] = _attach(enemy, effect)
            touched_enemies.add(enemy.id)
            shaken = True
        if shaken:
            log.append(f"Defeating {dead.species} leaves the opposing side with a Guilty Conscience.")

    survivors = [refresh(c) if c.id in touched_allies else c for c in survivors]
    opposing = [refresh(c) if c.id in touched_enemies else c for c in opposing]
    return tuple(survivors), tuple(opposing), log
