"""Tool and spell application.

Turns a catalog template into a live effect instance on a creature. The
template is scaled by the effect power (difficulty, plus caster stat for
spells) with per-stat and per-amount caps. Over-time effects are attached
with empty ``stat_modifications`` and start contributing the next time the
turn loop processes them; only instant spell damage, instant self-heals and
a tool's first-turn heal land immediately.
"""
from __future__ import annotations

import logging
import math
import random
from typing import Any

from battle_engine.errors import InvalidItemApplication
from battle_engine.mechanics import effect_catalog
from battle_engine.mechanics.stat_recalculator import refresh
from battle_engine.models.action import ScaledEffect, SpellResult, ToolResult
from battle_engine.models.creature import Creature, Difficulty
from battle_engine.models.effect import (
    BurstMode,
    ChargeEffect,
    ChargeParams,
    EchoEffect,
    EchoParams,
    Effect,
    EffectSource,
    StandardEffect,
)
from battle_engine.models.item import SpellTemplate, ToolTemplate
from battle_engine.utils import enum_value, round_half_up, safe_get

logger = logging.getLogger(__name__)

TOOL_STAT_CAP = 10
SPELL_STAT_CAP = 12
MAX_POWER_SCALE = 1.5
TOOL_HEAL_CAP = 50
SPELL_DAMAGE_CAP = 100
SPELL_HEAL_CAP = 80
SPELL_SELF_HEAL_CAP = 40
ARMOR_PIERCE_BONUS = 0.2
ARMOR_PIERCE_POWER = 1.3
SPELL_CRITICAL_MULTIPLIER = 1.5


def _capped_stats(stat_changes: dict[str, Any] | None, cap: int, power: float) -> dict[str, int]:
    scale = min(power, MAX_POWER_SCALE)
    capped: dict[str, int] = {}
    for stat, value in (stat_changes or {}).items():
        bounded = math.copysign(min(abs(value), cap), value)
        capped[stat] = round_half_up(bounded * scale)
    return capped


def _scaled(amount: float | None, power: float, cap: float | None = None) -> int:
    if not amount:
        return 0
    value = amount * power
    if cap is not None:
        value = min(value, cap)
    return round_half_up(value)


def _heal(creature: Creature, amount: int) -> tuple[Creature, int]:
    if amount <= 0:
        return creature, 0
    health = min(creature.current_health + amount, creature.battle_stats.max_health)
    healed = health - creature.current_health
    return creature.model_copy(update={"current_health": health}), healed


def spell_critical_chance(caster_magic: int) -> int:
    return min(3 + math.floor(caster_magic * 0.3), effect_catalog.SPELL_CRITICAL_CAP)


def _validate_tool(creature: Creature | None, tool: ToolTemplate | None) -> None:
    if creature is None or tool is None:
        raise InvalidItemApplication(
            "Tool application needs a creature and a tool",
            details={"creature": getattr(creature, "id", None), "tool": getattr(tool, "name", None)},
        )
    if not creature.battle_stats:
        raise InvalidItemApplication("Creature has no battle stats", details={"creature": creature.id})


def _validate_spell(caster: Creature | None, target: Creature | None, spell: SpellTemplate | None) -> None:
    if caster is None or target is None or spell is None:
        raise InvalidItemApplication(
            "Spell application needs a caster, a target and a spell",
            details={
                "caster": getattr(caster, "id", None),
                "target": getattr(target, "id", None),
                "spell": getattr(spell, "name", None),
            },
        )
    if caster.base_stats is None or not target.battle_stats or not caster.battle_stats:
        raise InvalidItemApplication(
            "Spell participants are missing stats",
            details={"caster": caster.id, "target": target.id},
        )


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

def scale_tool_effect(template: dict[str, Any], power: float, item_effect: str | None) -> ScaledEffect:
    return ScaledEffect(
        visual_key=effect_catalog.visual_key(item_effect),
        power_multiplier=power,
        stat_changes=_capped_stats(template.get("stat_changes"), TOOL_STAT_CAP, power),
        health_change=_scaled(template.get("health_change"), power, TOOL_HEAL_CAP),
        health_over_time=_scaled(template.get("health_over_time"), power),
        duration=template.get("duration", 1),
    )


def build_tool_effect(
    tool: ToolTemplate,
    template: dict[str, Any],
    scaled: ScaledEffect,
    current_turn: int,
) -> Effect:
    power = scaled.power_multiplier
    shared = {
        "name": f"{tool.name or 'Tool'} Effect",
        "duration": scaled.duration,
        "start_turn": current_turn,
        "source": EffectSource.TOOL,
        "visual_key": scaled.visual_key,
        "power_level": effect_catalog.power_level(power),
    }

    charge = template.get("charge")
    if charge:
        params = ChargeParams(
            target_stats=tuple(charge.get("target_stats") or ("physical_defense",)),
            base_value=round_half_up(charge.get("base_value", 5) * power),
            per_turn_increase=round_half_up(charge.get("per_turn_increase", 5) * power),
            healing_base=round_half_up(charge.get("healing_base", 3) * power),
            healing_increase=round_half_up(charge.get("healing_increase", 3) * power),
            max_turns=charge.get("max_turns", 3),
            final_burst=round_half_up(charge.get("final_burst", 20) * power),
            burst_mode=BurstMode.EMPOWER,
        )
        return ChargeEffect(params=params, **shared)

    echo = template.get("echo")
    if echo:
        multiplier = echo.get("stat_multiplier", 1.0)
        params = EchoParams(
            stat_base={stat: round_half_up(value * multiplier) for stat, value in scaled.stat_changes.items()},
            healing_base=round_half_up(echo.get("healing_base", 5) * power),
            decay_rate=echo.get("decay_rate", 0.7),
        )
        return EchoEffect(params=params, **shared)

    return StandardEffect(
        stat_changes=scaled.stat_changes,
        healing_per_turn=scaled.health_over_time,
        **shared,
    )


def apply_tool(
    creature: Creature,
    tool: ToolTemplate,
    difficulty: str = Difficulty.MEDIUM.value,
    current_turn: int = 0,
    rng: random.Random | None = None,
) -> ToolResult:
    """Use a tool on a creature.

    Returns the creature with the new effect attached (and any first-turn
    heal applied) plus the scaled effect that was used. Invalid input returns
    the creature untouched.
    """
    try:
        _validate_tool(creature, tool)
    except InvalidItemApplication as e:
        logger.warning(f"Tool application failed: {e}")
        return ToolResult(creature=creature, log=f"Tool could not be used: {e.message}")

    tool_type = enum_value(safe_get(tool, "tool_type"))
    tool_effect = enum_value(safe_get(tool, "tool_effect"))
    power = effect_catalog.effect_power(difficulty)
    template = effect_catalog.get_tool_effect(tool_type, tool_effect)
    scaled = scale_tool_effect(template, power, tool_effect)

    updated = creature.model_copy(update={"current_turn": current_turn})
    if scaled.duration > 0:
        effect = build_tool_effect(tool, template, scaled, current_turn)
        updated = updated.model_copy(update={"active_effects": (*updated.active_effects, effect)})
    updated = refresh(updated)

    updated, healed = _heal(updated, scaled.health_change)

    log = f"{tool.name} used on {creature.species}"
    if healed:
        log += f", restoring {healed} health"
    log += "."
    logger.debug(f"{log} power={power:.2f} duration={scaled.duration}")
    return ToolResult(creature=updated, effect=scaled, healing=healed, log=log)


# ---------------------------------------------------------------------------
# Spells
# ---------------------------------------------------------------------------

def scale_spell_effect(template: dict[str, Any], power: float, item_effect: str | None) -> ScaledEffect:
    return ScaledEffect(
        visual_key=effect_catalog.visual_key(item_effect),
        power_multiplier=power,
        stat_changes=_capped_stats(template.get("stat_changes"), SPELL_STAT_CAP, power),
        # Capped like stat_changes but never power-scaled.
        self_stat_changes=_capped_stats(template.get("self_stat_changes"), SPELL_STAT_CAP, 1.0),
        damage=_scaled(template.get("damage"), power, SPELL_DAMAGE_CAP),
        damage_over_time=_scaled(template.get("damage_over_time"), power),
        healing=_scaled(template.get("healing"), power, SPELL_HEAL_CAP),
        healing_over_time=_scaled(template.get("healing_over_time"), power),
        self_heal=_scaled(template.get("self_heal"), power, SPELL_SELF_HEAL_CAP),
        self_heal_over_time=_scaled(template.get("self_heal_over_time"), power),
        duration=template.get("duration", 1),
        armor_piercing=bool(template.get("armor_piercing")),
    )


def build_spell_effect(
    spell: SpellTemplate,
    caster: Creature,
    template: dict[str, Any],
    scaled: ScaledEffect,
    current_turn: int,
) -> Effect:
    power = scaled.power_multiplier
    shared = {
        "name": f"{spell.name or 'Spell'} Effect",
        "duration": scaled.duration,
        "start_turn": current_turn,
        "source": EffectSource.SPELL,
        "visual_key": scaled.visual_key,
        "power_level": effect_catalog.power_level(power),
    }

    charge = template.get("charge")
    if charge:
        params = ChargeParams(
            target_stats=tuple(charge.get("target_stats") or ()),
            damage_base=round_half_up(charge.get("damage_base", 10) * power),
            damage_increase=round_half_up(charge.get("damage_increase", 10) * power),
            max_turns=charge.get("max_turns", 2),
            final_burst=round_half_up(charge.get("final_burst", 35) * power),
            burst_mode=BurstMode.DAMAGE,
        )
        return ChargeEffect(params=params, **shared)

    echo = template.get("echo")
    if echo:
        params = EchoParams(
            stat_base={stat: round_half_up(v * power) for stat, v in (echo.get("stat_base") or {}).items()},
            damage_base=round_half_up(echo.get("damage_base", 0) * power),
            healing_base=round_half_up(echo.get("healing_base", 0) * power),
            decay_rate=echo.get("decay_rate", 0.7),
        )
        return EchoEffect(params=params, **shared)

    return StandardEffect(
        stat_changes=scaled.stat_changes,
        damage_per_turn=scaled.damage_over_time,
        healing_per_turn=scaled.healing_over_time,
        self_stat_changes=scaled.self_stat_changes,
        self_heal_per_turn=scaled.self_heal_over_time,
        caster_id=caster.id,
        **shared,
    )


def _mirror_for_caster(effect: Effect, spell: SpellTemplate) -> StandardEffect | None:
    if not isinstance(effect, StandardEffect):
        return None
    if not effect.self_stat_changes and not effect.self_heal_per_turn:
        return None
    return StandardEffect(
        name=f"{spell.name or 'Spell'} (Self)",
        duration=effect.duration,
        start_turn=effect.start_turn,
        source=effect.source,
        visual_key=effect.visual_key,
        power_level=effect.power_level,
        self_stat_changes=effect.self_stat_changes,
        self_heal_per_turn=effect.self_heal_per_turn,
        caster_id=effect.caster_id,
        is_caster=True,
    )


def _instant_damage(
    scaled: ScaledEffect,
    caster_magic: int,
    rng: random.Random,
) -> tuple[int, bool]:
    damage = scaled.damage
    is_critical = rng.random() * 100 <= spell_critical_chance(caster_magic)
    if is_critical:
        damage = round_half_up(damage * SPELL_CRITICAL_MULTIPLIER)
    if scaled.armor_piercing or scaled.power_multiplier >= ARMOR_PIERCE_POWER:
        damage += round_half_up(damage * ARMOR_PIERCE_BONUS)
    return damage, is_critical


def apply_spell(
    caster: Creature,
    target: Creature,
    spell: SpellTemplate,
    difficulty: str = Difficulty.MEDIUM.value,
    current_turn: int = 0,
    rng: random.Random | None = None,
) -> SpellResult:
    """Cast a spell from ``caster`` onto ``target``.

    Instant spells (duration 0) deal or heal now; everything else attaches
    an effect to the target, plus a mirrored self-side effect on the caster
    when the spell has one. Casting on oneself is allowed.
    """
    rng = rng or random.Random()
    try:
        _validate_spell(caster, target, spell)
    except InvalidItemApplication as e:
        logger.warning(f"Spell application failed: {e}")
        return SpellResult(caster=caster, target=target, log=f"Spell could not be cast: {e.message}")

    spell_type = enum_value(safe_get(spell, "spell_type"))
    spell_effect = enum_value(safe_get(spell, "spell_effect"))
    caster_magic = caster.base_stats.magic
    caster_stat = getattr(caster.base_stats, spell_type, 5) if spell_type else 5
    power = effect_catalog.effect_power(difficulty, caster_stat)
    template = effect_catalog.get_spell_effect(spell_type, spell_effect, caster_magic)
    scaled = scale_spell_effect(template, power, spell_effect)

    self_cast = caster.id == target.id
    updated_target = target.model_copy(update={"current_turn": current_turn})
    updated_caster = caster.model_copy(update={"current_turn": current_turn})

    damage = 0
    was_critical = False
    if scaled.damage and scaled.duration == 0:
        damage, was_critical = _instant_damage(scaled, caster_magic, rng)
        health = max(0, updated_target.current_health - damage)
        damage = updated_target.current_health - health
        updated_target = updated_target.model_copy(update={"current_health": health})

    healed = 0
    if self_cast and scaled.duration == 0:
        updated_target, healed = _heal(updated_target, scaled.healing + scaled.self_heal)

    if scaled.duration > 0:
        effect = build_spell_effect(spell, caster, template, scaled, current_turn)
        updated_target = updated_target.model_copy(
            update={"active_effects": (*updated_target.active_effects, effect)}
        )
        mirror = _mirror_for_caster(effect, spell)
        if mirror is not None:
            if self_cast:
                updated_target = updated_target.model_copy(
                    update={"active_effects": (*updated_target.active_effects, mirror)}
                )
            else:
                updated_caster = updated_caster.model_copy(
                    update={"active_effects": (*updated_caster.active_effects, mirror)}
                )

    updated_target = refresh(updated_target)
    updated_caster = updated_target if self_cast else refresh(updated_caster)

    log = f"{caster.species} cast {spell.name} on {target.species}"
    if was_critical:
        log += " (Critical Hit!)"
    if damage:
        log += f" dealing {damage} damage"
    if healed:
        log += f" restoring {healed} health"
    log += "."
    logger.debug(f"{log} power={power:.2f} duration={scaled.duration}")
    return SpellResult(
        caster=updated_caster,
        target=updated_target,
        effect=scaled,
        damage=damage,
        healing=healed,
        was_critical=was_critical,
        log=log,
    )
