"""Per-turn effect progression — pure functions, no I/O.

``advance`` takes an effect instance and the current turn and returns a new
instance whose ``stat_modifications``, ``damage_this_turn`` and
``healing_this_turn`` hold this turn's contribution. Nothing is carried over
from the previous turn's output; every value is derived from the effect's
own parameters and ``turns_active``.
"""
from __future__ import annotations

import logging
from typing import Any

from battle_engine.errors import InvalidEffectParams
from battle_engine.models.effect import (
    BurstMode,
    ChargeEffect,
    DefenseEffect,
    EchoEffect,
    Effect,
    StandardEffect,
)
from battle_engine.utils import round_half_up

logger = logging.getLogger(__name__)


def turns_active(effect: Effect, current_turn: int) -> int:
    """1-indexed count of turns the effect has been running."""
    return current_turn - effect.start_turn + 1


def is_expired(effect: Effect, current_turn: int) -> bool:
    return turns_active(effect, current_turn) > effect.duration


def _advance_charge(effect: ChargeEffect, active: int) -> dict[str, Any]:
    params = effect.params
    if params is None:
        raise InvalidEffectParams("Charge effect has no charge parameters", details={"effect": effect.name})

    if active >= params.max_turns:
        return {
            "stat_modifications": {},
            "damage_this_turn": round_half_up(params.final_burst),
            "healing_this_turn": 0,
            "is_final_burst": True,
        }

    step = active - 1
    stat_value = round_half_up(params.base_value + params.per_turn_increase * step)
    return {
        "stat_modifications": {stat: stat_value for stat in params.target_stats},
        "damage_this_turn": round_half_up(params.damage_base + params.damage_increase * step),
        "healing_this_turn": round_half_up(params.healing_base + params.healing_increase * step),
        "is_final_burst": False,
    }


def _advance_echo(effect: EchoEffect, active: int) -> dict[str, Any]:
    params = effect.params
    if params is None:
        raise InvalidEffectParams("Echo effect has no echo parameters", details={"effect": effect.name})

    decay = params.decay_rate ** (active - 1)
    return {
        "stat_modifications": {stat: round_half_up(value * decay) for stat, value in params.stat_base.items()},
        "damage_this_turn": round_half_up(params.damage_base * decay),
        "healing_this_turn": round_half_up(params.healing_base * decay),
        "is_final_burst": False,
    }


def _advance_standard(effect: StandardEffect) -> dict[str, Any]:
    # The caster's mirrored copy carries only the self-side of a spell.
    if effect.is_caster:
        return {
            "stat_modifications": dict(effect.self_stat_changes),
            "damage_this_turn": 0,
            "healing_this_turn": effect.self_heal_per_turn,
            "is_final_burst": False,
        }
    return {
        "stat_modifications": dict(effect.stat_changes),
        "damage_this_turn": effect.damage_per_turn,
        "healing_this_turn": effect.healing_per_turn,
        "is_final_burst": False,
    }


def _advance_defense(effect: DefenseEffect) -> dict[str, Any]:
    return {
        "stat_modifications": dict(effect.stat_changes),
        "damage_this_turn": 0,
        "healing_this_turn": 0,
        "is_final_burst": False,
    }


def _no_op() -> dict[str, Any]:
    return {"stat_modifications": {}, "damage_this_turn": 0, "healing_this_turn": 0, "is_final_burst": False}


def advance(effect: Effect, current_turn: int) -> Effect:
    """Process one effect for ``current_turn`` and return the new instance.

    Malformed effects contribute nothing this turn instead of failing the
    whole turn.
    """
    active = turns_active(effect, current_turn)
    try:
        if isinstance(effect, ChargeEffect):
            outputs = _advance_charge(effect, active)
        elif isinstance(effect, EchoEffect):
            outputs = _advance_echo(effect, active)
        elif isinstance(effect, DefenseEffect):
            outputs = _advance_defense(effect)
        elif isinstance(effect, StandardEffect):
            outputs = _advance_standard(effect)
        else:
            raise InvalidEffectParams(f"Unknown effect variant: {type(effect).__name__}")
    except InvalidEffectParams as e:
        logger.warning(f"Skipping effect this turn: {e}")
        outputs = _no_op()

    return effect.model_copy(update={**outputs, "turns_active": active})


def is_retired(effect: Effect, current_turn: int) -> bool:
    """True once an effect should leave its holder after this turn's pass.

    Charge effects retire right after their final burst; everything else
    retires through ordinary duration expiry.
    """
    if isinstance(effect, ChargeEffect) and effect.is_final_burst:
        return True
    return is_expired(effect, current_turn)


def burst_empowers(effect: Effect) -> bool:
    """True when a Charge burst should become the holder's next-attack bonus."""
    return (
        isinstance(effect, ChargeEffect)
        and effect.is_final_burst
        and effect.params is not None
        and effect.params.burst_mode == BurstMode.EMPOWER
    )


def charge_progress(effect: Effect, current_turn: int) -> dict[str, Any]:
    """Progress of a Charge effect toward its burst, for display."""
    if not isinstance(effect, ChargeEffect) or effect.params is None:
        return {"progress": 0.0, "turns_remaining": 0, "is_ready": False}
    elapsed = current_turn - effect.start_turn
    max_turns = effect.params.max_turns
    progress = min(elapsed / max_turns, 1.0) * 100
    return {
        "progress": progress,
        "turns_remaining": max(0, max_turns - elapsed),
        "is_ready": progress >= 100,
    }
