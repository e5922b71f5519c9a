"""Action dispatcher — routes battle actions to the resolvers."""
from __future__ import annotations

import logging
import random
from typing import Any, Callable

from battle_engine.mechanics.combat_resolver import defend, resolve_attack
from battle_engine.mechanics.effect_application import apply_spell, apply_tool
from battle_engine.models.action import Action, ActionResult, ActionType, AttackType
from battle_engine.models.creature import Difficulty
from battle_engine.models.field import FieldState
from battle_engine.models.item import SpellTemplate, ToolTemplate

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Resolves one caller-chosen action against a field snapshot.

    The dispatcher never picks actions and keeps no battle state; the
    snapshot it returns is the only output.
    """

    def __init__(self, difficulty: str = Difficulty.MEDIUM.value, rng: random.Random | None = None):
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self._handlers: dict[str, Callable[[Action, FieldState], ActionResult]] = {
            ActionType.ATTACK.value: self._attack,
            ActionType.DEFEND.value: self._defend,
            ActionType.USE_TOOL.value: self._use_tool,
            ActionType.CAST_SPELL.value: self._cast_spell,
        }

    def dispatch(self, action: Action, state: FieldState) -> ActionResult:
        handler = self._handlers.get(getattr(action.action_type, "value", action.action_type))
        if handler is None:
            logger.warning(f"No handler for action type: {action.action_type}")
            return ActionResult(
                action_id=action.id,
                success=False,
                outcome_description=f"Unknown action '{action.action_type}'.",
                state=state,
            )
        if state.find(action.actor_id) is None:
            return ActionResult(
                action_id=action.id,
                success=False,
                outcome_description="The acting creature is not on the field.",
                state=state,
            )
        try:
            return handler(action, state)
        except Exception as e:
            logger.exception(f"Error resolving {action.action_type} for {action.actor_id}")
            return ActionResult(
                action_id=action.id,
                success=False,
                outcome_description=f"Something went wrong: {e}",
                state=state,
            )

    # -- Handlers --

    def _attack(self, action: Action, state: FieldState) -> ActionResult:
        attacker = state.find(action.actor_id)
        defender = state.find(action.target_id) if action.target_id else None
        if defender is None:
            return ActionResult(
                action_id=action.id,
                success=False,
                outcome_description="No valid target to attack.",
                state=state,
            )

        result = resolve_attack(
            attacker,
            defender,
            attack_type=action.parameters.get("attack_type", AttackType.AUTO.value),
            combo_level=action.parameters.get("combo_level", 0),
            rng=self.rng,
            current_turn=state.turn,
        )
        if result.attacker is None or result.defender is None or not attacker.battle_stats:
            return ActionResult(action_id=action.id, success=False, outcome_description=result.log, state=state)

        events: list[dict[str, Any]] = [{
            "event_type": "ATTACK",
            "actor_id": attacker.id,
            "target_id": defender.id,
            "damage": result.damage,
            "is_critical": result.is_critical,
            "is_dodged": result.is_dodged,
        }]
        return ActionResult(
            action_id=action.id,
            success=not result.is_dodged,
            outcome_description=result.log,
            state=state.replace(result.attacker, result.defender),
            magnitude=result.damage,
            events=events,
        )

    def _defend(self, action: Action, state: FieldState) -> ActionResult:
        creature = state.find(action.actor_id)
        result = defend(creature, self.difficulty, state.turn)
        if result.creature is None or not creature.battle_stats:
            return ActionResult(action_id=action.id, success=False, outcome_description=result.log, state=state)
        return ActionResult(
            action_id=action.id,
            success=True,
            outcome_description=result.log,
            state=state.replace(result.creature),
            events=[{"event_type": "DEFEND", "actor_id": creature.id}],
        )

    def _use_tool(self, action: Action, state: FieldState) -> ActionResult:
        tool = _as_template(action.parameters.get("tool"), ToolTemplate)
        target = state.find(action.target_id or action.actor_id)
        result = apply_tool(target, tool, self.difficulty, state.turn, rng=self.rng)
        if result.effect is None:
            return ActionResult(action_id=action.id, success=False, outcome_description=result.log, state=state)
        return ActionResult(
            action_id=action.id,
            success=True,
            outcome_description=result.log,
            state=state.replace(result.creature),
            magnitude=result.healing,
            events=[{
                "event_type": "USE_TOOL",
                "actor_id": action.actor_id,
                "target_id": result.creature.id,
                "visual_key": result.effect.visual_key,
            }],
        )

    def _cast_spell(self, action: Action, state: FieldState) -> ActionResult:
        spell = _as_template(action.parameters.get("spell"), SpellTemplate)
        caster = state.find(action.actor_id)
        target = state.find(action.target_id) if action.target_id else caster
        side = state.side_of(action.actor_id)
        pool_key = f"{side}_energy"
        cost = spell.energy_cost if spell else 0
        if getattr(state, pool_key) < cost:
            return ActionResult(
                action_id=action.id,
                success=False,
                outcome_description=f"Not enough energy to cast {spell.name} ({cost} needed).",
                state=state,
            )

        result = apply_spell(caster, target, spell, self.difficulty, state.turn, rng=self.rng)
        if result.effect is None:
            return ActionResult(action_id=action.id, success=False, outcome_description=result.log, state=state)

        momentum_key = f"{side}_momentum"
        new_state = state.replace(result.caster, result.target).model_copy(update={
            pool_key: getattr(state, pool_key) - cost,
            momentum_key: getattr(state, momentum_key) + cost,
        })
        return ActionResult(
            action_id=action.id,
            success=True,
            outcome_description=result.log,
            state=new_state,
            magnitude=result.damage or result.healing,
            events=[{
                "event_type": "CAST_SPELL",
                "actor_id": caster.id,
                "target_id": target.id,
                "damage": result.damage,
                "was_critical": result.was_critical,
                "visual_key": result.effect.visual_key,
            }],
        )


def _as_template(value: Any, model: type[ToolTemplate] | type[SpellTemplate]) -> Any:
    """Accept a template model or a plain dict from the caller."""
    if value is None or isinstance(value, model):
        return value
    if isinstance(value, dict):
        return model.model_validate(value)
    return model.model_validate(value, from_attributes=True)
