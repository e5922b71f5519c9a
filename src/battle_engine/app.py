"""Application bootstrap — wires config, content and the engine together."""
from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any

from battle_engine.models.action import Action, ActionType, AttackType
from battle_engine.models.field import FieldState

logger = logging.getLogger(__name__)


def _load_config() -> dict[str, Any]:
    """Load config.toml from project root."""
    import tomllib

    config_path = Path(__file__).parent.parent.parent / "config.toml"
    if config_path.exists():
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    return {}


class BattleApp:
    """Runs scripted skirmishes between the demo rosters."""

    def __init__(
        self,
        difficulty: str | None = None,
        seed: int | None = None,
        config: dict[str, Any] | None = None,
        content_dir: Path | None = None,
    ):
        self.config = _load_config() if config is None else config
        battle_cfg = self.config.get("battle", {})
        self.difficulty = difficulty or battle_cfg.get("difficulty", "medium")
        self.seed = seed if seed is not None else battle_cfg.get("seed")
        self.starting_energy = battle_cfg.get("starting_energy", 10)
        self.content_dir = content_dir
        self.rng = random.Random(self.seed)

        self._dispatcher = None
        self._display = None

    @property
    def dispatcher(self):
        if self._dispatcher is None:
            from battle_engine.engine.action_dispatcher import ActionDispatcher

            self._dispatcher = ActionDispatcher(difficulty=self.difficulty, rng=self.rng)
        return self._dispatcher

    @property
    def display(self):
        if self._display is None:
            from battle_engine.cli.battle_display import BattleDisplay

            show_effects = self.config.get("display", {}).get("show_effects", True)
            self._display = BattleDisplay(show_effects=show_effects)
        return self._display

    def initial_state(self) -> FieldState:
        from battle_engine.content.loader import load_roster

        return FieldState(
            turn=1,
            player_field=load_roster("player", self.content_dir),
            enemy_field=load_roster("enemy", self.content_dir),
            player_energy=self.starting_energy,
            enemy_energy=self.starting_energy,
        )

    def run_skirmish(self, max_turns: int = 10, state: FieldState | None = None) -> tuple[FieldState, list[str]]:
        """Alternate auto attacks between the lead creatures until one side falls.

        Each turn the player's lead creature attacks the enemy's lead, then
        the enemy answers, then the turn advances.
        """
        from battle_engine.engine.turn_loop import advance_turn

        state = state or self.initial_state()
        log: list[str] = []
        combo = {"player": 0, "enemy": 0}

        for _ in range(max_turns):
            if not state.player_field or not state.enemy_field:
                break
            for side, own, other in (("player", "player_field", "enemy_field"), ("enemy", "enemy_field", "player_field")):
                attackers = getattr(state, own)
                defenders = getattr(state, other)
                if not attackers or not defenders or not attackers[0].is_alive or not defenders[0].is_alive:
                    continue
                action = Action(
                    action_type=ActionType.ATTACK.value,
                    actor_id=attackers[0].id,
                    target_id=defenders[0].id,
                    parameters={"attack_type": AttackType.AUTO.value, "combo_level": combo[side]},
                )
                result = self.dispatcher.dispatch(action, state)
                combo[side] = combo[side] + 1 if result.success else 0
                state = result.state or state
                log.append(result.outcome_description)

            turn_result = advance_turn(state, self.difficulty)
            state = turn_result.state
            log.extend(turn_result.log)

        if not state.enemy_field:
            log.append("The player side wins the skirmish!")
        elif not state.player_field:
            log.append("The enemy side wins the skirmish!")
        logger.info(f"Skirmish finished at turn {state.turn}")
        return state, log

    def simulate(self, max_turns: int = 10) -> FieldState:
        state = self.initial_state()
        self.display.show_fields(state)
        state, log = self.run_skirmish(max_turns, state)
        self.display.show_log(log)
        self.display.show_fields(state)
        return state

    def catalog(self) -> None:
        from battle_engine.content.loader import load_all_spells, load_all_tools

        self.display.show_catalog(
            list(load_all_tools(self.content_dir).values()),
            list(load_all_spells(self.content_dir).values()),
            self.difficulty,
        )
