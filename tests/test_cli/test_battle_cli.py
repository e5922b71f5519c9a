"""Tests for the typer CLI and the skirmish runner."""
from __future__ import annotations

from typer.testing import CliRunner

from battle_engine.app import BattleApp
from battle_engine.cli.main import app

runner = CliRunner()


class TestCommands:
    def test_catalog(self):
        result = runner.invoke(app, ["catalog", "--difficulty", "hard"])
        assert result.exit_code == 0
        assert "Whetstone" in result.output

    def test_simulate(self):
        result = runner.invoke(app, ["simulate", "--turns", "3", "--seed", "7"])
        assert result.exit_code == 0
        assert "Battle log" in result.output


class TestSkirmish:
    def test_seeded_runs_repeat(self):
        _, first = BattleApp(difficulty="medium", seed=3, config={}).run_skirmish(max_turns=4)
        _, second = BattleApp(difficulty="medium", seed=3, config={}).run_skirmish(max_turns=4)
        assert first == second

    def test_turns_advance_and_health_in_bounds(self):
        battle_app = BattleApp(difficulty="hard", seed=11, config={})
        state, log = battle_app.run_skirmish(max_turns=5)
        assert state.turn > 1
        assert any(line.startswith("--- Turn") for line in log)
        for creature in (*state.player_field, *state.enemy_field):
            assert 0 < creature.current_health <= creature.battle_stats.max_health

    def test_config_supplies_defaults(self):
        battle_app = BattleApp(config={"battle": {"difficulty": "expert", "starting_energy": 7}})
        assert battle_app.difficulty == "expert"
        assert battle_app.initial_state().player_energy == 7
