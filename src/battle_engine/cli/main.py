"""Typer CLI application."""
from __future__ import annotations

import logging
from typing import Optional

import typer

app = typer.Typer(
    name="battle-engine",
    help="Turn-based creature battle resolution engine",
    no_args_is_help=False,
)


def _configure_logging(config: dict, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.get("logging", {}).get("level", "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def simulate(
    turns: int = typer.Option(10, "--turns", "-t", help="Maximum number of turns"),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", "-d", help="easy, medium, hard or expert"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible run"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine debug logging"),
) -> None:
    """Run a scripted skirmish between the demo rosters."""
    from battle_engine.app import BattleApp

    battle_app = BattleApp(difficulty=difficulty, seed=seed)
    _configure_logging(battle_app.config, verbose)
    battle_app.simulate(max_turns=turns)


@app.command()
def catalog(
    difficulty: Optional[str] = typer.Option(None, "--difficulty", "-d", help="easy, medium, hard or expert"),
) -> None:
    """List the available tool and spell templates."""
    from battle_engine.app import BattleApp

    battle_app = BattleApp(difficulty=difficulty)
    _configure_logging(battle_app.config, False)
    battle_app.catalog()


if __name__ == "__main__":
    app()
