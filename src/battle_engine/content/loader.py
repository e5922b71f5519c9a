from __future__ import annotations
import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from battle_engine.mechanics.stat_recalculator import deploy
from battle_engine.models.creature import Creature
from battle_engine.models.item import SpellTemplate, ToolTemplate

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent

def load_toml(filepath: Path) -> dict[str, Any]:
    with open(filepath, "rb") as f:
        return tomllib.load(f)


def _load_entries(filename: str, key: str, content_dir: Path | None = None) -> list[dict[str, Any]]:
    path = (content_dir or CONTENT_DIR) / filename
    if not path.exists():
        logger.warning(f"Content file not found: {path}")
        return []
    return list(load_toml(path).get(key, []))


def load_all_creatures(content_dir: Path | None = None) -> dict[str, dict]:
    """Creature templates keyed by id, as raw dicts."""
    return {c["id"]: c for c in _load_entries("creatures.toml", "creatures", content_dir)}


def load_all_tools(content_dir: Path | None = None) -> dict[str, ToolTemplate]:
    tools = {}
    for entry in _load_entries("tools.toml", "tools", content_dir):
        try:
            tools[entry["id"]] = ToolTemplate.model_validate(entry)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Skipping malformed tool template {entry.get('id', '?')}: {e}")
    return tools


def load_all_spells(content_dir: Path | None = None) -> dict[str, SpellTemplate]:
    spells = {}
    for entry in _load_entries("spells.toml", "spells", content_dir):
        try:
            spells[entry["id"]] = SpellTemplate.model_validate(entry)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Skipping malformed spell template {entry.get('id', '?')}: {e}")
    return spells


def build_creature(template: dict[str, Any]) -> Creature:
    """Deploy a creature from a template: fresh id, derived stats, full health.

    The template's ``id`` is kept as the species key, not the instance id.
    """
    data = {k: v for k, v in template.items() if k not in ("id", "side")}
    data["specialty_stats"] = tuple(data.get("specialty_stats", ()))
    return deploy(Creature.model_validate(data))


def load_roster(side: str, content_dir: Path | None = None) -> tuple[Creature, ...]:
    """Deploy every creature template tagged for ``side`` ("player" or "enemy")."""
    roster = []
    for template in load_all_creatures(content_dir).values():
        if template.get("side", "player") != side:
            continue
        try:
            roster.append(build_creature(template))
        except ValidationError as e:
            logger.warning(f"Skipping malformed creature template {template.get('id')}: {e}")
    return tuple(roster)
