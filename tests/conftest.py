"""Shared fixtures for the battle engine test suite."""
from __future__ import annotations

import random
from typing import Any, Callable

import pytest

from battle_engine.mechanics.stat_recalculator import deploy
from battle_engine.models.creature import BaseStats, BattleStats, Creature


class FixedRng(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class SequenceRng(random.Random):
    """Random source that replays ``values`` and then repeats the last one."""

    def __init__(self, values: list[float]) -> None:
        super().__init__(0)
        self.values = list(values)

    def random(self) -> float:
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


@pytest.fixture
def no_luck() -> FixedRng:
    """Never dodges, never crits, never triggers an on-hit status."""
    return FixedRng(0.99)


@pytest.fixture
def fixed_rng() -> type[FixedRng]:
    return FixedRng


@pytest.fixture
def sequence_rng() -> type[SequenceRng]:
    return SequenceRng


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def make_creature() -> Callable[..., Creature]:
    """Factory for deployed creatures (derived stats, full health)."""

    def _make(species: str = "Testling", base: dict[str, int] | None = None, **kwargs: Any) -> Creature:
        creature = Creature(species=species, base_stats=BaseStats(**(base or {})), **kwargs)
        return deploy(creature)

    return _make


@pytest.fixture
def make_fighter() -> Callable[..., Creature]:
    """Factory for creatures with hand-set battle stats, bypassing derivation."""

    def _make(species: str = "Fighter", health: int = 100, element: str = "neutral", **stats: int) -> Creature:
        values = {
            "physical_attack": 10,
            "magical_attack": 5,
            "physical_defense": 10,
            "magical_defense": 10,
            "max_health": 100,
            "initiative": 10,
            "critical_chance": 0,
            "dodge_chance": 0,
            "energy_cost": 3,
        }
        values.update(stats)
        return Creature(
            species=species,
            element=element,
            battle_stats=BattleStats(**values),
            current_health=health,
        )

    return _make


@pytest.fixture
def testling(make_creature) -> Creature:
    return make_creature()
