from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from battle_engine.models.effect import Effect


class Rarity(str, Enum):
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class Stat(str, Enum):
    """Keys of the derived battle stats, as used in effect deltas."""
    PHYSICAL_ATTACK = "physical_attack"
    MAGICAL_ATTACK = "magical_attack"
    PHYSICAL_DEFENSE = "physical_defense"
    MAGICAL_DEFENSE = "magical_defense"
    MAX_HEALTH = "max_health"
    INITIATIVE = "initiative"
    CRITICAL_CHANCE = "critical_chance"
    DODGE_CHANCE = "dodge_chance"
    ENERGY_COST = "energy_cost"


ATTACK_STATS = (Stat.PHYSICAL_ATTACK.value, Stat.MAGICAL_ATTACK.value)
DEFENSE_STATS = (Stat.PHYSICAL_DEFENSE.value, Stat.MAGICAL_DEFENSE.value)
CHANCE_STATS = (Stat.CRITICAL_CHANCE.value, Stat.DODGE_CHANCE.value)


class BaseStats(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    energy: int = 5
    strength: int = 5
    magic: int = 5
    stamina: int = 5
    speed: int = 5


class BattleStats(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    physical_attack: int = 1
    magical_attack: int = 1
    physical_defense: int = 1
    magical_defense: int = 1
    max_health: int = 10
    initiative: int = 0
    critical_chance: int = 0
    dodge_chance: int = 0
    energy_cost: int = 1


class Creature(BaseModel):
    """A creature deployed on a field.

    Frozen: every transition returns a new instance via ``model_copy``.
    ``battle_stats`` is derived and only ever replaced wholesale by the stat
    recalculator.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    species: str
    rarity: Rarity = Rarity.COMMON
    form: int = Field(default=0, ge=0, le=3)
    element: str = "neutral"
    specialty_stats: tuple[str, ...] = ()
    base_stats: BaseStats = Field(default_factory=BaseStats)
    battle_stats: Optional[BattleStats] = None
    current_health: int = 0
    active_effects: tuple[Effect, ...] = ()
    permanent_modifications: dict[str, int] = Field(default_factory=dict)
    combination_level: int = 0
    is_defending: bool = False
    next_attack_bonus: int = 0
    current_turn: int = 0

    @property
    def is_alive(self) -> bool:
        return self.current_health > 0

    @property
    def health_fraction(self) -> float:
        if not self.battle_stats or self.battle_stats.max_health <= 0:
            return 0.0
        return self.current_health / self.battle_stats.max_health
