"""Active effect instances, one variant per progression kind."""
from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Progression(str, Enum):
    STANDARD = "standard"
    CHARGE = "charge"
    ECHO = "echo"
    PERSISTENT_DEFENSE = "persistent_defense"


class EffectSource(str, Enum):
    TOOL = "tool"
    SPELL = "spell"
    DEFENSE = "defense"
    STATUS = "status"
    CASCADE = "cascade"


class PowerLevel(str, Enum):
    WEAK = "weak"
    NORMAL = "normal"
    STRONG = "strong"


class BurstMode(str, Enum):
    """What a Charge effect's final burst does to its holder."""
    DAMAGE = "damage"
    EMPOWER = "empower"


class ChargeParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_stats: tuple[str, ...] = ()
    base_value: int = 0
    per_turn_increase: int = 0
    damage_base: int = 0
    damage_increase: int = 0
    healing_base: int = 0
    healing_increase: int = 0
    max_turns: int = Field(default=3, ge=1)
    final_burst: int = 0
    burst_mode: BurstMode = BurstMode.DAMAGE


class EchoParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    stat_base: dict[str, int] = Field(default_factory=dict)
    damage_base: int = 0
    healing_base: int = 0
    decay_rate: float = Field(default=0.7, gt=0)


class _EffectBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    duration: int = 1
    start_turn: int = 0
    source: EffectSource = EffectSource.STATUS
    visual_key: str = "default"
    power_level: PowerLevel = PowerLevel.NORMAL

    # This turn's contribution only. Rewritten every turn, never accumulated.
    stat_modifications: dict[str, int] = Field(default_factory=dict)
    damage_this_turn: int = 0
    healing_this_turn: int = 0
    is_final_burst: bool = False
    turns_active: int = 0

    @property
    def turns_remaining(self) -> int:
        return max(0, self.duration - self.turns_active)


class StandardEffect(_EffectBase):
    progression: Literal[Progression.STANDARD] = Progression.STANDARD
    stat_changes: dict[str, int] = Field(default_factory=dict)
    damage_per_turn: int = 0
    healing_per_turn: int = 0
    self_stat_changes: dict[str, int] = Field(default_factory=dict)
    self_heal_per_turn: int = 0
    caster_id: Optional[str] = None
    is_caster: bool = False


class ChargeEffect(_EffectBase):
    progression: Literal[Progression.CHARGE] = Progression.CHARGE
    params: Optional[ChargeParams] = None


class EchoEffect(_EffectBase):
    progression: Literal[Progression.ECHO] = Progression.ECHO
    params: Optional[EchoParams] = None


class DefenseEffect(_EffectBase):
    progression: Literal[Progression.PERSISTENT_DEFENSE] = Progression.PERSISTENT_DEFENSE
    source: EffectSource = EffectSource.DEFENSE
    duration: int = 2
    stat_changes: dict[str, int] = Field(default_factory=dict)
    damage_reduction: float = 0.0


Effect = Annotated[
    Union[StandardEffect, ChargeEffect, EchoEffect, DefenseEffect],
    Field(discriminator="progression"),
]
