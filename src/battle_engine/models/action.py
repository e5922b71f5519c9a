from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, computed_field

from battle_engine.models.creature import Creature
from battle_engine.models.field import FieldState


class ActionType(str, Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    USE_TOOL = "use_tool"
    CAST_SPELL = "cast_spell"


class AttackType(str, Enum):
    PHYSICAL = "physical"
    MAGICAL = "magical"
    AUTO = "auto"


@dataclass
class Action:
    action_type: str
    actor_id: str
    target_id: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class ActionResult:
    action_id: str = ""
    success: bool = False
    outcome_description: str = ""
    state: FieldState | None = None
    magnitude: int = 0
    events: list[dict[str, Any]] = field(default_factory=list)


class AttackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    attacker: Optional[Creature] = None
    defender: Optional[Creature] = None
    attack_type: str = AttackType.PHYSICAL.value
    damage: int = 0
    is_critical: bool = False
    is_dodged: bool = False
    effectiveness: str = "normal"
    damage_type: str = "normal"
    combo_multiplier: float = 1.0
    log: str = ""

    # Downstream consumers read the damage under several names.
    @computed_field
    @property
    def final_damage(self) -> int:
        return self.damage

    @computed_field
    @property
    def total_damage(self) -> int:
        return self.damage

    @computed_field
    @property
    def damage_dealt(self) -> int:
        return self.damage

    @computed_field
    @property
    def actual_damage(self) -> int:
        return self.damage

    @computed_field
    @property
    def is_blocked(self) -> bool:
        return self.is_dodged


class ScaledEffect(BaseModel):
    """A catalog template after power scaling and caps."""

    model_config = ConfigDict(frozen=True)

    visual_key: str = "default"
    power_multiplier: float = 1.0
    stat_changes: dict[str, int] = {}
    self_stat_changes: dict[str, int] = {}
    health_change: int = 0
    health_over_time: int = 0
    damage: int = 0
    damage_over_time: int = 0
    healing: int = 0
    healing_over_time: int = 0
    self_heal: int = 0
    self_heal_over_time: int = 0
    duration: int = 1
    armor_piercing: bool = False


class ToolResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    creature: Optional[Creature] = None
    effect: Optional[ScaledEffect] = None
    healing: int = 0
    log: str = ""


class SpellResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    caster: Optional[Creature] = None
    target: Optional[Creature] = None
    effect: Optional[ScaledEffect] = None
    damage: int = 0
    healing: int = 0
    was_critical: bool = False
    log: str = ""


class DefendResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    creature: Optional[Creature] = None
    log: str = ""


class TurnResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: FieldState
    log: tuple[str, ...] = ()
