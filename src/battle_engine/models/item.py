from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    """The base stat a tool or spell draws on."""
    ENERGY = "energy"
    STRENGTH = "strength"
    MAGIC = "magic"
    STAMINA = "stamina"
    SPEED = "speed"


class ItemEffect(str, Enum):
    SURGE = "Surge"
    SHIELD = "Shield"
    ECHO = "Echo"
    DRAIN = "Drain"
    CHARGE = "Charge"


class ToolTemplate(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Tool"
    tool_type: Optional[ItemType] = None
    tool_effect: Optional[ItemEffect] = None
    rarity: str = "common"
    description: str = ""


class SpellTemplate(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Spell"
    spell_type: Optional[ItemType] = None
    spell_effect: Optional[ItemEffect] = None
    rarity: str = "common"
    energy_cost: int = 4
    description: str = ""
