from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from battle_engine.models.creature import Creature


class FieldState(BaseModel):
    """Both fields plus each side's energy pool, as handed in by the caller.

    The engine never keeps one of these around between calls.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    turn: int = 0
    player_field: tuple[Creature, ...] = ()
    enemy_field: tuple[Creature, ...] = ()
    player_energy: int = 0
    enemy_energy: int = 0
    player_momentum: int = 0
    enemy_momentum: int = 0

    def find(self, creature_id: str) -> Creature | None:
        for creature in (*self.player_field, *self.enemy_field):
            if creature.id == creature_id:
                return creature
        return None

    def side_of(self, creature_id: str) -> str | None:
        if any(c.id == creature_id for c in self.player_field):
            return "player"
        if any(c.id == creature_id for c in self.enemy_field):
            return "enemy"
        return None

    def replace(self, *creatures: Creature) -> FieldState:
        """Return a copy with the given creatures swapped in by id."""
        by_id = {c.id: c for c in creatures}
        return self.model_copy(update={
            "player_field": tuple(by_id.get(c.id, c) for c in self.player_field),
            "enemy_field": tuple(by_id.get(c.id, c) for c in self.enemy_field),
        })
