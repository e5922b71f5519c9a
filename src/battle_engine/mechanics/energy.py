"""Energy economy — pure functions, no I/O."""
from __future__ import annotations

from typing import Iterable

from battle_engine.mechanics.stat_recalculator import creature_power
from battle_engine.models.creature import Creature, Difficulty, Rarity
from battle_engine.utils import enum_value, round_half_up

BASE_REGEN: dict[str, int] = {
    Difficulty.EASY.value: 2,
    Difficulty.MEDIUM.value: 3,
    Difficulty.HARD.value: 4,
    Difficulty.EXPERT.value: 5,
}

BASE_ENERGY: dict[str, int] = {
    Difficulty.EASY.value: 10,
    Difficulty.MEDIUM.value: 12,
    Difficulty.HARD.value: 15,
    Difficulty.EXPERT.value: 18,
}

REGEN_RARITY_FACTORS: dict[str, float] = {
    Rarity.LEGENDARY.value: 1.3,
    Rarity.EPIC.value: 1.2,
    Rarity.RARE.value: 1.1,
}

ENERGY_SPECIALIST_BONUS = 0.5
MOMENTUM_STEP = 10


def max_energy(creatures: Iterable[Creature], difficulty: str = Difficulty.MEDIUM.value) -> int:
    count = len(list(creatures))
    return BASE_ENERGY.get(enum_value(difficulty), 15) + int(count * 0.25)


def regen(creatures: Iterable[Creature], difficulty: str = Difficulty.MEDIUM.value) -> int:
    """Energy a field regains this turn, before the pool cap."""
    total = float(BASE_REGEN.get(enum_value(difficulty), 3))
    for creature in creatures:
        energy = creature.base_stats.energy if creature.base_stats else 0
        if energy:
            contribution = energy * 0.1
            contribution *= REGEN_RARITY_FACTORS.get(enum_value(creature.rarity), 1.0)
            contribution *= 1 + creature.form * 0.05
            total += contribution
        if "energy" in creature.specialty_stats:
            total += ENERGY_SPECIALIST_BONUS
    return round_half_up(total)


def momentum(total: int) -> dict[str, int]:
    """Bonus regen earned from accumulated momentum."""
    total = max(0, total)
    return {
        "current_momentum": total,
        "bonus_regen": total // MOMENTUM_STEP,
        "next_threshold": MOMENTUM_STEP - total % MOMENTUM_STEP,
    }


def replenish(
    pool: int,
    creatures: tuple[Creature, ...],
    difficulty: str = Difficulty.MEDIUM.value,
    momentum_total: int = 0,
) -> int:
    """New pool after this turn's regen and momentum bonus, capped."""
    gained = regen(creatures, difficulty) + momentum(momentum_total)["bonus_regen"]
    return min(pool + gained, max_energy(creatures, difficulty))


def energy_efficiency(action: str, creature: Creature | None, energy_cost: int) -> float:
    """Value per energy point of an action, rounded to one decimal."""
    if not action or creature is None or not energy_cost or energy_cost <= 0:
        return 0.0
    stats = creature.battle_stats
    if action == "attack":
        value = max(stats.physical_attack, stats.magical_attack) if stats else 0
    elif action == "defend":
        value = max(stats.physical_defense, stats.magical_defense) * 2 if stats else 0
    elif action == "deploy":
        value = creature_power(creature) / 10
    else:
        value = 10
    return round(value / energy_cost, 1)
