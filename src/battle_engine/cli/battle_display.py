"""Battle display helpers — field tables, battle log and item catalog."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from battle_engine.mechanics import effect_catalog
from battle_engine.mechanics.effect_processor import charge_progress
from battle_engine.models.creature import Creature
from battle_engine.models.effect import ChargeEffect
from battle_engine.models.field import FieldState
from battle_engine.models.item import SpellTemplate, ToolTemplate
from battle_engine.utils import enum_value

console = Console()

RARITY_COLORS = {
    "Common": "white",
    "Rare": "cyan",
    "Epic": "magenta",
    "Legendary": "yellow",
}


def health_bar(current: int, maximum: int, width: int = 12) -> str:
    pct = max(0.0, current / maximum) if maximum > 0 else 0.0
    filled = int(pct * width)
    if pct > 0.5:
        color = "green"
    elif pct > 0.25:
        color = "yellow"
    else:
        color = "red"
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim]"


class BattleDisplay:
    def __init__(self, show_effects: bool = True, out: Console | None = None) -> None:
        self.console = out or console
        self.show_effects = show_effects

    def _effect_tags(self, creature: Creature) -> str:
        tags = []
        for effect in creature.active_effects:
            label = effect.name
            if isinstance(effect, ChargeEffect):
                progress = charge_progress(effect, creature.current_turn)
                label += f" {progress['progress']:.0f}%"
            tags.append(f"[cyan]{label}[/cyan]")
        return " ".join(tags)

    def field_table(self, title: str, creatures: tuple[Creature, ...], energy: int) -> Table:
        table = Table(title=f"{title} (energy {energy})", box=box.SIMPLE_HEAVY)
        table.add_column("Creature")
        table.add_column("HP")
        table.add_column("P.Atk", justify="right")
        table.add_column("M.Atk", justify="right")
        table.add_column("P.Def", justify="right")
        table.add_column("M.Def", justify="right")
        table.add_column("Init", justify="right")
        if self.show_effects:
            table.add_column("Effects")

        for creature in creatures:
            stats = creature.battle_stats
            if stats is None:
                continue
            color = RARITY_COLORS.get(enum_value(creature.rarity), "white")
            name = f"[{color}]{creature.species}[/{color}]"
            if creature.is_defending:
                name += " [bold]🛡[/bold]"
            hp = f"{health_bar(creature.current_health, stats.max_health)} {creature.current_health}/{stats.max_health}"
            row = [
                name,
                hp,
                str(stats.physical_attack),
                str(stats.magical_attack),
                str(stats.physical_defense),
                str(stats.magical_defense),
                str(stats.initiative),
            ]
            if self.show_effects:
                row.append(self._effect_tags(creature))
            table.add_row(*row)
        return table

    def show_fields(self, state: FieldState) -> None:
        self.console.print(f"\n[bold yellow]Turn {state.turn}[/bold yellow]")
        self.console.print(self.field_table("Player field", state.player_field, state.player_energy))
        self.console.print(self.field_table("Enemy field", state.enemy_field, state.enemy_energy))

    def show_log(self, lines: list[str]) -> None:
        content = Text()
        for line in lines:
            style = "bold yellow" if line.startswith("---") else ""
            content.append(f"{line}\n", style=style)
        self.console.print(Panel(content, title="Battle log", border_style="red", box=box.ROUNDED))

    def show_catalog(self, tools: list[ToolTemplate], spells: list[SpellTemplate], difficulty: str) -> None:
        power = effect_catalog.effect_power(difficulty)
        table = Table(title=f"Items ({difficulty}, power {power:.2f})", box=box.SIMPLE_HEAVY)
        table.add_column("Name")
        table.add_column("Kind")
        table.add_column("Type")
        table.add_column("Effect")
        table.add_column("Duration", justify="right")
        table.add_column("Cost", justify="right")

        for tool in tools:
            template = effect_catalog.get_tool_effect(enum_value(tool.tool_type), enum_value(tool.tool_effect))
            table.add_row(
                tool.name, "tool", str(enum_value(tool.tool_type)), str(enum_value(tool.tool_effect)),
                str(template.get("duration", 1)), "-",
            )
        for spell in spells:
            template = effect_catalog.get_spell_effect(enum_value(spell.spell_type), enum_value(spell.spell_effect))
            table.add_row(
                spell.name, "spell", str(enum_value(spell.spell_type)), str(enum_value(spell.spell_effect)),
                str(template.get("duration", 1)), str(spell.energy_cost),
            )
        self.console.print(table)
