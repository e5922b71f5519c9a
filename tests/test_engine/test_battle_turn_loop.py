"""Tests for src/battle_engine/engine/turn_loop.py."""
from __future__ import annotations

import pytest

from battle_engine.engine.action_dispatcher import ActionDispatcher
from battle_engine.engine.turn_loop import advance_turn, tick_creature
from battle_engine.mechanics.combat_resolver import defend
from battle_engine.mechanics.effect_application import apply_spell, apply_tool
from battle_engine.models.action import Action
from battle_engine.models.creature import Rarity
from battle_engine.models.effect import ChargeEffect, ChargeParams, BurstMode, StandardEffect
from battle_engine.models.field import FieldState
from battle_engine.models.item import SpellTemplate, ToolTemplate


def _state(player, enemy, turn: int = 1, energy: int = 0) -> FieldState:
    return FieldState(
        turn=turn,
        player_field=tuple(player),
        enemy_field=tuple(enemy),
        player_energy=energy,
        enemy_energy=energy,
    )


class TestAdvanceTurn:
    def test_turn_counter_and_regen(self, make_creature):
        state = _state([make_creature()], [make_creature()])
        result = advance_turn(state, "medium")
        assert result.state.turn == 2
        assert result.state.player_energy == 4
        assert result.state.enemy_energy == 4
        assert result.log[0] == "--- Turn 1 ---"

    def test_input_state_untouched(self, make_creature):
        buffed = make_creature().model_copy(update={
            "active_effects": (StandardEffect(name="Buff", duration=3, start_turn=1, stat_changes={"initiative": 4}),),
        })
        state = _state([buffed], [])
        advance_turn(state)
        assert state.player_field[0].active_effects[0].stat_modifications == {}

    def test_scenario_d_defense_does_not_compound(self, make_creature):
        creature = make_creature("Guard")
        tool = ToolTemplate(name="Whetstone", tool_type="strength", tool_effect="Surge")
        creature = apply_tool(creature, tool, "medium", current_turn=1).creature
        creature = defend(creature, "medium", current_turn=1).creature
        state = _state([creature], [make_creature("Foe")])

        first = advance_turn(state).state
        second = advance_turn(first).state
        after_first = first.player_field[0].battle_stats
        after_second = second.player_field[0].battle_stats

        assert after_first == after_second
        assert after_first.physical_defense == 11 + 6 + 8
        assert after_first.physical_attack == 15 + 10
        assert second.player_field[0].is_defending

        third = advance_turn(second).state
        guard = third.player_field[0]
        assert not guard.is_defending
        assert guard.battle_stats.physical_defense == 11
        assert guard.active_effects == ()

    def test_tool_charge_empowers_next_attack(self, make_creature):
        tool = ToolTemplate(name="Coiled Spring", tool_type="strength", tool_effect="Charge")
        creature = apply_tool(make_creature(), tool, "medium", current_turn=1).creature
        state = _state([creature], [])

        attacks = []
        for _ in range(3):
            state = advance_turn(state).state
            attacks.append(state.player_field[0].battle_stats.physical_attack)

        holder = state.player_field[0]
        assert attacks == [20, 25, 15]
        assert holder.next_attack_bonus == 20
        assert not any(isinstance(e, ChargeEffect) for e in holder.active_effects)
        assert holder.current_health == holder.battle_stats.max_health

    def test_spell_charge_bursts_for_damage(self, make_creature):
        storm = ChargeEffect(
            name="Storm", duration=3, start_turn=1,
            params=ChargeParams(damage_base=4, damage_increase=4, max_turns=2, final_burst=30, burst_mode=BurstMode.DAMAGE),
        )
        target = make_creature().model_copy(update={"active_effects": (storm,)})
        state = _state([], [target])

        state = advance_turn(state).state
        assert state.enemy_field[0].current_health == 71
        result = advance_turn(state)
        assert result.state.enemy_field[0].current_health == 41
        assert any("bursts for 30 damage" in line for line in result.log)

    def test_drain_damage_and_mirror(self, make_creature, no_luck):
        caster = make_creature("Leech")
        target = make_creature("Target")
        spell = SpellTemplate(name="Leech Vine", spell_type="strength", spell_effect="Drain")
        cast = apply_spell(caster, target, spell, "medium", current_turn=1, rng=no_luck)
        state = _state([cast.caster], [cast.target])

        result = advance_turn(state, "medium").state
        leech = result.player_field[0]
        drained = result.enemy_field[0]
        assert drained.current_health == 75 - 21
        assert drained.battle_stats.physical_attack == 15 - 4
        assert leech.battle_stats.physical_attack == 15 + 3
        assert leech.current_health == leech.battle_stats.max_health

    @pytest.mark.parametrize("difficulty,rarity,expected", [
        ("medium", Rarity.COMMON, 10),
        ("hard", Rarity.COMMON, 12),  # 10 * 1.15 = 11.5
        ("expert", Rarity.RARE, 14),  # 12.5 -> 13, then 13 * 1.1 = 14.3
    ])
    def test_effect_damage_scaling(self, make_creature, difficulty, rarity, expected):
        burn = StandardEffect(name="Burn", duration=3, start_turn=1, damage_per_turn=10)
        creature = make_creature(rarity=rarity).model_copy(update={"active_effects": (burn,)})
        updated, _ = tick_creature(creature, 1, difficulty)
        assert creature.current_health - updated.current_health == expected

    def test_malformed_effect_does_not_stop_turn(self, make_creature):
        broken = make_creature("Broken").model_copy(update={
            "active_effects": (ChargeEffect(name="No Params", duration=2, start_turn=1),),
        })
        burn = StandardEffect(name="Burn", duration=2, start_turn=1, damage_per_turn=5)
        healthy = make_creature("Other").model_copy(update={"active_effects": (burn,)})
        result = advance_turn(_state([broken, healthy], []))
        broken_after, other_after = result.state.player_field
        assert broken_after.current_health == broken.current_health
        assert other_after.current_health == healthy.current_health - 5

    def test_healing_clamped_to_max(self, make_creature):
        regen_effect = StandardEffect(name="Mend", duration=3, start_turn=1, healing_per_turn=50)
        creature = make_creature().model_copy(update={"current_health": 70, "active_effects": (regen_effect,)})
        updated, _ = tick_creature(creature, 1, "medium")
        assert updated.current_health == updated.battle_stats.max_health

    def test_effect_death_triggers_cascade(self, make_creature):
        poison = StandardEffect(name="Poison", duration=3, start_turn=1, damage_per_turn=500)
        doomed = make_creature("Titan", rarity=Rarity.LEGENDARY).model_copy(update={"active_effects": (poison,)})
        ally = make_creature("Ally")
        foe = make_creature("Foe")
        result = advance_turn(_state([doomed, ally], [foe]))

        assert [c.species for c in result.state.player_field] == ["Ally"]
        assert result.state.player_field[0].active_effects[-1].name == "Titan's Final Gift"
        assert result.state.enemy_field[0].active_effects[-1].name == "Guilty Conscience"

    def test_cascade_effect_not_processed_same_turn(self, make_creature):
        poison = StandardEffect(name="Poison", duration=3, start_turn=1, damage_per_turn=500)
        doomed = make_creature("Titan", rarity=Rarity.LEGENDARY).model_copy(update={"active_effects": (poison,)})
        state = _state([doomed, make_creature("Ally")], [])
        state = advance_turn(state).state
        gift = state.player_field[0].active_effects[-1]
        assert gift.turns_active == 0

        state = advance_turn(state).state
        ally = state.player_field[0]
        assert ally.active_effects[-1].turns_active == 2
        assert ally.battle_stats.physical_attack == 17

    def test_health_invariant_over_many_turns(self, make_creature, no_luck):
        spell = SpellTemplate(name="Leech Vine", spell_type="strength", spell_effect="Drain")
        cast = apply_spell(make_creature("A"), make_creature("B"), spell, "expert", current_turn=1, rng=no_luck)
        state = _state([cast.caster], [cast.target])
        for _ in range(6):
            state = advance_turn(state, "expert").state
            for creature in (*state.player_field, *state.enemy_field):
                assert 0 <= creature.current_health <= creature.battle_stats.max_health


class TestOnHitDebuffsAcrossTurns:
    def _hit(self, state, rng):
        attacker, defender = state.player_field[0], state.enemy_field[0]
        action = Action("attack", attacker.id, defender.id)
        result = ActionDispatcher(rng=rng).dispatch(action, state)
        assert result.success
        return result.state

    def test_critical_trauma_lowers_defense_until_next_tick(self, make_creature, sequence_rng):
        state = advance_turn(_state([make_creature("Striker")], [make_creature("Target")])).state
        assert state.turn == 2

        # dodge roll, crit roll, trauma roll
        state = self._hit(state, sequence_rng([0.99, 0.0, 0.0]))
        target = state.enemy_field[0]
        assert [e.name for e in target.active_effects] == ["Critical Strike Trauma"]
        assert target.active_effects[0].start_turn == 2
        assert target.battle_stats.physical_defense == 11 - 2

        state = advance_turn(state).state
        assert state.enemy_field[0].battle_stats.physical_defense == 11 - 2

        state = advance_turn(state).state
        assert state.enemy_field[0].active_effects == ()
        assert state.enemy_field[0].battle_stats.physical_defense == 11

    def test_elemental_weakness_lasts_two_ticks(self, make_creature, sequence_rng):
        state = _state([make_creature("Flare", element="fire")], [make_creature("Boulder", element="earth")])
        state = advance_turn(state).state

        # dodge roll, crit roll, weakness roll
        state = self._hit(state, sequence_rng([0.99, 0.99, 0.1]))
        defenses = [state.enemy_field[0].battle_stats.magical_defense]
        for _ in range(3):
            state = advance_turn(state).state
            defenses.append(state.enemy_field[0].battle_stats.magical_defense)

        assert defenses == [10, 10, 10, 11]
