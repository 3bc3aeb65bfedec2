import pytest

from colosseum.combat.combatant import make_combatant
from colosseum.combat.events import HpDepleted, MaxTurnsReached
from colosseum.combat.state import BattleState
from colosseum.errors import UnknownFighterError


def make_state(hp1=100, hp2=100, max_turns=10):
    return BattleState(make_combatant("Alpha", health=hp1), make_combatant("Beta", health=hp2), max_turns=max_turns)


def test_damage_clamps_at_zero():
    state = make_state()
    assert state.apply_damage("Alpha", 30) == 70
    assert state.apply_damage("Alpha", 500) == 0
    assert state.hp("Alpha") == 0


def test_healing_clamps_at_max():
    state = make_state()
    state.apply_damage("Beta", 15)
    assert state.apply_healing("Beta", 10) == 95
    assert state.apply_healing("Beta", 10) == 100
    assert state.hp("Beta") == state.max_hp("Beta") == 100


def test_unknown_fighter_fails_loudly():
    state = make_state()
    with pytest.raises(UnknownFighterError):
        state.apply_damage("Gamma", 1)
    with pytest.raises(UnknownFighterError):
        state.apply_healing("Gamma", 1)
    # Also a KeyError for callers that treat it as a lookup failure
    with pytest.raises(KeyError):
        state.hp("Gamma")


def test_same_names_rejected():
    with pytest.raises(ValueError):
        BattleState(make_combatant("Twin"), make_combatant("Twin"))


def test_max_turns_must_be_positive():
    with pytest.raises(ValueError):
        make_state(max_turns=0)


def test_continues_until_a_condition_holds():
    state = make_state()
    state.advance_turn(3)
    assert state.check_completion() is None
    assert state.completed is False
    assert state.get_winner_loser() is None


def test_hp_depletion_detected():
    state = make_state()
    state.advance_turn(4)
    state.apply_damage("Beta", 100)
    assert state.check_completion() == HpDepleted(loser="Beta")
    assert state.get_winner_loser() == ("Alpha", "Beta")


def test_first_listed_fighter_checked_first_when_both_at_zero():
    state = make_state()
    state.apply_damage("Beta", 100)
    state.apply_damage("Alpha", 100)
    assert state.check_completion() == HpDepleted(loser="Alpha")


def test_hp_depletion_beats_turn_cap():
    state = make_state(max_turns=5)
    state.advance_turn(5)
    state.apply_damage("Alpha", 100)
    assert state.check_completion() == HpDepleted(loser="Alpha")


def test_turn_cap_detected():
    state = make_state(max_turns=5)
    state.advance_turn(5)
    assert state.check_completion() == MaxTurnsReached(turns=5)


def test_completion_reason_is_cached():
    state = make_state(max_turns=5)
    state.advance_turn(5)
    first = state.check_completion()
    # Later changes never overwrite the recorded reason
    state.apply_damage("Alpha", 100)
    assert state.check_completion() is first
    assert state.completion_reason == MaxTurnsReached(turns=5)


def test_winner_has_strictly_higher_hp():
    state = make_state(max_turns=1)
    state.advance_turn(1)
    state.apply_damage("Alpha", 10)
    state.check_completion()
    assert state.get_winner_loser() == ("Beta", "Alpha")


def test_hp_tie_broken_by_max_hp():
    state = make_state(hp1=100, hp2=120, max_turns=1)
    state.apply_damage("Beta", 20)
    state.advance_turn(1)
    state.check_completion()
    assert state.hp("Alpha") == state.hp("Beta") == 100
    assert state.get_winner_loser() == ("Beta", "Alpha")


def test_full_tie_goes_to_first_listed():
    state = make_state(max_turns=1)
    state.advance_turn(1)
    state.check_completion()
    assert state.get_winner_loser() == ("Alpha", "Beta")


def test_opponent_of():
    state = make_state()
    assert state.opponent_of("Alpha") == "Beta"
    assert state.opponent_of("Beta") == "Alpha"
