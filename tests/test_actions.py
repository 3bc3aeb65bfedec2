import logging

import pytest

from colosseum.combat.actions import AttackAction, HealAction, UseAbilityAction, choose_action, select_action
from colosseum.combat.combatant import Behavior
from colosseum.core.random import RandomSource

# attack [0, .40), heal [.40, .60), ability0 [.60, .75), ability1 [.75, .90), ability2 [.90, 1)
BEHAVIOR = Behavior(attack_chance=0.40, heal_chance=0.20, ability_chances=(0.15, 0.15, 0.10))


@pytest.mark.parametrize(
    "draw, expected",
    [
        (0.0, AttackAction()),
        (0.034343, AttackAction()),
        (0.399999, AttackAction()),
        (0.40, HealAction()),
        (0.526557, HealAction()),
        (0.636465, UseAbilityAction(0)),
        (0.849252, UseAbilityAction(1)),
        (0.932145, UseAbilityAction(2)),
        (0.999999, UseAbilityAction(2)),
    ],
)
def test_draw_maps_to_fixed_order_intervals(draw, expected):
    assert choose_action(BEHAVIOR, draw) == expected


def test_zero_width_intervals_are_never_chosen():
    b = Behavior(attack_chance=0.0, heal_chance=0.0, ability_chances=(0.0, 1.0))
    assert choose_action(b, 0.0) == UseAbilityAction(1)
    assert choose_action(b, 0.5) == UseAbilityAction(1)


def test_draw_past_last_interval_falls_back_to_attack(caplog):
    b = Behavior(attack_chance=0.0, heal_chance=0.5, ability_chances=(0.5,))
    with caplog.at_level(logging.WARNING, logger="colosseum.combat.actions"):
        assert choose_action(b, 1.0) == AttackAction()
    assert "falling back to attack" in caplog.text


def test_select_action_consumes_one_float(scripted):
    rng = scripted(floats=[0.5, 0.1])
    assert select_action(BEHAVIOR, rng) == HealAction()
    assert rng.floats == [0.1]


def test_select_action_roughly_follows_weights():
    rng = RandomSource(99)
    counts = {"attack": 0, "heal": 0, "ability": 0}
    for _ in range(5000):
        action = select_action(BEHAVIOR, rng)
        if isinstance(action, AttackAction):
            counts["attack"] += 1
        elif isinstance(action, HealAction):
            counts["heal"] += 1
        else:
            counts["ability"] += 1
    assert 0.36 < counts["attack"] / 5000 < 0.44
    assert 0.17 < counts["heal"] / 5000 < 0.23
    assert 0.36 < counts["ability"] / 5000 < 0.44
