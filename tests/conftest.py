import sys
from pathlib import Path
from typing import Iterable, List

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from colosseum.combat.combatant import make_combatant  # noqa: E402


class ScriptedRandom:
    """Random source that replays fixed die values and float draws.

    Raises AssertionError when a script runs dry or a die value falls outside
    the requested range, so tests notice unexpected draws.
    """

    def __init__(self, ints: Iterable[int] = (), floats: Iterable[float] = ()) -> None:
        self.ints: List[int] = list(ints)
        self.floats: List[float] = list(floats)

    def randint(self, a: int, b: int) -> int:
        assert self.ints, "ScriptedRandom ran out of integer draws"
        value = self.ints.pop(0)
        assert a <= value <= b, f"scripted value {value} outside [{a}, {b}]"
        return value

    def random(self) -> float:
        assert self.floats, "ScriptedRandom ran out of float draws"
        return self.floats.pop(0)

    @property
    def exhausted(self) -> bool:
        return not self.ints and not self.floats


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def attacker():
    return make_combatant("Attacker", health=100, base_attack=10, heal_amount=10)


@pytest.fixture
def defender():
    return make_combatant("Defender", health=100, base_defense=5)


@pytest.fixture
def roster_file(tmp_path):
    path = tmp_path / "fighters.yaml"
    path.write_text(
        """
- name: Kougra
  health: 120
  heal_delta: 12
  base_attack: 8
  base_defense: 5
  abilities:
    - name: Pounce
      effect: {damage: 15}
  behavior:
    attack_chance: 0.6
    heal_chance: 0.2
    ability_chances: [0.2]
- name: Shoyru
  health: 100
  heal_delta: 15
  base_attack: 10
  base_defense: 3
  abilities: []
  behavior:
    attack_chance: 0.75
    heal_chance: 0.25
""",
        encoding="utf-8",
    )
    return path
