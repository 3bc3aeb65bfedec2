from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Tuple

from colosseum.errors import CombatantValidationError

logger = logging.getLogger(__name__)

# Tolerance for the behavior probability total.
PROBABILITY_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Ability:
    """A named ability. ``effect`` is an opaque payload the engine never reads."""

    name: str
    effect: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise CombatantValidationError("Ability.name must be a non-empty string")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "effect": dict(self.effect)}


@dataclass(frozen=True)
class Behavior:
    """Action weights for one combatant.

    Attributes:
        attack_chance: Probability of attacking on a turn.
        heal_chance: Probability of healing on a turn.
        ability_chances: One probability per ability, in declaration order.

    The three must sum to 1.0.
    """

    attack_chance: float
    heal_chance: float
    ability_chances: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ability_chances", tuple(float(c) for c in self.ability_chances))
        object.__setattr__(self, "attack_chance", float(self.attack_chance))
        object.__setattr__(self, "heal_chance", float(self.heal_chance))
        for label, chance in (
            ("attack", self.attack_chance),
            ("heal", self.heal_chance),
            *(("ability", c) for c in self.ability_chances),
        ):
            if not 0.0 <= chance <= 1.0:
                raise CombatantValidationError(f"Behavior {label} chance {chance} must be within [0, 1]")
        total = self.total
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=PROBABILITY_TOLERANCE):
            raise CombatantValidationError(
                f"Behavior probabilities sum to {total} but must equal 1.0 "
                f"(attack: {self.attack_chance}, heal: {self.heal_chance}, "
                f"abilities: {list(self.ability_chances)})"
            )

    @property
    def total(self) -> float:
        return self.attack_chance + self.heal_chance + sum(self.ability_chances)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attack_chance": self.attack_chance,
            "heal_chance": self.heal_chance,
            "ability_chances": list(self.ability_chances),
        }


def _require_int(owner: str, label: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CombatantValidationError(f"Combatant {owner}: {label} must be an integer, got {value!r}")
    if value < minimum:
        raise CombatantValidationError(f"Combatant {owner}: {label} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Combatant:
    """Immutable stat block describing one fighter.

    Attributes:
        name: Unique identifier, also used as the display name.
        health: Maximum (and starting) hit points, > 0.
        heal_amount: HP restored by a normal heal, >= 0.
        base_attack: Added to the attack die, >= 0.
        base_defense: Added to the defense die, >= 0.
        abilities: Ordered abilities; indices line up with ``behavior.ability_chances``.
        behavior: Action weights.

    An instance that exists is valid: every invariant is checked here, so the
    battle engine never re-validates.
    """

    name: str
    health: int
    heal_amount: int
    base_attack: int
    base_defense: int
    abilities: Tuple[Ability, ...]
    behavior: Behavior

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise CombatantValidationError("Combatant.name must be a non-empty string")
        _require_int(self.name, "health", self.health, 1)
        _require_int(self.name, "heal_amount", self.heal_amount, 0)
        _require_int(self.name, "base_attack", self.base_attack, 0)
        _require_int(self.name, "base_defense", self.base_defense, 0)
        object.__setattr__(self, "abilities", tuple(self.abilities))
        if len(self.behavior.ability_chances) != len(self.abilities):
            raise CombatantValidationError(
                f"Combatant {self.name}: {len(self.behavior.ability_chances)} ability chances "
                f"but {len(self.abilities)} abilities"
            )
        logger.debug("Combatant validated: %s", self.name)

    @property
    def max_hp(self) -> int:
        return self.health

    def ability_name(self, index: int) -> str | None:
        if 0 <= index < len(self.abilities):
            return self.abilities[index].name
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Combatant":
        """Build a combatant from its serialized form.

        Any structural problem (missing keys, wrong shapes) is reported as a
        CombatantValidationError so callers handle one error type.
        """
        name = data.get("name", "<unnamed>")
        try:
            raw_behavior = data["behavior"]
            behavior = Behavior(
                attack_chance=raw_behavior["attack_chance"],
                heal_chance=raw_behavior["heal_chance"],
                ability_chances=tuple(raw_behavior.get("ability_chances", ())),
            )
            abilities = tuple(
                Ability(name=a["name"], effect=dict(a.get("effect") or {}))
                for a in data.get("abilities", ())
            )
            return cls(
                name=data["name"],
                health=data["health"],
                heal_amount=data.get("heal_delta", 0),
                base_attack=data.get("base_attack", 0),
                base_defense=data.get("base_defense", 0),
                abilities=abilities,
                behavior=behavior,
            )
        except CombatantValidationError as exc:
            if name != "<unnamed>" and str(name) not in str(exc):
                raise CombatantValidationError(f"Combatant {name}: {exc}") from exc
            raise
        except (KeyError, TypeError, AttributeError) as exc:
            raise CombatantValidationError(f"Combatant {name}: malformed definition ({exc!r})") from exc

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "health": self.health,
            "heal_delta": self.heal_amount,
            "base_attack": self.base_attack,
            "base_defense": self.base_defense,
            "abilities": [a.to_dict() for a in self.abilities],
            "behavior": self.behavior.to_dict(),
        }

    def summary(self) -> str:
        ability_list = ", ".join(a.name for a in self.abilities) or "-"
        chances = ", ".join(f"{c * 100:.0f}%" for c in self.behavior.ability_chances)
        return (
            f"{self.name}\n"
            f"HP: {self.health} | ATK: {self.base_attack} | DEF: {self.base_defense} | Heal: +{self.heal_amount}\n"
            f"Abilities: {ability_list}\n"
            f"Behavior: attack {self.behavior.attack_chance * 100:.0f}% | "
            f"heal {self.behavior.heal_chance * 100:.0f}% | abilities [{chances}]"
        )


def make_combatant(
    name: str,
    *,
    health: int = 100,
    heal_amount: int = 0,
    base_attack: int = 0,
    base_defense: int = 0,
    abilities: Sequence[str] = (),
    attack_chance: float = 1.0,
    heal_chance: float = 0.0,
    ability_chances: Sequence[float] = (),
) -> Combatant:
    """Convenience constructor taking ability names instead of Ability objects."""
    return Combatant(
        name=name,
        health=health,
        heal_amount=heal_amount,
        base_attack=base_attack,
        base_defense=base_defense,
        abilities=tuple(Ability(n) for n in abilities),
        behavior=Behavior(attack_chance, heal_chance, tuple(ability_chances)),
    )
