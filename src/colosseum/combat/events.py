from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Type, Union

from colosseum.combat.dice import RollPurpose


# ---------------------------
# Completion reasons
# ---------------------------

@dataclass(frozen=True)
class HpDepleted:
    """A fighter reached 0 HP."""

    loser: str
    kind: ClassVar[str] = "hp_depleted"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "loser": self.loser}


@dataclass(frozen=True)
class MaxTurnsReached:
    """The configured turn cap was hit."""

    turns: int
    kind: ClassVar[str] = "max_turns_reached"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "turns": self.turns}


CompletionReason = Union[HpDepleted, MaxTurnsReached]


def reason_from_dict(data: Mapping[str, Any]) -> CompletionReason:
    kind = data.get("kind")
    if kind == HpDepleted.kind:
        return HpDepleted(loser=str(data["loser"]))
    if kind == MaxTurnsReached.kind:
        return MaxTurnsReached(turns=int(data["turns"]))
    raise ValueError(f"Unknown completion reason kind: {kind!r}")


# ---------------------------
# Events
# ---------------------------

_EVENT_TYPES: Dict[str, Type["BattleEvent"]] = {}


@dataclass(frozen=True)
class BattleEvent:
    """Base battle event. Subclasses register themselves under ``kind``."""

    kind: ClassVar[str] = "event"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _EVENT_TYPES[cls.kind] = cls

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        data.update(asdict(self))
        return data


@dataclass(frozen=True)
class RollEvent(BattleEvent):
    turn: int
    actor: str
    die: int
    total: int
    positive_crit: bool
    negative_crit: bool
    purpose: RollPurpose
    kind: ClassVar[str] = "roll"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["purpose"] = self.purpose.value
        return data


@dataclass(frozen=True)
class AttackEvent(BattleEvent):
    turn: int
    attacker: str
    target: str
    attack_total: int
    defense_total: int
    damage: int
    kind: ClassVar[str] = "attack"


@dataclass(frozen=True)
class HealEvent(BattleEvent):
    turn: int
    actor: str
    amount: int
    kind: ClassVar[str] = "heal"


@dataclass(frozen=True)
class AbilityUsedEvent(BattleEvent):
    turn: int
    actor: str
    target: str
    ability: str
    kind: ClassVar[str] = "ability_used"


@dataclass(frozen=True)
class HealthChangedEvent(BattleEvent):
    fighter: str
    old_hp: int
    new_hp: int
    turn: int
    kind: ClassVar[str] = "health_changed"


@dataclass(frozen=True)
class BattleEndedEvent(BattleEvent):
    turn: int
    winner: str
    loser: str
    winner_hp: int
    loser_hp: int
    reason: CompletionReason
    kind: ClassVar[str] = "battle_ended"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "turn": self.turn,
            "winner": self.winner,
            "loser": self.loser,
            "winner_hp": self.winner_hp,
            "loser_hp": self.loser_hp,
            "reason": self.reason.to_dict(),
        }


def event_from_dict(data: Mapping[str, Any]) -> BattleEvent:
    """Rebuild an event from the output of ``BattleEvent.to_dict``."""
    kind = data.get("kind")
    cls = _EVENT_TYPES.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"Unknown battle event kind: {kind!r}")
    kwargs = {f.name: data[f.name] for f in fields(cls)}
    if cls is RollEvent:
        kwargs["purpose"] = RollPurpose(kwargs["purpose"])
    elif cls is BattleEndedEvent:
        kwargs["reason"] = reason_from_dict(kwargs["reason"])
    return cls(**kwargs)
