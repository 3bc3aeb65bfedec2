from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Type, TypeVar

from colosseum.combat.events import (
    AbilityUsedEvent,
    AttackEvent,
    BattleEndedEvent,
    BattleEvent,
    HealEvent,
    HealthChangedEvent,
    HpDepleted,
    RollEvent,
    event_from_dict,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BattleEvent)


def describe(ev: BattleEvent) -> str:
    """Render one event as a single human-readable line."""
    if isinstance(ev, RollEvent):
        base = f"[T{ev.turn}] {ev.actor} rolls {ev.die} for {ev.purpose.value} (total {ev.total})"
        if ev.positive_crit:
            base += " (CRIT)"
        elif ev.negative_crit:
            base += " (FUMBLE)"
        return base
    if isinstance(ev, AttackEvent):
        return (
            f"[T{ev.turn}] {ev.attacker} attacks {ev.target}: "
            f"{ev.attack_total} vs {ev.defense_total} -> {ev.damage} dmg"
        )
    if isinstance(ev, HealEvent):
        return f"[T{ev.turn}] {ev.actor} heals for {ev.amount} HP"
    if isinstance(ev, AbilityUsedEvent):
        return f"[T{ev.turn}] {ev.actor} uses {ev.ability} on {ev.target}"
    if isinstance(ev, HealthChangedEvent):
        return f"[T{ev.turn}] {ev.fighter} HP {ev.old_hp} -> {ev.new_hp}"
    if isinstance(ev, BattleEndedEvent):
        if isinstance(ev.reason, HpDepleted):
            why = f"{ev.reason.loser} was knocked out"
        else:
            why = f"turn limit of {ev.reason.turns} reached"
        return (
            f"[T{ev.turn}] Battle over: {ev.winner} ({ev.winner_hp} HP) defeats "
            f"{ev.loser} ({ev.loser_hp} HP), {why}"
        )
    return repr(ev)


class BattleLog:
    """Append-only record of everything that happened in one battle.

    Events are never edited or removed; the log is the only artifact a
    battle produces.
    """

    def __init__(self, events: Optional[List[BattleEvent]] = None) -> None:
        self._events: List[BattleEvent] = list(events or [])

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._events)

    def __iter__(self) -> Iterator[BattleEvent]:
        return iter(self._events)

    def append(self, ev: BattleEvent) -> BattleEvent:
        self._events.append(ev)
        logger.debug("Battle event: %s", ev)
        return ev

    def extend(self, events: List[BattleEvent]) -> None:
        for ev in events:
            self.append(ev)

    def events(self) -> List[BattleEvent]:
        return list(self._events)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [ev for ev in self._events if isinstance(ev, event_type)]

    def for_turn(self, turn: int) -> List[BattleEvent]:
        return [ev for ev in self._events if getattr(ev, "turn", None) == turn]

    @property
    def ending(self) -> Optional[BattleEndedEvent]:
        endings = self.of_type(BattleEndedEvent)
        return endings[-1] if endings else None

    def lines(self) -> List[str]:
        return [describe(ev) for ev in self._events]

    def to_dict(self) -> Dict[str, Any]:
        return {"events": [ev.to_dict() for ev in self._events]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BattleLog":
        return cls([event_from_dict(item) for item in data.get("events", [])])
