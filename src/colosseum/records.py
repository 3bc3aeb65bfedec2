from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from colosseum.combat.engine import DEFAULT_MAX_TURNS, run_battle
from colosseum.combat.events import BattleEndedEvent, BattleEvent, event_from_dict
from colosseum.core.random import RandomSource
from colosseum.errors import ArchiveError
from colosseum.roster import Roster

logger = logging.getLogger(__name__)


def generate_battle_id(now: Optional[float] = None) -> str:
    ts = int(time.time() if now is None else now)
    return f"battle_{ts}"


@dataclass
class BattleRecord:
    """A saved battle. Pending until ``events`` is filled in by a run.

    Attributes:
        id: Unique identifier within an archive.
        fighter1: Name of the first-listed fighter.
        fighter2: Name of the second-listed fighter.
        created_at: ISO 8601 creation timestamp (UTC).
        seed: Seed used (or to be used) for the battle, for replay.
        max_turns: Turn cap the battle runs (or ran) under.
        events: Full event log once completed.
        winner: Winner name once completed.
        is_completed: Whether the battle has been run.
    """

    id: str
    fighter1: str
    fighter2: str
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    seed: Union[int, str, None] = None
    max_turns: int = DEFAULT_MAX_TURNS
    events: List[BattleEvent] = field(default_factory=list)
    winner: Optional[str] = None
    is_completed: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_turns, bool) or not isinstance(self.max_turns, int) or self.max_turns < 1:
            raise ArchiveError(f"Battle {self.id}: max_turns must be a positive integer, got {self.max_turns!r}")

    @property
    def matchup(self) -> str:
        return f"{self.fighter1} vs {self.fighter2}"

    def complete(self, events: List[BattleEvent]) -> None:
        endings = [ev for ev in events if isinstance(ev, BattleEndedEvent)]
        if len(endings) != 1:
            raise ArchiveError(f"Battle {self.id} log must end with exactly one BattleEnded event")
        self.events = list(events)
        self.winner = endings[0].winner
        self.is_completed = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fighter1": self.fighter1,
            "fighter2": self.fighter2,
            "created_at": self.created_at,
            "seed": self.seed,
            "max_turns": self.max_turns,
            "is_completed": self.is_completed,
            "winner": self.winner,
            "events": [ev.to_dict() for ev in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleRecord":
        try:
            return cls(
                id=str(data["id"]),
                fighter1=str(data["fighter1"]),
                fighter2=str(data["fighter2"]),
                created_at=str(data.get("created_at", "")),
                seed=data.get("seed"),
                max_turns=int(data.get("max_turns", DEFAULT_MAX_TURNS)),
                events=[event_from_dict(e) for e in data.get("events") or []],
                winner=data.get("winner"),
                is_completed=bool(data.get("is_completed", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ArchiveError(f"Malformed battle record {data.get('id', '<no id>')!r}: {exc}") from exc


class BattleArchive:
    """Pending and completed battles persisted to a YAML file."""

    def __init__(self, path: Optional[Path] = None, records: Optional[List[BattleRecord]] = None) -> None:
        self.path = path
        self._records: List[BattleRecord] = list(records or [])

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._records)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BattleArchive":
        path = Path(path)
        if not path.exists():
            logger.info("Battle archive %s does not exist; starting empty", path)
            return cls(path=path)
        with path.open("r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f) or []
            except yaml.YAMLError as exc:
                raise ArchiveError(f"Failed to parse battle archive {path}: {exc}") from exc
        if not isinstance(raw, list):
            raise ArchiveError(f"Battle archive {path} must contain a list of battles")
        archive = cls(path=path, records=[BattleRecord.from_dict(item) for item in raw])
        logger.info("Loaded %d battles from %s", len(archive), path)
        return archive

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ArchiveError("Battle archive has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            yaml.safe_dump([r.to_dict() for r in self._records], f, sort_keys=False)
        logger.info("Saved %d battles to %s", len(self._records), target)
        return target

    def records(self) -> List[BattleRecord]:
        return list(self._records)

    def completed(self) -> List[BattleRecord]:
        return [r for r in self._records if r.is_completed]

    def pending(self) -> List[BattleRecord]:
        return [r for r in self._records if not r.is_completed]

    def get(self, battle_id: str) -> BattleRecord:
        for r in self._records:
            if r.id == battle_id:
                return r
        raise ArchiveError(f"No battle with id '{battle_id}'")

    def next_id(self, base: Optional[str] = None) -> str:
        base = base or generate_battle_id()
        taken = {r.id for r in self._records}
        candidate, n = base, 1
        while candidate in taken:
            n += 1
            candidate = f"{base}_{n}"
        return candidate

    def add(self, record: BattleRecord) -> BattleRecord:
        if any(r.id == record.id for r in self._records):
            raise ArchiveError(f"A battle with id '{record.id}' already exists")
        self._records.append(record)
        return record

    def create(
        self,
        roster: Roster,
        fighter1: str,
        fighter2: str,
        seed: Union[int, str, None] = None,
        battle_id: Optional[str] = None,
        max_turns: int = DEFAULT_MAX_TURNS,
    ) -> BattleRecord:
        """Register a pending battle between two roster fighters.

        Without an explicit seed a random one is generated and stored. The seed
        and turn cap are both kept on the record, so the battle replays
        identically once run.
        """
        roster.require(fighter1)
        roster.require(fighter2)
        if fighter1 == fighter2:
            raise ArchiveError("A fighter cannot battle itself")
        if seed is None:
            seed = secrets.randbits(32)
        record = BattleRecord(
            id=battle_id or self.next_id(),
            fighter1=fighter1,
            fighter2=fighter2,
            seed=seed,
            max_turns=max_turns,
        )
        logger.info("Created pending battle %s: %s", record.id, record.matchup)
        return self.add(record)

    def run(self, battle_id: str, roster: Roster) -> BattleRecord:
        """Run a pending battle with its stored seed and turn cap; store the log."""
        record = self.get(battle_id)
        if record.is_completed:
            raise ArchiveError(f"Battle {battle_id} has already been run")
        events = run_battle(
            roster.require(record.fighter1),
            roster.require(record.fighter2),
            RandomSource(record.seed),
            max_turns=record.max_turns,
        )
        record.complete(events)
        logger.info("Battle %s finished; winner %s", record.id, record.winner)
        return record

    def clear(self) -> None:
        logger.debug("Clearing battle archive (count=%d)", len(self._records))
        self._records.clear()
