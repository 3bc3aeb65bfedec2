from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import yaml
from jsonschema import Draft202012Validator

from colosseum.combat.combatant import Combatant
from colosseum.errors import CombatantValidationError, RosterError

logger = logging.getLogger(__name__)


FIGHTER_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name", "health", "behavior"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "health": {"type": "integer", "minimum": 1},
        "heal_delta": {"type": "integer", "minimum": 0},
        "base_attack": {"type": "integer", "minimum": 0},
        "base_defense": {"type": "integer", "minimum": 0},
        "abilities": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "effect": {"type": ["object", "null"]},
                },
            },
        },
        "behavior": {
            "type": "object",
            "required": ["attack_chance", "heal_chance"],
            "properties": {
                "attack_chance": {"type": "number", "minimum": 0, "maximum": 1},
                "heal_chance": {"type": "number", "minimum": 0, "maximum": 1},
                "ability_chances": {
                    "type": "array",
                    "items": {"type": "number", "minimum": 0, "maximum": 1},
                },
            },
        },
    },
}

_VALIDATOR = Draft202012Validator(FIGHTER_SCHEMA)


def _format_schema_errors(source: str, errors: List[Any]) -> str:
    lines = [f"Fighter definition failed schema validation in {source}:"]
    for e in errors:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        lines.append(f" - at {where}: {e.message}")
    return "\n".join(lines)


def parse_fighter(data: Any, source: str = "<memory>") -> Combatant:
    """Validate one raw fighter mapping and build the Combatant."""
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        raise RosterError(_format_schema_errors(source, errors))
    try:
        return Combatant.from_dict(data)
    except CombatantValidationError as exc:
        raise RosterError(f"Failed to validate fighter in {source}: {exc}") from exc


class Roster:
    """Named collection of validated combatants, optionally backed by a file."""

    def __init__(self, fighters: Iterable[Combatant] = (), path: Optional[Path] = None) -> None:
        self.path = path
        self._fighters: Dict[str, Combatant] = {}
        for f in fighters:
            self.add(f)

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._fighters)

    def __iter__(self) -> Iterator[Combatant]:
        return iter(self._fighters.values())

    def __contains__(self, name: object) -> bool:
        return name in self._fighters

    def add(self, fighter: Combatant) -> None:
        if fighter.name in self._fighters:
            raise RosterError(f"A fighter named '{fighter.name}' already exists")
        self._fighters[fighter.name] = fighter
        logger.debug("Roster add: %s", fighter.name)

    def names(self) -> List[str]:
        return list(self._fighters)

    def get(self, name: str) -> Optional[Combatant]:
        return self._fighters.get(name)

    def require(self, name: str) -> Combatant:
        fighter = self.get(name)
        if fighter is None:
            raise RosterError(f"No fighter named '{name}'")
        return fighter

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Roster":
        """Load fighters from a YAML or JSON file.

        The document is either a list of fighter mappings or a mapping with a
        ``fighters`` list. A missing file yields an empty roster bound to path.
        """
        path = Path(path)
        if not path.exists():
            logger.info("Roster file %s does not exist; starting empty", path)
            return cls(path=path)
        with path.open("r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise RosterError(f"Failed to parse roster {path}: {exc}") from exc
        if raw is None:
            raw = []
        if isinstance(raw, dict):
            raw = raw.get("fighters", [])
        if not isinstance(raw, list):
            raise RosterError(f"Roster {path} must contain a list of fighters")
        roster = cls(path=path)
        for i, item in enumerate(raw):
            roster.add(parse_fighter(item, source=f"{path}[{i}]"))
        logger.info("Loaded %d fighters from %s", len(roster), path)
        return roster

    def to_list(self) -> List[Dict[str, Any]]:
        return [f.to_dict() for f in self._fighters.values()]

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise RosterError("Roster has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            if target.suffix == ".json":
                json.dump(self.to_list(), f, indent=2)
            else:
                yaml.safe_dump(self.to_list(), f, sort_keys=False)
        logger.info("Saved %d fighters to %s", len(self), target)
        return target
