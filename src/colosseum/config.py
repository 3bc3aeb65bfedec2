from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from colosseum.combat.engine import DEFAULT_MAX_TURNS
from colosseum.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class BattleConfig:
    """Runtime configuration for the CLI and archive.

    - max_turns: turn cap handed to every battle (>= 1).
    - seed: default seed when a command does not pass one; None means random.
    - roster_path: fighter definitions file.
    - archive_path: saved battles file.
    """

    max_turns: int = DEFAULT_MAX_TURNS
    seed: Union[int, str, None] = None
    roster_path: Path = Path("assets/fighters.yaml")
    archive_path: Path = Path("assets/battles.yaml")

    def __post_init__(self) -> None:
        self.roster_path = Path(self.roster_path)
        self.archive_path = Path(self.archive_path)
        if isinstance(self.max_turns, bool) or not isinstance(self.max_turns, int):
            raise ConfigError(f"max_turns must be an integer, got {self.max_turns!r}")
        if self.max_turns < 1:
            raise ConfigError(f"max_turns must be >= 1, got {self.max_turns}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BattleConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_turns": self.max_turns,
            "seed": self.seed,
            "roster_path": str(self.roster_path),
            "archive_path": str(self.archive_path),
        }


def load_config(path: Optional[Union[str, Path]] = None) -> BattleConfig:
    """Load configuration from YAML, falling back to dataclass defaults.

    A missing ``path`` (None) yields the defaults. A path that does not exist
    is an error, since the caller asked for it explicitly.
    """
    if path is None:
        logger.debug("No config file given; using defaults")
        return BattleConfig()
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse config {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(raw).__name__}")
    cfg = BattleConfig.from_dict(raw)
    logger.info("Loaded config from %s: max_turns=%d", path, cfg.max_turns)
    return cfg
