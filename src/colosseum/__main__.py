from __future__ import annotations

import argparse
import logging
import secrets
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from . import __version__
from .combat.engine import run_battle
from .combat.log import BattleLog
from .config import BattleConfig, load_config
from .core.random import RandomSource
from .errors import ArchiveError, ColosseumError, ConfigError
from .records import BattleArchive, BattleRecord
from .roster import Roster

logger = logging.getLogger("colosseum")


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def _seed_arg(value: str):
    try:
        return int(value)
    except ValueError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="colosseum", description="Turn-based battle arena")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-c", "--config", default=None, help="YAML config file")
    parser.add_argument("--roster", default=None, help="Fighter roster file (overrides config)")
    parser.add_argument("--archive", default=None, help="Battle archive file (overrides config)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    fighters = sub.add_parser("fighters", help="Inspect fighters")
    fsub = fighters.add_subparsers(dest="action", required=True)
    fsub.add_parser("list", help="List fighter names")
    show = fsub.add_parser("show", help="Show one fighter")
    show.add_argument("name")

    fight = sub.add_parser("fight", help="Run a battle now and print its log")
    fight.add_argument("fighter1")
    fight.add_argument("fighter2")
    fight.add_argument("--seed", type=_seed_arg, default=None)
    fight.add_argument("--max-turns", type=int, default=None)
    fight.add_argument("--save", action="store_true", help="Store the result in the archive")

    battles = sub.add_parser("battles", help="Manage saved battles")
    bsub = battles.add_subparsers(dest="action", required=True)
    bsub.add_parser("list", help="List saved battles")
    bsub.add_parser("pending", help="List battles that have not been run")
    create = bsub.add_parser("create", help="Create a pending battle")
    create.add_argument("fighter1")
    create.add_argument("fighter2")
    create.add_argument("--seed", type=_seed_arg, default=None)
    create.add_argument("--max-turns", type=int, default=None)
    run = bsub.add_parser("run", help="Run a pending battle")
    run.add_argument("id")
    watch = bsub.add_parser("watch", help="Print a completed battle's log")
    watch.add_argument("id")
    bsub.add_parser("clear", help="Remove all saved battles")
    return parser


def _max_turns(args: argparse.Namespace, cfg: BattleConfig) -> int:
    if args.max_turns is None:
        return cfg.max_turns
    if args.max_turns < 1:
        raise ConfigError(f"--max-turns must be >= 1, got {args.max_turns}")
    return args.max_turns


def _print_log(events) -> None:
    for line in BattleLog(events).lines():
        print(line)


def _run(args: argparse.Namespace, cfg: BattleConfig) -> int:
    roster = Roster.load(cfg.roster_path)

    if args.command == "fighters":
        if args.action == "list":
            for name in roster.names():
                print(name)
        else:
            print(roster.require(args.name).summary())
        return 0

    if args.command == "fight":
        seed = args.seed if args.seed is not None else cfg.seed
        if seed is None:
            seed = secrets.randbits(32)
        max_turns = _max_turns(args, cfg)
        f1 = roster.require(args.fighter1)
        f2 = roster.require(args.fighter2)
        if f1.name == f2.name:
            raise ArchiveError("A fighter cannot battle itself")
        events = run_battle(f1, f2, RandomSource(seed), max_turns=max_turns)
        _print_log(events)
        if args.save:
            archive = BattleArchive.load(cfg.archive_path)
            record = BattleRecord(
                id=archive.next_id(), fighter1=f1.name, fighter2=f2.name, seed=seed, max_turns=max_turns,
            )
            record.complete(events)
            archive.add(record)
            archive.save()
            print(f"Saved as {record.id}")
        return 0

    archive = BattleArchive.load(cfg.archive_path)
    if args.action == "list":
        records = archive.records()
        if not records:
            print("No battles found.")
        for r in records:
            status = "Completed" if r.is_completed else "Pending"
            print(f"{r.id:<20} {r.matchup:<30} {status}")
        return 0
    if args.action == "pending":
        records = archive.pending()
        if not records:
            print("No pending battles.")
        for r in records:
            print(f"{r.id:<20} {r.matchup:<30} {r.created_at}")
        return 0
    if args.action == "create":
        record = archive.create(
            roster, args.fighter1, args.fighter2, seed=args.seed, max_turns=_max_turns(args, cfg),
        )
        archive.save()
        print(f"Created {record.id}")
        return 0
    if args.action == "run":
        record = archive.run(args.id, roster)
        archive.save()
        _print_log(record.events)
        return 0
    if args.action == "watch":
        record = archive.get(args.id)
        if not record.is_completed:
            print(f"Battle {record.id} is still pending.")
            return 1
        _print_log(record.events)
        return 0
    archive.clear()
    archive.save()
    print("Cleared all battles.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        cfg = load_config(args.config)
        if args.roster:
            cfg = replace(cfg, roster_path=Path(args.roster))
        if args.archive:
            cfg = replace(cfg, archive_path=Path(args.archive))
        return _run(args, cfg)
    except ColosseumError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
