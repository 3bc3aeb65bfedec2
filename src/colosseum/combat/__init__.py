"""Turn-based battle engine: combatants in, event log out."""

from .actions import Action, AttackAction, HealAction, UseAbilityAction, choose_action, select_action
from .combatant import Ability, Behavior, Combatant, make_combatant
from .dice import DieRoll, RollPurpose, roll_d20
from .engine import BattleEngine, run_battle
from .events import (
    AbilityUsedEvent,
    AttackEvent,
    BattleEndedEvent,
    BattleEvent,
    CompletionReason,
    HealEvent,
    HealthChangedEvent,
    HpDepleted,
    MaxTurnsReached,
    RollEvent,
)
from .log import BattleLog
from .state import BattleState

__all__ = [
    "Ability",
    "AbilityUsedEvent",
    "Action",
    "AttackAction",
    "AttackEvent",
    "BattleEndedEvent",
    "BattleEngine",
    "BattleEvent",
    "BattleLog",
    "BattleState",
    "Behavior",
    "Combatant",
    "CompletionReason",
    "DieRoll",
    "HealAction",
    "HealEvent",
    "HealthChangedEvent",
    "HpDepleted",
    "MaxTurnsReached",
    "RollEvent",
    "RollPurpose",
    "UseAbilityAction",
    "choose_action",
    "make_combatant",
    "roll_d20",
    "run_battle",
    "select_action",
]
