"""Dice notation parsing, resolution and roll history."""  # noqa: N999

from .dice import (
    DiceRNG,
    RandomSource,
    ScriptedRandomSource,
    resolve,
    resolve_advantage,
    resolve_disadvantage,
)
from .errors import (
    DiceError,
    InvalidDescriptorError,
    InvalidNotationError,
    RandomSourceError,
)
from .history import RollHistory
from .notation import parse
from .types import (
    CheckResult,
    CriticalFlag,
    DieOutcome,
    KeepMode,
    KeepRule,
    NotationDescriptor,
    RollResult,
)

__all__ = [
    "CheckResult",
    "CriticalFlag",
    "DiceError",
    "DiceRNG",
    "DieOutcome",
    "InvalidDescriptorError",
    "InvalidNotationError",
    "KeepMode",
    "KeepRule",
    "NotationDescriptor",
    "RandomSource",
    "RandomSourceError",
    "RollHistory",
    "RollResult",
    "ScriptedRandomSource",
    "parse",
    "resolve",
    "resolve_advantage",
    "resolve_disadvantage",
]
