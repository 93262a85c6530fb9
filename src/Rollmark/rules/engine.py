from __future__ import annotations

import structlog

from Rollmark.config import Settings
from Rollmark.metrics import inc_counter
from Rollmark.rules.dice import (
    DiceRNG,
    RandomSource,
    resolve,
    resolve_advantage,
    resolve_disadvantage,
)
from Rollmark.rules.errors import InvalidNotationError
from Rollmark.rules.history import DEFAULT_CAPACITY, RollHistory
from Rollmark.rules.notation import MAX_DICE, format_modifier, parse
from Rollmark.rules.types import CheckResult, RollResult
from Rollmark.text.scanner import DiceToken, TokenKind

log = structlog.get_logger()


class DiceRoller:
    """
    Session-level roller: owns a random source and a roll history and
    exposes the activation path used when a scanned token is clicked.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        history: RollHistory | None = None,
        *,
        capacity: int = DEFAULT_CAPACITY,
        max_dice: int = MAX_DICE,
    ):
        self.rng = rng if rng is not None else DiceRNG()
        self.history = history if history is not None else RollHistory(capacity)
        self.max_dice = max_dice

    @classmethod
    def from_settings(cls, settings: Settings) -> DiceRoller:
        return cls(
            DiceRNG(settings.dice_rng_seed),
            capacity=settings.dice_history_capacity,
            max_dice=settings.dice_max_count,
        )

    def roll(self, notation: str) -> RollResult:
        desc = parse(notation, max_dice=self.max_dice)
        return resolve(desc, self.rng, display_notation=notation, history=self.history)

    def roll_advantage(self, modifier: int = 0) -> RollResult:
        return resolve_advantage(modifier, self.rng, history=self.history)

    def roll_disadvantage(self, modifier: int = 0) -> RollResult:
        return resolve_disadvantage(modifier, self.rng, history=self.history)

    def roll_check(
        self,
        dc: int,
        modifier: int = 0,
        *,
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> CheckResult:
        # Advantage and disadvantage cancel out
        if advantage and not disadvantage:
            res = self.roll_advantage(modifier)
        elif disadvantage and not advantage:
            res = self.roll_disadvantage(modifier)
        else:
            res = self.roll(f"1d20{format_modifier(modifier)}")
        return CheckResult(dc=dc, roll=res, success=res.grand_total >= dc)

    def activate(self, target: str | DiceToken) -> RollResult | CheckResult | None:
        """Roll a clicked token or notation; invalid notation is logged and ignored."""
        try:
            if isinstance(target, DiceToken):
                if target.kind is TokenKind.SAVING_THROW_DC and target.dc is not None:
                    return self.roll_check(target.dc)
                return self.roll(target.notation)
            return self.roll(target)
        except InvalidNotationError as exc:
            inc_counter("dice.activate.failed")
            log.warning("dice.activate.invalid_notation", notation=exc.notation, reason=exc.reason)
            return None

    def clear_history(self) -> None:
        self.history.clear()
