# rules/dice.py

from __future__ import annotations

import random
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol

import structlog

from Rollmark.metrics import inc_counter, observe_histogram
from Rollmark.rules.errors import InvalidDescriptorError, RandomSourceError
from Rollmark.rules.notation import format_modifier, parse
from Rollmark.rules.types import (
    CriticalFlag,
    DieOutcome,
    KeepMode,
    NotationDescriptor,
    RollResult,
)

if TYPE_CHECKING:
    from Rollmark.rules.history import RollHistory

log = structlog.get_logger()


class RandomSource(Protocol):
    """Callable returning a uniform integer in [1, sides]."""

    def __call__(self, sides: int) -> int:
        ...


class DiceRNG:
    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    def __call__(self, sides: int) -> int:
        return self._rng.randint(1, sides)


class ScriptedRandomSource:
    """Replays a fixed sequence of draws, for deterministic rolls."""

    def __init__(self, values: Iterable[int]):
        self._values = list(values)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._values) - self._pos

    def __call__(self, sides: int) -> int:
        if self._pos >= len(self._values):
            raise RandomSourceError(f"scripted source exhausted after {self._pos} draws")
        value = self._values[self._pos]
        self._pos += 1
        return value


def _check_descriptor(d: NotationDescriptor) -> None:
    if d.count < 0 or d.sides < 0:
        raise InvalidDescriptorError(f"negative dice term in {d!r}")
    if d.sides == 0 and (d.count != 0 or d.keep is not None):
        raise InvalidDescriptorError(f"flat modifier cannot carry dice or keep rule: {d!r}")
    if d.keep is not None and d.keep.count < 1:
        raise InvalidDescriptorError(f"keep count must be positive: {d!r}")


def _kept_flags(values: list[int], d: NotationDescriptor) -> list[bool]:
    if d.keep is None:
        return [True] * len(values)
    # Stable sort: earlier draws win ties for being kept
    order = sorted(
        range(len(values)),
        key=lambda i: values[i],
        reverse=d.keep.mode is KeepMode.HIGHEST,
    )
    keep_idx = set(order[: min(d.keep.count, len(values))])
    return [i in keep_idx for i in range(len(values))]


def _critical(d: NotationDescriptor, values: list[int]) -> CriticalFlag:
    if not d.is_single_d20:
        return CriticalFlag.NONE
    if values[0] == 20:
        return CriticalFlag.SUCCESS
    if values[0] == 1:
        return CriticalFlag.FUMBLE
    return CriticalFlag.NONE


def resolve(
    descriptor: NotationDescriptor,
    rng: RandomSource,
    *,
    display_notation: str | None = None,
    history: RollHistory | None = None,
) -> RollResult:
    """Roll the dice described by ``descriptor`` using ``rng``.

    Outcomes keep draw order; keep rules only flip the ``kept`` flag. When a
    history is given the result is recorded in it.
    """
    _check_descriptor(descriptor)
    log.debug("rules.dice.roll.start", notation=descriptor.canonical)

    values: list[int] = []
    for _ in range(descriptor.count):
        v = rng(descriptor.sides)
        if not 1 <= v <= descriptor.sides:
            raise RandomSourceError(f"random source returned {v} for a d{descriptor.sides}")
        values.append(v)

    flags = _kept_flags(values, descriptor)
    outcomes = tuple(DieOutcome(value=v, kept=k) for v, k in zip(values, flags))
    kept_total = sum(o.value for o in outcomes if o.kept)
    critical = _critical(descriptor, values)

    out = RollResult(
        descriptor=descriptor,
        display_notation=display_notation if display_notation is not None else descriptor.canonical,
        outcomes=outcomes,
        modifier=descriptor.modifier,
        kept_total=kept_total,
        grand_total=kept_total + descriptor.modifier,
        critical=critical,
        timestamp=datetime.now(timezone.utc),
    )

    inc_counter("dice.roll.resolved")
    observe_histogram("dice.roll.dice_count", descriptor.count)
    if critical is not CriticalFlag.NONE:
        inc_counter(f"dice.roll.critical.{critical.value}")
    log.debug(
        "rules.dice.roll.result",
        notation=out.notation,
        rolls=values,
        total=out.grand_total,
        critical=critical.value,
    )

    if history is not None:
        history.record(out)
    return out


def resolve_advantage(
    modifier: int, rng: RandomSource, *, history: RollHistory | None = None
) -> RollResult:
    """Two d20s, keep the highest."""
    notation = f"2d20kh1{format_modifier(modifier)}"
    return resolve(parse(notation), rng, display_notation=notation, history=history)


def resolve_disadvantage(
    modifier: int, rng: RandomSource, *, history: RollHistory | None = None
) -> RollResult:
    """Two d20s, keep the lowest."""
    notation = f"2d20kl1{format_modifier(modifier)}"
    return resolve(parse(notation), rng, display_notation=notation, history=history)
