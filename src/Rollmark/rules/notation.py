# rules/notation.py
"""Dice notation parser.

Supports: XdY, dY, XdY+Z, XdY-Z, XdYkhN (keep highest), XdYklN (keep lowest)
and bare flat modifiers such as "+5" or "-2".
"""

from __future__ import annotations

import re
from typing import NoReturn

import structlog

from Rollmark.metrics import inc_counter
from Rollmark.rules.errors import InvalidNotationError
from Rollmark.rules.types import KeepMode, KeepRule, NotationDescriptor

_DICE_RE = re.compile(
    r"^(?P<count>\d*)d(?P<sides>\d+)(?:(?P<keep>kh|kl)(?P<keep_count>\d+))?(?P<mod>[+-]\d+)?$",
    re.ASCII,
)
_FLAT_RE = re.compile(r"^(?P<mod>[+-]?\d+)$", re.ASCII)
_WS_RE = re.compile(r"\s+")

MAX_DICE = 1000

log = structlog.get_logger()


def canonicalize(notation: str) -> str:
    """Lowercase and strip all whitespace."""
    return _WS_RE.sub("", notation).lower()


def format_modifier(modifier: int) -> str:
    return f"{modifier:+d}"


def parse(notation: str, *, max_dice: int = MAX_DICE) -> NotationDescriptor:
    """Parse dice notation into a NotationDescriptor.

    Args:
        notation: Dice notation string, e.g. "2d6+3", "4d6kh3" or "+5".
        max_dice: Largest dice count accepted, so a roll always stays small.

    Returns:
        The structured descriptor; ``canonical`` is the lowercased,
        whitespace-free form of the input.

    Raises:
        InvalidNotationError: If the notation is neither dice nor a bare integer,
            or asks for more than ``max_dice`` dice.
    """
    cleaned = canonicalize(notation)
    m = _DICE_RE.match(cleaned)
    if m is None:
        flat = _FLAT_RE.match(cleaned)
        if flat is None:
            _reject(notation, None)
        inc_counter("dice.parse.ok")
        return NotationDescriptor(
            count=0, sides=0, modifier=_int(notation, flat.group("mod")), canonical=cleaned
        )

    count = _int(notation, m.group("count")) if m.group("count") else 1
    sides = _int(notation, m.group("sides"))
    modifier = _int(notation, m.group("mod") or "0")
    if sides == 0:
        _reject(notation, "dice need at least one side")
    if count > max_dice:
        _reject(notation, f"too many dice: {count} (max {max_dice})")

    keep = None
    if m.group("keep"):
        keep_count = _int(notation, m.group("keep_count"))
        if keep_count == 0:
            _reject(notation, "keep count must be positive")
        mode = KeepMode.HIGHEST if m.group("keep") == "kh" else KeepMode.LOWEST
        keep = KeepRule(mode=mode, count=keep_count)

    inc_counter("dice.parse.ok")
    return NotationDescriptor(
        count=count, sides=sides, modifier=modifier, keep=keep, canonical=cleaned
    )


def _int(notation: str, digits: str) -> int:
    try:
        return int(digits)
    except ValueError:
        # int() refuses very long digit strings
        _reject(notation, "number too large")


def _reject(notation: str, reason: str | None) -> NoReturn:
    inc_counter("dice.parse.invalid")
    log.debug("dice.parse.invalid", notation=notation, reason=reason)
    raise InvalidNotationError(notation, reason)
