# text/scanner.py
"""Find rollable dice expressions inside narrative text.

The input is split into tag segments (``<...>``), which pass through
untouched, and text segments. Passes then run in a fixed order over the
text segments only, each one turning matched ranges into token segments so
later passes never see them:

1. ``[label](target)`` links become keyword spans around the label.
2. Attack bonuses (``Attack: +5``, ``+5 to hit``).
3. Plain dice (``2d6+3``, ``d20``, ``4d6kh3``).
4. Saving throw DCs (``DC 13 Wisdom saving throw``).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from html import escape

import structlog

from Rollmark.metrics import inc_counter

log = structlog.get_logger()

_TAG_RE = re.compile(r"(<[^>]+>)")
_LINK_RE = re.compile(r"\[(?P<label>[^\]]+)\]\([^)]+\)")
# Digits are spelled [0-9]: \d would accept non-ASCII digits the parser rejects,
# while \w stays Unicode-aware so dice glued to any letter or digit are skipped.
_ATTACK_PREFIX_RE = re.compile(r"Attack:\s*(?P<tok>[+-][0-9]+)", re.IGNORECASE)
_ATTACK_SUFFIX_RE = re.compile(r"(?P<tok>[+-][0-9]+)(?=\s+to hit)", re.IGNORECASE)
# The modifier must end at a word boundary, so "1d6 + 2d4" is two terms, not "1d6+2"
_DICE_RE = re.compile(
    r"(?<!\w)(?P<tok>[0-9]*d[0-9]+(?:k[hl][0-9]+)?(?:\s*[+-]\s*[0-9]+\b)?)", re.IGNORECASE
)
_DC_RE = re.compile(r"\bDC\s*(?P<tok>[0-9]+)(?=\s+\w+\s+saving throw)", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


class TokenKind(str, Enum):
    PLAIN_DICE = "plain-dice"
    ATTACK_BONUS = "attack-bonus"
    SAVING_THROW_DC = "saving-throw-dc"


@dataclass(frozen=True)
class DiceToken:
    matched_text: str
    notation: str
    kind: TokenKind
    span: tuple[int, int]
    dc: int | None = None


class _SegKind(Enum):
    TEXT = "text"
    TAG = "tag"
    MARKUP = "markup"
    TOKEN = "token"


@dataclass(frozen=True)
class _Segment:
    kind: _SegKind
    text: str
    start: int = -1
    token: DiceToken | None = None


_TokenFactory = Callable[[re.Match[str], int], DiceToken]


def _split_markup(text: str) -> list[_Segment]:
    segments: list[_Segment] = []
    pos = 0
    for part in _TAG_RE.split(text):
        if part:
            kind = _SegKind.TAG if _TAG_RE.fullmatch(part) else _SegKind.TEXT
            segments.append(_Segment(kind, part, pos))
        pos += len(part)
    return segments


def _normalize_links(segments: Iterable[_Segment]) -> list[_Segment]:
    out: list[_Segment] = []
    for seg in segments:
        if seg.kind is not _SegKind.TEXT:
            out.append(seg)
            continue
        pos = 0
        for m in _LINK_RE.finditer(seg.text):
            if m.start() > pos:
                out.append(_Segment(_SegKind.TEXT, seg.text[pos : m.start()], seg.start + pos))
            out.append(_Segment(_SegKind.MARKUP, '<span class="keyword">'))
            out.append(_Segment(_SegKind.TEXT, m.group("label"), seg.start + m.start("label")))
            out.append(_Segment(_SegKind.MARKUP, "</span>"))
            pos = m.end()
        if pos < len(seg.text):
            out.append(_Segment(_SegKind.TEXT, seg.text[pos:], seg.start + pos))
    return out


def _claim(
    segments: Iterable[_Segment], pattern: re.Pattern[str], factory: _TokenFactory
) -> list[_Segment]:
    """Turn every ``tok`` group match inside text segments into a token segment."""
    out: list[_Segment] = []
    for seg in segments:
        if seg.kind is not _SegKind.TEXT:
            out.append(seg)
            continue
        pos = 0
        for m in pattern.finditer(seg.text):
            s, e = m.span("tok")
            if s > pos:
                out.append(_Segment(_SegKind.TEXT, seg.text[pos:s], seg.start + pos))
            token = factory(m, seg.start)
            out.append(_Segment(_SegKind.TOKEN, m.group("tok"), seg.start + s, token))
            pos = e
        if pos < len(seg.text):
            out.append(_Segment(_SegKind.TEXT, seg.text[pos:], seg.start + pos))
    return out


def _span(m: re.Match[str], offset: int) -> tuple[int, int]:
    s, e = m.span("tok")
    return (offset + s, offset + e)


def _attack_token(m: re.Match[str], offset: int) -> DiceToken:
    bonus = m.group("tok")
    return DiceToken(bonus, f"1d20{bonus}", TokenKind.ATTACK_BONUS, _span(m, offset))


def _dice_token(m: re.Match[str], offset: int) -> DiceToken:
    matched = m.group("tok")
    notation = _WS_RE.sub("", matched).lower()
    return DiceToken(matched, notation, TokenKind.PLAIN_DICE, _span(m, offset))


def _dc_token(m: re.Match[str], offset: int) -> DiceToken:
    value = m.group("tok")
    return DiceToken(value, "1d20", TokenKind.SAVING_THROW_DC, _span(m, offset), dc=int(value))


def _segments(text: str) -> list[_Segment]:
    segs = _normalize_links(_split_markup(text))
    segs = _claim(segs, _ATTACK_PREFIX_RE, _attack_token)
    segs = _claim(segs, _ATTACK_SUFFIX_RE, _attack_token)
    segs = _claim(segs, _DICE_RE, _dice_token)
    return _claim(segs, _DC_RE, _dc_token)


def scan(text: str) -> list[DiceToken]:
    """Return the tokens found in ``text``, ordered by position."""
    if not text:
        return []
    tokens = [s.token for s in _segments(text) if s.token is not None]
    tokens.sort(key=lambda t: t.span[0])
    for t in tokens:
        inc_counter(f"scanner.tokens.{t.kind.value}")
    log.debug("scanner.scan.done", tokens=len(tokens), length=len(text))
    return tokens


def render_token(token: DiceToken) -> str:
    kind = escape(token.kind.value)
    if token.kind is TokenKind.SAVING_THROW_DC:
        return (
            f'<span class="dc-value" data-dc="{token.dc}" data-kind="{kind}">'
            f"{token.matched_text}</span>"
        )
    return (
        f'<span class="dice-roll" data-dice="{escape(token.notation)}" data-kind="{kind}" '
        f'role="button" tabindex="0">{token.matched_text}</span>'
    )


def annotate(text: str) -> str:
    """Wrap each token in ``text`` with a marker span; everything else is kept as-is."""
    if not text:
        return text
    parts: list[str] = []
    for seg in _segments(text):
        if seg.token is not None:
            parts.append(render_token(seg.token))
        else:
            parts.append(seg.text)
    return "".join(parts)
