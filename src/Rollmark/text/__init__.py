"""Narrative text scanning for rollable tokens."""  # noqa: N999

from .scanner import DiceToken, TokenKind, annotate, scan

__all__ = ["DiceToken", "TokenKind", "annotate", "scan"]
