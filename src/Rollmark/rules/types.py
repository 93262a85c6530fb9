from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class KeepMode(str, Enum):
    HIGHEST = "highest"
    LOWEST = "lowest"


class CriticalFlag(str, Enum):
    NONE = "none"
    SUCCESS = "success"
    FUMBLE = "fumble"


@dataclass(frozen=True)
class KeepRule:
    mode: KeepMode
    count: int

    @property
    def suffix(self) -> str:
        return ("kh" if self.mode is KeepMode.HIGHEST else "kl") + str(self.count)


@dataclass(frozen=True)
class NotationDescriptor:
    """Structured form of a dice notation.

    ``sides == 0`` marks a flat-modifier-only expression (``count`` is 0 and
    there is no keep rule).
    """

    count: int
    sides: int
    modifier: int = 0
    keep: KeepRule | None = None
    canonical: str = ""

    @property
    def is_flat(self) -> bool:
        return self.sides == 0

    @property
    def is_single_d20(self) -> bool:
        return self.count == 1 and self.sides == 20 and self.keep is None


@dataclass(frozen=True)
class DieOutcome:
    value: int
    kept: bool = True


@dataclass(frozen=True)
class RollResult:
    descriptor: NotationDescriptor
    display_notation: str
    outcomes: tuple[DieOutcome, ...]
    modifier: int
    kept_total: int
    grand_total: int
    critical: CriticalFlag = CriticalFlag.NONE
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def notation(self) -> str:
        return self.descriptor.canonical

    @property
    def kept_values(self) -> list[int]:
        return [o.value for o in self.outcomes if o.kept]

    @property
    def dropped_values(self) -> list[int]:
        return [o.value for o in self.outcomes if not o.kept]

    def as_payload(self) -> dict[str, Any]:
        """JSON-ready view for presentation and audit consumers."""
        return {
            "notation": self.notation,
            "display_notation": self.display_notation,
            "rolls": [{"value": o.value, "kept": o.kept} for o in self.outcomes],
            "modifier": self.modifier,
            "kept_total": self.kept_total,
            "total": self.grand_total,
            "critical": self.critical.value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CheckResult:
    dc: int
    roll: RollResult
    success: bool

    @property
    def margin(self) -> int:
        return self.roll.grand_total - self.dc
