from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class OutcomeKind(enum.Enum):
    APPLIED = "applied"
    RELOCATED = "relocated"
    CONFLICTED = "conflicted"


class ConflictReason(enum.Enum):
    NO_CONFIDENT_MATCH = "NoConfidentMatch"
    CONFLICTING_REGION = "ConflictingRegion"


@dataclass(frozen=True)
class MatchResult:
    """Where a hunk was found in the working document."""

    hunk_index: int
    start_line: int  # 0-based, working-document coordinates
    length: int  # source lines consumed by the match
    confidence: float
    drift: int  # start_line minus the header position
    offset: int  # start_line minus the drift-adjusted nominal position

    @property
    def end_line(self) -> int:
        return self.start_line + self.length


@dataclass(frozen=True)
class Conflict:
    """Everything a human needs to resolve a hunk by hand."""

    reason: ConflictReason
    message: str
    header: str
    window: Optional[Tuple[int, int]] = None
    best_score: float = 0.0
    best_start: Optional[int] = None
    span: Optional[Tuple[int, int]] = None
    conflicts_with: Optional[int] = None


@dataclass(frozen=True)
class ApplicationOutcome:
    """Per-hunk result. Exactly one of `match` or `conflict` is set."""

    kind: OutcomeKind
    hunk_index: int
    match: Optional[MatchResult] = None
    conflict: Optional[Conflict] = None

    @classmethod
    def applied(cls, match: MatchResult) -> "ApplicationOutcome":
        return cls(OutcomeKind.APPLIED, match.hunk_index, match=match)

    @classmethod
    def relocated(cls, match: MatchResult) -> "ApplicationOutcome":
        return cls(OutcomeKind.RELOCATED, match.hunk_index, match=match)

    @classmethod
    def conflicted(cls, hunk_index: int, conflict: Conflict) -> "ApplicationOutcome":
        return cls(OutcomeKind.CONFLICTED, hunk_index, conflict=conflict)

    @property
    def ok(self) -> bool:
        return self.kind is not OutcomeKind.CONFLICTED
