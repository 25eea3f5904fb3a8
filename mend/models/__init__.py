from .fence import FenceToken
from .hunk import Hunk, HunkLine, LineKind, Patch
from .outcome import ApplicationOutcome, Conflict, ConflictReason, MatchResult, OutcomeKind

__all__ = [
    "FenceToken",
    "Hunk",
    "HunkLine",
    "LineKind",
    "Patch",
    "ApplicationOutcome",
    "Conflict",
    "ConflictReason",
    "MatchResult",
    "OutcomeKind",
]
