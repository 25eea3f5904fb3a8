from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class LineKind(enum.Enum):
    CONTEXT = " "
    REMOVED = "-"
    ADDED = "+"


@dataclass(frozen=True)
class HunkLine:
    """One tagged body line of a hunk, text without its tag."""

    kind: LineKind
    text: str

    @classmethod
    def context(cls, text: str) -> "HunkLine":
        return cls(LineKind.CONTEXT, text)

    def render(self) -> str:
        return self.kind.value + self.text


@dataclass
class Hunk:
    """
    A contiguous change unit. Counts are recomputed from the body; the header's
    declared counts are only hints and are kept for reporting.
    """

    old_start: int
    new_start: int
    lines: List[HunkLine]
    declared_old_count: Optional[int] = None
    declared_new_count: Optional[int] = None
    header: str = "@@"
    patch_line: int = 0  # 1-based line of the header within the patch text
    positioned: bool = True  # False for bare '@@' separators without ranges

    @property
    def old_count(self) -> int:
        return sum(1 for ln in self.lines if ln.kind is not LineKind.ADDED)

    @property
    def new_count(self) -> int:
        return sum(1 for ln in self.lines if ln.kind is not LineKind.REMOVED)

    @property
    def added_count(self) -> int:
        return sum(1 for ln in self.lines if ln.kind is LineKind.ADDED)

    @property
    def removed_count(self) -> int:
        return sum(1 for ln in self.lines if ln.kind is LineKind.REMOVED)

    @property
    def expected(self) -> List[str]:
        """Context and removed lines, in order: what must be found in the source."""
        return [ln.text for ln in self.lines if ln.kind is not LineKind.ADDED]

    @property
    def replacement(self) -> List[str]:
        """Context and added lines, in order: what the matched span becomes."""
        return [ln.text for ln in self.lines if ln.kind is not LineKind.REMOVED]

    @property
    def nominal_index(self) -> int:
        """0-based index in the original document the header points at."""
        if not self.positioned:
            return 0
        # Unified diffs name the line *after which* an empty old side is inserted.
        if self.old_count == 0:
            return max(0, self.old_start)
        return max(0, self.old_start - 1)

    def render(self) -> str:
        return "\n".join([self.header] + [ln.render() for ln in self.lines])


@dataclass
class Patch:
    """Ordered hunks for a single document."""

    hunks: List[Hunk] = field(default_factory=list)
    old_path: Optional[str] = None
    new_path: Optional[str] = None

    def __len__(self) -> int:
        return len(self.hunks)

    def __iter__(self):
        return iter(self.hunks)
