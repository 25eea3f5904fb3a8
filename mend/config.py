from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_SEARCH_RADIUS = 50
DEFAULT_THRESHOLD = 0.7
DEFAULT_WHITESPACE_CREDIT = 0.9
DEFAULT_ANCHOR_ONLY_CONFIDENCE = 0.5
DEFAULT_LENGTH_SLACK = 2


@dataclass(frozen=True)
class MendConfig:
    """
    Tunables for locating hunks.

    search_radius: how far (in lines) from the drift-adjusted header position
        the locator looks. None searches the whole document.
    threshold: minimum score a candidate needs to be accepted; a score equal
        to it passes, so 1.0 demands an exact match. Lower values recover more
        hunks from stale patches at the price of false relocations.
    whitespace_credit: partial credit for a line that only matches once
        whitespace and quote style are ignored.
    anchor_only_confidence: confidence reported for hunks with no context or
        removed lines; they are placed at their header position.
    length_slack: how many lines a candidate window may be shorter or longer
        than the hunk's expected lines, to absorb lines the patch missed or
        invented.
    reindent: shift added lines to the indentation found in the file when the
        patch and the file disagree.
    """

    search_radius: Optional[int] = DEFAULT_SEARCH_RADIUS
    threshold: float = DEFAULT_THRESHOLD
    whitespace_credit: float = DEFAULT_WHITESPACE_CREDIT
    anchor_only_confidence: float = DEFAULT_ANCHOR_ONLY_CONFIDENCE
    length_slack: int = DEFAULT_LENGTH_SLACK
    reindent: bool = True

    def __post_init__(self) -> None:
        if self.search_radius is not None and self.search_radius < 0:
            raise ValueError("search_radius must be >= 0 or None")
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")
        if not 0.0 <= self.whitespace_credit <= 1.0:
            raise ValueError("whitespace_credit must be within [0, 1]")
        if not 0.0 <= self.anchor_only_confidence <= 1.0:
            raise ValueError("anchor_only_confidence must be within [0, 1]")
        if self.length_slack < 0:
            raise ValueError("length_slack must be >= 0")

    @classmethod
    def for_fuzziness(cls, level: int, **overrides) -> "MendConfig":
        """
        Presets: 0 accepts exact matches only, 1 also accepts whitespace-only
        differences, 2 is the full fuzzy search.
        """
        if level == 0:
            base = cls(threshold=1.0, whitespace_credit=0.0, length_slack=0)
        elif level == 1:
            base = cls(threshold=DEFAULT_WHITESPACE_CREDIT, length_slack=0)
        elif level == 2:
            base = cls()
        else:
            raise ValueError("fuzziness must be one of {0, 1, 2}")
        return replace(base, **overrides) if overrides else base

    def with_overrides(self, **overrides) -> "MendConfig":
        """Copy with the given non-None fields replaced."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self
