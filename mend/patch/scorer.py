# mend/patch/scorer.py
from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..config import DEFAULT_ANCHOR_ONLY_CONFIDENCE, DEFAULT_WHITESPACE_CREDIT

__all__ = ["Alignment", "align_window", "make_matcher", "score_window", "normalize_line", "leading_ws"]


_QUOTES = {
    "\u2018": "'", "\u2019": "'", "\u201B": "'",
    "\u201C": '"', "\u201D": '"',
}


def _normalize_quotes(s: str) -> str:
    """Fold common typographic quotes to ASCII to reduce spurious mismatches."""
    return "".join(_QUOTES.get(ch, ch) for ch in s)


def normalize_line(s: str) -> str:
    """Line with all whitespace removed and quotes folded; used for partial credit."""
    return "".join(_normalize_quotes(s).split())


def leading_ws(s: str) -> str:
    """Return the exact leading whitespace (tabs/spaces)."""
    return s[: len(s) - len(s.lstrip(" \t"))]


@dataclass(frozen=True)
class Alignment:
    """
    In-order pairing of expected lines with window lines.

    pairs holds (expected_index, window_index) tuples, strictly increasing in
    both coordinates. `loose` counts the pairs that only match after
    whitespace normalization.
    """

    score: float
    pairs: Tuple[Tuple[int, int], ...]
    exact: int
    loose: int

    def as_map(self) -> dict[int, int]:
        return dict(self.pairs)


def make_matcher(expected: Sequence[str]) -> difflib.SequenceMatcher:
    # SequenceMatcher caches details about its second sequence; keep the
    # hunk there so scanning many windows only swaps the first one.
    sm = difflib.SequenceMatcher(None, autojunk=False)
    sm.set_seq2(list(expected))
    return sm


def _loose_pairs(
    window: Sequence[str], w_lo: int, w_hi: int,
    expected: Sequence[str], e_lo: int, e_hi: int,
) -> List[Tuple[int, int]]:
    """Pair lines inside one gap between exact anchors by their normalized form."""
    if w_lo >= w_hi or e_lo >= e_hi:
        return []
    a = [normalize_line(x) for x in window[w_lo:w_hi]]
    b = [normalize_line(x) for x in expected[e_lo:e_hi]]
    sm = difflib.SequenceMatcher(None, a, b, autojunk=False)
    out: List[Tuple[int, int]] = []
    for wi, ei, size in sm.get_matching_blocks():
        for k in range(size):
            out.append((e_lo + ei + k, w_lo + wi + k))
    return out


def align_window(
    window: Sequence[str],
    expected: Sequence[str],
    *,
    whitespace_credit: float = DEFAULT_WHITESPACE_CREDIT,
    matcher: Optional[difflib.SequenceMatcher] = None,
) -> Alignment:
    """
    Align a candidate window of source lines with a hunk's expected lines.

    Verbatim matches are found first (in order, skipping lines on either
    side). Lines left over between two verbatim anchors are then compared
    with whitespace and quote style ignored, each such pair earning
    `whitespace_credit`. The score is 2 * credit / (len(expected) + len(window)),
    so lines missing from the window and extra lines in it both lower it.
    """
    if not expected or not window:
        return Alignment(score=0.0, pairs=(), exact=0, loose=0)

    sm = matcher if matcher is not None else make_matcher(expected)
    sm.set_seq1(list(window))

    pairs: List[Tuple[int, int]] = []
    exact = 0
    loose: List[Tuple[int, int]] = []
    w_prev, e_prev = 0, 0
    for wi, ei, size in sm.get_matching_blocks():
        # The final block is a (len(a), len(b), 0) sentinel, which also
        # closes the trailing gap.
        if whitespace_credit > 0:
            gap = _loose_pairs(window, w_prev, wi, expected, e_prev, ei)
            loose.extend(gap)
            pairs.extend(gap)
        for k in range(size):
            pairs.append((ei + k, wi + k))
        exact += size
        w_prev, e_prev = wi + size, ei + size

    credit = exact + whitespace_credit * len(loose)
    score = 2.0 * credit / (len(expected) + len(window))
    return Alignment(score=min(score, 1.0), pairs=tuple(pairs), exact=exact, loose=len(loose))


def score_window(
    window: Sequence[str],
    expected: Sequence[str],
    *,
    whitespace_credit: float = DEFAULT_WHITESPACE_CREDIT,
    anchor_only_confidence: float = DEFAULT_ANCHOR_ONLY_CONFIDENCE,
    matcher: Optional[difflib.SequenceMatcher] = None,
) -> float:
    """
    Confidence in [0, 1] that `window` is where `expected` belongs.

    A hunk with no expected lines (a pure insertion without context) has
    nothing to compare and scores the fixed anchor-only confidence.
    """
    if not expected:
        return anchor_only_confidence
    return align_window(
        window, expected, whitespace_credit=whitespace_credit, matcher=matcher
    ).score
