# mend/patch/locator.py
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .._logging import resolve_logger, tracing
from ..config import MendConfig
from ..errors.patch import NoConfidentMatch
from ..models.hunk import Hunk, LineKind
from ..models.outcome import MatchResult
from .scorer import align_window, make_matcher

__all__ = ["locate_hunk", "search_bounds"]

_EPS = 1e-9


def search_bounds(center: int, n: int, radius: Optional[int]) -> Tuple[int, int]:
    """
    Candidate start positions [lo, hi) around `center` for a document of n lines.
    The center is clamped into the document first so stale headers pointing
    past the end still search the tail.
    """
    if n <= 0:
        return 0, 0
    center = max(0, min(center, n - 1))
    if radius is None:
        return 0, n
    return max(0, center - radius), min(n, center + radius + 1)


def _window_lengths(expected_len: int, slack: int) -> range:
    return range(max(1, expected_len - slack), expected_len + slack + 1)


def _added_positions(hunk: Hunk) -> List[int]:
    """Indices into `hunk.replacement` that hold added lines."""
    out: List[int] = []
    k = 0
    for ln in hunk.lines:
        if ln.kind is LineKind.REMOVED:
            continue
        if ln.kind is LineKind.ADDED:
            out.append(k)
        k += 1
    return out


def _patched_fit(hunk: Hunk, lines: Sequence[str], start: int, cfg: MendConfig) -> Tuple[float, float, bool]:
    """
    Best fit of the hunk's patched side near `start`, as (fraction of its
    lines found, score, every added line found). The patched text can begin
    up to `added_count` lines above where the original side matched, or
    `removed_count` lines below it.
    """
    replacement = hunk.replacement
    added = _added_positions(hunk)
    matcher = make_matcher(replacement)
    lo = max(0, start - hunk.added_count - cfg.length_slack)
    hi = min(len(lines), start + hunk.removed_count + cfg.length_slack + 1)
    best = (0.0, 0.0, False)
    for s in range(lo, hi):
        for length in _window_lengths(len(replacement), cfg.length_slack):
            if s + length > len(lines):
                break
            alignment = align_window(
                lines[s:s + length], replacement,
                whitespace_credit=cfg.whitespace_credit, matcher=matcher,
            )
            found = {ei for ei, _ in alignment.pairs}
            fit = (len(found) / len(replacement), alignment.score, all(i in found for i in added))
            if fit[:2] > best[:2]:
                best = fit
    return best


def _looks_applied(hunk: Hunk, lines: Sequence[str], start: int, length: int, cfg: MendConfig) -> bool:
    """
    True when the patched side of the hunk is already in place near `start`.

    Sides are compared by the fraction of their own lines found, which does
    not favour the shorter side. The patched side must clear the threshold
    and contain every added line. With equal coverage only a hunk that
    removes nothing counts as applied, since its original side is a subset
    of its patched side.
    """
    if not hunk.added_count and not hunk.removed_count:
        return False
    if not hunk.replacement:
        return False
    expected = hunk.expected
    original = align_window(lines[start:start + length], expected, whitespace_credit=cfg.whitespace_credit)
    original_found = len(original.pairs) / len(expected)
    found, score, added_found = _patched_fit(hunk, lines, start, cfg)
    if score + _EPS < cfg.threshold or not added_found:
        return False
    if found > original_found + _EPS:
        return True
    return hunk.removed_count == 0 and found + _EPS >= original_found


def locate_hunk(
    hunk: Hunk,
    lines: Sequence[str],
    drift: int = 0,
    config: MendConfig | None = None,
    *,
    hunk_index: int = 0,
    logger=None,
    log: bool = False,
) -> MatchResult:
    """
    Find where `hunk` belongs in `lines` (read-only).

    The search is centered on the header position shifted by `drift`, the
    net line count change of the hunks applied before this one. Every start
    in the window is scored with windows a few lines shorter or longer than
    the hunk's expected lines. The highest score wins; ties go to the
    candidate closest to the drift-adjusted position, then the earliest one.

    A winner near which the hunk's patched side is already in place is
    refused, so a patch applied twice does not apply again.

    Raises:
        NoConfidentMatch: if no candidate reaches `config.threshold`.
    """
    cfg = config or MendConfig()
    log = resolve_logger(logger=logger, enabled=log, name=__name__, level=logging.DEBUG)
    n = len(lines)
    expected = hunk.expected
    nominal = hunk.nominal_index + drift

    if not expected:
        # Nothing to compare: trust the header, clamped into the document.
        start = max(0, min(nominal, n))
        log.debug(
            "hunk #%d: pure insertion at line %d (nominal %d), anchor-only confidence %.2f",
            hunk_index + 1, start + 1, nominal + 1, cfg.anchor_only_confidence,
        )
        return MatchResult(
            hunk_index=hunk_index,
            start_line=start,
            length=0,
            confidence=cfg.anchor_only_confidence,
            drift=start - hunk.nominal_index,
            offset=start - nominal if hunk.positioned else 0,
        )

    radius = cfg.search_radius if hunk.positioned else None
    lo, hi = search_bounds(nominal, n, radius)
    log.debug(
        "hunk #%d: %d expected lines, nominal line %d (drift %+d), searching starts %d-%d",
        hunk_index + 1, len(expected), nominal + 1, drift, lo + 1, hi,
    )

    matcher = make_matcher(expected)
    trace = tracing(log)
    best_key = None
    best: Optional[Tuple[int, int, float]] = None  # (start, length, score)
    for start in range(lo, hi):
        for length in _window_lengths(len(expected), cfg.length_slack):
            if start + length > n:
                break
            score = align_window(
                lines[start:start + length], expected,
                whitespace_credit=cfg.whitespace_credit, matcher=matcher,
            ).score
            key = (
                -round(score, 9),
                abs(start - nominal),
                start,
                abs(length - len(expected)),
                length,
            )
            if best_key is None or key < best_key:
                best_key = key
                best = (start, length, score)
                if trace:
                    log.debug(
                        "hunk #%d:   best so far lines %d-%d, score %.3f",
                        hunk_index + 1, start + 1, start + length, score,
                    )

    if best is None or best[2] + _EPS < cfg.threshold:
        best_start = best[0] if best else None
        best_score = best[2] if best else 0.0
        log.debug(
            "hunk #%d: no confident match (best %.3f, threshold %.2f)",
            hunk_index + 1, best_score, cfg.threshold,
        )
        raise NoConfidentMatch(hunk_index, (lo, hi), best_score, best_start, cfg.threshold)

    start, length, score = best
    if _looks_applied(hunk, lines, start, length, cfg):
        log.debug("hunk #%d: lines %d.. already carry the patched text", hunk_index + 1, start + 1)
        raise NoConfidentMatch(hunk_index, (lo, hi), score, start, cfg.threshold, already_applied=True)

    offset = start - nominal if hunk.positioned else 0
    log.debug(
        "hunk #%d: matched lines %d-%d, confidence %.3f, offset %+d",
        hunk_index + 1, start + 1, start + length, score, offset,
    )
    return MatchResult(
        hunk_index=hunk_index,
        start_line=start,
        length=length,
        confidence=score,
        drift=start - hunk.nominal_index,
        offset=offset,
    )
