# mend/patch/applier.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .._logging import resolve_logger
from ..config import MendConfig
from ..errors.patch import ConflictingRegion, NoConfidentMatch
from ..models.hunk import Hunk, LineKind, Patch
from ..models.outcome import ApplicationOutcome, Conflict, ConflictReason, MatchResult
from .locator import locate_hunk
from .scorer import Alignment, align_window, leading_ws

__all__ = ["ApplyState", "apply_hunk_step", "apply_hunks", "reconstruct_span"]


@dataclass
class ApplyState:
    """
    Working buffer and running drift for one run.

    `spans` records, per applied hunk, the region its replacement occupies
    in working-document coordinates as (start, end, hunk_index).
    """

    lines: List[str]
    drift: int = 0
    spans: List[Tuple[int, int, int]] = field(default_factory=list)


def _overlaps(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    a0, a1 = a
    b0, b1 = b
    if a0 == a1 and b0 == b1:
        return False
    if a0 == a1:
        return b0 < a0 < b1
    if b0 == b1:
        return a0 < b0 < a1
    return a0 < b1 and b0 < a1


def _reindent(line: str, ref_in: str, ref_out: str) -> str:
    """
    Swap the patch's base indentation for the file's. Translates style too
    (e.g. four spaces to a tab) when nested levels are consistent.
    """
    if ref_in == ref_out:
        return line
    if not ref_in:
        return ref_out + line if line else line
    ws = leading_ws(line)
    return ws.replace(ref_in, ref_out) + line[len(ws):]


def _reference_indent(
    expected: Sequence[str], window: Sequence[str], alignment: Alignment
) -> Tuple[str, str]:
    """Leading whitespace of the first non-blank aligned pair, patch side then file side."""
    for ei, wi in alignment.pairs:
        if expected[ei].strip() and window[wi].strip():
            return leading_ws(expected[ei]), leading_ws(window[wi])
    return "", ""


def _indent_map(
    expected: Sequence[str], window: Sequence[str], alignment: Alignment
) -> Dict[str, str]:
    """Patch-side indentation -> file-side indentation, from the aligned non-blank lines."""
    indents: Dict[str, str] = {}
    for ei, wi in alignment.pairs:
        if expected[ei].strip() and window[wi].strip():
            indents.setdefault(leading_ws(expected[ei]), leading_ws(window[wi]))
    return indents


def reconstruct_span(
    hunk: Hunk,
    window: Sequence[str],
    alignment: Alignment,
    *,
    reindent: bool = True,
) -> List[str]:
    """
    Rebuild the matched span surgically:
      - context lines found in the file are kept exactly as the file has them
      - removed lines found in the file are dropped
      - added lines are inserted, re-indented to the file's style
      - file lines the hunk does not mention stay where they are
    Context or removed lines the file does not have are skipped.

    An added line whose indentation also appears on a matched line takes
    that line's indentation in the file. Otherwise the indentation of the
    nearest matched line above it is swapped in.
    """
    expected = hunk.expected
    mapping = alignment.as_map()
    indents = _indent_map(expected, window, alignment) if reindent else {}
    ref_in, ref_out = _reference_indent(expected, window, alignment) if reindent else ("", "")

    out: List[str] = []
    w = 0  # next window line not yet emitted or dropped
    k = 0  # index into expected
    for ln in hunk.lines:
        if ln.kind is LineKind.ADDED:
            ws = leading_ws(ln.text)
            if not reindent or not ln.text.strip():
                out.append(ln.text)
            elif ws in indents:
                out.append(indents[ws] + ln.text[len(ws):])
            else:
                out.append(_reindent(ln.text, ref_in, ref_out))
            continue
        # CONTEXT or REMOVED: both consume one expected line.
        wi = mapping.get(k)
        k += 1
        if wi is None:
            continue
        out.extend(window[w:wi])
        if ln.kind is LineKind.CONTEXT:
            out.append(window[wi])
        if reindent and ln.text.strip() and window[wi].strip():
            ref_in, ref_out = leading_ws(ln.text), leading_ws(window[wi])
        w = wi + 1
    out.extend(window[w:])
    return out


def _conflict_from_miss(hunk: Hunk, err: NoConfidentMatch) -> Conflict:
    return Conflict(
        reason=ConflictReason.NO_CONFIDENT_MATCH,
        message=str(err),
        header=hunk.header,
        window=err.window,
        best_score=err.best_score,
        best_start=err.best_start,
    )


def _conflict_from_overlap(hunk: Hunk, match: MatchResult, err: ConflictingRegion) -> Conflict:
    return Conflict(
        reason=ConflictReason.CONFLICTING_REGION,
        message=str(err),
        header=hunk.header,
        best_score=match.confidence,
        best_start=match.start_line,
        span=err.span,
        conflicts_with=err.other_index,
    )


def _check_overlap(state: ApplyState, match: MatchResult) -> None:
    span = (match.start_line, match.end_line)
    for s, e, idx in state.spans:
        if _overlaps(span, (s, e)):
            raise ConflictingRegion(match.hunk_index, span, idx, (s, e))


def apply_hunk_step(
    state: ApplyState,
    hunk: Hunk,
    hunk_index: int,
    config: MendConfig | None = None,
    *,
    logger=None,
    log: bool = False,
) -> ApplicationOutcome:
    """
    Locate and apply one hunk against `state`, updating its buffer, drift and
    consumed spans on success. Failures come back as a Conflicted outcome and
    leave `state` untouched.
    """
    cfg = config or MendConfig()
    log = resolve_logger(logger=logger, enabled=log, name=__name__, level=logging.DEBUG)

    try:
        match = locate_hunk(hunk, state.lines, state.drift, cfg, hunk_index=hunk_index, logger=log)
    except NoConfidentMatch as e:
        log.debug("hunk #%d conflicted: %s", hunk_index + 1, e)
        return ApplicationOutcome.conflicted(hunk_index, _conflict_from_miss(hunk, e))

    try:
        _check_overlap(state, match)
    except ConflictingRegion as e:
        log.debug("hunk #%d conflicted: %s", hunk_index + 1, e)
        return ApplicationOutcome.conflicted(hunk_index, _conflict_from_overlap(hunk, match, e))

    start, end = match.start_line, match.end_line
    window = state.lines[start:end]
    if hunk.expected:
        alignment = align_window(window, hunk.expected, whitespace_credit=cfg.whitespace_credit)
        replacement = reconstruct_span(hunk, window, alignment, reindent=cfg.reindent)
    else:
        replacement = hunk.replacement

    state.lines[start:end] = replacement
    delta = len(replacement) - (end - start)
    state.spans = [
        (s + delta, e + delta, idx) if s >= end else (s, e, idx)
        for s, e, idx in state.spans
    ]
    state.spans.append((start, start + len(replacement), hunk_index))
    state.drift += delta

    log.debug(
        "hunk #%d applied at line %d: %d -> %d lines, drift now %+d",
        hunk_index + 1, start + 1, end - start, len(replacement), state.drift,
    )
    if match.offset == 0:
        return ApplicationOutcome.applied(match)
    return ApplicationOutcome.relocated(match)


def apply_hunks(
    patch: Patch,
    lines: Sequence[str],
    config: MendConfig | None = None,
    *,
    logger=None,
    log: bool = False,
) -> Tuple[List[str], List[ApplicationOutcome]]:
    """
    Apply the hunks of `patch` to `lines` strictly in patch order.

    Each hunk's search is biased by the drift of the hunks applied before it;
    conflicted hunks are skipped and contribute no drift. Returns the new
    lines and one outcome per hunk. `lines` itself is not modified.
    """
    cfg = config or MendConfig()
    log = resolve_logger(logger=logger, enabled=log, name=__name__, level=logging.DEBUG)
    state = ApplyState(lines=list(lines))
    outcomes: List[ApplicationOutcome] = []
    for i, hunk in enumerate(patch.hunks):
        log.debug("hunk #%d/%d %s", i + 1, len(patch.hunks), hunk.header)
        outcomes.append(apply_hunk_step(state, hunk, i, cfg, logger=log))
    return state.lines, outcomes
