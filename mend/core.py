# mend/core.py
"""
Entry points that take file contents and patch text and return new contents.

    mend_text            -> MendResult(text, report); per-hunk failures are reported
    patch_text           -> str; raises PatchFailedError unless every hunk applied
    fuzzy_patch_partial  -> (text, applied_indices, failed) for best-effort callers
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ._logging import resolve_logger
from .config import MendConfig
from .errors import PatchFailedError
from .models.hunk import Patch
from .patch.applier import apply_hunks
from .patch.parser import parse_patch
from .patch.report import PatchReport, RunStatus, build_report
from .utils.text import join_document, split_document

__all__ = ["MendResult", "RunStatus", "mend_text", "patch_text", "fuzzy_patch_partial"]


@dataclass(frozen=True)
class MendResult:
    """New document text plus the report of how each hunk fared."""

    text: str
    report: PatchReport
    patch: Patch

    @property
    def status(self) -> RunStatus:
        return self.report.status


def _config(config: Optional[MendConfig], threshold: Optional[float]) -> MendConfig:
    return (config or MendConfig()).with_overrides(threshold=threshold)


def mend_text(
    content: str,
    patch: str | Patch,
    config: MendConfig | None = None,
    *,
    logger=None,
    log: bool = False,
) -> MendResult:
    """
    Apply every hunk of `patch` that can be located in `content`.

    Line endings and the presence of a final newline are carried over from
    `content`. Hunks that cannot be placed are skipped and listed in the
    report; the rest are still applied.

    Raises:
        MalformedPatch: if `patch` cannot be parsed. Nothing is applied.
    """
    log = resolve_logger(logger=logger, enabled=log, name=__name__, level=logging.DEBUG)
    parsed = patch if isinstance(patch, Patch) else parse_patch(patch)
    doc = split_document(content)
    log.debug("document: %d lines, eol=%r; patch: %d hunk(s)", len(doc.lines), doc.eol, len(parsed))

    new_lines, outcomes = apply_hunks(parsed, doc.lines, config, logger=log)
    report = build_report(outcomes)
    doc.lines = new_lines
    log.debug(
        "%d applied, %d relocated, %d conflicted",
        report.applied, report.relocated, report.conflicted,
    )
    return MendResult(text=join_document(doc), report=report, patch=parsed)


def patch_text(
    content: str,
    patch: str,
    threshold: float | None = None,
    *,
    config: MendConfig | None = None,
    logger=None,
    log: bool = False,
) -> str:
    """
    Apply a patch and return the new text, or fail as a whole.

    Raises:
        PatchFailedError: if the patch is malformed or any hunk conflicts.
    """
    result = mend_text(content, patch, _config(config, threshold), logger=logger, log=log)
    if result.report.conflicted:
        details = "; ".join(o.conflict.message for o in result.report.conflicts if o.conflict)
        raise PatchFailedError(
            f"{result.report.conflicted} of {result.report.total} hunk(s) failed: {details}"
        )
    return result.text


def fuzzy_patch_partial(
    content: str,
    patch_str: str,
    threshold: float | None = None,
    *,
    config: MendConfig | None = None,
    logger=None,
    log: bool = False,
) -> Tuple[str, List[int], List[Dict[str, Any]]]:
    """
    Best-effort patching.
    Returns (new_text, applied_indices, failed) where failed is a list of failed hunk details.
    """
    if not patch_str.strip():
        return content, [], []

    result = mend_text(content, patch_str, _config(config, threshold), logger=logger, log=log)
    failed: List[Dict[str, Any]] = []
    for o in result.report.conflicts:
        c = o.conflict
        hunk = result.patch.hunks[o.hunk_index]
        failed.append({
            "index": o.hunk_index,
            "error": c.message,
            "reason": c.reason.value,
            "header": c.header,
            "window": c.window,
            "best_score": c.best_score,
            "best_start": c.best_start,
            "old_content": hunk.expected,
            "new_content": hunk.replacement,
        })
    return result.text, result.report.applied_indices, failed
