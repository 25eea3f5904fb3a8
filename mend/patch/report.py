# mend/patch/report.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..models.hunk import Patch
from ..models.outcome import ApplicationOutcome, OutcomeKind

__all__ = ["RunStatus", "PatchReport", "build_report", "format_report"]


class RunStatus(enum.Enum):
    FULLY_APPLIED = "FullyApplied"
    PARTIALLY_APPLIED = "PartiallyApplied"
    PARSE_FAILED = "ParseFailed"


@dataclass(frozen=True)
class PatchReport:
    """Read-only summary of one run's per-hunk outcomes."""

    outcomes: Tuple[ApplicationOutcome, ...]

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def applied(self) -> int:
        return self._count(OutcomeKind.APPLIED)

    @property
    def relocated(self) -> int:
        return self._count(OutcomeKind.RELOCATED)

    @property
    def conflicted(self) -> int:
        return self._count(OutcomeKind.CONFLICTED)

    @property
    def conflicts(self) -> List[ApplicationOutcome]:
        return [o for o in self.outcomes if o.kind is OutcomeKind.CONFLICTED]

    @property
    def applied_indices(self) -> List[int]:
        return [o.hunk_index for o in self.outcomes if o.ok]

    @property
    def status(self) -> RunStatus:
        return RunStatus.PARTIALLY_APPLIED if self.conflicted else RunStatus.FULLY_APPLIED


def build_report(outcomes: Iterable[ApplicationOutcome]) -> PatchReport:
    return PatchReport(outcomes=tuple(outcomes))


def _describe(outcome: ApplicationOutcome) -> str:
    n = outcome.hunk_index + 1
    if outcome.match is not None:
        m = outcome.match
        where = f"lines {m.start_line + 1}-{m.end_line}" if m.length else f"insert at line {m.start_line + 1}"
        text = f"hunk #{n}: {outcome.kind.value} at {where} (confidence {m.confidence:.2f}"
        if outcome.kind is OutcomeKind.RELOCATED:
            text += f", moved {m.offset:+d} lines"
        return text + ")"
    c = outcome.conflict
    if c is None:
        return f"hunk #{n}: {outcome.kind.value}"
    return f"hunk #{n}: conflicted [{c.reason.value}] {c.header}"


def format_report(report: PatchReport, patch: Optional[Patch] = None) -> str:
    """
    Plain-text summary. When `patch` is given, conflicted hunks are followed by
    their body so they can be applied by hand.
    """
    out: List[str] = [
        f"{report.total} hunk(s): {report.applied} applied, "
        f"{report.relocated} relocated, {report.conflicted} conflicted"
    ]
    for o in report.outcomes:
        out.append("  " + _describe(o))
    if report.conflicts:
        out.append("")
        out.append("Needs manual attention:")
        for o in report.conflicts:
            c = o.conflict
            if c is None:
                continue
            out.append(f"  hunk #{o.hunk_index + 1} {c.header}")
            if c.window is not None:
                out.append(f"    searched lines {c.window[0] + 1}-{c.window[1]}")
            if c.best_start is not None:
                out.append(f"    best candidate line {c.best_start + 1}, score {c.best_score:.2f}")
            out.append(f"    {c.message}")
            if patch is not None and o.hunk_index < len(patch.hunks):
                for ln in patch.hunks[o.hunk_index].lines:
                    out.append("    " + ln.render())
    return "\n".join(out)
