from .applier import ApplyState, apply_hunk_step, apply_hunks, reconstruct_span
from .locator import locate_hunk, search_bounds
from .parser import parse_hunk_header, parse_patch
from .report import PatchReport, RunStatus, build_report, format_report
from .scorer import Alignment, align_window, normalize_line, score_window

__all__ = [
    "parse_patch",
    "parse_hunk_header",
    "score_window",
    "align_window",
    "normalize_line",
    "Alignment",
    "locate_hunk",
    "search_bounds",
    "apply_hunks",
    "apply_hunk_step",
    "reconstruct_span",
    "ApplyState",
    "build_report",
    "format_report",
    "PatchReport",
    "RunStatus",
]
