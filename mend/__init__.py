from .commit import read_document, resolve_target, write_document
from .config import MendConfig
from .core import MendResult, RunStatus, fuzzy_patch_partial, mend_text, patch_text
from .errors import (
    ConflictingRegion,
    ExtractError,
    MalformedPatch,
    MendError,
    NoConfidentMatch,
    PatchFailedError,
    PathViolation,
)
from .extract import (
    FilePatch,
    extract_patch_text,
    find_target_file,
    repair_context_prefixes,
    sanitize_patch,
    split_patch_by_file,
)
from .patch import apply_hunks, build_report, format_report, locate_hunk, parse_patch, score_window
from .system import read_clipboard
from .utils.text import join_document, split_document

__version__ = "0.3.0"

__all__ = [
    "mend_text",
    "patch_text",
    "fuzzy_patch_partial",
    "MendResult",
    "RunStatus",
    "MendConfig",
    "parse_patch",
    "score_window",
    "locate_hunk",
    "apply_hunks",
    "build_report",
    "format_report",
    "extract_patch_text",
    "repair_context_prefixes",
    "sanitize_patch",
    "split_patch_by_file",
    "find_target_file",
    "FilePatch",
    "read_document",
    "write_document",
    "resolve_target",
    "read_clipboard",
    "split_document",
    "join_document",
    "MendError",
    "PatchFailedError",
    "MalformedPatch",
    "NoConfidentMatch",
    "ConflictingRegion",
    "ExtractError",
    "PathViolation",
]
