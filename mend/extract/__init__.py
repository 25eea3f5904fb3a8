from .diffs import (
    FilePatch,
    extract_patch_text,
    find_target_file,
    repair_context_prefixes,
    sanitize_patch,
    split_patch_by_file,
)

__all__ = [
    "FilePatch",
    "extract_patch_text",
    "repair_context_prefixes",
    "sanitize_patch",
    "split_patch_by_file",
    "find_target_file",
]
