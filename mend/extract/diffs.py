# mend/extract/diffs.py
"""
Pull a usable unified diff out of whatever text it arrived in.

Patches pasted from chat transcripts come wrapped in markdown fences, with
prose before and after, sometimes with `<think>` blocks, and often with the
leading space of context lines lost. Multi-file diffs have to be split so
each document gets its own patch.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from ..errors import ExtractError
from ..models.fence import FenceToken

__all__ = [
    "FilePatch",
    "extract_patch_text",
    "repair_context_prefixes",
    "sanitize_patch",
    "split_patch_by_file",
    "find_target_file",
]

DEV_NULL = "/dev/null"

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_FENCE_RE = re.compile(r"^(`{3,}|~{3,})(.*)$", re.MULTILINE)
_DIFF_START_RE = re.compile(r"^(diff --git |Index: |@@)")


# =============================
# Fences
# =============================

def _tokenize_fences(text: str) -> list[FenceToken]:
    """Fence runs that open a line. Indented runs are diff body, not markdown."""
    tokens: list[FenceToken] = []
    for m in _FENCE_RE.finditer(text):
        run = m.group(1)
        trailing = m.group(2).strip()
        info = trailing.split()[0].lower() if trailing else ""
        tokens.append(FenceToken(
            start=m.start(1),
            char=run[0],
            length=len(run),
            info=info,
            trailing=trailing,
            line_no=text.count("\n", 0, m.start()) + 1,
            line_end=m.end(),
        ))
    return tokens


def _looks_like_diff(text: str) -> bool:
    if "diff --git " in text:
        return True
    if "\n--- " in "\n" + text and "\n+++ " in "\n" + text:
        return True
    return bool(re.search(r"^@@", text, flags=re.MULTILINE))


def _diff_score(text: str) -> float:
    """Heuristic score: higher => more diff-like."""
    if not text.strip():
        return 0.0
    lines = text.splitlines()
    count_diff_git = sum(1 for ln in lines if ln.startswith("diff --git "))
    count_minus_hdr = sum(1 for ln in lines if ln.startswith("--- "))
    count_plus_hdr = sum(1 for ln in lines if ln.startswith("+++ "))
    count_hunks = sum(1 for ln in lines if ln.startswith("@@"))
    count_add_rm = sum(1 for ln in lines if ln.startswith(("+", "-")))
    score = 5.0 * count_diff_git
    if count_minus_hdr and count_plus_hdr:
        score += 3.0
    score += 1.0 * count_hunks
    score += min(count_add_rm * 0.05, 3.0)  # cap noisy +/-
    return score


def _closer_for(tokens: list[FenceToken], open_idx: int) -> Optional[int]:
    """
    Index of the fence closing tokens[open_idx]: the nearest run of the same
    char, at least as long, with nothing else on its line. Diff body lines
    always start with a tag, so a column-0 fence inside a diff cannot occur.
    """
    opener = tokens[open_idx]
    for j in range(open_idx + 1, len(tokens)):
        closer = tokens[j]
        if closer.char == opener.char and closer.length >= opener.length and not closer.trailing:
            return j
    return None


def _fenced_bodies(text: str) -> list[str]:
    tokens = _tokenize_fences(text)
    bodies: list[str] = []
    i = 0
    while i < len(tokens):
        opener = tokens[i]
        explicit = opener.info in ("diff", "patch", "udiff")
        j = _closer_for(tokens, i)
        if j is None:
            i += 1
            continue
        body = text[opener.line_end:tokens[j].start].strip("\n")
        if explicit and not _looks_like_diff(body):
            raise ExtractError(
                f"Malformed diff fence near line {opener.line_no}: expected a unified diff body."
            )
        if explicit or _looks_like_diff(body) or _diff_score(body) >= 4.0:
            bodies.append(body)
        # Resume after the closer, whether or not the block held a diff.
        i = j + 1
    return bodies


# =============================
# Unfenced text
# =============================

def _trim_commentary(text: str) -> str:
    """
    Drop prose before the first diff line, and a trailing paragraph (after a
    blank line) that contains no diff-tagged line.
    """
    lines = text.splitlines()
    first = None
    for i, ln in enumerate(lines):
        if _DIFF_START_RE.match(ln) or (
            ln.startswith("--- ") and i + 1 < len(lines) and lines[i + 1].startswith("+++ ")
        ):
            first = i
            break
    if first is None:
        return text
    lines = lines[first:]

    last_blank = None
    for i in range(len(lines) - 1, -1, -1):
        if not lines[i].strip():
            last_blank = i
            break
    if last_blank is not None:
        tail = [ln for ln in lines[last_blank + 1:] if ln.strip()]
        if tail and not any(ln[:1] in ("+", "-", " ", "@", "\\") for ln in tail):
            lines = lines[:last_blank]
    return "\n".join(lines).rstrip("\n")


def extract_patch_text(text: str) -> str:
    """
    Return the diff inside `text`: the bodies of diff-looking markdown fences
    joined together, or, without fences, the text trimmed of surrounding prose.

    Raises:
        ExtractError: if a fence labelled diff/patch holds something else.
    """
    text = _THINK_RE.sub("", text)
    bodies = _fenced_bodies(text)
    if bodies:
        return "\n".join(bodies)
    return _trim_commentary(text.strip("\n"))


def repair_context_prefixes(patch_str: str) -> str:
    """
    Inside hunks, give untagged lines the leading space they lost. File
    headers end a hunk; empty lines are left for the parser.
    """
    out: list[str] = []
    in_hunk = False
    lines = patch_str.splitlines()
    for i, ln in enumerate(lines):
        if ln.startswith("@@"):
            in_hunk = True
        elif ln.startswith("diff --git ") or (
            ln.startswith("--- ") and i + 1 < len(lines) and lines[i + 1].startswith("+++ ")
        ):
            in_hunk = False
        elif in_hunk and ln and ln[0] not in (" ", "+", "-", "\\"):
            ln = " " + ln
        out.append(ln)
    return "\n".join(out)


def sanitize_patch(text: str) -> str:
    """Extract the diff from surrounding text and repair lost context prefixes."""
    return repair_context_prefixes(extract_patch_text(text))


# =============================
# Multi-file splitting
# =============================

@dataclass
class FilePatch:
    """The slice of a (possibly multi-file) diff that touches one file."""

    old_path: Optional[str]
    new_path: Optional[str]
    text: str

    @property
    def path(self) -> Optional[str]:
        """Path the patch applies to: the new path unless the file is deleted."""
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        if self.old_path and self.old_path != DEV_NULL:
            return self.old_path
        return None

    @property
    def is_creation(self) -> bool:
        return self.old_path == DEV_NULL

    @property
    def is_deletion(self) -> bool:
        return self.new_path == DEV_NULL


def _header_path(raw: str, prefix: str) -> str:
    path = raw.strip().split("\t")[0].strip()
    if path != DEV_NULL and path.startswith(prefix):
        path = path[len(prefix):]
    return path.replace("\\", "/")


def split_patch_by_file(diff_text: str) -> List[FilePatch]:
    """
    Split a diff into per-file chunks. 'diff --git' and 'index' lines stay
    with the file they introduce. A headerless diff comes back as a single
    chunk with no paths.
    """
    lines = diff_text.splitlines()
    chunks: List[FilePatch] = []
    cur: list[str] = []
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    has_diff_git = False
    has_header = False

    def flush() -> None:
        nonlocal cur, old_path, new_path, has_diff_git, has_header
        if any(ln.strip() for ln in cur):
            chunks.append(FilePatch(old_path, new_path, "\n".join(cur).strip("\n")))
        cur = []
        old_path = new_path = None
        has_diff_git = has_header = False

    for i, ln in enumerate(lines):
        if ln.startswith("diff --git "):
            flush()
            has_diff_git = True
            m = re.match(r"^diff --git a/(.+?) b/(.+)$", ln)
            if m:
                old_path, new_path = m.group(1), m.group(2).strip()
        elif ln.startswith("--- ") and i + 1 < len(lines) and lines[i + 1].startswith("+++ "):
            # Without 'diff --git', a second '---/+++' pair starts the next file.
            if has_header and not has_diff_git:
                flush()
            has_header = True
            old_path = _header_path(ln[4:], "a/")
        elif ln.startswith("+++ ") and has_header and i > 0 and lines[i - 1].startswith("--- "):
            new_path = _header_path(ln[4:], "b/")
        cur.append(ln)

    flush()
    return chunks


def find_target_file(diff_text: str) -> Optional[str]:
    """First real path named by the diff headers ('/dev/null' is skipped)."""
    for chunk in split_patch_by_file(diff_text):
        if chunk.path:
            return chunk.path
    return None
