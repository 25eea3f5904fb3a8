# mend/patch/parser.py
from __future__ import annotations

import re
from typing import List, Optional

from ..errors.patch import MalformedPatch
from ..models.hunk import Hunk, HunkLine, LineKind, Patch

__all__ = ["parse_patch", "parse_hunk_header"]


_HUNK_HEADER_RE = re.compile(r"^@@\s*-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s*@@(.*)$")
_BARE_HEADER_RE = re.compile(r"^@@(\s*@@)?$")
_NO_NEWLINE_MARKER = "\\"
_TAGS = {" ": LineKind.CONTEXT, "-": LineKind.REMOVED, "+": LineKind.ADDED}


def _strip_path(raw: str) -> str:
    """Path from a '---'/'+++' header: drop timestamps and a/ b/ prefixes."""
    path = raw.split("\t")[0].strip()
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path.replace("\\", "/")


def _is_file_header_pair(lines: List[str], i: int) -> bool:
    return (
        lines[i].startswith("--- ")
        and i + 1 < len(lines)
        and lines[i + 1].startswith("+++ ")
    )


def parse_hunk_header(line: str) -> Optional[tuple[int, Optional[int], int, Optional[int]]]:
    """
    Return (old_start, old_count, new_start, new_count) for a '@@ -a,b +c,d @@' line.
    Omitted counts come back as None; callers default them to 1.
    """
    m = _HUNK_HEADER_RE.match(line.strip())
    if not m:
        return None
    old_count = int(m.group(2)) if m.group(2) is not None else None
    new_count = int(m.group(4)) if m.group(4) is not None else None
    return int(m.group(1)), old_count, int(m.group(3)), new_count


def _trim_trailing_padding(hunk: Hunk, raw_empty: List[bool]) -> None:
    """
    Drop raw empty lines at the end of a hunk that push the old side past the
    declared count. They are padding from the patch file, not blank context.
    """
    while hunk.lines and raw_empty and raw_empty[-1]:
        declared = hunk.declared_old_count
        if declared is not None and hunk.old_count <= declared:
            break
        hunk.lines.pop()
        raw_empty.pop()


def parse_patch(patch_str: str) -> Patch:
    """
    Parse unified-diff text for one document into a Patch.

    Header counts are treated as hints: the returned hunks carry counts
    recomputed from their bodies. Raises MalformedPatch (with the 1-based
    line number) when no hunk is present, when a hunk has no usable lines,
    or when a body line carries no recognizable tag.
    """
    lines = patch_str.splitlines()
    patch = Patch()
    cur: Optional[Hunk] = None
    cur_raw_empty: List[bool] = []
    seen_file_header = False

    def close() -> None:
        nonlocal cur, cur_raw_empty
        if cur is None:
            return
        _trim_trailing_padding(cur, cur_raw_empty)
        if not cur.lines:
            raise MalformedPatch(f"hunk '{cur.header}' has no usable lines", cur.patch_line)
        patch.hunks.append(cur)
        cur = None
        cur_raw_empty = []

    i = 0
    while i < len(lines):
        line = lines[i].rstrip("\r")
        lineno = i + 1

        if line.startswith("@@"):
            close()
            parsed = parse_hunk_header(line)
            if parsed is not None:
                old_start, old_count, new_start, new_count = parsed
                cur = Hunk(
                    old_start=old_start,
                    new_start=new_start,
                    lines=[],
                    declared_old_count=1 if old_count is None else old_count,
                    declared_new_count=1 if new_count is None else new_count,
                    header=line.strip(),
                    patch_line=lineno,
                )
            elif _BARE_HEADER_RE.match(line.strip()):
                cur = Hunk(old_start=0, new_start=0, lines=[], header="@@", patch_line=lineno, positioned=False)
            else:
                raise MalformedPatch(f"unrecognized hunk header {line!r}", lineno)
            i += 1
            continue

        if cur is None:
            # Preamble: file headers, git metadata, prose.
            if _is_file_header_pair(lines, i):
                if seen_file_header:
                    raise MalformedPatch("patch touches more than one file; split it per file first", lineno)
                seen_file_header = True
                patch.old_path = _strip_path(line[4:])
                patch.new_path = _strip_path(lines[i + 1].rstrip("\r")[4:])
                i += 2
                continue
            i += 1
            continue

        # Inside a hunk body.
        if line.startswith("diff --git ") or _is_file_header_pair(lines, i):
            raise MalformedPatch("patch touches more than one file; split it per file first", lineno)
        if line == "":
            cur.lines.append(HunkLine.context(""))
            cur_raw_empty.append(True)
        elif line.startswith(_NO_NEWLINE_MARKER):
            pass
        else:
            kind = _TAGS.get(line[0])
            if kind is None:
                raise MalformedPatch(f"line has no diff tag (' ', '+', '-'): {line!r}", lineno)
            cur.lines.append(HunkLine(kind, line[1:]))
            cur_raw_empty.append(False)
        i += 1

    close()
    if not patch.hunks:
        raise MalformedPatch("patch contains no hunks")
    return patch
