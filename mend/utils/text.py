from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

_EOL_RE = re.compile(r"\r\n|\r|\n")


@dataclass
class Document:
    """Lines of a text file plus what is needed to write it back byte-for-byte."""

    lines: List[str]
    eol: str = "\n"
    trailing_newline: bool = True


def detect_eol(s: str) -> str:
    if "\r\n" in s:
        return "\r\n"
    if "\r" in s:
        return "\r"
    return "\n"


def split_document(content: str) -> Document:
    """
    Split file contents into lines, recording the line-ending convention and
    whether the last line was terminated.

    Mixed endings are written back as CRLF when any line uses it. An empty file
    counts as terminated so lines added to it end with a newline.
    """
    if not content:
        return Document(lines=[], eol="\n", trailing_newline=True)
    # str.splitlines also breaks on form feeds and other separators; only
    # real line endings count here.
    lines = _EOL_RE.split(content)
    trailing = lines[-1] == ""
    if trailing:
        lines.pop()
    return Document(lines=lines, eol=detect_eol(content), trailing_newline=trailing)


def join_document(doc: Document) -> str:
    if not doc.lines:
        return ""
    return doc.eol.join(doc.lines) + (doc.eol if doc.trailing_newline else "")
