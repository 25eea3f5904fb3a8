"""
System helpers for getting patch text in.

Public API:
  - read_clipboard() -> str | None
"""
from __future__ import annotations

import os
import subprocess
from typing import List, Optional

__all__ = ["read_clipboard"]

# Tried in order; the first tool found on PATH that exits cleanly wins.
_PASTE_COMMANDS: List[List[str]] = [
    ["pbpaste"],                                            # macOS
    ["powershell", "-NoProfile", "-Command", "Get-Clipboard"],  # Windows
    ["wl-paste", "--no-newline"],                           # Wayland
    ["xclip", "-selection", "clipboard", "-o"],             # X11
    ["xsel", "--clipboard", "--output"],
]


def read_clipboard() -> Optional[str]:
    """
    Return the system clipboard as text using best-effort, cross-platform
    fallbacks, or None when no clipboard tool is available or all of them fail.
    """
    for cmd in _PASTE_COMMANDS:
        if not _which(cmd[0]):
            continue
        try:
            proc = subprocess.run(cmd, capture_output=True, check=False, timeout=5)
        except (OSError, subprocess.SubprocessError):
            continue
        if proc.returncode == 0:
            return proc.stdout.decode("utf-8", errors="replace")
    return None


def _which(cmd: str) -> bool:
    """Minimal shutil.which to avoid import overhead."""
    paths = os.environ.get("PATH", "").split(os.pathsep)
    exts = [""]
    if os.name == "nt":
        pathext = os.environ.get("PATHEXT", ".EXE;.BAT;.CMD").split(";")
        exts = [e.lower() for e in pathext if e]
    for folder in paths:
        full = os.path.join(folder, cmd)
        if os.path.isfile(full) and os.access(full, os.X_OK):
            return True
        for e in exts:
            full_ext = full + e
            if os.path.isfile(full_ext) and os.access(full_ext, os.X_OK):
                return True
    return False
