# mend/commit/core.py
import contextlib
import logging
import os
import shutil
import tempfile
from typing import Optional

from ..errors.path import PathViolation


log = logging.getLogger(__name__)


def resolve_target(base_path: str, rel_path: str, check_exists: bool = False) -> str:
    """
    Join a patch-relative path under base_path while enforcing containment.
    Raises PathViolation if the resolved path escapes base_path.
    If check_exists is False the path does not need to exist yet.
    """
    base_real = os.path.realpath(base_path)
    target_path = os.path.join(base_real, *rel_path.replace("\\", "/").split("/"))
    # realpath on a missing file still resolves symlinked parents, abspath does not.
    resolved = os.path.realpath(target_path) if check_exists else os.path.abspath(target_path)
    if os.path.commonpath([base_real, resolved]) != base_real:
        raise PathViolation(f"Path traversal attempt detected for '{rel_path}'")
    return resolved


def _backup_path(dest: str, backup_ext: str) -> str:
    ext = backup_ext if backup_ext.startswith(".") else "." + backup_ext
    return dest + ext


def read_document(path: str) -> str:
    """Read a UTF-8 text file without newline translation, so CRLF survives."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_document(
    path: str,
    text: str,
    *,
    backup_ext: Optional[str] = None,
    atomic: bool = True,
) -> Optional[str]:
    """
    Write `text` to `path` exactly as given (no newline translation).

    Args:
        path: Destination file. Missing parent directories are created.
        text: Full new contents.
        backup_ext: Optional extension (".orig" or "orig") used to keep the
                    previous contents next to the file. Ignored for new files.
        atomic: If True, stage to a same-directory tempfile and promote via
                os.replace(), so readers never see a half-written file.

    Returns:
        The backup path when one was written, else None.
    """
    dest = os.path.abspath(path)
    dirpath = os.path.dirname(dest)
    os.makedirs(dirpath, exist_ok=True)

    backup = None
    if backup_ext and os.path.exists(dest):
        backup = _backup_path(dest, backup_ext)
        shutil.copy2(dest, backup)
        log.debug("backed up %s to %s", dest, backup)

    if not atomic:
        with open(dest, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        return backup

    fd, tmp = tempfile.mkstemp(prefix=".mend-", suffix=".tmp", dir=dirpath)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if os.path.exists(dest):
            shutil.copymode(dest, tmp)
        os.replace(tmp, dest)  # atomic within a filesystem
    except BaseException:
        with contextlib.suppress(OSError):
            if os.path.exists(tmp):
                os.remove(tmp)
        raise
    log.debug("wrote %d chars to %s", len(text), dest)
    return backup
