# mend/errors/patch.py
from __future__ import annotations

from .base import MendError


class PatchFailedError(MendError):
    """A patch could not be applied as requested."""


class MalformedPatch(PatchFailedError):
    """The patch text cannot be parsed into hunks. Fatal for the whole run."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class NoConfidentMatch(PatchFailedError):
    """No position in the search window scored at or above the threshold."""

    def __init__(
        self,
        hunk_index: int,
        window: tuple[int, int],
        best_score: float,
        best_start: int | None,
        threshold: float,
        already_applied: bool = False,
    ):
        self.hunk_index = hunk_index
        self.window = window
        self.best_score = best_score
        self.best_start = best_start
        self.threshold = threshold
        self.already_applied = already_applied
        if already_applied and best_start is not None:
            detail = (
                f"lines {best_start + 1}.. already hold the patched text"
                f" (score {best_score:.2f}); hunk looks applied"
            )
        elif best_start is None:
            detail = "no candidate position fits the document"
        else:
            detail = (
                f"best score {best_score:.2f} at line {best_start + 1} "
                f"is below threshold {threshold:.2f}"
            )
        super().__init__(
            f"hunk #{hunk_index + 1}: context not found in lines "
            f"{window[0] + 1}-{window[1]}; {detail}"
        )


class ConflictingRegion(PatchFailedError):
    """A located span overlaps a region already rewritten by an earlier hunk."""

    def __init__(self, hunk_index: int, span: tuple[int, int], other_index: int, other_span: tuple[int, int]):
        self.hunk_index = hunk_index
        self.span = span
        self.other_index = other_index
        self.other_span = other_span
        super().__init__(
            f"hunk #{hunk_index + 1}: lines {span[0] + 1}-{span[1]} overlap the region "
            f"already changed by hunk #{other_index + 1} (lines {other_span[0] + 1}-{other_span[1]})"
        )
