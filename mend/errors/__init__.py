from .base import MendError
from .extract import ExtractError
from .patch import ConflictingRegion, MalformedPatch, NoConfidentMatch, PatchFailedError
from .path import PathViolation

__all__ = [
    "MendError",
    "PatchFailedError",
    "MalformedPatch",
    "NoConfidentMatch",
    "ConflictingRegion",
    "ExtractError",
    "PathViolation",
]
