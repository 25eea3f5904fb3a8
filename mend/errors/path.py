from .base import MendError


class PathViolation(MendError):
    """A patch path resolves outside the permitted root directory."""
