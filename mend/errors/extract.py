from .base import MendError


class ExtractError(MendError):
    """Patch text could not be pulled out of the surrounding input."""
