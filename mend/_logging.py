"""
Opt-in logging for the patch engine.

Engine functions take `logger=None, log=False` and resolve them once:

    log = resolve_logger(logger=logger, enabled=log, name=__name__, level=logging.DEBUG)
    log.debug("hunk #%d: searching %d-%d", i, lo, hi)

and hand the resolved object down to the functions they call, so one
caller-supplied logger sees the whole run. Nothing is emitted unless the
caller asks for it, and importing mend leaves global logging alone.
"""
from __future__ import annotations

import logging

ROOT_LOGGER = "mend"


class NoopLogger:
    """Swallows every call; stands in when the caller did not opt in."""

    def debug(self, *args, **kwargs):  # type: ignore[no-untyped-def]
        pass

    info = warning = error = exception = critical = debug

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802 - logging.Logger API
        return False


def resolve_logger(
    logger: logging.Logger | NoopLogger | None = None,
    *,
    enabled: bool = False,
    name: str | None = None,
    level: int = logging.INFO,
) -> logging.Logger | NoopLogger:
    """
    Return a usable logger according to opt-in policy.

    - If `logger` is provided (including an already resolved NoopLogger), use it.
    - Else if `enabled` is True, get the named logger and lower it to `level`.
      Records propagate to the root handlers (the CLI's basicConfig, caplog).
    - Else return a NoopLogger.
    """
    if logger is not None:
        return logger
    if enabled:
        lg = logging.getLogger(name or ROOT_LOGGER)
        lg.setLevel(level)
        lg.propagate = True
        return lg
    return NoopLogger()


def tracing(lg: logging.Logger | NoopLogger) -> bool:
    """Whether per-candidate detail is worth formatting for this logger."""
    return lg.isEnabledFor(logging.DEBUG)
