"""Ripple error hierarchy.

All ripple-specific errors inherit from RippleError for easy catching.
"""


class RippleError(Exception):
    """Base error for all ripple operations."""


class ConfigError(RippleError):
    """Invalid or missing configuration."""


class InvalidSourceError(RippleError, TypeError):
    """Source exposes neither ``observe()`` nor ``fetch_all()``."""


class ObserverDestroyedError(RippleError):
    """Subscribed to an observer whose observation was already stopped."""
