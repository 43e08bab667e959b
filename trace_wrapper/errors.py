"""Errors raised while resolving the wrapped handler."""

from __future__ import annotations


class HandlerError(Exception):
    """Base class for handler resolution failures."""


class HandlerNotConfigured(HandlerError):
    """Raised when no handler path is configured."""


class HandlerFormatError(HandlerError):
    """Raised when the handler path is not `<module>.<export>`."""


class HandlerModuleNotFound(HandlerError):
    """Raised when the handler module cannot be found."""


class HandlerMissing(HandlerError):
    """Raised when the module has no attribute with the handler name."""


class HandlerNotCallable(HandlerError):
    """Raised when the handler export exists but cannot be called."""
