"""Exceptions."""

from typing import List, Optional, Tuple


class InvalidSessionValue(TypeError):
    """The session was assigned something other than a mapping or ``None``."""


class CorruptPayload(ValueError):
    """
    A session cookie could not be decoded because it is malformed.

    Codecs must raise this (and only this) for structurally invalid input.
    The lifecycle controller treats it as "no session" and starts over.
    """


class DecodeFault(RuntimeError):
    """
    Decoding a session cookie failed for a reason other than malformed input.

    ``headers`` holds the response headers that were staged before the fault
    was raised (notably the ``Set-Cookie`` that clears the offending cookie),
    so that an error handler can put them on the error response.
    """

    def __init__(self, message: str,
                 headers: Optional[List[Tuple[str, str]]] = None) -> None:
        super().__init__(message)
        self.headers = headers or []


class ConfigurationError(RuntimeError):
    """Raised when a session option is missing or invalid."""


class StoreFault(RuntimeError):
    """An operation against the external session store failed."""


class StoreReadFailed(StoreFault):
    """Failed to read a session from the session store."""


class StoreWriteFailed(StoreFault):
    """Failed to write a session to the session store."""


class StoreDeletionFailed(StoreFault):
    """Failed to delete a session in the session store."""
