"""
Codecs for carrying session data in a cookie.

A codec turns a session ``dict`` into a cookie-safe string and back. The
lifecycle controller relies on codecs to tell two kinds of decode failure
apart: input that is simply malformed (a stale or tampered cookie, which
should be ignored) and anything else (a bug, which should not). Codecs
signal the former by raising :class:`.CorruptPayload`.
"""

from typing import Any, Dict, NamedTuple, Optional
from abc import ABC, abstractmethod
from base64 import b64encode, b64decode
import binascii
import json
import logging

from .exceptions import CorruptPayload

logger = logging.getLogger(__name__)


class DecodeResult(NamedTuple):
    """Outcome of decoding a cookie value."""

    data: Optional[Dict[str, Any]]
    """The decoded session data, if the payload was well-formed."""

    corrupt: bool = False
    """Set if the payload was malformed and should be treated as absent."""


class Codec(ABC):
    """Encode/decode pair for session cookie payloads."""

    @abstractmethod
    def encode(self, data: Dict[str, Any]) -> str:
        """Encode session data as a cookie-safe string."""

    @abstractmethod
    def decode(self, value: str) -> Dict[str, Any]:
        """
        Decode a cookie value produced by :meth:`encode`.

        Raises
        ------
        :class:`.CorruptPayload`
            Raised if ``value`` is structurally malformed.

        """

    def load(self, value: str) -> DecodeResult:
        """
        Decode ``value``, classifying malformed input as corrupt.

        Any exception other than :class:`.CorruptPayload` propagates.
        """
        try:
            return DecodeResult(self.decode(value))
        except CorruptPayload as e:
            logger.debug('Corrupt session payload: %s', e)
            return DecodeResult(None, corrupt=True)


class Base64JSONCodec(Codec):
    """Base64-encoded JSON. Provides transport safety only; not signed."""

    def encode(self, data: Dict[str, Any]) -> str:
        """Encode session data as base64 JSON."""
        raw = json.dumps(data, separators=(',', ':'),
                         default=str).encode('utf-8')
        return b64encode(raw).decode('ascii')

    def decode(self, value: str) -> Dict[str, Any]:
        """Decode base64 JSON session data."""
        try:
            raw = b64decode(value.encode('ascii'), validate=True)
            data = json.loads(raw.decode('utf-8'))
        except (binascii.Error, UnicodeError, ValueError,
                RecursionError) as e:
            raise CorruptPayload(f'Session cookie is malformed: {e}') from e
        if not isinstance(data, dict):
            raise CorruptPayload('Session cookie does not contain an object')
        return data
