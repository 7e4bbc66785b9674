"""Helpers for session timekeeping, identifiers, and change detection."""

from typing import Any, Mapping
import hashlib
import json
import time
import uuid

ONE_DAY = 24 * 60 * 60 * 1000
"""Default session lifetime, in milliseconds."""

SESSION = 'session'
"""Max-age value meaning "until the browser session ends"."""


def now_ms() -> int:
    """Get the current epoch/unix time in milliseconds."""
    return int(time.time() * 1000)


def generate_id(prefix: str = '') -> str:
    """Generate a new external session key."""
    return f'{prefix}{uuid.uuid4()}'


def serialize(data: Mapping[str, Any]) -> str:
    """Render session data as canonical JSON."""
    return json.dumps(data, sort_keys=True, separators=(',', ':'),
                      default=str)


def fingerprint(data: Mapping[str, Any]) -> str:
    """
    Compute a digest of session data, for change detection.

    Parameters
    ----------
    data : dict
        Serializable session data. Key order does not matter.

    Returns
    -------
    str
        Hex-encoded SHA-256 digest of the canonical JSON form of ``data``.

    """
    return hashlib.sha256(serialize(data).encode('utf-8')).hexdigest()


def to_seconds(max_age_ms: int) -> int:
    """Convert a max-age in milliseconds to whole seconds (at least one)."""
    return max(1, int(max_age_ms // 1000))
