"""Defines the session state container handed to application code."""

from typing import Any, Dict, Iterator, Mapping, Optional, Union
from collections.abc import MutableMapping
import logging

logger = logging.getLogger(__name__)

EXPIRE_KEY = '_expire'
"""Reserved key holding the absolute expiry time (epoch milliseconds)."""

MAX_AGE_KEY = '_maxAge'
"""Reserved key holding the max-age (milliseconds) used to compute expiry."""

RESERVED_KEYS = frozenset([EXPIRE_KEY, MAX_AGE_KEY])

MaxAge = Union[int, str, None]


def _is_max_age(value: Any) -> bool:
    if value == 'session':
        return True
    return isinstance(value, int) and not isinstance(value, bool) \
        and value > 0


class Session(MutableMapping):
    """
    The data of one session, for the duration of one request.

    Behaves like a ``dict`` of JSON-serializable values. The reserved expiry
    fields are kept out of the mapping: they are written by
    :class:`arxiv.sessions.context.ContextSession` when the session is saved,
    and picked off again when it is loaded.

    Instances are created by the lifecycle controller; application code gets
    at the current one with :func:`arxiv.sessions.current_session`.
    """

    def __init__(self, context: Optional[Any] = None,
                 data: Optional[Mapping[str, Any]] = None) -> None:
        """
        Initialize with data loaded from a cookie or the session store.

        Parameters
        ----------
        context : :class:`arxiv.sessions.context.ContextSession`
            The controller that owns this session.
        data : dict
            Previously saved session data. ``None`` for a brand-new session.

        """
        self._context = context
        self._data: Dict[str, Any] = {}
        self._max_age: MaxAge = None

        self.force_save = False
        """If set, the session is persisted even if nothing changed."""

        self.expire: Optional[int] = None
        """Expiry time carried over from the loaded data, if any."""

        self.is_new = data is None
        """Whether this session was created without prior data."""

        for key, value in (data or {}).items():
            if key == MAX_AGE_KEY:
                # A lifetime set on an earlier request sticks to the session.
                if _is_max_age(value):
                    self._assign_max_age(value)
            elif key == EXPIRE_KEY:
                self.expire = value
            else:
                self._data[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in RESERVED_KEYS:
            raise KeyError(f'{key} is reserved for session bookkeeping')
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f'Session({self._data!r}, is_new={self.is_new})'

    @property
    def length(self) -> int:
        """Number of keys in the session."""
        return len(self._data)

    @property
    def populated(self) -> bool:
        """Whether the session holds any data."""
        return bool(self._data)

    @property
    def max_age(self) -> MaxAge:
        """
        Lifetime of this session in milliseconds, or ``'session'``.

        Setting it changes the lifetime for the current request and forces
        the session to be saved.
        """
        if self._context is not None:
            return self._context.max_age
        return self._max_age

    @max_age.setter
    def max_age(self, value: MaxAge) -> None:
        self._assign_max_age(value)
        self.force_save = True

    def _assign_max_age(self, value: MaxAge) -> None:
        if self._context is not None:
            self._context.max_age = value
        else:
            self._max_age = value

    def save(self) -> None:
        """Persist this session at commit time, whether or not it changed."""
        self.force_save = True

    def manually_commit(self) -> Any:
        """Commit the session now (for use with ``auto_commit`` disabled)."""
        if self._context is None:
            raise RuntimeError('Session is not bound to a request')
        return self._context.commit()

    def to_dict(self) -> Dict[str, Any]:
        """Get a plain copy of the session data, without reserved fields."""
        return dict(self._data)
