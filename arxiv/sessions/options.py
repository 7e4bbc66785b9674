"""Options that govern session handling."""

from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Union

from flask import Request

from .codec import Codec, Base64JSONCodec
from .domain import Session
from .exceptions import ConfigurationError
from .store import SessionStore
from .util import ONE_DAY, SESSION, generate_id

MaxAge = Union[int, str, None]
Validator = Callable[[Request, Dict[str, Any]], bool]
BeforeSave = Callable[[Request, Session], None]
StoreFactory = Callable[[Request], SessionStore]

SAMESITE_VALUES = ('Strict', 'Lax', 'None')


def as_flag(value: Any) -> bool:
    """Interpret a config value such as ``"1"`` or ``"true"`` as a bool."""
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class SessionOptions(NamedTuple):
    """Configuration for a :class:`arxiv.sessions.context.ContextSession`."""

    key: str = 'arxiv.sess'
    """Name of the session cookie."""

    max_age: MaxAge = ONE_DAY
    """Session lifetime in milliseconds, or ``'session'``."""

    rolling: bool = False
    """Re-persist the session on every request, even if unchanged."""

    renew: bool = False
    """Re-persist an unchanged session once half its lifetime has passed."""

    auto_commit: bool = True
    """Commit the session automatically when the response is finalized."""

    prefix: str = ''
    """Prefix for generated external keys."""

    genid: Optional[Callable[[], str]] = None
    """Generates external keys; defaults to a prefixed UUID4."""

    valid: Optional[Validator] = None
    """Extra check on loaded data; returning false discards the session."""

    before_save: Optional[BeforeSave] = None
    """Called with the request and session just before it is persisted."""

    codec: Codec = Base64JSONCodec()
    """Encodes session data for the cookie when there is no store."""

    store: Optional[SessionStore] = None
    """External store; when set, the cookie carries only the key."""

    store_factory: Optional[StoreFactory] = None
    """Builds a store for each request; takes precedence over ``store``."""

    path: str = '/'
    domain: Optional[str] = None
    secure: bool = False
    httponly: bool = True
    samesite: Optional[str] = 'Lax'

    @property
    def has_store(self) -> bool:
        """Whether session data is kept in an external store."""
        return self.store is not None or self.store_factory is not None

    def generate_key(self) -> str:
        """Generate a new external key."""
        if self.genid is not None:
            return self.genid()
        return generate_id(self.prefix)

    def cookie_options(self) -> Dict[str, Any]:
        """Attributes applied to the session cookie."""
        return {'path': self.path, 'domain': self.domain,
                'secure': self.secure, 'httponly': self.httponly,
                'samesite': self.samesite}

    def validate(self) -> 'SessionOptions':
        """Check option values; returns ``self`` for chaining."""
        if not self.key:
            raise ConfigurationError('Session cookie key is required')
        check_max_age(self.max_age)
        if self.samesite is not None and self.samesite not in SAMESITE_VALUES:
            raise ConfigurationError(f'Invalid samesite: {self.samesite}')
        return self

    @classmethod
    def from_config(cls, config: Mapping[str, Any],
                    **overrides: Any) -> 'SessionOptions':
        """
        Build options from Flask configuration.

        Parameters
        ----------
        config : dict
            Typically ``app.config``. See :mod:`arxiv.sessions.config`.
        overrides : kwargs
            Values (typically callables) that take precedence over config.

        Returns
        -------
        :class:`.SessionOptions`

        """
        params: Dict[str, Any] = {
            'key': config.get('SESSION_COOKIE_KEY',
                              cls._field_defaults['key']),
            'max_age': parse_max_age(config.get('SESSION_MAX_AGE', ONE_DAY)),
            'rolling': as_flag(config.get('SESSION_ROLLING', False)),
            'renew': as_flag(config.get('SESSION_RENEW', False)),
            'auto_commit': as_flag(config.get('SESSION_AUTO_COMMIT', True)),
            'prefix': config.get('SESSION_KEY_PREFIX', '') or '',
            'path': config.get('SESSION_COOKIE_PATH', '/') or '/',
            'domain': config.get('SESSION_COOKIE_DOMAIN') or None,
            'secure': as_flag(config.get('SESSION_COOKIE_SECURE', False)),
            'httponly': as_flag(config.get('SESSION_COOKIE_HTTPONLY', True)),
            'samesite': config.get('SESSION_COOKIE_SAMESITE', 'Lax') or None,
        }
        params.update(overrides)
        return cls(**params).validate()


def parse_max_age(value: MaxAge) -> MaxAge:
    """Interpret a configured max-age (ms as int or string, or 'session')."""
    if value is None or value == '':
        return ONE_DAY
    if isinstance(value, str):
        if value.strip().lower() == SESSION:
            return SESSION
        try:
            value = int(value)
        except ValueError as e:
            raise ConfigurationError(f'Invalid max age: {value}') from e
    return check_max_age(value)


def check_max_age(value: MaxAge) -> MaxAge:
    """Make sure that ``value`` is a usable max-age."""
    if value is None or value == SESSION:
        return value
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f'Invalid max age: {value!r}')
    return value
