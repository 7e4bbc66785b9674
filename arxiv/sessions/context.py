"""
Per-request session lifecycle.

A :class:`ContextSession` is created for each request. It works out where
the session comes from (the cookie itself, or an external store keyed by the
cookie), whether what it finds is still usable, and, once the request has
been handled, whether the session should be saved, removed, or left alone.

The controller's reference to the session is always in one of three states
(see :class:`SessionRef`):

- ``UNRESOLVED``: nothing has touched the session yet. Commit does nothing.
- ``UNSET``: the application cleared the session. Commit removes it.
- ``ACTIVE``: there is a :class:`.Session`, either fresh or restored. Commit
  saves it if it changed (or if rolling/renewal/forced saving applies).
"""

from typing import Any, Dict, Mapping, Optional
from enum import Enum
import logging

from flask import Request

from .cookies import CookieJar
from .domain import Session, MaxAge, EXPIRE_KEY, MAX_AGE_KEY
from .exceptions import InvalidSessionValue, DecodeFault, ConfigurationError
from .options import SessionOptions, check_max_age
from .store import SessionStore
from .util import ONE_DAY, SESSION, fingerprint, now_ms, to_seconds

logger = logging.getLogger(__name__)


class SessionRef(Enum):
    """What the controller currently holds."""

    UNRESOLVED = 'unresolved'
    UNSET = 'unset'
    ACTIVE = 'active'


class CommitAction(Enum):
    """What :meth:`ContextSession.commit` did."""

    NO_OP = 'no-op'
    PERSIST = 'persist'
    REMOVE = 'remove'


class ContextSession(object):
    """Loads, tracks, and commits the session of one request."""

    def __init__(self, request: Request, options: SessionOptions,
                 cookies: Optional[CookieJar] = None) -> None:
        """
        Bind a controller to the current request.

        Parameters
        ----------
        request : :class:`flask.Request`
        options : :class:`.SessionOptions`
        cookies : :class:`.CookieJar`
            Cookie transport; one is created for ``request`` if not provided.

        """
        self.request = request
        self.options = options
        self.cookies = cookies or CookieJar(request,
                                            **options.cookie_options())
        self.store: Optional[SessionStore] = options.store
        if options.store_factory is not None:
            self.store = options.store_factory(request)
            if self.store is None:
                raise ConfigurationError('Store factory returned no store')

        self.state = SessionRef.UNRESOLVED
        self.session: Optional[Session] = None
        self.external_key: Optional[str] = None
        self.prev_hash: Optional[str] = None
        self._max_age: MaxAge = options.max_age

    @property
    def max_age(self) -> MaxAge:
        """Session lifetime for this request (ms, or ``'session'``)."""
        return self._max_age

    @max_age.setter
    def max_age(self, value: MaxAge) -> None:
        self._max_age = check_max_age(value)

    def get(self) -> Optional[Session]:
        """
        Get the session for this request, loading it on first access.

        Returns
        -------
        :class:`.Session` or None
            ``None`` if the session was unset, or if a store is configured
            but :meth:`init_from_external` has not run.

        """
        if self.state is SessionRef.ACTIVE:
            return self.session
        if self.state is SessionRef.UNSET:
            return None
        if self.store is None:
            self.init_from_cookie()
        return self.session

    def set(self, value: Optional[Mapping[str, Any]]) -> None:
        """
        Replace or clear the session.

        Parameters
        ----------
        value : dict or None
            ``None`` removes the session at commit time. A mapping becomes
            the new session data, keeping the current external key.

        Raises
        ------
        :class:`.InvalidSessionValue`

        """
        if value is None:
            self.state = SessionRef.UNSET
            self.session = None
            return
        if isinstance(value, Mapping):
            # Keep the external key so the old store entry is not orphaned.
            self.create(value, self.external_key)
            return
        raise InvalidSessionValue('The session can only be set to None or a'
                                  f' mapping, not {type(value).__name__}')

    def init_from_external(self) -> None:
        """Load the session from the external store."""
        logger.debug('Init from external store')
        if self.store is None:
            raise ConfigurationError('No session store is configured')
        external_key = self.cookies.get(self.options.key)
        logger.debug('Got external key from cookie: %s', external_key)
        if not external_key:
            self.create()
            return

        data = self.store.get(external_key, self.max_age,
                              rolling=self.options.rolling)
        if not self.valid(data):
            self.create()
            return

        self.create(data, external_key)
        self.prev_hash = fingerprint(self.session.to_dict())

    def init_from_cookie(self) -> None:
        """Load the session from the data carried by the cookie itself."""
        logger.debug('Init from cookie')
        key = self.options.key
        cookie = self.cookies.get(key)
        if not cookie:
            self.create()
            return

        logger.debug('Parse %s', cookie)
        try:
            result = self.options.codec.load(cookie)
        except Exception as e:
            logger.error('Failed to decode session cookie: %s', e)
            # Clear the cookie so the next request does not fail the same way.
            self.cookies.set(key, '')
            raise DecodeFault(f'Failed to decode session cookie: {e}',
                              headers=self.cookies.staged_headers()) from e

        if result.corrupt or not self.valid(result.data):
            self.create()
            return

        logger.debug('Parsed %s', result.data)
        self.create(result.data)
        self.prev_hash = fingerprint(self.session.to_dict())

    def valid(self, data: Optional[Mapping[str, Any]]) -> bool:
        """
        Check whether loaded session data may be used.

        Data is not usable if it is missing, if it has expired, or if the
        ``valid`` option rejects it.
        """
        if data is None or not isinstance(data, Mapping):
            return False
        expire = data.get(EXPIRE_KEY)
        if isinstance(expire, (int, float)) and expire < now_ms():
            logger.debug('Expired session')
            return False
        if self.options.valid is not None \
                and not self.options.valid(self.request, dict(data)):
            logger.debug('Invalid session')
            return False
        return True

    def create(self, data: Optional[Mapping[str, Any]] = None,
               external_key: Optional[str] = None) -> Session:
        """
        Make ``data`` the active session.

        Parameters
        ----------
        data : dict
            Session data; omit for a new, empty session.
        external_key : str
            Key of the session in the store. A new key is generated if a
            store is configured and no key is given.

        Returns
        -------
        :class:`.Session`

        """
        logger.debug('Create session with data: %s, external key: %s',
                     data, external_key)
        if self.store is not None:
            self.external_key = external_key or self.options.generate_key()
        self.session = Session(self, data)
        self.state = SessionRef.ACTIVE
        return self.session

    def commit(self) -> CommitAction:
        """
        Save or remove the session, if needed.

        Called once, after the request has been handled.

        Returns
        -------
        :class:`.CommitAction`

        """
        if self.state is SessionRef.UNRESOLVED:
            return CommitAction.NO_OP
        if self.state is SessionRef.UNSET:
            self.remove()
            return CommitAction.REMOVE

        session = self.session
        changed = True
        if not session.force_save:
            data = session.to_dict()
            # Nothing to keep: new and never populated.
            if self.prev_hash is None and not data:
                return CommitAction.NO_OP
            changed = self.prev_hash != fingerprint(data)
            if not changed and not self.options.rolling \
                    and not self._should_renew():
                return CommitAction.NO_OP

        if self.options.before_save is not None:
            logger.debug('Before save')
            self.options.before_save(self.request, session)
        self.save(changed)
        return CommitAction.PERSIST

    def _should_renew(self) -> bool:
        """Whether less than half of the session lifetime remains."""
        if not self.options.renew:
            return False
        expire = self.session.expire
        max_age = self.max_age
        if not isinstance(expire, (int, float)) \
                or not isinstance(max_age, int):
            return False
        return expire - now_ms() < max_age / 2

    def save(self, changed: bool) -> None:
        """Write the session to the store or the cookie."""
        key = self.options.key
        data: Dict[str, Any] = self.session.to_dict()
        max_age = self.max_age or ONE_DAY
        cookie_max_age: Optional[int] = None
        if max_age != SESSION:
            data[EXPIRE_KEY] = now_ms() + max_age
            data[MAX_AGE_KEY] = max_age
            cookie_max_age = to_seconds(max_age)

        if self.external_key:
            logger.debug('Save %s to external key %s', data, self.external_key)
            self.store.set(self.external_key, data, max_age,
                           changed=changed, rolling=self.options.rolling)
            self.cookies.set(key, self.external_key, max_age=cookie_max_age)
            return

        logger.debug('Save %s to cookie', data)
        value = self.options.codec.encode(data)
        self.cookies.set(key, value, max_age=cookie_max_age)

    def remove(self) -> None:
        """Destroy the session in the store, if any, and clear the cookie."""
        if self.external_key:
            logger.debug('Destroy external key %s', self.external_key)
            self.store.destroy(self.external_key)
        self.cookies.set(self.options.key, '')
