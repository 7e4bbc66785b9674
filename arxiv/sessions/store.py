"""
External session stores.

In store mode the session cookie carries only an opaque key, and the session
data itself lives in a key-value store. :class:`SessionStore` is the contract
that the lifecycle controller depends on; :class:`RedisStore` implements it
on top of Redis.
"""

from typing import Any, Dict, Optional, Union
from abc import ABC, abstractmethod
import json
import logging

from flask import Flask, current_app, g
import redis
from redis.cluster import RedisCluster, ClusterNode

from .exceptions import StoreReadFailed, StoreWriteFailed, \
    StoreDeletionFailed, ConfigurationError
from .util import ONE_DAY, SESSION, to_seconds

logger = logging.getLogger(__name__)

MaxAge = Union[int, str, None]


class SessionStore(ABC):
    """Capabilities required of an external session store."""

    @abstractmethod
    def get(self, key: str, max_age: MaxAge,
            rolling: bool = False) -> Optional[Dict[str, Any]]:
        """
        Fetch session data by external key.

        Parameters
        ----------
        key : str
            External session key.
        max_age : int or str
            Session lifetime in milliseconds, or ``'session'``.
        rolling : bool
            If set, the store may extend the lifetime of the entry.

        Returns
        -------
        dict or None
            ``None`` if there is no such session.

        """

    @abstractmethod
    def set(self, key: str, data: Dict[str, Any], max_age: MaxAge,
            changed: bool = True, rolling: bool = False) -> None:
        """
        Write session data under an external key.

        ``changed`` and ``rolling`` let the store skip redundant work when
        only the lifetime of the entry needs refreshing.
        """

    @abstractmethod
    def destroy(self, key: str) -> None:
        """Delete a session. Deleting a missing key is not an error."""


class RedisStore(SessionStore):
    """
    Keeps sessions in Redis, as JSON.

    Each entry is stored under its external key with a TTL derived from the
    session max-age, so Redis expires abandoned sessions on its own. One
    instance is shared by all requests in an application context (see
    :func:`current_store`).
    """

    def __init__(self, host: str, port: int, db: int = 0,
                 cluster: bool = False) -> None:
        """Open the connection to Redis."""
        logger.debug('New Redis connection at %s, port %s', host, port)
        if cluster:
            self.r = RedisCluster(
                startup_nodes=[ClusterNode(host, port)],
                skip_full_coverage_check=True
            )
        else:
            self.r = redis.StrictRedis(host=host, port=port, db=db)

    @staticmethod
    def _ttl(max_age: MaxAge) -> int:
        if max_age is None or max_age == SESSION:
            return to_seconds(ONE_DAY)
        return to_seconds(int(max_age))

    def get(self, key: str, max_age: MaxAge,
            rolling: bool = False) -> Optional[Dict[str, Any]]:
        """Fetch session data by key; refresh its TTL if ``rolling``."""
        try:
            raw = self.r.get(key)
            if raw and rolling:
                self.r.expire(key, self._ttl(max_age))
        except redis.exceptions.ConnectionError as e:
            raise StoreReadFailed(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreReadFailed(f'Failed to read: {e}') from e
        if not raw:
            logger.debug('No such session: %s', key)
            return None
        try:
            data: Dict[str, Any] = json.loads(raw)
        except (ValueError, RecursionError):
            logger.error('Invalid or corrupted session: %s', key)
            return None
        return data

    def set(self, key: str, data: Dict[str, Any], max_age: MaxAge,
            changed: bool = True, rolling: bool = False) -> None:
        """Write session data; when unchanged, just refresh the TTL."""
        ttl = self._ttl(max_age)
        try:
            if not changed and self.r.expire(key, ttl):
                logger.debug('Refreshed TTL of session %s', key)
                return
            self.r.set(key, json.dumps(data, default=str), ex=ttl)
        except redis.exceptions.ConnectionError as e:
            raise StoreWriteFailed(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreWriteFailed(f'Failed to write: {e}') from e

    def destroy(self, key: str) -> None:
        """Delete a session in Redis by key."""
        try:
            self.r.delete(key)
        except redis.exceptions.ConnectionError as e:
            raise StoreDeletionFailed(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise StoreDeletionFailed(f'Failed to delete: {e}') from e


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('REDIS_HOST', 'localhost')
    app.config.setdefault('REDIS_PORT', '6379')
    app.config.setdefault('REDIS_DATABASE', '0')
    app.config.setdefault('REDIS_CLUSTER', '0')


def get_redis_store(app: Optional[Flask] = None) -> RedisStore:
    """Get a new connection to the Redis session store."""
    config = (app or current_app).config
    try:
        host = config['REDIS_HOST']
        port = int(config['REDIS_PORT'])
        db = int(config.get('REDIS_DATABASE', '0'))
    except (KeyError, ValueError) as e:
        raise ConfigurationError('Missing or invalid Redis config') from e
    cluster = str(config.get('REDIS_CLUSTER', '0')) == '1'
    return RedisStore(host, port, db, cluster=cluster)


def current_store() -> RedisStore:
    """Get/create the :class:`.RedisStore` for this context."""
    if 'session_store' not in g:
        g.session_store = get_redis_store()
    return g.session_store    # type: ignore
