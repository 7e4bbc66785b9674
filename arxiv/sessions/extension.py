"""Flask integration for per-request sessions."""

from typing import Any, Mapping, Optional
import logging

from flask import Flask, Response, g, jsonify, request

from . import store as session_store
from .context import ContextSession
from .domain import Session
from .exceptions import DecodeFault, ConfigurationError
from .options import SessionOptions

logger = logging.getLogger(__name__)

STORE_BACKENDS = ('cookie', 'redis')


class Sessions(object):
    """
    Attaches a session lifecycle controller to each request.

    Intended for use in a Flask application factory, for example:

    .. code-block:: python

       from flask import Flask
       from arxiv.sessions import Sessions
       from someapp import routes


       def create_web_app() -> Flask:
          app = Flask('someapp')
          app.config.from_pyfile('config.py')
          Sessions(app, valid=lambda request, data: 'user_id' in data)
          app.register_blueprint(routes.blueprint)
          return app

    Views then use :func:`current_session` and :func:`set_session`.
    """

    def __init__(self, app: Optional[Flask] = None, **overrides: Any) -> None:
        """
        Initialize ``app`` with session handling.

        Parameters
        ----------
        app : :class:`Flask`
        overrides : kwargs
            Values for :class:`.SessionOptions` that take precedence over
            the application config; this is how callables (``genid``,
            ``valid``, ``before_save``, ``codec``, ``store``,
            ``store_factory``) are passed in.

        """
        self.overrides = overrides
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Attach :meth:`.load_session` and :meth:`.commit_session` to the app.

        Parameters
        ----------
        app : :class:`Flask`

        """
        self.app = app
        app.config.setdefault('SESSION_STORE', 'cookie')
        app.config.setdefault('SESSION_COOKIE_KEY', 'arxiv.sess')
        app.config.setdefault('SESSION_MAX_AGE', '86400000')
        app.config.setdefault('SESSION_ROLLING', '0')
        app.config.setdefault('SESSION_RENEW', '0')
        app.config.setdefault('SESSION_AUTO_COMMIT', '1')

        overrides = dict(self.overrides)
        backend = app.config['SESSION_STORE']
        if backend not in STORE_BACKENDS:
            raise ConfigurationError(f'Unknown session store: {backend}')
        if backend == 'redis' and 'store' not in overrides \
                and 'store_factory' not in overrides:
            session_store.init_app(app)
            overrides['store_factory'] = _redis_store_factory

        self.options = SessionOptions.from_config(app.config, **overrides)
        app.extensions['arxiv_sessions'] = self
        app.before_request(self.load_session)
        app.after_request(self.commit_session)
        app.register_error_handler(DecodeFault, handle_decode_fault)

    def load_session(self) -> None:
        """
        Bind a :class:`.ContextSession` to the request.

        With an external store, the session is loaded here, before the view
        runs. Cookie sessions are loaded lazily on first access.
        """
        context = ContextSession(request._get_current_object(), self.options)
        g.session_context = context
        if context.store is not None:
            context.init_from_external()

    def commit_session(self, response: Response) -> Response:
        """Commit the session (unless disabled) and set the cookie."""
        context: Optional[ContextSession] = g.get('session_context')
        if context is None:
            return response
        if self.options.auto_commit:
            action = context.commit()
            logger.debug('Session commit: %s', action.value)
        return context.cookies.apply(response)


def _redis_store_factory(_request: Any) -> session_store.SessionStore:
    return session_store.current_store()


def handle_decode_fault(error: DecodeFault) -> Response:
    """Render a :class:`.DecodeFault`, keeping the headers it carries."""
    response = jsonify(reason='Could not read session')
    response.status_code = 500
    for name, value in error.headers:
        response.headers.add(name, value)
    return response


def current_context() -> ContextSession:
    """Get the session lifecycle controller for this request."""
    context: Optional[ContextSession] = g.get('session_context')
    if context is None:
        raise RuntimeError('Session handling is not installed on this app')
    return context


def current_session() -> Optional[Session]:
    """Get the session for this request, if there is one."""
    return current_context().get()


def set_session(value: Optional[Mapping[str, Any]]) -> None:
    """Replace the session for this request, or clear it with ``None``."""
    current_context().set(value)
