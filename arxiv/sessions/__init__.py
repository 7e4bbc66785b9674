"""
Per-request session handling for arXiv-NG Flask applications.

Session data is either carried in the session cookie itself (encoded by a
:class:`.Codec`), or kept in an external :class:`.SessionStore` with the
cookie carrying only an opaque key. For each request, a
:class:`.ContextSession` loads the session (lazily in cookie mode, up front
in store mode), hands it to the application, and at the end of the request
decides whether to save it, remove it, or leave it alone:

- a session that was never touched, or that is new and still empty, is not
  written;
- a loaded session is written only if its content changed, unless rolling
  expiry (``SESSION_ROLLING``) or renewal (``SESSION_RENEW``) applies, or
  the application called :meth:`.Session.save`;
- a session set to ``None`` is removed from the store and its cookie cleared.

Expired, malformed, or rejected (see the ``valid`` option) session data is
silently replaced with a fresh, empty session.

Quick start
-----------

.. code-block:: python

   # yourapp/factory.py
   from flask import Flask
   from arxiv.sessions import Sessions


   def create_web_app() -> Flask:
       app = Flask('foo')
       app.config['SESSION_STORE'] = 'redis'    # Or 'cookie' (the default).
       Sessions(app)
       return app


   # yourapp/routes.py
   from arxiv.sessions import current_session, set_session

   @blueprint.route('/visit')
   def visit():
       session = current_session()
       session['visits'] = session.get('visits', 0) + 1
       ...
"""

from .codec import Codec, Base64JSONCodec, DecodeResult
from .context import ContextSession, SessionRef, CommitAction
from .domain import Session
from .extension import Sessions, current_context, current_session, \
    set_session
from .options import SessionOptions
from .store import SessionStore, RedisStore
