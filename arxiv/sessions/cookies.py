"""Reads the session cookie off the request and stages it for the response."""

from typing import Any, Dict, List, Optional, Tuple
import logging

from flask import Request, Response
from werkzeug.http import dump_cookie

logger = logging.getLogger(__name__)


class CookieJar(object):
    """
    Cookie transport for one request.

    Cookies set on the jar are rendered as ``Set-Cookie`` header values right
    away, and put on the response by :meth:`apply`. Setting the same cookie
    twice overwrites the earlier value.
    """

    def __init__(self, request: Request, **defaults: Any) -> None:
        """
        Bind the jar to a request.

        Parameters
        ----------
        request : :class:`flask.Request`
        defaults : kwargs
            Cookie attributes (``path``, ``domain``, ``secure``, ``httponly``,
            ``samesite``) applied to every cookie set on this jar.

        """
        self.request = request
        self.defaults = defaults
        self._staged: Dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        """Get the value of a cookie on the request."""
        return self.request.cookies.get(name)

    def set(self, name: str, value: str,
            max_age: Optional[int] = None) -> None:
        """
        Stage a cookie.

        Parameters
        ----------
        name : str
        value : str
            An empty value expires the cookie on the client.
        max_age : int
            Lifetime in seconds. ``None`` yields a browser-session cookie.

        """
        attrs = dict(self.defaults)
        if not value:
            attrs.update(max_age=0, expires=0)
        elif max_age is not None:
            attrs.update(max_age=max_age)
        self._staged[name] = dump_cookie(name, value, **attrs)

    def staged_headers(self) -> List[Tuple[str, str]]:
        """Get the headers for all staged cookies."""
        return [('Set-Cookie', header) for header in self._staged.values()]

    def apply(self, response: Response) -> Response:
        """Add staged cookies to ``response``, skipping any already there."""
        present = response.headers.getlist('Set-Cookie')
        for name, header in self.staged_headers():
            if header not in present:
                response.headers.add(name, header)
        return response
