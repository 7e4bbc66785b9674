"""Provides an app factory for a session-enabled app."""

from typing import Any

from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException, BadRequest, NotFound, \
    MethodNotAllowed

from . import routes
from .app_logging import setup_logger
from .extension import Sessions
from .options import as_flag


def jsonify_exception(error: HTTPException) -> Response:
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_web_app(**overrides: Any) -> Flask:
    """Initialize an instance of the session demo app."""
    app = Flask('arxiv.sessions')
    app.config.from_pyfile('config.py')
    if as_flag(app.config.get('SESSION_JSON_LOGGING')):
        setup_logger()

    Sessions(app, **overrides)

    app.register_blueprint(routes.blueprint)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    return app
