"""Demo routes for inspecting and manipulating the current session."""

from typing import Any, Dict, Tuple

from flask import Blueprint, request, jsonify, Response
from werkzeug.exceptions import BadRequest
import logging

from .domain import RESERVED_KEYS
from .extension import current_session, set_session

logger = logging.getLogger(__name__)

blueprint = Blueprint('sessions', __name__, url_prefix='')


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        logger.error('Session payload is not a JSON object')
        raise BadRequest('Expected a JSON object')
    reserved = RESERVED_KEYS.intersection(data)
    if reserved:
        logger.error('Session payload sets reserved keys: %s', reserved)
        raise BadRequest(f'Reserved keys: {", ".join(sorted(reserved))}')
    return data


@blueprint.route('/session', methods=['GET'])
def get_session() -> Response:
    """Show the current session."""
    session = current_session()
    if session is None:
        return jsonify(session=None)
    return jsonify(session=session.to_dict(), is_new=session.is_new)


@blueprint.route('/session', methods=['POST'])
def update_session() -> Response:
    """Merge a JSON object into the current session."""
    data = _payload()
    session = current_session()
    if session is None:
        set_session(data)
        session = current_session()
    else:
        session.update(data)
    return jsonify(session=session.to_dict())


@blueprint.route('/session', methods=['PUT'])
def replace_session() -> Response:
    """Replace the current session with a JSON object."""
    set_session(_payload())
    return jsonify(session=current_session().to_dict())


@blueprint.route('/session', methods=['DELETE'])
def delete_session() -> Tuple[str, int]:
    """Clear the current session."""
    set_session(None)
    return '', 204
