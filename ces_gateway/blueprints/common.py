"""
Helpers shared by the protected blueprints.
"""
import logging
from flask import current_app, g, make_response, request

logger = logging.getLogger(__name__)


def text_response(message: str, status: int):
    """Plain-text response, used for every locally generated error."""
    return make_response(message, status, {'Content-Type': 'text/plain; charset=utf-8'})


def require_token():
    """
    before_request hook that authenticates the caller.

    On success the caller's user ID is stored in g.user_id. On failure the
    request is answered immediately, before any view code (and therefore
    any signing or forwarding) runs.
    """
    authenticator = current_app.config['AUTHENTICATOR']
    result = authenticator.authenticate(request.headers)

    if not result.allowed:
        logger.warning("Request denied", extra={
            'route': request.path,
            'method': request.method,
            'reason': result.reason
        })
        return text_response(result.message, result.status_code)

    g.user_id = result.user_id
    return None
