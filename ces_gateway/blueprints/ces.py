"""
Monitoring API proxy blueprint.

Forwards GET /ces/<path>?<query> to {CES_API_BASE}/<path>?<query>, signed
with the gateway's AK/SK credential, and relays the upstream answer as is.
"""
import time
import logging
from flask import Blueprint, Response, current_app, request

from ces_gateway.exceptions import InvalidRequest, MissingCredential, SigningError, TransportFailure
from ces_gateway.monitoring import PROXY_REQUESTS_TOTAL, PROXY_DURATION_SECONDS, PROXY_ERRORS_TOTAL
from .common import require_token, text_response

logger = logging.getLogger(__name__)

ces_bp = Blueprint('ces', __name__)
ces_bp.before_request(require_token)


def _failure(e: Exception, message: str, status: int = 500):
    PROXY_ERRORS_TOTAL.labels(error_type=type(e).__name__).inc()
    logger.error("CES proxy error", extra={
        'route': request.path,
        'error_type': type(e).__name__,
        'error_message': str(e)
    })
    return text_response(message, status)


@ces_bp.route('/ces', defaults={'suffix': ''}, methods=['GET'], strict_slashes=False)
@ces_bp.route('/ces/<path:suffix>', methods=['GET'])
def proxy(suffix: str):
    """
    Proxy a monitoring API call.

    Returns:
        Upstream status code and body, unchanged, for any upstream answer
        400 Bad Request: Inbound query string is malformed
        500 Internal Server Error: Signing or transport failure
    """
    forwarder = current_app.config['FORWARDER']

    try:
        query_string = request.query_string.decode('utf-8')
        outbound = forwarder.build_request(suffix, query_string)
    except (UnicodeDecodeError, InvalidRequest) as e:
        return _failure(e, 'invalid request query', 400)

    start_time = time.time()
    try:
        upstream = forwarder.forward(outbound)
    except MissingCredential as e:
        return _failure(e, 'signing credential is not configured')
    except SigningError as e:
        return _failure(e, 'failed to sign request')
    except TransportFailure as e:
        return _failure(e, 'failed to do http request')

    PROXY_DURATION_SECONDS.observe(time.time() - start_time)
    PROXY_REQUESTS_TOTAL.labels(status=str(upstream.status_code)).inc()

    response = Response(upstream.body, status=upstream.status_code)
    if upstream.content_type:
        response.headers['Content-Type'] = upstream.content_type
    return response
