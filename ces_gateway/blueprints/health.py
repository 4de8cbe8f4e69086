"""
Health check endpoint blueprint.
"""
from flask import Blueprint, make_response

health_bp = Blueprint('health', __name__)


@health_bp.route('/health-check', methods=['GET'])
def health_check():
    """
    Liveness probe.

    Unauthenticated and excluded from access logging.

    Returns:
        200 OK with an empty body
    """
    return make_response('', 200)
