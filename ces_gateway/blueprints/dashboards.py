"""
Dashboard CRUD blueprint.

Every operation is scoped to the authenticated caller (g.user_id).
"""
import json
import logging
from flask import Blueprint, current_app, g, jsonify, make_response, request

from ces_gateway.exceptions import DashboardConflict
from ces_gateway.models.dashboard import Dashboard
from .common import require_token, text_response

logger = logging.getLogger(__name__)

dashboards_bp = Blueprint('dashboards', __name__)
dashboards_bp.before_request(require_token)


def _parse_id(raw: str):
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_body():
    """Decode the request body into a Dashboard; None when it is not valid."""
    try:
        return Dashboard.from_dict(json.loads(request.get_data(as_text=True)))
    except ValueError:
        return None


def _db_error(e: Exception, action: str):
    logger.error("Dashboard storage error", extra={
        'action': action,
        'user_id': g.user_id,
        'error_type': type(e).__name__,
        'error_message': str(e)
    }, exc_info=True)
    return text_response(f'failed to {action} dashboard in db', 500)


@dashboards_bp.route('/dashboards', methods=['GET'])
def list_dashboards():
    """
    List the caller's dashboards.

    Returns:
        200 OK: {"dashboard": [{"id": ..., "name": ..., "graphs": ...}, ...]}
    """
    db = current_app.config['DB']
    try:
        dashboards = db.load_dashboards(g.user_id)
    except Exception as e:
        return _db_error(e, 'load')

    return jsonify({'dashboard': [d.to_dict() for d in dashboards]})


@dashboards_bp.route('/dashboards/<dashboard_id>', methods=['GET'])
def get_dashboard(dashboard_id: str):
    """
    Fetch one of the caller's dashboards.

    Returns:
        200 OK: {"dashboard": {...}}
        400 Bad Request: ID is not an integer
        404 Not Found: No such dashboard for this caller
    """
    parsed_id = _parse_id(dashboard_id)
    if parsed_id is None:
        return text_response('failed to parse dashboard ID', 400)

    db = current_app.config['DB']
    try:
        dashboard = db.load_dashboard(g.user_id, parsed_id)
    except Exception as e:
        return _db_error(e, 'get')

    if dashboard is None:
        return make_response('', 404)

    return jsonify({'dashboard': dashboard.to_dict()})


@dashboards_bp.route('/dashboards/<dashboard_id>', methods=['DELETE'])
def delete_dashboard(dashboard_id: str):
    """
    Delete one of the caller's dashboards. Deleting a missing dashboard is not an error.

    Returns:
        200 OK
        400 Bad Request: ID is not an integer
    """
    parsed_id = _parse_id(dashboard_id)
    if parsed_id is None:
        return text_response('failed to parse dashboard ID', 400)

    db = current_app.config['DB']
    try:
        db.delete_dashboard(g.user_id, parsed_id)
    except Exception as e:
        return _db_error(e, 'delete')

    return make_response('', 200)


@dashboards_bp.route('/dashboards', methods=['POST'])
def create_dashboard():
    """
    Create a dashboard for the caller.

    Body: {"name": "...", "graphs": <any JSON>}

    Returns:
        200 OK: {"id": <new id>}
        400 Bad Request: Body is not a valid dashboard
        409 Conflict: Caller already has a dashboard with this name
    """
    dashboard = _parse_body()
    if dashboard is None:
        return text_response('failed to JSON unmarshal dashboard', 400)

    db = current_app.config['DB']
    try:
        dashboard_id = db.create_dashboard(g.user_id, dashboard)
    except DashboardConflict as e:
        return text_response(str(e), 409)
    except Exception as e:
        return _db_error(e, 'insert')

    logger.info("Dashboard created", extra={'user_id': g.user_id, 'dashboard_id': dashboard_id})
    return jsonify({'id': dashboard_id})


@dashboards_bp.route('/dashboards', methods=['PUT'])
def update_dashboard():
    """
    Replace name and graphs of one of the caller's dashboards.

    Body: {"id": ..., "name": "...", "graphs": <any JSON>}

    Returns:
        200 OK
        400 Bad Request: Body is not a valid dashboard or has no ID
        404 Not Found: No such dashboard for this caller
        409 Conflict: The new name clashes with another of the caller's dashboards
    """
    dashboard = _parse_body()
    if dashboard is None or dashboard.id is None:
        return text_response('failed to JSON unmarshal dashboard', 400)

    db = current_app.config['DB']
    try:
        updated = db.update_dashboard(g.user_id, dashboard)
    except DashboardConflict as e:
        return text_response(str(e), 409)
    except Exception as e:
        return _db_error(e, 'update')

    if not updated:
        return make_response('', 404)

    return make_response('', 200)
