"""
Prometheus metrics endpoint blueprint.

Exposes metrics for monitoring and alerting.
"""
from flask import Blueprint, Response
from ces_gateway.monitoring import get_metrics

metrics_bp = Blueprint('metrics', __name__)


@metrics_bp.route('/metrics', methods=['GET'])
def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Returns Prometheus-formatted metrics:
    - ces_proxy_requests_total: Proxied requests by upstream status
    - ces_proxy_duration_seconds: Time until the upstream answered
    - ces_proxy_errors_total: Proxy failures before an upstream answer, by type
    - token_checks_total: Caller token checks by result
    - db_connection_pool_connections: Database connection pool status

    Returns:
        200 OK: Metrics in Prometheus exposition format
    """
    metrics_data, content_type = get_metrics()
    return Response(metrics_data, mimetype=content_type)
