"""
Monitoring and observability configuration.

Provides Prometheus metrics and structured logging for the gateway.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
import logging
import os
from pythonjsonlogger import jsonlogger


# Prometheus Metrics
PROXY_REQUESTS_TOTAL = Counter(
    'ces_proxy_requests_total',
    'Total number of proxied monitoring API requests',
    ['status']
)

PROXY_DURATION_SECONDS = Histogram(
    'ces_proxy_duration_seconds',
    'Time until the upstream monitoring API answered, in seconds',
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

PROXY_ERRORS_TOTAL = Counter(
    'ces_proxy_errors_total',
    'Total number of proxy requests that failed before an upstream answer',
    ['error_type']
)

TOKEN_CHECKS_TOTAL = Counter(
    'token_checks_total',
    'Total number of caller token checks',
    ['result']
)

DB_CONNECTION_POOL = Gauge(
    'db_connection_pool_connections',
    'Database connection pool status',
    ['state']
)


def setup_json_logging(app):
    """
    Configure JSON structured logging for the application.

    Args:
        app: Flask application instance
    """
    # Create JSON formatter
    log_handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )
    log_handler.setFormatter(formatter)

    # Get log level from environment variable (default: INFO)
    log_level_name = os.environ.get('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_name, logging.INFO)

    # Configure Flask logger
    app.logger.handlers = []
    app.logger.addHandler(log_handler)
    app.logger.setLevel(log_level)

    # Configure root logger
    logging.root.handlers = []
    logging.root.addHandler(log_handler)
    logging.root.setLevel(log_level)

    return app.logger


def get_metrics():
    """
    Generate Prometheus metrics in exposition format.

    Returns:
        Tuple of (metrics_data, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
