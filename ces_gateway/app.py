"""
Flask application for the CES gateway.

Authenticates callers against the identity service, proxies monitoring API
calls signed with the gateway's AK/SK credential, and stores per-user
dashboards.
"""
import sys
import signal
import logging
from typing import Optional
from flask import Flask, request
from dotenv import load_dotenv

# Load environment variables from .env file FIRST
load_dotenv()

import requests
from ces_gateway.auth import IdentityClient, TokenAuthenticator
from ces_gateway.blueprints import ces_bp, dashboards_bp, health_bp, metrics_bp
from ces_gateway.config import GatewayConfig
from ces_gateway.database import DashboardDB
from ces_gateway.monitoring import setup_json_logging
from ces_gateway.proxy import ProxyForwarder
from ces_gateway.signing import RequestSigner
from ces_gateway.utils import get_db_connection

logger = logging.getLogger(__name__)

UNLOGGED_PATHS = ('/health-check',)


def _create_forwarder(config: GatewayConfig, session: requests.Session) -> ProxyForwarder:
    """
    Create the monitoring API forwarder with the process credential.

    A missing credential does not stop start-up; every proxied call then
    fails with a local error instead.

    Args:
        config: Gateway configuration
        session: Shared HTTP session

    Returns:
        ProxyForwarder instance
    """
    credential = config.credential
    if not credential.is_complete():
        logger.warning("SIGNER_KEY or SIGNER_SECRET not set, CES proxy requests will fail")

    signer = RequestSigner(credential)
    return ProxyForwarder(
        config.ces_api_base,
        signer,
        session=session,
        stage=config.ces_stage,
        timeout=config.proxy_read_timeout
    )


def _create_authenticator(config: GatewayConfig, session: requests.Session) -> TokenAuthenticator:
    identity_client = IdentityClient(
        config.iam_api_base,
        session=session,
        timeout=config.proxy_read_timeout
    )
    return TokenAuthenticator(identity_client)


def _log_request(response):
    """Access log for every request except the health check."""
    if request.path not in UNLOGGED_PATHS:
        logger.info("Request handled", extra={
            'method': request.method,
            'route': request.path,
            'status': response.status_code
        })
    return response


def create_app(
    config: Optional[GatewayConfig] = None,
    db: Optional[DashboardDB] = None,
    authenticator: Optional[TokenAuthenticator] = None,
    forwarder: Optional[ProxyForwarder] = None
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Optional configuration (for testing). If None, read from env.
        db: Optional database instance (for testing). If None, creates new connection and migrates.
        authenticator: Optional token authenticator (for testing). If None, creates from config.
        forwarder: Optional CES forwarder (for testing). If None, creates from config.

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    setup_json_logging(app)

    if config is None:
        config = GatewayConfig.from_env()

    # Initialize database connection
    if db is None:
        db = get_db_connection(verbose=False)
        db.migrate()

    session = None
    if authenticator is None or forwarder is None:
        session = requests.Session()

    if authenticator is None:
        authenticator = _create_authenticator(config, session)

    if forwarder is None:
        forwarder = _create_forwarder(config, session)

    # Store in app config for access in route handlers
    app.config['GATEWAY_CONFIG'] = config
    app.config['DB'] = db
    app.config['AUTHENTICATOR'] = authenticator
    app.config['FORWARDER'] = forwarder

    # Register blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(ces_bp)
    app.register_blueprint(dashboards_bp)

    app.after_request(_log_request)

    return app


def _handle_termination(signum, frame):
    logger.info("Stopping CES gateway", extra={'signal': signal.Signals(signum).name})
    sys.exit(0)


def main():
    """Run the gateway until interrupted or terminated."""
    config = GatewayConfig.from_env()
    app = create_app(config=config)

    signal.signal(signal.SIGTERM, _handle_termination)
    signal.signal(signal.SIGINT, _handle_termination)

    logger.info("Starting CES gateway", extra={
        'port': config.port,
        'endpoints': ['/health-check', '/metrics', '/ces/*', '/dashboards']
    })
    app.run(host='0.0.0.0', port=config.port, debug=False, threaded=True)


if __name__ == '__main__':
    main()
