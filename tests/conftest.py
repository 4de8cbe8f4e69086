"""
Pytest configuration and fixtures for CES gateway tests.
External services (identity service, monitoring API, PostgreSQL) are replaced with mocks.
"""
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from ces_gateway.app import create_app
from ces_gateway.auth import IdentityClient, TokenAuthenticator
from ces_gateway.config import GatewayConfig
from ces_gateway.database import DashboardDB
from ces_gateway.proxy import ProxyForwarder
from ces_gateway.signing import Credential, RequestSigner

CES_BASE = 'https://ces.example.com/V1.0'
IAM_BASE = 'https://iam.example.com/v3'
FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
FIXED_STAMP = '20240102T030405Z'


@pytest.fixture
def credential():
    """Signing credential used throughout the tests."""
    return Credential(access_key='AKID', secret_key='SECRET')


@pytest.fixture
def fixed_clock():
    """Clock pinned to FIXED_TIME."""
    return lambda: FIXED_TIME


@pytest.fixture
def signer(credential, fixed_clock):
    """Request signer with a fixed clock."""
    return RequestSigner(credential, clock=fixed_clock)


@pytest.fixture
def upstream_response():
    """Factory for fake streamed upstream responses."""
    def make(status_code, body=b'', content_type='application/json'):
        response = Mock()
        response.status_code = status_code
        response.headers = {'Content-Type': content_type} if content_type else {}
        chunks = [body[i:i + 4] for i in range(0, len(body), 4)]
        response.iter_content.return_value = iter(chunks)
        return response
    return make


@pytest.fixture
def upstream_session(upstream_response):
    """HTTP session standing in for the monitoring API; answers 200 by default."""
    session = Mock()
    session.request.return_value = upstream_response(200, b'{"metrics": []}')
    return session


@pytest.fixture
def forwarder(signer, upstream_session):
    """Forwarder pointed at the fake monitoring API."""
    return ProxyForwarder(CES_BASE, signer, session=upstream_session, timeout=10.0)


@pytest.fixture
def identity_client():
    """Identity client that accepts every token as user-1."""
    client = Mock(spec=IdentityClient)
    client.verify_token.return_value = 'user-1'
    return client


@pytest.fixture
def mock_db():
    """Dashboard storage mock."""
    return Mock(spec=DashboardDB)


@pytest.fixture
def gateway_config():
    return GatewayConfig(
        signer_key='AKID',
        signer_secret='SECRET',
        iam_api_base=IAM_BASE,
        ces_api_base=CES_BASE
    )


@pytest.fixture
def app(gateway_config, mock_db, identity_client, forwarder):
    """Flask application wired to mocks."""
    app = create_app(
        config=gateway_config,
        db=mock_db,
        authenticator=TokenAuthenticator(identity_client),
        forwarder=forwarder
    )
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def auth_headers():
    return {'X-Auth-Token': 'caller-token'}
