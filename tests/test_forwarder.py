"""
Unit tests for the monitoring API forwarder.
"""
from unittest.mock import Mock

import pytest
import requests

from ces_gateway.exceptions import InvalidRequest, MissingCredential, TransportFailure
from ces_gateway.proxy import ProxyForwarder
from ces_gateway.proxy.forwarder import UpstreamBody
from ces_gateway.signing import Credential, RequestSigner

CES_BASE = 'https://ces.example.com/V1.0'


class TestBuildRequest:
    """Test translation of inbound path/query into an outbound request."""

    def test_suffix_and_query_appended(self, forwarder):
        request = forwarder.build_request('metrics', 'from=0&to=10')

        assert request.method == 'GET'
        assert request.url == CES_BASE + '/metrics?from=0&to=10'
        assert request.headers['X-Stage'] == 'RELEASE'

    def test_empty_suffix_uses_base_url(self, forwarder):
        request = forwarder.build_request('', '')

        assert request.url == CES_BASE
        assert request.path == '/V1.0'

    def test_query_forwarded_verbatim(self, forwarder):
        request = forwarder.build_request('metric-data', 'dim.0=instance_id%2Cabc&namespace=SYS.ECS&b=2&a=1')

        assert request.query_string == 'dim.0=instance_id%2Cabc&namespace=SYS.ECS&b=2&a=1'
        assert request.url.endswith('?dim.0=instance_id%2Cabc&namespace=SYS.ECS&b=2&a=1')

    def test_nested_suffix(self, forwarder):
        request = forwarder.build_request('project-1/metrics', '')

        assert request.url == CES_BASE + '/project-1/metrics'

    def test_suffix_slashes_kept(self, forwarder):
        request = forwarder.build_request('/project-1//metrics/', '')

        assert request.url == CES_BASE + '//project-1//metrics/'

    def test_custom_stage(self, signer, upstream_session):
        forwarder = ProxyForwarder(CES_BASE, signer, session=upstream_session, stage='TEST')

        assert forwarder.build_request('metrics').headers['X-Stage'] == 'TEST'

    def test_malformed_query_rejected(self, forwarder):
        with pytest.raises(InvalidRequest):
            forwarder.build_request('metrics', 'x=%ff')


class TestForward:
    """Test signing and sending."""

    def test_single_signed_call(self, forwarder, upstream_session):
        forwarder.proxy('metrics', 'from=0&to=10')

        upstream_session.request.assert_called_once()
        args, kwargs = upstream_session.request.call_args
        assert args == ('GET', CES_BASE + '/metrics?from=0&to=10')
        assert kwargs['stream'] is True
        assert kwargs['timeout'] == 10.0
        assert kwargs['data'] is None

        headers = kwargs['headers']
        assert headers['X-Stage'] == 'RELEASE'
        assert headers['X-Sdk-Date'] == '20240102T030405Z'
        assert 'Access=AKID' in headers['Authorization']

    @pytest.mark.parametrize('status_code,body', [
        (200, b'{"metrics": [{"metric_name": "cpu_util"}]}'),
        (404, b'{"error": {"code": "ces.0004", "message": "not found"}}'),
        (503, b'Service Unavailable'),
    ])
    def test_status_and_body_passed_through(self, forwarder, upstream_session, upstream_response,
                                            status_code, body):
        upstream_session.request.return_value = upstream_response(status_code, body)

        result = forwarder.proxy('metrics')

        assert result.status_code == status_code
        assert b''.join(result.body) == body
        assert result.content_type == 'application/json'

    def test_missing_content_type(self, forwarder, upstream_session, upstream_response):
        upstream_session.request.return_value = upstream_response(204, b'', content_type=None)

        result = forwarder.proxy('metrics')

        assert result.content_type is None
        assert b''.join(result.body) == b''

    @pytest.mark.parametrize('error', [
        requests.ConnectionError('connection refused'),
        requests.Timeout('read timed out'),
        requests.exceptions.InvalidURL('bad host'),
    ])
    def test_transport_failure(self, forwarder, upstream_session, error):
        upstream_session.request.side_effect = error

        with pytest.raises(TransportFailure):
            forwarder.proxy('metrics')

        assert upstream_session.request.call_count == 1

    def test_signing_failure_prevents_call(self, upstream_session):
        signer = RequestSigner(Credential('', ''))
        forwarder = ProxyForwarder(CES_BASE, signer, session=upstream_session)

        with pytest.raises(MissingCredential):
            forwarder.proxy('metrics')

        upstream_session.request.assert_not_called()


class TestUpstreamBody:
    """Test release of the upstream connection."""

    def test_closed_after_iteration(self, upstream_response):
        response = upstream_response(200, b'0123456789')
        body = UpstreamBody(response)

        assert list(body) == [b'0123', b'4567', b'89']
        response.close.assert_called_once()

    def test_close_without_reading(self, upstream_response):
        response = upstream_response(200, b'0123456789')
        body = UpstreamBody(response)

        body.close()

        response.close.assert_called_once()
        response.iter_content.assert_not_called()

    def test_closed_when_reading_fails(self):
        response = Mock()
        response.iter_content.side_effect = requests.ConnectionError('reset')
        body = UpstreamBody(response)

        with pytest.raises(requests.ConnectionError):
            list(body)

        response.close.assert_called_once()
