"""
Transparent forwarding of monitoring API calls to the upstream service.
"""
import logging
from typing import Iterable, Iterator, Optional
from dataclasses import dataclass
from urllib.parse import quote

import requests

from ces_gateway.exceptions import TransportFailure
from ces_gateway.signing import OutboundRequest, RequestSigner, parse_query_string

logger = logging.getLogger(__name__)

HEADER_STAGE = 'X-Stage'
CHUNK_SIZE = 64 * 1024


@dataclass
class UpstreamResponse:
    """
    Upstream answer relayed to the caller without interpretation.

    Attributes:
        status_code: Status code returned by the upstream
        content_type: Upstream Content-Type header, if any
        body: Iterator over body chunks; the upstream connection is released
              once it is exhausted or closed
    """
    status_code: int
    content_type: Optional[str]
    body: Iterable[bytes]


class UpstreamBody:
    """
    Iterable over an upstream response body.

    The underlying connection is released when iteration ends or when
    close() is called, whichever comes first. WSGI servers call close() when
    the caller disconnects, which cancels the upstream read.
    """

    def __init__(self, response: requests.Response, chunk_size: int = CHUNK_SIZE):
        self.response = response
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self.response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk
        finally:
            self.close()

    def close(self) -> None:
        self.response.close()


class ProxyForwarder:
    """
    Forwards inbound wildcard paths to the upstream API with signed requests.

    Every forwarded call is signed exactly once and sent exactly once; there
    are no retries. Whatever status the upstream answers with is passed back
    unchanged, only failures before a response exists raise.
    """

    def __init__(
        self,
        base_url: str,
        signer: RequestSigner,
        session: Optional[requests.Session] = None,
        stage: str = 'RELEASE',
        timeout: Optional[float] = 10.0
    ):
        """
        Initialize the forwarder.

        Args:
            base_url: Upstream base URL (e.g. 'https://ces.example.com/V1.0')
            signer: Request signer holding the process credential
            session: HTTP session (default: new requests.Session)
            stage: Value of the X-Stage header
            timeout: Read timeout in seconds for the upstream call
        """
        self.base_url = base_url.rstrip('/')
        self.signer = signer
        self.session = session or requests.Session()
        self.stage = stage
        self.timeout = timeout

    def build_url(self, suffix: str, query_string: str = '') -> str:
        url = self.base_url
        if suffix:
            url += '/' + quote(suffix, safe='/')
        if query_string:
            url += '?' + query_string
        return url

    def build_request(self, suffix: str, query_string: str = '') -> OutboundRequest:
        """
        Translate an inbound wildcard suffix and query string into an outbound request.

        Args:
            suffix: Decoded path suffix after the proxy prefix (may be empty)
            query_string: Raw inbound query string, forwarded verbatim

        Returns:
            Unsigned OutboundRequest

        Raises:
            InvalidRequest: If the inbound query string is malformed
        """
        parse_query_string(query_string)

        request = OutboundRequest.from_url('GET', self.build_url(suffix, query_string))
        request.headers[HEADER_STAGE] = self.stage
        return request

    def forward(self, request: OutboundRequest) -> UpstreamResponse:
        """
        Sign and send a request, returning the upstream response as a stream.

        Args:
            request: Request produced by build_request()

        Returns:
            UpstreamResponse; the caller must exhaust or close its body

        Raises:
            SigningError: If the request cannot be signed
            TransportFailure: If the upstream cannot be reached
        """
        signed = self.signer.sign(request)

        logger.info("CES request", extra={'url': signed.url, 'method': signed.method})

        try:
            response = self.session.request(
                signed.method,
                signed.url,
                headers=signed.headers,
                data=signed.body or None,
                stream=True,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportFailure(f"failed to do http request: {e}") from e

        return UpstreamResponse(
            status_code=response.status_code,
            content_type=response.headers.get('Content-Type'),
            body=UpstreamBody(response)
        )

    def proxy(self, suffix: str, query_string: str = '') -> UpstreamResponse:
        """Build, sign and send in one step."""
        return self.forward(self.build_request(suffix, query_string))
