"""
Canonical request construction for SDK-HMAC-SHA256 signing.

The canonical request is the exact byte sequence both sides hash. The
remote service rejects a mismatching signature without further detail.

Layout, one field per line:

    METHOD
    /canonical/uri/
    canonical=query&string=
    header-a:value
    header-b:value
    <blank line>
    header-a;header-b
    hex(sha256(body))
"""
import hashlib
from typing import List, Optional
from urllib.parse import quote

from ces_gateway.exceptions import InvalidRequest
from .models import OutboundRequest

HEADER_AUTHORIZATION = 'Authorization'
HEADER_CONTENT_SHA256 = 'X-Sdk-Content-Sha256'

EMPTY_PAYLOAD_HASH = hashlib.sha256(b'').hexdigest()


def uri_escape(value: str) -> str:
    """
    Percent-encode everything except RFC 3986 unreserved characters.

    Escapes use upper-case hex digits over the UTF-8 encoding.
    """
    return quote(value, safe='~')


def hex_sha256(data: bytes) -> str:
    """Lower-case hex SHA-256 digest."""
    return hashlib.sha256(data).hexdigest()


class CanonicalRequestBuilder:
    """
    Builds the canonical form of an OutboundRequest.

    Stateless; a single instance can be shared between threads.
    """

    def signed_header_names(self, request: OutboundRequest) -> List[str]:
        """
        Names of the headers covered by the signature.

        Every header on the request is signed except Authorization, which
        carries the signature itself.

        Args:
            request: Request snapshot

        Returns:
            Lower-cased, sorted header names
        """
        return sorted(
            name.lower() for name in request.headers
            if name.lower() != HEADER_AUTHORIZATION.lower()
        )

    def canonical_uri(self, path: str) -> str:
        """
        Escape each path segment and make sure the result ends with '/'.

        Args:
            path: Decoded request path

        Returns:
            Canonical URI
        """
        uri = '/'.join(uri_escape(segment) for segment in path.split('/'))
        if not uri.endswith('/'):
            uri += '/'
        return uri

    def canonical_query_string(self, request: OutboundRequest) -> str:
        """
        Sort query parameters by key then value and escape both.

        Args:
            request: Request snapshot

        Returns:
            Canonical query string (empty when there is no query)
        """
        params = sorted(request.query)
        return '&'.join(
            f"{uri_escape(key)}={uri_escape(value)}" for key, value in params
        )

    def canonical_headers(self, request: OutboundRequest, signed_headers: List[str]) -> str:
        """
        Render signed headers as 'name:value' lines, each newline-terminated.

        Args:
            request: Request snapshot
            signed_headers: Output of signed_header_names()

        Returns:
            Canonical header block
        """
        lines = [
            f"{name}:{request.headers[name].strip()}\n"
            for name in signed_headers
        ]
        return ''.join(lines)

    def payload_hash(self, request: OutboundRequest) -> str:
        """
        Hex digest of the body.

        A pre-computed value in X-Sdk-Content-Sha256 (for example
        'UNSIGNED-PAYLOAD') takes precedence over hashing the body.
        """
        precomputed: Optional[str] = request.headers.get(HEADER_CONTENT_SHA256)
        if precomputed:
            return precomputed
        if not request.body:
            return EMPTY_PAYLOAD_HASH
        return hex_sha256(request.body)

    def build(self, request: OutboundRequest) -> str:
        """
        Produce the canonical request string.

        Args:
            request: Request snapshot, already carrying its timestamp header

        Returns:
            Canonical request

        Raises:
            InvalidRequest: If method or path is empty, or the query is malformed
        """
        if not request.method or not request.method.strip():
            raise InvalidRequest("request method is empty")
        if not request.path:
            raise InvalidRequest("request path is empty")

        signed_headers = self.signed_header_names(request)

        return '\n'.join([
            request.method.strip().upper(),
            self.canonical_uri(request.path),
            self.canonical_query_string(request),
            self.canonical_headers(request, signed_headers),
            ';'.join(signed_headers),
            self.payload_hash(request)
        ])
