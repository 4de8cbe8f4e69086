"""
Request and credential models for AK/SK request signing.
"""
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from urllib.parse import quote, unquote, urlsplit, parse_qsl

from requests.structures import CaseInsensitiveDict

from ces_gateway.exceptions import InvalidRequest


def parse_query_string(query_string: str) -> List[Tuple[str, str]]:
    """
    Parse a raw query string into ordered (key, value) pairs.

    Blank values are kept. Percent escapes that do not decode to UTF-8
    are rejected.

    Args:
        query_string: Query string without the leading '?'

    Returns:
        List of decoded (key, value) pairs in their original order

    Raises:
        InvalidRequest: If the query string cannot be decoded
    """
    if not query_string:
        return []
    try:
        return parse_qsl(query_string, keep_blank_values=True, errors='strict')
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidRequest(f"malformed query string: {e}") from e


@dataclass(frozen=True)
class Credential:
    """
    Access-key/secret-key pair used to sign outbound requests.

    Attributes:
        access_key: Public access key identifier (AK)
        secret_key: Secret key used as HMAC key (SK)
    """
    access_key: str
    secret_key: str = field(repr=False)

    def is_complete(self) -> bool:
        """Both halves of the pair are present."""
        return bool(self.access_key) and bool(self.secret_key)


@dataclass
class OutboundRequest:
    """
    An outbound HTTP request that has not been signed yet.

    Attributes:
        method: HTTP method
        scheme: URL scheme ('https' or 'http')
        host: Network location (host[:port])
        path: Decoded request path
        query_string: Query string as it will be transmitted
        headers: Case-insensitive header mapping
        body: Request body bytes (empty for no body)
    """
    method: str
    scheme: str
    host: str
    path: str
    query_string: str = ''
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b''

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})
        if isinstance(self.body, str):
            self.body = self.body.encode('utf-8')
        elif self.body is None:
            self.body = b''

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[bytes] = None
    ) -> 'OutboundRequest':
        """
        Create an OutboundRequest from an absolute URL.

        The path is stored decoded; the query string is kept verbatim.

        Args:
            method: HTTP method
            url: Absolute URL including scheme and host
            headers: Optional initial headers
            body: Optional body

        Returns:
            OutboundRequest instance
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise InvalidRequest(f"URL must be absolute: {url}")

        return cls(
            method=method,
            scheme=parts.scheme,
            host=parts.netloc,
            path=unquote(parts.path) or '/',
            query_string=parts.query,
            headers=CaseInsensitiveDict(headers or {}),
            body=body or b''
        )

    @property
    def query(self) -> List[Tuple[str, str]]:
        """Ordered (key, value) query parameters."""
        return parse_query_string(self.query_string)

    @property
    def url(self) -> str:
        """Absolute URL the request is sent to."""
        url = f"{self.scheme}://{self.host}{quote(self.path, safe='/')}"
        if self.query_string:
            url += '?' + self.query_string
        return url

    def copy(self) -> 'OutboundRequest':
        """Return an independent copy with its own header mapping."""
        return OutboundRequest(
            method=self.method,
            scheme=self.scheme,
            host=self.host,
            path=self.path,
            query_string=self.query_string,
            headers=CaseInsensitiveDict(self.headers),
            body=self.body
        )


@dataclass(frozen=True)
class SignedRequest:
    """
    An outbound request carrying its authentication headers.

    Immutable: changing any signed field would invalidate the signature,
    so a new request has to be built and signed instead.
    """
    method: str
    url: str
    header_items: Tuple[Tuple[str, str], ...]
    body: bytes
    signature: str
    signed_headers: Tuple[str, ...]

    @property
    def headers(self) -> CaseInsensitiveDict:
        """A fresh header mapping suitable for passing to requests."""
        return CaseInsensitiveDict(self.header_items)

    def header(self, name: str) -> Optional[str]:
        """Look up a header value case-insensitively."""
        return self.headers.get(name)
