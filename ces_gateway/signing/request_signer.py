"""
AK/SK request signer for outbound calls to the cloud provider.
"""
from datetime import datetime, timezone
from typing import Callable, Optional

from ces_gateway.exceptions import MissingCredential
from .canonical import CanonicalRequestBuilder, HEADER_AUTHORIZATION
from .models import Credential, OutboundRequest, SignedRequest
from .signature import ALGORITHM, SignatureComputer

HEADER_DATE = 'X-Sdk-Date'
DATE_FORMAT = '%Y%m%dT%H%M%SZ'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequestSigner:
    """
    Signs outbound requests with SDK-HMAC-SHA256.

    Signing produces a new SignedRequest; the OutboundRequest passed in is
    left unchanged. Two headers are added to the signed copy:

    X-Sdk-Date: 20240101T000000Z
    Authorization: SDK-HMAC-SHA256 Access={ak}, SignedHeaders={names}, Signature={hex}

    The clock is injectable so that tests can pin the timestamp.
    """

    def __init__(
        self,
        credential: Credential,
        clock: Optional[Callable[[], datetime]] = None,
        canonical_builder: Optional[CanonicalRequestBuilder] = None,
        signature_computer: Optional[SignatureComputer] = None
    ):
        """
        Initialize the request signer.

        Args:
            credential: Access-key/secret-key pair shared by every signing call
            clock: Returns the current time (default: UTC now)
            canonical_builder: Canonical request builder
            signature_computer: Signature computer
        """
        self.credential = credential
        self.clock = clock or utc_now
        self.canonical_builder = canonical_builder or CanonicalRequestBuilder()
        self.signature_computer = signature_computer or SignatureComputer()

    def timestamp(self) -> str:
        """Current time in the provider's basic date format (UTC)."""
        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.strftime(DATE_FORMAT)

    def _stamped(self, request: OutboundRequest, timestamp: str) -> OutboundRequest:
        stamped = request.copy()
        stamped.headers.pop(HEADER_AUTHORIZATION, None)
        stamped.headers[HEADER_DATE] = timestamp
        return stamped

    def _check_credential(self) -> None:
        if self.credential is None or not self.credential.access_key:
            raise MissingCredential("access key is empty")
        if not self.credential.secret_key:
            raise MissingCredential("secret key is empty")

    def describe(self, request: OutboundRequest) -> dict:
        """
        Compute every intermediate signing value without producing a request.

        Useful to diagnose signature mismatches, since the remote service
        only answers with a generic authentication failure.

        Args:
            request: Request to sign

        Returns:
            Dictionary with timestamp, canonical_request, string_to_sign,
            signed_headers, signature and authorization
        """
        self._check_credential()
        timestamp = self.timestamp()
        stamped = self._stamped(request, timestamp)

        canonical_request = self.canonical_builder.build(stamped)
        signed_headers = self.canonical_builder.signed_header_names(stamped)
        signature = self.signature_computer.compute(self.credential, canonical_request, timestamp)

        return {
            'timestamp': timestamp,
            'canonical_request': canonical_request,
            'string_to_sign': self.signature_computer.string_to_sign(canonical_request, timestamp),
            'signed_headers': signed_headers,
            'signature': signature,
            'authorization': self.authorization_value(signed_headers, signature),
            'request': stamped,
        }

    def authorization_value(self, signed_headers, signature: str) -> str:
        return (
            f"{ALGORITHM} Access={self.credential.access_key}, "
            f"SignedHeaders={';'.join(signed_headers)}, "
            f"Signature={signature}"
        )

    def sign(self, request: OutboundRequest) -> SignedRequest:
        """
        Sign a request.

        Args:
            request: Request to sign (not modified)

        Returns:
            SignedRequest carrying X-Sdk-Date and Authorization headers

        Raises:
            MissingCredential: If the access key or secret key is empty
            InvalidRequest: If the request cannot be canonicalized
        """
        details = self.describe(request)
        stamped = details['request']
        stamped.headers[HEADER_AUTHORIZATION] = details['authorization']

        return SignedRequest(
            method=stamped.method.upper(),
            url=stamped.url,
            header_items=tuple(stamped.headers.items()),
            body=stamped.body,
            signature=details['signature'],
            signed_headers=tuple(details['signed_headers'])
        )
