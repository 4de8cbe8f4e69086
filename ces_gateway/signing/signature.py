"""
Signature computation for SDK-HMAC-SHA256.
"""
import hmac
import hashlib
from abc import ABC, abstractmethod

from ces_gateway.exceptions import MissingCredential
from .canonical import hex_sha256
from .models import Credential

ALGORITHM = 'SDK-HMAC-SHA256'


class KeyDerivation(ABC):
    """
    Strategy that turns a secret key into the HMAC signing key.

    Providers differ here: some key the HMAC with the secret directly,
    others chain HMACs over date/region/service first.
    """

    @abstractmethod
    def derive(self, secret_key: str, timestamp: str) -> bytes:
        """
        Derive the signing key.

        Args:
            secret_key: Credential secret
            timestamp: Value of the timestamp header for this request

        Returns:
            Key bytes for the final HMAC
        """


class DirectKeyDerivation(KeyDerivation):
    """Single-step scheme: the secret itself is the HMAC key."""

    def derive(self, secret_key: str, timestamp: str) -> bytes:
        return secret_key.encode('utf-8')


class SignatureComputer:
    """
    Computes request signatures from a canonical request.

    Signature = hex(HMAC-SHA256(key, string_to_sign)) where

        string_to_sign = ALGORITHM + '\\n' + timestamp + '\\n' + hex(sha256(canonical_request))
    """

    def __init__(self, key_derivation: KeyDerivation = None):
        """
        Initialize the signature computer.

        Args:
            key_derivation: Signing key strategy (default: DirectKeyDerivation)
        """
        self.key_derivation = key_derivation or DirectKeyDerivation()

    def string_to_sign(self, canonical_request: str, timestamp: str) -> str:
        return '\n'.join([
            ALGORITHM,
            timestamp,
            hex_sha256(canonical_request.encode('utf-8'))
        ])

    def sign_string(self, key: bytes, string_to_sign: str) -> str:
        """HMAC-SHA256 of string_to_sign, as lower-case hex."""
        return hmac.new(key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

    def compute(self, credential: Credential, canonical_request: str, timestamp: str) -> str:
        """
        Compute the signature for a canonical request.

        Args:
            credential: Signing credential
            canonical_request: Output of CanonicalRequestBuilder.build()
            timestamp: Timestamp header value used when building the canonical request

        Returns:
            Lower-case hex signature

        Raises:
            MissingCredential: If the secret key is empty
        """
        if credential is None or not credential.secret_key:
            raise MissingCredential("secret key is empty")

        key = self.key_derivation.derive(credential.secret_key, timestamp)
        return self.sign_string(key, self.string_to_sign(canonical_request, timestamp))
