"""
Caller authentication for protected gateway routes.
"""
import logging
from typing import Dict, Optional

from ces_gateway.exceptions import IdentityServiceError, InvalidToken
from ces_gateway.monitoring import TOKEN_CHECKS_TOTAL
from .identity_client import IdentityClient, HEADER_AUTH_TOKEN
from .models import AuthResult

logger = logging.getLogger(__name__)


class TokenAuthenticator:
    """
    Decides whether an inbound request carries a valid caller token.

    Flow:
    1. Extract the token from the X-Auth-Token header
    2. Deny with 403 when it is absent, without contacting the identity service
    3. Verify it against the identity service
    4. Map identity failures to 500 and rejected tokens to 401
    """

    def __init__(self, identity_client: IdentityClient, header_name: str = HEADER_AUTH_TOKEN):
        """
        Initialize the authenticator.

        Args:
            identity_client: Identity service client
            header_name: Header carrying the caller's token
        """
        self.identity_client = identity_client
        self.header_name = header_name

    def extract_token(self, headers: Dict[str, str]) -> Optional[str]:
        """
        Extract the caller's token from request headers.

        Args:
            headers: HTTP headers (any casing)

        Returns:
            Token if present and non-empty, None otherwise
        """
        for key, value in headers.items():
            if key.lower() == self.header_name.lower():
                value = (value or '').strip()
                return value or None
        return None

    def authenticate(self, headers: Dict[str, str]) -> AuthResult:
        """
        Authenticate a request from its headers.

        Args:
            headers: HTTP headers of the inbound request

        Returns:
            AuthResult with decision and user context
        """
        token = self.extract_token(headers)

        if not token:
            TOKEN_CHECKS_TOTAL.labels(result='absent').inc()
            return AuthResult(
                allowed=False,
                reason="token_absent",
                status_code=403,
                message="token is absent"
            )

        try:
            user_id = self.identity_client.verify_token(token)
        except InvalidToken as e:
            TOKEN_CHECKS_TOTAL.labels(result='invalid').inc()
            logger.info("Token rejected by identity service", extra={'detail': str(e)})
            return AuthResult(
                allowed=False,
                reason="invalid_token",
                status_code=401,
                message="invalid token"
            )
        except IdentityServiceError as e:
            TOKEN_CHECKS_TOTAL.labels(result='error').inc()
            logger.error("Token check failed", extra={
                'error_type': type(e).__name__,
                'error_message': str(e)
            })
            return AuthResult(
                allowed=False,
                reason="identity_unavailable",
                status_code=500,
                message="unable to check token"
            )

        TOKEN_CHECKS_TOTAL.labels(result='valid').inc()
        return AuthResult(
            allowed=True,
            reason="authenticated",
            user_id=user_id
        )
