"""
Client for the identity service token check.
"""
import logging
from typing import Any, Optional

import requests

from ces_gateway.exceptions import IdentityServiceError, InvalidToken

logger = logging.getLogger(__name__)

HEADER_AUTH_TOKEN = 'X-Auth-Token'
HEADER_SUBJECT_TOKEN = 'X-Subject-Token'


def _lookup(data: Any, key: str) -> Any:
    """Case-insensitive key lookup in a JSON object; None when absent."""
    if not isinstance(data, dict):
        return None
    if key in data:
        return data[key]
    for k, v in data.items():
        if isinstance(k, str) and k.lower() == key.lower():
            return v
    return None


class IdentityClient:
    """
    Verifies caller tokens against the identity service.

    GET {base_url}/auth/tokens with X-Auth-Token and X-Subject-Token both set
    to the caller's token. A 200 answer carries the user in
    {"token": {"user": {"id": "..."}}}.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 10.0
    ):
        """
        Initialize the identity client.

        Args:
            base_url: Identity service base URL (e.g. 'https://iam.example.com/v3')
            session: HTTP session (default: new requests.Session)
            timeout: Timeout in seconds for the token check
        """
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def tokens_url(self) -> str:
        return self.base_url + '/auth/tokens'

    def verify_token(self, token: str) -> str:
        """
        Check a token and return the ID of the user it belongs to.

        Args:
            token: Caller's bearer token

        Returns:
            User ID

        Raises:
            InvalidToken: If the identity service rejects the token
            IdentityServiceError: If the identity service fails or cannot be reached
        """
        headers = {
            HEADER_AUTH_TOKEN: token,
            HEADER_SUBJECT_TOKEN: token,
            'Content-Type': 'application/json'
        }

        try:
            with self.session.get(self.tokens_url, headers=headers, timeout=self.timeout) as response:
                if response.status_code >= 500:
                    raise IdentityServiceError(
                        f"identity service answered {response.status_code}"
                    )
                if response.status_code != 200:
                    raise InvalidToken(f"identity service answered {response.status_code}")

                try:
                    payload = response.json()
                except ValueError as e:
                    raise IdentityServiceError("failed to unmarshal token check response") from e
        except requests.RequestException as e:
            raise IdentityServiceError(f"failed to do http request: {e}") from e

        user_id = _lookup(_lookup(_lookup(payload, 'token'), 'user'), 'id')
        if not user_id or not isinstance(user_id, str):
            raise IdentityServiceError("token check response has no user id")

        return user_id
