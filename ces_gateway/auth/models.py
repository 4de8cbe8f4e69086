"""
Authentication data models.
"""
from typing import Optional
from dataclasses import dataclass


@dataclass
class AuthResult:
    """
    Result of a caller token check.

    Attributes:
        allowed: Whether the request may proceed
        reason: Short machine-readable reason for the decision
        status_code: HTTP status to answer with when the request is denied
        message: Plain-text body to answer with when the request is denied
        user_id: ID of the authenticated user (if any)
    """
    allowed: bool
    reason: str
    status_code: int = 200
    message: str = ''
    user_id: Optional[str] = None
