"""
Exception hierarchy for the CES gateway.
"""


class GatewayError(Exception):
    """Top-level exception for gateway failures."""


class SigningError(GatewayError):
    """An outbound request could not be signed."""


class InvalidRequest(SigningError, ValueError):
    """Method, path or query of an outbound request is malformed."""


class MissingCredential(SigningError):
    """Access key or secret key is empty."""


class TransportFailure(GatewayError):
    """A remote service could not be reached or did not answer."""


class IdentityServiceError(TransportFailure):
    """The identity service failed to check a token."""


class InvalidToken(GatewayError):
    """The identity service rejected the caller's token."""


class DashboardConflict(GatewayError):
    """A dashboard with the same name already exists for the user."""
