"""
Caller authentication components.
"""
from .models import AuthResult
from .identity_client import IdentityClient
from .authenticator import TokenAuthenticator

__all__ = [
    'AuthResult',
    'IdentityClient',
    'TokenAuthenticator',
]
