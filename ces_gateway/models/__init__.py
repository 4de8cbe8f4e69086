"""
Data models for the CES gateway.
"""
from .dashboard import Dashboard

__all__ = [
    'Dashboard',
]
