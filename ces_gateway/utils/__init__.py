"""
Shared utilities.
"""
from .db_connection import get_db_connection

__all__ = ['get_db_connection']
