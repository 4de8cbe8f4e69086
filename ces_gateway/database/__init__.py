"""
Database access layer.
"""
from .driver import DashboardDB

__all__ = ['DashboardDB']
