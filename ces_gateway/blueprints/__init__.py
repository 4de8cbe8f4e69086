"""
Flask blueprints for CES gateway endpoints.
"""

from .ces import ces_bp
from .dashboards import dashboards_bp
from .health import health_bp
from .metrics import metrics_bp

__all__ = ['ces_bp', 'dashboards_bp', 'health_bp', 'metrics_bp']
