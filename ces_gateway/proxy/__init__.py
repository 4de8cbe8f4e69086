"""
Monitoring API proxy.
"""
from .forwarder import ProxyForwarder, UpstreamResponse

__all__ = ['ProxyForwarder', 'UpstreamResponse']
