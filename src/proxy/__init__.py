"""SimpleGate gateway package.

This package provides the HTTP gateway that forwards simple-repository index
requests to an upstream registry, filters package pages against per-package
policies, and serves the rewritten listing.
"""

from .filter_engine import FilterEngine
from .policy import PackageConfig, PolicyError, PolicyStore
from .upstream import UpstreamClient, UpstreamError, UpstreamResponse
from .server import GatewayConfig, SimpleGateServer

__all__ = [
    "FilterEngine",
    "PackageConfig",
    "PolicyError",
    "PolicyStore",
    "UpstreamClient",
    "UpstreamError",
    "UpstreamResponse",
    "GatewayConfig",
    "SimpleGateServer",
]
