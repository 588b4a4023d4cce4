# transports/__init__.py
from .cached import CachedTransport
from .http import HttpTransport


def get_transport(identity, cache, offline=False):
    """Build the standard chain: cache in front of the HTTP transport."""
    return CachedTransport(HttpTransport(identity), cache, offline)


__all__ = ["CachedTransport", "HttpTransport", "get_transport"]
