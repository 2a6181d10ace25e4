"""Cache package: TTL store and favicon cache."""

from .cache import TTLCache
from .favicon_cache import FaviconCache

__all__ = [
    'TTLCache',
    'FaviconCache',
]
