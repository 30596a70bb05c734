"""
TokenLens - Analysis Response Cache
In-memory TTL cache for formatted analysis responses, keyed by (token, mode).
Lives in the HTTP layer only; the analysis core keeps no state across runs.
"""
from typing import Optional, Dict, Any, Tuple
from cachetools import TTLCache

from tokenlens.config.settings import get_settings
from tokenlens.utils.logger import get_logger

logger = get_logger("response_cache")


class ResponseCache:
    """TTL cache for analysis responses; a TTL of 0 disables caching."""

    def __init__(self, ttl_seconds: Optional[int] = None, maxsize: int = 256):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else get_settings().cache_ttl_seconds
        self._cache: Optional[TTLCache] = (
            TTLCache(maxsize=maxsize, ttl=self.ttl_seconds) if self.ttl_seconds > 0 else None
        )
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    @staticmethod
    def _key(token: str, mode: str) -> Tuple[str, str]:
        return token.strip(), mode

    def get(self, token: str, mode: str) -> Optional[Dict[str, Any]]:
        if self._cache is None:
            return None
        response = self._cache.get(self._key(token, mode))
        if response is None:
            self._misses += 1
        else:
            self._hits += 1
        return response

    def put(self, token: str, mode: str, response: Dict[str, Any]) -> None:
        if self._cache is not None:
            self._cache[self._key(token, mode)] = response

    def clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()
        logger.info("response_cache_cleared")

    @property
    def stats(self) -> Dict[str, Any]:
        """Return cache statistics."""
        return {
            "enabled": self.enabled,
            "ttl_seconds": self.ttl_seconds,
            "entries": len(self._cache) if self._cache is not None else 0,
            "hits": self._hits,
            "misses": self._misses,
        }


# Singleton instance
_cache: Optional[ResponseCache] = None


def get_response_cache() -> ResponseCache:
    global _cache
    if _cache is None:
        _cache = ResponseCache()
    return _cache
