"""
Session artifact cache.

Key layout: ``<namespace>/<username>/<artifact>``.
"""

from dataclasses import dataclass, field
from typing import Any

from .interfaces import CacheManager

CACHE_NAMESPACE = "twitter"


def cache_key(username: str, artifact: str, namespace: str = CACHE_NAMESPACE) -> str:
    return f"{namespace}/{username}/{artifact}"


def cookie_cache_key(username: str, namespace: str = CACHE_NAMESPACE) -> str:
    """Where a validated session's cookies are stored."""
    return cache_key(username, "cookies", namespace)


@dataclass
class InMemoryCacheManager(CacheManager):
    """Process-local cache used when the host runtime has none."""

    store: dict[str, Any] = field(default_factory=dict)

    async def get(self, key: str) -> Any:
        return self.store.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.store[key] = value
