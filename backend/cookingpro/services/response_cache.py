"""
Response cache for model generations.
Per-entry expiry only; entries are evicted lazily when read after expiry.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from cookingpro.core.logging import get_logger

logger = get_logger("services.response_cache")

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    """Key-to-value store with per-entry TTL and unbounded capacity."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            default_ttl: Seconds an entry lives when set() gets no ttl
            clock: Returns the current time in seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a value with an absolute expiry of now + ttl."""
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def get(self, key: str) -> Optional[Any]:
        """Return the value if present and unexpired, evicting stale entries."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() > entry.expires_at:
            del self._entries[key]
            logger.debug(f"Evicted expired cache entry ({len(self._entries)} left)")
            return None

        return entry.value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def key(prompt: str, context: Dict[str, Any]) -> str:
        """
        Derive a cache key from the prompt and every context field that
        affects the model's output.

        The context is serialized canonically (sorted keys), so equal
        (prompt, context) pairs always collide and any change to the
        context yields a different key.
        """
        serialized = json.dumps(context, sort_keys=True, ensure_ascii=False, default=_to_jsonable)
        return f"{prompt.strip()}-{serialized}"


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Cannot serialize {type(value).__name__} into a cache key")
