import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class MessageCache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    def forget(self, key: str) -> None:
        ...


class InMemoryTTLCache:
    """
    Process-local MessageCache. Expired entries are evicted on read.

    A ttl of 0 or less stores nothing.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
