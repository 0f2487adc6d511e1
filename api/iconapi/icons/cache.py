from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from .models import Icon

logger = logging.getLogger(__name__)

DEFAULT_CACHE_MAX_BYTES = 5_000_000


class IconCache:
    """In-memory LRU cache bounded by the total byte size of cached icons.

    Entries are immutable ``Icon`` values, so a hit can be handed out as is.
    All bookkeeping happens under a single lock.
    """

    def __init__(self, max_bytes: int = DEFAULT_CACHE_MAX_BYTES) -> None:
        if max_bytes < 0:
            raise ValueError("max_bytes must not be negative")
        self.max_bytes = max_bytes
        self._entries: OrderedDict[str, Icon] = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    @property
    def size(self) -> int:
        with self._lock:
            return self._size

    def get(self, key: str) -> Icon | None:
        with self._lock:
            icon = self._entries.get(key)
            if icon is None:
                return None
            self._entries.move_to_end(key)
            return icon

    def put(self, key: str, icon: Icon) -> bool:
        """Store an icon; returns False when it alone exceeds the capacity."""
        if icon.size > self.max_bytes:
            logger.info("Icon %s (%d bytes) exceeds cache capacity, not cached", key, icon.size)
            return False
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._size -= previous.size
            while self._entries and self._size + icon.size > self.max_bytes:
                evicted_key, evicted = self._entries.popitem(last=False)
                self._size -= evicted.size
                logger.debug("Evicted icon %s (%d bytes)", evicted_key, evicted.size)
            self._entries[key] = icon
            self._size += icon.size
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._size = 0
