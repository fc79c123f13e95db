"""
Glass Effect Cache

Bounded-memory LRU of fully rendered glass rasters, keyed by consumer,
size, blur radius and tint darkness. Owned by whoever orchestrates
rendering and shared by reference with every GlassRenderer.
"""

import logging
import threading
from collections import OrderedDict
from typing import Optional

from PIL import Image  # type: ignore

from .config import DEFAULT_CONFIG, GlassConfig
from .core import raster_nbytes
from .device import DeviceProfile

logger = logging.getLogger(__name__)


class GlassEffectCache:
    """LRU cache of rendered rasters within a byte budget

    Size accounting uses width x height x 4 per raster. Rasters are stored
    and returned by reference; callers must treat them as read-only.
    All public operations are atomic under one lock.
    """

    def __init__(self, max_bytes: int = DEFAULT_CONFIG.cache_max_bytes):
        self._max_bytes = max_bytes
        self._entries: 'OrderedDict[str, Image.Image]' = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @classmethod
    def for_device(cls, profile: DeviceProfile, config: GlassConfig = DEFAULT_CONFIG) -> 'GlassEffectCache':
        """Cache with the budget scaled by the device's memory tier"""
        return cls(max_bytes=int(config.cache_max_bytes * profile.cache_size_multiplier))

    @staticmethod
    def key(consumer_id: int, width: int, height: int, blur_radius: float, is_dark: bool) -> str:
        """
        Cache key for one render request.

        Examples:
            >>> GlassEffectCache.key(7, 300, 150, 25.0, False)
            'glass_7_300x150_25.0_false'
        """
        return f"glass_{consumer_id}_{width}x{height}_{float(blur_radius)!r}_{str(bool(is_dark)).lower()}"

    @staticmethod
    def _prefix(consumer_id: int) -> str:
        return f"glass_{consumer_id}_"

    def get(self, key: str) -> Optional[Image.Image]:
        with self._lock:
            raster = self._entries.get(key)
            if raster is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return raster

    def put(self, key: str, raster: Image.Image) -> None:
        """Insert or replace an entry, then evict least-recently-used entries over budget"""
        with self._lock:
            previous = self._entries.pop(key, None)
            if previous is not None:
                self._size -= raster_nbytes(previous)
            self._entries[key] = raster
            self._size += raster_nbytes(raster)
            self._trim(self._max_bytes)

    def _trim(self, max_bytes: int) -> None:
        while self._size > max_bytes and self._entries:
            key, evicted = self._entries.popitem(last=False)
            self._size -= raster_nbytes(evicted)
            logger.debug("Evicted %s (%d bytes)", key, raster_nbytes(evicted))

    def invalidate(self, consumer_id: int) -> int:
        """Drop every entry belonging to one consumer

        Returns:
            Number of entries removed (0 is fine)
        """
        prefix = self._prefix(consumer_id)
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                self._size -= raster_nbytes(self._entries.pop(key))
        return len(doomed)

    def clear(self) -> None:
        """Evict everything and reset statistics"""
        with self._lock:
            self._entries.clear()
            self._size = 0
            self.hits = 0
            self.misses = 0

    def trim_to_size(self, max_bytes: int) -> None:
        """Evict least-recently-used entries until at most max_bytes remain"""
        with self._lock:
            self._trim(max_bytes)

    @property
    def size(self) -> int:
        """Resident bytes"""
        return self._size

    @property
    def max_size(self) -> int:
        return self._max_bytes

    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def stats(self) -> str:
        return (
            f"Cache Stats: Hits={self.hits}, Misses={self.misses}, "
            f"Hit Rate={self.hit_rate() * 100:.2f}%, "
            f"Size={self._size // 1024}KB/{self._max_bytes // 1024}KB"
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
