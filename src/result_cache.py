import logging
import threading
from datetime import datetime, timedelta
from typing import Optional, Callable
from .data_models import CacheEntry, ScrapeResult, ScrapeSuccess

logger = logging.getLogger(__name__)

CACHE_DURATION = timedelta(hours=6)


class ResultCache:
    """
    Single-slot, in-memory cache for the last successful scrape.

    Only ScrapeSuccess results are stored, so a failed scrape never replaces
    a good result that is still fresh.
    """

    def __init__(self, max_age: timedelta = CACHE_DURATION, clock: Callable[[], datetime] = datetime.now):
        self.max_age = max_age
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[CacheEntry]:
        """Returns the stored entry while it is younger than max_age, else None."""
        with self._lock:
            entry = self._entry
        if entry is None:
            logger.info("Cache MISS: nothing stored yet")
            return None
        age = self._clock() - entry.fetched_at
        if age >= self.max_age:
            logger.info(f"Cache MISS: entry is stale ({age} old)")
            return None
        logger.info(f"Cache HIT: entry fetched at {entry.fetched_at.isoformat()}")
        return entry

    def put(self, result: ScrapeResult) -> bool:
        """Stores result if it is a success. Returns whether anything was stored."""
        if not isinstance(result, ScrapeSuccess):
            logger.warning("Scrape failed. Result not cached.")
            return False
        with self._lock:
            self._entry = CacheEntry(result=result, fetched_at=self._clock())
        logger.info(f"Cached {len(result.collections)} collections from {result.source}")
        return True
