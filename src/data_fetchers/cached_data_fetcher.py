import logging
import threading
from dataclasses import replace
from typing import Optional
from .base_fetcher import BinDataFetcher
from ..data_models import ScrapeResult
from ..result_cache import ResultCache

logger = logging.getLogger(__name__)


class CachedBinData(BinDataFetcher):
    """ Caching layer for another BinDataFetcher. """
    def __init__(self, underlying_fetcher: BinDataFetcher, cache: Optional[ResultCache] = None):
        if not isinstance(underlying_fetcher, BinDataFetcher): raise TypeError("CachedBinData needs a BinDataFetcher to wrap")
        self._fetcher = underlying_fetcher
        self.cache = cache if cache is not None else ResultCache()
        # Concurrent misses queue here and share the first successful scrape
        self._refresh_lock = threading.Lock()
        logger.info(f"CachedBinData initialized, wrapping {type(underlying_fetcher).__name__}")

    def _cached_result(self) -> Optional[ScrapeResult]:
        entry = self.cache.get()
        if entry is None:
            return None
        return replace(entry.result, cached=True)

    def get_collections(self) -> ScrapeResult:
        # 1. Serve a fresh cached result without taking the lock
        cached = self._cached_result()
        if cached is not None:
            return cached

        with self._refresh_lock:
            # 2. Another request may have refreshed the cache while we waited
            cached = self._cached_result()
            if cached is not None:
                return cached

            # 3. Scrape and keep the result only if it succeeded
            logger.info(f"CachedBinData: Calling {type(self._fetcher).__name__}.")
            fetched_result = self._fetcher.get_collections()
            self.cache.put(fetched_result)
            return fetched_result
