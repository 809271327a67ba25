import logging
from typing import Optional
from .base_fetcher import BinDataFetcher
from .rbwm_bin_data import RbwmBinData
from .rbwm_rendered_bin_data import RbwmRenderedBinData
from .cached_data_fetcher import CachedBinData
from ..result_cache import ResultCache

logger = logging.getLogger(__name__)

FETCHER_SOURCES = {
    "rbwm": RbwmBinData,
    "rbwm_rendered": RbwmRenderedBinData,
}


def create_fetcher(source: str, use_cache: bool, cache: Optional[ResultCache] = None) -> BinDataFetcher:
    """
    Factory function to create the appropriate BinDataFetcher instance.

    Args:
        source: The acquisition strategy ("rbwm" for direct/proxy HTTP,
            "rbwm_rendered" for a headless browser render).
        use_cache: Whether to wrap the fetcher with the caching layer.
        cache: Cache to use when use_cache is set. A new one is created if omitted.

    Returns:
        An instance conforming to the BinDataFetcher interface.

    Raises:
        ValueError: If the specified source is unknown.
    """
    logger.info(f"Creating fetcher for source: '{source}', use_cache: {use_cache}")

    fetcher_class = FETCHER_SOURCES.get(source.lower())
    if fetcher_class is None:
        logger.error(f"Unknown data source requested: {source}")
        raise ValueError(f"Unknown data source: {source}")
    base_fetcher: BinDataFetcher = fetcher_class()

    if use_cache:
        logger.info(f"Wrapping {type(base_fetcher).__name__} with CachedBinData.")
        return CachedBinData(base_fetcher, cache)
    else:
        logger.info(f"Using direct fetcher {type(base_fetcher).__name__} (cache disabled).")
        return base_fetcher
