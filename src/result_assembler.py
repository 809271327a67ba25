import logging
from typing import Iterable, Dict, Any, Optional
from .data_models import CollectionEntry, ScrapeResult, ScrapeSuccess, ScrapeFailure

logger = logging.getLogger(__name__)


def assemble_result(entries: Iterable[CollectionEntry], source: str, diagnostic: Optional[Dict[str, Any]] = None) -> ScrapeResult:
    """
    Deduplicates and date-orders extracted entries.

    The first occurrence of each (date, type) pair is kept. An empty input
    never becomes an empty success: it is reported as a ScrapeFailure
    carrying the caller's diagnostic.
    """
    unique = list(dict.fromkeys(entries))
    if not unique:
        logger.warning(f"No collections extracted from {source}")
        return ScrapeFailure(diagnostic=dict(diagnostic or {}))
    unique.sort(key=lambda entry: entry.date)
    return ScrapeSuccess(collections=tuple(unique), source=source)
