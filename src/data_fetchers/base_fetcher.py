import abc
from ..data_models import ScrapeResult

class BinDataFetcher(abc.ABC):
    """Abstract base class for fetching bin collection data."""

    @abc.abstractmethod
    def get_collections(self) -> ScrapeResult:
        """
        Fetches upcoming bin collections for the configured property.

        Returns:
            A ScrapeSuccess holding the deduplicated, date-ordered collections,
            or a ScrapeFailure with diagnostic details when nothing was found.
        """
        pass
