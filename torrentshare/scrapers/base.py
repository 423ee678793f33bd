"""
Base class for remote search scrapers.

A scraper is a black box from the tree's point of view: it takes a query
and returns the ordered results, or None when the search failed. A failed
search is never cached, so returning None is always safe.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from torrentshare.models import ResultEntry


class Scraper(ABC):
    """Base class for all scrapers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this scraper."""
        pass

    @abstractmethod
    async def search(self, query: str) -> Optional[List[ResultEntry]]:
        """
        Search the remote index.

        Args:
            query: Decoded query text

        Returns:
            Ordered results, or None if the search failed
        """
        pass

    async def close(self) -> None:
        """Cleanup resources used by the scraper."""
        pass
