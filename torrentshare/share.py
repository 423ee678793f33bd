"""TorrentShare - entry point the host server connects to."""

import logging
from typing import Any, Optional

from torrentshare.config import ShareConfig
from torrentshare.scrapers.base import Scraper
from torrentshare.state import ShareState
from torrentshare.transfer.stream import ByteStreamReader
from torrentshare.vfs.resolver import PathResolver
from torrentshare.vfs.tree import ShareTree

logger = logging.getLogger(__name__)


class TorrentShare:
    """A read-only share of torrent search results.

    Every connection gets its own ShareTree, but all trees work against
    the same ShareState, so cached searches and live sessions are shared
    across connections.

    Usage:
        >>> config = load_config()
        >>> share = TorrentShare.from_config("torrents", config)
        >>> tree = await share.connect(session=None)
        >>> buckets = await tree.list("/*")
        >>> results = await tree.list("/U/B/U/N/T/U/!SEARCH/*")
        >>> await share.close()
    """

    def __init__(
        self,
        name: str,
        state: ShareState,
        scraper: Scraper,
        description: str = "",
        max_results: int = 20,
    ):
        """Initialize the share.

        Args:
            name: Share name announced to the host
            state: Cache and session registry
            scraper: Remote search used on cache misses
            description: Free-form share description
            max_results: Most result folders shown per search
        """
        self.name = name
        self.description = description
        self.state = state
        self.scraper = scraper
        self.reader = ByteStreamReader()
        self.max_results = max_results

    @classmethod
    def from_config(cls, name: str, config: ShareConfig, description: str = "") -> 'TorrentShare':
        """Build a share wired to qBittorrent and the HTML scraper.

        Raises:
            CacheLoadError: If the configured cache store is missing or corrupt
        """
        from torrentshare.scrapers.html import HtmlResultScraper
        from torrentshare.transfer.qbittorrent import QBitTransferClient

        client = QBitTransferClient(config.transfer)
        state = ShareState.open(config.cache.path, client, staging_dir=config.transfer.staging_dir)
        scraper = HtmlResultScraper(config.scraper)
        return cls(
            name,
            state,
            scraper,
            description=description,
            max_results=config.browse.max_results,
        )

    def is_named_pipe(self) -> bool:
        return False

    def resolver(self) -> PathResolver:
        """Create a resolver bound to this share's state."""
        return PathResolver(self.state, self.scraper, self.reader, self.max_results)

    async def connect(self, session: Any = None, share_level_password: Optional[bytes] = None) -> ShareTree:
        """Hand out a tree for a host connection.

        Access rights are not checked; every connection sees the same tree.
        """
        logger.debug(f"[{self.name}] connect")
        return ShareTree(self, self.resolver())

    async def close(self) -> None:
        """Tear down sessions and release the scraper and transfer client."""
        await self.state.close()
        await self.scraper.close()
        logger.info(f"[{self.name}] closed")
