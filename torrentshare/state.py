"""Process-scoped state shared by every tree the share hands out."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from torrentshare.cache import SearchCache
from torrentshare.transfer.base import TransferClient
from torrentshare.transfer.registry import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class ShareState:
    """The search cache and the session registry, owned together.

    Built once at process start and passed by reference to every
    resolver. Nothing else keeps a cache or a session.
    """

    cache: SearchCache
    registry: SessionRegistry

    @classmethod
    def open(
        cls,
        cache_path: Union[str, Path],
        client: TransferClient,
        staging_dir: str = "./dls/",
    ) -> 'ShareState':
        """Load the cache store and set up an empty registry.

        Raises:
            CacheLoadError: If the cache store is missing or corrupt
        """
        cache = SearchCache.load(cache_path)
        registry = SessionRegistry(client, staging_dir=staging_dir)
        logger.debug(f"Share state ready (cache={cache_path}, staging={staging_dir})")
        return cls(cache=cache, registry=registry)

    async def close(self) -> None:
        """Tear down live sessions and release the transfer client."""
        await self.registry.destroy_all()
        await self.registry.client.close()
