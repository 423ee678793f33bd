"""Host-facing tree for one share connection."""

import logging
from typing import TYPE_CHECKING, List

from torrentshare.errors import NoSuchFileError, NotSupportedError
from torrentshare.vfs.base import VirtualNode
from torrentshare.vfs.resolver import PathResolver

if TYPE_CHECKING:
    from torrentshare.share import TorrentShare

logger = logging.getLogger(__name__)


class ShareTree:
    """Read-only tree handed to the host on connect.

    Listing and opening go through the PathResolver. Every mutating
    operation fails with NotSupportedError.
    """

    def __init__(self, share: 'TorrentShare', resolver: PathResolver):
        self.share = share
        self.resolver = resolver

    async def exists(self, name: str) -> bool:
        """Test whether name resolves to a node."""
        logger.debug(f"[{self.share.name}] tree.exists {name}")
        try:
            await self.resolver.resolve(name)
        except NoSuchFileError:
            return False
        return True

    async def open(self, name: str) -> VirtualNode:
        """Open an existing file or folder.

        Raises:
            NoSuchFileError: If name is a file with no registered backing
        """
        logger.debug(f"[{self.share.name}] tree.open {name}")
        return await self.resolver.resolve(name)

    async def list(self, pattern: str) -> List[VirtualNode]:
        """List entries matching pattern (e.g. /some/directory/*)."""
        logger.debug(f"[{self.share.name}] tree.list {pattern}")
        return await self.resolver.list(pattern)

    async def create_file(self, name: str) -> VirtualNode:
        logger.debug(f"[{self.share.name}] tree.create_file {name}")
        raise NotSupportedError("create file", name)

    async def create_directory(self, name: str) -> VirtualNode:
        logger.debug(f"[{self.share.name}] tree.create_directory {name}")
        raise NotSupportedError("create directory", name)

    async def delete(self, name: str) -> None:
        logger.debug(f"[{self.share.name}] tree.delete {name}")
        raise NotSupportedError("delete", name)

    async def delete_directory(self, name: str) -> None:
        logger.debug(f"[{self.share.name}] tree.delete_directory {name}")
        raise NotSupportedError("delete directory", name)

    async def rename(self, old_name: str, new_name: str) -> None:
        logger.debug(f"[{self.share.name}] tree.rename {old_name} to {new_name}")
        raise NotSupportedError("rename", old_name)

    async def disconnect(self) -> None:
        """Disconnect this tree. Sessions belong to the share, so nothing to do."""
        logger.debug(f"[{self.share.name}] tree.disconnect")
