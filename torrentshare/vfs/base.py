"""Base classes for the virtual tree.

Every entry the host sees is a VirtualNode computed on demand from the
search cache or a live transfer session. Nodes carry no state between
navigation calls except through their backing references.

Architecture:
    - NodeKind: What a node stands for (bucket, result, metadata leaf...)
    - VirtualNode: Read-only folder or zero-length leaf
    - ContentFileNode: A file inside a transfer session, readable by range
"""

import posixpath
from enum import Enum
from typing import Any, Dict, Optional

from torrentshare.models import ContentFile, ResultEntry
from torrentshare.transfer.base import TransferSession
from torrentshare.transfer.stream import ByteStreamReader

# Timestamps are not tracked; every node reports the epoch.
EPOCH = 0


class NodeKind(Enum):
    """Kind of virtual node."""
    ROOT = "root"
    FOLDER = "folder"
    LETTER_BUCKET = "letter_bucket"
    SEARCH_BUCKET = "search_bucket"
    RESULT_FOLDER = "result_folder"
    FILES_FOLDER = "files_folder"
    METADATA_LEAF = "metadata_leaf"
    ERROR_LEAF = "error_leaf"
    CONTENT_FILE = "content_file"

    @property
    def is_file(self) -> bool:
        return self in (NodeKind.METADATA_LEAF, NodeKind.ERROR_LEAF, NodeKind.CONTENT_FILE)


class VirtualNode:
    """A read-only entry in the tree.

    Folders and metadata/error leaves report size 0. Leaves expose their
    information through the name only; reading them yields no bytes.

    Attributes:
        path: Absolute tree path (e.g. /A/!SEARCH/Some Result/Files)
        kind: What the node stands for
        result: Backing search result, if any
    """

    def __init__(self, path: str, kind: NodeKind, result: Optional[ResultEntry] = None):
        self.path = path
        self.kind = kind
        self.result = result

    @property
    def name(self) -> str:
        if self.path == "/":
            return "/"
        return posixpath.basename(self.path)

    def is_file(self) -> bool:
        return self.kind.is_file

    def is_directory(self) -> bool:
        return not self.kind.is_file

    def is_read_only(self) -> bool:
        return True

    def size(self) -> int:
        return 0

    def allocation_size(self) -> int:
        return self.size()

    def last_modified(self) -> int:
        return EPOCH

    def last_changed(self) -> int:
        return EPOCH

    def created(self) -> int:
        return EPOCH

    def last_accessed(self) -> int:
        return EPOCH

    async def read(self, buffer: bytearray, offset: int, length: int, position: int) -> int:
        """Read bytes into buffer[offset:].

        Args:
            buffer: Destination buffer
            offset: Where in buffer to start writing
            length: Maximum number of bytes to read
            position: Where in the file to start reading

        Returns:
            Number of bytes copied (0 for folders and leaves)
        """
        return 0

    async def write(self, data: bytes, position: int) -> None:
        """Accepted and ignored; the tree is read-only."""
        pass

    async def set_length(self, length: int) -> None:
        pass

    async def delete(self) -> None:
        pass

    async def flush(self) -> None:
        pass

    async def close(self) -> None:
        pass

    def get_info(self) -> Dict[str, Any]:
        """Get node details for display.

        Returns:
            Dict with keys: name, path, type, kind, size
        """
        info = {
            "name": self.name,
            "path": self.path,
            "type": "file" if self.is_file() else "directory",
            "kind": self.kind.value,
            "size": self.size(),
        }
        if self.result is not None:
            info["content_ref"] = self.result.content_ref
        return info

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value}, path='{self.path}')"


class ContentFileNode(VirtualNode):
    """A file inside a live transfer session.

    Reads stream from the bound session through a ByteStreamReader and may
    come back short while pieces are still arriving.
    """

    def __init__(
        self,
        path: str,
        session: TransferSession,
        content_file: ContentFile,
        reader: ByteStreamReader,
    ):
        super().__init__(path, NodeKind.CONTENT_FILE)
        self.session = session
        self.content_file = content_file
        self.reader = reader

    def size(self) -> int:
        return self.content_file.length

    async def read(self, buffer: bytearray, offset: int, length: int, position: int) -> int:
        data = await self.reader.read(self.session, self.content_file, position, length)
        buffer[offset:offset + len(data)] = data
        return len(data)

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["session"] = self.session.identity
        info["torrent_path"] = self.content_file.path
        return info
