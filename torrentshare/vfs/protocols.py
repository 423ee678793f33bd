"""Capability contract expected by the host file-sharing server.

The host drives a share through three objects: a share it connects to, a
tree handed out per connection, and the files the tree returns. These
Protocols spell out that shape so VirtualNode, ShareTree and
TorrentShare can be checked against it structurally.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class HostFile(Protocol):
    """A file or folder as the host sees it."""

    path: str

    def is_file(self) -> bool: ...

    def is_directory(self) -> bool: ...

    def is_read_only(self) -> bool: ...

    def size(self) -> int: ...

    def allocation_size(self) -> int: ...

    def last_modified(self) -> int: ...

    def last_changed(self) -> int: ...

    def created(self) -> int: ...

    def last_accessed(self) -> int: ...

    async def read(self, buffer: bytearray, offset: int, length: int, position: int) -> int: ...

    async def write(self, data: bytes, position: int) -> None: ...

    async def set_length(self, length: int) -> None: ...

    async def delete(self) -> None: ...

    async def flush(self) -> None: ...

    async def close(self) -> None: ...


@runtime_checkable
class HostTree(Protocol):
    """Per-connection view of a share."""

    async def exists(self, name: str) -> bool: ...

    async def open(self, name: str) -> HostFile: ...

    async def list(self, pattern: str) -> List[HostFile]: ...

    async def create_file(self, name: str) -> HostFile: ...

    async def create_directory(self, name: str) -> HostFile: ...

    async def delete(self, name: str) -> None: ...

    async def delete_directory(self, name: str) -> None: ...

    async def rename(self, old_name: str, new_name: str) -> None: ...

    async def disconnect(self) -> None: ...


@runtime_checkable
class HostShare(Protocol):
    """A named share the host exposes."""

    name: str
    description: str

    def is_named_pipe(self) -> bool: ...

    async def connect(self, session: Any, share_level_password: Optional[bytes] = None) -> HostTree: ...
