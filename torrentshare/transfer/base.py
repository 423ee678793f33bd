"""
Base abstract transfer-client interface.

The tree never talks to a BitTorrent engine directly. It goes through
these two classes, which any engine adapter (qBittorrent, a test double)
must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List

from torrentshare.models import ContentFile


@dataclass
class AddOptions:
    """Options passed when adding content to the transfer client."""

    # Local staging directory the engine downloads into
    path: str = "./dls/"

    # Fetch pieces in order so ranged reads near the start arrive first
    sequential: bool = True


class TransferSession(ABC):
    """A live transfer for one content ref.

    The session owns the engine-side torrent. Its selection state decides
    which pieces are fetched most urgently; open_read() raises the
    priority of the range it streams and reset_selections() drops those
    priorities again.
    """

    @property
    @abstractmethod
    def identity(self) -> str:
        """Engine-side identity (normally the info hash)."""
        pass

    @property
    @abstractmethod
    def files(self) -> List[ContentFile]:
        """Files in this torrent. Empty until wait_ready() has returned."""
        pass

    @abstractmethod
    async def wait_ready(self) -> None:
        """Wait until identity and file metadata are available."""
        pass

    @abstractmethod
    def open_read(self, file: ContentFile, start: int, end: int) -> AsyncIterator[bytes]:
        """Stream bytes [start, end) of file as they arrive.

        The returned iterator may stop before end if the engine stalls.

        Raises:
            TransferError: If the stream cannot be opened
        """
        pass

    @abstractmethod
    async def reset_selections(self) -> None:
        """Clear prioritized ranges and restore default sequential selection."""
        pass

    @abstractmethod
    async def destroy(self) -> None:
        """Remove the torrent from the engine and drop staged data."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(identity='{self.identity}')"


class TransferClient(ABC):
    """
    Abstract base class for transfer clients.

    A client turns a content ref (torrent URL or magnet URI) into a
    TransferSession.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name (e.g., 'qbittorrent')."""
        pass

    @abstractmethod
    async def add(self, content_ref: str, options: AddOptions) -> TransferSession:
        """
        Start a transfer for content_ref.

        Args:
            content_ref: Torrent URL or magnet URI
            options: Staging directory and selection options

        Returns:
            Session handle; call wait_ready() before using its files
        """
        pass

    async def close(self) -> None:
        """Release client resources (HTTP connections etc.)."""
        pass
