"""Transfer sessions: client interface, session registry and ranged reads."""

from torrentshare.transfer.base import AddOptions, TransferClient, TransferSession
from torrentshare.transfer.registry import SessionRegistry
from torrentshare.transfer.stream import ByteStreamReader

__all__ = [
    "AddOptions",
    "TransferClient",
    "TransferSession",
    "SessionRegistry",
    "ByteStreamReader",
]
