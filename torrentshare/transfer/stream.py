"""Ranged reads from a session's content file."""

import logging

from torrentshare.models import ContentFile
from torrentshare.transfer.base import TransferSession

logger = logging.getLogger(__name__)


class ByteStreamReader:
    """Pulls a byte range out of a transfer session.

    Reads are best effort. The result may be shorter than requested when
    the stream closes early, and a stream that cannot be opened at all
    produces an empty result instead of an error. Callers must treat short
    reads as partial success.
    """

    async def read(
        self,
        session: TransferSession,
        file: ContentFile,
        offset: int,
        length: int,
    ) -> bytes:
        """Read up to length bytes of file starting at offset.

        Args:
            session: Session that owns file
            file: File to read from
            offset: Byte position inside file
            length: Maximum number of bytes wanted

        Returns:
            The bytes that arrived, possibly fewer than length
        """
        if length <= 0 or offset >= file.length:
            return b""
        end = min(offset + length, file.length)

        try:
            stream = session.open_read(file, offset, end)
        except Exception as e:
            logger.warning(f"Could not open stream for {file.name} at {offset}: {e}")
            return b""

        data = bytearray()
        try:
            async for chunk in stream:
                data += chunk[:end - offset - len(data)]
                if len(data) >= end - offset:
                    break
        except Exception as e:
            logger.warning(
                f"Stream for {file.name} closed after {len(data)}/{end - offset} bytes: {e}"
            )
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        if len(data) < length:
            logger.debug(f"Short read on {file.name}: {len(data)}/{length} bytes at {offset}")
        return bytes(data)
