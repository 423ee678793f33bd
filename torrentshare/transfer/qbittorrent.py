"""
qBittorrent transfer client.

Drives a qBittorrent instance through its Web API (v2). Each session is a
torrent added with a unique tag so it can be found again without knowing
its info hash up front. Ranged reads come from the staging directory once
the pieces that cover the range are complete; until then the file being
read is raised to maximum priority.
"""

import asyncio
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from torrentshare.config import TransferConfig
from torrentshare.errors import TransferError
from torrentshare.models import ContentFile
from torrentshare.transfer.base import AddOptions, TransferClient, TransferSession

logger = logging.getLogger(__name__)

# qBittorrent file priorities
PRIORITY_NORMAL = 1
PRIORITY_MAXIMUM = 7

# pieceStates values
PIECE_DOWNLOADED = 2


def _read_range(path: Path, position: int, size: int) -> bytes:
    with open(path, 'rb') as f:
        f.seek(position)
        return f.read(size)


class QBitTransferClient(TransferClient):
    """
    qBittorrent Web API client.

    Communicates over HTTP with the qBittorrent WebUI. The session cookie
    returned by /auth/login is kept by the underlying httpx client.
    """

    def __init__(self, config: TransferConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            config: Connection and streaming settings
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "qbittorrent"

    async def initialize(self) -> None:
        """Open the HTTP client and authenticate."""
        self._client = httpx.AsyncClient(
            base_url=self.config.url.rstrip("/"),
            transport=self._transport,
            timeout=30.0,
        )
        await self.login()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def login(self) -> None:
        """Authenticate with the WebUI.

        Raises:
            TransferError: If the credentials are rejected
        """
        try:
            response = await self._client.post(
                "/api/v2/auth/login",
                data={"username": self.config.username, "password": self.config.password},
            )
        except httpx.HTTPError as e:
            raise TransferError(f"qBittorrent unreachable at {self.config.url}: {e}") from e
        if response.status_code != 200 or "Fails" in response.text:
            raise TransferError(f"qBittorrent login failed ({response.status_code})")
        logger.debug(f"Logged in to qBittorrent at {self.config.url}")

    async def get(self, path: str, **params: Any) -> Any:
        """GET an API path and decode the JSON body."""
        if not self._client:
            await self.initialize()
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransferError(f"GET {path} failed: {e}") from e
        return response.json()

    async def post(self, path: str, data: Dict[str, Any]) -> str:
        """POST form data to an API path and return the body text."""
        if not self._client:
            await self.initialize()
        try:
            response = await self._client.post(path, data=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransferError(f"POST {path} failed: {e}") from e
        return response.text

    async def add(self, content_ref: str, options: AddOptions) -> 'QBitSession':
        """
        Add a torrent URL or magnet URI.

        Args:
            content_ref: Torrent URL or magnet URI
            options: Staging directory and selection options

        Returns:
            QBitSession tagged for later lookup
        """
        save_path = Path(options.path).resolve()
        save_path.mkdir(parents=True, exist_ok=True)
        tag = f"torrentshare-{uuid.uuid4().hex[:12]}"

        body = await self.post("/api/v2/torrents/add", {
            "urls": content_ref,
            "savepath": str(save_path),
            "tags": tag,
            "sequentialDownload": "true" if options.sequential else "false",
            "firstLastPiecePrio": "true",
        })
        if "Fails" in body:
            raise TransferError(f"qBittorrent refused {content_ref}")

        logger.debug(f"Added {content_ref} with tag {tag}")
        return QBitSession(self, tag, save_path)


class QBitSession(TransferSession):
    """One torrent inside qBittorrent."""

    def __init__(self, client: QBitTransferClient, tag: str, save_path: Path):
        self.client = client
        self.tag = tag
        self.save_path = save_path
        self.info_hash: Optional[str] = None
        self.piece_size = 0
        self._files: List[ContentFile] = []
        self._offsets: Dict[int, int] = {}

    @property
    def identity(self) -> str:
        return self.info_hash or self.tag

    @property
    def files(self) -> List[ContentFile]:
        return list(self._files)

    async def wait_ready(self) -> None:
        """Poll until the torrent is known and its metadata has arrived.

        Raises:
            TransferError: If nothing shows up within the stall timeout
        """
        config = self.client.config
        loop = asyncio.get_running_loop()
        deadline = loop.time() + config.stall_timeout

        while self.info_hash is None:
            torrents = await self.client.get("/api/v2/torrents/info", tag=self.tag)
            if torrents:
                self.info_hash = torrents[0]["hash"]
                break
            if loop.time() > deadline:
                raise TransferError(f"torrent with tag {self.tag} never appeared")
            await asyncio.sleep(config.poll_interval)

        raw_files: List[Dict[str, Any]] = []
        while not raw_files:
            raw_files = await self.client.get("/api/v2/torrents/files", hash=self.info_hash)
            if raw_files:
                break
            if loop.time() > deadline:
                raise TransferError(f"no metadata for {self.info_hash}")
            await asyncio.sleep(config.poll_interval)

        properties = await self.client.get("/api/v2/torrents/properties", hash=self.info_hash)
        self.piece_size = int(properties.get("piece_size") or 0)
        if properties.get("save_path"):
            self.save_path = Path(properties["save_path"])

        offset = 0
        files = []
        for position, raw in enumerate(raw_files):
            index = int(raw.get("index", position))
            files.append(ContentFile(
                name=PurePosixPath(raw["name"]).name,
                length=int(raw["size"]),
                path=raw["name"],
                index=index,
            ))
            self._offsets[index] = offset
            offset += int(raw["size"])
        self._files = files

    async def _set_priority(self, indices: List[int], priority: int) -> None:
        if not indices:
            return
        await self.client.post("/api/v2/torrents/filePrio", {
            "hash": self.info_hash,
            "id": "|".join(str(i) for i in indices),
            "priority": priority,
        })

    async def _pieces_ready(self, first: int, last: int) -> bool:
        states = await self.client.get("/api/v2/torrents/pieceStates", hash=self.info_hash)
        if last >= len(states):
            return False
        return all(state == PIECE_DOWNLOADED for state in states[first:last + 1])

    async def open_read(self, file: ContentFile, start: int, end: int) -> AsyncIterator[bytes]:
        """Stream [start, end) of file from the staging directory.

        Stops early when no new piece completes within the stall timeout.
        """
        if self.info_hash is None or self.piece_size <= 0:
            raise TransferError(f"session {self.tag} is not ready")

        config = self.client.config
        loop = asyncio.get_running_loop()
        await self._set_priority([file.index], PRIORITY_MAXIMUM)

        base = self._offsets.get(file.index, 0)
        disk_path = self.save_path / file.path
        position = start
        last_progress = loop.time()

        while position < end:
            chunk_end = min(end, position + config.chunk_size)
            first_piece = (base + position) // self.piece_size
            last_piece = (base + chunk_end - 1) // self.piece_size

            if await self._pieces_ready(first_piece, last_piece):
                data = await loop.run_in_executor(
                    None, _read_range, disk_path, position, chunk_end - position
                )
                if not data:
                    return
                position += len(data)
                last_progress = loop.time()
                yield data
                continue

            if loop.time() - last_progress > config.stall_timeout:
                logger.warning(
                    f"No progress on {file.name} for {config.stall_timeout}s at byte {position}"
                )
                return
            await asyncio.sleep(config.poll_interval)

    async def reset_selections(self) -> None:
        """Put every file back to normal priority and keep sequential order on."""
        if self.info_hash is None:
            return
        await self._set_priority([f.index for f in self._files], PRIORITY_NORMAL)

        torrents = await self.client.get("/api/v2/torrents/info", hashes=self.info_hash)
        if torrents and not torrents[0].get("seq_dl", True):
            await self.client.post(
                "/api/v2/torrents/toggleSequentialDownload",
                {"hashes": self.info_hash},
            )

    async def destroy(self) -> None:
        """Delete the torrent and its staged files."""
        if self.info_hash is None:
            return
        await self.client.post("/api/v2/torrents/delete", {
            "hashes": self.info_hash,
            "deleteFiles": "true",
        })
        logger.debug(f"Deleted torrent {self.info_hash}")
