"""Shared fixtures and test doubles for torrentshare tests."""

import asyncio
import itertools
from typing import AsyncIterator, Dict, List, Optional

import pytest

from torrentshare.cache import SearchCache
from torrentshare.models import ContentFile, ResultEntry
from torrentshare.scrapers.base import Scraper
from torrentshare.state import ShareState
from torrentshare.transfer.base import AddOptions, TransferClient, TransferSession
from torrentshare.transfer.registry import SessionRegistry
from torrentshare.vfs.resolver import PathResolver

_identities = itertools.count(1)


class FakeScraper(Scraper):
    """Scraper that returns canned results and records every query."""

    def __init__(self, results: Optional[List[ResultEntry]] = None, error: Optional[Exception] = None):
        self.results = results
        self.error = error
        self.queries: List[str] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def search(self, query: str) -> Optional[List[ResultEntry]]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return None if self.results is None else list(self.results)

    async def close(self) -> None:
        self.closed = True


class FakeSession(TransferSession):
    """Session whose files serve fixed bytes."""

    def __init__(self, content_ref: str, contents: Dict[str, bytes], chunk_size: int = 4):
        self.content_ref = content_ref
        self.contents = contents
        self.chunk_size = chunk_size
        self._identity = f"session-{next(_identities)}"
        self._files = [
            ContentFile(name=name, length=len(data), path=f"torrent/{name}", index=i)
            for i, (name, data) in enumerate(contents.items())
        ]
        self.ready = False
        self.resets = 0
        self.destroyed = False
        self.open_error: Optional[Exception] = None
        # Bytes the stream delivers before ending early, or None for all
        self.available: Optional[int] = None

    @property
    def identity(self) -> str:
        return self._identity

    @property
    def files(self) -> List[ContentFile]:
        return list(self._files) if self.ready else []

    async def wait_ready(self) -> None:
        self.ready = True

    def open_read(self, file: ContentFile, start: int, end: int) -> AsyncIterator[bytes]:
        if self.open_error is not None:
            raise self.open_error
        return self._stream(file, start, end)

    async def _stream(self, file: ContentFile, start: int, end: int) -> AsyncIterator[bytes]:
        data = self.contents[file.name]
        if self.available is not None:
            end = min(end, start + self.available)
        for position in range(start, end, self.chunk_size):
            yield data[position:min(end, position + self.chunk_size)]

    async def reset_selections(self) -> None:
        self.resets += 1

    async def destroy(self) -> None:
        self.destroyed = True


class FakeTransferClient(TransferClient):
    """Transfer client creating FakeSessions, optionally slowly or failing."""

    def __init__(self, contents: Optional[Dict[str, bytes]] = None, delay: float = 0.0):
        self.contents = contents if contents is not None else {"movie.mkv": b"0123456789"}
        self.delay = delay
        self.fail_with: Optional[Exception] = None
        self.added: List[str] = []
        self.sessions: List[FakeSession] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def add(self, content_ref: str, options: AddOptions) -> FakeSession:
        self.added.append(content_ref)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        session = FakeSession(content_ref, self.contents)
        self.sessions.append(session)
        return session

    async def close(self) -> None:
        self.closed = True


def make_result(name: str, ref: Optional[str] = None, **kwargs) -> ResultEntry:
    """Build a ResultEntry with plausible defaults."""
    fields = dict(
        seeders="12",
        leechers="3",
        size="1.4 GB",
        source_name="Index",
        content_ref=ref or f"magnet:?xt=urn:btih:{abs(hash(name)) % 10 ** 8:08d}",
        age="2 days",
        category="Video",
    )
    fields.update(kwargs)
    return ResultEntry(name=name, **fields)


@pytest.fixture
def cache_path(tmp_path):
    """An empty cache store on disk."""
    path = tmp_path / "cache.json"
    SearchCache.create(path)
    return path


@pytest.fixture
def results():
    return [
        make_result("Big Buck Bunny 1080p", ref="magnet:?xt=urn:btih:bunny"),
        make_result("Sintel 4K", ref="magnet:?xt=urn:btih:sintel", category="Movies/HD"),
    ]


@pytest.fixture
def client():
    return FakeTransferClient()


@pytest.fixture
def scraper(results):
    return FakeScraper(results)


@pytest.fixture
def state(cache_path, client):
    return ShareState(cache=SearchCache.load(cache_path), registry=SessionRegistry(client))


@pytest.fixture
def resolver(state, scraper):
    return PathResolver(state, scraper)
