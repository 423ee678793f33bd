"""Path resolution for the virtual tree.

Turns host paths into nodes. Listing a search runs (or replays) a
scrape, listing a result's Files folder brings up a transfer session,
and leaving content browsing tears every session down again.
"""

import fnmatch
import logging
import posixpath
from typing import List, Optional

from torrentshare.errors import NoSuchFileError, SessionCreateError
from torrentshare.models import ResultEntry
from torrentshare.scrapers.base import Scraper
from torrentshare.state import ShareState
from torrentshare.transfer.stream import ByteStreamReader
from torrentshare.vfs.base import ContentFileNode, NodeKind, VirtualNode
from torrentshare.vfs.navigation import (
    ERROR_FETCHING_CACHE,
    ERROR_FETCHING_LIST,
    ERROR_NAMES,
    ERROR_SEARCH_FAILED,
    FILES_FOLDER,
    SEARCH_TRIGGER,
    TOP_LEVEL,
    Bucket,
    ContentFileEntry,
    FilesList,
    ResultChild,
    ResultMeta,
    Root,
    SearchQuery,
    is_metadata_name,
    is_wildcard,
    metadata_names,
    normalize_path,
    parse_path,
    safe_name,
    split_pattern,
)

logger = logging.getLogger(__name__)


class PathResolver:
    """Resolves tree paths against the cache and live sessions.

    It handles:
    - Listing: `list("/A/!SEARCH/*")`, any fnmatch pattern in the last segment
    - Single nodes: `resolve("/A/!SEARCH/Some Result/Files/movie.mkv")`
    """

    def __init__(
        self,
        state: ShareState,
        scraper: Scraper,
        reader: Optional[ByteStreamReader] = None,
        max_results: int = 20,
    ):
        """Initialize path resolver.

        Args:
            state: Process-scoped cache and session registry
            scraper: Used when a query is not cached
            reader: Ranged reader handed to content file nodes
            max_results: Most result folders shown per search
        """
        self.state = state
        self.scraper = scraper
        self.reader = reader or ByteStreamReader()
        self.max_results = max_results

    async def list(self, pattern: str) -> List[VirtualNode]:
        """List the nodes matching pattern.

        A pattern whose last segment has no wildcard is a request for that
        single node.

        Args:
            pattern: Path ending in a wildcard segment (e.g. /A/B/*)

        Returns:
            Matching nodes; listing failures come back as one error leaf
        """
        parent, name_filter = split_pattern(pattern)
        if not is_wildcard(name_filter):
            return [await self.resolve(pattern)]

        nav = parse_path(parent)
        if isinstance(nav, SearchQuery):
            nodes = await self._list_search(parent, nav)
        elif isinstance(nav, FilesList):
            nodes = await self._list_files(parent, nav)
        elif isinstance(nav, ResultMeta):
            nodes = await self._list_result(parent, nav)
        else:
            nodes = await self._list_top_level(parent)

        if name_filter != "*":
            nodes = [n for n in nodes if fnmatch.fnmatchcase(n.name, name_filter)]
        logger.debug(f"list {pattern} > {len(nodes)}")
        return nodes

    async def resolve(self, path: str) -> VirtualNode:
        """Resolve a single node (open/exists).

        Opening a registered content file first resets piece selection on
        every live session, so priorities left by a previously opened file
        do not starve this one.

        Raises:
            NoSuchFileError: If path names a file under Files/ that no
                session has registered
        """
        path = normalize_path(path)
        name = posixpath.basename(path)

        registered = self.state.registry.lookup_file(name)
        if registered is not None:
            session, content_file = registered
            count = await self.state.registry.reset_selections()
            logger.debug(f"Opening {name} from {session.identity}; reset {count} sessions")
            return ContentFileNode(path, session, content_file, self.reader)

        nav = parse_path(path)
        if isinstance(nav, Root):
            return VirtualNode("/", NodeKind.ROOT)
        if isinstance(nav, Bucket):
            return VirtualNode(path, NodeKind.LETTER_BUCKET)
        if isinstance(nav, SearchQuery):
            return VirtualNode(path, NodeKind.SEARCH_BUCKET)
        if isinstance(nav, ResultMeta):
            if nav.result in ERROR_NAMES:
                return VirtualNode(path, NodeKind.ERROR_LEAF)
            return VirtualNode(path, NodeKind.RESULT_FOLDER, self._find_result(nav.query, nav.result))
        if isinstance(nav, FilesList):
            return VirtualNode(path, NodeKind.FILES_FOLDER, self._find_result(nav.query, nav.result))
        if isinstance(nav, ResultChild):
            if is_metadata_name(nav.name):
                return VirtualNode(path, NodeKind.METADATA_LEAF, self._find_result(nav.query, nav.result))
            if nav.name in ERROR_NAMES:
                return VirtualNode(path, NodeKind.ERROR_LEAF)
        if isinstance(nav, ContentFileEntry):
            if nav.name in ERROR_NAMES:
                return VirtualNode(path, NodeKind.ERROR_LEAF)
            if "." in nav.name:
                raise NoSuchFileError(path)

        logger.debug(f"resolve {path}: generic folder")
        return VirtualNode(path, NodeKind.FOLDER)

    def _find_result(self, query: str, name: str) -> Optional[ResultEntry]:
        return self.state.cache.find(query, name, key=safe_name)

    async def _list_search(self, parent: str, nav: SearchQuery) -> List[VirtualNode]:
        if not nav.query:
            return []

        results = self.state.cache.get(nav.query)
        if results is None:
            try:
                results = await self.scraper.search(nav.query)
            except Exception:
                logger.exception(f"Scraper {self.scraper.name} raised for '{nav.query}'")
                results = None
            if results is None:
                logger.warning(f"Search for '{nav.query}' failed")
                return [VirtualNode(posixpath.join(parent, ERROR_FETCHING_LIST), NodeKind.ERROR_LEAF)]
            try:
                self.state.cache.put(nav.query, results)
            except OSError:
                logger.exception(f"Cache save error for '{nav.query}'; serving results unsaved")

        return [
            VirtualNode(posixpath.join(parent, safe_name(r.name)), NodeKind.RESULT_FOLDER, r)
            for r in results[:self.max_results]
        ]

    async def _list_files(self, parent: str, nav: FilesList) -> List[VirtualNode]:
        result = self._find_result(nav.query, nav.result)
        if result is None:
            return [VirtualNode(posixpath.join(parent, ERROR_FETCHING_CACHE), NodeKind.ERROR_LEAF)]

        registry = self.state.registry
        try:
            session = await registry.ensure(result.content_ref)
        except SessionCreateError as e:
            # Listing proceeds without files; the host sees an empty folder
            logger.error(f"Listing {parent} without files: {e}")
            return []

        return [
            ContentFileNode(posixpath.join(parent, f.name), session, f, self.reader)
            for f in registry.register_files(session)
        ]

    async def _list_result(self, parent: str, nav: ResultMeta) -> List[VirtualNode]:
        await self.state.registry.destroy_all()

        if nav.query not in self.state.cache:
            return [VirtualNode(posixpath.join(parent, ERROR_SEARCH_FAILED), NodeKind.ERROR_LEAF)]

        result = self._find_result(nav.query, nav.result)
        if result is None:
            return [VirtualNode(posixpath.join(parent, ERROR_FETCHING_CACHE), NodeKind.ERROR_LEAF)]

        nodes = [VirtualNode(posixpath.join(parent, FILES_FOLDER), NodeKind.FILES_FOLDER, result)]
        names = metadata_names(
            result.seeders,
            result.leechers,
            result.source_name,
            result.age,
            result.category,
            result.size,
        )
        for name in names:
            nodes.append(VirtualNode(posixpath.join(parent, name), NodeKind.METADATA_LEAF, result))
        return nodes

    async def _list_top_level(self, parent: str) -> List[VirtualNode]:
        await self.state.registry.destroy_all()
        return [
            VirtualNode(
                posixpath.join(parent, name),
                NodeKind.SEARCH_BUCKET if name == SEARCH_TRIGGER else NodeKind.LETTER_BUCKET,
            )
            for name in TOP_LEVEL
        ]
