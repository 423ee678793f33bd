"""Persistent search-result cache.

Maps a decoded query string to the ordered results the scraper returned
for it. The whole mapping lives in one JSON document that is read once at
startup and rewritten after every successful new search. Entries are
never evicted; restarting the process is the only refresh.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from torrentshare.errors import CacheLoadError
from torrentshare.models import ResultEntry

logger = logging.getLogger(__name__)


class SearchCache:
    """Query -> results mapping backed by a JSON file.

    Use SearchCache.load() at startup. A missing or unreadable store is
    fatal; create an empty one with SearchCache.create() first.
    """

    def __init__(self, path: Union[str, Path], entries: Optional[Dict[str, List[ResultEntry]]] = None):
        self.path = Path(path)
        self._entries: Dict[str, List[ResultEntry]] = dict(entries or {})

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'SearchCache':
        """Read the store at path.

        Raises:
            CacheLoadError: If the file is missing or is not a valid store
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise CacheLoadError(f"cache store not found: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise CacheLoadError(f"cache store unreadable: {path}: {e}") from e

        if not isinstance(raw, dict):
            raise CacheLoadError(f"cache store is not a mapping: {path}")

        entries: Dict[str, List[ResultEntry]] = {}
        try:
            for query, results in raw.items():
                entries[query] = [ResultEntry.from_dict(r) for r in results]
        except (KeyError, TypeError, AttributeError) as e:
            raise CacheLoadError(f"malformed entry in cache store {path}: {e}") from e

        logger.info(f"Loaded {len(entries)} cached searches from {path}")
        return cls(path, entries)

    @classmethod
    def create(cls, path: Union[str, Path], overwrite: bool = False) -> 'SearchCache':
        """Write an empty store at path and return it.

        Args:
            path: Store location
            overwrite: Replace an existing store instead of raising

        Raises:
            FileExistsError: If a store exists and overwrite is False
        """
        path = Path(path)
        if path.exists() and not overwrite:
            raise FileExistsError(f"cache store already exists: {path}")
        path.parent.mkdir(parents=True, exist_ok=True)
        cache = cls(path)
        cache.persist()
        return cache

    def get(self, query: str) -> Optional[List[ResultEntry]]:
        """Return cached results for query, or None if never searched."""
        results = self._entries.get(query)
        if results is None:
            return None
        return list(results)

    def put(self, query: str, results: Sequence[ResultEntry]) -> None:
        """Store results for query and flush the store.

        Raises:
            ValueError: If results is None (failed scrapes are never cached)
            OSError: If the store cannot be written; the results stay
                cached in memory
        """
        if results is None:
            raise ValueError("refusing to cache a failed search")
        self._entries[query] = list(results)
        self.persist()

    def persist(self) -> None:
        """Write the full mapping to disk.

        Raises:
            OSError: If the store cannot be written; the temporary file is
                removed and the previous store is left in place
        """
        data = {
            query: [r.to_dict() for r in results]
            for query, results in self._entries.items()
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError:
            if tmp_path.is_file():
                tmp_path.unlink()
            raise
        logger.debug(f"Persisted {len(self._entries)} searches to {self.path}")

    def find(self, query: str, name: str, key=None) -> Optional[ResultEntry]:
        """Find a cached result by query and name.

        Args:
            query: Decoded query
            name: Result name to match
            key: Optional transform applied to each result name before
                comparing (e.g. the tree's folder-name sanitizer)
        """
        for result in self._entries.get(query, []):
            candidate = key(result.name) if key else result.name
            if candidate == name:
                return result
        return None

    def queries(self) -> List[str]:
        """All cached queries, in insertion order."""
        return list(self._entries)

    def __contains__(self, query: object) -> bool:
        return query in self._entries

    def __len__(self) -> int:
        return len(self._entries)
