"""Navigation states and the path parser.

Hosts can only browse, not type, so queries are spelled by walking
single-letter folders. The `!SPACE` folder stands for a space, and
entering `!SEARCH` runs the query spelled so far:

    /                                         Root
    /H/I                                      Bucket ("HI" spelled so far)
    /H/I/!SPACE/Y/O/!SEARCH                   SearchQuery("HI YO")
    /H/I/!SEARCH/<result>                     ResultMeta
    /H/I/!SEARCH/<result>/Seeders: 12         ResultChild
    /H/I/!SEARCH/<result>/Files               FilesList
    /H/I/!SEARCH/<result>/Files/movie.mkv     ContentFileEntry

The sentinel vocabulary exists only at this boundary. Everything past
parse_path() works with the tagged state values.
"""

import posixpath
import string
from dataclasses import dataclass
from typing import List, Tuple, Union

SEARCH_TRIGGER = "!SEARCH"
SPACE_TOKEN = "!SPACE"
FILES_FOLDER = "Files"
LETTERS = tuple(string.ascii_uppercase)
TOP_LEVEL = (SEARCH_TRIGGER, SPACE_TOKEN) + LETTERS

METADATA_LABELS = ("Seeders", "Leechers", "Source", "Age", "Category", "Size")

ERROR_FETCHING_LIST = "error fetching list"
ERROR_FETCHING_CACHE = "error fetching from cache"
ERROR_SEARCH_FAILED = "Search failed, try again"
ERROR_NAMES = (ERROR_FETCHING_LIST, ERROR_FETCHING_CACHE, ERROR_SEARCH_FAILED)


@dataclass(frozen=True)
class Root:
    pass


@dataclass(frozen=True)
class Bucket:
    """A letter or space folder outside any search."""
    segments: Tuple[str, ...]


@dataclass(frozen=True)
class SearchQuery:
    query: str


@dataclass(frozen=True)
class ResultMeta:
    query: str
    result: str


@dataclass(frozen=True)
class ResultChild:
    """A metadata (or error) leaf inside a result folder."""
    query: str
    result: str
    name: str


@dataclass(frozen=True)
class FilesList:
    query: str
    result: str


@dataclass(frozen=True)
class ContentFileEntry:
    query: str
    result: str
    name: str


NavState = Union[Root, Bucket, SearchQuery, ResultMeta, ResultChild, FilesList, ContentFileEntry]


def decode_query(segments: List[str]) -> str:
    """Join spelled bucket segments into query text."""
    return "".join(" " if s == SPACE_TOKEN else s for s in segments)


def encode_query(query: str) -> str:
    """Spell query as a bucket path ending in the search trigger.

    >>> encode_query("hi yo")
    '/H/I/!SPACE/Y/O/!SEARCH'
    """
    segments = [SPACE_TOKEN if ch == " " else ch.upper() for ch in query]
    return "/" + "/".join(segments + [SEARCH_TRIGGER])


def safe_name(text: str) -> str:
    """Replace path separators so text can be used as one path segment."""
    return text.replace("/", "|").replace("\\", "|")


def metadata_names(seeders: str, leechers: str, source: str, age: str, category: str, size: str) -> List[str]:
    """Leaf names shown inside a result folder, in display order."""
    values = (seeders, leechers, source, age, category, size)
    return [safe_name(f"{label}: {value}") for label, value in zip(METADATA_LABELS, values)]


def is_metadata_name(name: str) -> bool:
    return any(name.startswith(f"{label}: ") for label in METADATA_LABELS)


def normalize_path(path: str) -> str:
    """Collapse separators and strip the trailing slash (root stays "/")."""
    if not path:
        return "/"
    segments = [s for s in path.replace("\\", "/").split("/") if s]
    return "/" + "/".join(segments)


def split_pattern(pattern: str) -> Tuple[str, str]:
    """Split a list pattern into (parent path, final segment).

    >>> split_pattern("/A/B/*")
    ('/A/B', '*')
    """
    pattern = normalize_path(pattern)
    parent, name = posixpath.split(pattern)
    return parent or "/", name


def is_wildcard(segment: str) -> bool:
    return any(ch in segment for ch in "*?[")


def parse_path(path: str) -> NavState:
    """Classify a normalized path.

    Args:
        path: Absolute tree path without wildcards

    Returns:
        The navigation state the path denotes
    """
    segments = [s for s in normalize_path(path).split("/") if s]
    if not segments:
        return Root()

    if SEARCH_TRIGGER not in segments:
        return Bucket(tuple(segments))

    trigger = segments.index(SEARCH_TRIGGER)
    query = decode_query(segments[:trigger])
    rest = segments[trigger + 1:]

    if not rest:
        return SearchQuery(query)

    result = rest[0]
    if len(rest) == 1:
        return ResultMeta(query, result)

    if rest[1] == FILES_FOLDER:
        if len(rest) == 2:
            return FilesList(query, result)
        return ContentFileEntry(query, result, rest[-1])

    return ResultChild(query, result, rest[-1])
