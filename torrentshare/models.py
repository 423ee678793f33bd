"""Data records shared by the cache, scrapers and transfer sessions."""

from dataclasses import dataclass, asdict
from typing import Dict, Any


@dataclass(frozen=True)
class ResultEntry:
    """One search result as scraped from the remote index.

    Attributes:
        name: Result title, used as the folder name in the tree
        seeders: Seeder count label (kept as scraped, e.g. "1,204")
        leechers: Leecher count label
        size: Human-readable size label (e.g. "1.4 GB")
        source_name: Name of the indexer the result came from
        source_url: Link to the indexer page, or "not found"
        content_ref: Torrent URL or magnet URI handed to the transfer client
        age: Age label (e.g. "3 days ago")
        category: Category label; may contain "/"
    """

    name: str
    seeders: str = ""
    leechers: str = ""
    size: str = ""
    source_name: str = ""
    source_url: str = "not found"
    content_ref: str = ""
    age: str = ""
    category: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResultEntry':
        """Create from a dictionary.

        Accepts both the current field names and the camelCase keys used
        by older cache stores (seed, leech, sourceName, sourceURL,
        torrentURL).
        """
        return cls(
            name=str(data["name"]),
            seeders=str(data.get("seeders", data.get("seed", ""))),
            leechers=str(data.get("leechers", data.get("leech", ""))),
            size=str(data.get("size", "")),
            source_name=str(data.get("source_name", data.get("sourceName", ""))),
            source_url=str(data.get("source_url", data.get("sourceURL", "not found"))),
            content_ref=str(data.get("content_ref", data.get("torrentURL", ""))),
            age=str(data.get("age", "")),
            category=str(data.get("category", "")),
        )


@dataclass(frozen=True)
class ContentFile:
    """A file inside an active transfer session.

    Attributes:
        name: Base name shown in the tree
        length: File length in bytes
        path: Path relative to the torrent root
        index: Position of the file in the torrent's file list
    """

    name: str
    length: int
    path: str = ""
    index: int = 0
