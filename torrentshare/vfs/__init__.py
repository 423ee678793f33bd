"""Virtual tree over torrent search results.

The tree maps cached searches and live transfer sessions to a
hierarchical structure a file-sharing host can browse.

Architecture:

    ```
    /                                   # Root
    ├── !SEARCH/                        # Runs the query spelled so far
    ├── !SPACE/                         # Spells a space
    ├── A/ ... Z/                       # Spell a letter (each holds the same 28 buckets)
    │
    /U/B/U/N/T/U/!SEARCH/               # Search results (up to 20 folders)
    └── Ubuntu 22.04 Desktop/           # One result (ResultEntry)
        ├── Files/                      # Files of the torrent (starts a session)
        │   └── ubuntu-22.04.iso        # Ranged reads stream from the session
        ├── Seeders: 1204               # Metadata leaves (name only, zero bytes)
        ├── Leechers: 37
        ├── Source: Example
        ├── Age: 3 days ago
        ├── Category: Software|Linux
        └── Size: 3.4 GB
    ```

Path Resolution:

    The PathResolver handles navigation:
    - list(pattern): children of the pattern's parent, filtered by the
      last segment (`*` or any fnmatch pattern)
    - resolve(path): one node (open/exists)

Usage Example:

    ```python
    from torrentshare import TorrentShare, load_config

    share = TorrentShare.from_config("torrents", load_config())
    tree = await share.connect()

    results = await tree.list("/U/B/U/N/T/U/!SEARCH/*")
    files = await tree.list(results[0].path + "/Files/*")

    node = await tree.open(files[0].path)
    buffer = bytearray(4096)
    count = await node.read(buffer, 0, len(buffer), 0)
    ```
"""

from torrentshare.vfs.base import VirtualNode, ContentFileNode, NodeKind
from torrentshare.vfs.resolver import PathResolver
from torrentshare.vfs.tree import ShareTree
from torrentshare.vfs.protocols import HostFile, HostTree, HostShare

__all__ = [
    # Core classes
    "VirtualNode",
    "ContentFileNode",
    "NodeKind",
    # Path resolution
    "PathResolver",
    # Host contract
    "ShareTree",
    "HostFile",
    "HostTree",
    "HostShare",
]
