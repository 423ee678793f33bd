"""
torrentshare - torrent search results as a read-only file tree.

Main API:
    from torrentshare import TorrentShare, load_config

    # Build a share from ~/.config/torrentshare/config.json
    share = TorrentShare.from_config("torrents", load_config())

    # Hand a tree to the host server for each connection
    tree = await share.connect()

    # Browse: spell a query with letter folders, then enter !SEARCH
    results = await tree.list("/D/E/B/I/A/N/!SEARCH/*")

    # Always close when done
    await share.close()
"""

from .config import ShareConfig, load_config
from .share import TorrentShare

__version__ = "0.1.0"
__all__ = ["TorrentShare", "ShareConfig", "load_config"]
