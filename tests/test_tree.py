"""
Tests for TorrentShare and the per-connection ShareTree.
"""

import pytest

from torrentshare.errors import NotSupportedError
from torrentshare.share import TorrentShare
from torrentshare.vfs.protocols import HostShare, HostTree
from torrentshare.vfs.tree import ShareTree


@pytest.fixture
def share(state, scraper):
    return TorrentShare("torrents", state, scraper, description="test share")


class TestShare:

    def test_share_contract(self, share):
        assert isinstance(share, HostShare)
        assert not share.is_named_pipe()

    @pytest.mark.asyncio
    async def test_connect_returns_tree(self, share):
        tree = await share.connect(session=object())
        assert isinstance(tree, ShareTree)
        assert isinstance(tree, HostTree)

    @pytest.mark.asyncio
    async def test_trees_share_state(self, share, scraper):
        first = await share.connect()
        second = await share.connect()

        await first.list("/B/U/N/N/Y/!SEARCH/*")
        await second.list("/B/U/N/N/Y/!SEARCH/*")

        assert scraper.queries == ["BUNNY"]

    @pytest.mark.asyncio
    async def test_close_releases_everything(self, share, client, scraper):
        tree = await share.connect()
        await tree.list("/B/U/N/N/Y/!SEARCH/*")
        await tree.list("/B/U/N/N/Y/!SEARCH/Big Buck Bunny 1080p/Files/*")

        await share.close()

        assert client.sessions[0].destroyed
        assert client.closed
        assert scraper.closed


class TestTree:

    @pytest.mark.asyncio
    async def test_exists(self, share):
        tree = await share.connect()
        assert await tree.exists("/A/B")
        assert not await tree.exists("/Q/!SEARCH/R/Files/missing.mkv")

    @pytest.mark.asyncio
    async def test_open(self, share):
        tree = await share.connect()
        node = await tree.open("/B/U/N/N/Y/!SEARCH")
        assert node.is_directory()

    @pytest.mark.asyncio
    async def test_list(self, share):
        tree = await share.connect()
        assert len(await tree.list("/*")) == 28

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,args", [
        ("create_file", ("/A/new.txt",)),
        ("create_directory", ("/A/new",)),
        ("delete", ("/A/old.txt",)),
        ("delete_directory", ("/A",)),
        ("rename", ("/A", "/B")),
    ])
    async def test_mutations_not_supported(self, share, operation, args):
        tree = await share.connect()
        with pytest.raises(NotSupportedError):
            await getattr(tree, operation)(*args)

    @pytest.mark.asyncio
    async def test_disconnect_keeps_sessions(self, share, state):
        tree = await share.connect()
        await tree.list("/B/U/N/N/Y/!SEARCH/*")
        await tree.list("/B/U/N/N/Y/!SEARCH/Big Buck Bunny 1080p/Files/*")

        await tree.disconnect()
        assert len(state.registry) == 1
