"""
Tests for the HTML results-page scraper.
"""

import httpx
import pytest

from torrentshare.config import ScraperConfig
from torrentshare.errors import ScrapeError
from torrentshare.scrapers.html import HtmlResultScraper, parse_results

PAGE = """
<html><body>
<div id="results">
  <div class="result-item">
    <span class="name">video Big Buck Bunny 1080p</span>
    <span class="seed">1,204</span>
    <span class="leech">88</span>
    <span class="size">1.4 GB</span>
    <span class="age">3 days ago</span>
    <span class="category">Movies/HD</span>
    <span class="info">site: <a href="https://index.example/bbb">Index One</a> •</span>
    <a class="torrent" href="magnet:?xt=urn:btih:bunny">magnet</a>
  </div>
  <div class="result-item ad">
    <span class="name">ad Sponsored</span>
  </div>
  <div class="result-item">
    <span class="name">video Sintel 4K</span>
    <span class="seed">40</span>
    <span class="leech">2</span>
    <span class="size">3.0 GB</span>
    <span class="age">1 year ago</span>
    <span class="category">Movies</span>
    <span class="info">site: Index Two •</span>
    <a class="torrent" href="https://index.example/sintel.torrent">torrent</a>
  </div>
</div>
</body></html>
"""


class TestParseResults:

    def test_parses_items_in_order(self):
        results = parse_results(PAGE)
        assert [r.name for r in results] == ["Big Buck Bunny 1080p", "Sintel 4K"]

    def test_fields(self):
        bunny = parse_results(PAGE)[0]
        assert bunny.seeders == "1,204"
        assert bunny.leechers == "88"
        assert bunny.size == "1.4 GB"
        assert bunny.age == "3 days ago"
        assert bunny.category == "Movies/HD"
        assert bunny.content_ref == "magnet:?xt=urn:btih:bunny"

    def test_linked_source(self):
        bunny = parse_results(PAGE)[0]
        assert bunny.source_name == "Index One"
        assert bunny.source_url == "https://index.example/bbb"

    def test_plain_source(self):
        sintel = parse_results(PAGE)[1]
        assert sintel.source_name == "Index Two"
        assert sintel.source_url == "not found"

    def test_empty_results(self):
        assert parse_results('<html><body><div id="results"></div></body></html>') == []

    def test_missing_container(self):
        with pytest.raises(ScrapeError):
            parse_results("<html><body><p>blocked</p></body></html>")


def make_scraper(handler, search_url="https://search.example/{query}/1"):
    return HtmlResultScraper(
        ScraperConfig(search_url=search_url),
        transport=httpx.MockTransport(handler),
    )


class TestHtmlResultScraper:

    def test_search_url_template(self):
        scraper = make_scraper(None)
        assert scraper.search_url("HI YO") == "https://search.example/HI%20YO/1"

    def test_search_url_without_placeholder(self):
        scraper = make_scraper(None, search_url="https://search.example/")
        assert scraper.search_url("HI") == "https://search.example/search?q=HI"

    @pytest.mark.asyncio
    async def test_search(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text=PAGE)

        scraper = make_scraper(handler)
        try:
            results = await scraper.search("BUNNY")
        finally:
            await scraper.close()

        assert len(results) == 2
        assert seen[0].url.path == "/BUNNY/1"
        assert "Mozilla" in seen[0].headers["user-agent"]

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        scraper = make_scraper(lambda request: httpx.Response(503))
        try:
            assert await scraper.search("BUNNY") is None
        finally:
            await scraper.close()

    @pytest.mark.asyncio
    async def test_unparseable_page_returns_none(self):
        scraper = make_scraper(lambda request: httpx.Response(200, text="<html><body></body></html>"))
        try:
            assert await scraper.search("BUNNY") is None
        finally:
            await scraper.close()

    @pytest.mark.asyncio
    async def test_connection_error_returns_none(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        scraper = make_scraper(handler)
        try:
            assert await scraper.search("BUNNY") is None
        finally:
            await scraper.close()
