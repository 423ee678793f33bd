"""
HTML results-page scraper.

Fetches a search results page over HTTP and pulls one ResultEntry out of
every `#results > .result-item` element. Each item is expected to carry
child elements with the classes name, seed, leech, size, age, category
and torrent (a link), plus a "site: <source> •" fragment naming the
indexer.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import quote

import httpx
from lxml import etree, html

from torrentshare.config import ScraperConfig
from torrentshare.errors import ScrapeError
from torrentshare.models import ResultEntry
from torrentshare.scrapers.base import Scraper

logger = logging.getLogger(__name__)

SOURCE_PATTERN = re.compile(r"site: (.*?)\s*•", re.DOTALL)


def _has_class(cls: str) -> str:
    return f'contains(concat(" ", normalize-space(@class), " "), " {cls} ")'


def _by_class(cls: str) -> str:
    return f".//*[{_has_class(cls)}]"


def _text(item: html.HtmlElement, cls: str) -> str:
    found = item.xpath(_by_class(cls))
    if not found:
        return ""
    return found[0].text_content().strip()


def _parse_source(item: html.HtmlElement):
    markup = html.tostring(item, encoding="unicode")
    match = SOURCE_PATTERN.search(markup)
    if not match:
        return "", "not found"

    source = match.group(1).strip()
    if source.startswith("<a "):
        link = html.fragment_fromstring(source)
        return link.text_content().strip(), link.get("href", "not found")
    return source, "not found"


def parse_results(page: str) -> List[ResultEntry]:
    """
    Parse a results page.

    Args:
        page: HTML of the results page

    Returns:
        Results in page order; items without a torrent link are skipped

    Raises:
        ScrapeError: If the page has no results container
    """
    try:
        doc = html.fromstring(page)
    except (etree.ParserError, ValueError) as e:
        raise ScrapeError(f"unparseable results page: {e}") from e

    containers = doc.xpath('//*[@id="results"]')
    if not containers:
        raise ScrapeError("results container not found")

    results = []
    for item in containers[0].xpath(f'./*[{_has_class("result-item")}]'):
        links = item.xpath(_by_class("torrent"))
        href = links[0].get("href") if links else None
        if not href:
            logger.debug("Skipping result item without torrent link")
            continue

        # The first word of the name cell is an icon label, not part of the title
        name = " ".join(_text(item, "name").split(" ")[1:])
        source_name, source_url = _parse_source(item)

        results.append(ResultEntry(
            name=name,
            seeders=_text(item, "seed"),
            leechers=_text(item, "leech"),
            size=_text(item, "size"),
            source_name=source_name,
            source_url=source_url,
            content_ref=href,
            age=_text(item, "age"),
            category=_text(item, "category"),
        ))

    return results


class HtmlResultScraper(Scraper):
    """Scrape a results page reachable at a URL template."""

    def __init__(self, config: ScraperConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the scraper.

        Args:
            config: Search URL template ({query} placeholder), user agent, timeout
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "html"

    async def initialize(self) -> None:
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            transport=self._transport,
            timeout=self.config.timeout,
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def search_url(self, query: str) -> str:
        """Build the results URL for query."""
        template = self.config.search_url
        if "{query}" not in template:
            template = template.rstrip("/") + "/search?q={query}"
        return template.format(query=quote(query))

    async def search(self, query: str) -> Optional[List[ResultEntry]]:
        """
        Run a search.

        Args:
            query: Decoded query text

        Returns:
            Parsed results, or None on any network or parse failure
        """
        if not self._client:
            await self.initialize()

        url = self.search_url(query)
        logger.info(f"Searching {url}")
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            results = parse_results(response.text)
        except (httpx.HTTPError, ScrapeError) as e:
            logger.warning(f"Search for '{query}' failed: {e}")
            return None

        logger.info(f"Search for '{query}' returned {len(results)} results")
        return results
