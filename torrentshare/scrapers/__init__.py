"""Remote search scrapers."""

from torrentshare.scrapers.base import Scraper
from torrentshare.scrapers.html import HtmlResultScraper, parse_results

__all__ = ["Scraper", "HtmlResultScraper", "parse_results"]
