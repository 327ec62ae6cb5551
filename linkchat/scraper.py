"""Scrape orchestration: cache lookup first, fresh extraction on a miss."""

import logging

from linkchat.cache import ContentCache
from linkchat.extractor import HtmlExtractor
from linkchat.models import ScrapedContent

logger = logging.getLogger(__name__)


class Scraper:
    """Returns prompt-safe content for a URL, from cache when possible."""

    def __init__(self, cache: ContentCache, extractor: HtmlExtractor):
        self.cache = cache
        self.extractor = extractor

    async def scrape(self, url: str) -> ScrapedContent:
        """Return cached content, or fetch it.

        The extractor writes successful results to the cache itself, and
        its result (success or degraded record) is returned unchanged.
        """
        logger.info("Scraping URL: %s", url)
        cached = self.cache.get(url)
        if cached is not None:
            return cached

        logger.info("Cache miss, proceeding with fresh scrape for %s", url)
        return await self.extractor.extract(url)
