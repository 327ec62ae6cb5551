"""HTML fetching and readable-text extraction."""

import logging
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from linkchat.cache import ContentCache
from linkchat.models import Headings, ScrapedContent, now_ms

logger = logging.getLogger(__name__)

# Max characters of combined page text kept in ScrapedContent.content
MAX_CONTENT_LENGTH = 50_000

# Elements dropped from the document before any text is read
NON_CONTENT_SELECTOR = "script, style, noscript, iframe, img, video, audio, form, button"

CONTENT_HEURISTIC_SELECTOR = '.content, #content, [class*="content"]'

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse whitespace runs to single spaces, drop newlines, and trim."""
    return _WHITESPACE_RE.sub(" ", text).replace("\n", "").strip()


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    """Text of every element matching selector, joined by single spaces."""
    return " ".join(el.get_text() for el in soup.select(selector))


def extract_content(url: str, html: str) -> ScrapedContent:
    """Reduce an HTML document to a ScrapedContent record.

    Non-content elements are removed first. The combined text is drawn
    from the title, meta description, headings, and the usual article
    containers (article, main, content-like classes, paragraphs, list
    items), cleaned and truncated to MAX_CONTENT_LENGTH characters.
    Overlapping regions are not deduplicated.
    """
    soup = BeautifulSoup(html, "lxml")

    for el in soup.select(NON_CONTENT_SELECTOR):
        el.extract()

    title = "".join(el.get_text() for el in soup.select("title"))
    meta = soup.select_one('meta[name="description"]')
    meta_description = (meta.get("content") or "") if meta is not None else ""
    h1 = _joined_text(soup, "h1")
    h2 = _joined_text(soup, "h2")

    combined = " ".join([
        title,
        meta_description,
        h1,
        h2,
        _joined_text(soup, "article"),
        _joined_text(soup, "main"),
        _joined_text(soup, CONTENT_HEURISTIC_SELECTOR),
        _joined_text(soup, "p"),
        _joined_text(soup, "li"),
    ])

    return ScrapedContent(
        url=url,
        title=clean_text(title),
        headings=Headings(h1=clean_text(h1), h2=clean_text(h2)),
        meta_description=clean_text(meta_description),
        content=clean_text(combined)[:MAX_CONTENT_LENGTH],
        error=None,
        created_at=now_ms(),
    )


async def fetch_html(url: str, timeout: float = 15.0) -> str:
    """GET a URL and return the response body. Raises on non-2xx."""
    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
    return response.text


class HtmlExtractor:
    """Fetches a page, extracts its text, and caches successful results."""

    def __init__(self, cache: Optional[ContentCache] = None, timeout: float = 15.0):
        self.cache = cache
        self.timeout = timeout

    async def extract(self, url: str) -> ScrapedContent:
        """Fetch and extract url in a single attempt.

        Any fetch or parse failure yields a degraded record, which is
        never cached.
        """
        try:
            html = await fetch_html(url, timeout=self.timeout)
            scraped = extract_content(url, html)
        except Exception:
            logger.warning("Failed to scrape URL: %s", url, exc_info=True)
            return ScrapedContent.failed(url)

        if self.cache is not None:
            self.cache.put(url, scraped)
        return scraped
