"""Tests for linkchat.extractor."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from linkchat.cache import ContentCache
from linkchat.extractor import (
    MAX_CONTENT_LENGTH,
    HtmlExtractor,
    clean_text,
    extract_content,
    fetch_html,
)
from linkchat.models import SCRAPE_FAILED_MESSAGE

URL = "https://example.com/article"

ARTICLE_HTML = """
<html>
<head>
  <title>  Learning
  Python </title>
  <meta name="description" content="A   short
  guide">
  <style>body { color: red; }</style>
</head>
<body>
  <h1>Intro</h1>
  <h2>Part one</h2>
  <h2>Part two</h2>
  <main>
    <article><p>First paragraph.</p></article>
    <div class="post-content">Content block</div>
    <ul><li>Item A</li><li>Item B</li></ul>
  </main>
  <form><button>Subscribe</button><p>Form text</p></form>
  <noscript>Enable JS</noscript>
  <iframe src="https://ads.example.com"></iframe>
  <script>trackVisitor();</script>
</body>
</html>
"""


def _mock_client(response=None, side_effect=None):
    """Create a mock httpx.AsyncClient usable as an async context manager."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _ok_response(text: str):
    response = MagicMock()
    response.text = text
    response.raise_for_status = MagicMock()
    return response


# --- clean_text tests ---


def test_clean_text_collapses_whitespace():
    assert clean_text("  a \n\n b\t\tc  ") == "a b c"


def test_clean_text_empty():
    assert clean_text("   \n ") == ""


@pytest.mark.parametrize("text", ["plain", "  lots   of \n space ", "\ttabs\tand\r\nreturns\n"])
def test_clean_text_is_idempotent(text):
    once = clean_text(text)
    assert clean_text(once) == once


# --- extract_content tests ---


def test_extract_minimal_document():
    """Title and paragraph are kept, script bodies are dropped."""
    html = (
        "<html><head><title>T</title></head>"
        "<body><p>Hello</p><script>evil()</script></body></html>"
    )
    result = extract_content(URL, html)

    assert result.title == "T"
    assert "Hello" in result.content
    assert "evil()" not in result.content
    assert result.error is None
    assert result.url == URL


def test_extract_metadata_is_cleaned():
    result = extract_content(URL, ARTICLE_HTML)

    assert result.title == "Learning Python"
    assert result.meta_description == "A short guide"
    assert result.headings.h1 == "Intro"
    assert result.headings.h2 == "Part one Part two"


def test_extract_removes_non_content_elements():
    result = extract_content(URL, ARTICLE_HTML)

    assert "trackVisitor" not in result.content
    assert "color: red" not in result.content
    assert "Enable JS" not in result.content
    assert "Subscribe" not in result.content
    assert "Form text" not in result.content


def test_extract_combines_regions_in_order():
    """Title, description and headings lead, followed by body regions."""
    result = extract_content(URL, ARTICLE_HTML)

    assert result.content.startswith("Learning Python A short guide Intro Part one Part two")
    assert "First paragraph." in result.content
    assert "Content block" in result.content
    assert "Item A" in result.content
    assert "\n" not in result.content
    assert "  " not in result.content


def test_extract_content_heuristic_matches_id_and_class():
    html = (
        "<html><body>"
        '<div id="content">By id</div>'
        '<section class="content">By class</section>'
        '<span class="main-content-area">By substring</span>'
        "</body></html>"
    )
    result = extract_content(URL, html)

    assert "By id" in result.content
    assert "By class" in result.content
    assert "By substring" in result.content


def test_extract_without_title_or_meta():
    result = extract_content(URL, "<html><body><p>Only text</p></body></html>")

    assert result.title == ""
    assert result.meta_description == ""
    assert result.headings.h1 == ""
    assert result.content == "Only text"


def test_extract_truncates_huge_documents():
    """Content never exceeds MAX_CONTENT_LENGTH characters."""
    html = "<html><body><p>" + "word " * 200_000 + "</p></body></html>"
    result = extract_content(URL, html)

    assert len(result.content) == MAX_CONTENT_LENGTH


def test_extract_does_not_truncate_title():
    long_title = "t" * (MAX_CONTENT_LENGTH + 10)
    result = extract_content(URL, f"<html><head><title>{long_title}</title></head></html>")

    assert result.title == long_title
    assert len(result.content) == MAX_CONTENT_LENGTH


# --- fetch_html tests (mocked HTTP) ---


@pytest.mark.asyncio
async def test_fetch_html_returns_body():
    mock_client = _mock_client(response=_ok_response("<html></html>"))

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        body = await fetch_html(URL)

    assert body == "<html></html>"
    mock_client.get.assert_called_once_with(URL)


@pytest.mark.asyncio
async def test_fetch_html_raises_on_http_error():
    response = MagicMock()
    response.raise_for_status = MagicMock(
        side_effect=httpx.HTTPStatusError(
            "404", request=MagicMock(), response=MagicMock()
        )
    )
    mock_client = _mock_client(response=response)

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(httpx.HTTPStatusError):
            await fetch_html(URL)


# --- HtmlExtractor tests ---


@pytest.mark.asyncio
async def test_extractor_success_is_cached(content_cache: ContentCache):
    """A successful extraction is written to the cache."""
    mock_client = _mock_client(response=_ok_response(ARTICLE_HTML))
    extractor = HtmlExtractor(cache=content_cache)

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        result = await extractor.extract(URL)

    assert result.error is None
    assert result.title == "Learning Python"
    cached = content_cache.get(URL)
    assert cached == result


@pytest.mark.asyncio
async def test_extractor_transport_error_is_degraded(content_cache: ContentCache):
    """A transport error gives a degraded record and no cache write."""
    mock_client = _mock_client(side_effect=httpx.ConnectError("connection refused"))
    extractor = HtmlExtractor(cache=content_cache)

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        result = await extractor.extract(URL)

    assert result.error == SCRAPE_FAILED_MESSAGE
    assert result.content == ""
    assert result.title == ""
    assert result.headings.h1 == ""
    assert content_cache.get(URL) is None


@pytest.mark.asyncio
async def test_extractor_timeout_is_degraded():
    mock_client = _mock_client(side_effect=httpx.TimeoutException("timed out"))
    cache = MagicMock()
    extractor = HtmlExtractor(cache=cache)

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        result = await extractor.extract("https://slow.example.com")

    assert result.error is not None
    cache.put.assert_not_called()


@pytest.mark.asyncio
async def test_extractor_parse_error_is_degraded():
    mock_client = _mock_client(response=_ok_response("<html></html>"))
    cache = MagicMock()
    extractor = HtmlExtractor(cache=cache)

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client), \
            patch("linkchat.extractor.extract_content", side_effect=ValueError("bad html")):
        result = await extractor.extract(URL)

    assert result.error == SCRAPE_FAILED_MESSAGE
    cache.put.assert_not_called()


@pytest.mark.asyncio
async def test_extractor_single_attempt():
    """No retries: one failed GET means one call."""
    mock_client = _mock_client(side_effect=httpx.ConnectError("down"))
    extractor = HtmlExtractor()

    with patch("linkchat.extractor.httpx.AsyncClient", return_value=mock_client):
        await extractor.extract(URL)

    assert mock_client.get.call_count == 1


@pytest.mark.asyncio
async def test_extractor_passes_timeout():
    mock_client = _mock_client(response=_ok_response("<html></html>"))
    extractor = HtmlExtractor(timeout=3.0)

    with patch(
        "linkchat.extractor.httpx.AsyncClient", return_value=mock_client
    ) as client_cls:
        await extractor.extract(URL)

    assert client_cls.call_args.kwargs["timeout"] == 3.0
