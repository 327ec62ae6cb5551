"""URL detection in free-text chat messages."""

import re
from typing import List, Optional

# Scheme, optional www., host, a dot and a short TLD-like run, then any
# path/query/fragment characters. Trailing punctuation is not trimmed.
# ASCII-only \b and letter classes, so adjacent non-ASCII text ends the URL.
URL_PATTERN = re.compile(
    r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"[-a-zA-Z0-9()@:%_+.~#?&/=]*",
    re.IGNORECASE | re.ASCII,
)


def find_urls(text: str) -> List[str]:
    """Find all URLs in a text string, in order of appearance."""
    return [match.group(0) for match in URL_PATTERN.finditer(text)]


def first_url(text: str) -> Optional[str]:
    """Return the first URL in the text, or None."""
    match = URL_PATTERN.search(text)
    return match.group(0) if match else None


def strip_url(text: str, url: Optional[str]) -> str:
    """Remove the first occurrence of url from text and trim the result."""
    if not url:
        return text.strip()
    return text.replace(url, "", 1).strip()
