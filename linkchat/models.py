"""Data models for scraped web content."""

import json
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

SCRAPE_FAILED_MESSAGE = "Failed to scrape url"

# String-valued keys of the JSON wire format
_STRING_FIELDS = ("url", "title", "metaDescription", "content")


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass
class Headings:
    """Space-joined heading texts of a page."""

    h1: str = ""
    h2: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"h1": self.h1, "h2": self.h2}


@dataclass
class ScrapedContent:
    """Readable text and metadata extracted from a single URL."""

    url: str
    title: str = ""
    headings: Headings = field(default_factory=Headings)
    meta_description: str = ""
    content: str = ""
    error: Optional[str] = None
    created_at: int = field(default_factory=now_ms)

    @property
    def ok(self) -> bool:
        """True when extraction succeeded."""
        return self.error is None

    @classmethod
    def failed(cls, url: str, error: str = SCRAPE_FAILED_MESSAGE) -> "ScrapedContent":
        """Build a degraded record: empty text fields and an error message."""
        return cls(url=url, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase dictionary stored in the cache."""
        return {
            "url": self.url,
            "title": self.title,
            "headings": self.headings.to_dict(),
            "metaDescription": self.meta_description,
            "content": self.content,
            "error": self.error,
            "createdAt": self.created_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> "ScrapedContent":
        """Validate and deserialize a cached dictionary.

        Every field must be present with the right type; a single
        violation rejects the whole record.

        Raises:
            ValueError: If the data does not describe a ScrapedContent.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        for key in _STRING_FIELDS:
            if not isinstance(data.get(key), str):
                raise ValueError(f"Field '{key}' must be a string")

        headings = data.get("headings")
        if not isinstance(headings, dict):
            raise ValueError("Field 'headings' must be an object")
        for key in ("h1", "h2"):
            if not isinstance(headings.get(key, ""), str):
                raise ValueError(f"Field 'headings.{key}' must be a string")

        if "error" not in data:
            raise ValueError("Field 'error' is missing")
        error = data["error"]
        if error is not None and not isinstance(error, str):
            raise ValueError("Field 'error' must be a string or null")

        if not _is_number(data.get("createdAt")):
            raise ValueError("Field 'createdAt' must be a number")

        return cls(
            url=data["url"],
            title=data["title"],
            headings=Headings(h1=headings.get("h1", ""), h2=headings.get("h2", "")),
            meta_description=data["metaDescription"],
            content=data["content"],
            error=error,
            created_at=int(data["createdAt"]),
        )


def is_valid_scraped_content(data: Any) -> bool:
    """Return True if data passes ScrapedContent validation."""
    try:
        ScrapedContent.from_dict(data)
    except ValueError:
        return False
    return True


@dataclass
class CacheDecodeResult:
    """Outcome of decoding a raw cache value: a record or an error."""

    record: Optional[ScrapedContent] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def decode(cls, raw: str) -> "CacheDecodeResult":
        """Parse and validate a JSON cache value without raising."""
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            return cls(error=f"Invalid JSON: {e}")
        try:
            return cls(record=ScrapedContent.from_dict(data))
        except ValueError as e:
            return cls(error=str(e))
