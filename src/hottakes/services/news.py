# src/hottakes/services/news.py
"""Headline fetching from an RSS-to-JSON proxy.

News items are optional filler for the feed: every failure mode here
(network error, bad status, malformed payload) yields an empty list.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

import httpx

from hottakes.schemas.news import NewsItem

__all__ = ["NewsClient", "NewsSource", "extract_image_url", "strip_html"]

logger = logging.getLogger(__name__)

_TAG = re.compile(r"<[^>]*>")
_MARKUP_IMAGE_PATTERNS = (
    re.compile(r'<img[^>]+src="([^"]+)"'),
    re.compile(r'enclosure[^>]+url="([^"]+)"'),
    re.compile(r'<media:content[^>]+url="([^"]+)"'),
    re.compile(r'<media:thumbnail[^>]+url="([^"]+)"'),
)
_BARE_IMAGE_URL = re.compile(r'https://[^"\s<>]+\.(?:jpe?g|png)', re.IGNORECASE)


def strip_html(text: str) -> str:
    """Remove markup tags from a description."""
    return _TAG.sub("", text)


def _url_field(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict) and isinstance(value.get("url"), str) and value["url"]:
        return value["url"]
    return None


def extract_image_url(item: dict[str, Any]) -> str | None:
    """Find the best image URL for a feed item, or None."""
    description = item.get("description") or ""
    if isinstance(description, str):
        for pattern in _MARKUP_IMAGE_PATTERNS:
            match = pattern.search(description)
            if match:
                return match.group(1)
        match = _BARE_IMAGE_URL.search(description)
        if match:
            return match.group(0)

    for key in ("enclosure", "media"):
        url = _url_field(item.get(key)) if isinstance(item.get(key), dict) else None
        if url:
            return url

    enclosures = item.get("enclosures")
    if isinstance(enclosures, list):
        for enclosure in enclosures:
            url = _url_field(enclosure)
            if url:
                return url

    return _url_field(item.get("thumbnail"))


def _parse_published(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class NewsSource(ABC):
    """Contract of the news collaborator."""

    @abstractmethod
    async def fetch_items(self) -> list[NewsItem]:
        """Return current headlines; empty when none are available."""

    async def aclose(self) -> None:
        """Release network resources."""


class NewsClient(NewsSource):
    """Fetches headlines through an RSS-to-JSON proxy with ``httpx``."""

    def __init__(
        self,
        feed_url: str,
        *,
        limit: int = 3,
        description_length: int = 120,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.feed_url = feed_url
        self.limit = limit
        self.description_length = description_length
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def fetch_items(self) -> list[NewsItem]:
        client = await self._ensure_client()
        try:
            response = await client.get(self.feed_url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Error fetching news from %s: %s", self.feed_url, exc)
            return []

        if not isinstance(payload, dict) or payload.get("status") != "ok":
            logger.warning("News feed %s did not report status ok", self.feed_url)
            return []
        raw_items = payload.get("items")
        if not isinstance(raw_items, list):
            logger.warning("News feed %s returned no item list", self.feed_url)
            return []

        items = []
        for raw in raw_items[: self.limit]:
            if isinstance(raw, dict) and raw.get("title"):
                items.append(self._to_item(raw))
        return items

    def _to_item(self, raw: dict[str, Any]) -> NewsItem:
        description = raw.get("description") or ""
        text = strip_html(description).strip() if isinstance(description, str) else ""
        if text:
            text = text[: self.description_length] + "..."
        return NewsItem(
            title=str(raw["title"]),
            description=text,
            image_url=extract_image_url(raw),
            link=raw.get("link") if isinstance(raw.get("link"), str) else None,
            published_at=_parse_published(raw.get("pubDate")),
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
