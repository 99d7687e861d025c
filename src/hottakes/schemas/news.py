# src/hottakes/schemas/news.py
"""Schemas for externally fetched news items."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class NewsItem(BaseModel):
    """A headline supplied by the news collaborator."""

    title: str
    description: str = ""
    image_url: str | None = None
    link: str | None = None
    published_at: datetime | None = None


class NewsCard(BaseModel):
    """Filler feed entry; carries no identity, voting or edit affordances."""

    kind: Literal["news"] = "news"
    title: str
    description: str
    image_url: str | None
    link: str | None
    published_at: datetime | None

    @classmethod
    def from_item(cls, item: NewsItem) -> NewsCard:
        return cls(
            title=item.title,
            description=item.description,
            image_url=item.image_url,
            link=item.link,
            published_at=item.published_at,
        )
