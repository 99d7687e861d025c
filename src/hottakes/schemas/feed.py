# src/hottakes/schemas/feed.py
"""Feed view-model schemas."""

from typing import Annotated, Union

from pydantic import Field

from hottakes.schemas.news import NewsCard
from hottakes.schemas.post import PostCard

# Entries are told apart by their ``kind`` field ("post" or "news").
FeedEntry = Annotated[Union[PostCard, NewsCard], Field(discriminator="kind")]

__all__ = ["FeedEntry", "NewsCard", "PostCard"]
