"""Tests for the post repository."""

from datetime import UTC, datetime

import pytest

from hottakes.core.errors import AuthorizationError, ValidationError
from hottakes.schemas.vote import VoteType


@pytest.mark.asyncio
async def test_create_snapshots_author_profile(posts, profiles) -> None:
    post = await posts.create(
        content="Title\nBody line 1\nBody line 2",
        is_anonymous=False,
        author_id="alice-id",
        author_email="alice@example.com",
    )

    assert post.title == "Title"
    assert post.description == "Body line 1\nBody line 2"
    assert post.author_display_name == "alice"
    profile = await profiles.get("alice-id")
    assert profile is not None and profile.display_name == "alice"


@pytest.mark.asyncio
async def test_anonymous_post_keeps_owner_but_no_author_fields(posts, profiles) -> None:
    post = await posts.create(content="Nobody knows", is_anonymous=True, author_id="alice-id")

    assert post.author_id == "alice-id"
    assert post.author_display_name is None
    assert post.author_profile_picture_url is None
    assert await profiles.get("alice-id") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
async def test_blank_content_is_rejected(posts, content) -> None:
    with pytest.raises(ValidationError):
        await posts.create(content=content, is_anonymous=False, author_id="alice-id")

    assert await posts.list_recent() == []


@pytest.mark.asyncio
async def test_content_is_trimmed(posts) -> None:
    post = await posts.create(content="  spaced out  \n", is_anonymous=True, author_id="a")

    assert post.content == "spaced out"


@pytest.mark.asyncio
async def test_list_recent_is_newest_first(posts) -> None:
    first = await posts.create(content="first", is_anonymous=True, author_id="a")
    second = await posts.create(content="second", is_anonymous=True, author_id="a")
    third = await posts.create(content="third", is_anonymous=True, author_id="b")

    recent = await posts.list_recent()

    assert [p.id for p in recent] == [third.id, second.id, first.id]
    assert [p.id for p in await posts.list_recent(limit=2)] == [third.id, second.id]


@pytest.mark.asyncio
async def test_equal_timestamps_break_ties_by_id(posts, data) -> None:
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    rows = await data.insert(
        "posts",
        [
            {"content": "one", "author_id": "a", "is_anonymous": True, "created_at": stamp},
            {"content": "two", "author_id": "a", "is_anonymous": True, "created_at": stamp},
        ],
    )

    recent = await posts.list_recent()

    assert [p.id for p in recent] == [rows[1]["id"], rows[0]["id"]]


@pytest.mark.asyncio
async def test_before_cursor_pages_through_posts(posts) -> None:
    created = [
        await posts.create(content=f"take {i}", is_anonymous=True, author_id="a") for i in range(5)
    ]

    page_one = await posts.list_recent(limit=2)
    page_two = await posts.list_recent(limit=2, before=page_one[-1].id)
    page_three = await posts.list_recent(limit=2, before=page_two[-1].id)

    seen = [p.id for p in page_one + page_two + page_three]
    assert seen == [p.id for p in reversed(created)]


@pytest.mark.asyncio
async def test_unknown_cursor_is_rejected(posts) -> None:
    with pytest.raises(ValidationError):
        await posts.list_recent(before=12345)


@pytest.mark.asyncio
async def test_owner_can_update(posts) -> None:
    post = await posts.create(content="Before", is_anonymous=False, author_id="alice-id")

    updated = await posts.update(post.id, "After\nmore", "alice-id")

    assert updated.content == "After\nmore"
    assert updated.updated_at is not None


@pytest.mark.asyncio
async def test_non_owner_update_is_rejected(posts) -> None:
    post = await posts.create(content="Mine", is_anonymous=False, author_id="alice-id")

    with pytest.raises(AuthorizationError):
        await posts.update(post.id, "Hijacked", "mallory-id")

    stored = await posts.get(post.id)
    assert stored is not None and stored.content == "Mine"


@pytest.mark.asyncio
async def test_missing_and_foreign_posts_fail_the_same_way(posts) -> None:
    post = await posts.create(content="Mine", is_anonymous=False, author_id="alice-id")

    with pytest.raises(AuthorizationError) as foreign:
        await posts.delete(post.id, "mallory-id")
    with pytest.raises(AuthorizationError) as missing:
        await posts.delete(post.id + 100, "mallory-id")

    assert str(foreign.value) == str(missing.value)


@pytest.mark.asyncio
async def test_blank_update_is_rejected_before_ownership(posts) -> None:
    post = await posts.create(content="Mine", is_anonymous=False, author_id="alice-id")

    with pytest.raises(ValidationError):
        await posts.update(post.id, "  ", "alice-id")


@pytest.mark.asyncio
async def test_delete_cascades_to_votes(posts, votes) -> None:
    post = await posts.create(content="Doomed", is_anonymous=False, author_id="alice-id")
    await votes.cast(post.id, "bob", VoteType.LIKE)
    await votes.cast(post.id, "carol", VoteType.DISLIKE)

    await posts.delete(post.id, "alice-id")

    assert await posts.get(post.id) is None
    assert await votes.list_for_posts([post.id]) == []


@pytest.mark.asyncio
async def test_list_by_author_includes_anonymous_posts(posts) -> None:
    named = await posts.create(content="named", is_anonymous=False, author_id="alice-id")
    hidden = await posts.create(content="hidden", is_anonymous=True, author_id="alice-id")
    await posts.create(content="other", is_anonymous=False, author_id="bob-id")

    mine = await posts.list_by_author("alice-id")

    assert [p.id for p in mine] == [hidden.id, named.id]
