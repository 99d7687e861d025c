"""Tests for profiles: lazy creation, renames, pictures and post fan-out."""

import asyncio

import pytest

from hottakes.core.errors import BACKEND_FAILURE, DataServiceError, ValidationError
from hottakes.db.data_service import SqlDataService
from hottakes.repositories import ProfileRepository
from hottakes.repositories.profile_repo import local_part

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class RacingDataService(SqlDataService):
    """Inserts a competing profile row just before our own insert runs."""

    def __init__(self, engine) -> None:
        super().__init__(engine)
        self.raced = False

    async def insert(self, table, rows):
        if table == "user_profiles" and not self.raced:
            self.raced = True
            await super().insert(table, [{"user_id": rows[0]["user_id"], "display_name": "winner"}])
        return await super().insert(table, rows)


def test_local_part() -> None:
    assert local_part("alice@example.com") == "alice"
    assert local_part(None) == "user"
    assert local_part("@example.com") == "user"


@pytest.mark.asyncio
async def test_get_or_create_bootstraps_from_email(profiles) -> None:
    assert await profiles.get("alice-id") is None

    profile = await profiles.get_or_create("alice-id", "alice@example.com")

    assert profile.display_name == "alice"
    assert profile.initial == "A"
    assert profile.profile_picture_url is None


@pytest.mark.asyncio
async def test_get_or_create_returns_existing_profile(profiles) -> None:
    await profiles.get_or_create("alice-id", "alice@example.com")
    await profiles.rename("alice-id", "Alice Prime")

    profile = await profiles.get_or_create("alice-id", "other@example.com")

    assert profile.display_name == "Alice Prime"


@pytest.mark.asyncio
async def test_concurrent_first_reads_create_one_profile(profiles, data) -> None:
    results = await asyncio.gather(
        *(profiles.get_or_create("alice-id", "alice@example.com") for _ in range(3))
    )

    assert {r.user_id for r in results} == {"alice-id"}
    rows = await data.select("user_profiles", filters={"user_id": "alice-id"})
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_losing_the_creation_race_returns_winner_row(engine, blobs) -> None:
    data = RacingDataService(engine)
    profiles = ProfileRepository(data, blobs)

    profile = await profiles.get_or_create("alice-id", "alice@example.com")

    assert profile.display_name == "winner"


@pytest.mark.asyncio
async def test_rename_updates_non_anonymous_posts_only(profiles, posts) -> None:
    named = await posts.create(
        content="Named", is_anonymous=False, author_id="alice-id", author_email="alice@example.com"
    )
    hidden = await posts.create(content="Hidden", is_anonymous=True, author_id="alice-id")
    other = await posts.create(
        content="Bob's", is_anonymous=False, author_id="bob-id", author_email="bob@example.com"
    )

    profile = await profiles.rename("alice-id", "  Alice Cooper  ")

    assert profile.display_name == "Alice Cooper"
    assert (await posts.get(named.id)).author_display_name == "Alice Cooper"
    assert (await posts.get(hidden.id)).author_display_name is None
    assert (await posts.get(other.id)).author_display_name == "bob"


@pytest.mark.asyncio
async def test_rename_creates_missing_profile(profiles) -> None:
    profile = await profiles.rename("new-id", "Newcomer", fallback_email="new@example.com")

    assert profile.display_name == "Newcomer"


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   ", "x" * 101])
async def test_rename_rejects_invalid_names(profiles, name) -> None:
    await profiles.get_or_create("alice-id", "alice@example.com")

    with pytest.raises(ValidationError):
        await profiles.rename("alice-id", name)

    assert (await profiles.get("alice-id")).display_name == "alice"


@pytest.mark.asyncio
async def test_rename_survives_fan_out_failure(profiles, posts, data, mocker) -> None:
    post = await posts.create(
        content="Named", is_anonymous=False, author_id="alice-id", author_email="alice@example.com"
    )
    original_update = data.update

    async def failing_update(table, patch, *, filters):
        if table == "posts":
            raise DataServiceError(BACKEND_FAILURE, "posts table unavailable")
        return await original_update(table, patch, filters=filters)

    mocker.patch.object(data, "update", side_effect=failing_update)

    profile = await profiles.rename("alice-id", "Renamed")

    assert profile.display_name == "Renamed"
    assert (await posts.get(post.id)).author_display_name == "alice"


@pytest.mark.asyncio
async def test_set_picture_uploads_and_fans_out(profiles, posts, blobs) -> None:
    profiles._clock = lambda: 1700000000.123
    post = await posts.create(
        content="Named", is_anonymous=False, author_id="alice-id", author_email="alice@example.com"
    )

    profile = await profiles.set_picture("alice-id", PNG_BYTES, "image/png")

    assert blobs.uploads == [("DPs", "alice-id/alice-id_1700000000123.png", "image/png")]
    expected_url = "https://blobs.test/DPs/alice-id/alice-id_1700000000123.png"
    assert profile.profile_picture_url == expected_url
    assert (await posts.get(post.id)).author_profile_picture_url == expected_url


@pytest.mark.asyncio
async def test_oversized_picture_is_rejected_without_upload(profiles, blobs) -> None:
    await profiles.get_or_create("alice-id", "alice@example.com")
    too_big = b"\x00" * (6 * 1024 * 1024)

    with pytest.raises(ValidationError):
        await profiles.set_picture("alice-id", too_big, "image/png")

    assert blobs.uploads == []
    assert (await profiles.get("alice-id")).profile_picture_url is None


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", "image/svg+xml", ""])
async def test_disallowed_picture_types_are_rejected(profiles, blobs, content_type) -> None:
    with pytest.raises(ValidationError):
        await profiles.set_picture("alice-id", PNG_BYTES, content_type)

    assert blobs.uploads == []
    assert await profiles.get("alice-id") is None


@pytest.mark.asyncio
async def test_content_type_parameters_are_ignored(profiles, blobs) -> None:
    await profiles.set_picture("alice-id", PNG_BYTES, "IMAGE/JPEG; charset=binary")

    assert blobs.uploads[0][1].endswith(".jpg")
    assert blobs.uploads[0][2] == "image/jpeg"
