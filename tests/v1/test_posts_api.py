"""Tests for post endpoints."""

from fastapi import status


def _create(client, headers, content="Title\nBody", anonymous=False):
    response = client.post(
        "/api/v1/posts",
        json={"content": content, "is_anonymous": anonymous},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_post(client, auth_headers) -> None:
    body = _create(client, auth_headers())

    assert body["title"] == "Title"
    assert body["description"] == "Body"
    assert body["author_display_name"] == "alice"
    assert body["likes"] == 0 and body["dislikes"] == 0
    assert body["can_edit"] is True
    assert "author_id" not in body


def test_create_anonymous_post_hides_author(client, auth_headers) -> None:
    body = _create(client, auth_headers(), anonymous=True)

    assert body["is_anonymous"] is True
    assert body["author_display_name"] is None
    assert body["author_profile_picture_url"] is None


def test_create_requires_authentication(client) -> None:
    response = client.post("/api/v1/posts", json={"content": "x"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_token_is_rejected(client) -> None:
    response = client.post(
        "/api/v1/posts",
        json={"content": "x"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_blank_post_is_rejected(client, auth_headers) -> None:
    response = client.post("/api/v1/posts", json={"content": "   "}, headers=auth_headers())

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == "Please enter your hot take!"


def test_get_and_list_posts(client, auth_headers) -> None:
    first = _create(client, auth_headers(), content="first")
    second = _create(client, auth_headers(), content="second")

    listed = client.get("/api/v1/posts").json()
    single = client.get(f"/api/v1/posts/{first['id']}").json()
    missing = client.get("/api/v1/posts/9999")

    assert [p["id"] for p in listed] == [second["id"], first["id"]]
    assert single["content"] == "first"
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_owner_can_edit_and_delete(client, auth_headers) -> None:
    post = _create(client, auth_headers())

    edited = client.patch(
        f"/api/v1/posts/{post['id']}", json={"content": "New title\nNew body"}, headers=auth_headers()
    )
    deleted = client.delete(f"/api/v1/posts/{post['id']}", headers=auth_headers())

    assert edited.status_code == status.HTTP_200_OK
    assert edited.json()["title"] == "New title"
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/posts/{post['id']}").status_code == status.HTTP_404_NOT_FOUND


def test_non_owner_cannot_edit_or_delete(client, auth_headers) -> None:
    post = _create(client, auth_headers("alice-id", "alice@example.com"), content="Mine")
    mallory = auth_headers("mallory-id", "mallory@example.com")

    edit = client.patch(f"/api/v1/posts/{post['id']}", json={"content": "Hijacked"}, headers=mallory)
    delete = client.delete(f"/api/v1/posts/{post['id']}", headers=mallory)
    missing = client.delete("/api/v1/posts/9999", headers=mallory)

    assert edit.status_code == status.HTTP_403_FORBIDDEN
    assert delete.status_code == status.HTTP_403_FORBIDDEN
    assert missing.status_code == status.HTTP_403_FORBIDDEN
    assert missing.json() == delete.json()
    assert client.get(f"/api/v1/posts/{post['id']}").json()["content"] == "Mine"
