"""
Comment endpoint tests: add, list, cursor paging and delete permissions.
"""
import pytest
from httpx import AsyncClient


def _as(user) -> dict:
    return {"X-Viewer-Id": str(user.id)}


@pytest.mark.asyncio
async def test_add_comment(async_client: AsyncClient, make_user, make_article):
    author = await make_user("author")
    await make_article(author, 1)

    resp = await async_client.post(
        "/api/v1/articles/article-1/comments", json={"body": "Nice post"}, headers=_as(author)
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["body"] == "Nice post"
    assert data["profile"]["username"] == "author"
    assert data["profile"]["following"] is False


@pytest.mark.asyncio
async def test_add_comment_requires_viewer(async_client: AsyncClient, make_user, make_article):
    author = await make_user("author")
    await make_article(author, 1)

    resp = await async_client.post("/api/v1/articles/article-1/comments", json={"body": "Hi"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_add_comment_to_missing_article(async_client: AsyncClient, make_user):
    author = await make_user("author")
    resp = await async_client.post(
        "/api/v1/articles/ghost/comments", json={"body": "Hello?"}, headers=_as(author)
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_comments_oldest_first(async_client: AsyncClient, make_user, make_article, make_comment, follow):
    author = await make_user("author")
    reader = await make_user("reader")
    article = await make_article(author, 0)
    await make_comment(article, reader, 2)
    await make_comment(article, author, 1)
    await follow(reader, author)

    resp = await async_client.get("/api/v1/articles/article-0/comments", headers=_as(reader))
    assert resp.status_code == 200
    data = resp.json()
    assert [c["body"] for c in data] == ["Comment 1", "Comment 2"]
    # Following the author; a viewer never follows themself.
    assert [c["profile"]["following"] for c in data] == [True, False]


@pytest.mark.asyncio
async def test_list_comments_missing_article(async_client: AsyncClient):
    assert (await async_client.get("/api/v1/articles/ghost/comments")).status_code == 404
    assert (await async_client.get("/api/v1/articles/ghost/comments/cursor")).status_code == 404


@pytest.mark.asyncio
async def test_comment_cursor_walk(async_client: AsyncClient, make_user, make_article, make_comment):
    author = await make_user("author")
    article = await make_article(author, 0)
    for minutes in range(1, 6):
        await make_comment(article, author, minutes)

    url = "/api/v1/articles/article-0/comments/cursor"
    first = (await async_client.get(url, params={"limit": 2, "direction": "NEXT"})).json()
    assert [c["body"] for c in first["items"]] == ["Comment 1", "Comment 2"]
    assert first["page_info"]["has_next_page"] is True

    second = (await async_client.get(url, params={
        "limit": 2, "direction": "NEXT", "cursor": first["page_info"]["end_cursor"],
    })).json()
    assert [c["body"] for c in second["items"]] == ["Comment 3", "Comment 4"]

    back = (await async_client.get(url, params={
        "limit": 2, "direction": "PREV", "cursor": second["page_info"]["start_cursor"],
    })).json()
    assert [c["body"] for c in back["items"]] == ["Comment 1", "Comment 2"]
    assert back["page_info"]["has_previous_page"] is False


@pytest.mark.asyncio
async def test_comment_cursor_rejects_malformed_token(async_client: AsyncClient, make_user, make_article):
    author = await make_user("author")
    await make_article(author, 0)

    resp = await async_client.get(
        "/api/v1/articles/article-0/comments/cursor", params={"cursor": "12.5"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_comment_permissions(async_client: AsyncClient, make_user, make_article, make_comment):
    author = await make_user("author")
    commenter = await make_user("commenter")
    stranger = await make_user("stranger")
    article = await make_article(author, 0)
    first = await make_comment(article, commenter, 1)
    second = await make_comment(article, commenter, 2)

    url = "/api/v1/articles/article-0/comments"
    assert (await async_client.delete(f"{url}/{first.id}")).status_code == 401
    assert (await async_client.delete(f"{url}/{first.id}", headers=_as(stranger))).status_code == 403
    assert (await async_client.delete(f"{url}/{first.id}", headers=_as(commenter))).status_code == 204
    assert (await async_client.delete(f"{url}/{second.id}", headers=_as(author))).status_code == 204
    assert (await async_client.delete(f"{url}/{second.id}", headers=_as(author))).status_code == 404
    assert (await async_client.get(url)).json() == []
