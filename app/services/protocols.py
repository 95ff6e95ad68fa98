"""
Read-side collaborator contracts consumed by the query services.

The SQLAlchemy read services in this package implement them; tests
substitute in-memory fakes.  Implementations must honour
``CursorPageRequest.query_limit`` exactly and order cursor fetches along
the requested direction (forward: ascending key; otherwise: descending,
nearest to the cursor first).
"""
from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import Protocol

from app.pagination import CursorPageRequest, PageRequest
from app.schemas import ArticleData, CommentData, ProfileData


class ArticleReader(Protocol):
    async def find_by_id(self, article_id: int) -> ArticleData | None: ...

    async def find_by_slug(self, slug: str) -> ArticleData | None: ...

    async def query_article_ids(
        self, tag: str | None, author: str | None, favorited_by: str | None, page: PageRequest
    ) -> list[int]: ...

    async def count_articles(
        self, tag: str | None, author: str | None, favorited_by: str | None
    ) -> int: ...

    async def find_article_ids_with_cursor(
        self,
        tag: str | None,
        author: str | None,
        favorited_by: str | None,
        request: CursorPageRequest[datetime],
    ) -> list[int]: ...

    async def find_articles(self, article_ids: list[int]) -> list[ArticleData]: ...

    async def find_articles_of_authors(
        self, author_ids: Collection[int], page: PageRequest
    ) -> list[ArticleData]: ...

    async def find_articles_of_authors_with_cursor(
        self, author_ids: Collection[int], request: CursorPageRequest[datetime]
    ) -> list[ArticleData]: ...

    async def count_feed_size(self, author_ids: Collection[int]) -> int: ...


class CommentReader(Protocol):
    async def find_by_id(self, comment_id: int) -> CommentData | None: ...

    async def find_by_article_id(self, article_id: int) -> list[CommentData]: ...

    async def find_by_article_id_with_cursor(
        self, article_id: int, request: CursorPageRequest[datetime]
    ) -> list[CommentData]: ...


class FavoriteReader(Protocol):
    async def articles_favorite_count(self, article_ids: Collection[int]) -> dict[int, int]: ...

    async def user_favorites(self, article_ids: Collection[int], viewer_id: int) -> set[int]: ...

    async def article_favorite_count(self, article_id: int) -> int: ...

    async def is_user_favorite(self, viewer_id: int, article_id: int) -> bool: ...


class RelationshipReader(Protocol):
    async def followed_users(self, viewer_id: int) -> set[int]: ...

    async def following_authors(self, viewer_id: int, author_ids: Collection[int]) -> set[int]: ...

    async def is_user_following(self, viewer_id: int, author_id: int) -> bool: ...


class UserReader(Protocol):
    async def find_by_username(self, username: str) -> ProfileData | None: ...

    async def find_by_id(self, user_id: int) -> ProfileData | None: ...
