from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.models import Comment
from app.pagination import CursorPageRequest
from app.schemas import CommentData
from app.services.article_read_service import to_profile_data
from app.services.cursor_query import apply_cursor


def to_comment_data(comment: Comment) -> CommentData:
    return CommentData(
        id=comment.id,
        body=comment.body,
        article_id=comment.article_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        profile=to_profile_data(comment.author),
    )


class CommentReadService:
    """Read-only projection of comments; ``profile.following`` is left False."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _fetch(self, stmt) -> list[CommentData]:
        stmt = stmt.options(joinedload(Comment.author)).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return [to_comment_data(c) for c in result.scalars().all()]

    async def find_by_id(self, comment_id: int) -> CommentData | None:
        found = await self._fetch(select(Comment).where(Comment.id == comment_id))
        return found[0] if found else None

    async def find_by_article_id(self, article_id: int) -> list[CommentData]:
        stmt = (
            select(Comment)
            .where(Comment.article_id == article_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return await self._fetch(stmt)

    async def find_by_article_id_with_cursor(
        self, article_id: int, request: CursorPageRequest[datetime]
    ) -> list[CommentData]:
        stmt = select(Comment).where(Comment.article_id == article_id)
        return await self._fetch(apply_cursor(stmt, Comment.created_at, Comment.id, request))
