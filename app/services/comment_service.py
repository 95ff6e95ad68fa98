"""
Comment command service.

A comment can be deleted by its own author or by the author of the
article it belongs to.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ForbiddenError, NotFoundError
from app.models import Article, Comment
from app.schemas import CommentCreate
from app.services.article_service import get_article_by_slug

logger = logging.getLogger(__name__)


async def add_comment(db: AsyncSession, slug: str, author_id: int, data: CommentCreate) -> int:
    """Append a comment to the article at *slug* and return the comment id."""
    article = await get_article_by_slug(db, slug)
    comment = Comment(body=data.body, article_id=article.id, user_id=author_id)
    db.add(comment)
    await db.flush()
    logger.info("Comment %d added to article %d", comment.id, article.id)
    return comment.id


async def delete_comment(db: AsyncSession, slug: str, comment_id: int, viewer_id: int) -> None:
    article = await get_article_by_slug(db, slug)
    comment = await db.get(Comment, comment_id)
    if comment is None or comment.article_id != article.id:
        raise NotFoundError("Comment")
    if not _can_delete(viewer_id, article, comment):
        raise ForbiddenError("only the comment or article author can delete this comment")
    await db.delete(comment)
    await db.flush()


def _can_delete(viewer_id: int, article: Article, comment: Comment) -> bool:
    return viewer_id in (article.user_id, comment.user_id)
