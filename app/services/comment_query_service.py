from datetime import datetime

from app.pagination import CursorPage, CursorPageRequest, trim_extra, wrap_cursor_page
from app.schemas import CommentData
from app.services.protocols import CommentReader, RelationshipReader


class CommentQueryService:
    """
    Comment listings annotated with whether the viewer follows each
    comment's author.  Same trim / annotate / reorder steps as
    ``ArticleQueryService``, minus favorites.
    """

    def __init__(self, comments: CommentReader, relationships: RelationshipReader) -> None:
        self.comments = comments
        self.relationships = relationships

    async def find_by_id(self, comment_id: int, viewer_id: int | None = None) -> CommentData | None:
        comment = await self.comments.find_by_id(comment_id)
        if comment is None:
            return None
        return (await self._annotate([comment], viewer_id))[0]

    async def find_by_article_id(
        self, article_id: int, viewer_id: int | None = None
    ) -> list[CommentData]:
        return await self._annotate(await self.comments.find_by_article_id(article_id), viewer_id)

    async def find_by_article_id_with_cursor(
        self,
        article_id: int,
        viewer_id: int | None,
        request: CursorPageRequest[datetime],
    ) -> CursorPage[CommentData]:
        raw = await self.comments.find_by_article_id_with_cursor(article_id, request)
        if not raw:
            return CursorPage.empty(request.direction)
        records, has_extra = trim_extra(raw, request)
        annotated = await self._annotate(records, viewer_id)
        return wrap_cursor_page(annotated, request, has_extra)

    async def _annotate(
        self, comments: list[CommentData], viewer_id: int | None
    ) -> list[CommentData]:
        if not comments or viewer_id is None:
            return comments
        following = await self.relationships.following_authors(
            viewer_id, {c.profile.id for c in comments}
        )
        return [
            c.model_copy(
                update={
                    "profile": c.profile.model_copy(
                        update={"following": c.profile.id in following and c.profile.id != viewer_id}
                    )
                }
            )
            for c in comments
        ]
