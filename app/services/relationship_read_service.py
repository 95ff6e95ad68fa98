from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import FollowRelation


class UserRelationshipReadService:
    """Social-graph lookups over ``follows``."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def followed_users(self, viewer_id: int) -> set[int]:
        stmt = select(FollowRelation.follow_id).where(FollowRelation.user_id == viewer_id)
        return set((await self.db.execute(stmt)).scalars().all())

    async def following_authors(self, viewer_id: int, author_ids: Collection[int]) -> set[int]:
        """Subset of *author_ids* the viewer follows."""
        if not author_ids:
            return set()
        stmt = select(FollowRelation.follow_id).where(
            FollowRelation.user_id == viewer_id,
            FollowRelation.follow_id.in_(list(author_ids)),
        )
        return set((await self.db.execute(stmt)).scalars().all())

    async def is_user_following(self, viewer_id: int, author_id: int) -> bool:
        stmt = select(FollowRelation.follow_id).where(
            FollowRelation.user_id == viewer_id,
            FollowRelation.follow_id == author_id,
        )
        return (await self.db.execute(stmt)).first() is not None
