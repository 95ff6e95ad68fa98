"""
User command service: registration and the follow graph.

Username and email uniqueness is enforced by database constraints; the
router turns the resulting ``IntegrityError`` into a 409.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidArgumentError, NotFoundError
from app.models import FollowRelation, User
from app.schemas import ProfileData, UserCreate


async def create_user(db: AsyncSession, data: UserCreate) -> ProfileData:
    user = User(username=data.username, email=data.email, bio=data.bio, image=data.image)
    db.add(user)
    await db.flush()
    return ProfileData.model_validate(user)


async def _get_user_by_username(db: AsyncSession, username: str) -> User:
    user = (await db.execute(select(User).where(User.username == username))).scalar_one_or_none()
    if user is None:
        raise NotFoundError("User")
    return user


async def follow(db: AsyncSession, viewer_id: int, username: str) -> str:
    """Make the viewer follow *username*; following twice is a no-op."""
    target = await _get_user_by_username(db, username)
    if target.id == viewer_id:
        raise InvalidArgumentError("users cannot follow themselves")
    if await db.get(FollowRelation, (viewer_id, target.id)) is None:
        db.add(FollowRelation(user_id=viewer_id, follow_id=target.id))
        await db.flush()
    return target.username


async def unfollow(db: AsyncSession, viewer_id: int, username: str) -> str:
    target = await _get_user_by_username(db, username)
    relation = await db.get(FollowRelation, (viewer_id, target.id))
    if relation is not None:
        await db.delete(relation)
        await db.flush()
    return target.username
