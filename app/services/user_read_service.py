from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User
from app.schemas import ProfileData
from app.services.article_read_service import to_profile_data


class UserReadService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_by_username(self, username: str) -> ProfileData | None:
        user = (await self.db.execute(select(User).where(User.username == username))).scalar_one_or_none()
        return to_profile_data(user) if user else None

    async def find_by_id(self, user_id: int) -> ProfileData | None:
        user = await self.db.get(User, user_id)
        return to_profile_data(user) if user else None
