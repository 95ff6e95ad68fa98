from app.schemas import ProfileData
from app.services.protocols import RelationshipReader, UserReader


class ProfileQueryService:
    def __init__(self, users: UserReader, relationships: RelationshipReader) -> None:
        self.users = users
        self.relationships = relationships

    async def find_by_username(self, username: str, viewer_id: int | None = None) -> ProfileData | None:
        profile = await self.users.find_by_username(username)
        if profile is None or viewer_id is None or viewer_id == profile.id:
            return profile
        following = await self.relationships.is_user_following(viewer_id, profile.id)
        return profile.model_copy(update={"following": following})
