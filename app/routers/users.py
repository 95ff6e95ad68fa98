from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_profile_query_service, get_viewer_id, require_viewer_id
from app.schemas import ProfileData, UserCreate
from app.services import user_service
from app.services.profile_query_service import ProfileQueryService

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.post("/users", status_code=201, response_model=ProfileData)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await user_service.create_user(db, data)
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail="A user with this username or email already exists",
        )


async def _profile(service: ProfileQueryService, username: str, viewer_id: int | None) -> ProfileData:
    profile = await service.find_by_username(username, viewer_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.get("/profiles/{username}", response_model=ProfileData)
async def get_profile(
    username: str,
    viewer_id: int | None = Depends(get_viewer_id),
    service: ProfileQueryService = Depends(get_profile_query_service),
):
    return await _profile(service, username, viewer_id)


@router.post("/profiles/{username}/follow", response_model=ProfileData)
async def follow(
    username: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ProfileQueryService = Depends(get_profile_query_service),
):
    await user_service.follow(db, viewer_id, username)
    return await _profile(service, username, viewer_id)


@router.delete("/profiles/{username}/follow", response_model=ProfileData)
async def unfollow(
    username: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ProfileQueryService = Depends(get_profile_query_service),
):
    await user_service.unfollow(db, viewer_id, username)
    return await _profile(service, username, viewer_id)
