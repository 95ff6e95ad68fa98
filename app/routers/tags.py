from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import TagList
from app.services.tags_query_service import TagsQueryService

router = APIRouter(prefix="/api/v1/tags", tags=["tags"])


@router.get("", response_model=TagList)
async def list_tags(db: AsyncSession = Depends(get_db)):
    return TagList(tags=await TagsQueryService(db).all_tags())
