from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import (
    CursorParams,
    OffsetParams,
    get_article_query_service,
    get_comment_query_service,
    get_viewer_id,
    require_viewer_id,
)
from app.schemas import (
    ArticleCreate,
    ArticleData,
    ArticleDataList,
    ArticlePageResponse,
    ArticleUpdate,
    CommentCreate,
    CommentData,
    CommentPageResponse,
)
from app.services import article_service, comment_service
from app.services.article_query_service import ArticleQueryService
from app.services.comment_query_service import CommentQueryService

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])


async def _load(service: ArticleQueryService, article_id: int, viewer_id: int | None) -> ArticleData:
    article = await service.find_by_id(article_id, viewer_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

@router.get("", response_model=ArticleDataList)
async def list_articles(
    tag: str | None = Query(None),
    author: str | None = Query(None),
    favorited: str | None = Query(None, description="Username of a user who favorited the article."),
    paging: OffsetParams = Depends(),
    viewer_id: int | None = Depends(get_viewer_id),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    page = await service.find_recent_articles(tag, author, favorited, paging.page, viewer_id)
    return ArticleDataList(articles=page.items, count=page.total_count)


@router.get("/cursor", response_model=ArticlePageResponse)
async def list_articles_with_cursor(
    tag: str | None = Query(None),
    author: str | None = Query(None),
    favorited: str | None = Query(None),
    paging: CursorParams = Depends(),
    viewer_id: int | None = Depends(get_viewer_id),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    page = await service.find_recent_articles_with_cursor(
        tag, author, favorited, paging.request, viewer_id
    )
    return ArticlePageResponse.from_page(page)


@router.get("/feed", response_model=ArticleDataList)
async def feed(
    paging: OffsetParams = Depends(),
    viewer_id: int = Depends(require_viewer_id),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    page = await service.find_user_feed(viewer_id, paging.page)
    return ArticleDataList(articles=page.items, count=page.total_count)


@router.get("/feed/cursor", response_model=ArticlePageResponse)
async def feed_with_cursor(
    paging: CursorParams = Depends(),
    viewer_id: int = Depends(require_viewer_id),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    page = await service.find_user_feed_with_cursor(viewer_id, paging.request)
    return ArticlePageResponse.from_page(page)


# ---------------------------------------------------------------------------
# Single article
# ---------------------------------------------------------------------------

@router.post("", status_code=201, response_model=ArticleData)
async def create_article(
    data: ArticleCreate,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    article_id = await article_service.create_article(db, viewer_id, data)
    return await _load(service, article_id, viewer_id)


@router.get("/{slug}", response_model=ArticleData)
async def get_article(
    slug: str,
    viewer_id: int | None = Depends(get_viewer_id),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    article = await service.find_by_slug(slug, viewer_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.put("/{slug}", response_model=ArticleData)
async def update_article(
    slug: str,
    data: ArticleUpdate,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    article_id = await article_service.update_article(db, slug, viewer_id, data)
    return await _load(service, article_id, viewer_id)


@router.delete("/{slug}", status_code=204)
async def delete_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, slug, viewer_id)


@router.post("/{slug}/favorite", response_model=ArticleData)
async def favorite_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    article_id = await article_service.favorite_article(db, slug, viewer_id)
    return await _load(service, article_id, viewer_id)


@router.delete("/{slug}/favorite", response_model=ArticleData)
async def unfavorite_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    service: ArticleQueryService = Depends(get_article_query_service),
):
    article_id = await article_service.unfavorite_article(db, slug, viewer_id)
    return await _load(service, article_id, viewer_id)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@router.get("/{slug}/comments", response_model=list[CommentData])
async def list_comments(
    slug: str,
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
    comments: CommentQueryService = Depends(get_comment_query_service),
):
    article = await article_service.get_article_by_slug(db, slug)
    return await comments.find_by_article_id(article.id, viewer_id)


@router.get("/{slug}/comments/cursor", response_model=CommentPageResponse)
async def list_comments_with_cursor(
    slug: str,
    paging: CursorParams = Depends(),
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
    comments: CommentQueryService = Depends(get_comment_query_service),
):
    article = await article_service.get_article_by_slug(db, slug)
    page = await comments.find_by_article_id_with_cursor(article.id, viewer_id, paging.request)
    return CommentPageResponse.from_page(page)


@router.post("/{slug}/comments", status_code=201, response_model=CommentData)
async def add_comment(
    slug: str,
    data: CommentCreate,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
    comments: CommentQueryService = Depends(get_comment_query_service),
):
    comment_id = await comment_service.add_comment(db, slug, viewer_id, data)
    return await comments.find_by_id(comment_id, viewer_id)


@router.delete("/{slug}/comments/{comment_id}", status_code=204)
async def delete_comment(
    slug: str,
    comment_id: int,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, slug, comment_id, viewer_id)
