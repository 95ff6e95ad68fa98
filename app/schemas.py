from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.pagination import CursorPage, TimestampCursor

T = TypeVar("T")


# --- Profile ---

class ProfileData(BaseModel):
    id: int
    username: str
    bio: str | None = None
    image: str | None = None
    following: bool = False
    model_config = ConfigDict(from_attributes=True)


# --- Article ---

class ArticleData(BaseModel):
    id: int
    slug: str
    title: str
    description: str
    body: str
    favorited: bool = False
    favorites_count: int = 0
    created_at: datetime
    updated_at: datetime
    tag_list: list[str] = []
    profile: ProfileData

    @property
    def cursor(self) -> TimestampCursor:
        return TimestampCursor(self.created_at)


class ArticleDataList(BaseModel):
    articles: list[ArticleData]
    count: int


# --- Comment ---

class CommentData(BaseModel):
    id: int
    body: str
    article_id: int
    created_at: datetime
    updated_at: datetime
    profile: ProfileData

    @property
    def cursor(self) -> TimestampCursor:
        return TimestampCursor(self.created_at)


# --- Cursor pages on the wire ---

class PageInfo(BaseModel):
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


class CursorPageResponse(BaseModel, Generic[T]):
    items: list[T]
    page_info: PageInfo

    @classmethod
    def from_page(cls, page: CursorPage) -> "CursorPageResponse":
        start, end = page.start_cursor, page.end_cursor
        return cls(
            items=page.items,
            page_info=PageInfo(
                has_next_page=page.has_next,
                has_previous_page=page.has_previous,
                start_cursor=start.encode() if start is not None else None,
                end_cursor=end.encode() if end is not None else None,
            ),
        )


class ArticlePageResponse(CursorPageResponse[ArticleData]):
    pass


class CommentPageResponse(CursorPageResponse[CommentData]):
    pass


# --- Tags ---

class TagList(BaseModel):
    tags: list[str]


# --- Request bodies ---

class UserCreate(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    bio: str | None = None
    image: str | None = None


class ArticleCreate(BaseModel):
    title: str = Field(max_length=200)
    description: str = Field("", max_length=500)
    body: str
    tag_list: list[str] = []


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=500)
    body: str | None = None


class CommentCreate(BaseModel):
    body: str


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_articles: int
    total_comments: int
    total_users: int
    total_favorites: int
    avg_comments_per_article: float
    cache_info: dict = {}
