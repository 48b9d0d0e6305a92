from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from app.schemas.common import blank_to_none, parse_flag


class VideoForm(BaseModel):
    """Multipart fields accepted by POST /api/videos/upload."""
    title: str
    description: str | None = None
    channel: str
    category_id: int | None = None
    is_short: bool = False

    @field_validator("title", "channel", mode="before")
    @classmethod
    def _required_text(cls, v, info):
        v = blank_to_none(v)
        if v is None:
            raise ValueError(f"{info.field_name} is required")
        return v

    @field_validator("description", "category_id", mode="before")
    @classmethod
    def _optional(cls, v):
        return blank_to_none(v)

    @field_validator("is_short", mode="before")
    @classmethod
    def _flag(cls, v):
        return parse_flag(v)


class VideoUpdateForm(BaseModel):
    """Multipart fields accepted by PUT /api/videos/{id}. None = leave unchanged."""
    title: str | None = None
    description: str | None = None
    category_id: int | None = None
    duration: str | None = Field(None, pattern=r"^\d+:[0-5]\d$")
    is_short: bool | None = None

    @field_validator("title", "description", "category_id", "duration", mode="before")
    @classmethod
    def _optional(cls, v):
        return blank_to_none(v)

    @field_validator("is_short", mode="before")
    @classmethod
    def _flag(cls, v):
        v = blank_to_none(v)
        return None if v is None else parse_flag(v)


class VideoResponse(BaseModel):
    id: int
    title: str
    description: str | None
    channel: str
    video_url: str
    avatar_url: str | None
    category_id: int | None
    category_name: str | None = None
    created_by: int
    created_at: datetime
    views: int
    is_short: bool
    duration: str | None

    class Config:
        from_attributes = True


class RelatedVideo(BaseModel):
    id: int
    title: str
    avatar_url: str | None
    duration: str | None
    views: int

    class Config:
        from_attributes = True


class VideoListResponse(BaseModel):
    videos: list[VideoResponse]
    total_count: int = Field(alias="totalCount")
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")

    class Config:
        populate_by_name = True


class VideoDetailResponse(BaseModel):
    video: VideoResponse
    related_videos: list[RelatedVideo] = Field(alias="relatedVideos")

    class Config:
        populate_by_name = True


class ShortsFeedResponse(BaseModel):
    videos: list[VideoResponse]
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    message: str
    video_id: int = Field(alias="videoId")

    class Config:
        populate_by_name = True
