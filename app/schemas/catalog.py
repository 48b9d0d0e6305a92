from datetime import datetime
from pydantic import BaseModel, field_validator


class NameBody(BaseModel):
    """Body for category / playlist create and rename."""
    name: str

    @field_validator("name")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v


class CategoryResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class PlaylistResponse(BaseModel):
    id: int
    name: str
    created_by: int
    creator: str | None = None
    created_at: datetime
    video_count: int = 0


class PlaylistVideoAdd(BaseModel):
    video_id: int


class TopVideo(BaseModel):
    id: int
    title: str
    views: int


class TopCategory(BaseModel):
    id: int
    name: str
    count: int


class AnalyticsResponse(BaseModel):
    total_videos: int
    total_users: int
    total_categories: int
    top_videos: list[TopVideo]
    top_categories: list[TopCategory]
