from datetime import datetime
from pydantic import BaseModel


class LikeCountResponse(BaseModel):
    likes: int


class CommentCreate(BaseModel):
    # Optional so an empty body reaches the 400 "content is required" check
    content: str | None = None


class CommentResponse(BaseModel):
    id: int
    content: str
    created_at: datetime
    user_id: int | None
    author_email: str | None = None
