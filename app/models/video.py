"""Uploaded video. video_url/avatar_url are public paths under /uploads."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey
from app.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    channel = Column(String(255), nullable=False)
    video_url = Column(String(512), nullable=False)  # /uploads/videos/<name>
    avatar_url = Column(String(512), nullable=True)  # /uploads/thumbnails/<name>, null if extraction failed
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    views = Column(Integer, nullable=False, default=0)
    is_short = Column(Boolean, nullable=False, default=False)
    duration = Column(String(16), nullable=True)  # "M:SS"
