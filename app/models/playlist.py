from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database import Base


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class VideoPlaylist(Base):
    """Membership of a video in a playlist, ordered by position."""
    __tablename__ = "video_playlists"

    playlist_id = Column(Integer, ForeignKey("playlists.id"), primary_key=True)
    video_id = Column(Integer, ForeignKey("videos.id"), primary_key=True)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime, nullable=False, default=datetime.utcnow)
