from app.models.user import User
from app.models.category import Category
from app.models.video import Video
from app.models.post import Post
from app.models.comment import VideoComment, PostComment
from app.models.like import VideoLike, PostLike
from app.models.playlist import Playlist, VideoPlaylist

__all__ = [
    "User", "Category", "Video", "Post", "VideoComment", "PostComment",
    "VideoLike", "PostLike", "Playlist", "VideoPlaylist",
]
