"""
Admin: category and playlist management, site analytics.
Duplicate names are caught by unique constraints rather than looked up first.
"""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.auth import get_current_user_admin
from app.database import get_db
from app.exceptions import Conflict, NotFound
from app.models.category import Category
from app.models.playlist import Playlist, VideoPlaylist
from app.models.user import User
from app.models.video import Video
from app.schemas.catalog import (
    AnalyticsResponse,
    CategoryResponse,
    NameBody,
    PlaylistResponse,
    PlaylistVideoAdd,
    TopCategory,
    TopVideo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ---------- Categories ----------


def _get_category_or_404(category_id: int, db: Session) -> Category:
    row = db.get(Category, category_id)
    if not row:
        raise NotFound("Category not found")
    return row


@router.get("/categories", response_model=list[CategoryResponse])
def admin_list_categories(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    return db.query(Category).order_by(Category.name).all()


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    body: NameBody,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    row = Category(name=body.name)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Category already exists")
    db.refresh(row)
    return row


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def rename_category(
    category_id: int,
    body: NameBody,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    row = _get_category_or_404(category_id, db)
    row.name = body.name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Category already exists")
    db.refresh(row)
    return row


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """Blocked while any video still uses the category."""
    row = _get_category_or_404(category_id, db)
    in_use = db.query(Video.id).filter(Video.category_id == category_id).limit(1).first()
    if in_use:
        raise Conflict("Category in use")
    db.delete(row)
    db.commit()
    logger.info("Deleted category %s", category_id)
    return {"message": "Deleted"}


# ---------- Playlists ----------


def _get_playlist_or_404(playlist_id: int, db: Session) -> Playlist:
    row = db.get(Playlist, playlist_id)
    if not row:
        raise NotFound("Playlist not found")
    return row


def _playlist_response(p: Playlist, creator: str | None, video_count: int) -> PlaylistResponse:
    return PlaylistResponse(
        id=p.id,
        name=p.name,
        created_by=p.created_by,
        creator=creator,
        created_at=p.created_at,
        video_count=video_count,
    )


@router.get("/playlists", response_model=list[PlaylistResponse])
def admin_list_playlists(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    counts = (
        db.query(VideoPlaylist.playlist_id, func.count(VideoPlaylist.video_id).label("cnt"))
        .group_by(VideoPlaylist.playlist_id)
        .subquery()
    )
    rows = (
        db.query(Playlist, User.email, counts.c.cnt)
        .outerjoin(User, Playlist.created_by == User.id)
        .outerjoin(counts, counts.c.playlist_id == Playlist.id)
        .order_by(Playlist.name)
        .all()
    )
    return [_playlist_response(p, email, cnt or 0) for p, email, cnt in rows]


@router.post("/playlists", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
def create_playlist(
    body: NameBody,
    admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    row = Playlist(name=body.name, created_by=admin.id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return _playlist_response(row, admin.email, 0)


@router.put("/playlists/{playlist_id}", response_model=PlaylistResponse)
def rename_playlist(
    playlist_id: int,
    body: NameBody,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    row = _get_playlist_or_404(playlist_id, db)
    row.name = body.name
    db.commit()
    db.refresh(row)
    count = db.query(func.count(VideoPlaylist.video_id)).filter(VideoPlaylist.playlist_id == row.id).scalar()
    creator = db.query(User.email).filter(User.id == row.created_by).scalar()
    return _playlist_response(row, creator, count or 0)


@router.delete("/playlists/{playlist_id}")
def delete_playlist(
    playlist_id: int,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """Memberships and the playlist go in one transaction."""
    row = _get_playlist_or_404(playlist_id, db)
    db.query(VideoPlaylist).filter(VideoPlaylist.playlist_id == playlist_id).delete(synchronize_session=False)
    db.delete(row)
    db.commit()
    logger.info("Deleted playlist %s", playlist_id)
    return {"message": "Deleted"}


@router.post("/playlists/{playlist_id}/videos", status_code=status.HTTP_201_CREATED)
def add_playlist_video(
    playlist_id: int,
    body: PlaylistVideoAdd,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    """Append a video at the end of the playlist."""
    _get_playlist_or_404(playlist_id, db)
    if db.get(Video, body.video_id) is None:
        raise NotFound("Video not found")
    last = (
        db.query(func.max(VideoPlaylist.position))
        .filter(VideoPlaylist.playlist_id == playlist_id)
        .scalar()
    )
    entry = VideoPlaylist(playlist_id=playlist_id, video_id=body.video_id, position=(last or 0) + 1)
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Video already in playlist")
    return {"playlist_id": playlist_id, "video_id": body.video_id, "position": entry.position}


@router.delete("/playlists/{playlist_id}/videos/{video_id}")
def remove_playlist_video(
    playlist_id: int,
    video_id: int,
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    removed = (
        db.query(VideoPlaylist)
        .filter(VideoPlaylist.playlist_id == playlist_id, VideoPlaylist.video_id == video_id)
        .delete(synchronize_session=False)
    )
    if not removed:
        raise NotFound("Video not in playlist")
    db.commit()
    return {"message": "Removed"}


# ---------- Analytics ----------


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(
    _admin: User = Depends(get_current_user_admin),
    db: Session = Depends(get_db),
):
    top_videos = db.query(Video.id, Video.title, Video.views).order_by(Video.views.desc()).limit(5).all()
    video_count = func.count(Video.id).label("count")
    top_categories = (
        db.query(Category.id, Category.name, video_count)
        .outerjoin(Video, Video.category_id == Category.id)
        .group_by(Category.id, Category.name)
        .order_by(video_count.desc(), Category.name)
        .limit(5)
        .all()
    )
    return AnalyticsResponse(
        total_videos=db.query(func.count(Video.id)).scalar() or 0,
        total_users=db.query(func.count(User.id)).scalar() or 0,
        total_categories=db.query(func.count(Category.id)).scalar() or 0,
        top_videos=[TopVideo(id=i, title=t, views=v) for i, t, v in top_videos],
        top_categories=[TopCategory(id=i, name=n, count=c) for i, n, c in top_categories],
    )
