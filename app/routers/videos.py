"""
Video catalogue: upload (logged in), list / search, detail with view count and
related videos (public), update and delete (owner or admin).
"""
import re
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from app.auth import can_manage, get_current_user
from app.config import get_settings
from app.database import get_db
from app.exceptions import Forbidden, NotFound
from app.models.category import Category
from app.models.user import User
from app.models.video import Video
from app.schemas.common import PageParams, parse
from app.schemas.video import (
    RelatedVideo,
    UploadResponse,
    VideoDetailResponse,
    VideoForm,
    VideoListResponse,
    VideoResponse,
    VideoUpdateForm,
)
from app.services import video_upload
from app.services.media import MediaProcessor, get_media_processor

router = APIRouter(prefix="/api/videos", tags=["videos"])

RELATED_LIMIT = 6
# multipart framing and text fields on top of the video itself
FORM_OVERHEAD_BYTES = 10 * 1024 * 1024
# upload and media-replacing update routes
UPLOAD_PATHS = re.compile(r"^/api/videos/(upload|\d+)$")


def page_params(page: str | None = None, limit: str | None = None) -> PageParams:
    return PageParams(page=page, limit=limit)


def video_response(video: Video, category_name: str | None) -> VideoResponse:
    return VideoResponse(
        id=video.id,
        title=video.title,
        description=video.description,
        channel=video.channel,
        video_url=video.video_url,
        avatar_url=video.avatar_url,
        category_id=video.category_id,
        category_name=category_name,
        created_by=video.created_by,
        created_at=video.created_at,
        views=video.views,
        is_short=video.is_short,
        duration=video.duration,
    )


def _with_category(db: Session):
    return db.query(Video, Category.name).outerjoin(Category, Video.category_id == Category.id)


def _get_video_or_404(video_id: int, db: Session) -> Video:
    video = db.get(Video, video_id)
    if not video:
        raise NotFound("Video not found")
    return video


def declared_size_exceeds_limit(method: str, path: str, content_length: str | None) -> int | None:
    """
    The byte limit if a video upload/replace request declares a Content-Length above it, else None.
    Checked by middleware in app.main before the multipart body is read.
    """
    if method not in ("POST", "PUT") or not UPLOAD_PATHS.match(path):
        return None
    limit = get_settings().max_video_size_bytes
    if content_length and content_length.isdigit() and int(content_length) > limit + FORM_OVERHEAD_BYTES:
        return limit
    return None


@router.get("", response_model=VideoListResponse)
def list_videos(
    paging: PageParams = Depends(page_params),
    search: str | None = None,
    db: Session = Depends(get_db),
):
    """Newest first. search matches title or channel (case-insensitive substring)."""
    q = _with_category(db)
    term = (search or "").strip()
    if term:
        # literal substring: % and _ in the term are escaped
        q = q.filter(or_(
            Video.title.icontains(term, autoescape=True),
            Video.channel.icontains(term, autoescape=True),
        ))

    total = q.with_entities(func.count(Video.id)).scalar() or 0
    rows = (
        q.order_by(Video.created_at.desc(), Video.id.desc())
        .limit(paging.limit)
        .offset(paging.offset)
        .all()
    )
    return VideoListResponse(
        videos=[video_response(v, name) for v, name in rows],
        total_count=total,
        total_pages=paging.total_pages(total),
        current_page=paging.page,
    )


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    title: str | None = Form(None),
    description: str | None = Form(None),
    channel: str | None = Form(None),
    category_id: str | None = Form(None),
    is_short: str | None = Form(None),
    video: UploadFile | None = File(None),
    avatar: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    processor: MediaProcessor = Depends(get_media_processor),
):
    """
    Upload one video (multipart). The thumbnail is cut from the middle of the
    video unless an avatar image is supplied; duration is probed with ffprobe.
    """
    form = parse(
        VideoForm,
        title=title,
        description=description,
        channel=channel,
        category_id=category_id,
        is_short=is_short,
    )
    created = await video_upload.ingest_video(db, processor, user, form, video, avatar)
    return UploadResponse(message="Video uploaded", video_id=created.id)


@router.get("/{video_id}", response_model=VideoDetailResponse)
def get_video(video_id: int, db: Session = Depends(get_db)):
    """Detail. Every call counts one view; relatedVideos = up to 6 others in the same category."""
    updated = (
        db.query(Video)
        .filter(Video.id == video_id)
        .update({Video.views: Video.views + 1}, synchronize_session=False)
    )
    if not updated:
        raise NotFound("Video not found")
    db.commit()

    video, category_name = _with_category(db).filter(Video.id == video_id).one()
    related = []
    if video.category_id is not None:
        related = (
            db.query(Video)
            .filter(Video.category_id == video.category_id, Video.id != video.id)
            .order_by(func.random())
            .limit(RELATED_LIMIT)
            .all()
        )
    return VideoDetailResponse(
        video=video_response(video, category_name),
        related_videos=[RelatedVideo.model_validate(r) for r in related],
    )


@router.put("/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: int,
    title: str | None = Form(None),
    description: str | None = Form(None),
    category_id: str | None = Form(None),
    duration: str | None = Form(None),
    is_short: str | None = Form(None),
    video: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    processor: MediaProcessor = Depends(get_media_processor),
):
    """Owner or admin. Omitted fields stay as they are; a new video file replaces the media."""
    row = _get_video_or_404(video_id, db)
    if not can_manage(user, row.created_by):
        raise Forbidden("Not authorized to modify this video")
    form = parse(
        VideoUpdateForm,
        title=title,
        description=description,
        category_id=category_id,
        duration=duration,
        is_short=is_short,
    )
    row = await video_upload.update_video(db, processor, row, form, video)
    name = db.query(Category.name).filter(Category.id == row.category_id).scalar() if row.category_id else None
    return video_response(row, name)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_video(
    video_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Owner or admin. Removes comments, likes and playlist entries, then the video and its files."""
    row = _get_video_or_404(video_id, db)
    if not can_manage(user, row.created_by):
        raise Forbidden("Not authorized to delete this video")
    video_upload.delete_video(db, row)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
