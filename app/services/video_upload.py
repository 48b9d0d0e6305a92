"""
Video ingestion: store the file, derive thumbnail + duration, persist the row.

A failed upload leaves neither a Video row nor the files this request wrote.
"""
import logging
from pathlib import Path
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from app.config import get_settings
from app.exceptions import NotFound, StorageError
from app.models.category import Category
from app.models.playlist import VideoPlaylist
from app.models.user import User
from app.models.video import Video
from app.schemas.video import VideoForm, VideoUpdateForm
from app.services import engagement, storage
from app.services.media import MediaInfo, MediaProcessor

logger = logging.getLogger(__name__)


def ensure_category(db: Session, category_id: int | None) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise NotFound("Category not found")


async def _store_media(
    processor: MediaProcessor,
    video_file: UploadFile,
    avatar_file: UploadFile | None,
    written: list[Path],
) -> tuple[Path, Path | None, MediaInfo]:
    """Write video (and optional thumbnail override) to disk, then probe. Appends every file to written."""
    max_bytes = get_settings().max_video_size_bytes
    video_path = await run_in_threadpool(storage.save_upload, video_file, storage.VIDEOS, ".mp4", max_bytes)
    written.append(video_path)

    avatar_path = None
    if avatar_file is not None:
        avatar_path = await run_in_threadpool(storage.save_upload, avatar_file, storage.THUMBNAILS, ".jpg")
        written.append(avatar_path)

    info = await processor.process(video_path, extract_thumbnail=avatar_path is None)
    if info.thumbnail_path is not None:
        written.append(info.thumbnail_path)
    return video_path, avatar_path or info.thumbnail_path, info


def _cleanup(db: Session, written: list[Path]) -> None:
    db.rollback()
    for path in written:
        storage.remove_file(path)


def _avatar(avatar_file: UploadFile | None) -> UploadFile | None:
    if avatar_file is None or not avatar_file.filename:
        return None
    storage.check_image_file(avatar_file)
    return avatar_file


async def ingest_video(
    db: Session,
    processor: MediaProcessor,
    owner: User,
    form: VideoForm,
    video_file: UploadFile | None,
    avatar_file: UploadFile | None = None,
) -> Video:
    storage.check_video_file(video_file)
    avatar_file = _avatar(avatar_file)
    ensure_category(db, form.category_id)

    written: list[Path] = []
    try:
        video_path, thumb_path, info = await _store_media(processor, video_file, avatar_file, written)
        video = Video(
            title=form.title,
            description=form.description,
            channel=form.channel,
            video_url=storage.public_url(storage.VIDEOS, video_path.name),
            avatar_url=storage.public_url(storage.THUMBNAILS, thumb_path.name) if thumb_path else None,
            category_id=form.category_id,
            created_by=owner.id,
            duration=info.duration,
            is_short=form.is_short,
        )
        db.add(video)
        db.commit()
        db.refresh(video)
    except SQLAlchemyError as e:
        _cleanup(db, written)
        logger.exception("Saving uploaded video failed")
        raise StorageError("Could not save video") from e
    except BaseException:
        _cleanup(db, written)
        raise

    logger.info("User %s uploaded video %s (%s, %s)", owner.id, video.id, video.video_url, video.duration)
    return video


async def update_video(
    db: Session,
    processor: MediaProcessor,
    video: Video,
    form: VideoUpdateForm,
    video_file: UploadFile | None = None,
) -> Video:
    """Apply non-None fields; a new video file replaces media and re-runs processing."""
    ensure_category(db, form.category_id)
    replace = video_file is not None and bool(video_file.filename)
    if replace:
        storage.check_video_file(video_file)

    old_urls: list[str | None] = []
    written: list[Path] = []
    try:
        for field in ("title", "description", "category_id", "duration", "is_short"):
            value = getattr(form, field)
            if value is not None:
                setattr(video, field, value)
        if replace:
            video_path, thumb_path, info = await _store_media(processor, video_file, None, written)
            old_urls = [video.video_url, video.avatar_url]
            video.video_url = storage.public_url(storage.VIDEOS, video_path.name)
            video.avatar_url = storage.public_url(storage.THUMBNAILS, thumb_path.name) if thumb_path else None
            if form.duration is None:
                video.duration = info.duration
        db.commit()
        db.refresh(video)
    except SQLAlchemyError as e:
        _cleanup(db, written)
        logger.exception("Updating video %s failed", video.id)
        raise StorageError("Could not update video") from e
    except BaseException:
        _cleanup(db, written)
        raise

    for url in old_urls:
        storage.remove_url(url)
    return video


def delete_video(db: Session, video: Video) -> None:
    """Dependents first (comments, likes, playlist entries), then the row, in one transaction."""
    video_id, urls = video.id, (video.video_url, video.avatar_url)
    try:
        engagement.delete_for_entity(db, engagement.VIDEO, video_id)
        db.query(VideoPlaylist).filter(VideoPlaylist.video_id == video_id).delete(synchronize_session=False)
        db.delete(video)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting video %s failed", video_id)
        raise StorageError("Could not delete video") from e

    for url in urls:
        storage.remove_url(url)
    logger.info("Deleted video %s", video_id)
