"""On-disk media storage: upload dirs, generated filenames, public URLs, cleanup."""
import logging
import secrets
import time
from pathlib import Path
from fastapi import UploadFile
from app.config import get_settings
from app.exceptions import PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB
PUBLIC_PREFIX = "/uploads"
VIDEOS = "videos"
THUMBNAILS = "thumbnails"

VIDEO_EXTENSIONS = {".mp4", ".webm", ".ogg", ".mov", ".mkv", ".avi", ".m4v"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


def upload_root() -> Path:
    settings = get_settings()
    if settings.upload_dir:
        return Path(settings.upload_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads"


def media_dir(kind: str) -> Path:
    path = upload_root() / kind
    path.mkdir(parents=True, exist_ok=True)
    return path


def public_url(kind: str, filename: str) -> str:
    return f"{PUBLIC_PREFIX}/{kind}/{filename}"


def path_for_url(url: str | None) -> Path | None:
    """Map a stored /uploads/<kind>/<name> URL back to its file. Only the basename is trusted."""
    if not url:
        return None
    parts = url.strip("/").split("/")
    if len(parts) < 3 or "/" + parts[0] != PUBLIC_PREFIX or parts[1] not in (VIDEOS, THUMBNAILS):
        return None
    return upload_root() / parts[1] / Path(parts[-1]).name


def generate_filename(original: str | None, default_ext: str) -> str:
    """<epoch-ms>-<random><ext>; only the extension comes from the client."""
    ext = Path(original or "").suffix.lower()
    if not ext or len(ext) > 10:
        ext = default_ext
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def check_video_file(file: UploadFile | None) -> None:
    if file is None or not file.filename:
        raise ValidationError("No video file uploaded")
    ct = (file.content_type or "").split(";")[0].strip().lower()
    if not ct.startswith("video/") and Path(file.filename).suffix.lower() not in VIDEO_EXTENSIONS:
        raise ValidationError("File must be a video (e.g. video/mp4).")


def check_image_file(file: UploadFile) -> None:
    ct = (file.content_type or "").split(";")[0].strip().lower()
    if not ct.startswith("image/") and Path(file.filename or "").suffix.lower() not in IMAGE_EXTENSIONS:
        raise ValidationError("Thumbnail must be an image.")


def save_upload(file: UploadFile, kind: str, default_ext: str, max_bytes: int | None = None) -> Path:
    """
    Stream an UploadFile to media_dir(kind) under a generated name.
    Blocking; call through run_in_threadpool from async routes.
    Raises PayloadTooLarge (and removes the partial file) past max_bytes.
    """
    path = media_dir(kind) / generate_filename(file.filename, default_ext)
    written = 0
    try:
        with path.open("wb") as f:
            while chunk := file.file.read(CHUNK_SIZE):
                written += len(chunk)
                if max_bytes is not None and written > max_bytes:
                    raise PayloadTooLarge(f"File exceeds the {max_bytes} byte limit")
                f.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    logger.info("Stored %s upload %s (%d bytes)", kind, path.name, written)
    return path


def remove_file(path: Path | None) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


def remove_url(url: str | None) -> None:
    remove_file(path_for_url(url))
