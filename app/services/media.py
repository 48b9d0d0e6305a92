"""
Thumbnail extraction and duration probing with FFmpeg.

Both calls only read the source file, so process() runs them concurrently.
Every external call is bounded by a timeout; a call that times out or whose
task is cancelled kills its child process.
"""
import asyncio
import logging
import math
import uuid
from dataclasses import dataclass
from pathlib import Path
from app.config import get_settings
from app.exceptions import MediaProcessingError, ThumbnailError
from app.services import storage

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (640, 360)
THUMBNAIL_POSITION = 0.5  # fraction of the duration


def format_duration(seconds: float) -> str:
    """125.7 -> "2:05". Minutes are not rolled over into hours."""
    if not seconds or seconds < 0 or math.isnan(seconds):
        seconds = 0
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


@dataclass
class MediaInfo:
    thumbnail_path: Path | None
    duration_seconds: float

    @property
    def duration(self) -> str:
        return format_duration(self.duration_seconds)


class MediaProcessor:
    def __init__(
        self,
        thumbnail_dir: Path,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        timeout: float = 120.0,
        required: bool = False,
    ):
        self.thumbnail_dir = thumbnail_dir
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout
        self.required = required

    async def _run(self, cmd: list[str]) -> bytes:
        """Run an external tool; return stdout. Raises MediaProcessingError on any failure."""
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise MediaProcessingError(f"{cmd[0]} not found; install FFmpeg") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise MediaProcessingError(f"{Path(cmd[0]).name} timed out after {self.timeout:g}s") from e
        finally:
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            err = stderr.decode(errors="replace").strip().splitlines()
            raise MediaProcessingError(
                f"{Path(cmd[0]).name} exited with {proc.returncode}: {err[-1] if err else 'no output'}"
            )
        return stdout

    async def _read_duration(self, source: Path) -> float:
        cmd = [
            self.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(source),
        ]
        out = (await self._run(cmd)).decode().strip()
        try:
            duration = float(out)
        except ValueError as e:
            raise MediaProcessingError(f"ffprobe reported no duration for {source.name}") from e
        if math.isnan(duration) or duration < 0:
            raise MediaProcessingError(f"ffprobe reported no duration for {source.name}")
        return duration

    async def probe_duration(self, source: Path) -> float:
        """Container duration in seconds, or 0.0 if it cannot be read."""
        try:
            return await self._read_duration(source)
        except MediaProcessingError as e:
            logger.warning("Duration probe failed for %s: %s", source, e.detail)
            return 0.0

    async def extract_thumbnail(self, source: Path) -> Path:
        """Grab one frame at the midpoint as a 640x360 JPEG. Raises ThumbnailError."""
        if not source.is_file():
            raise ThumbnailError(f"Source video not found: {source.name}")
        try:
            duration = await self._read_duration(source)
        except MediaProcessingError as e:
            raise ThumbnailError(f"Cannot open {source.name}: {e.detail}") from e

        self.thumbnail_dir.mkdir(parents=True, exist_ok=True)
        target = self.thumbnail_dir / f"thumbnail-{uuid.uuid4()}.jpg"
        width, height = THUMBNAIL_SIZE
        cmd = [
            self.ffmpeg_path,
            "-y",
            "-ss", f"{duration * THUMBNAIL_POSITION:.3f}",
            "-i", str(source),
            "-frames:v", "1",
            "-vf", f"scale={width}:{height}",
            "-q:v", "2",
            str(target),
        ]
        try:
            await self._run(cmd)
        except MediaProcessingError as e:
            storage.remove_file(target)
            raise ThumbnailError(f"Thumbnail extraction failed: {e.detail}") from e

        if not target.is_file() or target.stat().st_size == 0:
            storage.remove_file(target)
            raise ThumbnailError(f"ffmpeg produced no thumbnail for {source.name}")
        logger.info("Thumbnail for %s written to %s", source.name, target.name)
        return target

    async def process(self, source: Path, extract_thumbnail: bool = True) -> MediaInfo:
        """
        Thumbnail + duration for one uploaded file, run concurrently.
        With required=False both are best-effort; with required=True a missing
        thumbnail or zero duration raises MediaProcessingError.
        """
        if extract_thumbnail:
            thumb, duration = await asyncio.gather(
                self.extract_thumbnail(source),
                self.probe_duration(source),
                return_exceptions=True,
            )
        else:
            thumb, duration = None, await self.probe_duration(source)

        if isinstance(duration, BaseException):
            if isinstance(thumb, Path):
                storage.remove_file(thumb)
            raise duration
        if isinstance(thumb, BaseException):
            if not isinstance(thumb, MediaProcessingError):
                raise thumb
            if self.required:
                raise thumb
            logger.warning("Continuing without thumbnail for %s: %s", source.name, thumb.detail)
            thumb = None

        if self.required and duration <= 0:
            storage.remove_file(thumb)
            raise MediaProcessingError(f"Could not determine duration of {source.name}")
        return MediaInfo(thumbnail_path=thumb, duration_seconds=duration)


def get_media_processor() -> MediaProcessor:
    settings = get_settings()
    return MediaProcessor(
        thumbnail_dir=storage.media_dir(storage.THUMBNAILS),
        ffmpeg_path=settings.ffmpeg_path,
        ffprobe_path=settings.ffprobe_path,
        timeout=settings.media_timeout_seconds,
        required=settings.media_processing_required,
    )
