from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./app.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Upload root: absolute path (empty = backend/uploads). Holds videos/ and thumbnails/
    upload_dir: str = ""

    # Hard cap for a single uploaded video (10 GiB)
    max_video_size_bytes: int = 10 * 1024 * 1024 * 1024

    # FFmpeg binaries (must be on PATH unless absolute)
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Upper bound for each external ffmpeg/ffprobe call (seconds)
    media_timeout_seconds: float = 120.0

    # true = upload fails when thumbnail or duration cannot be derived
    # false = both are best-effort (avatar_url NULL / duration 0:00)
    media_processing_required: bool = False

    # Anonymous engagement cookie
    session_cookie_name: str = "sessionId"
    session_cookie_max_age: int = 60 * 60 * 24 * 30  # 30 days
    session_cookie_secure: bool = False

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
