from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token
from app.config import get_settings
from app.database import Base, get_db
from app.main import app
from app.models import Category, Post, User, Video
from app.services.media import MediaInfo, get_media_processor


class FakeMediaProcessor:
    """Stands in for ffmpeg: writes a small JPEG-looking file and reports a fixed duration."""

    def __init__(self, thumbnail_dir: Path, duration: float = 125.7):
        self.thumbnail_dir = thumbnail_dir
        self.duration = duration
        self.calls: list[Path] = []

    async def process(self, source: Path, extract_thumbnail: bool = True) -> MediaInfo:
        self.calls.append(source)
        thumb = None
        if extract_thumbnail:
            self.thumbnail_dir.mkdir(parents=True, exist_ok=True)
            thumb = self.thumbnail_dir / f"thumbnail-{len(self.calls)}.jpg"
            thumb.write_bytes(b"\xff\xd8\xff\xe0fake")
        return MediaInfo(thumbnail_path=thumb, duration_seconds=self.duration)


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    get_settings.cache_clear()
    yield tmp_path / "uploads"
    get_settings.cache_clear()


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def media(upload_dir):
    return FakeMediaProcessor(upload_dir / "thumbnails")


@pytest.fixture()
def client(session_factory, media):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_processor] = lambda: media
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make(is_admin: bool = False, email: str | None = None):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash="unused",
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        headers = {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}
        return user, headers

    return _make


@pytest.fixture()
def make_category(db):
    def _make(name: str) -> Category:
        row = Category(name=name)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture()
def make_video(db, make_user):
    state = {"owner": None, "n": 0, "start": datetime(2025, 1, 1)}

    def _make(owner: User | None = None, **fields) -> Video:
        if owner is None:
            if state["owner"] is None:
                state["owner"], _ = make_user()
            owner = state["owner"]
        state["n"] += 1
        values = {
            "title": f"Video {state['n']}",
            "channel": "Main",
            "video_url": f"/uploads/videos/seed-{state['n']}.mp4",
            "created_by": owner.id,
            "created_at": state["start"] + timedelta(minutes=state["n"]),
        }
        values.update(fields)
        row = Video(**values)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


@pytest.fixture()
def make_post(db, make_user):
    def _make(title: str = "Hello post") -> Post:
        author, _ = make_user()
        row = Post(title=title, content="Body", author_id=author.id)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make
