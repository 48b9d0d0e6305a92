"""Engine, session factory and the get_db dependency. DATABASE_URL picks the backend."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import get_settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # request handlers run in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    # long-lived server connections can be dropped between uploads
    return {"pool_pre_ping": True, "pool_recycle": 1800}


engine = create_engine(get_settings().database_url, echo=False, **_engine_options(get_settings().database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """One session per request; closed after the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
