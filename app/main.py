import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from app.config import get_settings
from app.routers import admin, auth, categories, comments, likes, shorts, videos
from app.services.storage import PUBLIC_PREFIX, upload_root

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Media API", version="1.0.0")


@app.middleware("http")
async def reject_oversized_uploads(request: Request, call_next):
    """413 from the declared Content-Length, before the multipart body is read or spooled."""
    limit = videos.declared_size_exceeds_limit(
        request.method, request.url.path, request.headers.get("content-length")
    )
    if limit is not None:
        logger.warning("Rejected %s %s: Content-Length over %s bytes", request.method, request.url.path, limit)
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content={"detail": f"Video exceeds the {limit} byte limit"},
        )
    return await call_next(request)


# outermost, so the 413 above also carries CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(shorts.router)
app.include_router(comments.video_comments)
app.include_router(comments.post_comments)
app.include_router(videos.router)
app.include_router(likes.video_likes)
app.include_router(likes.post_likes)
app.include_router(admin.router)

app.mount(PUBLIC_PREFIX, StaticFiles(directory=upload_root(), check_dir=False), name="uploads")


@app.get("/")
def root():
    return {"message": "Media API", "docs": "/docs"}
