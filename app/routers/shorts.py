from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.category import Category
from app.models.video import Video
from app.routers.videos import video_response, page_params
from app.schemas.common import PageParams
from app.schemas.video import ShortsFeedResponse

router = APIRouter(prefix="/api/shorts", tags=["shorts"])


@router.get("/feed", response_model=ShortsFeedResponse)
def shorts_feed(paging: PageParams = Depends(page_params), db: Session = Depends(get_db)):
    """Short-form videos, newest first."""
    total = db.query(func.count(Video.id)).filter(Video.is_short == True).scalar() or 0  # noqa: E712
    rows = (
        db.query(Video, Category.name)
        .outerjoin(Category, Video.category_id == Category.id)
        .filter(Video.is_short == True)  # noqa: E712
        .order_by(Video.created_at.desc(), Video.id.desc())
        .limit(paging.limit)
        .offset(paging.offset)
        .all()
    )
    return ShortsFeedResponse(
        videos=[video_response(v, name) for v, name in rows],
        total_pages=paging.total_pages(total),
        current_page=paging.page,
    )
