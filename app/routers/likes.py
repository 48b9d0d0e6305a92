"""
Like counters for videos and posts. Anonymous callers are tracked by the
session cookie, logged-in callers by user id. Every call returns the fresh count.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.identity import Identity, get_existing_identity, get_identity
from app.schemas.engagement import LikeCountResponse
from app.services import engagement
from app.services.engagement import EngagementTarget


def build_router(target: EngagementTarget, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[f"{target.name}-likes"])

    @router.get("/{entity_id}", response_model=LikeCountResponse)
    def get_likes(entity_id: int, db: Session = Depends(get_db)):
        engagement.get_parent_or_404(db, target, entity_id)
        return LikeCountResponse(likes=engagement.count_likes(db, target, entity_id))

    @router.post("/{entity_id}", response_model=LikeCountResponse)
    def like(
        entity_id: int,
        identity: Identity = Depends(get_identity),
        db: Session = Depends(get_db),
    ):
        """Idempotent: liking twice counts once. Sets the session cookie if missing."""
        return LikeCountResponse(likes=engagement.add_like(db, target, entity_id, identity))

    @router.delete("/{entity_id}", response_model=LikeCountResponse)
    def unlike(
        entity_id: int,
        identity: Identity | None = Depends(get_existing_identity),
        db: Session = Depends(get_db),
    ):
        """Removes only the caller's own like; 400 without a session cookie or login."""
        return LikeCountResponse(likes=engagement.remove_like(db, target, entity_id, identity))

    return router


video_likes = build_router(engagement.VIDEO, "/api/video-likes")
post_likes = build_router(engagement.POST, "/api/post-likes")
