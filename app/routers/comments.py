"""
Comments on videos and posts.

Public: list, create (anonymous allowed). Logged in: author or admin delete.
Admin moderation: list every comment of the entity kind, delete any comment.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.auth import get_current_user, get_current_user_admin
from app.database import get_db
from app.identity import Identity, get_identity
from app.models.user import User
from app.schemas.engagement import CommentCreate, CommentResponse
from app.services import engagement
from app.services.engagement import EngagementTarget


def build_router(target: EngagementTarget, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[f"{target.name}-comments"])

    # ---------- Admin moderation (before /{comment_id}) ----------

    @router.get("/admin")
    def moderation_list(
        entity_id: int,
        _admin: User = Depends(get_current_user_admin),
        db: Session = Depends(get_db),
    ):
        """Admin: every comment across all entities of this kind, with the parent title."""
        return engagement.moderation_list(db, target)

    @router.delete("/admin/{comment_id}")
    def moderation_delete(
        entity_id: int,
        comment_id: int,
        admin: User = Depends(get_current_user_admin),
        db: Session = Depends(get_db),
    ):
        """Admin: delete any comment by id, regardless of author."""
        engagement.moderation_delete(db, target, comment_id, admin)
        return {"message": "Comment permanently removed"}

    # ---------- Public ----------

    @router.get("", response_model=list[CommentResponse])
    def list_comments(entity_id: int, db: Session = Depends(get_db)):
        return engagement.list_comments(db, target, entity_id)

    @router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
    def create_comment(
        entity_id: int,
        body: CommentCreate,
        identity: Identity = Depends(get_identity),
        db: Session = Depends(get_db),
    ):
        return engagement.create_comment(db, target, entity_id, body.content, identity)

    @router.delete("/{comment_id}")
    def delete_comment(
        entity_id: int,
        comment_id: int,
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ):
        """Original author or admin."""
        engagement.delete_comment(db, target, entity_id, comment_id, user)
        return {"message": "Comment deleted"}

    return router


video_comments = build_router(engagement.VIDEO, "/api/videos/{entity_id}/comments")
post_comments = build_router(engagement.POST, "/api/posts/{entity_id}/comments")
