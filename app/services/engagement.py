"""
Likes and comments, shared by videos and posts.

An EngagementTarget names the parent model and its comment / like tables;
every function takes one so the video and post routes behave identically.
"""
import logging
from dataclasses import dataclass
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from app.auth import can_manage
from app.exceptions import Forbidden, NotFound, ValidationError
from app.identity import Authenticated, Identity, identity_columns
from app.models.comment import PostComment, VideoComment
from app.models.like import PostLike, VideoLike
from app.models.post import Post
from app.models.user import User
from app.models.video import Video
from app.schemas.engagement import CommentResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngagementTarget:
    name: str
    parent: type
    comment: type
    like: type
    key: str  # parent id column on comment / like rows

    def fk(self, model):
        return getattr(model, self.key)


VIDEO = EngagementTarget("video", Video, VideoComment, VideoLike, "video_id")
POST = EngagementTarget("post", Post, PostComment, PostLike, "post_id")


def get_parent_or_404(db: Session, target: EngagementTarget, entity_id: int):
    row = db.get(target.parent, entity_id)
    if row is None:
        raise NotFound(f"{target.name.capitalize()} not found")
    return row


# ---------- Likes ----------


def count_likes(db: Session, target: EngagementTarget, entity_id: int) -> int:
    return (
        db.query(func.count(target.like.id))
        .filter(target.fk(target.like) == entity_id)
        .scalar()
    ) or 0


def _insert_ignore(db: Session, model, values: dict) -> None:
    """INSERT ... ON CONFLICT DO NOTHING; the unique constraints decide what is a duplicate."""
    dialect = postgresql if db.get_bind().dialect.name == "postgresql" else sqlite
    db.execute(dialect.insert(model).values(**values).on_conflict_do_nothing())


def add_like(db: Session, target: EngagementTarget, entity_id: int, identity: Identity) -> int:
    get_parent_or_404(db, target, entity_id)
    _insert_ignore(db, target.like, {target.key: entity_id, **identity_columns(identity)})
    db.commit()
    return count_likes(db, target, entity_id)


def remove_like(db: Session, target: EngagementTarget, entity_id: int, identity: Identity | None) -> int:
    """Remove the caller's own like. Without a session or login there is nothing to match."""
    if identity is None:
        raise ValidationError("No session or login to remove a like for")
    get_parent_or_404(db, target, entity_id)
    like = target.like
    if isinstance(identity, Authenticated):
        owner = like.user_id == identity.user_id
    else:
        owner = like.session_id == identity.session_token
    db.query(like).filter(target.fk(like) == entity_id, owner).delete(synchronize_session=False)
    db.commit()
    return count_likes(db, target, entity_id)


# ---------- Comments ----------


def _comment_response(row, author_email: str | None) -> CommentResponse:
    return CommentResponse(
        id=row.id,
        content=row.content,
        created_at=row.created_at,
        user_id=row.user_id,
        author_email=author_email,
    )


def list_comments(db: Session, target: EngagementTarget, entity_id: int) -> list[CommentResponse]:
    get_parent_or_404(db, target, entity_id)
    comment = target.comment
    rows = (
        db.query(comment, User.email)
        .outerjoin(User, comment.user_id == User.id)
        .filter(target.fk(comment) == entity_id)
        .order_by(comment.created_at.desc(), comment.id.desc())
        .all()
    )
    return [_comment_response(c, email) for c, email in rows]


def create_comment(
    db: Session,
    target: EngagementTarget,
    entity_id: int,
    content: str | None,
    identity: Identity,
) -> CommentResponse:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Comment content is required")
    get_parent_or_404(db, target, entity_id)
    row = target.comment(content=text, **{target.key: entity_id}, **identity_columns(identity))
    db.add(row)
    db.commit()
    db.refresh(row)
    author_email = None
    if row.user_id is not None:
        author_email = db.query(User.email).filter(User.id == row.user_id).scalar()
    return _comment_response(row, author_email)


def delete_comment(db: Session, target: EngagementTarget, entity_id: int, comment_id: int, user: User) -> None:
    """Author (by user id) or admin only. Anonymous comments are therefore admin-only."""
    comment = target.comment
    row = (
        db.query(comment)
        .filter(comment.id == comment_id, target.fk(comment) == entity_id)
        .first()
    )
    if row is None:
        raise NotFound("Comment not found")
    if not can_manage(user, row.user_id):
        raise Forbidden("Not authorized to delete this comment")
    db.delete(row)
    db.commit()


def delete_for_entity(db: Session, target: EngagementTarget, entity_id: int) -> None:
    """Remove every comment and like of one entity. Caller commits."""
    for model in (target.comment, target.like):
        db.query(model).filter(target.fk(model) == entity_id).delete(synchronize_session=False)


# ---------- Moderation (admin) ----------


def moderation_list(db: Session, target: EngagementTarget) -> list[dict]:
    """Every comment on every entity of this kind, newest first, with the parent's title."""
    comment, parent = target.comment, target.parent
    rows = (
        db.query(comment, parent.title, User.email)
        .join(parent, target.fk(comment) == parent.id)
        .outerjoin(User, comment.user_id == User.id)
        .order_by(comment.created_at.desc(), comment.id.desc())
        .all()
    )
    return [
        {
            **_comment_response(c, email).model_dump(),
            target.key: target.fk(c),
            f"{target.name}_title": title,
            "session_id": c.session_id,
        }
        for c, title, email in rows
    ]


def moderation_delete(db: Session, target: EngagementTarget, comment_id: int, admin: User) -> None:
    row = db.get(target.comment, comment_id)
    if row is None:
        raise NotFound("Comment not found")
    db.delete(row)
    db.commit()
    logger.info("Admin %s removed %s comment %s", admin.id, target.name, comment_id)
