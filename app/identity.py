"""
Who is engaging with an entity: a logged-in user or an anonymous browser session.

Resolved once per request. get_identity is the only place that mints the
anonymous session token and writes the cookie for it.
"""
import secrets
from dataclasses import dataclass
from fastapi import Depends, Request, Response
from app.auth import get_optional_user
from app.config import get_settings
from app.models.user import User


@dataclass(frozen=True)
class Authenticated:
    user_id: int
    is_admin: bool = False


@dataclass(frozen=True)
class Anonymous:
    session_token: str


Identity = Authenticated | Anonymous


def new_session_token() -> str:
    return secrets.token_urlsafe(24)


def _session_cookie(request: Request) -> str | None:
    token = request.cookies.get(get_settings().session_cookie_name)
    return (token.strip() or None) if token else None


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_cookie_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def get_identity(
    request: Request,
    response: Response,
    user: User | None = Depends(get_optional_user),
) -> Identity:
    """Identity for state-changing engagement. Mints and persists a session cookie if needed."""
    if user is not None:
        return Authenticated(user_id=user.id, is_admin=bool(user.is_admin))
    token = _session_cookie(request)
    if token is None:
        token = new_session_token()
        set_session_cookie(response, token)
    return Anonymous(session_token=token)


def get_existing_identity(
    request: Request,
    user: User | None = Depends(get_optional_user),
) -> Identity | None:
    """Identity only if the request already carries one; never mints a cookie."""
    if user is not None:
        return Authenticated(user_id=user.id, is_admin=bool(user.is_admin))
    token = _session_cookie(request)
    if token is None:
        return None
    return Anonymous(session_token=token)


def identity_columns(identity: Identity) -> dict:
    """user_id / session_id values to store on a like or comment row."""
    if isinstance(identity, Authenticated):
        return {"user_id": identity.user_id, "session_id": None}
    return {"user_id": None, "session_id": identity.session_token}
