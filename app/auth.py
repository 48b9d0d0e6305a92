from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.config import get_settings
from app.database import get_db
from app.exceptions import Forbidden, Unauthorized
from app.models.user import User
from app.schemas.user import TokenPayload

security = HTTPBearer(auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)

def create_access_token(user_id: int, email: str) -> str:
    expire = datetime.utcnow() + timedelta(
        minutes=get_settings().access_token_expire_minutes
    )
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, get_settings().secret_key, algorithm=get_settings().algorithm)

def decode_token(token: str) -> TokenPayload | None:
    try:
        payload = jwt.decode(
            token,
            get_settings().secret_key,
            algorithms=[get_settings().algorithm],
        )
        return TokenPayload(
            sub=payload["sub"],
            email=payload["email"],
            exp=payload["exp"],
        )
    except (JWTError, KeyError):
        return None

def _user_from_payload(payload: TokenPayload, db: Session) -> User | None:
    try:
        user_id = int(payload.sub)
    except ValueError:
        return None
    return db.query(User).filter(User.id == user_id).first()

def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise Unauthorized("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise Unauthorized("Invalid or expired token")

    user = _user_from_payload(payload, db)
    if not user:
        raise Unauthorized("User not found")

    return user


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    """For public routes: the bearer's user, or None. A bad token counts as anonymous."""
    if not credentials:
        return None
    payload = decode_token(credentials.credentials)
    if not payload:
        return None
    return _user_from_payload(payload, db)


def get_current_user_admin(
    user: User = Depends(get_current_user),
) -> User:
    """User must be logged in and have is_admin set."""
    if not user.is_admin:
        raise Forbidden("Admins only")
    return user


def can_manage(user: User, owner_id: int | None) -> bool:
    """Owner or admin may modify a row."""
    return user.is_admin or (owner_id is not None and owner_id == user.id)
