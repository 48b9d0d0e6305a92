"""
Create (or promote) an admin account.

    python -m app.create_admin --email admin@example.com --password secret
"""
import argparse
import logging
import sys
from sqlalchemy.orm import Session
from app.auth import hash_password
from app.database import SessionLocal
from app.models.user import User

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str, password: str, reset_password: bool = False) -> tuple[User, bool]:
    """Returns (user, created). An existing user is promoted; its password is kept unless reset_password."""
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        user = User(email=email, password_hash=hash_password(password), is_admin=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user, True
    user.is_admin = True
    if reset_password:
        user.password_hash = hash_password(password)
    db.commit()
    return user, False


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin user.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--reset-password", action="store_true", help="overwrite the password of an existing user")
    args = parser.parse_args(argv)

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    db = SessionLocal()
    try:
        user, created = ensure_admin(db, args.email, args.password, args.reset_password)
        logger.info("%s admin user %s (id=%s)", "Created" if created else "Promoted", user.email, user.id)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
