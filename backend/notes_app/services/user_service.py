"""Credential store — persisted users, password hashing and lookups."""
import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notes_app.errors import DuplicateEmail, ValidationError
from notes_app.models.user import User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(raw_password: str) -> str:
    """Return a salted bcrypt hash of ``raw_password``."""
    encoded = raw_password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(user: User, raw_password: str) -> bool:
    """Re-derive the hash and compare. Users without a password never match."""
    if not user.password_hash:
        return False
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), user.password_hash.encode("utf-8"))
    except ValueError:
        return False


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def find_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id).first()


def find_by_oauth_id(db: Session, oauth_id: str) -> Optional[User]:
    return db.query(User).filter(User.oauth_id == oauth_id).first()


def create_user(db: Session, name: str, email: str, raw_password: str) -> User:
    """Insert an unverified user. Never overwrites an existing account."""
    email = normalize_email(email)
    if find_by_email(db, email):
        raise DuplicateEmail()

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(raw_password),
        is_email_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email.
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)
    logger.info("Created user %s", user.user_id)
    return user


def create_oauth_user(
    db: Session,
    name: str,
    email: str,
    oauth_id: str,
    avatar: Optional[str] = None,
) -> User:
    """Insert a password-less user whose email the identity provider has verified."""
    user = User(
        name=name.strip() or email,
        email=normalize_email(email),
        password_hash=None,
        is_email_verified=True,
        oauth_id=oauth_id,
        avatar=avatar,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created OAuth user %s", user.user_id)
    return user
