# backend/services/users.py
import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.users import User, UserRole, UserStatus
from utils.clock import utcnow
from utils.errors import ConflictError, UnauthorizedError, ForbiddenError, InvalidError
from utils.hashing import get_password_hash, verify_password, generate_token, hash_token
from utils.tokenJWT import tokens_for, decode_token

logger = logging.getLogger(__name__)

# Verification and reset links are short lived
ONE_TIME_TOKEN_TTL = timedelta(minutes=10)


def find_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def register_user(db: Session, name: str, email: str, password: str) -> Tuple[User, str]:
    """Create a customer account; returns the user and the raw verification token."""
    if find_by_email(db, email):
        raise ConflictError("User already exists with this email")

    token, digest = generate_token()
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        role=UserRole.CUSTOMER.value,
        email_verification_token=digest,
        email_verification_expires=utcnow() + ONE_TIME_TOKEN_TTL,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s registered", user.id)
    return user, token


def authenticate(db: Session, email: str, password: str) -> Tuple[User, str, str]:
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    if user.status == UserStatus.BLOCKED.value:
        raise ForbiddenError("Your account has been blocked")

    access_token, refresh_token = tokens_for(user)
    user.refresh_token = refresh_token
    db.commit()
    db.refresh(user)
    return user, access_token, refresh_token


def verify_email(db: Session, token: str) -> User:
    if not token:
        raise InvalidError("Verification token is required")
    user = (
        db.query(User)
        .filter(User.email_verification_token == hash_token(token), User.email_verification_expires > utcnow())
        .first()
    )
    if not user:
        raise InvalidError("Invalid or expired verification token")

    user.is_email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    db.commit()
    return user


def logout(db: Session, user: User) -> None:
    user.refresh_token = None
    db.commit()


def refresh_tokens(db: Session, refresh_token: Optional[str]) -> Tuple[str, str]:
    if not refresh_token:
        raise UnauthorizedError("Unauthorized request")

    payload = decode_token(refresh_token, refresh=True)
    user_id = payload.get("sub")
    user = db.get(User, int(user_id)) if user_id and str(user_id).isdigit() else None
    # Only the most recently issued refresh token is accepted
    if not user or user.refresh_token != refresh_token:
        raise UnauthorizedError("Invalid refresh token")

    access_token, new_refresh = tokens_for(user)
    user.refresh_token = new_refresh
    db.commit()
    return access_token, new_refresh


def start_password_reset(db: Session, email: str) -> Optional[str]:
    """Issue a reset token. Returns None for unknown emails so callers answer identically."""
    user = find_by_email(db, email)
    if not user:
        return None
    token, digest = generate_token()
    user.password_reset_token = digest
    user.password_reset_expires = utcnow() + ONE_TIME_TOKEN_TTL
    db.commit()
    return token


def reset_password(db: Session, token: str, password: str) -> User:
    if not token or not password:
        raise InvalidError("Token and password are required")
    user = (
        db.query(User)
        .filter(User.password_reset_token == hash_token(token), User.password_reset_expires > utcnow())
        .first()
    )
    if not user:
        raise InvalidError("Invalid or expired reset token")

    user.password_hash = get_password_hash(password)
    user.password_reset_token = None
    user.password_reset_expires = None
    user.refresh_token = None
    db.commit()
    return user
