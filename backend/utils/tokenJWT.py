# utils/tokenJWT.py
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User, UserStatus
from utils.errors import UnauthorizedError, ForbiddenError

SECRET_KEY = settings.SECRET_KEY
REFRESH_SECRET_KEY = settings.REFRESH_SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = settings.REFRESH_TOKEN_EXPIRE_DAYS

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# Bearer header is optional; the access token cookie is the fallback
bearer_scheme = HTTPBearer(auto_error=False)


def _encode(data: dict, secret: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=ALGORITHM)


# Generate a new JWT access token
def create_access_token(data: dict, expires_delta: timedelta = None):
    return _encode(data, SECRET_KEY, expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict, expires_delta: timedelta = None):
    return _encode(data, REFRESH_SECRET_KEY, expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str, refresh: bool = False) -> dict:
    try:
        return jwt.decode(token, REFRESH_SECRET_KEY if refresh else SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid access token")


def tokens_for(user: User) -> tuple[str, str]:
    claims = {"sub": str(user.id), "role": user.role}
    return create_access_token(claims), create_refresh_token({"sub": str(user.id)})


# Retrieve the currently authenticated user from the bearer header or the cookie
def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise UnauthorizedError("Access token is required")

    payload = decode_token(token)
    user_id = payload.get("sub")
    # Ensure the subject is present in the token payload
    if user_id is None or not str(user_id).isdigit():
        raise UnauthorizedError("Invalid access token")

    user = db.get(User, int(user_id))
    if user is None:
        raise UnauthorizedError("Invalid access token")
    if user.status == UserStatus.BLOCKED.value:
        raise ForbiddenError("Your account has been blocked")
    return user


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if allowed_roles and current_user.role not in allowed_roles:
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user
    return _checker


admin_required = role_required("admin")
