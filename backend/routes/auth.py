# backend/routes/auth.py
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User
from schemas import user as schemas
from schemas.common import ApiResponse, ok
from services import users as user_service
from utils.audit import write_log
from utils.email import send_verification_email, send_password_reset_email
from utils.errors import ApiError
from utils.tokenJWT import get_current_user, ACCESS_COOKIE, REFRESH_COOKIE

router = APIRouter(prefix="/users", tags=["Auth"])

REMEMBER_ME_SECONDS = 7 * 24 * 60 * 60


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str, max_age: Optional[int] = None):
    for name, value in ((ACCESS_COOKIE, access_token), (REFRESH_COOKIE, refresh_token)):
        response.set_cookie(
            name, value, max_age=max_age, httponly=True, secure=settings.COOKIE_SECURE, samesite="lax",
        )


# Register a new customer account
@router.post("/register", response_model=ApiResponse[schemas.UserResponse], status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    user, token = user_service.register_user(db, payload.name, payload.email, payload.password)
    # Delivery failures are logged by the email helper
    background_tasks.add_task(send_verification_email, user.email, token)

    write_log(db, user_id=user.id, action="REGISTER", resource="auth", request=request, meta={"email": user.email})
    return ok(user, "User registered successfully. Please check your email to verify your account.", 201)


# Authenticate user and issue JWT tokens
@router.post("/login", response_model=ApiResponse[schemas.Token])
def login(payload: schemas.UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    try:
        user, access_token, refresh_token = user_service.authenticate(db, payload.email, payload.password)
    except ApiError:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  request=request, meta={"email": payload.email})
        raise

    _set_auth_cookies(response, access_token, refresh_token, REMEMBER_ME_SECONDS if payload.remember_me else None)
    write_log(db, user_id=user.id, action="LOGIN", resource="auth", request=request, meta={"email": user.email})
    return ok(
        {"user": user, "access_token": access_token, "refresh_token": refresh_token},
        "User logged in successfully",
    )


@router.get("/verify-email", response_model=ApiResponse[dict])
def verify_email(token: str = Query(""), db: Session = Depends(get_db)):
    user_service.verify_email(db, token)
    return ok({}, "Email verified successfully")


@router.post("/logout", response_model=ApiResponse[dict])
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user_service.logout(db, current_user)
    response.delete_cookie(ACCESS_COOKIE)
    response.delete_cookie(REFRESH_COOKIE)
    write_log(db, user_id=current_user.id, action="LOGOUT", resource="auth", request=request)
    return ok({}, "User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[schemas.TokenPair])
def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[schemas.RefreshRequest] = None,
    db: Session = Depends(get_db),
):
    incoming = request.cookies.get(REFRESH_COOKIE) or (payload.refresh_token if payload else None)
    access_token, new_refresh = user_service.refresh_tokens(db, incoming)
    _set_auth_cookies(response, access_token, new_refresh)
    return ok({"access_token": access_token, "refresh_token": new_refresh}, "Access token refreshed")


@router.post("/forgot-password", response_model=ApiResponse[dict])
def forgot_password(
    payload: schemas.ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    token = user_service.start_password_reset(db, payload.email)
    if token:
        background_tasks.add_task(send_password_reset_email, payload.email, token)
    # Same answer whether or not the account exists
    return ok({}, "If an account with that email exists, a password reset link has been sent.")


@router.post("/reset-password", response_model=ApiResponse[dict])
def reset_password(
    payload: schemas.ResetPasswordRequest,
    request: Request,
    token: str = Query(""),
    db: Session = Depends(get_db),
):
    user = user_service.reset_password(db, token, payload.password)
    write_log(db, user_id=user.id, action="PASSWORD_RESET", resource="auth", request=request)
    return ok({}, "Password reset successfully")


# Retrieve current authenticated user details
@router.get("/profile", response_model=ApiResponse[schemas.UserResponse])
def profile(current_user: User = Depends(get_current_user)):
    return ok(current_user, "User profile fetched successfully")
