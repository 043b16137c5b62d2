import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from advocatedesk.api.deps import get_current_user
from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger
from advocatedesk.core.security import create_access_token, get_password_hash, verify_password
from advocatedesk.db import models, schemas
from advocatedesk.db.database import get_db
from advocatedesk.db.models import UserRole
from advocatedesk.services.notification_service import (
    NotificationDispatcher,
    get_notifier,
    password_reset_email,
)
from advocatedesk.utils.exceptions import (
    DuplicateKeyError,
    ForbiddenError,
    InvalidInputError,
    UnauthorizedError,
)

router = APIRouter()

RESET_TOKEN_EXPIRY_HOURS = 1


def _session_claims(user: models.User) -> dict:
    return {
        "sub": str(user.id),
        "roles": list(user.roles or []),
        "advocate_id": user.advocate_id,
    }


def _set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(body: schemas.SignupRequest, db: Session = Depends(get_db)):
    """Register a main advocate; the new account is its own tenant."""
    email = body.email.strip().lower()
    if db.query(models.User.id).filter(models.User.email == email).first():
        raise DuplicateKeyError("Email already registered")

    user = models.User(
        name=body.name.strip(),
        email=email,
        password_hash=get_password_hash(body.password),
        roles=[UserRole.advocate.value],
        phone=body.phone,
        company_name=body.company_name,
        is_main_advocate=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Advocate registered: {user.id}")
    return {"user": schemas.UserResponse.model_validate(user)}


@router.post("/login")
def login(form_data: schemas.UserLogin, response: Response, db: Session = Depends(get_db)):
    """Login endpoint. Issues the session token as an HTTP-only cookie and in the body."""
    email = form_data.email.strip().lower()
    user = db.query(models.User).filter(models.User.email == email).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise UnauthorizedError("Incorrect email or password")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")

    access_token = create_access_token(
        data=_session_claims(user),
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    user.last_login_at = datetime.utcnow()
    db.commit()

    _set_session_cookie(response, access_token)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": schemas.UserResponse.model_validate(user),
    }


@router.get("/me")
def get_current_user_info(current_user: models.User = Depends(get_current_user)):
    """Get current user profile"""
    return {"user": schemas.UserResponse.model_validate(current_user)}


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out successfully"}


@router.post("/forgot-password")
def forgot_password(
    body: schemas.ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """
    Request password reset. Always returns success to prevent email enumeration.
    """
    email = body.email.strip().lower()
    user = db.query(models.User).filter(models.User.email == email).first()

    if user:
        reset_token = secrets.token_hex(32)
        user.password_reset_token = reset_token
        user.password_reset_expires = datetime.utcnow() + timedelta(hours=RESET_TOKEN_EXPIRY_HOURS)
        db.commit()

        reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/auth/reset-password?token={reset_token}"
        message = password_reset_email(user.name, reset_url)
        background_tasks.add_task(notifier.send, user.email, message["subject"], message["html"])

    return {
        "success": True,
        "message": "If an account exists with this email, you will receive reset instructions.",
    }


@router.post("/reset-password")
def reset_password(body: schemas.ResetPasswordRequest, db: Session = Depends(get_db)):
    token = body.token.strip()
    user = (
        db.query(models.User)
        .filter(
            models.User.password_reset_token == token,
            models.User.password_reset_expires > datetime.utcnow(),
        )
        .first()
    )
    if not user:
        raise InvalidInputError("Invalid or expired reset link. Please request a new one.")

    user.password_hash = get_password_hash(body.password)
    user.password_reset_token = None
    user.password_reset_expires = None
    db.commit()

    return {"success": True, "message": "Your password has been reset. You can sign in now."}
