from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from backoffice.core.database import get_db
from backoffice.core.config import settings
from backoffice.core.auth import (
    create_user_token,
    get_current_user,
    hash_password,
    verify_password,
)
from backoffice.core.logging_config import log_audit_event, get_client_ip
from backoffice.models.user import AdminUser
from backoffice.schemas.auth import (
    LoginRequest,
    LoginResponse,
    CurrentUserResponse,
    ChangePasswordRequest,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(
    request: Request, credentials: LoginRequest, db: Session = Depends(get_db)
):
    """Exchange email and password for a bearer token."""
    if not credentials.email or not credentials.password:
        raise HTTPException(
            status_code=400, detail="Email and password are required"
        )

    client_ip = get_client_ip(request)
    user = db.query(AdminUser).filter(AdminUser.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        log_audit_event(
            event_type="auth.login.failure",
            message="Login failed: invalid credentials",
            level=logging.WARNING,
            username=credentials.email,
            ip_address=client_ip,
            request_method="POST",
            request_path="/api/auth/login",
            event_category="authentication",
        )
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_user_token(user)

    log_audit_event(
        event_type="auth.login.success",
        message="Admin logged in",
        user_id=str(user.id),
        username=user.email,
        ip_address=client_ip,
        request_method="POST",
        request_path="/api/auth/login",
        event_category="authentication",
    )

    return {"message": "Login successful", "token": token, "user": user}


@router.get("/me", response_model=CurrentUserResponse)
def me(current_user: AdminUser = Depends(get_current_user)):
    return {"user": current_user}


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(get_current_user),
):
    """Change the current admin's password after re-checking the old one."""
    if not payload.current_password or not payload.new_password:
        raise HTTPException(
            status_code=400,
            detail="Current password and new password are required",
        )

    if len(payload.new_password) < settings.MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"New password must be at least {settings.MIN_PASSWORD_LENGTH} characters long",
        )

    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    current_user.password_hash = hash_password(payload.new_password)
    db.commit()

    log_audit_event(
        event_type="auth.password.changed",
        message="Admin changed password",
        user_id=str(current_user.id),
        username=current_user.email,
        ip_address=get_client_ip(request),
        event_category="authentication",
    )

    return {"message": "Password changed successfully"}
