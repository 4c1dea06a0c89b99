from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import User
from ..schemas.auth import LoginRequest, TokenResponse
from ..schemas.reference import UserOut
from .security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
)
from ..logging import structlog


router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, username=user.username, full_name=user.full_name, role=user.role)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == req.username).first()
    if not user or not verify_password(req.password, user.password_hash):
        structlog.get_logger().info("login_failed", username=req.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    access = create_access_token(user.id, user.role)
    refresh = create_refresh_token(user.id)
    structlog.get_logger().info("login_succeeded", user_id=user.id)
    return TokenResponse(access_token=access, refresh_token=refresh, user=_user_out(user))


@router.post("/refresh", response_model=TokenResponse)
def refresh(token: str, db: Session = Depends(get_db)):
    payload = decode_token(token)
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=400, detail="Invalid refresh token")
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid refresh token")
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    access = create_access_token(user.id, user.role)
    new_refresh = create_refresh_token(user.id)
    return TokenResponse(access_token=access, refresh_token=new_refresh, user=_user_out(user))


@router.post("/logout")
def logout():
    # Tokens are stateless; the client drops them
    return {"status": "ok"}


@router.get("/check-auth", response_model=UserOut)
def check_auth(user: User = Depends(get_current_user)):
    return _user_out(user)
