from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from ..db import get_db, commit_or_raise
from ..models.models import User
from ..auth.security import get_current_user, get_password_hash, require_admin
from ..schemas.reference import UserOut, UserCreate, UserUpdate, CreatedResponse


router = APIRouter(prefix="/api/users", tags=["users"])


def _user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "full_name": u.full_name,
        "role": u.role,
    }


def _username_taken(db: Session, username: str, exclude_id: int = None) -> bool:
    q = db.query(User).filter(User.username == username)
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), _=Depends(get_current_user)):
    rows = db.query(User).order_by(User.full_name.asc(), User.id.asc()).all()
    return [_user_to_dict(u) for u in rows]


@router.post("", response_model=CreatedResponse)
def create_user(body: UserCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    if _username_taken(db, body.username):
        raise HTTPException(status_code=409, detail="Username already exists")
    u = User(
        username=body.username,
        password_hash=get_password_hash(body.password),
        full_name=body.full_name,
        role=body.role,
    )
    db.add(u)
    commit_or_raise(db, "user_create_failed", "Error creating user", username=body.username)
    return CreatedResponse(id=u.id)


@router.put("/{user_id}")
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db), _=Depends(require_admin)):
    u = db.query(User).filter(User.id == user_id).first()
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    if _username_taken(db, body.username, exclude_id=user_id):
        raise HTTPException(status_code=409, detail="Username already exists")
    u.username = body.username
    u.full_name = body.full_name
    u.role = body.role
    if body.password:
        u.password_hash = get_password_hash(body.password)
    commit_or_raise(db, "user_update_failed", "Error updating user", user_id=user_id)
    return {"status": "ok"}


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    u = db.query(User).filter(User.id == user_id).first()
    if not u:
        raise HTTPException(status_code=404, detail="User not found")
    db.delete(u)
    # Fails while the user still created or manages a report
    commit_or_raise(db, "user_delete_failed", "Error deleting user", user_id=user_id)
    return {"status": "ok"}
