from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from ..db import get_db, commit_or_raise
from ..models.models import EventTitle
from ..auth.security import get_current_user, require_admin
from ..schemas.reference import EventTitleIn, EventTitleOut, CreatedResponse


router = APIRouter(prefix="/api/event-titles", tags=["event-titles"])


@router.get("", response_model=List[EventTitleOut])
def list_event_titles(db: Session = Depends(get_db), _=Depends(get_current_user)):
    rows = db.query(EventTitle).order_by(EventTitle.title.asc(), EventTitle.id.asc()).all()
    return [{"id": t.id, "title": t.title} for t in rows]


@router.post("", response_model=CreatedResponse)
def create_event_title(body: EventTitleIn, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = EventTitle(title=body.title)
    db.add(row)
    commit_or_raise(db, "event_title_create_failed", "Error creating event title")
    return CreatedResponse(id=row.id)


@router.put("/{title_id}")
def update_event_title(title_id: int, body: EventTitleIn, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = db.query(EventTitle).filter(EventTitle.id == title_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Event title not found")
    row.title = body.title
    commit_or_raise(db, "event_title_update_failed", "Error updating event title", title_id=title_id)
    return {"status": "ok"}


@router.delete("/{title_id}")
def delete_event_title(title_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = db.query(EventTitle).filter(EventTitle.id == title_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Event title not found")
    db.delete(row)
    commit_or_raise(db, "event_title_delete_failed", "Error deleting event title", title_id=title_id)
    return {"status": "ok"}
