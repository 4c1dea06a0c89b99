from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from ..db import get_db, commit_or_raise
from ..models.models import ShiftHours
from ..auth.security import get_current_user, require_admin
from ..schemas.reference import ShiftHoursIn, ShiftHoursOut, CreatedResponse


router = APIRouter(prefix="/api/shift-hours", tags=["shift-hours"])


@router.get("", response_model=List[ShiftHoursOut])
def list_shift_hours(db: Session = Depends(get_db), _=Depends(get_current_user)):
    rows = db.query(ShiftHours).order_by(ShiftHours.start_time.asc(), ShiftHours.id.asc()).all()
    return [
        {"id": s.id, "name": s.name, "start_time": s.start_time, "end_time": s.end_time}
        for s in rows
    ]


@router.post("", response_model=CreatedResponse)
def create_shift_hours(body: ShiftHoursIn, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = ShiftHours(name=body.name, start_time=body.start_time, end_time=body.end_time)
    db.add(row)
    commit_or_raise(db, "shift_hours_create_failed", "Error creating shift hours")
    return CreatedResponse(id=row.id)


@router.put("/{shift_id}")
def update_shift_hours(shift_id: int, body: ShiftHoursIn, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = db.query(ShiftHours).filter(ShiftHours.id == shift_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Shift hours not found")
    row.name = body.name
    row.start_time = body.start_time
    row.end_time = body.end_time
    commit_or_raise(db, "shift_hours_update_failed", "Error updating shift hours", shift_id=shift_id)
    return {"status": "ok"}


@router.delete("/{shift_id}")
def delete_shift_hours(shift_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    row = db.query(ShiftHours).filter(ShiftHours.id == shift_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Shift hours not found")
    db.delete(row)
    commit_or_raise(db, "shift_hours_delete_failed", "Error deleting shift hours", shift_id=shift_id)
    return {"status": "ok"}
