from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth.security import get_auth_context
from ..db import get_db
from ..schemas.reports import (
    DailyReportOut,
    MessageResponse,
    ReportCreatedResponse,
    ReportPayload,
)
from ..services.permissions import AuthContext
from ..services.report_repository import DailyReportRepository


router = APIRouter(prefix="/api/reports", tags=["reports"])


def get_report_repository(db: Session = Depends(get_db)) -> DailyReportRepository:
    return DailyReportRepository(db)


@router.get("", response_model=List[DailyReportOut])
def list_reports(
    report_date: Optional[date] = Query(default=None, alias="date"),
    repo: DailyReportRepository = Depends(get_report_repository),
    _: AuthContext = Depends(get_auth_context),
):
    """
    List report aggregates.

    Args:
        date: Optional YYYY-MM-DD; only reports with exactly this report_date
    """
    return repo.list_reports(report_date=report_date)


@router.get("/{report_id}", response_model=DailyReportOut)
def get_report(
    report_id: int,
    repo: DailyReportRepository = Depends(get_report_repository),
    _: AuthContext = Depends(get_auth_context),
):
    return repo.get_report(report_id)


@router.post("", response_model=ReportCreatedResponse)
def create_report(
    payload: ReportPayload,
    repo: DailyReportRepository = Depends(get_report_repository),
    ctx: AuthContext = Depends(get_auth_context),
):
    report_id = repo.create_report(payload, ctx)
    return ReportCreatedResponse(id=report_id)


@router.put("/{report_id}", response_model=MessageResponse)
def update_report(
    report_id: int,
    payload: ReportPayload,
    repo: DailyReportRepository = Depends(get_report_repository),
    ctx: AuthContext = Depends(get_auth_context),
):
    repo.update_report(report_id, payload, ctx)
    return MessageResponse(message="Report updated successfully")


@router.delete("/{report_id}")
def delete_report(
    report_id: int,
    repo: DailyReportRepository = Depends(get_report_repository),
    ctx: AuthContext = Depends(get_auth_context),
):
    repo.delete_report(report_id, ctx)
    return {"status": "ok"}
