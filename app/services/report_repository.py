"""
Daily report aggregate persistence.

A report is spread over six tables: daily_reports (root), the two join
tables report_shift_managers / report_event_titles, and the owned event rows
report_events_part3 / report_events_part4. Reads rebuild the whole graph,
writes persist it as one unit of work. Child collections are always replaced
wholesale (delete then insert), never diffed.
"""
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, PermissionDenied, PersistenceError
from ..models.models import (
    DailyReport,
    EventPart3,
    EventPart4,
    EventTitle,
    ShiftHours,
    User,
    report_event_titles,
    report_shift_managers,
)
from ..schemas.reports import EventPart3In, EventPart4In, ReportPayload
from .permissions import AuthContext, can_modify_report
from .time_values import display_time, to_timestamp


logger = structlog.get_logger(__name__)


def _user_to_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "username": u.username,
        "full_name": u.full_name,
        "role": u.role,
    }


def _shift_hours_to_dict(sh: Optional[ShiftHours]) -> Optional[Dict[str, Any]]:
    if sh is None:
        return None
    return {
        "id": sh.id,
        "name": sh.name,
        "start_time": sh.start_time,
        "end_time": sh.end_time,
    }


def _part4_to_dict(ev) -> Dict[str, Any]:
    return {
        "id": ev.id,
        "event_summary": ev.event_summary or "",
        "trigger_info": ev.trigger_info or "",
        "start_time": display_time(ev.start_time),
        "end_time": display_time(ev.end_time),
    }


def _part3_to_dict(ev: EventPart3) -> Dict[str, Any]:
    data = _part4_to_dict(ev)
    data["rca_number"] = ev.rca_number or ""
    return data


def _unique(ids: Iterable[int]) -> List[int]:
    # Manager/title collections are sets; keep first-seen order
    return list(dict.fromkeys(ids))


class DailyReportRepository:
    """Reads and writes the full DailyReport aggregate on one Session."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------ reads

    def list_reports(self, report_date: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        All reports, newest report_date first, then newest created_at.

        Args:
            report_date: Exact-match filter on the report date

        Returns:
            List of fully assembled report dicts
        """
        stmt = self._root_query()
        if report_date is not None:
            stmt = stmt.where(DailyReport.report_date == report_date)
        stmt = stmt.order_by(
            DailyReport.report_date.desc(),
            DailyReport.created_at.desc(),
            DailyReport.id.desc(),
        )
        try:
            rows = self.db.execute(stmt).all()
            return self._assemble(rows)
        except SQLAlchemyError as e:
            raise self._persistence_error("fetch", e, report_date=str(report_date) if report_date else None) from e

    def get_report(self, report_id: int) -> Dict[str, Any]:
        stmt = self._root_query().where(DailyReport.id == report_id)
        try:
            row = self.db.execute(stmt).first()
            if row is None:
                raise NotFound()
            return self._assemble([row])[0]
        except SQLAlchemyError as e:
            raise self._persistence_error("fetch", e, report_id=report_id) from e

    # ----------------------------------------------------------------- writes

    def create_report(self, payload: ReportPayload, ctx: AuthContext) -> int:
        """
        Persist a new report with all of its child rows in one transaction.

        The creator is taken from ``ctx``; nothing in the payload can set it.
        Returns the new report id.
        """
        part3_rows = self._part3_rows(payload.events_part3)
        part4_rows = self._part4_rows(payload.events_part4)
        try:
            report = DailyReport(
                report_date=payload.report_date,
                shift_hours_id=payload.shift_hours_id,
                health_power_sources=payload.health_power_sources,
                health_humidity_temp=payload.health_humidity_temp,
                health_fire_system=payload.health_fire_system,
                created_by=ctx.user_id,
            )
            self.db.add(report)
            self.db.flush()
            report_id = report.id
            self._insert_children(report_id, payload, part3_rows, part4_rows)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._persistence_error("create", e, created_by=ctx.user_id) from e
        except Exception:
            self.db.rollback()
            raise
        logger.info("report_created", report_id=report_id, created_by=ctx.user_id)
        return report_id

    def update_report(self, report_id: int, payload: ReportPayload, ctx: AuthContext) -> None:
        """
        Replace a report's scalar fields and every child collection.

        Raises NotFound when the report does not exist and PermissionDenied
        when the caller is neither its creator nor an admin; both checks run
        against stored data before anything is written.
        """
        self._authorize(report_id, ctx, action="update")
        part3_rows = self._part3_rows(payload.events_part3)
        part4_rows = self._part4_rows(payload.events_part4)
        try:
            # created_by and created_at are immutable
            self.db.execute(
                update(DailyReport)
                .where(DailyReport.id == report_id)
                .values(
                    report_date=payload.report_date,
                    shift_hours_id=payload.shift_hours_id,
                    health_power_sources=payload.health_power_sources,
                    health_humidity_temp=payload.health_humidity_temp,
                    health_fire_system=payload.health_fire_system,
                )
                .execution_options(synchronize_session=False)
            )
            self._delete_children(report_id)
            self._insert_children(report_id, payload, part3_rows, part4_rows)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._persistence_error("update", e, report_id=report_id) from e
        except Exception:
            self.db.rollback()
            raise
        logger.info("report_updated", report_id=report_id, updated_by=ctx.user_id)

    def delete_report(self, report_id: int, ctx: AuthContext) -> None:
        """Delete all child rows, then the root, in one transaction."""
        self._authorize(report_id, ctx, action="delete")
        try:
            self._delete_children(report_id)
            self.db.execute(
                delete(DailyReport)
                .where(DailyReport.id == report_id)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._persistence_error("delete", e, report_id=report_id) from e
        except Exception:
            self.db.rollback()
            raise
        logger.info("report_deleted", report_id=report_id, deleted_by=ctx.user_id)

    # ---------------------------------------------------------------- helpers

    def _root_query(self):
        return (
            select(DailyReport, User, ShiftHours)
            .join(User, DailyReport.created_by == User.id)
            .outerjoin(ShiftHours, DailyReport.shift_hours_id == ShiftHours.id)
        )

    def _assemble(self, rows) -> List[Dict[str, Any]]:
        report_ids = [report.id for report, _, _ in rows]
        if not report_ids:
            return []
        managers = self._load_managers(report_ids)
        titles = self._load_event_titles(report_ids)
        part3 = self._load_part3(report_ids)
        part4 = self._load_part4(report_ids)

        result = []
        for report, creator, shift in rows:
            result.append({
                "id": report.id,
                "report_date": report.report_date,
                "shift_hours": _shift_hours_to_dict(shift),
                "shift_managers": managers.get(report.id, []),
                "event_titles": titles.get(report.id, []),
                "health_power_sources": bool(report.health_power_sources),
                "health_humidity_temp": bool(report.health_humidity_temp),
                "health_fire_system": bool(report.health_fire_system),
                "events_part3": part3.get(report.id, []),
                "events_part4": part4.get(report.id, []),
                "created_by": _user_to_dict(creator),
                "created_at": report.created_at,
            })
        return result

    def _load_managers(self, report_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        stmt = (
            select(report_shift_managers.c.report_id, User)
            .join(User, User.id == report_shift_managers.c.user_id)
            .where(report_shift_managers.c.report_id.in_(report_ids))
            .order_by(User.full_name, User.id)
        )
        grouped = defaultdict(list)
        for report_id, user in self.db.execute(stmt).all():
            grouped[report_id].append(_user_to_dict(user))
        return grouped

    def _load_event_titles(self, report_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        stmt = (
            select(report_event_titles.c.report_id, EventTitle)
            .join(EventTitle, EventTitle.id == report_event_titles.c.event_title_id)
            .where(report_event_titles.c.report_id.in_(report_ids))
            .order_by(EventTitle.title, EventTitle.id)
        )
        grouped = defaultdict(list)
        for report_id, title in self.db.execute(stmt).all():
            grouped[report_id].append({"id": title.id, "title": title.title})
        return grouped

    def _load_part3(self, report_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        stmt = select(EventPart3).where(EventPart3.report_id.in_(report_ids)).order_by(EventPart3.id)
        grouped = defaultdict(list)
        for ev in self.db.execute(stmt).scalars().all():
            grouped[ev.report_id].append(_part3_to_dict(ev))
        return grouped

    def _load_part4(self, report_ids: List[int]) -> Dict[int, List[Dict[str, Any]]]:
        stmt = select(EventPart4).where(EventPart4.report_id.in_(report_ids)).order_by(EventPart4.id)
        grouped = defaultdict(list)
        for ev in self.db.execute(stmt).scalars().all():
            grouped[ev.report_id].append(_part4_to_dict(ev))
        return grouped

    def _authorize(self, report_id: int, ctx: AuthContext, action: str) -> None:
        try:
            created_by = self.db.execute(
                select(DailyReport.created_by).where(DailyReport.id == report_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._persistence_error(action, e, report_id=report_id) from e
        if created_by is None:
            raise NotFound()
        if not can_modify_report(ctx, created_by):
            logger.warning(
                "report_%s_denied" % action,
                report_id=report_id,
                user_id=ctx.user_id,
                created_by=created_by,
            )
            raise PermissionDenied()

    def _part4_rows(self, events: List[EventPart4In]) -> List[Dict[str, Any]]:
        return [
            {
                "event_summary": ev.event_summary or "",
                "trigger_info": ev.trigger_info or "",
                "start_time": to_timestamp(ev.start_time),
                "end_time": to_timestamp(ev.end_time),
            }
            for ev in events
        ]

    def _part3_rows(self, events: List[EventPart3In]) -> List[Dict[str, Any]]:
        rows = self._part4_rows(events)
        for row, ev in zip(rows, events):
            row["rca_number"] = ev.rca_number or ""
        return rows

    def _insert_children(
        self,
        report_id: int,
        payload: ReportPayload,
        part3_rows: List[Dict[str, Any]],
        part4_rows: List[Dict[str, Any]],
    ) -> None:
        manager_ids = _unique(payload.shift_manager_ids)
        if manager_ids:
            self.db.execute(
                insert(report_shift_managers),
                [{"report_id": report_id, "user_id": uid} for uid in manager_ids],
            )
        title_ids = _unique(payload.event_title_ids)
        if title_ids:
            self.db.execute(
                insert(report_event_titles),
                [{"report_id": report_id, "event_title_id": tid} for tid in title_ids],
            )
        # Inserted in list order so ascending ids preserve the submitted order
        if part3_rows:
            self.db.execute(insert(EventPart3), [dict(row, report_id=report_id) for row in part3_rows])
        if part4_rows:
            self.db.execute(insert(EventPart4), [dict(row, report_id=report_id) for row in part4_rows])

    def _delete_children(self, report_id: int) -> None:
        self.db.execute(delete(report_shift_managers).where(report_shift_managers.c.report_id == report_id))
        self.db.execute(delete(report_event_titles).where(report_event_titles.c.report_id == report_id))
        self.db.execute(
            delete(EventPart3).where(EventPart3.report_id == report_id).execution_options(synchronize_session=False)
        )
        self.db.execute(
            delete(EventPart4).where(EventPart4.report_id == report_id).execution_options(synchronize_session=False)
        )

    def _persistence_error(self, operation: str, exc: Exception, **context) -> PersistenceError:
        self.db.rollback()
        logger.error("report_persistence_failed", operation=operation, error=str(exc), **context)
        messages = {
            "fetch": "Error loading reports",
            "create": "Error creating report",
            "update": "Failed to update report",
            "delete": "Error deleting report",
        }
        return PersistenceError(messages.get(operation, PersistenceError.default_message))
