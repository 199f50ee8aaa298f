from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ForbiddenError, InvalidOperationError, NotFoundError
from app.db.session import get_session
from app.models.book import Book
from app.models.report import CLOSED_REPORT_STATUSES, Report, ReportStatus
from app.models.user import User
from app.schemas.report import ReportCreate, ReportUpdate

logger = logging.getLogger(__name__)


class ReportService:
    """Abuse reports: filed by any user, triaged by administrators."""

    def __init__(self, db: Session):
        self.db = db

    def _require_admin(self, actor: User) -> None:
        if not actor.is_admin:
            raise ForbiddenError("forbidden", "Administrator privileges required.")

    def _report_query(self):
        return select(Report).options(
            joinedload(Report.reporter),
            joinedload(Report.reported_user),
            joinedload(Report.reported_book),
            joinedload(Report.resolved_by),
        )

    def _get_report(self, report_id: str) -> Report:
        report = self.db.execute(self._report_query().where(Report.id == report_id)).scalars().first()
        if not report:
            raise NotFoundError("report_not_found", "Report not found.")
        return report

    def create_report(self, payload: ReportCreate, reporter: User) -> Report:
        if not payload.reported_user and not payload.reported_book:
            raise InvalidOperationError("report_target_missing", "Must report either a user or a book.")
        if payload.reported_user and not self.db.get(User, payload.reported_user):
            raise NotFoundError("user_not_found", "Reported user not found.")
        if payload.reported_book and not self.db.get(Book, payload.reported_book):
            raise NotFoundError("book_not_found", "Reported book not found.")

        report = Report(
            reporter_id=reporter.id,
            reported_user_id=payload.reported_user,
            reported_book_id=payload.reported_book,
            reason=payload.reason,
            description=payload.description,
        )
        self.db.add(report)
        self.db.commit()
        logger.info("Report %s filed by %s (%s)", report.id, reporter.id, payload.reason.value)
        return self._get_report(report.id)

    def list_reports(self, actor: User, status_filter: Optional[ReportStatus] = None) -> list[Report]:
        self._require_admin(actor)
        stmt = self._report_query()
        if status_filter:
            stmt = stmt.where(Report.status == status_filter)
        stmt = stmt.order_by(Report.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def update_report(self, report_id: str, payload: ReportUpdate, actor: User) -> Report:
        self._require_admin(actor)
        report = self._get_report(report_id)

        if payload.status is not None:
            report.status = payload.status
            if payload.status in CLOSED_REPORT_STATUSES:
                report.resolved_by_id = actor.id
                report.resolved_at = datetime.now(timezone.utc)
        if payload.admin_note is not None:
            report.admin_note = payload.admin_note

        self.db.commit()
        logger.info("Report %s updated by admin %s: %s", report.id, actor.id, report.status.value)
        self.db.expire(report, ["resolved_by"])
        return self._get_report(report.id)


def get_report_service(db: Session = Depends(get_session)) -> ReportService:
    return ReportService(db)
