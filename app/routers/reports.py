from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.report import ReportCreate, ReportOut
from app.services.report_service import ReportService, get_report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ReportOut,
)
def create_report(
    payload: ReportCreate,
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
) -> ReportOut:
    """File a report against a user or a book listing."""
    report = service.create_report(payload=payload, reporter=current_user)
    return ReportOut.model_validate(report)
