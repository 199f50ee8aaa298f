from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.models.report import ReportStatus
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.admin import PlatformStats, UserActivation, UserPage
from app.schemas.report import ReportOut, ReportUpdate
from app.services.admin_service import AdminService, get_admin_service
from app.services.report_service import ReportService, get_report_service

router = APIRouter(prefix="/admin", tags=["admin"])


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "forbidden", "message": "Administrator privileges required."},
        )
    return current_user


@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UserPage:
    return service.list_users(page=page, limit=limit)


@router.put("/users/{user_id}/toggle", response_model=UserActivation)
def toggle_user_status(
    user_id: str,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> UserActivation:
    """Activate or deactivate a user; deactivation ends their sessions."""
    return service.toggle_user_status(user_id=user_id, actor=admin)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> Response:
    service.delete_user(user_id=user_id, actor=admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=PlatformStats)
def platform_stats(
    _: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> PlatformStats:
    return service.platform_stats()


@router.get("/reports", response_model=list[ReportOut])
def list_reports(
    status_filter: Optional[ReportStatus] = Query(default=None, alias="status"),
    admin: User = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
) -> list[ReportOut]:
    reports = service.list_reports(actor=admin, status_filter=status_filter)
    return [ReportOut.model_validate(report) for report in reports]


@router.put("/reports/{report_id}", response_model=ReportOut)
def update_report(
    report_id: str,
    payload: ReportUpdate,
    admin: User = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
) -> ReportOut:
    """Change a report's status or note; closing it records the resolving admin."""
    report = service.update_report(report_id=report_id, payload=payload, actor=admin)
    return ReportOut.model_validate(report)
