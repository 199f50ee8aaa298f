from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from app.models.user import User
from app.security.session import require_session

router = APIRouter(prefix="/activity", tags=["activity"])


@router.post("/heartbeat", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def heartbeat(_: User = Depends(require_session)) -> Response:
    """Touch the session cookie so a browsing user is not signed out while idle on a page."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
