from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from app.core.settings import SessionSettings, get_session_settings
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, UserOut, user_to_schema
from app.security.session import get_current_user as resolve_current_user
from app.services.auth_service import AuthService, get_auth_service
from app.services.session_service import SessionService, get_session_service

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_user(user: User = Depends(resolve_current_user)) -> User:
    return user


class SignInResponse(BaseModel):
    user: UserOut
    access_token: str = Field(alias="accessToken")
    token_type: str = Field(default="bearer", alias="tokenType")
    expires_in: int = Field(alias="expiresIn")

    model_config = ConfigDict(populate_by_name=True)


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=UserOut,
)
def signup(payload: UserCreate, service: AuthService = Depends(get_auth_service)) -> UserOut:
    """Register a new user account."""
    return service.register_user(payload)


@router.post(
    "/signin",
    status_code=status.HTTP_200_OK,
    response_model=SignInResponse,
)
def signin(
    payload: UserLogin,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    session_service: SessionService = Depends(get_session_service),
    settings: SessionSettings = Depends(get_session_settings),
) -> SignInResponse:
    """Authenticate, open a session cookie and return a bearer token."""
    result = service.authenticate(email=payload.email, password=payload.password)
    session = session_service.create_session(
        user=result.user,
        user_agent=request.headers.get("user-agent"),
        ip_addr=request.client.host if request.client else None,
    )
    response.set_cookie(
        key=settings.cookie_name,
        value=session.id,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        max_age=settings.cookie_max_age_seconds,
        domain=settings.cookie_domain,
        path=settings.cookie_path,
    )
    return SignInResponse(
        user=user_to_schema(result.user),
        access_token=result.token.access_token,
        token_type=result.token.token_type,
        expires_in=result.token.expires_in,
    )


@router.get("/me", response_model=UserOut)
def read_current_user(current_user: User = Depends(get_current_user)) -> UserOut:
    """Return profile information for the authenticated user."""
    return user_to_schema(current_user)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def signout(
    request: Request,
    session_service: SessionService = Depends(get_session_service),
    settings: SessionSettings = Depends(get_session_settings),
    current_user: User = Depends(get_current_user),
) -> Response:
    """Revoke the active session and clear the session cookie."""
    session_id = request.cookies.get(settings.cookie_name)
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "no_session_cookie", "message": "Session cookie is missing."},
        )

    session_service.revoke_session(session_id)
    _ = current_user  # dependency ensures an authenticated caller
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=settings.cookie_name,
        domain=settings.cookie_domain,
        path=settings.cookie_path,
    )
    return response
