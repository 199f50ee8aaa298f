from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.errors import ConflictError
from app.crud.user import get_user_by_email, get_user_by_id
from app.db.session import get_session
from app.models.user import User, UserRole
from app.schemas.user import (
    UserCreate,
    UserOut,
    create_user_model,
    user_to_schema,
)
from app.security.hash import hash_password, verify_password
from app.security.jwt import (
    EncodedToken,
    InvalidTokenError,
    JWTSettings,
    TokenPayload,
    TokenType,
    create_access_token,
    decode_token,
    get_jwt_settings,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    token: EncodedToken


class AuthService:
    """Business logic for authentication and account registration."""

    def __init__(self, session: Session, settings: JWTSettings) -> None:
        self.session = session
        self.settings = settings

    def register_user(self, data: UserCreate) -> UserOut:
        existing_user = get_user_by_email(data.email, self.session)
        if existing_user:
            raise ConflictError("user_exists", "Email already registered.")

        password_hash = hash_password(data.password)
        user = create_user_model(data, password_hash=password_hash)
        user.role = UserRole.USER

        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)

        logger.info("Registered user %s", user.id)
        return user_to_schema(user)

    def authenticate(self, email: str, password: str) -> AuthResult:
        try:
            user = get_user_by_email(email, self.session)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"code": "invalid_email", "message": "Invalid email address."},
            ) from exc

        if not user or not verify_password(password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "invalid_credentials", "message": "Invalid email or password."},
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "account_deactivated", "message": "Account has been deactivated."},
            )

        token = create_access_token(subject=user.id, role=user.role.value, settings=self.settings)
        logger.info("User %s signed in", user.id)
        return AuthResult(user=user, token=token)

    def get_user_from_token(self, token: str) -> User:
        try:
            payload = decode_token(token, self.settings)
        except InvalidTokenError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "invalid_token", "message": "Unable to validate token."},
            ) from exc

        self._ensure_access_token(payload)
        user = get_user_by_id(payload.subject, self.session)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "user_not_found", "message": "User no longer exists."},
            )
        return user

    @staticmethod
    def _ensure_access_token(payload: TokenPayload) -> None:
        if payload.token_type != TokenType.ACCESS:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"code": "invalid_token_type", "message": "Access token required."},
            )


def get_auth_service(
    session: Session = Depends(get_session),
    settings: JWTSettings = Depends(get_jwt_settings),
) -> AuthService:
    return AuthService(session=session, settings=settings)
