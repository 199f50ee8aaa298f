from __future__ import annotations

import logging

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class DomainError(HTTPException):
    """Rejected domain operation rendered as ``{"code", "message"}``."""

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": code, "message": message},
        )
        self.code = code
        self.message = message
        logger.warning("%s rejected: %s (%s)", type(self).__name__, message, code)


class NotFoundError(DomainError):
    status_code_default = status.HTTP_404_NOT_FOUND


class ForbiddenError(DomainError):
    status_code_default = status.HTTP_403_FORBIDDEN


class InvalidOperationError(DomainError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class ConflictError(DomainError):
    status_code_default = status.HTTP_409_CONFLICT
