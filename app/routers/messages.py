from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.message import MessageCreate, MessageOut, UnreadCount
from app.services.message_service import MessageService, get_message_service

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageOut,
)
def send_message(
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> MessageOut:
    """Post a message on a trade the caller takes part in."""
    message = service.send(payload=payload, sender=current_user)
    return MessageOut.model_validate(message)


@router.get("/unread", response_model=UnreadCount)
def unread_count(
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> UnreadCount:
    return UnreadCount(unread_count=service.unread_count_for_user(current_user))


@router.get("/{trade_id}", response_model=list[MessageOut])
def list_messages(
    trade_id: str,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service),
) -> list[MessageOut]:
    """Return the trade's thread oldest first; the counterpart's messages become read."""
    messages = service.list_for_trade(trade_id=trade_id, actor=current_user)
    return [MessageOut.model_validate(message) for message in messages]
