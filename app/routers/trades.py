from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.models.trade import TradeStatus
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.trade import TradeCreate, TradeDirection, TradeOut, TradeStats, TradeUpdate
from app.services.trade_service import TradeService, get_trade_service

router = APIRouter(prefix="/trades", tags=["trades"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=TradeOut,
)
def propose_trade(
    payload: TradeCreate,
    current_user: User = Depends(get_current_user),
    service: TradeService = Depends(get_trade_service),
) -> TradeOut:
    """Offer one of the caller's books in exchange for another user's book."""
    trade = service.propose(payload=payload, actor=current_user)
    return TradeOut.model_validate(trade)


@router.get(
    "",
    response_model=list[TradeOut],
)
def list_trades(
    direction: TradeDirection = Query(default="both", alias="type"),
    status_filter: Optional[TradeStatus] = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    service: TradeService = Depends(get_trade_service),
) -> list[TradeOut]:
    """Return the caller's trades, most recently updated first."""
    trades = service.list_for_user(current_user, direction=direction, status_filter=status_filter)
    return [TradeOut.model_validate(trade) for trade in trades]


@router.get("/stats", response_model=TradeStats)
def trade_stats(
    current_user: User = Depends(get_current_user),
    service: TradeService = Depends(get_trade_service),
) -> TradeStats:
    return service.stats_for_user(current_user)


@router.get(
    "/{trade_id}",
    response_model=TradeOut,
)
def get_trade(
    trade_id: str,
    current_user: User = Depends(get_current_user),
    service: TradeService = Depends(get_trade_service),
) -> TradeOut:
    trade = service.get_trade(trade_id=trade_id, actor=current_user)
    return TradeOut.model_validate(trade)


@router.put(
    "/{trade_id}",
    response_model=TradeOut,
)
def update_trade(
    trade_id: str,
    payload: TradeUpdate,
    current_user: User = Depends(get_current_user),
    service: TradeService = Depends(get_trade_service),
) -> TradeOut:
    """Accept, reject or cancel a pending trade, or confirm an accepted one."""
    trade = service.apply_update(trade_id=trade_id, payload=payload, actor=current_user)
    return TradeOut.model_validate(trade)
