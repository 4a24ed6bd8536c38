"""Order history and confirmation routes"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends

from ..core.readiness import Backend
from ..core.session import ShopperSession
from ..errors import DataStoreError
from ..models.order import OrderConfirmation, OrderHistoryResponse
from ..services.auth_client import AuthUser
from ..services.order_history import OrderHistory
from ..services.order_submission import load_confirmation
from .deps import get_backend, get_current_user, get_shopper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("/{session_id}", response_model=OrderHistoryResponse)
async def list_orders(
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
    user: Optional[AuthUser] = Depends(get_current_user),
):
    """Orders for the signed-in user or guest, newest first"""
    history = OrderHistory(backend.data_store, session.store)
    try:
        orders = await history.load(user=user)
    except DataStoreError as e:
        logger.warning(f"Order history unavailable for session {session.session_id}: {e}")
        raise HTTPException(status_code=502, detail=e.message)

    return OrderHistoryResponse(
        orders=orders,
        from_local_cache=any(order.from_local_cache for order in orders),
    )


@router.get("/{session_id}/confirmation", response_model=OrderConfirmation)
async def last_confirmation(session: ShopperSession = Depends(get_shopper)):
    """Snapshot of the most recently placed order"""
    confirmation = load_confirmation(session.store)
    if confirmation is None:
        raise HTTPException(status_code=404, detail="No order found")
    return confirmation
