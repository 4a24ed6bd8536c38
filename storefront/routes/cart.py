"""Session and cart API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request

from ..core.session import ShopperSession
from ..database.products import product_db
from ..models.cart import AddToCartRequest, UpdateCartItemRequest, CartResponse, CartItem
from ..services.pricing import PricingEngine
from .deps import get_session_manager, get_shopper

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cart"])


def cart_response(
    request: Request,
    session: ShopperSession,
    items: Optional[list[CartItem]] = None,
    message: Optional[str] = None,
) -> CartResponse:
    pricing: PricingEngine = request.app.state.pricing
    items = session.cart.load() if items is None else items
    return CartResponse(
        session_id=session.session_id,
        items=items,
        item_count=sum(item.quantity for item in items),
        totals=pricing.compute_totals(items),
        message=message,
    )


@router.post("/api/sessions", response_model=CartResponse)
async def create_session(request: Request):
    """Create a shopper session with an empty cart"""
    manager = get_session_manager(request)
    removed = manager.cleanup_old_sessions()
    if removed:
        logger.info(f"Removed {removed} expired sessions")

    session = manager.create_session()
    return cart_response(request, session, message="Session created")


@router.delete("/api/sessions/{session_id}")
async def end_session(session_id: str, request: Request):
    """Discard a shopper session"""
    if not get_session_manager(request).delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True, "message": "Session ended"}


@router.get("/api/cart/{session_id}", response_model=CartResponse)
async def get_cart(request: Request, session: ShopperSession = Depends(get_shopper)):
    """Get the session's cart"""
    return cart_response(request, session)


@router.post("/api/cart/{session_id}/items", response_model=CartResponse)
async def add_to_cart(
    body: AddToCartRequest,
    request: Request,
    session: ShopperSession = Depends(get_shopper),
):
    """Add an item to the cart"""
    product = product_db.get_product(body.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    items = session.cart.add_item(product, body.quantity)
    return cart_response(request, session, items, message=f"{product.name} added to cart!")


@router.put("/api/cart/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: int,
    body: UpdateCartItemRequest,
    request: Request,
    session: ShopperSession = Depends(get_shopper),
):
    """Update item quantity; 0 removes the item"""
    items = session.cart.update_quantity(product_id, body.quantity)
    if items is None:
        raise HTTPException(status_code=404, detail="Item not in cart")
    return cart_response(request, session, items, message="Cart updated")


@router.delete("/api/cart/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: int,
    request: Request,
    session: ShopperSession = Depends(get_shopper),
):
    """Remove an item from the cart"""
    items = session.cart.remove_item(product_id)
    return cart_response(request, session, items, message="Item removed")


@router.delete("/api/cart/{session_id}", response_model=CartResponse)
async def clear_cart(request: Request, session: ShopperSession = Depends(get_shopper)):
    """Clear all items from cart"""
    session.cart.clear()
    return cart_response(request, session, [], message="Cart cleared")
