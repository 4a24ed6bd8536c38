"""Checkout API routes"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel

from ..core.readiness import Backend
from ..core.session import ShopperSession
from ..errors import ValidationError, PromoError, CheckoutError, EmptyCartError, NoActiveCode
from ..models.checkout import CustomerInfoForm, PaymentForm, PromoCodeRequest, ReviewSnapshot
from ..models.order import Order, OrderTotals
from ..services.auth_client import AuthUser
from ..services.checkout_flow import CheckoutSession, TransitionResult
from ..services.order_submission import OrderSubmitter
from .deps import get_backend, get_current_user, get_shopper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


class AppliedPromoInfo(BaseModel):
    code: str
    description: str


class CheckoutResponse(BaseModel):
    """Current checkout state"""
    session_id: str
    step: str
    step_number: int
    totals: OrderTotals
    promo: Optional[AppliedPromoInfo] = None
    review: Optional[ReviewSnapshot] = None
    message: Optional[str] = None


class PlaceOrderResponse(BaseModel):
    """Response from placing an order"""
    success: bool
    order: Order
    saved: bool
    message: str


def require_checkout(session: ShopperSession) -> CheckoutSession:
    if session.checkout is None:
        raise HTTPException(status_code=409, detail="Checkout has not been started")
    return session.checkout


def checkout_response(session: ShopperSession, message: Optional[str] = None) -> CheckoutResponse:
    checkout = require_checkout(session)
    promo = None
    if checkout.promo:
        promo = AppliedPromoInfo(code=checkout.promo.code, description=checkout.promo.description)
    return CheckoutResponse(
        session_id=session.session_id,
        step=checkout.step.name.lower(),
        step_number=int(checkout.step),
        totals=checkout.totals(),
        promo=promo,
        review=checkout.review,
        message=message,
    )


def raise_for_result(result: TransitionResult) -> None:
    if result.ok:
        return
    error = result.error
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=400, detail={"field": error.field, "message": error.message})
    raise HTTPException(status_code=409, detail=error.message)


@router.post("/{session_id}/start", response_model=CheckoutResponse)
async def start_checkout(request: Request, session: ShopperSession = Depends(get_shopper)):
    """Start checkout for the current cart"""
    if not session.cart.load():
        raise HTTPException(status_code=400, detail=EmptyCartError().message)
    session.start_checkout(pricing=request.app.state.pricing)
    logger.info(f"Checkout started for session {session.session_id}")
    return checkout_response(session)


@router.get("/{session_id}", response_model=CheckoutResponse)
async def get_checkout(session: ShopperSession = Depends(get_shopper)):
    """Current step, totals and review summary"""
    return checkout_response(session)


@router.post("/{session_id}/customer-info", response_model=CheckoutResponse)
async def submit_customer_info(form: CustomerInfoForm, session: ShopperSession = Depends(get_shopper)):
    """Complete the customer info step"""
    raise_for_result(require_checkout(session).advance(form))
    return checkout_response(session)


@router.post("/{session_id}/payment", response_model=CheckoutResponse)
async def submit_payment(form: PaymentForm, session: ShopperSession = Depends(get_shopper)):
    """Complete the payment step"""
    raise_for_result(require_checkout(session).advance(form))
    return checkout_response(session)


@router.post("/{session_id}/back", response_model=CheckoutResponse)
async def previous_step(session: ShopperSession = Depends(get_shopper)):
    """Go back one step"""
    raise_for_result(require_checkout(session).retreat())
    return checkout_response(session)


@router.post("/{session_id}/promo", response_model=CheckoutResponse)
async def apply_promo(body: PromoCodeRequest, session: ShopperSession = Depends(get_shopper)):
    """Apply a promo code"""
    checkout = require_checkout(session)
    try:
        checkout.apply_promo(body.code)
    except PromoError as e:
        raise HTTPException(status_code=400, detail=e.message)

    promo = checkout.promo
    return checkout_response(
        session,
        message=f"Promo code {promo.code} applied! You saved {promo.percent_off}% on your order!",
    )


@router.delete("/{session_id}/promo", response_model=CheckoutResponse)
async def remove_promo(session: ShopperSession = Depends(get_shopper)):
    """Remove the active promo code"""
    checkout = require_checkout(session)
    removed = checkout.promo.code if checkout.promo else None
    try:
        checkout.remove_promo()
    except NoActiveCode as e:
        raise HTTPException(status_code=400, detail=e.message)
    return checkout_response(session, message=f"Promo code {removed} removed successfully")


@router.post("/{session_id}/place-order", response_model=PlaceOrderResponse)
async def place_order(
    request: Request,
    session: ShopperSession = Depends(get_shopper),
    backend: Backend = Depends(get_backend),
    user: Optional[AuthUser] = Depends(get_current_user),
):
    """Place the order from the review step"""
    checkout = require_checkout(session)
    config = request.app.state.settings
    if not config.guest_checkout and user is None:
        raise HTTPException(status_code=401, detail="Please sign in to place your order")

    submitter = OrderSubmitter(
        data_store=backend.data_store,
        local_store=session.store,
        order_number_prefix=config.order_number_prefix,
    )

    try:
        order = await checkout.place_order(submitter, user=user)
    except CheckoutError as e:
        raise HTTPException(status_code=409, detail=e.message)

    session.end_checkout()
    return PlaceOrderResponse(
        success=True,
        order=order,
        saved=order.persisted,
        message="Order placed successfully!",
    )
