"""
Checkout State Machine

Three linear steps: customer info -> payment -> review. Placing the order
is the terminal action and is only possible from review.

The transition function is pure: (state, event, today) in,
(new state, effects, error) out. CheckoutSession keeps one shopper's
state and the active promo code, and recomputes totals on every read.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import (
    StorefrontError,
    ValidationError,
    InvalidStepError,
    EmptyCartError,
)
from ..models.checkout import (
    CheckoutStep,
    CustomerInfo,
    CustomerInfoForm,
    PaymentDetails,
    PaymentForm,
    PaymentMethod,
    PAYMENT_METHOD_LABELS,
    ReviewSnapshot,
)
from ..models.order import Order, OrderTotals
from ..database.carts import CartStore
from .pricing import PricingEngine
from .promo import AppliedPromo, PromoRegistry, promo_registry
from .validation import validate_customer_info, validate_payment

logger = logging.getLogger(__name__)


class Effect(str, Enum):
    """Side effects requested from the rendering surface"""
    SHOW_STEP = "show_step"
    BUILD_REVIEW = "build_review"
    SHOW_ERROR = "show_error"


@dataclass(frozen=True)
class CheckoutState:
    step: CheckoutStep = CheckoutStep.CUSTOMER_INFO
    customer_info: Optional[CustomerInfo] = None
    payment: Optional[PaymentDetails] = None


@dataclass(frozen=True)
class SubmitCustomerInfo:
    form: CustomerInfoForm


@dataclass(frozen=True)
class SubmitPayment:
    form: PaymentForm


@dataclass(frozen=True)
class GoBack:
    pass


CheckoutEvent = Union[SubmitCustomerInfo, SubmitPayment, GoBack]


@dataclass(frozen=True)
class TransitionResult:
    state: CheckoutState
    effects: tuple[Effect, ...] = ()
    error: Optional[StorefrontError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _rejected(state: CheckoutState, error: StorefrontError) -> TransitionResult:
    return TransitionResult(state=state, effects=(Effect.SHOW_ERROR,), error=error)


def transition(state: CheckoutState, event: CheckoutEvent, today: date) -> TransitionResult:
    """Apply one checkout event"""
    if isinstance(event, GoBack):
        if state.step == CheckoutStep.CUSTOMER_INFO:
            return TransitionResult(state=state)
        previous = CheckoutStep(state.step - 1)
        return TransitionResult(state=replace(state, step=previous), effects=(Effect.SHOW_STEP,))

    if isinstance(event, SubmitCustomerInfo):
        if state.step != CheckoutStep.CUSTOMER_INFO:
            return _rejected(state, InvalidStepError())
        try:
            customer_info = validate_customer_info(event.form)
        except ValidationError as e:
            return _rejected(state, e)
        return TransitionResult(
            state=replace(state, step=CheckoutStep.PAYMENT, customer_info=customer_info),
            effects=(Effect.SHOW_STEP,),
        )

    if isinstance(event, SubmitPayment):
        if state.step != CheckoutStep.PAYMENT:
            return _rejected(state, InvalidStepError())
        try:
            payment = validate_payment(event.form, today)
        except ValidationError as e:
            return _rejected(state, e)
        return TransitionResult(
            state=replace(state, step=CheckoutStep.REVIEW, payment=payment),
            effects=(Effect.SHOW_STEP, Effect.BUILD_REVIEW),
        )

    raise TypeError(f"Unknown checkout event: {event!r}")


def mask_card_number(card_number: str) -> str:
    """Mask all but the last four digits"""
    if len(card_number) <= 4:
        return card_number
    return "*" * (len(card_number) - 4) + card_number[-4:]


def describe_payment(payment: PaymentDetails) -> str:
    label = PAYMENT_METHOD_LABELS[payment.method]
    if payment.method == PaymentMethod.CARD:
        return f"{label} ending in {payment.last_four}"
    if payment.method == PaymentMethod.UPI:
        return f"{label} - {payment.upi_id}"
    if payment.method == PaymentMethod.NETBANKING:
        return f"{label} - {payment.bank}"
    return label


def build_review(state: CheckoutState) -> Optional[ReviewSnapshot]:
    """Derive the review summary; None before both steps are complete"""
    if state.customer_info is None or state.payment is None:
        return None

    info = state.customer_info
    payment = state.payment
    return ReviewSnapshot(
        email=info.email,
        phone=info.phone,
        billing_summary=info.billing.one_line(),
        shipping_summary=info.shipping.one_line() if info.shipping != info.billing else None,
        payment_method=payment.method,
        payment_summary=describe_payment(payment),
        masked_card_number=mask_card_number(payment.card_number) if payment.card_number else None,
    )


class CheckoutSession:
    """One shopper's progress through checkout"""

    def __init__(
        self,
        cart_store: CartStore,
        pricing: Optional[PricingEngine] = None,
        promos: Optional[PromoRegistry] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.cart_store = cart_store
        self.pricing = pricing or PricingEngine()
        self.promos = promos or promo_registry
        self._today = today or date.today
        self.state = CheckoutState()
        self.promo: Optional[AppliedPromo] = None

    @property
    def step(self) -> CheckoutStep:
        return self.state.step

    @property
    def discount_fraction(self) -> Decimal:
        return self.promo.discount_fraction if self.promo else Decimal("0")

    @property
    def review(self) -> Optional[ReviewSnapshot]:
        if self.state.step != CheckoutStep.REVIEW:
            return None
        return build_review(self.state)

    def totals(self) -> OrderTotals:
        """Totals for the cart and promo as they are right now"""
        return self.pricing.compute_totals(self.cart_store.load(), self.discount_fraction)

    def dispatch(self, event: CheckoutEvent) -> TransitionResult:
        result = transition(self.state, event, self._today())
        if result.ok:
            if result.state.step != self.state.step:
                logger.info(f"Checkout step {self.state.step.name} -> {result.state.step.name}")
        else:
            logger.debug(f"Checkout transition rejected: {result.error.message}")
        self.state = result.state
        return result

    def advance(self, form: Union[CustomerInfoForm, PaymentForm]) -> TransitionResult:
        """Complete the current step with its form"""
        if isinstance(form, CustomerInfoForm):
            return self.dispatch(SubmitCustomerInfo(form))
        return self.dispatch(SubmitPayment(form))

    def retreat(self) -> TransitionResult:
        return self.dispatch(GoBack())

    def apply_promo(self, code: str) -> Decimal:
        """Apply a promo code; returns the discount fraction"""
        self.promo = self.promos.apply(self.promo, code)
        return self.promo.discount_fraction

    def remove_promo(self) -> None:
        self.promos.remove(self.promo)
        self.promo = None

    async def place_order(self, submitter, user=None) -> Order:
        """Submit the order; only allowed from the review step"""
        if self.state.step != CheckoutStep.REVIEW:
            raise InvalidStepError("Please complete all checkout steps before placing the order")

        cart = self.cart_store.load()
        if not cart:
            raise EmptyCartError()

        return await submitter.submit(
            cart=cart,
            customer_info=self.state.customer_info,
            payment=self.state.payment,
            totals=self.pricing.compute_totals(cart, self.discount_fraction),
            user=user,
        )
