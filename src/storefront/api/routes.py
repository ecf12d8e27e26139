"""FastAPI routes for the Storefront: carts, checkouts and order history."""

from datetime import date

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyDiscountRequest,
    CartIdResponse,
    CartResponse,
    CheckoutIdResponse,
    CheckoutResponse,
    ClearHistoryResponse,
    ContactDetailsRequest,
    CreateCartRequest,
    DiscountResponse,
    GoBackResponse,
    OrderResponse,
    PaymentDetailsRequest,
    PlacementResponse,
    PriceSummarySchema,
    PruneResponse,
    ResetResponse,
    SetCartQuantityRequest,
    ShippingDetailsRequest,
    StartCheckoutRequest,
    StatusResponse,
    StepOutcomeResponse,
)
from storefront.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from storefront.cart.management import CreateCart, PruneCart, ResetSession
from storefront.catalogue import get_catalog
from storefront.checkout.checkout import Checkout
from storefront.checkout.steps import (
    GoBack,
    StartCheckout,
    SubmitContactDetails,
    SubmitPaymentDetails,
    SubmitShippingDetails,
)
from storefront.discount.coupons import ApplyDiscount
from storefront.discount.ledger import DiscountLedger
from storefront.order.history import ClearOrderHistory, RemoveOrder, get_order, list_orders
from storefront.payments.placement import place_order
from storefront.pricing.quotes import quote_cart, quote_checkout


def _step_response(outcome) -> StepOutcomeResponse:
    return StepOutcomeResponse(
        accepted=outcome.accepted,
        step=outcome.step,
        errors=outcome.errors,
        blocked=outcome.blocked,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, shipping_method: str | None = None) -> CartResponse:
    summary = quote_cart(cart_id, shipping_method)
    return CartResponse(cart_id=cart_id, summary=PriceSummarySchema.from_summary(summary))


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> StatusResponse:
    if get_catalog().resolve(body.product_id, body.variant_id) is None:
        raise HTTPException(status_code=404, detail="Unknown product or variant")

    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/items", response_model=StatusResponse)
async def set_cart_item_quantity(cart_id: str, body: SetCartQuantityRequest) -> StatusResponse:
    command = SetCartQuantity(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        new_quantity=body.new_quantity,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, product_id: str, variant_id: str, size: str | None = None) -> StatusResponse:
    command = RemoveFromCart(
        cart_id=cart_id,
        product_id=product_id,
        variant_id=variant_id,
        size=size,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/discount", response_model=DiscountResponse)
async def apply_discount(cart_id: str, body: ApplyDiscountRequest) -> DiscountResponse:
    command = ApplyDiscount(cart_id=cart_id, code=body.code)
    accepted = current_domain.process(command, asynchronous=False)
    discount = current_domain.repository_for(DiscountLedger).get(cart_id).discount
    return DiscountResponse(
        accepted=accepted,
        code=discount.code or None,
        percentage=discount.percentage,
    )


@cart_router.post("/{cart_id}/prune", response_model=PruneResponse)
async def prune_cart(cart_id: str) -> PruneResponse:
    removed = current_domain.process(PruneCart(cart_id=cart_id), asynchronous=False)
    return PruneResponse(removed=removed)


@cart_router.post("/{cart_id}/reset", response_model=ResetResponse)
async def reset_session(cart_id: str) -> ResetResponse:
    discarded = current_domain.process(ResetSession(cart_id=cart_id), asynchronous=False)
    return ResetResponse(discarded_checkouts=discarded)


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkouts", tags=["checkouts"])


@checkout_router.post("", status_code=201, response_model=CheckoutIdResponse)
async def start_checkout(body: StartCheckoutRequest) -> CheckoutIdResponse:
    checkout_id = current_domain.process(
        StartCheckout(cart_id=body.cart_id, profile=body.profile),
        asynchronous=False,
    )
    if checkout_id is None:
        raise HTTPException(status_code=409, detail="Cart is empty")
    return CheckoutIdResponse(checkout_id=checkout_id)


@checkout_router.get("/{checkout_id}", response_model=CheckoutResponse)
async def get_checkout(checkout_id: str) -> CheckoutResponse:
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    summary = None if checkout.is_completed else PriceSummarySchema.from_summary(quote_checkout(checkout_id))
    return CheckoutResponse(
        checkout_id=str(checkout.id),
        cart_id=str(checkout.cart_id),
        step=checkout.step,
        payment_status=checkout.payment_status,
        failure_reason=checkout.failure_reason,
        order_id=str(checkout.order_id) if checkout.order_id else None,
        summary=summary,
        prefill=checkout.prefill or {},
    )


@checkout_router.post("/{checkout_id}/contact", response_model=StepOutcomeResponse)
async def submit_contact(checkout_id: str, body: ContactDetailsRequest) -> StepOutcomeResponse:
    command = SubmitContactDetails(checkout_id=checkout_id, **body.model_dump())
    return _step_response(current_domain.process(command, asynchronous=False))


@checkout_router.post("/{checkout_id}/shipping", response_model=StepOutcomeResponse)
async def submit_shipping(checkout_id: str, body: ShippingDetailsRequest) -> StepOutcomeResponse:
    command = SubmitShippingDetails(checkout_id=checkout_id, **body.model_dump())
    return _step_response(current_domain.process(command, asynchronous=False))


@checkout_router.post("/{checkout_id}/payment", response_model=StepOutcomeResponse)
async def submit_payment(checkout_id: str, body: PaymentDetailsRequest) -> StepOutcomeResponse:
    command = SubmitPaymentDetails(checkout_id=checkout_id, **body.model_dump())
    return _step_response(current_domain.process(command, asynchronous=False))


@checkout_router.post("/{checkout_id}/back", response_model=GoBackResponse)
async def go_back(checkout_id: str) -> GoBackResponse:
    moved = current_domain.process(GoBack(checkout_id=checkout_id), asynchronous=False)
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    return GoBackResponse(moved=moved, step=checkout.step)


@checkout_router.post("/{checkout_id}/place", response_model=PlacementResponse)
async def place(checkout_id: str) -> PlacementResponse:
    result = await place_order(checkout_id)
    return PlacementResponse(status=result.status, order_id=result.order_id, reason=result.reason)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def get_orders(
    email: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in list_orders(email=email, start=start, end=end)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_single_order(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id))


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def remove_order(order_id: str) -> StatusResponse:
    removed = current_domain.process(RemoveOrder(order_id=order_id), asynchronous=False)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return StatusResponse()


@order_router.delete("", response_model=ClearHistoryResponse)
async def clear_orders() -> ClearHistoryResponse:
    removed = current_domain.process(ClearOrderHistory(), asynchronous=False)
    return ClearHistoryResponse(removed=removed)
