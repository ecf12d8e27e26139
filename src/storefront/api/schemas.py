"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands. Money amounts are returned unrounded; clients format them.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PricedLineSchema(BaseModel):
    product_id: str
    variant_id: str
    size: str | None = None
    quantity: int
    product_name: str
    variant_color: str
    image_url: str | None = None
    unit_price: float
    line_total: float


class PriceSummarySchema(BaseModel):
    lines: list[PricedLineSchema]
    item_count: int
    subtotal: float
    discount_code: str | None = None
    discount_percentage: float = 0.0
    discount_amount: float
    shipping_cost: float
    total: float

    @classmethod
    def from_summary(cls, summary) -> "PriceSummarySchema":
        return cls(
            lines=[
                PricedLineSchema(
                    product_id=line.cart_line.product_id,
                    variant_id=line.cart_line.variant_id,
                    size=line.cart_line.size,
                    quantity=line.cart_line.quantity,
                    product_name=line.product_name,
                    variant_color=line.variant_color,
                    image_url=line.image_url,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in summary.lines
            ],
            item_count=summary.item_count,
            subtotal=summary.subtotal,
            discount_code=summary.discount.code or None,
            discount_percentage=summary.discount.percentage,
            discount_amount=summary.discount_amount,
            shipping_cost=summary.shipping_cost,
            total=summary.total,
        )


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "session_id": "browser-session-001",
                }
            ]
        }
    }


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None


class SetCartQuantityRequest(BaseModel):
    product_id: str
    variant_id: str
    new_quantity: int
    size: str | None = None


class ApplyDiscountRequest(BaseModel):
    code: str


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class StartCheckoutRequest(BaseModel):
    cart_id: str
    profile: dict[str, str] | None = None


class ContactDetailsRequest(BaseModel):
    name: str | None = None
    surname: str | None = None
    email: str | None = None
    phone: str | None = None


class ShippingDetailsRequest(BaseModel):
    address: str | None = None
    house_number: str | None = None
    flat_number: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    shipping_method: str | None = None


class PaymentDetailsRequest(BaseModel):
    payment_method: str | None = None
    card_number: str | None = None
    expiry_date: str | None = None
    cvv: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "payment_method": "card",
                    "card_number": "4242 4242 4242 4242",
                    "expiry_date": "12/30",
                    "cvv": "123",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartIdResponse(BaseModel):
    cart_id: str


class CartResponse(BaseModel):
    cart_id: str
    summary: PriceSummarySchema


class DiscountResponse(BaseModel):
    accepted: bool
    code: str | None = None
    percentage: float = 0.0


class PruneResponse(BaseModel):
    removed: int


class ResetResponse(BaseModel):
    discarded_checkouts: int


class CheckoutIdResponse(BaseModel):
    checkout_id: str


class CheckoutResponse(BaseModel):
    checkout_id: str
    cart_id: str
    step: str
    payment_status: str
    failure_reason: str | None = None
    order_id: str | None = None
    summary: PriceSummarySchema | None = None
    prefill: dict[str, str] = Field(default_factory=dict)


class StepOutcomeResponse(BaseModel):
    accepted: bool
    step: str
    errors: dict[str, str] = Field(default_factory=dict)
    blocked: bool = False


class GoBackResponse(BaseModel):
    moved: bool
    step: str


class PlacementResponse(BaseModel):
    status: str
    order_id: str | None = None
    reason: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    variant_id: str
    size: str | None = None
    quantity: int
    product_name: str
    variant_color: str | None = None
    unit_price: float
    line_total: float


class OrderResponse(BaseModel):
    order_id: str
    placed_at: datetime
    status: str
    items: list[OrderItemResponse]
    subtotal: float
    discount_code: str | None = None
    discount_amount: float
    shipping_cost: float
    total: float
    details: dict
    payment_reference: str | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            placed_at=order.placed_at,
            status=order.status,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    variant_id=str(item.variant_id),
                    size=item.size,
                    quantity=item.quantity,
                    product_name=item.product_name,
                    variant_color=item.variant_color,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in order.items
            ],
            subtotal=order.subtotal,
            discount_code=order.discount_code,
            discount_amount=order.discount_amount or 0.0,
            shipping_cost=order.shipping_cost or 0.0,
            total=order.total,
            details=order.details.to_dict() if order.details else {},
            payment_reference=order.payment_reference,
        )


class ClearHistoryResponse(BaseModel):
    removed: int


class StatusResponse(BaseModel):
    status: str = "ok"
