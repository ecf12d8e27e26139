"""Pricing engine: pure functions from (cart lines, catalogue, discount) to totals.

Nothing here touches a repository or mutates its inputs: the same cart and
catalogue always price the same way. Amounts are plain floats and are never
rounded during computation; two-decimal formatting is a presentation concern
handled by ``format_money``.

Cart lines may be ``CartItem`` entities, ``CartLine`` snapshots or any object
exposing ``product_id``, ``variant_id``, ``size`` and ``quantity``.
"""

from dataclasses import dataclass

import structlog

from storefront.catalogue.index import CatalogIndex
from storefront.discount.codes import NO_DISCOUNT, Discount

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    """Detached copy of a cart line's reference fields."""

    product_id: str
    variant_id: str
    size: str | None
    quantity: int

    @classmethod
    def of(cls, line) -> "CartLine":
        return cls(
            product_id=str(line.product_id),
            variant_id=str(line.variant_id),
            size=line.size or None,
            quantity=int(line.quantity),
        )


@dataclass(frozen=True)
class PricedLine:
    cart_line: CartLine
    product_name: str
    variant_color: str
    image_url: str | None
    unit_price: float
    line_total: float


@dataclass(frozen=True)
class PriceSummary:
    lines: tuple[PricedLine, ...]
    subtotal: float
    discount: Discount
    discount_amount: float
    shipping_cost: float
    total: float

    @property
    def item_count(self) -> int:
        return sum(line.cart_line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


def price(cart_lines, catalog: CatalogIndex) -> list[PricedLine]:
    """Join cart lines to the catalogue, skipping lines that no longer resolve."""
    priced = []
    for line in cart_lines:
        resolved = catalog.resolve(line.product_id, line.variant_id)
        if resolved is None:
            logger.debug(
                "Skipping orphaned cart line",
                product_id=str(line.product_id),
                variant_id=str(line.variant_id),
            )
            continue

        product, variant = resolved
        unit_price = product.base_price + variant.price_adjustment
        snapshot = CartLine.of(line)
        priced.append(
            PricedLine(
                cart_line=snapshot,
                product_name=product.name,
                variant_color=variant.color,
                image_url=variant.image_url,
                unit_price=unit_price,
                line_total=unit_price * snapshot.quantity,
            )
        )
    return priced


def subtotal(priced_lines) -> float:
    return sum((line.line_total for line in priced_lines), 0.0)


def discount_amount(subtotal_amount: float, discount: Discount) -> float:
    return subtotal_amount * discount.percentage


def total(subtotal_amount: float, discount_value: float, shipping: float) -> float:
    return subtotal_amount - discount_value + shipping


def shipping_cost(method: str | None, rates: dict[str, float] | None = None) -> float:
    """Shipping cost for a method; 0 while no method has been chosen."""
    if not method:
        return 0.0
    if rates is None:
        from storefront.settings import shipping_rates

        rates = shipping_rates()
    if method not in rates:
        raise ValueError(f"Unknown shipping method: {method}")
    return float(rates[method])


def summarize(cart_lines, catalog: CatalogIndex, discount: Discount = NO_DISCOUNT, shipping_method=None) -> PriceSummary:
    lines = price(cart_lines, catalog)
    sub = subtotal(lines)
    off = discount_amount(sub, discount)
    shipping = shipping_cost(shipping_method)
    return PriceSummary(
        lines=tuple(lines),
        subtotal=sub,
        discount=discount,
        discount_amount=off,
        shipping_cost=shipping,
        total=total(sub, off, shipping),
    )


def format_money(amount: float) -> str:
    return f"{amount:.2f}"
