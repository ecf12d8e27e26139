"""Price quotes for stored carts and checkouts."""

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import get_catalog
from storefront.checkout.checkout import Checkout
from storefront.discount.ledger import DiscountLedger
from storefront.pricing.engine import PriceSummary, summarize


def quote_cart(cart_id, shipping_method=None) -> PriceSummary:
    """Price a cart with its active discount, plus shipping when a method is given."""
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    ledger = current_domain.repository_for(DiscountLedger).get(cart_id)
    return summarize(cart.items, get_catalog(), ledger.discount, shipping_method)


def quote_checkout(checkout_id) -> PriceSummary:
    """Price a checkout's cart using the shipping method chosen in the wizard."""
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    return quote_cart(checkout.cart_id, checkout.shipping_method)
