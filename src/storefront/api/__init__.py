"""Storefront API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, checkout_router, order_router

__all__ = ["cart_router", "checkout_router", "order_router", "register_error_handlers"]
