"""Storefront bounded context: cart, discount ledger, checkout and order history.

Handles the shopper-facing purchase flow of the Aura storefront: a sparse
cart of catalogue references, a single active discount, the four-step
checkout wizard, the simulated payment and the atomic order commit.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
