"""Cart management: creation, orphan pruning and session reset.

A cart is always created together with its discount ledger so that every
cart id can be priced without a missing-ledger special case.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import get_catalog
from storefront.checkout.checkout import Checkout
from storefront.checkout.payment import assert_cart_unlocked
from storefront.discount.ledger import DiscountLedger
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class CreateCart:
    """Create a new shopping cart (and its empty discount ledger) for a browser session."""

    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class PruneCart:
    """Remove lines that reference products or variants no longer in the catalogue."""

    cart_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ResetSession:
    """Logout-equivalent reset: drop the active discount and any open checkout draft."""

    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = ShoppingCart.create(session_id=command.session_id)
        current_domain.repository_for(ShoppingCart).add(cart)
        current_domain.repository_for(DiscountLedger).add(DiscountLedger.open_for(cart.id))
        logger.info("Cart created", cart_id=str(cart.id), session_id=command.session_id)
        return str(cart.id)

    @handle(PruneCart)
    def prune_cart(self, command):
        assert_cart_unlocked(command.cart_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        removed = cart.prune_orphans(get_catalog())
        if removed:
            repo.add(cart)
            logger.info("Pruned orphaned cart lines", cart_id=str(cart.id), removed_count=removed)
        return removed

    @handle(ResetSession)
    def reset_session(self, command):
        assert_cart_unlocked(command.cart_id)
        ledger_repo = current_domain.repository_for(DiscountLedger)
        ledger = ledger_repo.get(command.cart_id)
        ledger.reset()
        ledger_repo.add(ledger)

        checkout_repo = current_domain.repository_for(Checkout)
        drafts = checkout_repo._dao.query.filter(cart_id=str(command.cart_id)).limit(None).all().items
        discarded = 0
        for draft in drafts:
            if not draft.is_completed:
                checkout_repo._dao.delete(draft)
                discarded += 1

        logger.info("Session reset", cart_id=str(command.cart_id), discarded_drafts=discarded)
        return discarded
