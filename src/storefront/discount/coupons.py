"""Discount code application: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.checkout.payment import assert_cart_unlocked
from storefront.discount.ledger import DiscountLedger
from storefront.domain import storefront


@storefront.command(part_of="DiscountLedger")
class ApplyDiscount:
    """Apply a promotional code to a cart's ledger. The handler returns whether it was accepted."""

    cart_id = Identifier(required=True)
    code = String(required=True, max_length=100)


@storefront.command_handler(part_of=DiscountLedger)
class ApplyDiscountHandler:
    @handle(ApplyDiscount)
    def apply_discount(self, command):
        assert_cart_unlocked(command.cart_id)
        repo = current_domain.repository_for(DiscountLedger)
        ledger = repo.get(command.cart_id)
        accepted = ledger.apply(command.code)
        if accepted:
            repo.add(ledger)
        return accepted
