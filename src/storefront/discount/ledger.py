"""Discount Ledger aggregate: the single promotional code active on a cart.

Each cart owns exactly one ledger, stored under the cart's identifier. The
ledger only ever holds a percentage looked up from the known code table; a
caller can never set a percentage directly.
"""

from datetime import UTC, datetime

import structlog
from protean.fields import DateTime, Float, String

from storefront.discount.codes import NO_DISCOUNT, Discount, percentage_for
from storefront.discount.events import DiscountApplied, DiscountReset
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.aggregate
class DiscountLedger:
    code = String(max_length=100, default="")
    percentage = Float(default=0.0, min_value=0.0, max_value=1.0)
    updated_at = DateTime()

    @classmethod
    def open_for(cls, cart_id):
        return cls(
            id=str(cart_id),
            code="",
            percentage=0.0,
            updated_at=datetime.now(UTC),
        )

    @property
    def discount(self) -> Discount:
        if not self.code:
            return NO_DISCOUNT
        return Discount(code=self.code, percentage=self.percentage or 0.0)

    def apply(self, code) -> bool:
        """Activate a known code. Unknown codes, or a second code, leave the ledger unchanged."""
        if self.discount.is_active:
            logger.info("Discount already active", cart_id=str(self.id), active_code=self.code, code=code)
            return False

        percentage = percentage_for(code)
        if percentage is None:
            logger.info("Discount code rejected", cart_id=str(self.id), code=code)
            return False

        self.code = code
        self.percentage = percentage
        self.updated_at = datetime.now(UTC)

        self.raise_(
            DiscountApplied(
                cart_id=str(self.id),
                code=code,
                percentage=percentage,
            )
        )
        return True

    def reset(self):
        """Restore the empty discount."""
        previous_code = self.code or ""
        self.code = ""
        self.percentage = 0.0
        self.updated_at = datetime.now(UTC)

        self.raise_(
            DiscountReset(
                cart_id=str(self.id),
                previous_code=previous_code,
            )
        )
