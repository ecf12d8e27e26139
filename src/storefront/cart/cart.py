"""Shopping Cart aggregate: a sparse, ordered list of catalogue references.

The cart holds only (product, variant, size, quantity) references; it has no
pricing knowledge. Prices are resolved by the pricing engine against the
current catalogue every time the cart is displayed or checked out.

Lines are unique on (product_id, variant_id, size) and always hold a
quantity of at least one: any change that would leave a line at zero or below
removes the line instead.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront


def _same_size(left, right) -> bool:
    return (left or None) == (right or None)


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    size = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    def find_item(self, product_id, variant_id, size=None):
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id)
                and str(i.variant_id) == str(variant_id)
                and _same_size(i.size, size)
            ),
            None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id, quantity=1, size=None):
        """Add a line, or increase the quantity of the matching line."""
        existing = self.find_item(product_id, variant_id, size)
        new_quantity = (existing.quantity if existing else 0) + quantity

        if new_quantity <= 0:
            # Never store a non-positive quantity
            if existing:
                self._drop(existing)
            return

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    variant_id=variant_id,
                    size=size or None,
                    quantity=quantity,
                    added_at=now,
                )
            )
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                size=size or None,
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id, variant_id, size=None):
        """Remove the matching line. Removing an absent line is a no-op."""
        existing = self.find_item(product_id, variant_id, size)
        if existing is not None:
            self._drop(existing)

    def set_quantity(self, product_id, variant_id, new_quantity, size=None):
        """Overwrite a line's quantity; zero or below removes the line."""
        if new_quantity <= 0:
            self.remove_item(product_id, variant_id, size)
            return

        existing = self.find_item(product_id, variant_id, size)
        if existing is None or existing.quantity == new_quantity:
            return

        previous_quantity = existing.quantity
        existing.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_id=str(variant_id),
                size=size or None,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def clear(self):
        """Remove every line."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                removed_line_count=len(removed),
            )
        )

    def prune_orphans(self, catalog) -> int:
        """Remove lines whose product or variant is no longer in the catalogue."""
        orphans = [i for i in self.items if catalog.resolve(i.product_id, i.variant_id) is None]
        for item in orphans:
            self._drop(item)
        return len(orphans)

    def _drop(self, item):
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id),
                size=item.size or None,
            )
        )
