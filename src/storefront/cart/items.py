"""Cart line management: commands and handler.

Every handler persists the cart before returning, so reloading the cart from
its repository always reconstructs the state the shopper last saw.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.payment import assert_cart_unlocked
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(min_value=1, default=1)
    size = String(max_length=50)


@storefront.command(part_of="ShoppingCart")
class SetCartQuantity:
    """Overwrite a line's quantity. Zero or a negative quantity removes the line."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    new_quantity = Integer(required=True)
    size = String(max_length=50)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    size = String(max_length=50)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        assert_cart_unlocked(command.cart_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity or 1,
            size=command.size,
        )
        repo.add(cart)

    @handle(SetCartQuantity)
    def set_cart_quantity(self, command):
        assert_cart_unlocked(command.cart_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.set_quantity(
            product_id=command.product_id,
            variant_id=command.variant_id,
            new_quantity=command.new_quantity,
            size=command.size,
        )
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        assert_cart_unlocked(command.cart_id)
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.remove_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            size=command.size,
        )
        repo.add(cart)
