"""
Session-scoped shopping cart.

A ``Cart`` maps product id to the selected quantity and keeps the product rows
it was built from so totals can be derived without another query. It lives in
the client's Flask session: ``Cart.from_session`` loads it at the start of a
request and ``save`` writes it back. Nothing is persisted server side until
checkout.
"""
import math
from dataclasses import dataclass
from typing import Any

from core.exceptions import ValidationError, NotFoundError
from services import api
from services.pricing import line_total


def as_quantity(value):
    """Floor a user supplied quantity to an int; negatives become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError("Quantity must be a number")
    return max(0, math.floor(number))


@dataclass
class CartLine:
    product: Any
    quantity: int

    @property
    def unit_price(self):
        return self.product.discount_price

    @property
    def line_total(self):
        return line_total(self.product.discount_price, self.quantity)


class Cart:
    SESSION_KEY = "cart"

    def __init__(self):
        self._quantities = {}
        self._products = {}

    @classmethod
    def from_session(cls, session, load_products=None):
        """Rebuild the cart stored in ``session``.

        Entries whose product is gone or deactivated are dropped.
        """
        cart = cls()
        stored = session.get(cls.SESSION_KEY) or {}
        if not stored:
            return cart

        loader = load_products or api.get_products_by_ids
        wanted = {}
        for key, quantity in stored.items():
            try:
                wanted[int(key)] = int(quantity)
            except (TypeError, ValueError):
                continue

        for product in loader(list(wanted)):
            quantity = wanted.get(product.id, 0)
            if quantity > 0:
                cart._products[product.id] = product
                cart._quantities[product.id] = quantity
        return cart

    def save(self, session):
        session[self.SESSION_KEY] = {str(pid): qty for pid, qty in self._quantities.items()}

    def add(self, product, quantity=1):
        """Add ``quantity`` units, merging with any existing entry."""
        quantity = as_quantity(quantity)
        if quantity <= 0:
            raise ValidationError("Please select a quantity before adding to cart")
        self._products[product.id] = product
        self._quantities[product.id] = self._quantities.get(product.id, 0) + quantity
        return self._quantities[product.id]

    def update(self, product_id, quantity):
        """Replace the quantity of an entry already in the cart."""
        quantity = as_quantity(quantity)
        if quantity <= 0:
            self.remove(product_id)
            return 0
        if product_id not in self._quantities:
            raise NotFoundError("Cart item not found")
        self._quantities[product_id] = quantity
        return quantity

    def set_quantity(self, product, quantity):
        """Direct quantity input; may create the entry, zero removes it."""
        quantity = as_quantity(quantity)
        if quantity <= 0:
            self.remove(product.id)
            return 0
        self._products[product.id] = product
        self._quantities[product.id] = quantity
        return quantity

    def change_quantity(self, product, delta):
        """The +/- buttons: shift the quantity by ``delta``, floored at zero."""
        try:
            number = float(delta)
        except (TypeError, ValueError):
            raise ValidationError("delta must be a whole number")
        if not number.is_integer():
            raise ValidationError("delta must be a whole number")
        delta = int(number)
        return self.set_quantity(product, self._quantities.get(product.id, 0) + delta)

    def merge(self, selections):
        """Merge browse-page selections, an iterable of (product, quantity)."""
        for product, quantity in selections:
            if as_quantity(quantity) > 0:
                self.add(product, quantity)

    def remove(self, product_id):
        self._quantities.pop(product_id, None)
        self._products.pop(product_id, None)

    def clear(self):
        self._quantities.clear()
        self._products.clear()

    def quantity_of(self, product_id):
        return self._quantities.get(product_id, 0)

    @property
    def quantities(self):
        return dict(self._quantities)

    def is_empty(self):
        return not self._quantities

    def lines(self):
        return [CartLine(self._products[pid], qty) for pid, qty in self._quantities.items()]

    def total_items(self):
        return sum(self._quantities.values())

    def total_price(self):
        return sum(line.line_total for line in self.lines())

    def unique_products_count(self):
        return len(self._quantities)

    def category_count(self):
        """Distinct categories among entries; uncategorised products are not counted."""
        categories = {
            self._products[pid].category_id
            for pid, qty in self._quantities.items()
            if qty > 0 and self._products[pid].category_id is not None
        }
        return len(categories)

    def __len__(self):
        return len(self._quantities)

    def __contains__(self, product_id):
        return product_id in self._quantities
