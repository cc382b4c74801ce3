"""
Checkout: turn the session cart into customer, order and order item rows.

The steps run in order against the data accessors:

1. validate (non-empty cart, every customer field present)
2. look up the customer by email, create one if absent
3. create the order in ``pending`` with the cart total
4. create one order item per cart line, snapshotting the unit price
5. decrement each product's stock, floored at zero

All writes share one database transaction. If any step fails the session is
rolled back, so no customer or order is left behind, and a single generic
``CheckoutError`` is raised.
"""
import logging
from dataclasses import dataclass, field, fields

from core.exceptions import ValidationError, CheckoutError
from services import api

logger = logging.getLogger(__name__)


@dataclass
class CustomerDetails:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            values[f.name] = str(value).strip() if value is not None else ""
        return cls(**values)

    def missing_fields(self):
        return [f.name for f in fields(self) if not getattr(self, f.name)]


@dataclass
class OrderReceipt:
    order_id: int
    customer_id: int
    total_amount: float
    total_items: int
    lines: list = field(default_factory=list)


def validate_checkout(cart, details):
    if cart.is_empty():
        raise ValidationError("Your cart is empty. Please add some items first.")
    missing = details.missing_fields()
    if missing:
        raise ValidationError(
            f"Please fill in all customer details to complete your booking (missing: {', '.join(missing)})"
        )


def place_order(cart, details, accessor=api):
    validate_checkout(cart, details)

    lines = cart.lines()
    total_amount = cart.total_price()
    total_items = cart.total_items()

    try:
        customer = accessor.get_customer_by_email(details.email)
        if customer is None:
            customer = accessor.create_customer(
                name=details.name,
                email=details.email,
                phone=details.phone,
                address=details.address,
            )

        order = accessor.create_order(customer.id, total_amount)

        accessor.create_order_items(order.id, [
            {
                "product_id": line.product.id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
            }
            for line in lines
        ])

        # no availability check: stock is floored at zero, overselling is possible
        for line in lines:
            remaining = max(0, (line.product.stock_quantity or 0) - line.quantity)
            accessor.update_product_stock(line.product.id, remaining)

        accessor.commit()

    except Exception:
        accessor.rollback()
        logger.exception(f"Checkout failed for {details.email}")
        raise CheckoutError()

    logger.info(f"Order {order.id} placed by customer {customer.id}: {total_items} items, total {total_amount:.2f}")

    receipt = OrderReceipt(
        order_id=order.id,
        customer_id=customer.id,
        total_amount=total_amount,
        total_items=total_items,
        lines=[
            {
                "product_id": line.product.id,
                "name": line.product.name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "total_price": line.line_total,
            }
            for line in lines
        ],
    )
    cart.clear()
    return receipt
