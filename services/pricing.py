"""Price and discount arithmetic shared by the catalog, cart and checkout."""
import math
from flask import current_app, has_app_context

DEFAULT_CURRENCY = "₹"


def discount_percentage(original_price, discount_price):
    """Percentage saved, rounded half up to a whole number.

    Products are validated to have a positive original price, so a zero or
    negative original only shows up on legacy rows; those report no discount.
    """
    if not original_price or original_price <= 0:
        return 0
    percent = 100 * (original_price - discount_price) / original_price
    return int(math.floor(percent + 0.5))


def line_total(unit_price, quantity):
    return unit_price * quantity


def cart_total(lines):
    """Sum of unit price x quantity over (unit_price, quantity) pairs."""
    return sum(line_total(price, qty) for price, qty in lines)


def format_price(amount, symbol=None):
    # display only; totals keep full float precision until here
    if symbol is None:
        symbol = current_app.config.get("CURRENCY_SYMBOL", DEFAULT_CURRENCY) if has_app_context() else DEFAULT_CURRENCY
    return f"{symbol}{amount:.2f}"
