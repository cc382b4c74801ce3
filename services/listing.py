"""Search, sort, filter and pagination for the admin tables."""
import math
from dataclasses import dataclass, field

DEFAULT_PAGE_SIZE = 10
PRODUCT_SORT_KEYS = {
    "name": lambda p: (p.name or "").lower(),
    "price": lambda p: p.discount_price,
    "stock": lambda p: p.stock_quantity,
}


@dataclass
class Page:
    items: list = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total: int = 0
    per_page: int = DEFAULT_PAGE_SIZE


def _matches(term, *values):
    return any(term in (value or "").lower() for value in values)


def search_products(products, term):
    """Case-insensitive substring match on name or content."""
    term = (term or "").strip().lower()
    if not term:
        return list(products)
    return [p for p in products if _matches(term, p.name, p.content)]


def sort_products(products, sort_by="name"):
    """Ascending sort by name, price or stock; unknown keys keep the given order."""
    key = PRODUCT_SORT_KEYS.get(sort_by)
    if key is None:
        return list(products)
    return sorted(products, key=key)


def filter_orders(orders, term="", status="all"):
    """Match order id, customer name or email, and an exact status ("all" for any)."""
    term = (term or "").strip().lower()
    status = status or "all"
    result = []
    for order in orders:
        customer = order.customer
        if term and not _matches(
            term,
            str(order.id),
            customer.name if customer else None,
            customer.email if customer else None,
        ):
            continue
        if status != "all" and order.status != status:
            continue
        result.append(order)
    return result


def paginate(items, page=1, per_page=DEFAULT_PAGE_SIZE):
    items = list(items)
    try:
        page = max(1, int(page))
    except (TypeError, ValueError):
        page = 1
    total = len(items)
    start = (page - 1) * per_page
    return Page(
        items=items[start:start + per_page],
        page=page,
        total_pages=math.ceil(total / per_page),
        total=total,
        per_page=per_page,
    )


def dashboard_stats(products, orders):
    return {
        "total_products": len(products),
        "total_orders": len(orders),
        "total_revenue": sum(order.total_amount for order in orders),
        "total_customers": len({order.customer_id for order in orders}),
    }
