"""
Data accessors for the storefront tables.

Each function is a thin wrapper over the SQLAlchemy session. Writers flush so
generated ids are available, but never commit: the caller owns the
transaction (``commit()`` / ``rollback()`` below), which lets checkout run
customer, order, items and stock updates as one unit.
"""
import logging
import math
from sqlalchemy.orm import joinedload
from core.extensions import db
from core.imports import func
from core.exceptions import ValidationError, NotFoundError
from models.productModels import Category, Product
from models.userModel import Customers
from models.orderModels import Order, OrderItem, ORDER_STATUSES

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "name", "description", "content", "image_url", "original_price",
    "discount_price", "category_id", "stock_quantity", "is_active",
)
CATEGORY_FIELDS = ("name", "description", "image_url", "display_order")


def commit():
    db.session.commit()


def rollback():
    db.session.rollback()


def _as_price(value, field):
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if math.isnan(price) or math.isinf(price):
        raise ValidationError(f"{field} must be a number")
    return price


def _as_stock(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("stock_quantity must be a whole number")
    if not number.is_integer():
        raise ValidationError("stock_quantity must be a whole number")
    if number < 0:
        raise ValidationError("stock_quantity cannot be negative")
    return int(number)


def _clean_product_fields(fields, current=None):
    """Coerce and check product fields, merged over ``current`` values."""
    unknown = set(fields) - set(PRODUCT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")

    values = dict(fields)
    merged = {}
    for name in PRODUCT_FIELDS:
        if name in values:
            merged[name] = values[name]
        elif current is not None:
            merged[name] = getattr(current, name)

    for name in ("name", "content"):
        if name in values or current is None:
            text = (merged.get(name) or "").strip()
            if not text:
                raise ValidationError(f"{name} is required")
            values[name] = text

    original = _as_price(merged.get("original_price"), "original_price")
    discount = _as_price(merged.get("discount_price"), "discount_price")
    if original <= 0:
        raise ValidationError("original_price must be greater than zero")
    if discount < 0:
        raise ValidationError("discount_price cannot be negative")
    if discount > original:
        raise ValidationError("discount_price cannot exceed original_price")
    if "original_price" in values or current is None:
        values["original_price"] = original
    if "discount_price" in values or current is None:
        values["discount_price"] = discount

    if "stock_quantity" in values:
        values["stock_quantity"] = _as_stock(values["stock_quantity"])

    if values.get("category_id") in ("", None):
        if "category_id" in values:
            values["category_id"] = None
    elif db.session.get(Category, values["category_id"]) is None:
        raise ValidationError("Category not found")

    if "is_active" in values:
        values["is_active"] = bool(values["is_active"])

    return values


# =========================
# Products
# =========================
def get_products():
    """Active products, newest first, with their category."""
    return (
        Product.query.options(joinedload(Product.category))
        .filter_by(is_active=True)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def get_all_products():
    return (
        Product.query.options(joinedload(Product.category))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


def get_product_by_id(product_id, active_only=True):
    query = Product.query.options(joinedload(Product.category)).filter(Product.id == product_id)
    if active_only:
        query = query.filter_by(is_active=True)
    return query.first()


def get_products_by_ids(product_ids):
    """Active products among ``product_ids``; unknown or inactive ids are skipped."""
    if not product_ids:
        return []
    return (
        Product.query.options(joinedload(Product.category))
        .filter(Product.id.in_(list(product_ids)), Product.is_active == True)  # noqa: E712
        .all()
    )


def create_product(**fields):
    values = _clean_product_fields(fields)
    values.setdefault("stock_quantity", 0)
    values.setdefault("is_active", True)
    product = Product(**values)
    db.session.add(product)
    db.session.flush()
    return product


def update_product(product_id, **fields):
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    for name, value in _clean_product_fields(fields, current=product).items():
        setattr(product, name, value)
    db.session.flush()
    return product


def deactivate_product(product_id):
    """Soft delete: the row stays so order history keeps its product."""
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    product.is_active = False
    db.session.flush()
    return product


def update_product_stock(product_id, quantity):
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    product.stock_quantity = _as_stock(quantity)
    db.session.flush()
    return product


# =========================
# Categories
# =========================
def get_categories():
    return Category.query.order_by(Category.display_order, Category.name).all()


def get_category_by_id(category_id):
    return db.session.get(Category, category_id)


def _clean_category_fields(fields, require_name):
    unknown = set(fields) - set(CATEGORY_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown category fields: {', '.join(sorted(unknown))}")
    values = dict(fields)
    if "name" in values or require_name:
        name = (values.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required")
        values["name"] = name
    if "display_order" in values:
        try:
            values["display_order"] = int(values["display_order"] or 0)
        except (TypeError, ValueError):
            raise ValidationError("display_order must be a whole number")
    return values


def create_category(**fields):
    values = _clean_category_fields(fields, require_name=True)
    if Category.query.filter(func.lower(Category.name) == values["name"].lower()).first():
        raise ValidationError("A category with this name already exists")
    category = Category(**values)
    db.session.add(category)
    db.session.flush()
    return category


def update_category(category_id, **fields):
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    for name, value in _clean_category_fields(fields, require_name=False).items():
        setattr(category, name, value)
    db.session.flush()
    return category


def delete_category(category_id):
    """Delete a category after detaching every product that referenced it."""
    category = db.session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")

    detached = Product.query.filter_by(category_id=category_id).update(
        {"category_id": None}, synchronize_session="fetch"
    )
    db.session.delete(category)
    db.session.flush()
    logger.info(f"Deleted category {category_id}, detached {detached} products")
    return detached


# =========================
# Customers
# =========================
def get_customer_by_email(email):
    return Customers.query.filter_by(email=email).order_by(Customers.id).first()


def create_customer(name, email, phone=None, address=None):
    customer = Customers(name=name, email=email, phone=phone, address=address)
    db.session.add(customer)
    db.session.flush()
    return customer


# =========================
# Orders
# =========================
def _order_query():
    return Order.query.options(
        joinedload(Order.customer),
        joinedload(Order.order_items).joinedload(OrderItem.product),
    )


def create_order(customer_id, total_amount, status="pending"):
    if status not in ORDER_STATUSES:
        raise ValidationError("Invalid status")
    order = Order(customer_id=customer_id, total_amount=total_amount, status=status)
    db.session.add(order)
    db.session.flush()
    return order


def create_order_items(order_id, items):
    """Insert one row per ``{"product_id", "quantity", "unit_price"}`` dict."""
    order_items = []
    for item in items:
        quantity = int(item["quantity"])
        if quantity < 1:
            raise ValidationError("Order item quantity must be at least 1")
        unit_price = float(item["unit_price"])
        order_item = OrderItem(
            order_id=order_id,
            product_id=item["product_id"],
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )
        db.session.add(order_item)
        order_items.append(order_item)
    db.session.flush()
    return order_items


def get_all_orders():
    return _order_query().order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order_by_id(order_id):
    return _order_query().filter(Order.id == order_id).first()


def get_orders_by_customer(customer_id):
    return (
        _order_query()
        .filter(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_orders_by_email(email):
    return (
        _order_query()
        .join(Customers, Order.customer_id == Customers.id)
        .filter(Customers.email == email)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def update_order_status(order_id, status):
    if status not in ORDER_STATUSES:
        raise ValidationError("Invalid status")
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found")
    order.status = status
    db.session.flush()
    return order


def count_orders():
    return Order.query.count()
