import logging
from core.imports import Blueprint, jsonify, request, session, render_template, current_app, Message, datetime
from core.extensions import mail
from services import api
from services.cart import Cart
from services.checkout import CustomerDetails, place_order
from services.events import order_feed
from services.pricing import format_price

logger = logging.getLogger(__name__)

orders_bp = Blueprint('orders', __name__)


def order_item_to_dict(item):
    product = item.product
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": product.name if product else None,
        "image_url": product.image_url if product else None,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "total_price": item.total_price,
    }


def order_to_dict(order, include_items=True, include_contact=True):
    customer = order.customer
    customer_data = None
    if customer:
        customer_data = {"id": customer.id, "name": customer.name, "email": customer.email}
        # phone and address are for the admin views only
        if include_contact:
            customer_data["phone"] = customer.phone
            customer_data["address"] = customer.address
    data = {
        "id": order.id,
        "title": f"Order #{order.id}",
        "customer_id": order.customer_id,
        "customer": customer_data,
        "total_amount": order.total_amount,
        "formatted_total": format_price(order.total_amount),
        "status": order.status,
        "created_at": order.created_at.isoformat() if order.created_at else None,
    }
    if include_items:
        data["order_items"] = [order_item_to_dict(item) for item in order.order_items]
    return data


def send_email(to, subject, body):
    if not current_app.config.get("MAIL_DEFAULT_SENDER"):
        logger.info(f"Mail sender not configured, skipping email to {to}")
        return False
    msg = Message(subject=subject, recipients=[to])
    msg.html = body
    try:
        mail.send(msg)
        return True
    except Exception:
        logger.exception(f"Error sending email to {to}")
        return False


def send_order_confirmation(details, receipt):
    body = render_template(
        'order_confirmation.html',
        name=details.name,
        phone=details.phone,
        address=details.address,
        order_id=receipt.order_id,
        lines=[
            dict(line, unit_price=format_price(line["unit_price"]), total_price=format_price(line["total_price"]))
            for line in receipt.lines
        ],
        total=format_price(receipt.total_amount),
        year=datetime.now().year
    )
    return send_email(details.email, f"Your order #{receipt.order_id} is confirmed", body)


@orders_bp.route('/api/checkout', methods=['POST'])
def checkout():
    """
    Place an order for everything in the session cart
    ---
    tags:
      - Orders
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - name
            - email
            - phone
            - address
          properties:
            name:
              type: string
              example: "Priya Raman"
            email:
              type: string
              example: "priya@example.com"
            phone:
              type: string
              example: "9876543210"
            address:
              type: string
              example: "12 Gandhi Road, Sivakasi"
    responses:
      201:
        description: Order placed, cart cleared
        schema:
          type: object
          properties:
            message:
              type: string
              example: "Your order for 3 items worth ₹46.50 has been placed successfully!"
            order_id:
              type: integer
              example: 10
            total_amount:
              type: number
              example: 46.5
      400:
        description: Empty cart or missing customer details
      500:
        description: Order failed, nothing was saved
    """
    data = request.get_json(silent=True) or {}
    cart = Cart.from_session(session)
    details = CustomerDetails.from_dict(data)

    receipt = place_order(cart, details)
    cart.save(session)

    order_feed.publish("INSERT", receipt.order_id, api.count_orders())
    send_order_confirmation(details, receipt)

    return jsonify({
        "message": f"Your order for {receipt.total_items} items worth {format_price(receipt.total_amount)} has been placed successfully!",
        "order_id": receipt.order_id,
        "customer_id": receipt.customer_id,
        "total_amount": receipt.total_amount,
        "total_items": receipt.total_items,
        "order_items": receipt.lines
    }), 201


@orders_bp.route('/api/orders', methods=['GET'])
def get_customer_orders():
    """
    Orders placed with an email address
    ---
    tags:
      - Orders
    parameters:
      - name: email
        in: query
        type: string
        required: true
    responses:
      200:
        description: Orders, newest first
      400:
        description: Email missing
    """
    email = (request.args.get("email") or "").strip()
    if not email:
        return jsonify({"message": "email is required"}), 400

    orders = api.get_orders_by_email(email)
    return jsonify({
        "orders": [order_to_dict(o, include_contact=False) for o in orders],
        "count": len(orders)
    }), 200
