import logging
import queue
from core.imports import Blueprint, current_app, jsonify, jwt_required, request, get_jwt, Response, stream_with_context
from core.extensions import db
from models.orderModels import ORDER_STATUSES
from routes.orders import order_to_dict
from services import api
from services.events import order_feed, format_sse
from services.listing import filter_orders, paginate

logger = logging.getLogger(__name__)

admin_orders = Blueprint("admin_orders", __name__)


@admin_orders.route('/api/admin/orders', methods=['GET'])
@jwt_required()
def get_admin_orders():
    """
    Admin: Search, filter and page through orders
    ---
    tags:
      - Admin Orders
    security:
      - Bearer: []
    parameters:
      - name: search
        in: query
        type: string
        description: Matches order id, customer name or email
      - name: status
        in: query
        type: string
        enum: [all, pending, confirmed, processing, shipped, delivered, cancelled]
        default: all
      - name: page
        in: query
        type: integer
        default: 1
    responses:
      200:
        description: One page of orders, newest first
      400:
        description: Invalid status filter
      403:
        description: Forbidden (not admin)
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    status = request.args.get("status", "all")
    if status != "all" and status not in ORDER_STATUSES:
        return jsonify({"error": "Invalid status"}), 400

    orders = filter_orders(api.get_all_orders(), request.args.get("search", ""), status)
    page = paginate(orders, request.args.get("page", 1), current_app.config.get("ADMIN_PAGE_SIZE", 10))

    return jsonify({
        "orders": [order_to_dict(o) for o in page.items],
        "page": page.page,
        "total_pages": page.total_pages,
        "total": page.total,
        "statuses": list(ORDER_STATUSES)
    }), 200


@admin_orders.route('/api/admin/orders/count', methods=['GET'])
@jwt_required()
def get_order_count():
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    return jsonify({"count": api.count_orders()}), 200


@admin_orders.route('/api/admin/orders/<int:order_id>', methods=['GET'])
@jwt_required()
def get_admin_order(order_id):
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    order = api.get_order_by_id(order_id)
    if not order:
        return jsonify({"error": "Order not found"}), 404

    return jsonify(order_to_dict(order)), 200


@admin_orders.route('/api/admin/orders/<int:order_id>/status', methods=['PATCH'])
@jwt_required()
def update_order_status(order_id):
    """
    Admin: Update Order Status
    ---
    tags:
      - Admin Orders
    summary: Change the status of an order
    description: >
      Any status may be set from any other.
      Valid statuses: pending, confirmed, processing, shipped, delivered, cancelled.
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        required: true
        type: integer
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            status:
              type: string
              example: shipped
    responses:
      200:
        description: Status updated successfully
      400:
        description: Invalid status
      404:
        description: Order not found
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    data = request.get_json(silent=True) or {}
    new_status = data.get('status')

    order = api.update_order_status(order_id, new_status)
    db.session.commit()
    logger.info(f"Order {order_id} status set to {new_status}")

    order_feed.publish("UPDATE", order.id, api.count_orders())

    return jsonify({
        "message": f"Order status updated to {new_status}",
        "order": order_to_dict(order, include_items=False)
    }), 200


@admin_orders.route('/api/admin/orders/stream', methods=['GET'])
@jwt_required()
def stream_orders():
    """
    Admin: Server-sent events for order changes
    ---
    tags:
      - Admin Orders
    produces:
      - text/event-stream
    parameters:
      - name: jwt
        in: query
        type: string
        description: Access token, for clients that cannot send headers
    responses:
      200:
        description: A SNAPSHOT event with the current count, then INSERT/UPDATE events
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    keepalive = current_app.config.get("ORDER_STREAM_KEEPALIVE", 15)
    def generate():
        subscriber = order_feed.subscribe()
        try:
            snapshot = {"event": "SNAPSHOT", "order_id": None, "count": api.count_orders()}
            yield format_sse(snapshot, "SNAPSHOT")
            while True:
                try:
                    message = subscriber.get(timeout=keepalive)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield format_sse(message, message["event"])
        finally:
            order_feed.unsubscribe(subscriber)

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
