from core.imports import Blueprint, jsonify, request, session
from core.exceptions import ValidationError
from services import api
from services.cart import Cart, as_quantity
from services.pricing import format_price

cart_bp = Blueprint("cart", __name__)


def cart_to_dict(cart):
    cart_items = []
    for line in cart.lines():
        product = line.product
        cart_items.append({
            "id": product.id,
            "name": product.name,
            "content": product.content,
            "image_url": product.image_url,
            "price": line.unit_price,
            "quantity": line.quantity,
            "line_total": line.line_total,
            "formatted_line_total": format_price(line.line_total),
            "available_stock": product.stock_quantity,
            "category": product.category.name if product.category else None,
        })

    return {
        "cart_items": cart_items,
        "total_items": cart.total_items(),
        "total_price": cart.total_price(),
        "formatted_total": format_price(cart.total_price()),
        "unique_products": cart.unique_products_count(),
        "category_count": cart.category_count(),
    }


def _parse_item(item):
    """Return ``(product_id, quantity)`` from one add-to-cart entry."""
    if not isinstance(item, dict):
        raise ValidationError("Each item must be an object with product_id and quantity")
    try:
        product_id = float(item.get("product_id"))
    except (TypeError, ValueError):
        raise ValidationError("product_id must be a whole number")
    if not product_id.is_integer():
        raise ValidationError("product_id must be a whole number")
    return int(product_id), item.get("quantity", 1)


@cart_bp.route('/api/cart', methods=['GET'])
def get_cart():
    """
    Get the current session's shopping cart
    ---
    tags:
      - Cart
    responses:
      200:
        description: Cart retrieved successfully
        schema:
          type: object
          properties:
            cart_items:
              type: array
              items:
                type: object
                properties:
                  id:
                    type: integer
                    example: 1
                  name:
                    type: string
                    example: "10 Cm Electric"
                  price:
                    type: number
                    example: 15.5
                  quantity:
                    type: integer
                    example: 2
                  line_total:
                    type: number
                    example: 31.0
            total_items:
              type: integer
              example: 2
            total_price:
              type: number
              example: 31.0
            category_count:
              type: integer
              example: 1
    """
    cart = Cart.from_session(session)
    return jsonify(cart_to_dict(cart)), 200


@cart_bp.route('/api/cart/add', methods=['POST'])
def add_to_cart():
    """
    Add products to the cart
    ---
    tags:
      - Cart
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            product_id:
              type: integer
              example: 1
            quantity:
              type: integer
              example: 2
            items:
              type: array
              description: "Merge several browse selections at once. Zero quantities are skipped."
              items:
                type: object
                properties:
                  product_id:
                    type: integer
                  quantity:
                    type: integer
    responses:
      201:
        description: Products added to cart
      400:
        description: No quantity selected
      404:
        description: Product not found
    """
    data = request.get_json(silent=True) or {}
    items = data.get("items")
    if items is None:
        items = [{"product_id": data.get("product_id"), "quantity": data.get("quantity", 1)}]

    if not isinstance(items, list) or not items:
        return jsonify({"message": "No items selected"}), 400
    items = [_parse_item(item) for item in items]

    cart = Cart.from_session(session)

    if len(items) == 1:
        product_id, quantity = items[0]
        product = api.get_product_by_id(product_id)
        if not product:
            return jsonify({"message": "Product not found"}), 404
        cart.add(product, quantity)
    else:
        products = {p.id: p for p in api.get_products_by_ids([product_id for product_id, _ in items])}
        selections = []
        for product_id, quantity in items:
            product = products.get(product_id)
            if not product:
                return jsonify({"message": f"Product with id {product_id} not found"}), 404
            if as_quantity(quantity) > 0:
                selections.append((product, quantity))

        if not selections:
            return jsonify({"message": "Please select quantities for the products you want to purchase"}), 400
        cart.merge(selections)

    cart.save(session)
    return jsonify({"message": "Product added to cart", "cart": cart_to_dict(cart)}), 201


@cart_bp.route('/api/cart/update/<int:product_id>', methods=['PUT'])
def update_cart_item(product_id):
    """
    Set the quantity of a cart item (0 removes it)
    ---
    tags:
      - Cart
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - quantity
          properties:
            quantity:
              type: integer
              example: 3
    responses:
      200:
        description: Cart item updated successfully
      404:
        description: Cart item not found
    """
    data = request.get_json(silent=True) or {}
    if "quantity" not in data:
        return jsonify({"message": "Invalid quantity"}), 400

    cart = Cart.from_session(session)
    cart.update(product_id, data["quantity"])
    cart.save(session)

    return jsonify({"message": "Cart item updated successfully", "cart": cart_to_dict(cart)}), 200


@cart_bp.route('/api/cart/change/<int:product_id>', methods=['PATCH'])
def change_cart_item(product_id):
    """
    Step a cart item's quantity up or down
    ---
    tags:
      - Cart
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            delta:
              type: integer
              example: -1
    responses:
      200:
        description: Quantity changed
      404:
        description: Product not found
    """
    data = request.get_json(silent=True) or {}
    cart = Cart.from_session(session)

    line = next((l for l in cart.lines() if l.product.id == product_id), None)
    product = line.product if line else api.get_product_by_id(product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    cart.change_quantity(product, data.get("delta", 1))
    cart.save(session)

    return jsonify({"message": "Cart item updated successfully", "cart": cart_to_dict(cart)}), 200


@cart_bp.route('/api/cart/delete/<int:product_id>', methods=['DELETE'])
def delete_cart_item(product_id):
    """
    Remove a product from the cart
    ---
    tags:
      - Cart
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Cart item deleted successfully
      404:
        description: Cart item not found
    """
    cart = Cart.from_session(session)
    if product_id not in cart:
        return jsonify({"message": "Cart item not found"}), 404

    cart.remove(product_id)
    cart.save(session)

    return jsonify({"message": "Cart item deleted successfully", "cart": cart_to_dict(cart)}), 200


@cart_bp.route('/api/cart/clear', methods=['DELETE'])
def clear_cart():
    """
    Clear all items from the cart
    ---
    tags:
      - Cart
    responses:
      200:
        description: Cart cleared successfully
    """
    cart = Cart.from_session(session)
    cart.clear()
    cart.save(session)

    return jsonify({"message": "Cart cleared successfully"}), 200
