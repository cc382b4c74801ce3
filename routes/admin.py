import logging
from core.imports import Blueprint, current_app, jsonify, jwt_required, request, get_jwt, create_access_token
from core.extensions import db, bcrypt
from core.exceptions import AppException
from models.userModel import Admins
from routes.marketplace import product_to_dict, category_to_dict, DEFAULT_PRODUCT_IMAGE
from services import api, storage
from services.listing import search_products, sort_products, paginate, dashboard_stats
from services.pricing import format_price

logger = logging.getLogger(__name__)

admin_bp = Blueprint('admin', __name__)


def seed_admin_account():
    """
    Create the admin account named by ADMIN_EMAIL / ADMIN_PASSWORD if missing.
    """
    email = current_app.config.get("ADMIN_EMAIL")
    password = current_app.config.get("ADMIN_PASSWORD")
    if not email or not password:
        logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, no admin account seeded")
        return None

    admin = Admins.query.filter_by(email=email).first()
    if not admin:
        hashed_pw = bcrypt.generate_password_hash(password).decode('utf-8')
        admin = Admins(name="Store Admin", email=email, password=hashed_pw, role="admin")
        db.session.add(admin)
        db.session.commit()
        logger.info(f"Admin account created for {email}")
    return admin


def _product_fields(data):
    return {name: data[name] for name in api.PRODUCT_FIELDS if name in data}


def _category_fields(data):
    return {name: data[name] for name in api.CATEGORY_FIELDS if name in data}


@admin_bp.route('/api/admin/login', methods=['POST'])
def admin_login():
    """
    Admin login
    ---
    tags:
      - Admin
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email: { type: string, example: admin@example.com }
            password: { type: string, example: AdminPass123 }
    responses:
      200:
        description: Access token issued
      400:
        description: Missing credentials
      401:
        description: Invalid credentials
    """
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip()
    password = data.get("password")

    if not all([email, password]):
        return jsonify({"message": "Email and password are required"}), 400

    admin = Admins.query.filter_by(email=email).first()
    if not admin or not bcrypt.check_password_hash(admin.password, password):
        return jsonify({"message": "Invalid email or password"}), 401

    access_token = create_access_token(identity=str(admin.id), additional_claims={"role": admin.role})
    return jsonify({
        "access_token": access_token,
        "admin": {"id": admin.id, "name": admin.name, "email": admin.email}
    }), 200


# =========================
# /api/admin/stats (GET)
# =========================
@admin_bp.route('/api/admin/stats', methods=['GET'])
@jwt_required()
def get_admin_stats():
    """
    Admin: Get store statistics
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    responses:
      200:
        description: Store stats
        schema:
          type: object
          properties:
            total_products: { type: integer, example: 8 }
            total_orders: { type: integer, example: 42 }
            total_revenue: { type: number, example: 1520.5 }
            total_customers: { type: integer, example: 30 }
      403:
        description: Forbidden (not admin)
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    stats = dashboard_stats(api.get_products(), api.get_all_orders())
    stats["formatted_revenue"] = format_price(stats["total_revenue"])
    return jsonify(stats), 200


# =========================
# Products
# =========================
@admin_bp.route('/api/admin/products', methods=['GET'])
@jwt_required()
def admin_list_products():
    """
    Admin: Search, sort and page through products
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - name: search
        in: query
        type: string
        description: Case-insensitive match on name or content
      - name: sort
        in: query
        type: string
        enum: [name, price, stock]
        default: name
      - name: page
        in: query
        type: integer
        default: 1
      - name: include_inactive
        in: query
        type: boolean
        default: false
    responses:
      200:
        description: One page of products
      403:
        description: Forbidden (not admin)
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    include_inactive = request.args.get("include_inactive", "false").lower() in ("1", "true", "yes")
    products = api.get_all_products() if include_inactive else api.get_products()

    products = search_products(products, request.args.get("search", ""))
    products = sort_products(products, request.args.get("sort", "name"))
    page = paginate(products, request.args.get("page", 1), current_app.config.get("ADMIN_PAGE_SIZE", 10))

    return jsonify({
        "products": [product_to_dict(p) for p in page.items],
        "page": page.page,
        "total_pages": page.total_pages,
        "total": page.total
    }), 200


@admin_bp.route('/api/admin/products', methods=['POST'])
@jwt_required()
def admin_create_product():
    """
    Admin: Add a product
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
            - content
            - original_price
            - discount_price
          properties:
            name: { type: string, example: "15 Cm Red" }
            content: { type: string, example: "1 Box (10 Pcs)" }
            description: { type: string }
            image_url: { type: string }
            original_price: { type: number, example: 205 }
            discount_price: { type: number, example: 41 }
            category_id: { type: integer, example: 1 }
            stock_quantity: { type: integer, example: 100 }
    responses:
      201:
        description: Product created
      400:
        description: Validation error
      403:
        description: Forbidden (not admin)
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    data = request.get_json(silent=True) or {}
    fields = _product_fields(data)
    if not fields.get("image_url"):
        fields["image_url"] = DEFAULT_PRODUCT_IMAGE

    product = api.create_product(**fields)
    db.session.commit()
    logger.info(f"Product {product.id} created")

    return jsonify({
        "message": "Product added successfully",
        "product": product_to_dict(product)
    }), 201


@admin_bp.route('/api/admin/products/<int:product_id>', methods=['PUT'])
@jwt_required()
def admin_edit_product(product_id):
    """
    Admin: Edit a product
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Product updated
      400:
        description: Validation error
      404:
        description: Product not found
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    existing = api.get_product_by_id(product_id, active_only=False)
    if not existing:
        return jsonify({"error": "Product not found"}), 404
    old_image = existing.image_url

    data = request.get_json(silent=True) or {}
    product = api.update_product(product_id, **_product_fields(data))
    db.session.commit()

    if old_image and product.image_url != old_image:
        storage.delete_image(old_image)

    return jsonify({
        "message": "Product updated successfully",
        "product": product_to_dict(product)
    }), 200


@admin_bp.route('/api/admin/products/<int:product_id>', methods=['DELETE'])
@jwt_required()
def admin_delete_product(product_id):
    """
    Soft-deletes a product by marking it inactive.
    Past orders keep pointing at it.
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    product = api.deactivate_product(product_id)
    db.session.commit()

    return jsonify({"message": f"Product '{product.name}' has been deactivated."}), 200


@admin_bp.route('/api/admin/upload-image', methods=['POST'])
@jwt_required()
def admin_upload_image():
    """
    Admin: Upload a product image
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - name: file
        in: formData
        type: file
        required: true
    responses:
      200:
        description: Public URL of the uploaded image
      400:
        description: Missing file or type not allowed
      503:
        description: Image storage not configured
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    file = request.files.get('file')
    try:
        url = storage.upload_image(file)
    except AppException:
        raise
    except Exception:
        logger.exception("Image upload failed")
        return jsonify({"error": "Image upload failed"}), 500
    return jsonify({"message": "Image uploaded successfully", "url": url}), 200


# =========================
# Categories
# =========================
@admin_bp.route('/api/admin/categories', methods=['GET'])
@jwt_required()
def admin_list_categories():
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    categories = api.get_categories()
    return jsonify({
        "categories": [category_to_dict(c) for c in categories],
        "count": len(categories)
    }), 200


@admin_bp.route('/api/admin/categories', methods=['POST'])
@jwt_required()
def admin_create_category():
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    data = request.get_json(silent=True) or {}
    category = api.create_category(**_category_fields(data))
    db.session.commit()

    return jsonify({
        "message": "Category created successfully",
        "category": category_to_dict(category)
    }), 201


@admin_bp.route('/api/admin/categories/<int:category_id>', methods=['PUT'])
@jwt_required()
def admin_edit_category(category_id):
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    data = request.get_json(silent=True) or {}
    category = api.update_category(category_id, **_category_fields(data))
    db.session.commit()

    return jsonify({
        "message": "Category updated successfully",
        "category": category_to_dict(category)
    }), 200


@admin_bp.route('/api/admin/categories/<int:category_id>', methods=['DELETE'])
@jwt_required()
def admin_delete_category(category_id):
    """
    Admin: Delete a category
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    description: Products in the category are kept and become uncategorised.
    parameters:
      - name: category_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Category deleted
      404:
        description: Category not found
    """
    claims = get_jwt()
    if claims.get("role") != "admin":
        return jsonify({"error": "Forbidden"}), 403

    detached = api.delete_category(category_id)
    db.session.commit()

    return jsonify({
        "message": f"Category {category_id} deleted successfully",
        "products_uncategorised": detached
    }), 200
