import logging
from core.imports import Blueprint, jsonify, request
from core.extensions import db
from models.productModels import Category, Product
from services import api
from services.pricing import discount_percentage, format_price

logger = logging.getLogger(__name__)

marketplace_bp = Blueprint('marketplace', __name__)

DEFAULT_PRODUCT_IMAGE = "https://images.pexels.com/photos/1387174/pexels-photo-1387174.jpeg"

SEED_CATEGORIES = [
    {"name": "Sparklers", "description": "Hand-held sparklers for every celebration", "display_order": 1},
    {"name": "Rockets", "description": "Sky rockets and whistling shots", "display_order": 2},
    {"name": "Gift Boxes", "description": "Assorted family packs", "display_order": 3},
    {"name": "Flower Pots", "description": "Ground fountains in every colour", "display_order": 4},
]

SEED_PRODUCTS = [
    ("10 Cm Electric", 29.0, 15.5),
    ("10 Cm Colour", 34.0, 18.5),
    ("12 Cm Electric", 42.0, 19.0),
    ("12 Cm Colour", 105.0, 21.0),
    ("15 Cm Electric", 150.0, 30.0),
    ("15 Cm Colour", 155.0, 31.0),
    ("15 Cm Green", 190.0, 38.0),
    ("15 Cm Red", 205.0, 41.0),
]


def seed_categories():
    created = []
    for data in SEED_CATEGORIES:
        if not Category.query.filter_by(name=data["name"]).first():
            db.session.add(Category(**data))
            created.append(data["name"])
    db.session.commit()
    if created:
        logger.info(f"Categories created: {', '.join(created)}")
    else:
        logger.info("Categories already exist.")


def seed_products():
    category = Category.query.filter_by(name="Sparklers").first()
    if not category:
        logger.warning("Sparklers category not found. Run seed_categories() first.")
        return

    for name, original_price, discount_price in SEED_PRODUCTS:
        if Product.query.filter_by(name=name).first():
            logger.info(f"Product already exists: {name}")
            continue
        api.create_product(
            name=name,
            content="1 Box (10 Pcs)",
            image_url=DEFAULT_PRODUCT_IMAGE,
            original_price=original_price,
            discount_price=discount_price,
            category_id=category.id,
            stock_quantity=100,
        )
        logger.info(f"Product added: {name}")
    db.session.commit()


def category_to_dict(category):
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "image_url": category.image_url,
        "display_order": category.display_order,
    }


def product_to_dict(product):
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "content": product.content,
        "image_url": product.image_url,
        "original_price": product.original_price,
        "discount_price": product.discount_price,
        "discount_percentage": discount_percentage(product.original_price, product.discount_price),
        "formatted_price": format_price(product.discount_price),
        "category_id": product.category_id,
        "category": product.category.name if product.category else None,
        "stock_quantity": product.stock_quantity,
        "is_active": product.is_active,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }


@marketplace_bp.route('/api/categories', methods=['GET'])
def list_categories():
    """
    List product categories
    ---
    tags:
      - Catalog
    responses:
      200:
        description: Categories ordered by display order, then name
    """
    categories = api.get_categories()
    return jsonify({
        "categories": [category_to_dict(c) for c in categories],
        "count": len(categories)
    }), 200


@marketplace_bp.route('/api/products', methods=['GET'])
def list_products():
    """
    List active products
    ---
    tags:
      - Catalog
    parameters:
      - name: category_id
        in: query
        type: integer
        required: false
        description: Only products in this category
    responses:
      200:
        description: Active products, newest first
    """
    products = api.get_products()
    category_id = request.args.get("category_id", type=int)
    if category_id is not None:
        products = [p for p in products if p.category_id == category_id]

    return jsonify({
        "products": [product_to_dict(p) for p in products],
        "count": len(products)
    }), 200


@marketplace_bp.route('/api/products/<int:product_id>', methods=['GET'])
def product_details(product_id):
    """
    Get details of a specific product by ID
    ---
    tags:
      - Catalog
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
        description: The ID of the product to fetch
    responses:
      200:
        description: Product details
      404:
        description: Product not found
    """
    product = api.get_product_by_id(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404

    return jsonify(product_to_dict(product)), 200


@marketplace_bp.route('/api/catalog', methods=['GET'])
def catalog():
    """
    Active products grouped by category
    ---
    tags:
      - Catalog
    responses:
      200:
        description: One group per category that has products, uncategorised products last
        schema:
          type: object
          properties:
            groups:
              type: array
              items:
                type: object
                properties:
                  category:
                    type: object
                  products:
                    type: array
                    items:
                      type: object
    """
    products = api.get_products()
    by_category = {}
    for product in products:
        by_category.setdefault(product.category_id, []).append(product)

    groups = []
    for category in api.get_categories():
        if category.id in by_category:
            groups.append({
                "category": category_to_dict(category),
                "products": [product_to_dict(p) for p in by_category[category.id]]
            })
    if None in by_category:
        groups.append({
            "category": None,
            "products": [product_to_dict(p) for p in by_category[None]]
        })

    return jsonify({"groups": groups, "count": len(products)}), 200
