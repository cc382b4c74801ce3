import logging
from core.imports import jsonify, Flask
from core.config import Config
from core.extensions import db, jwt, swagger, cors, bcrypt, migrate, mail
from core.exceptions import ConfigurationError, register_error_handlers
from routes.admin import admin_bp, seed_admin_account
from routes.adminOrders import admin_orders
from routes.marketplace import marketplace_bp, seed_categories, seed_products
from routes.cart import cart_bp
from routes.orders import orders_bp

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    missing = [name for name in app.config.get("REQUIRED_SETTINGS", ()) if not app.config.get(name)]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    db.init_app(app)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(app, supports_credentials=True)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)

    register_error_handlers(app)

    app.register_blueprint(admin_bp)
    app.register_blueprint(admin_orders)
    app.register_blueprint(marketplace_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(orders_bp)

    @app.route('/ping')
    def ping():
        return "Ping received", 200

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()

        seed_admin_account()
        seed_categories()
        seed_products()

    app.run(debug=True)
