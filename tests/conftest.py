import pytest

from core.config import TestConfig
from core.extensions import db
from main import create_app
from models.productModels import Category, Product
from routes.admin import seed_admin_account


@pytest.fixture
def app():
    """Application bound to a fresh in-memory database."""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    """Two categories and three products; returns ids by short name."""
    sparklers = Category(name="Sparklers", display_order=1)
    rockets = Category(name="Rockets", display_order=2)
    db.session.add_all([sparklers, rockets])
    db.session.flush()

    electric = Product(
        name="10 Cm Electric", content="1 Box (10 Pcs)", original_price=29.0,
        discount_price=15.5, stock_quantity=100, category_id=sparklers.id,
    )
    red = Product(
        name="15 Cm Red", content="1 Box (10 Pcs)", original_price=205.0,
        discount_price=41.0, stock_quantity=5, category_id=sparklers.id,
    )
    sky_shot = Product(
        name="Sky Shot", content="1 Pc", original_price=50.0,
        discount_price=40.0, stock_quantity=2, category_id=rockets.id,
    )
    db.session.add_all([electric, red, sky_shot])
    db.session.commit()

    return {
        "sparklers": sparklers.id,
        "rockets": rockets.id,
        "electric": electric.id,
        "red": red.id,
        "sky_shot": sky_shot.id,
    }


@pytest.fixture
def admin_headers(app, client):
    seed_admin_account()
    response = client.post("/api/admin/login", json={
        "email": TestConfig.ADMIN_EMAIL,
        "password": TestConfig.ADMIN_PASSWORD,
    })
    token = response.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_details():
    return {
        "name": "Priya Raman",
        "email": "priya@example.com",
        "phone": "9876543210",
        "address": "12 Gandhi Road, Sivakasi",
    }
