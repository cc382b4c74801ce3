import pytest

from core.extensions import db, mail
from models.orderModels import Order
from models.productModels import Product
from services import api
from services.events import order_feed


class TestCatalogRoutes:
    """Tests for the public catalog endpoints."""

    def test_ping(self, client):
        response = client.get("/ping")
        assert response.status_code == 200

    def test_products_only_active(self, client, catalog):
        api.deactivate_product(catalog["sky_shot"])
        api.commit()

        data = client.get("/api/products").get_json()
        assert data["count"] == 2
        assert {p["name"] for p in data["products"]} == {"10 Cm Electric", "15 Cm Red"}

    def test_product_has_discount_percentage(self, client, catalog):
        data = client.get(f"/api/products/{catalog['red']}").get_json()
        assert data["discount_percentage"] == 80
        assert data["formatted_price"] == "₹41.00"
        assert data["category"] == "Sparklers"

    def test_unknown_product(self, client, catalog):
        assert client.get("/api/products/999").status_code == 404

    def test_filter_by_category(self, client, catalog):
        data = client.get(f"/api/products?category_id={catalog['rockets']}").get_json()
        assert [p["name"] for p in data["products"]] == ["Sky Shot"]

    def test_catalog_grouped_by_category(self, client, catalog):
        loose = api.create_product(name="Mystery Box", content="1 Box", original_price=10, discount_price=5)
        api.commit()

        groups = client.get("/api/catalog").get_json()["groups"]

        assert [g["category"]["name"] if g["category"] else None for g in groups] == ["Sparklers", "Rockets", None]
        assert len(groups[0]["products"]) == 2
        assert groups[2]["products"][0]["id"] == loose.id

    def test_categories(self, client, catalog):
        data = client.get("/api/categories").get_json()
        assert [c["name"] for c in data["categories"]] == ["Sparklers", "Rockets"]


class TestCartRoutes:
    """Tests for the session cart endpoints."""

    def test_empty_cart(self, client, catalog):
        data = client.get("/api/cart").get_json()
        assert data["cart_items"] == []
        assert data["total_items"] == 0

    def test_add_merges_quantities(self, client, catalog):
        client.post("/api/cart/add", json={"product_id": catalog["electric"], "quantity": 2})
        response = client.post("/api/cart/add", json={"product_id": catalog["electric"], "quantity": 1})

        assert response.status_code == 201
        cart = client.get("/api/cart").get_json()
        assert len(cart["cart_items"]) == 1
        assert cart["total_items"] == 3
        assert cart["total_price"] == pytest.approx(46.5)
        assert cart["formatted_total"] == "₹46.50"
        assert cart["category_count"] == 1

    def test_add_many_items(self, client, catalog):
        response = client.post("/api/cart/add", json={"items": [
            {"product_id": catalog["electric"], "quantity": 2},
            {"product_id": catalog["red"], "quantity": 1},
            {"product_id": catalog["sky_shot"], "quantity": 0},
        ]})

        assert response.status_code == 201
        cart = response.get_json()["cart"]
        assert cart["total_price"] == pytest.approx(72.0)
        assert cart["unique_products"] == 2

    def test_add_nothing_selected(self, client, catalog):
        response = client.post("/api/cart/add", json={"items": [
            {"product_id": catalog["electric"], "quantity": 0},
            {"product_id": catalog["red"], "quantity": 0},
        ]})
        assert response.status_code == 400

    def test_add_many_items_with_string_ids(self, client, catalog):
        response = client.post("/api/cart/add", json={"items": [
            {"product_id": str(catalog["electric"]), "quantity": 1},
            {"product_id": str(catalog["red"]), "quantity": 1},
        ]})

        assert response.status_code == 201
        assert response.get_json()["cart"]["unique_products"] == 2

    @pytest.mark.parametrize("items", [
        [5],
        ["abc", {"product_id": 1, "quantity": 1}],
        [{"product_id": "abc", "quantity": 1}],
        [{"product_id": 1.5, "quantity": 1}, {"product_id": 2, "quantity": 1}],
        [{"quantity": 1}],
    ])
    def test_add_malformed_items(self, client, catalog, items):
        response = client.post("/api/cart/add", json={"items": items})

        assert response.status_code == 400
        assert "error" in response.get_json()
        assert client.get("/api/cart").get_json()["cart_items"] == []

    def test_change_rejects_fractional_delta(self, client, catalog):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 2})

        response = client.patch(f"/api/cart/change/{catalog['red']}", json={"delta": 1.5})

        assert response.status_code == 400
        assert client.get("/api/cart").get_json()["total_items"] == 2

    def test_add_zero_quantity(self, client, catalog):
        response = client.post("/api/cart/add", json={"product_id": catalog["electric"], "quantity": 0})
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_add_inactive_product(self, client, catalog):
        api.deactivate_product(catalog["red"])
        api.commit()
        response = client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        assert response.status_code == 404

    def test_update_and_remove_with_zero(self, client, catalog):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})

        response = client.put(f"/api/cart/update/{catalog['red']}", json={"quantity": 4})
        assert response.get_json()["cart"]["total_items"] == 4

        response = client.put(f"/api/cart/update/{catalog['red']}", json={"quantity": 0})
        assert response.status_code == 200
        assert response.get_json()["cart"]["cart_items"] == []

        # repeated zero-set is a no-op
        response = client.put(f"/api/cart/update/{catalog['red']}", json={"quantity": 0})
        assert response.status_code == 200

    def test_update_item_not_in_cart(self, client, catalog):
        response = client.put(f"/api/cart/update/{catalog['red']}", json={"quantity": 2})
        assert response.status_code == 404

    def test_change_steps_quantity(self, client, catalog):
        client.patch(f"/api/cart/change/{catalog['red']}", json={"delta": 1})
        client.patch(f"/api/cart/change/{catalog['red']}", json={"delta": 1})
        response = client.patch(f"/api/cart/change/{catalog['red']}", json={"delta": -1})
        assert response.get_json()["cart"]["total_items"] == 1

        response = client.patch(f"/api/cart/change/{catalog['red']}", json={"delta": -1})
        assert response.get_json()["cart"]["cart_items"] == []

    def test_delete_and_clear(self, client, catalog):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        client.post("/api/cart/add", json={"product_id": catalog["electric"], "quantity": 1})

        assert client.delete(f"/api/cart/delete/{catalog['red']}").status_code == 200
        assert client.delete(f"/api/cart/delete/{catalog['red']}").status_code == 404

        assert client.delete("/api/cart/clear").status_code == 200
        assert client.get("/api/cart").get_json()["total_items"] == 0

    def test_deactivated_product_drops_out_of_cart(self, client, catalog):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        api.deactivate_product(catalog["red"])
        api.commit()

        assert client.get("/api/cart").get_json()["cart_items"] == []


class TestCheckoutRoute:
    """Tests for POST /api/checkout and order history."""

    def test_empty_cart_rejected_without_writes(self, client, catalog, customer_details):
        response = client.post("/api/checkout", json=customer_details)

        assert response.status_code == 400
        assert "empty" in response.get_json()["error"]
        assert Order.query.count() == 0

    def test_missing_details_rejected(self, client, catalog, customer_details):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        customer_details["address"] = "   "

        response = client.post("/api/checkout", json=customer_details)

        assert response.status_code == 400
        assert Order.query.count() == 0
        assert client.get("/api/cart").get_json()["total_items"] == 1

    def test_successful_checkout(self, client, catalog, customer_details):
        client.post("/api/cart/add", json={"product_id": catalog["electric"], "quantity": 3})
        subscriber = order_feed.subscribe()
        try:
            with mail.record_messages() as outbox:
                response = client.post("/api/checkout", json=customer_details)
        finally:
            order_feed.unsubscribe(subscriber)

        assert response.status_code == 201
        data = response.get_json()
        assert data["total_amount"] == pytest.approx(46.5)
        assert data["total_items"] == 3
        assert "₹46.50" in data["message"]

        assert client.get("/api/cart").get_json()["cart_items"] == []
        assert db.session.get(Product, catalog["electric"]).stock_quantity == 97

        event = subscriber.get_nowait()
        assert event == {"event": "INSERT", "order_id": data["order_id"], "count": 1}

        assert len(outbox) == 1
        assert outbox[0].recipients == ["priya@example.com"]

    def test_customer_order_history(self, client, catalog, customer_details):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 2})
        client.post("/api/checkout", json=customer_details)

        data = client.get("/api/orders?email=priya@example.com").get_json()
        assert data["count"] == 1
        order = data["orders"][0]
        assert order["status"] == "pending"
        assert order["order_items"][0]["product_name"] == "15 Cm Red"
        assert order["order_items"][0]["total_price"] == 82.0

    def test_order_history_hides_contact_details(self, app, client, catalog, customer_details):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        client.post("/api/checkout", json=customer_details)

        other_client = app.test_client()
        customer = other_client.get("/api/orders?email=priya@example.com").get_json()["orders"][0]["customer"]

        assert customer["name"] == "Priya Raman"
        assert customer["email"] == "priya@example.com"
        assert "phone" not in customer
        assert "address" not in customer

    def test_admin_order_detail_keeps_contact_details(self, client, catalog, customer_details, admin_headers):
        client.post("/api/cart/add", json={"product_id": catalog["red"], "quantity": 1})
        order_id = client.post("/api/checkout", json=customer_details).get_json()["order_id"]

        customer = client.get(f"/api/admin/orders/{order_id}", headers=admin_headers).get_json()["customer"]

        assert customer["phone"] == "9876543210"
        assert customer["address"] == "12 Gandhi Road, Sivakasi"

    def test_order_history_needs_email(self, client):
        assert client.get("/api/orders").status_code == 400
