"""HTTP tests through the Flask test client."""

import pytest

from app import create_app
from config import TestConfig
from models import db, Product, User

PASSWORD = "Secret#123"


def _product_body(**overrides):
    body = {
        "name": "Dino Party Bag",
        "description": "Dinosaur themed party bag",
        "price": 4.99,
        "stock": 10,
        "category": "Birthdays",
    }
    body.update(overrides)
    return body


class TestEnvelope:
    def test_index(self, client):
        assert client.get("/").status_code == 200

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        data = response.get_json()
        assert data == {
            "success": False,
            "message": "Not Found",
            "object": None,
            "errors": ["Api Route Not Found!"],
        }

    def test_wrong_method(self, client):
        response = client.patch("/products")
        assert response.status_code == 405
        assert response.get_json()["success"] is False

    def test_wrong_method_on_collections(self, client):
        assert client.delete("/products").status_code == 405
        assert client.put("/orders").status_code == 405

    def test_unexpected_error_is_generic(self, client, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr("catalog.list_products", explode)
        response = client.get("/products")

        assert response.status_code == 500
        body = response.get_json()
        assert body["message"] == "Something went wrong"
        assert "secret internals" not in str(body)


class TestRateLimit:
    @pytest.fixture
    def limited_client(self, tmp_path):
        class Config(TestConfig):
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'limited.db'}"
            RATELIMIT_ENABLED = True
            RATELIMIT_DEFAULT = "2 per minute"

        app = create_app(Config)
        yield app.test_client()
        with app.app_context():
            db.session.remove()
            db.engine.dispose()

    def test_requests_over_the_limit_get_429(self, limited_client):
        assert limited_client.get("/").status_code == 200
        assert limited_client.get("/").status_code == 200

        response = limited_client.get("/")

        assert response.status_code == 429
        assert response.get_json() == {
            "success": False,
            "message": "You have exceeded the number of allowed requests. Please try again later.",
            "object": None,
            "errors": ["Rate limit exceeded"],
        }

    def test_disabled_under_test_config(self, client):
        for _ in range(5):
            assert client.get("/").status_code == 200


class TestAuthEndpoints:
    def test_register_then_login(self, client):
        response = client.post("/auth/register", json={
            "username": "carol", "email": "carol@example.com", "password": PASSWORD,
        })
        assert response.status_code == 201
        body = response.get_json()
        assert body["success"] is True
        assert body["message"] == "Registration successful."
        assert set(body["object"]) == {"id", "username", "email"}

        response = client.post("/auth/login", json={"email": "carol@example.com", "password": PASSWORD})
        assert response.status_code == 200
        assert response.get_json()["object"]["token"]

    def test_register_duplicate_email(self, client, customer):
        response = client.post("/auth/register", json={
            "username": "mallory", "email": "alice@example.com", "password": PASSWORD,
        })
        assert response.status_code == 400
        body = response.get_json()
        assert body["message"] == "Conflict"
        assert body["errors"] == ["Email address is already registered."]

    def test_register_validation(self, client):
        response = client.post("/auth/register", json={
            "username": "no spaces!", "email": "not-an-email", "password": "weak",
        })
        assert response.status_code == 422
        assert len(response.get_json()["errors"]) == 3

    def test_register_without_body(self, client):
        response = client.post("/auth/register", data="nope", content_type="text/plain")
        assert response.status_code == 422

    def test_login_bad_password(self, client, customer):
        response = client.post("/auth/login", json={"email": "alice@example.com", "password": "Wrong#999"})
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid email or password."


class TestProductEndpoints:
    def test_list_is_public_and_paginated(self, client, make_product):
        for i in range(3):
            make_product(name=f"Bag {i}")

        response = client.get("/products?page=1&limit=2")

        assert response.status_code == 200
        body = response.get_json()
        assert body["pageNumber"] == 1
        assert body["pageSize"] == 2
        assert body["totalSize"] == 3
        assert body["totalPages"] == 2
        assert len(body["object"]) == 2

    def test_list_defaults(self, client, make_product):
        make_product()
        body = client.get("/products").get_json()
        assert body["pageNumber"] == 1
        assert body["pageSize"] == 10

    def test_list_search(self, client, make_product):
        make_product(name="Unicorn Bag")
        make_product(name="Pirate Bag")
        body = client.get("/products?search=uni").get_json()
        assert [p["name"] for p in body["object"]] == ["Unicorn Bag"]

    def test_list_bad_paging(self, client):
        response = client.get("/products?page=0&limit=abc")
        assert response.status_code == 400
        assert len(response.get_json()["errors"]) == 2

    def test_detail(self, client, make_product):
        pid = make_product(price="9.99").id
        body = client.get(f"/products/{pid}").get_json()
        assert body["object"]["price"] == "9.99"
        assert client.get("/products/9999").status_code == 404

    def test_create_requires_token(self, client):
        response = client.post("/products", json=_product_body())
        assert response.status_code == 401

    def test_create_requires_admin(self, client, customer_headers):
        response = client.post("/products", json=_product_body(), headers=customer_headers)
        assert response.status_code == 403

    def test_create_as_admin(self, client, admin, admin_headers):
        response = client.post("/products", json=_product_body(), headers=admin_headers)
        assert response.status_code == 201
        obj = response.get_json()["object"]
        assert obj["price"] == "4.99"
        assert obj["userId"] == admin.id

    def test_create_validation(self, client, admin_headers):
        response = client.post(
            "/products", json=_product_body(price=-1, stock=1.5, name="ab"), headers=admin_headers
        )
        assert response.status_code == 400
        assert len(response.get_json()["errors"]) == 3

    def test_create_rejects_three_decimal_price(self, client, admin_headers):
        response = client.post("/products", json=_product_body(price=1.234), headers=admin_headers)
        assert response.status_code == 400

    def test_create_rejects_string_price(self, client, admin_headers):
        response = client.post("/products", json=_product_body(price="4.99"), headers=admin_headers)
        assert response.status_code == 400
        assert response.get_json()["errors"] == ["Price must be a number."]

    def test_create_rejects_out_of_range_numbers(self, client, admin_headers):
        response = client.post(
            "/products", json=_product_body(stock=2**63, price=100000000), headers=admin_headers
        )
        assert response.status_code == 400
        assert len(response.get_json()["errors"]) == 2
        assert Product.query.count() == 0

    def test_huge_ids_are_not_found(self, client, admin_headers):
        assert client.get(f"/products/{2**64}").status_code == 404
        assert client.put(f"/products/{2**64}", json={"stock": 1}, headers=admin_headers).status_code == 404
        assert client.delete(f"/products/{2**64}", headers=admin_headers).status_code == 404

    def test_huge_page_is_rejected(self, client):
        assert client.get(f"/products?page={2**63}").status_code == 400

    def test_partial_update(self, client, admin_headers, make_product):
        pid = make_product(name="Old Name", stock=3).id
        response = client.put(f"/products/{pid}", json={"stock": 7}, headers=admin_headers)
        assert response.status_code == 200
        obj = response.get_json()["object"]
        assert obj["stock"] == 7
        assert obj["name"] == "Old Name"

    def test_update_empty_body(self, client, admin_headers, make_product):
        pid = make_product().id
        response = client.put(f"/products/{pid}", json={}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_missing(self, client, admin_headers):
        response = client.put("/products/9999", json={"stock": 1}, headers=admin_headers)
        assert response.status_code == 404

    def test_delete(self, client, admin_headers, make_product):
        pid = make_product().id
        assert client.delete(f"/products/{pid}", headers=admin_headers).status_code == 200
        assert client.delete(f"/products/{pid}", headers=admin_headers).status_code == 404


class TestOrderEndpoints:
    def test_place_order(self, client, customer_headers, make_product):
        pid = make_product(price="2.50", stock=5).id

        response = client.post("/orders", json=[{"productId": pid, "quantity": 2}], headers=customer_headers)

        assert response.status_code == 201
        obj = response.get_json()["object"]
        assert obj["status"] == "pending"
        assert obj["totalPrice"] == "5.00"
        assert obj["items"][0]["productId"] == pid
        assert obj["items"][0]["unitPrice"] == "2.50"
        assert db.session.get(Product, pid).stock == 3

    def test_place_order_with_description(self, client, customer_headers, make_product):
        pid = make_product(stock=5).id
        response = client.post(
            "/orders",
            json={"items": [{"productId": pid, "quantity": 1}], "description": "For Sam"},
            headers=customer_headers,
        )
        assert response.status_code == 201
        assert response.get_json()["object"]["description"] == "For Sam"

    def test_insufficient_stock(self, client, customer_headers, make_product):
        pid = make_product(name="Cupcake", stock=5).id
        response = client.post("/orders", json=[{"productId": pid, "quantity": 6}], headers=customer_headers)
        assert response.status_code == 400
        assert "Only 5 units of Cupcake available" in response.get_json()["message"]

    def test_unknown_product(self, client, customer_headers):
        response = client.post("/orders", json=[{"productId": 404, "quantity": 1}], headers=customer_headers)
        assert response.status_code == 404

    def test_huge_product_id_is_not_found(self, client, customer_headers, make_product):
        pid = make_product(stock=5).id
        response = client.post(
            "/orders",
            json=[{"productId": pid, "quantity": 1}, {"productId": 2**63, "quantity": 1}],
            headers=customer_headers,
        )
        assert response.status_code == 404
        assert db.session.get(Product, pid).stock == 5

    def test_huge_quantity_is_rejected(self, client, customer_headers, make_product):
        pid = make_product(stock=5).id
        response = client.post("/orders", json=[{"productId": pid, "quantity": 2**63}], headers=customer_headers)
        assert response.status_code == 422

    def test_requires_token(self, client):
        assert client.post("/orders", json=[{"productId": 1, "quantity": 1}]).status_code == 401

    def test_bad_token(self, client):
        headers = {"Authorization": "Bearer nonsense"}
        response = client.post("/orders", json=[{"productId": 1, "quantity": 1}], headers=headers)
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid token."

    def test_validation(self, client, customer_headers):
        assert client.post("/orders", json=[], headers=customer_headers).status_code == 422
        response = client.post("/orders", json=[{"productId": 1, "quantity": 0}], headers=customer_headers)
        assert response.status_code == 422

    def test_history(self, client, customer, customer_headers, make_product):
        pid = make_product(stock=5).id
        client.post("/orders", json=[{"productId": pid, "quantity": 1}], headers=customer_headers)
        client.post("/orders", json=[{"productId": pid, "quantity": 2}], headers=customer_headers)

        response = client.get("/orders", headers=customer_headers)

        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "Found 2 orders."
        assert body["object"][0]["id"] > body["object"][1]["id"]

    def test_persistence_failure_is_generic(self, client, customer_headers, make_product, monkeypatch):
        from sqlalchemy.exc import OperationalError

        pid = make_product(stock=5).id

        def boom(*args, **kwargs):
            raise OperationalError("UPDATE products", {}, Exception("database is locked"))

        monkeypatch.setattr("orders._check_stock", boom)
        response = client.post("/orders", json=[{"productId": pid, "quantity": 1}], headers=customer_headers)

        assert response.status_code == 500
        body = response.get_json()
        assert body["message"] == "An internal server error occurred while placing the order."
        assert "database is locked" not in str(body)
        assert db.session.get(Product, pid).stock == 5


class TestCreateAdminCommand:
    def test_creates_admin(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "create-admin", "--username", "boss", "--email", "Boss@Example.com", "--password", PASSWORD,
        ])
        assert result.exit_code == 0, result.output
        user = User.query.filter_by(username="boss").one()
        assert user.role == "admin"
        assert user.email == "boss@example.com"

    def test_rejects_duplicate(self, app, admin):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "create-admin", "--username", "root", "--email", "x@example.com", "--password", PASSWORD,
        ])
        assert result.exit_code != 0
        assert "Username is already taken." in result.output
