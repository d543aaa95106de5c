"""HTTP surface: auth, role gates, status codes and the checkout flow."""
from decimal import Decimal

import pytest

from conftest import PASSWORD
from tillpoint.core.config import settings


def _cart(*lines, method="Cash", customer="Ali", **extra):
    body = {
        "customer_name": customer,
        "payment_method": method,
        "items": [{"product_id": p.id, "quantity": q} for p, q in lines],
    }
    body.update(extra)
    return body


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestAuth:
    def test_signup_then_me(self, client):
        resp = client.post("/auth/signup", json={
            "name": "Cashier", "email": "new@example.com", "password": "long-enough-pw",
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["user"]["role"] == "user"
        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.json()["email"] == "new@example.com"

    def test_signup_rejects_duplicate_and_short_password(self, client, till_user):
        dup = client.post("/auth/signup", json={
            "name": "Again", "email": till_user.email, "password": "long-enough-pw",
        })
        short = client.post("/auth/signup", json={
            "name": "Shorty", "email": "short@example.com", "password": "abc",
        })

        assert dup.status_code == 409
        assert short.status_code == 400

    def test_admin_role_cannot_be_self_assigned(self, client, monkeypatch):
        body = {"name": "Boss", "email": "boss@example.com", "password": "long-enough-pw", "role": "admin"}
        assert client.post("/auth/signup", json=body).status_code == 403

        monkeypatch.setattr(settings, "ALLOW_ADMIN_SIGNUP", True)
        resp = client.post("/auth/signup", json=body)
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "admin"

    def test_login_and_cookie_auth(self, client, till_user):
        bad = client.post("/auth/login", json={"email": till_user.email, "password": "wrong-password"})
        assert bad.status_code == 401
        assert bad.json()["detail"] == "Authentication failed"

        good = client.post("/auth/login", json={"email": till_user.email, "password": PASSWORD})
        assert good.status_code == 200

        client.cookies.clear()
        client.cookies.set("auth-token", good.json()["token"])
        assert client.get("/auth/me").json()["id"] == till_user.id

    def test_missing_or_garbage_token(self, client):
        assert client.get("/products").status_code == 401
        assert client.get("/products", headers={"Authorization": "Bearer nope"}).status_code == 401


class TestProducts:
    def test_only_admins_write(self, client, user_headers):
        resp = client.post("/products", headers=user_headers, json={
            "name": "Shell", "category": "Casing", "price": 4, "stock": 3,
        })
        assert resp.status_code == 403

    def test_crud(self, client, admin_headers):
        created = client.post("/products", headers=admin_headers, json={
            "name": "Flip Key Shell", "category": "Casing", "price": 12.5, "stock": 5, "min_stock": 5,
        })
        assert created.status_code == 201
        product = created.json()
        assert product["status"] == "Low Stock"
        assert product["image"].endswith("text=Flip")

        updated = client.put(f"/products/{product['id']}", headers=admin_headers, json={"stock": 0})
        assert updated.json()["status"] == "Out of Stock"

        low = client.get("/products/low-stock", headers=admin_headers).json()
        assert [p["id"] for p in low] == [product["id"]]

        assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 200
        assert client.put(f"/products/{product['id']}", headers=admin_headers, json={"stock": 1}).status_code == 404

    def test_validation(self, client, admin_headers):
        bad_category = client.post("/products", headers=admin_headers, json={
            "name": "X", "category": "Spaceship", "price": 1, "stock": 1,
        })
        negative = client.post("/products", headers=admin_headers, json={
            "name": "X", "category": "Chip", "price": -1, "stock": 1,
        })
        assert bad_category.status_code == 422
        assert negative.status_code == 400

    def test_search_and_category_filter(self, client, user_headers, products):
        found = client.get("/products", headers=user_headers, params={"search": "battery"}).json()
        assert [p["name"] for p in found] == ["CR2032 Battery"]
        casing = client.get("/products", headers=user_headers, params={"category": "Casing"}).json()
        assert [p["name"] for p in casing] == ["Smart Key Shell"]


class TestSales:
    def test_create_sale(self, client, user_headers, products):
        p1, p2 = products
        resp = client.post("/sales", headers=user_headers, json=_cart((p1, 2), (p2, 1)))

        assert resp.status_code == 201
        sale = resp.json()
        assert sale["invoice_id"] == "INV-0001"
        assert Decimal(sale["total"]) == 25
        assert sale["status"] == "Completed"
        assert client.get(f"/sales/{sale['id']}", headers=user_headers).json()["id"] == sale["id"]

    @pytest.mark.parametrize("body, status, detail", [
        ({"payment_method": "Cash", "items": []}, 400, "No items provided"),
        ({"payment_method": "Cash", "items": [{"product_id": 999, "quantity": 1}]}, 404, "Product not found"),
    ])
    def test_error_mapping(self, client, user_headers, products, body, status, detail):
        resp = client.post("/sales", headers=user_headers, json=body)
        assert resp.status_code == status
        assert resp.json()["detail"] == detail

    def test_insufficient_stock_is_a_conflict(self, client, user_headers, products):
        p1, _ = products
        resp = client.post("/sales", headers=user_headers, json=_cart((p1, 50)))
        assert resp.status_code == 409

    def test_unknown_sale(self, client, user_headers):
        assert client.get("/sales/404", headers=user_headers).status_code == 404
        assert client.put("/sales/404/payment", headers=user_headers,
                          json={"additional_payment": 1}).status_code == 404

    def test_checkout_opens_then_extends_a_tab(self, client, user_headers, products):
        p1, p2 = products
        first = client.post("/sales/checkout", headers=user_headers,
                            json=_cart((p1, 2), method="Half Payment", amount_paid=5))
        assert first.status_code == 201
        assert first.json()["consolidated"] is False

        second = client.post("/sales/checkout", headers=user_headers,
                             json=_cart((p2, 1), method="Half Payment", amount_paid=5))
        assert second.status_code == 200
        body = second.json()
        assert body["consolidated"] is True
        assert body["sale"]["invoice_id"] == first.json()["sale"]["invoice_id"]
        assert Decimal(body["sale"]["total"]) == 25
        assert Decimal(body["sale"]["remaining_balance"]) == 15

        tabs = client.get("/sales/partial-payments", headers=user_headers, params={"search": "INV-0001"}).json()
        assert [t["id"] for t in tabs] == [body["sale"]["id"]]

    def test_checkout_retry_with_same_key(self, client, user_headers, products):
        p1, _ = products
        body = _cart((p1, 2), method="Half Payment", amount_paid=5, idempotency_key="till-2-0001")

        first = client.post("/sales/checkout", headers=user_headers, json=body)
        again = client.post("/sales/checkout", headers=user_headers, json=body)

        assert first.status_code == again.status_code == 201
        assert again.json()["consolidated"] is False
        assert again.json()["sale"]["id"] == first.json()["sale"]["id"]
        assert Decimal(again.json()["sale"]["total"]) == 20
        assert Decimal(again.json()["sale"]["amount_paid"]) == 5
        stock = client.get("/products", headers=user_headers, params={"search": "Smart"}).json()[0]["stock"]
        assert stock == 8

    def test_tab_lifecycle(self, client, user_headers, products):
        p1, p2 = products
        tab = client.post("/sales", headers=user_headers,
                          json=_cart((p1, 2), method="Half Payment", amount_paid=5)).json()

        debt = client.put(f"/sales/{tab['id']}/debt", headers=user_headers, json={"additional_debt": 5})
        assert Decimal(debt.json()["total"]) == 25

        merged = client.put(f"/sales/{tab['id']}/consolidate", headers=user_headers, json={
            "additional_payment": 0, "new_items": [{"product_id": p2.id, "quantity": 1}],
        })
        assert Decimal(merged.json()["remaining_balance"]) == 25

        paid = client.put(f"/sales/{tab['id']}/payment", headers=user_headers, json={"additional_payment": 25})
        assert paid.json()["status"] == "Completed"

        again = client.put(f"/sales/{tab['id']}/payment", headers=user_headers, json={"additional_payment": 1})
        assert again.status_code == 409
        assert client.get("/sales/partial-payments", headers=user_headers).json() == []

    def test_invalid_payment_amount(self, client, user_headers, products):
        p1, _ = products
        tab = client.post("/sales", headers=user_headers,
                          json=_cart((p1, 1), method="Half Payment", amount_paid=1)).json()
        resp = client.put(f"/sales/{tab['id']}/payment", headers=user_headers, json={"additional_payment": 0})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid payment amount"

    def test_invoice_pdf(self, client, user_headers, products):
        p1, _ = products
        sale = client.post("/sales", headers=user_headers, json=_cart((p1, 1))).json()

        resp = client.get(f"/sales/{sale['id']}/invoice", headers=user_headers)

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")


class TestExpenses:
    EXPENSE = {"description": "Shop rent", "amount": 300, "category": "Rent & Utilities",
               "date": "2024-05-01T00:00:00"}

    def test_admin_crud(self, client, admin_headers):
        created = client.post("/expenses", headers=admin_headers, json=self.EXPENSE)
        assert created.status_code == 201
        expense_id = created.json()["id"]

        updated = client.put(f"/expenses/{expense_id}", headers=admin_headers,
                             json={**self.EXPENSE, "amount": 320})
        assert Decimal(updated.json()["amount"]) == 320

        assert [e["id"] for e in client.get("/expenses", headers=admin_headers).json()] == [expense_id]
        assert client.delete(f"/expenses/{expense_id}", headers=admin_headers).status_code == 200
        assert client.delete(f"/expenses/{expense_id}", headers=admin_headers).status_code == 404

    def test_rules(self, client, admin_headers, user_headers):
        assert client.post("/expenses", headers=user_headers, json=self.EXPENSE).status_code == 403
        assert client.post("/expenses", headers=admin_headers,
                           json={**self.EXPENSE, "amount": -5}).status_code == 400
        missing = {k: v for k, v in self.EXPENSE.items() if k != "category"}
        assert client.post("/expenses", headers=admin_headers, json=missing).status_code == 422


class TestAnalytics:
    def test_summary_is_admin_only(self, client, user_headers):
        assert client.get("/analytics/summary", headers=user_headers).status_code == 403

    def test_summary_dashboard_and_outstanding(self, client, admin_headers, products):
        p1, p2 = products
        client.post("/sales", headers=admin_headers, json=_cart((p1, 2)))
        client.post("/sales", headers=admin_headers,
                    json=_cart((p2, 2), method="Half Payment", customer="Sara", amount_paid=4))
        client.post("/expenses", headers=admin_headers, json=TestExpenses.EXPENSE)

        summary = client.get("/analytics/summary", headers=admin_headers).json()
        assert Decimal(summary["total_revenue"]) == 30
        assert Decimal(summary["net_profit"]) == -270
        assert summary["total_customers"] == 2
        assert summary["top_products"][0]["name"] == "Smart Key Shell"

        dashboard = client.get("/analytics/dashboard", headers=admin_headers).json()
        assert dashboard["total_products"] == 2
        assert Decimal(dashboard["today_sales"]) == 30
        assert len(dashboard["recent_sales"]) == 2

        outstanding = client.get("/analytics/outstanding", headers=admin_headers).json()
        assert outstanding["open_tabs"] == 1
        assert Decimal(outstanding["total_outstanding"]) == Decimal(outstanding["average_debt"]) == 6

    def test_summary_window(self, client, admin_headers):
        resp = client.get("/analytics/summary", headers=admin_headers, params={"days": 0})
        assert resp.status_code == 422
        assert client.get("/analytics/summary", headers=admin_headers, params={"days": 7}).status_code == 200
