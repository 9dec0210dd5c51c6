import unittest
from decimal import Decimal

from sqlalchemy import func, select

from inventory_api.models import Sales
from tests.support import ApiTestCase


class ProductsApiTest(ApiTestCase):
    def create(self, **body):
        body.setdefault("name", "Laptop")
        body.setdefault("price", 900)
        response = self.client.post("/api/products", json=body, headers=self.staff_headers)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_create_then_fetch(self):
        created = self.create(name="Laptop", sku="LAP-1", category="Electronics", price="899.99", stock=12)
        self.assertEqual(created["price"], "899.99")
        self.assertEqual(created["reorder_level"], 10)

        response = self.client.get(f"/api/products/{created['id']}", headers=self.staff_headers)
        self.assertEqual(response.status_code, 200)
        fetched = response.json()
        self.assertEqual(fetched["name"], "Laptop")
        self.assertEqual(fetched["sku"], "LAP-1")
        self.assertEqual(fetched["stock"], 12)

    def test_create_requires_name_and_price(self):
        response = self.client.post("/api/products", json={"stock": 5}, headers=self.staff_headers)
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["kind"], "validation_error")
        self.assertIn("errors", body["details"])

    def test_out_of_range_integers_are_rejected(self):
        for field in ("stock", "reorder_level"):
            response = self.client.post(
                "/api/products",
                json={"name": "Cable", "price": 5, field: 10**20},
                headers=self.staff_headers,
            )
            self.assertEqual(response.status_code, 400, field)
            self.assertEqual(response.json()["kind"], "validation_error")

        created = self.create(stock=4)
        response = self.client.put(
            f"/api/products/{created['id']}", json={"stock": 2**31}, headers=self.staff_headers
        )
        self.assertEqual(response.status_code, 400)
        fetched = self.client.get(f"/api/products/{created['id']}", headers=self.staff_headers)
        self.assertEqual(fetched.json()["stock"], 4)

    def test_out_of_range_product_id_is_rejected(self):
        for path in ("/api/products/100000000000000000000", "/api/products/0"):
            response = self.client.get(path, headers=self.staff_headers)
            self.assertEqual(response.status_code, 400, path)
            self.assertEqual(response.json()["kind"], "validation_error")
        response = self.client.delete("/api/products/100000000000000000000", headers=self.owner_headers)
        self.assertEqual(response.status_code, 400)

    def test_negative_stock_is_rejected(self):
        response = self.client.post(
            "/api/products",
            json={"name": "Cable", "price": 5, "stock": -1},
            headers=self.staff_headers,
        )
        self.assertEqual(response.status_code, 400)

    def test_duplicate_sku_conflicts(self):
        self.create(name="Laptop", sku="LAP-1")
        response = self.client.post(
            "/api/products",
            json={"name": "Other", "price": 1, "sku": "LAP-1"},
            headers=self.staff_headers,
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["kind"], "conflict")

    def test_list_is_newest_first(self):
        first = self.create(name="First")
        second = self.create(name="Second")
        response = self.client.get("/api/products", headers=self.staff_headers)
        self.assertEqual([p["id"] for p in response.json()], [second["id"], first["id"]])

    def test_partial_update_keeps_other_fields(self):
        created = self.create(name="Laptop", category="Electronics", stock=12)
        response = self.client.put(
            f"/api/products/{created['id']}",
            json={"stock": 3, "id": 999, "created_at": "2000-01-01T00:00:00Z"},
            headers=self.staff_headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        updated = response.json()
        self.assertEqual(updated["id"], created["id"])
        self.assertEqual(updated["stock"], 3)
        self.assertEqual(updated["name"], "Laptop")
        self.assertEqual(updated["category"], "Electronics")
        self.assertEqual(updated["created_at"], created["created_at"])

    def test_update_rejects_null_required_field(self):
        created = self.create()
        response = self.client.put(
            f"/api/products/{created['id']}", json={"name": None}, headers=self.staff_headers
        )
        self.assertEqual(response.status_code, 400)

    def test_update_unknown_product(self):
        response = self.client.put("/api/products/404", json={"stock": 1}, headers=self.staff_headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Product not found")

    def test_low_stock_alerts(self):
        self.create(name="Plenty", stock=50, reorder_level=10)
        edge = self.create(name="Edge", stock=10, reorder_level=10)
        empty = self.create(name="Empty", stock=0, reorder_level=5)
        response = self.client.get("/api/products/alerts/low-stock", headers=self.staff_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([p["id"] for p in response.json()], [empty["id"], edge["id"]])

    def test_category_stats(self):
        self.create(name="Laptop", category="Electronics", price=1000, stock=2)
        self.create(name="Phone", category="Electronics", price=500, stock=3)
        self.create(name="Desk", category="Furniture", price=250, stock=1)
        response = self.client.get("/api/products/stats/by-category", headers=self.staff_headers)
        self.assertEqual(response.status_code, 200)
        stats = response.json()
        self.assertEqual(stats[0]["category"], "Electronics")
        self.assertEqual(stats[0]["total_products"], 2)
        self.assertEqual(stats[0]["total_stock"], 5)
        self.assertEqual(Decimal(stats[0]["avg_price"]), Decimal("750.00"))
        self.assertEqual(stats[1]["category"], "Furniture")

    def test_delete_requires_owner(self):
        created = self.create()
        response = self.client.delete(f"/api/products/{created['id']}", headers=self.staff_headers)
        self.assertEqual(response.status_code, 403)
        body = response.json()
        self.assertEqual(body["details"]["required"], ["owner"])
        self.assertEqual(body["details"]["current"], "staff")

    def test_delete_cascades_to_sales(self):
        created = self.create(stock=5)
        sale = self.client.post(
            "/api/sales",
            json={"product_id": created["id"], "quantity_sold": 1, "sale_price": 900},
            headers=self.staff_headers,
        )
        self.assertEqual(sale.status_code, 201, sale.text)

        response = self.client.delete(f"/api/products/{created['id']}", headers=self.owner_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Product deleted successfully"})

        missing = self.client.get(f"/api/products/{created['id']}", headers=self.staff_headers)
        self.assertEqual(missing.status_code, 404)
        db = self.Session()
        try:
            self.assertEqual(db.execute(select(func.count(Sales.id))).scalar_one(), 0)
        finally:
            db.close()

    def test_requires_token(self):
        response = self.client.get("/api/products")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["kind"], "token_missing")

    def test_rejects_garbage_token(self):
        response = self.client.get("/api/products", headers={"Authorization": "Bearer nope"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["kind"], "token_invalid")


if __name__ == "__main__":
    unittest.main()
