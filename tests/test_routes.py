import unittest

from tests.support import ADMIN_PASSWORD, StockroomTestCase

ADMIN = {"X-Admin-Password": ADMIN_PASSWORD}


class TestShopRoutes(StockroomTestCase):

    def setUp(self):
        super().setUp()
        self.client = self.app.test_client()

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["status"], "healthy")

    def test_config_and_pay_methods(self):
        resp = self.client.get("/api/config")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["store_name"], "LIVE STOCK")

        resp = self.client.get("/api/pay-methods")
        keys = [m["key"] for m in resp.get_json()["methods"]]
        self.assertEqual(keys, ["BTC", "LTC", "USDT_BEP20", "BNB", "USDT_ERC20"])

    def test_products(self):
        self.add_product("epic", codes=["A", "B"])
        resp = self.client.get("/api/products")
        self.assertEqual(resp.status_code, 200)
        products = resp.get_json()["products"]
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0]["slug"], "epic")
        self.assertEqual(products[0]["stock"], 2)

    def test_create_and_get_order(self):
        self.add_product("epic", price="1.00", codes=["A", "B", "C"])
        resp = self.client.post("/api/order", json={
            "product_slug": "epic",
            "qty": 2,
            "pay_method": "LTC",
            "txid": "0xabc",
            "contact": "@me",
        })
        self.assertEqual(resp.status_code, 201)
        order_id = resp.get_json()["order_id"]

        resp = self.client.get(f"/api/order/{order_id}")
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertEqual(data["order"]["status"], "PENDING")
        self.assertEqual(data["order"]["total"], 2.0)
        self.assertEqual(data["codes"], [])
        self.assertEqual(data["remaining"], 3)

    def test_create_order_errors(self):
        self.add_product("epic", codes=["A"])

        resp = self.client.post("/api/order", json={"product_slug": "epic"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error_code"], "VALIDATION_ERROR")

        resp = self.client.post("/api/order", json={
            "product_slug": "ghost", "qty": 1, "pay_method": "BTC", "txid": "t",
        })
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["error_code"], "NOT_FOUND")

        resp = self.client.post("/api/order", json={
            "product_slug": "epic", "qty": 1, "pay_method": "XMR", "txid": "t",
        })
        self.assertEqual(resp.status_code, 400)

    def test_unknown_order(self):
        resp = self.client.get("/api/order/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.get_json()["success"])


class TestAdminRoutes(StockroomTestCase):

    def setUp(self):
        super().setUp()
        self.client = self.app.test_client()

    def test_requires_password(self):
        resp = self.client.get("/api/admin/orders")
        self.assertEqual(resp.status_code, 401)
        resp = self.client.get("/api/admin/orders", headers={"X-Admin-Password": "wrong"})
        self.assertEqual(resp.status_code, 401)
        resp = self.client.get(f"/api/admin/orders?p={ADMIN_PASSWORD}")
        self.assertEqual(resp.status_code, 200)

    def test_add_stock(self):
        self.add_product("epic")
        resp = self.client.post("/api/admin/stock/add", headers=ADMIN, json={
            "product_slug": "epic", "codes_text": "AAA\r\nBBB\n\n",
        })
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["added"], 2)
        self.assertEqual(resp.get_json()["stock"], 2)

        resp = self.client.post("/api/admin/stock/add", headers=ADMIN, json={
            "product_slug": "epic", "codes_text": "\n  \n",
        })
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/admin/stock/add", headers=ADMIN, json={
            "product_slug": "ghost", "codes_text": "A",
        })
        self.assertEqual(resp.status_code, 404)

    def test_approve_flow(self):
        self.add_product("epic", codes=["A", "B", "C"])
        order_id = self.place_order("epic", qty=2)

        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json={"order_id": order_id})
        self.assertEqual(resp.status_code, 200)
        first = resp.get_json()
        self.assertEqual(first["codes"], ["A", "B"])
        self.assertEqual(first["remaining"], 1)
        self.assertFalse(first["already"])

        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json={"order_id": order_id})
        second = resp.get_json()
        self.assertTrue(second["already"])
        self.assertEqual(second["codes"], first["codes"])

        resp = self.client.get(f"/api/order/{order_id}")
        self.assertEqual(resp.get_json()["codes"], ["A", "B"])

        resp = self.client.post("/api/admin/order/reject", headers=ADMIN, json={"order_id": order_id})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["error_code"], "INVALID_TRANSITION")

        resp = self.client.get("/api/admin/orders", headers=ADMIN)
        orders = resp.get_json()["orders"]
        self.assertEqual(orders[0]["order_id"], order_id)
        self.assertEqual(orders[0]["status"], "APPROVED")
        self.assertEqual(orders[0]["product_title"], "EPIC STOCK")

    def test_approve_without_stock(self):
        self.add_product("epic", codes=["A", "B"])
        order_id = self.place_order("epic", qty=2)
        self.storefront.approve_order(self.place_order("epic", qty=1))

        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json={"order_id": order_id})
        self.assertEqual(resp.status_code, 409)
        body = resp.get_json()
        self.assertEqual(body["error_code"], "INSUFFICIENT_STOCK")
        self.assertEqual(body["requested"], 2)
        self.assertEqual(body["available"], 1)

    def test_reject_flow(self):
        self.add_product("epic", codes=["A"])
        order_id = self.place_order("epic")

        resp = self.client.post("/api/admin/order/reject", headers=ADMIN, json={"order_id": order_id})
        self.assertEqual(resp.status_code, 200)

        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json={"order_id": order_id})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()["status"], "REJECTED")

    def test_missing_order_id(self):
        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json={})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post("/api/admin/order/reject", headers=ADMIN, json={"order_id": "ghost"})
        self.assertEqual(resp.status_code, 404)


class TestMalformedBodies(StockroomTestCase):

    def setUp(self):
        super().setUp()
        self.client = self.app.test_client()
        self.add_product("epic", codes=["A"])

    def assert_validation_error(self, resp):
        self.assertEqual(resp.status_code, 400)
        body = resp.get_json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error_code"], "VALIDATION_ERROR")

    def test_non_string_contact(self):
        resp = self.client.post("/api/order", json={
            "product_slug": "epic", "qty": 1, "pay_method": "BTC", "txid": "t",
            "contact": {"tg": "@x"},
        })
        self.assert_validation_error(resp)
        self.assertEqual(self.storefront.list_recent_orders(), [])

    def test_array_body_on_create(self):
        self.assert_validation_error(self.client.post("/api/order", json=[1, 2]))

    def test_array_body_on_approve(self):
        resp = self.client.post("/api/admin/order/approve", headers=ADMIN, json=["x"])
        self.assert_validation_error(resp)

    def test_list_order_id(self):
        for path in ("/api/admin/order/approve", "/api/admin/order/reject"):
            with self.subTest(path=path):
                resp = self.client.post(path, headers=ADMIN, json={"order_id": ["x"]})
                self.assert_validation_error(resp)

    def test_list_codes_text(self):
        resp = self.client.post("/api/admin/stock/add", headers=ADMIN, json={
            "product_slug": "epic", "codes_text": ["A", "B"],
        })
        self.assert_validation_error(resp)
        self.assertEqual(self.storefront.list_active_products()[0]["stock"], 1)

    def test_missing_product_slug_on_stock_add(self):
        resp = self.client.post("/api/admin/stock/add", headers=ADMIN, json={"codes_text": "A"})
        self.assert_validation_error(resp)


class TestAdminWithoutPassword(StockroomTestCase):
    config = {"ADMIN_PASSWORD": None}

    def test_admin_disabled(self):
        resp = self.app.test_client().get("/api/admin/orders", headers={"X-Admin-Password": ""})
        self.assertEqual(resp.status_code, 500)


if __name__ == '__main__':
    unittest.main()
