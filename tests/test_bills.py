import re
import unittest

from garage.invoices import amount_in_words

from helpers import ApiTestCase


class BillTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.customer = self.create_customer()
        self.vehicle_id = self.customer["vehicles"][0]["id"]
        self.oil = self.create_item("Engine Oil", "2710", rate=450.0, gst_percent=18)
        self.filter = self.create_item("Oil Filter", "8421", rate=200.0, gst_percent=28)


class TestItems(ApiTestCase):

    def test_amount_is_derived(self):
        item = self.create_item(rate=125.5, quantity=4)
        self.assertEqual(item["amount"], 502.0)

        response = self.put(f"/items/{item['id']}", {"quantity": 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["amount"], 251.0)

    def test_duplicate_description_conflicts(self):
        self.create_item("Engine Oil", "2710")
        response = self.post("/items/", {"description": "engine oil", "hsnCode": "9999", "rate": 1})
        self.assertEqual(response.status_code, 409)

    def test_gst_slab_enforced(self):
        response = self.post("/items/", {"description": "Coolant", "hsnCode": "3820", "rate": 1, "gstPercent": 7})
        self.assertEqual(response.status_code, 422)

    def test_unknown_item(self):
        self.assertEqual(self.get("/items/404").status_code, 404)


class TestGstBills(BillTestCase):

    def _create(self, **overrides):
        payload = {
            "customerId": self.customer["id"],
            "vehicleId": self.vehicle_id,
            "items": [
                {"itemId": self.oil["id"], "quantity": 2},
                {"itemId": self.filter["id"], "quantity": 1},
            ],
            "mechanicCharge": 300,
        }
        payload.update(overrides)
        return self.post("/gst-bills/", payload)

    def test_totals_computed_server_side(self):
        response = self._create(totalAmount=1, gst=1)
        self.assertEqual(response.status_code, 201, response.text)
        bill = response.json()

        # 900 + 18% and 200 + 28%
        self.assertEqual(bill["gst"], 162.0 + 56.0)
        self.assertEqual(bill["totalAmount"], 1062.0 + 256.0 + 300.0)
        self.assertEqual(bill["invoiceNo"], "GST-00001")
        self.assertEqual([line["totalAmount"] for line in bill["items"]], [1062.0, 256.0])
        self.assertEqual(bill["items"][0]["item"]["description"], "Engine Oil")

    def test_invoice_number_unique(self):
        self.assertEqual(self._create(invoiceNo="INV-1").status_code, 201)
        response = self._create(invoiceNo="INV-1")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.get("/gst-bills/count").json(), {"count": 1})

    def test_generated_numbers_follow_sequence(self):
        self._create()
        second = self._create().json()
        self.assertEqual(second["invoiceNo"], "GST-00002")

    def test_vehicle_must_belong_to_customer(self):
        other = self.create_customer(name="B. Patil", vehicle_number="KA01XY9999")
        response = self._create(vehicleId=other["vehicles"][0]["id"])
        self.assertEqual(response.status_code, 422)

    def test_unknown_item_rejected(self):
        response = self._create(items=[{"itemId": 999, "quantity": 1}])
        self.assertEqual(response.status_code, 422)

    def test_empty_bill_rejected(self):
        self.assertEqual(self._create(items=[]).status_code, 422)

    def test_update_recomputes_totals(self):
        bill = self._create().json()
        response = self.put(f"/gst-bills/{bill['id']}", {
            "items": [{"itemId": self.oil["id"], "quantity": 1, "rate": 500, "gstPercent": 5}],
            "mechanicCharge": 0,
        })
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()
        self.assertEqual(data["gst"], 25.0)
        self.assertEqual(data["totalAmount"], 525.0)
        self.assertEqual(len(data["items"]), 1)

    def test_total_breakdown(self):
        bill = self._create().json()
        response = self.get(f"/gst-bills/{bill['id']}/total")
        self.assertEqual(response.status_code, 200)
        totals = response.json()
        self.assertEqual(totals["totalActualAmount"], 1100.0)
        self.assertEqual(totals["gstBreakdown"], [
            {"percent": 18, "amount": 162.0},
            {"percent": 28, "amount": 56.0},
        ])
        self.assertEqual(totals["grandTotal"], bill["totalAmount"])

    def test_billed_item_and_customer_cannot_be_deleted(self):
        bill = self._create().json()
        self.assertEqual(self.delete(f"/items/{self.oil['id']}").status_code, 409)
        self.assertEqual(self.delete(f"/customers/{self.customer['id']}").status_code, 409)

        self.assertEqual(self.delete(f"/gst-bills/{bill['id']}").status_code, 204)
        self.assertEqual(self.delete(f"/items/{self.oil['id']}").status_code, 204)
        self.assertEqual(self.get(f"/gst-bills/{bill['id']}").status_code, 404)

    def test_mechanic_cannot_bill(self):
        mechanic = self.create_mechanic_user()
        self.assertEqual(self.get("/gst-bills/", user=mechanic).status_code, 403)

    def test_pdf_invoice(self):
        self.create_garage_profile("Speedy Motors")
        bill = self._create(invoiceNo="GST-INV-9").json()

        response = self.get(f"/gst-bills/{bill['id']}/pdf")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertIn('filename="GST-INV-9.pdf"', response.headers["content-disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_pdf_without_garage_profile(self):
        bill = self._create().json()
        response = self.get(f"/gst-bills/{bill['id']}/pdf")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_pdf_unknown_bill(self):
        self.assertEqual(self.get("/gst-bills/999/pdf").status_code, 404)

    def test_null_for_required_field_rejected(self):
        bill = self._create().json()
        for field in ("vehicleId", "invoiceNo", "invoiceDate", "items", "mechanicCharge"):
            response = self.put(f"/gst-bills/{bill['id']}", {field: None})
            self.assertEqual(response.status_code, 422, field)
            self.assertEqual(response.json()["errors"][0]["field"], field)

        response = self.put(f"/gst-bills/{bill['id']}", {"gstin": None})
        self.assertEqual(response.status_code, 200)

    def test_update_unknown_bill(self):
        self.assertEqual(self.put("/gst-bills/999", {"mechanicCharge": 0}).status_code, 404)


class TestNonGstBills(BillTestCase):

    def _create(self, **overrides):
        payload = {
            "customerId": self.customer["id"],
            "vehicleId": self.vehicle_id,
            "itemIds": [self.oil["id"], self.filter["id"]],
            "mechanicCharge": 100,
        }
        payload.update(overrides)
        return self.post("/non-gst-bills/", payload)

    def test_total_without_tax(self):
        self.create_garage_profile()
        response = self._create()
        self.assertEqual(response.status_code, 201, response.text)
        bill = response.json()
        self.assertEqual(bill["totalAmount"], 450.0 + 200.0 + 100.0)
        self.assertEqual(bill["invoiceNo"], "NGST-00001")

    def test_requires_garage_details(self):
        self.assertEqual(self._create().status_code, 422)

        response = self._create(garage={"name": "Walk-in Garage"})
        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["garage"]["name"], "Walk-in Garage")

    def test_invoice_number_unique(self):
        self.create_garage_profile()
        self.assertEqual(self._create(invoiceNo="NG-7").status_code, 201)
        self.assertEqual(self._create(invoiceNo="NG-7").status_code, 409)

    def test_garage_snapshot_frozen(self):
        self.create_garage_profile("Speedy Motors")
        bill = self._create().json()
        self.assertEqual(bill["garage"]["name"], "Speedy Motors")
        self.assertEqual(bill["garage"]["gstin"], "27ABCDE1234F1Z5")

        response = self.put("/garage/", {"garageName": "Speedy Motors & Sons", "address": "99 New Road"})
        self.assertEqual(response.status_code, 200)

        self.put(f"/non-gst-bills/{bill['id']}", {"additionalNotes": "Paid in cash"})
        stored = self.get(f"/non-gst-bills/{bill['id']}").json()
        self.assertEqual(stored["garage"]["name"], "Speedy Motors")
        self.assertEqual(stored["additionalNotes"], "Paid in cash")

        new_bill = self._create().json()
        self.assertEqual(new_bill["garage"]["name"], "Speedy Motors & Sons")

    def test_update_items_recomputes_total(self):
        self.create_garage_profile()
        bill = self._create().json()
        response = self.put(f"/non-gst-bills/{bill['id']}", {"itemIds": [self.filter["id"]], "mechanicCharge": 0})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["totalAmount"], 200.0)

    def test_pdf_invoice_uses_snapshot(self):
        self.create_garage_profile("Speedy Motors")
        bill = self._create().json()
        self.put("/garage/", {"garageName": "Renamed Garage"})

        response = self.get(f"/non-gst-bills/{bill['id']}/pdf")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertIn('filename="NGST-00001.pdf"', response.headers["content-disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_pdf_many_lines_spans_pages(self):
        self.create_garage_profile()
        items = [self.create_item(f"Part {index}", f"HSN{index}", rate=10.0 + index) for index in range(60)]
        bill = self._create(itemIds=[item["id"] for item in items]).json()

        response = self.get(f"/non-gst-bills/{bill['id']}/pdf")
        self.assertEqual(response.status_code, 200)
        pages = re.findall(rb"/Type\s*/Page\b", response.content)
        self.assertGreaterEqual(len(pages), 2)

    def test_null_for_required_field_rejected(self):
        self.create_garage_profile()
        bill = self._create().json()
        for field in ("vehicleId", "invoiceNo", "invoiceDate", "itemIds", "mechanicCharge"):
            response = self.put(f"/non-gst-bills/{bill['id']}", {field: None})
            self.assertEqual(response.status_code, 422, field)

    def test_update_unknown_bill(self):
        self.assertEqual(self.put("/non-gst-bills/999", {"mechanicCharge": 0}).status_code, 404)


class TestAmountInWords(unittest.TestCase):

    def test_rounded_rupees(self):
        words = amount_in_words(1618.4)
        self.assertTrue(words.startswith("One Thousand"))
        self.assertIn("Eighteen", words)
        self.assertTrue(words.endswith("Rupees Only"))

    def test_lakh_grouping(self):
        self.assertIn("Lakh", amount_in_words(250000))
