from helpers import ApiTestCase, days_ago


class TestCustomers(ApiTestCase):

    def test_create_and_get(self):
        customer = self.create_customer()
        self.assertEqual(customer["name"], "A. Sharma")
        self.assertEqual(len(customer["vehicles"]), 1)
        self.assertEqual(customer["vehicles"][0]["vehicleNumber"], "MH12AB1234")

        response = self.get(f"/customers/{customer['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["mobile"], "9876543210")

    def test_missing_required_fields(self):
        response = self.post("/customers/", {"name": "No Mobile"})
        self.assertEqual(response.status_code, 422)

        response = self.post("/customers/", {"name": "Bad Email", "mobile": "1", "email": "nope"})
        self.assertEqual(response.status_code, 422)

    def test_blank_email_treated_as_missing(self):
        response = self.post("/customers/", {"name": "Walk In", "mobile": "9000000001", "email": ""})
        self.assertEqual(response.status_code, 201, response.text)
        self.assertIsNone(response.json()["email"])

    def test_unknown_customer(self):
        self.assertEqual(self.get("/customers/999").status_code, 404)
        self.assertEqual(self.put("/customers/999", {"name": "X"}).status_code, 404)
        self.assertEqual(self.delete("/customers/999").status_code, 404)

    def test_search(self):
        self.create_customer(name="A. Sharma", vehicle_number="MH12AB1234")
        self.create_customer(name="B. Patil", mobile="9123456780", vehicle_number="KA01XY9999")

        names = [c["name"] for c in self.get("/customers/", params={"search": "patil"}).json()]
        self.assertEqual(names, ["B. Patil"])

        names = [c["name"] for c in self.get("/customers/", params={"search": "MH12"}).json()]
        self.assertEqual(names, ["A. Sharma"])

    def test_update_replaces_vehicles(self):
        customer = self.create_customer()
        vehicle = customer["vehicles"][0]

        response = self.put(f"/customers/{customer['id']}", {
            "address": "5 Station Road",
            "vehicles": [
                {**vehicle, "brand": "Hyundai"},
                {"vehicleNumber": "MH14ZZ0001", "fuelType": "Diesel", "vehicleType": "SUV"},
            ],
        })
        self.assertEqual(response.status_code, 200, response.text)
        data = response.json()
        self.assertEqual(data["address"], "5 Station Road")
        self.assertEqual(data["name"], "A. Sharma")
        self.assertEqual([v["vehicleNumber"] for v in data["vehicles"]], ["MH12AB1234", "MH14ZZ0001"])
        self.assertEqual(data["vehicles"][0]["id"], vehicle["id"])
        self.assertEqual(data["vehicles"][0]["brand"], "Hyundai")

        response = self.put(f"/customers/{customer['id']}", {"vehicles": []})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["vehicles"], [])

    def test_required_field_cannot_be_cleared(self):
        customer = self.create_customer()
        response = self.put(f"/customers/{customer['id']}", {"name": None})
        self.assertEqual(response.status_code, 422)

    def test_customers_with_job_cards(self):
        visited = self.create_customer(name="Visited")
        self.create_customer(name="Never Came", vehicle_number="MH12AB9999")
        mechanic = self.create_mechanic_user()
        self.create_job_card(visited, mechanic)
        self.create_job_card(visited, mechanic)

        response = self.get("/customers/with-jobcards")
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual([customer["name"] for customer in response.json()], ["Visited"])

    def test_delete_restricted_while_job_cards_exist(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        job = self.create_job_card(customer, mechanic)

        self.assertEqual(self.delete(f"/customers/{customer['id']}").status_code, 409)

        self.assertEqual(self.delete(f"/jobcards/{job['id']}").status_code, 204)
        self.assertEqual(self.delete(f"/customers/{customer['id']}").status_code, 204)
        self.assertEqual(self.get(f"/customers/{customer['id']}").status_code, 404)

    def test_service_history(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        self.create_job_card(customer, mechanic, job_in_date=days_ago(40))
        self.create_job_card(customer, mechanic, job_in_date=days_ago(5), serviceType="AC Service")

        response = self.get(f"/customers/{customer['id']}/service-history")
        self.assertEqual(response.status_code, 200)
        history = response.json()
        self.assertEqual([entry["services"] for entry in history["jobCards"]],
                         [["AC Service"], ["General Service"]])
        self.assertEqual(history["gstBills"], [])
        self.assertEqual(history["nonGstBills"], [])


class TestJobCards(ApiTestCase):

    def test_create_expands_references(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        job = self.create_job_card(customer, mechanic)

        self.assertEqual(job["status"], "Pending")
        self.assertFalse(job["reminderSent"])
        self.assertEqual(job["customer"]["name"], "A. Sharma")
        self.assertEqual(job["assignedMechanic"]["id"], mechanic["id"])

    def test_assignee_must_be_a_mechanic(self):
        customer = self.create_customer()
        staff = self.register("staff@example.com", "staff")
        response = self.post("/jobcards/", {
            "customerId": customer["id"],
            "vehicleNumber": "MH12AB1234",
            "jobInDate": days_ago(1).isoformat(),
            "estimatedDelivery": days_ago(0).isoformat(),
            "serviceType": "General Service",
            "assignedMechanicId": staff["id"],
            "kmIn": 10,
        })
        self.assertEqual(response.status_code, 422)

    def test_invalid_enum_and_dates(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        payload = {
            "customerId": customer["id"],
            "vehicleNumber": "MH12AB1234",
            "jobInDate": days_ago(0).isoformat(),
            "estimatedDelivery": days_ago(2).isoformat(),
            "serviceType": "General Service",
            "assignedMechanicId": mechanic["id"],
            "kmIn": 10,
        }
        self.assertEqual(self.post("/jobcards/", payload).status_code, 422)

        payload["estimatedDelivery"] = days_ago(-1).isoformat()
        payload["serviceType"] = "Car Wash"
        self.assertEqual(self.post("/jobcards/", payload).status_code, 422)

    def test_unknown_customer(self):
        mechanic = self.create_mechanic_user()
        response = self.post("/jobcards/", {
            "customerId": 999,
            "vehicleNumber": "MH12AB1234",
            "jobInDate": days_ago(1).isoformat(),
            "estimatedDelivery": days_ago(0).isoformat(),
            "serviceType": "Other",
            "assignedMechanicId": mechanic["id"],
            "kmIn": 10,
        })
        self.assertEqual(response.status_code, 404)

    def test_status_update_and_vehicle_lookup(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        job = self.create_job_card(customer, mechanic)

        response = self.patch(f"/jobcards/{job['id']}/status", {"status": "In Progress"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "In Progress")

        response = self.get("/jobcards/by-vehicle/MH12AB1234")
        self.assertEqual(response.json()["id"], job["id"])

        self.patch(f"/jobcards/{job['id']}/status", {"status": "Closed"})
        self.assertEqual(self.get("/jobcards/by-vehicle/MH12AB1234").status_code, 404)

    def test_mechanic_sees_only_own_cards(self):
        customer = self.create_customer()
        ravi = self.create_mechanic_user("ravi@example.com")
        sunil = self.create_mechanic_user("sunil@example.com")
        own = self.create_job_card(customer, ravi)
        self.create_job_card(customer, sunil)

        response = self.get("/jobcards/", user=ravi)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([job["id"] for job in response.json()], [own["id"]])
        self.assertEqual(len(self.get("/jobcards/").json()), 2)

    def test_mechanic_assigned_to_cards_cannot_be_deleted(self):
        customer = self.create_customer()
        mechanic = self.create_mechanic_user()
        self.create_job_card(customer, mechanic)

        self.assertEqual(self.delete(f"/users/{mechanic['id']}").status_code, 409)
