"""
Shared test scaffolding: a fresh database per test and a recording mailer.
"""
import asyncio
import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from garage.database import drop_db
from garage.exceptions import ExternalServiceError
from garage.mailer import get_mailer
from garage.main import app

API = "/api/v1"
PASSWORD = "Secret123"


class RecordingMailer:
    """Collects messages instead of talking to SMTP."""

    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    async def send(self, to, subject, html):
        if to in self.failing:
            raise ExternalServiceError(f"Could not send mail to {to}")
        self.sent.append({"to": to, "subject": subject, "html": html})


def iso(moment: datetime) -> str:
    return moment.isoformat()


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


class ApiTestCase(unittest.TestCase):
    """Runs each test against an empty database through the real app."""

    def setUp(self):
        asyncio.run(drop_db())
        self.mailer = RecordingMailer()
        app.dependency_overrides[get_mailer] = lambda: self.mailer
        self.addCleanup(app.dependency_overrides.clear)

        # Entering the client runs the lifespan, which creates the tables
        self.client = TestClient(app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

        self.admin = self.register("admin@example.com", "admin", "Admin")

    def register(self, email, role="user", full_name="Test User"):
        # once the admin exists, elevated roles are registered on its behalf
        admin = getattr(self, "admin", None)
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": full_name,
            "email": email,
            "password": PASSWORD,
            "role": role,
        }, headers=admin["headers"] if admin else None)
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()
        return {
            "id": data["user"]["id"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }

    def get(self, path, user=None, **kwargs):
        return self.client.get(f"{API}{path}", headers=(user or self.admin)["headers"], **kwargs)

    def post(self, path, json=None, user=None):
        return self.client.post(f"{API}{path}", json=json, headers=(user or self.admin)["headers"])

    def put(self, path, json=None, user=None):
        return self.client.put(f"{API}{path}", json=json, headers=(user or self.admin)["headers"])

    def patch(self, path, json=None, user=None):
        return self.client.patch(f"{API}{path}", json=json, headers=(user or self.admin)["headers"])

    def delete(self, path, user=None):
        return self.client.delete(f"{API}{path}", headers=(user or self.admin)["headers"])

    def create_customer(self, name="A. Sharma", mobile="9876543210", email="sharma@example.com",
                        vehicle_number="MH12AB1234"):
        response = self.post("/customers/", {
            "name": name,
            "mobile": mobile,
            "email": email,
            "vehicles": [{
                "vehicleNumber": vehicle_number,
                "brand": "Maruti",
                "model": "Swift",
                "fuelType": "Petrol",
                "vehicleType": "Car",
            }],
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_mechanic_user(self, email="mechanic@example.com"):
        return self.register(email, "mechanic", "Ravi Mechanic")

    def create_job_card(self, customer, mechanic, job_in_date=None, **overrides):
        job_in_date = job_in_date or datetime.now(timezone.utc)
        payload = {
            "customerId": customer["id"],
            "vehicleNumber": customer["vehicles"][0]["vehicleNumber"],
            "jobInDate": iso(job_in_date),
            "estimatedDelivery": iso(job_in_date + timedelta(days=1)),
            "serviceType": "General Service",
            "assignedMechanicId": mechanic["id"],
            "kmIn": 42000,
        }
        payload.update(overrides)
        response = self.post("/jobcards/", payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_item(self, description="Engine Oil", hsn_code="2710", rate=450.0, gst_percent=18, quantity=1):
        response = self.post("/items/", {
            "description": description,
            "hsnCode": hsn_code,
            "quantity": quantity,
            "rate": rate,
            "gstPercent": gst_percent,
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_garage_profile(self, garage_name="Speedy Motors"):
        response = self.post("/garage/", {
            "garageName": garage_name,
            "email": "contact@speedy.example.com",
            "address": "12 MG Road",
            "city": "Pune",
            "state": "Maharashtra",
            "zipCode": "411001",
            "gstNumber": "27ABCDE1234F1Z5",
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
