import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from sqlalchemy.exc import IntegrityError

from garage.crud import commit_or_conflict, is_unique_violation
from garage.exceptions import ConflictError

from helpers import ApiTestCase, days_ago


class TestUniqueViolation(unittest.TestCase):

    def test_sqlite_message(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        self.assertTrue(is_unique_violation(exc))

    def test_postgres_sqlstate(self):
        orig = SimpleNamespace(sqlstate="23505")
        self.assertTrue(is_unique_violation(IntegrityError("INSERT", {}, orig)))

    def test_not_null_is_not_a_conflict(self):
        exc = IntegrityError("UPDATE", {}, Exception("NOT NULL constraint failed: mechanics.name"))
        self.assertFalse(is_unique_violation(exc))

    def test_commit_reraises_other_integrity_errors(self):
        error = IntegrityError("UPDATE", {}, Exception("NOT NULL constraint failed: users.full_name"))
        db = SimpleNamespace(commit=AsyncMock(side_effect=error), rollback=AsyncMock())

        with self.assertRaises(IntegrityError):
            asyncio.run(commit_or_conflict(db, "User already exists with this email"))
        db.rollback.assert_awaited_once()

    def test_commit_turns_unique_violation_into_conflict(self):
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        db = SimpleNamespace(commit=AsyncMock(side_effect=error), rollback=AsyncMock())

        with self.assertRaises(ConflictError):
            asyncio.run(commit_or_conflict(db, "User already exists with this email"))


class TestNullOnUpdate(ApiTestCase):
    """Explicit nulls for required fields are rejected before anything is written."""

    def assertRejected(self, path, payload, field):
        response = self.put(path, payload)
        self.assertEqual(response.status_code, 422, response.text)
        self.assertIn(field, [error["field"] for error in response.json()["errors"]])

    def test_mechanic(self):
        mechanic = self.post("/mechanics/", {"name": "Sunil", "specialty": "Engine"}).json()
        self.assertRejected(f"/mechanics/{mechanic['id']}", {"name": None}, "name")
        self.assertRejected(f"/mechanics/{mechanic['id']}", {"specialty": None}, "specialty")
        self.assertEqual(self.get(f"/mechanics/{mechanic['id']}").json()["name"], "Sunil")

    def test_permission(self):
        permission = self.post("/permissions/", {"name": "view-reports"}).json()
        self.assertRejected(f"/permissions/{permission['id']}", {"name": None}, "name")
        self.assertRejected(f"/permissions/{permission['id']}", {"isActive": None}, "isActive")

        response = self.put(f"/permissions/{permission['id']}", {"description": None})
        self.assertEqual(response.status_code, 200)

    def test_user_null_is_not_reported_as_duplicate_email(self):
        staff = self.register("staff@example.com", "staff")
        response = self.put(f"/users/{staff['id']}", {"fullName": None})
        self.assertEqual(response.status_code, 422)
        self.assertNotIn("already exists", response.text)

        self.assertRejected(f"/users/{staff['id']}", {"email": None}, "email")
        self.assertRejected(f"/users/{staff['id']}", {"role": None}, "role")
        self.assertEqual(self.get(f"/users/{staff['id']}").json()["fullName"], "Test User")

    def test_own_profile(self):
        self.assertRejected("/users/me", {"fullName": None}, "fullName")
        self.assertRejected("/users/me", {"email": None}, "email")

        response = self.put("/users/me", {"phone": None})
        self.assertEqual(response.status_code, 200)

    def test_item(self):
        item = self.create_item()
        self.assertRejected(f"/items/{item['id']}", {"rate": None}, "rate")
        self.assertEqual(self.get(f"/items/{item['id']}").json()["rate"], 450.0)

    def test_expense_category(self):
        category = self.post("/expense-categories/", {"name": "Tools", "value": 10, "color": "#000"}).json()
        self.assertRejected(f"/expense-categories/{category['id']}", {"color": None}, "color")

    def test_expense(self):
        expense = self.post("/expenses/", {
            "date": days_ago(1).isoformat(),
            "type": "Rent",
            "amount": 5000,
            "paidTo": "Landlord",
            "paymentMode": "Cash",
        }).json()
        self.assertRejected(f"/expenses/{expense['id']}", {"amount": None}, "amount")
        self.assertEqual(self.get(f"/expenses/{expense['id']}").json()["amount"], 5000)

    def test_job_card(self):
        customer = self.create_customer()
        job = self.create_job_card(customer, self.create_mechanic_user())
        self.assertRejected(f"/jobcards/{job['id']}", {"kmIn": None}, "kmIn")
        self.assertRejected(f"/jobcards/{job['id']}", {"assignedMechanicId": None}, "assignedMechanicId")

    def test_garage_profile(self):
        self.create_garage_profile()
        self.assertRejected("/garage/", {"garageName": None}, "garageName")

    def test_every_null_field_reported(self):
        mechanic = self.post("/mechanics/", {"name": "Sunil", "specialty": "Engine"}).json()
        response = self.put(f"/mechanics/{mechanic['id']}", {"name": None, "specialty": None})
        fields = [error["field"] for error in response.json()["errors"]]
        self.assertEqual(fields, ["name", "specialty"])


class TestUpdateUnknown(ApiTestCase):

    def test_put_unknown_ids(self):
        cases = {
            "/customers/999": {"name": "X"},
            "/jobcards/999": {"kmIn": 1},
            "/mechanics/999": {"name": "X"},
            "/items/999": {"rate": 1},
            "/expenses/999": {"amount": 1},
            "/expense-categories/999": {"value": 1},
            "/users/999": {"phone": "1"},
            "/permissions/999": {"description": "x"},
        }
        for path, payload in cases.items():
            with self.subTest(path=path):
                self.assertEqual(self.put(path, payload).status_code, 404)

    def test_garage_profile_missing(self):
        self.assertEqual(self.put("/garage/", {"phone": "1"}).status_code, 404)
