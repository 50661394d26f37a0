import unittest
from datetime import timedelta
from types import SimpleNamespace

from garage.auth import create_access_token, decode_access_token, hash_password, verify_password
from garage.exceptions import AuthError
from garage.models.user import UserRole
from garage.permissions import can_access, features_for, SETTINGS, USERS

from helpers import API, PASSWORD, ApiTestCase


class TestPasswords(unittest.TestCase):

    def test_hash_round_trip(self):
        hashed = hash_password("Secret123")
        self.assertNotEqual(hashed, "Secret123")
        self.assertNotIn("Secret123", hashed)
        self.assertTrue(verify_password("Secret123", hashed))
        self.assertFalse(verify_password("secret123", hashed))
        self.assertFalse(verify_password("Secret1234", hashed))

    def test_same_password_hashes_differently(self):
        self.assertNotEqual(hash_password("Secret123"), hash_password("Secret123"))

    def test_malformed_hash_does_not_verify(self):
        self.assertFalse(verify_password("Secret123", "not-a-bcrypt-hash"))


class TestTokens(unittest.TestCase):

    def test_token_carries_id_and_role(self):
        user = SimpleNamespace(id=7, role=UserRole.MECHANIC)
        data = decode_access_token(create_access_token(user))
        self.assertEqual(data.user_id, 7)
        self.assertEqual(data.role, UserRole.MECHANIC)

    def test_expired_token_rejected(self):
        user = SimpleNamespace(id=7, role=UserRole.ADMIN)
        token = create_access_token(user, expires_delta=timedelta(minutes=-5))
        with self.assertRaises(AuthError):
            decode_access_token(token)

    def test_garbage_token_rejected(self):
        with self.assertRaises(AuthError):
            decode_access_token("not.a.token")


class TestAccessPolicy(unittest.TestCase):

    def test_admin_has_everything(self):
        self.assertTrue(can_access(UserRole.ADMIN, USERS))
        self.assertTrue(can_access(UserRole.ADMIN, SETTINGS))

    def test_mechanic_limited_to_jobcards(self):
        self.assertEqual(features_for(UserRole.MECHANIC), ["jobcards", "profile"])
        self.assertFalse(can_access(UserRole.MECHANIC, USERS))

    def test_any_of_several_features(self):
        self.assertTrue(can_access(UserRole.MANAGER, USERS, "reports"))


class TestAuthApi(ApiTestCase):

    def test_register_never_returns_password(self):
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "Priya Staff",
            "email": "Priya@Example.com",
            "password": PASSWORD,
        })
        self.assertEqual(response.status_code, 201)
        body = response.text
        self.assertNotIn(PASSWORD, body)
        self.assertNotIn("hashedPassword", body)
        self.assertEqual(response.json()["user"]["email"], "priya@example.com")

    def test_anonymous_signup_cannot_pick_elevated_role(self):
        for role in ("admin", "manager", "staff", "mechanic"):
            response = self.client.post(f"{API}/auth/register", json={
                "fullName": "Eve",
                "email": f"eve-{role}@example.com",
                "password": PASSWORD,
                "role": role,
            })
            self.assertEqual(response.status_code, 403, role)

    def test_anonymous_signup_gets_user_role(self):
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "Plain User",
            "email": "plain@example.com",
            "password": PASSWORD,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role"], "user")

    def test_admin_can_register_elevated_role(self):
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "New Manager",
            "email": "newmanager@example.com",
            "password": PASSWORD,
            "role": "manager",
        }, headers=self.admin["headers"])
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role"], "manager")

    def test_staff_cannot_register_elevated_role(self):
        staff = self.register("staff@example.com", "staff")
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "Another Admin",
            "email": "admin2@example.com",
            "password": PASSWORD,
            "role": "admin",
        }, headers=staff["headers"])
        self.assertEqual(response.status_code, 403)

    def test_duplicate_email_conflicts(self):
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "Someone Else",
            "email": "admin@example.com",
            "password": PASSWORD,
        })
        self.assertEqual(response.status_code, 409)

    def test_weak_password_rejected(self):
        response = self.client.post(f"{API}/auth/register", json={
            "fullName": "Weak",
            "email": "weak@example.com",
            "password": "password",
        })
        self.assertEqual(response.status_code, 422)

    def test_login(self):
        response = self.client.post(f"{API}/auth/login", json={
            "email": "admin@example.com",
            "password": PASSWORD,
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.json())

        response = self.client.post(f"{API}/auth/login", json={
            "email": "admin@example.com",
            "password": "Wrong1234",
        })
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")

        response = self.client.post(f"{API}/auth/login", json={
            "email": "nobody@example.com",
            "password": PASSWORD,
        })
        self.assertEqual(response.status_code, 401)

    def test_missing_token(self):
        response = self.client.get(f"{API}/customers/")
        self.assertEqual(response.status_code, 401)

    def test_access_list(self):
        mechanic = self.register("mech@example.com", "mechanic")
        response = self.get("/auth/access", user=mechanic)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"role": "mechanic", "features": ["jobcards", "profile"]})


class TestRoleGating(ApiTestCase):

    def test_mechanic_cannot_delete_user_but_admin_can(self):
        mechanic = self.register("mech@example.com", "mechanic")
        staff = self.register("staff@example.com", "staff")

        response = self.delete(f"/users/{staff['id']}", user=mechanic)
        self.assertEqual(response.status_code, 403)

        response = self.delete(f"/users/{staff['id']}")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.get(f"/users/{staff['id']}").status_code, 404)

    def test_manager_sees_expenses_not_customers(self):
        manager = self.register("manager@example.com", "manager")
        self.assertEqual(self.get("/expenses/", user=manager).status_code, 200)
        self.assertEqual(self.get("/customers/", user=manager).status_code, 403)

    def test_admin_cannot_delete_self(self):
        response = self.delete(f"/users/{self.admin['id']}")
        self.assertEqual(response.status_code, 409)

    def test_change_own_password(self):
        staff = self.register("staff@example.com", "staff")
        response = self.put("/users/me/password", {
            "currentPassword": "Wrong1234",
            "newPassword": "Another123",
        }, user=staff)
        self.assertEqual(response.status_code, 422)

        response = self.put("/users/me/password", {
            "currentPassword": PASSWORD,
            "newPassword": "Another123",
        }, user=staff)
        self.assertEqual(response.status_code, 204)

        response = self.client.post(f"{API}/auth/login", json={
            "email": "staff@example.com",
            "password": "Another123",
        })
        self.assertEqual(response.status_code, 200)
