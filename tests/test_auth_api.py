import unittest

from sqlalchemy import select

from inventory_api.core.security import decode_access_token
from inventory_api.models import User
from tests.support import ApiTestCase


class AuthApiTest(ApiTestCase):
    def register(self, **body):
        body.setdefault("username", "maria")
        body.setdefault("email", "maria@stockroom.io")
        body.setdefault("password", "hunter22")
        return self.client.post("/api/auth/register", json=body)

    def test_register_issues_token_for_staff(self):
        response = self.register(email="  Maria@Stockroom.IO ")
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"]["email"], "maria@stockroom.io")
        self.assertEqual(body["user"]["role"], "staff")
        self.assertNotIn("password_hash", body["user"])

        identity = decode_access_token(body["token"])
        self.assertEqual(identity.user_id, body["user"]["id"])
        self.assertEqual(identity.username, "maria")

        db = self.Session()
        try:
            user = db.execute(select(User).where(User.username == "maria")).scalar_one()
            self.assertNotEqual(user.password_hash, "hunter22")
        finally:
            db.close()

    def test_duplicate_email_and_username(self):
        self.assertEqual(self.register().status_code, 201)

        same_email = self.register(username="other")
        self.assertEqual(same_email.status_code, 409)
        self.assertEqual(same_email.json()["error"], "Email already registered")

        same_username = self.register(email="other@stockroom.io")
        self.assertEqual(same_username.status_code, 409)
        self.assertEqual(same_username.json()["error"], "Username already taken")

    def test_register_validation(self):
        self.assertEqual(self.register(password="abc").status_code, 400)
        self.assertEqual(self.register(email="not-an-email").status_code, 400)
        self.assertEqual(self.register(username="ab").status_code, 400)

    def test_login(self):
        response = self.client.post(
            "/api/auth/login", json={"email": "STAFF@stockroom.io", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["user"]["id"], self.staff.id)
        self.assertEqual(decode_access_token(body["token"]).user_id, self.staff.id)

    def test_login_failures_look_the_same(self):
        wrong_password = self.client.post(
            "/api/auth/login", json={"email": "staff@stockroom.io", "password": "nope"}
        )
        unknown_user = self.client.post(
            "/api/auth/login", json={"email": "ghost@stockroom.io", "password": "secret123"}
        )
        for response in (wrong_password, unknown_user):
            self.assertEqual(response.status_code, 401)
            self.assertEqual(response.json()["error"], "Invalid credentials")
            self.assertEqual(response.json()["kind"], "invalid_credentials")

    def test_me(self):
        response = self.client.get("/api/auth/me", headers=self.owner_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "owner")
        self.assertEqual(response.json()["role"], "owner")

    def test_me_without_token(self):
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Access denied. No token provided.")

    def test_me_for_deleted_user(self):
        headers = self.staff_headers
        db = self.Session()
        try:
            db.delete(db.get(User, self.staff.id))
            db.commit()
        finally:
            db.close()
        response = self.client.get("/api/auth/me", headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "User not found")


if __name__ == "__main__":
    unittest.main()
