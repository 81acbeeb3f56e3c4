import time
import unittest
from unittest.mock import patch

from support import ApiTestCase

from cryptofolio import auth
from cryptofolio.errors import INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE


class TestPasswordsAndTokens(unittest.TestCase):
    def test_password_hash_round_trip(self):
        stored = auth.hash_password("hunter22")
        self.assertTrue(stored.startswith("pbkdf2_sha256$"))
        self.assertTrue(auth.verify_password("hunter22", stored))
        self.assertFalse(auth.verify_password("hunter23", stored))
        self.assertFalse(auth.verify_password("hunter22", "garbage"))

    def test_token_round_trip(self):
        token, exp = auth.create_access_token(7, "a@b.io")
        payload = auth.decode_access_token(token)
        self.assertEqual(payload["sub"], "7")
        self.assertEqual(payload["exp"], exp)

    def test_tampered_token(self):
        token, _ = auth.create_access_token(7, "a@b.io")
        h, p, s = token.split(".")
        forged, _ = auth.create_access_token(8, "a@b.io")
        with self.assertRaises(ValueError):
            auth.decode_access_token(".".join([h, forged.split(".")[1], s]))

    def test_expired_token(self):
        with patch.object(auth, "JWT_EXPIRE_MINUTES", -1):
            token, _ = auth.create_access_token(7, "a@b.io")
        with self.assertRaises(ValueError):
            auth.decode_access_token(token)


class TestAuthRoutes(ApiTestCase):
    def test_register_login_me(self):
        r = self.client.post("/api/register", json={"email": " Carol@Example.com ", "password": "s3cret!"})
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["email"], "carol@example.com")

        r = self.client.post("/api/login", json={"email": "carol@example.com", "password": "s3cret!"})
        self.assertEqual(r.status_code, 200)
        token = r.json()["token"]
        self.assertGreater(r.json()["expires_in"], time.time())

        me = self.client.get("/api/me", headers={"Authorization": f"Bearer {token}"}).json()
        self.assertEqual(me["email"], "carol@example.com")
        self.assertEqual(me["roles"], ["ROLE_USER"])

    def test_duplicate_registration(self):
        r = self.client.post("/api/register", json={"email": "alice@example.com", "password": "whatever"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json(), {"error": "User already exists"})

    def test_login_failures_are_indistinguishable(self):
        wrong_password = self.client.post("/api/login", json={"email": "alice@example.com", "password": "nope"})
        unknown_user = self.client.post("/api/login", json={"email": "nobody@example.com", "password": "nope"})
        for r in (wrong_password, unknown_user):
            self.assertEqual(r.status_code, 401)
            self.assertEqual(r.json(), {"error": INVALID_CREDENTIALS, "message": INVALID_CREDENTIALS_MESSAGE})

    def test_login_is_never_cached(self):
        r = self.client.post("/api/login", json={"email": "alice@example.com", "password": "secret123"})
        self.assertEqual(r.status_code, 200)
        self.assertNotIn("etag", r.headers)

    def test_me_for_deleted_user(self):
        headers = self.auth_headers(9999, "ghost@example.com")
        r = self.client.get("/api/me", headers=headers)
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], INVALID_CREDENTIALS)


class TestServiceRoutes(ApiTestCase):
    def test_health(self):
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "ok")

    def test_routes_listing(self):
        body = self.client.get("/api/routes").json()
        paths = {r["path"] for r in body["routes"]}
        self.assertIn("/api/portfolio/{asset_id}", paths)
        self.assertIn("/api/stats/portfolio/distribution", paths)
        self.assertEqual(body["count"], len(body["routes"]))


if __name__ == "__main__":
    unittest.main()
