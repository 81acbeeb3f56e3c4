import unittest
from unittest.mock import patch

from support import ApiTestCase

from cryptofolio.middleware.cache import etag_for
from cryptofolio.middleware.cors import CORS_HEADERS


class TestCors(ApiTestCase):
    def assertCors(self, response):
        for k, v in CORS_HEADERS.items():
            self.assertEqual(response.headers.get(k), v, k)

    def test_preflight_short_circuits(self):
        with patch("cryptofolio.services.portfolio.delete_asset") as delete_mock:
            r = self.client.options("/api/portfolio/1", headers=self.alice)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.content, b"")
        self.assertCors(r)
        self.assertNotIn("cache-control", r.headers)
        delete_mock.assert_not_called()

    def test_preflight_on_unknown_path(self):
        r = self.client.options("/definitely/not/a/route")
        self.assertEqual(r.status_code, 200)
        self.assertCors(r)

    def test_headers_on_regular_and_error_responses(self):
        self.assertCors(self.client.get("/api/portfolio", headers=self.alice))
        self.assertCors(self.client.get("/api/portfolio"))
        self.assertCors(self.client.post("/api/portfolio", json={}, headers=self.alice))


class TestCaching(ApiTestCase):
    def test_get_gets_cache_headers_and_etag(self):
        r = self.client.get("/api/portfolio", headers=self.alice)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.headers["cache-control"], "private, max-age=30, must-revalidate")
        self.assertEqual(r.headers["x-cache-ttl"], "30")
        self.assertEqual(r.headers["etag"], etag_for(r.content))

    def test_matching_if_none_match_returns_304(self):
        self.create()
        first = self.client.get("/api/stats/portfolio/value", headers=self.alice)
        etag = first.headers["etag"]

        r = self.client.get("/api/stats/portfolio/value", headers={**self.alice, "If-None-Match": etag})
        self.assertEqual(r.status_code, 304)
        self.assertEqual(r.content, b"")
        self.assertEqual(r.headers["etag"], etag)
        self.assertEqual(r.headers["access-control-allow-origin"], "*")

    def test_etag_changes_with_content(self):
        first = self.client.get("/api/portfolio", headers=self.alice)
        self.create()
        r = self.client.get("/api/portfolio", headers={**self.alice, "If-None-Match": first.headers["etag"]})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["count"], 1)
        self.assertNotEqual(r.headers["etag"], first.headers["etag"])

    def test_head_matches_get_without_body(self):
        self.create()
        get = self.client.get("/api/portfolio", headers=self.alice)
        head = self.client.head("/api/portfolio", headers=self.alice)
        self.assertEqual(head.status_code, 200)
        self.assertEqual(head.content, b"")
        self.assertEqual(head.headers["etag"], get.headers["etag"])
        self.assertEqual(head.headers["cache-control"], get.headers["cache-control"])

    def test_head_revalidates_like_get(self):
        get = self.client.get("/api/stats/portfolio/summary", headers=self.alice)
        r = self.client.head(
            "/api/stats/portfolio/summary", headers={**self.alice, "If-None-Match": get.headers["etag"]}
        )
        self.assertEqual(r.status_code, 304)

    def test_writes_are_not_cached(self):
        r = self.client.post(
            "/api/portfolio",
            json={"symbol": "eth", "name": "Ether", "quantity": "1", "purchasePrice": "1"},
            headers=self.alice,
        )
        self.assertEqual(r.status_code, 201)
        self.assertNotIn("cache-control", r.headers)
        self.assertNotIn("etag", r.headers)

    def test_auth_paths_are_excluded(self):
        r = self.client.get("/api/login")
        self.assertNotIn("cache-control", r.headers)
        self.assertNotIn("etag", r.headers)


if __name__ == "__main__":
    unittest.main()
