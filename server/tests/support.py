"""Shared fixtures for the test suite.

Import this module before anything from ``cryptofolio`` so the app binds to an
in-memory sqlite database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("PBKDF2_ITERS", "1000")

import unittest
from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient

from cryptofolio.auth import create_access_token, hash_password
from cryptofolio.db import SessionLocal, engine
from cryptofolio.main import app
from cryptofolio.models.asset import CryptoAsset
from cryptofolio.orm_models import Base, UserORM


def make_asset(symbol="BTC", quantity="1", price="100.00", when=None, asset_id=None, name=None, user_id=1):
    return CryptoAsset(
        id=asset_id,
        user_id=user_id,
        symbol=symbol,
        name=name or symbol.title(),
        quantity=Decimal(quantity),
        purchase_price=Decimal(price),
        purchase_date=when or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def add_user(email: str, password: str = "secret123") -> int:
    with SessionLocal() as db:
        u = UserORM(email=email, password_hash=hash_password(password))
        db.add(u)
        db.commit()
        return u.id


class ApiTestCase(unittest.TestCase):
    """Fresh database, a client, and two users per test."""

    def setUp(self):
        reset_db()
        self.client = TestClient(app)
        self.alice_id = add_user("alice@example.com")
        self.bob_id = add_user("bob@example.com")
        self.alice = self.auth_headers(self.alice_id, "alice@example.com")
        self.bob = self.auth_headers(self.bob_id, "bob@example.com")

    def tearDown(self):
        self.client.close()

    @staticmethod
    def auth_headers(user_id: int, email: str) -> dict:
        token, _ = create_access_token(user_id, email)
        return {"Authorization": f"Bearer {token}"}

    def create(self, headers=None, **payload):
        body = {"symbol": "btc", "name": "Bitcoin", "quantity": "1", "purchasePrice": "100.00"}
        body.update(payload)
        r = self.client.post("/api/portfolio", json=body, headers=headers or self.alice)
        self.assertEqual(r.status_code, 201, r.text)
        return r.json()["asset"]
