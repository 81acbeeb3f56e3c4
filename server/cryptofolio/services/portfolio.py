# cryptofolio/services/portfolio.py
"""Create, read, update and delete a user's asset positions.

Every function takes the caller's ``user_id`` explicitly; the store applies it
to each query, which is what keeps users isolated from each other.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from cryptofolio.errors import BadRequest, NotFound
from cryptofolio.formatting import parse_timestamp
from cryptofolio.models.asset import CryptoAsset, decode_fields
from cryptofolio.orm_models import utcnow
from cryptofolio.store import AssetStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("symbol", "name", "quantity", "purchasePrice")

ASSET_NOT_FOUND = "Asset not found"
MISSING_DATA = "Missing data: symbol, name, quantity and purchasePrice are required"
INVALID_DATE = "Invalid date format (expected format: Y-m-d H:i:s)"
INVALID_DATA = "Invalid data"


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise BadRequest("Invalid JSON body")
    return dict(payload)


def _present(payload: dict[str, Any]) -> dict[str, Any]:
    # null is treated as "not sent"
    return {k: v for k, v in payload.items() if v is not None}


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    if isinstance(fields.get("symbol"), str):
        fields["symbol"] = fields["symbol"].strip().upper()
    return fields


def _validated(fields: dict[str, Any]):
    decoded = decode_fields(fields)
    if not decoded.ok:
        raise BadRequest(INVALID_DATA, decoded.errors)
    return decoded.value


def _purchase_date(raw: Any):
    try:
        return parse_timestamp(raw)
    except ValueError:
        raise BadRequest(INVALID_DATE)


def list_assets(store: AssetStore, user_id: int) -> list[CryptoAsset]:
    return store.find_all_by_owner(user_id)


def get_asset(store: AssetStore, user_id: int, asset_id: int) -> CryptoAsset:
    a = store.find_one_by_owner(asset_id, user_id)
    if a is None:
        raise NotFound(ASSET_NOT_FOUND)
    return a


def create_asset(store: AssetStore, user_id: int, payload: Any) -> CryptoAsset:
    data = _present(_require_object(payload))

    missing = [f for f in REQUIRED_FIELDS if f not in data]
    if missing:
        raise BadRequest(MISSING_DATA, [f"{f}: This value is required." for f in missing])

    now = utcnow()
    raw_date = data.pop("purchaseDate", None)
    purchase_date = _purchase_date(raw_date) if raw_date is not None else now

    fields = _validated(_normalize(data))

    a = store.save(
        CryptoAsset(
            user_id=user_id,
            symbol=fields.symbol,
            name=fields.name,
            quantity=fields.quantity,
            purchase_price=fields.purchase_price,
            purchase_date=purchase_date,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("asset_created id=%s symbol=%s", a.id, a.symbol)
    return a


def update_asset(store: AssetStore, user_id: int, asset_id: int, payload: Any) -> CryptoAsset:
    current = get_asset(store, user_id, asset_id)
    patch = _present(_require_object(payload))

    purchase_date = current.purchase_date
    if "purchaseDate" in patch:
        purchase_date = _purchase_date(patch.pop("purchaseDate"))

    # unset fields keep their stored values; the merged record is validated as a whole
    merged = {
        "symbol": current.symbol,
        "name": current.name,
        "quantity": current.quantity,
        "purchasePrice": current.purchase_price,
    }
    merged.update(patch)
    fields = _validated(_normalize(merged))

    updated = current.model_copy(
        update={
            "symbol": fields.symbol,
            "name": fields.name,
            "quantity": fields.quantity,
            "purchase_price": fields.purchase_price,
            "purchase_date": purchase_date,
            "updated_at": utcnow(),
        }
    )
    try:
        a = store.save(updated)
    except LookupError:
        # deleted by a concurrent request between load and save
        raise NotFound(ASSET_NOT_FOUND)
    logger.info("asset_updated id=%s fields=%s", a.id, ",".join(sorted(patch)) or "-")
    return a


def delete_asset(store: AssetStore, user_id: int, asset_id: int) -> None:
    a = get_asset(store, user_id, asset_id)
    store.delete(a)
    logger.info("asset_deleted id=%s", asset_id)
