# cryptofolio/store.py
"""Asset persistence.

Rows never leave this module: reads return frozen ``CryptoAsset`` records and
writes take them back, mapped field by field. Every lookup is scoped to the
owner so a foreign id behaves exactly like a missing one.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from cryptofolio.db import get_db
from cryptofolio.formatting import as_utc
from cryptofolio.models.asset import CryptoAsset
from cryptofolio.orm_models import CryptoAssetORM


def _to_record(row: CryptoAssetORM) -> CryptoAsset:
    return CryptoAsset(
        id=row.id,
        user_id=row.user_id,
        symbol=row.symbol,
        name=row.name,
        quantity=row.quantity,
        purchase_price=row.purchase_price,
        purchase_date=as_utc(row.purchase_date),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


def _apply(row: CryptoAssetORM, a: CryptoAsset) -> None:
    row.symbol = a.symbol
    row.name = a.name
    row.quantity = a.quantity
    row.purchase_price = a.purchase_price
    row.purchase_date = a.purchase_date
    if a.created_at is not None:
        row.created_at = a.created_at
    if a.updated_at is not None:
        row.updated_at = a.updated_at


class AssetStore:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, asset_id: int, user_id: int) -> Optional[CryptoAssetORM]:
        stmt = select(CryptoAssetORM).where(
            CryptoAssetORM.id == asset_id,
            CryptoAssetORM.user_id == user_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_all_by_owner(self, user_id: int, newest_first: bool = True) -> list[CryptoAsset]:
        order = [CryptoAssetORM.created_at, CryptoAssetORM.id]
        if newest_first:
            order = [c.desc() for c in order]
        rows = (
            self.db.execute(
                select(CryptoAssetORM)
                .where(CryptoAssetORM.user_id == user_id)
                .order_by(*order)
            )
            .scalars()
            .all()
        )
        return [_to_record(r) for r in rows]

    def find_one_by_owner(self, asset_id: int, user_id: int) -> Optional[CryptoAsset]:
        row = self._row(asset_id, user_id)
        return _to_record(row) if row else None

    def save(self, a: CryptoAsset) -> CryptoAsset:
        if a.id is None:
            row = CryptoAssetORM(user_id=a.user_id)
        else:
            row = self._row(a.id, a.user_id)
            if row is None:
                raise LookupError(f"asset {a.id} does not exist for this owner")
        _apply(row, a)

        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _to_record(row)

    def delete(self, a: CryptoAsset) -> None:
        row = self._row(a.id, a.user_id)
        if row is None:
            return
        self.db.delete(row)
        self.db.commit()


def get_asset_store(db: Session = Depends(get_db)) -> AssetStore:
    return AssetStore(db)
