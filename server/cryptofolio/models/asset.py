from datetime import datetime
from decimal import Decimal
from typing import Any, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, condecimal

from cryptofolio import formatting


class CryptoAsset(BaseModel):
    """A single recorded position. Immutable; use ``model_copy(update=...)``."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    user_id: int
    symbol: str
    name: str
    quantity: Decimal
    purchase_price: Decimal
    purchase_date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def invested(self) -> Decimal:
        return self.quantity * self.purchase_price


class AssetFields(BaseModel):
    """Writable asset fields as they arrive in a request body."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    symbol: str = Field(min_length=1, max_length=10)  # BTC, ETH, SOL...
    name: str = Field(min_length=1, max_length=100)
    quantity: condecimal(ge=0, max_digits=20, decimal_places=8, allow_inf_nan=False)
    purchase_price: condecimal(ge=0, max_digits=20, decimal_places=2, allow_inf_nan=False) = Field(
        alias="purchasePrice"
    )


class DecodedFields(NamedTuple):
    value: Optional[AssetFields]
    errors: List[str]

    @property
    def ok(self) -> bool:
        return self.value is not None


def decode_fields(data: dict[str, Any]) -> DecodedFields:
    try:
        return DecodedFields(AssetFields.model_validate(data), [])
    except ValidationError as exc:
        return DecodedFields(None, [_field_error(e) for e in exc.errors()])


def _field_error(err: dict) -> str:
    path = ".".join(str(part) for part in err.get("loc", ())) or "body"
    return f"{path}: {err.get('msg', 'Invalid value')}"


def asset_json(a: CryptoAsset) -> dict:
    return {
        "id": a.id,
        "symbol": a.symbol,
        "name": a.name,
        "quantity": formatting.quantity(a.quantity),
        "purchasePrice": formatting.money(a.purchase_price),
        "purchaseDate": formatting.timestamp(a.purchase_date),
        "createdAt": formatting.timestamp(a.created_at) if a.created_at else None,
        "updatedAt": formatting.timestamp(a.updated_at) if a.updated_at else None,
    }
