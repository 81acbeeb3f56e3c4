# cryptofolio/services/stats.py
"""Portfolio statistics.

Pure functions over a user's assets. There is no market price feed, so the
current value of a position is its cost basis (quantity x purchase price).
The formulas still compute ``value - invested`` so a real price source can be
dropped in by changing ``_current_value`` alone.

All arithmetic is Decimal at full precision; rounding happens in
``cryptofolio.formatting`` when the result dict is built.
"""
from __future__ import annotations

import functools
from decimal import Decimal, localcontext
from typing import Iterable

from cryptofolio import formatting
from cryptofolio.models.asset import CryptoAsset

CURRENCY = "USD"
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# NUMERIC(20,8) x NUMERIC(20,2) products run past the default 28 digits
PRECISION = 60


def _wide_precision(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        with localcontext(prec=PRECISION):
            return fn(*args, **kwargs)
    return wrapper


def _current_value(a: CryptoAsset) -> Decimal:
    return a.invested


def _pct(part: Decimal, whole: Decimal) -> Decimal:
    if whole > 0:
        return part / whole * HUNDRED
    return ZERO


@_wide_precision
def portfolio_value(assets: Iterable[CryptoAsset]) -> dict:
    invested = ZERO
    value = ZERO
    for a in assets:
        invested += a.invested
        value += _current_value(a)

    profit_loss = value - invested
    return {
        "totalValue": formatting.money(value),
        "totalInvested": formatting.money(invested),
        "profitLoss": formatting.money(profit_loss),
        "profitLossPercentage": formatting.money(_pct(profit_loss, invested)),
        "currency": CURRENCY,
    }


@_wide_precision
def portfolio_summary(assets: Iterable[CryptoAsset]) -> dict:
    groups: dict[str, dict] = {}
    total_value = ZERO
    total_invested = ZERO
    total_assets = 0

    for a in assets:
        g = groups.get(a.symbol)
        if g is None:
            g = groups[a.symbol] = {
                "symbol": a.symbol,
                "name": a.name,
                "quantity": ZERO,
                "invested": ZERO,
                "value": ZERO,
                "count": 0,
            }
        invested = a.invested
        value = _current_value(a)
        g["quantity"] += a.quantity
        g["invested"] += invested
        g["value"] += value
        g["count"] += 1

        total_invested += invested
        total_value += value
        total_assets += 1

    summary = []
    for g in groups.values():
        profit_loss = g["value"] - g["invested"]
        summary.append(
            {
                "symbol": g["symbol"],
                "name": g["name"],
                "totalQuantity": formatting.quantity(g["quantity"]),
                "totalInvested": formatting.money(g["invested"]),
                "currentValue": formatting.money(g["value"]),
                "count": g["count"],
                "profitLoss": formatting.money(profit_loss),
                "profitLossPercentage": formatting.money(_pct(profit_loss, g["invested"])),
                "portfolioPercentage": formatting.money(_pct(g["value"], total_value)),
            }
        )

    total_profit_loss = total_value - total_invested
    return {
        "summary": summary,
        "totalAssets": total_assets,
        "uniqueCryptos": len(groups),
        "totalValue": formatting.money(total_value),
        "totalInvested": formatting.money(total_invested),
        "totalProfitLoss": formatting.money(total_profit_loss),
        "totalProfitLossPercentage": formatting.money(_pct(total_profit_loss, total_invested)),
    }


@_wide_precision
def portfolio_history(assets: Iterable[CryptoAsset]) -> dict:
    ordered = sorted(assets, key=lambda a: (formatting.as_utc(a.purchase_date), a.id or 0))

    history = []
    cumulative_invested = ZERO
    cumulative_value = ZERO
    for a in ordered:
        invested = a.invested
        cumulative_invested += invested
        cumulative_value += _current_value(a)
        history.append(
            {
                "date": formatting.date_only(a.purchase_date),
                "symbol": a.symbol,
                "name": a.name,
                "quantity": formatting.quantity(a.quantity),
                "purchasePrice": formatting.money(a.purchase_price),
                "invested": formatting.money(invested),
                "cumulativeInvested": formatting.money(cumulative_invested),
                "cumulativeValue": formatting.money(cumulative_value),
            }
        )

    return {"history": history, "totalEntries": len(history)}


@_wide_precision
def portfolio_distribution(assets: Iterable[CryptoAsset]) -> dict:
    groups: dict[str, dict] = {}
    total_value = ZERO
    for a in assets:
        g = groups.setdefault(a.symbol, {"symbol": a.symbol, "name": a.name, "value": ZERO})
        value = _current_value(a)
        g["value"] += value
        total_value += value

    # sort on the raw Decimal, not the formatted string
    ranked = sorted(groups.values(), key=lambda g: g["value"], reverse=True)

    return {
        "distribution": [
            {
                "symbol": g["symbol"],
                "name": g["name"],
                "value": formatting.money(g["value"]),
                "percentage": formatting.money(_pct(g["value"], total_value)),
            }
            for g in ranked
        ],
        "totalValue": formatting.money(total_value),
    }
