# cryptofolio/routers/stats.py
from fastapi import APIRouter, Depends

from cryptofolio.auth import current_user_id
from cryptofolio.models.asset import CryptoAsset
from cryptofolio.models.common import ERROR_RESPONSES
from cryptofolio.services import stats
from cryptofolio.store import AssetStore, get_asset_store

router = APIRouter(prefix="/stats/portfolio", tags=["stats"], responses=ERROR_RESPONSES)

READ = ["GET", "HEAD"]


def _owned(store: AssetStore, user_id: int) -> list[CryptoAsset]:
    # oldest first: the first record of a symbol names its group
    return store.find_all_by_owner(user_id, newest_first=False)


@router.api_route("/value", methods=READ)
def portfolio_value(user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    return stats.portfolio_value(_owned(store, user_id))


@router.api_route("/summary", methods=READ)
def portfolio_summary(user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    return stats.portfolio_summary(_owned(store, user_id))


@router.api_route("/history", methods=READ)
def portfolio_history(user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    return stats.portfolio_history(_owned(store, user_id))


@router.api_route("/distribution", methods=READ)
def portfolio_distribution(user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    return stats.portfolio_distribution(_owned(store, user_id))
