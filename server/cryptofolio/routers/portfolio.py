# cryptofolio/routers/portfolio.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from cryptofolio.auth import current_user_id
from cryptofolio.models.asset import asset_json
from cryptofolio.models.common import ERROR_RESPONSES, MessageResponse
from cryptofolio.services import portfolio as svc
from cryptofolio.store import AssetStore, get_asset_store

router = APIRouter(prefix="/portfolio", tags=["portfolio"], responses=ERROR_RESPONSES)

READ = ["GET", "HEAD"]


@router.api_route("", methods=READ)
def list_assets(user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    assets = [asset_json(a) for a in svc.list_assets(store, user_id)]
    return {"assets": assets, "count": len(assets)}


@router.api_route("/{asset_id}", methods=READ)
def show_asset(asset_id: int, user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    return asset_json(svc.get_asset(store, user_id, asset_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: Any = Body(...),
    user_id: int = Depends(current_user_id),
    store: AssetStore = Depends(get_asset_store),
):
    a = svc.create_asset(store, user_id, payload)
    return {"message": "Asset created successfully", "asset": asset_json(a)}


@router.api_route("/{asset_id}", methods=["PUT", "PATCH"])
def update_asset(
    asset_id: int,
    payload: Any = Body(...),
    user_id: int = Depends(current_user_id),
    store: AssetStore = Depends(get_asset_store),
):
    a = svc.update_asset(store, user_id, asset_id, payload)
    return {"message": "Asset updated successfully", "asset": asset_json(a)}


@router.delete("/{asset_id}", response_model=MessageResponse)
def delete_asset(asset_id: int, user_id: int = Depends(current_user_id), store: AssetStore = Depends(get_asset_store)):
    svc.delete_asset(store, user_id, asset_id)
    return MessageResponse(message="Asset deleted successfully")
