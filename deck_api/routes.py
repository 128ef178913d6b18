"""
HTTP routes for decks and assets.

Each handler issues one backend call (two for asset deletion) and returns
the result as-is. Backend failures surface as BackendError and are turned
into 500 responses by the app's exception handlers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from deck_api.asset_deletion import delete_asset as run_asset_deletion
from deck_api.db import DbClient, NewAsset
from deck_api.dependencies import get_db_client, get_storage_client
from deck_api.schemas import (
    Asset,
    AssetRecordRequest,
    Deck,
    DeckCreate,
    DeckUpdate,
    MessageResponse,
    RecordAssetsResponse,
)
from deck_api.storage import StorageClient

router = APIRouter()


@router.get("/decks", response_model=list[Deck])
def list_decks(db: DbClient = Depends(get_db_client)):
    return db.list_decks()


@router.post("/decks", response_model=Deck)
def create_deck(payload: DeckCreate, db: DbClient = Depends(get_db_client)):
    return db.create_deck(payload.title)


@router.put("/decks/{deck_id}", response_model=Optional[Deck])
def update_deck(
    deck_id: str, payload: DeckUpdate, db: DbClient = Depends(get_db_client)
):
    """
    Rename a deck. An unknown id matches no row and returns null with 200.
    """
    return db.update_deck(deck_id, payload.title)


@router.delete("/decks/{deck_id}", response_model=MessageResponse)
def delete_deck(deck_id: str, db: DbClient = Depends(get_db_client)):
    # Assets go with the deck through the schema's ON DELETE CASCADE.
    db.delete_deck(deck_id)
    return MessageResponse(message="Deck deleted")


@router.get("/decks/{deck_id}/assets", response_model=list[Asset])
def list_assets(deck_id: str, db: DbClient = Depends(get_db_client)):
    return db.list_assets(deck_id)


@router.post("/assets", response_model=RecordAssetsResponse)
def record_assets(
    payload: AssetRecordRequest, db: DbClient = Depends(get_db_client)
):
    """
    Record metadata for files the caller already uploaded to the bucket.
    """
    if not payload.assets:
        raise HTTPException(status_code=400, detail="Asset list is empty")
    if not payload.deckId:
        raise HTTPException(status_code=400, detail="deckId is required")

    created_at = datetime.now(timezone.utc)
    records = [
        NewAsset(
            deck_id=payload.deckId,
            title=item.title,
            storage_path=item.storage_path,
            public_url=item.public_url,
            created_at=created_at,
        )
        for item in payload.assets
    ]
    inserted = db.insert_assets(records)
    return RecordAssetsResponse(
        message="Metadata recorded",
        data=[Asset.model_validate(record) for record in inserted],
    )


@router.delete("/assets/{asset_id}", response_model=MessageResponse)
def delete_asset(
    asset_id: str,
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
):
    run_asset_deletion(db, storage, asset_id)
    return MessageResponse(message="Asset deleted")
