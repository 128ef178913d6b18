"""
Pydantic schemas for the deck asset API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeckCreate(BaseModel):
    title: str = Field(..., min_length=1)


class DeckUpdate(BaseModel):
    title: str


class Deck(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    created_at: datetime


class AssetIn(BaseModel):
    title: Optional[str] = None
    storage_path: str
    public_url: str


class AssetRecordRequest(BaseModel):
    # Checked by the route so an empty list is rejected before deckId.
    deckId: Optional[Union[str, int]] = None
    assets: Optional[list[AssetIn]] = None

    @field_validator("deckId")
    @classmethod
    def _deck_id_as_str(cls, value):
        # Integer-keyed clients send numeric ids.
        return str(value) if isinstance(value, int) else value


class Asset(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    deck_id: str
    title: Optional[str] = None
    storage_path: str
    public_url: str
    created_at: datetime


class MessageResponse(BaseModel):
    message: str


class RecordAssetsResponse(BaseModel):
    message: str
    data: list[Asset]


class ErrorResponse(BaseModel):
    error: str
