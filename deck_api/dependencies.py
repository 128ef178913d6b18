"""
Dependency wiring for the FastAPI app.

Clients are built once by `create_app` and kept on `app.state`; routes pull
them from the request so tests can hand in their own instances.
"""

from __future__ import annotations

from fastapi import Request

from deck_api.config import Settings
from deck_api.db import DbClient, InMemoryDbClient, PostgresDbClient
from deck_api.storage import InMemoryStorageClient, S3StorageClient, StorageClient


def build_db_client(settings: Settings) -> DbClient:
    if settings.use_in_memory_backends or not settings.database_url:
        return InMemoryDbClient()
    return PostgresDbClient(settings.database_url)


def build_storage_client(settings: Settings) -> StorageClient:
    if settings.use_in_memory_backends or not settings.storage_access_key_id:
        return InMemoryStorageClient()
    return S3StorageClient(
        bucket=settings.storage_bucket,
        region=settings.storage_region or "",
        endpoint=settings.storage_endpoint or "",
        access_key_id=settings.storage_access_key_id or "",
        secret_access_key=settings.storage_secret_access_key or "",
    )


def get_db_client(request: Request) -> DbClient:
    return request.app.state.db


def get_storage_client(request: Request) -> StorageClient:
    return request.app.state.storage
