"""
Two-step removal of an asset: bucket object first, then the metadata row.

The steps are not atomic. If the object is removed and the row delete then
fails, the row survives pointing at an object that no longer exists. That
state is logged and the row error is re-raised; nothing tries to restore the
object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from deck_api.db import DbClient
from deck_api.errors import BackendError
from deck_api.storage import StorageClient

logger = logging.getLogger(__name__)


@dataclass
class AssetDeletion:
    asset_id: str
    storage_path: Optional[str] = None
    object_removed: bool = False


def _lookup_storage_path(db: DbClient, asset_id: str) -> Optional[str]:
    try:
        return db.get_asset_storage_path(asset_id)
    except BackendError as exc:
        logger.warning("Lookup of asset %s failed, skipping storage: %s", asset_id, exc)
        return None


def delete_asset(db: DbClient, storage: StorageClient, asset_id: str) -> AssetDeletion:
    """
    Delete one asset.

    1. look up its storage_path (errors count as a miss)
    2. remove the object from the bucket when the row was found (errors are logged)
    3. delete the row (errors propagate)
    """
    outcome = AssetDeletion(asset_id=asset_id)
    outcome.storage_path = _lookup_storage_path(db, asset_id)

    if outcome.storage_path:
        try:
            storage.remove([outcome.storage_path])
            outcome.object_removed = True
            logger.info("Removed object %s for asset %s", outcome.storage_path, asset_id)
        except BackendError as exc:
            logger.warning(
                "Failed to remove object %s for asset %s: %s",
                outcome.storage_path,
                asset_id,
                exc,
            )

    try:
        db.delete_asset(asset_id)
    except BackendError:
        if outcome.object_removed:
            logger.warning(
                "Asset %s row survives but object %s was already removed",
                asset_id,
                outcome.storage_path,
            )
        raise
    return outcome
