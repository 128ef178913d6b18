"""
Storage abstraction for the asset bucket (S3-compatible) and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from deck_api.errors import BackendError


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def remove(self, paths: list[str]) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def put(self, path: str, data: bytes) -> None:
        self.stored_objects[path] = data

    def remove(self, paths: list[str]) -> None:
        # Missing keys are not an error, matching S3 DeleteObjects.
        for path in paths:
            self.stored_objects.pop(path, None)


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client for the asset bucket.

    Works with any endpoint speaking the S3 protocol, including the storage
    gateways of hosted Postgres platforms.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        # Path-style addressing: most self-hosted and platform gateways need it.
        config = Config(
            s3={"addressing_style": "path"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        try:
            response = self._client.delete_objects(
                Bucket=self.bucket,
                Delete={
                    "Objects": [{"Key": path} for path in paths],
                    "Quiet": True,
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(str(exc)) from exc
        errors = response.get("Errors") or []
        if errors:
            first = errors[0]
            raise BackendError(
                f"{first.get('Key')}: {first.get('Message') or first.get('Code')}"
            )
