from __future__ import annotations

from s3edit.common.config import Settings, get_settings
from s3edit.infra.storage.client import StorageClient


class BaseService:
    """Holds the storage client, bucket and settings shared by services."""

    def __init__(
        self,
        storage: StorageClient,
        *,
        bucket: str,
        settings: Settings | None = None,
    ):
        self._storage = storage
        self._bucket = bucket
        self._settings = settings or get_settings()

    @property
    def storage(self) -> StorageClient:
        return self._storage

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def settings(self) -> Settings:
        return self._settings
