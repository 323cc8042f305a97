"""Process-wide storage client.

The client is built on first use from the store config and reused for the
rest of the process. Concurrent first callers serialise on a lock; a failed
build leaves nothing cached so the next call tries again.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

from s3edit.common.config import S3Config, get_settings
from s3edit.infra.storage.client import StorageClient
from s3edit.infra.storage.s3_client import S3StorageClient


@dataclass(frozen=True, slots=True)
class StorageHandle:
    bucket: str
    client: StorageClient


_handle: StorageHandle | None = None
_lock = threading.Lock()


def _default_factory(config: S3Config) -> StorageClient:
    return S3StorageClient(config=config)


def get_storage(
    factory: Callable[[S3Config], StorageClient] | None = None,
) -> StorageHandle:
    global _handle
    handle = _handle
    if handle is not None:
        return handle
    with _lock:
        if _handle is None:
            config = get_settings().load_store_config()
            client = (factory or _default_factory)(config)
            _handle = StorageHandle(bucket=config.bucket, client=client)
        return _handle


def reset_storage() -> None:
    global _handle
    with _lock:
        _handle = None
