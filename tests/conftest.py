from __future__ import annotations

import pytest

from s3edit.common.config import get_settings
from s3edit.infra.storage.registry import reset_storage

_ENV_VARS = (
    "S3_STORE_CONFIG",
    "S3EDIT_MAX_PART_SIZE",
    "S3EDIT_MAX_PARTS",
    "S3EDIT_PART_WORKERS",
    "S3EDIT_PIN_SOURCE_ETAG",
    "S3EDIT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a stray .env in the checkout from leaking into tests
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    reset_storage()
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]
    reset_storage()
