from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

ENV_FILE = Path(".env")

CONFIG_PATH_ENV = "S3_STORE_CONFIG"

# 1 GiB
DEFAULT_MAX_PART_SIZE = 1024 * 1024 * 1024
# S3 caps part numbers at 10000
DEFAULT_MAX_PARTS = 10000
# S3 rejects parts above 5 GiB
STORE_PART_SIZE_LIMIT = 5 * 1024 * 1024 * 1024


class ConfigLoadError(RuntimeError):
    """Raised when the store configuration cannot be located or parsed."""


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigLoadError(f"{name} must be an integer, got {raw!r}") from exc


class S3Config(BaseModel):
    """Connection settings for the object store, read from a JSON file."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    endpoint: str = Field(min_length=1)
    bucket: str = Field(min_length=1)
    region: str = Field(min_length=1)
    access_key: str | None = None
    secret_key: str | None = None
    addressing_style: str = "path"
    use_ssl: bool = True


def load_s3_config(path: str | os.PathLike[str]) -> S3Config:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(
            f"Cannot read store config {config_path}: {exc}"
        ) from exc
    try:
        return S3Config.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigLoadError(
            f"Invalid store config {config_path}: {exc}"
        ) from exc


@dataclass
class Settings:
    S3_STORE_CONFIG: str | None = None
    MAX_PART_SIZE: int = DEFAULT_MAX_PART_SIZE
    MAX_PARTS: int = DEFAULT_MAX_PARTS
    PART_WORKERS: int = 1
    PIN_SOURCE_ETAG: bool = True
    LOG_LEVEL: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 < self.MAX_PART_SIZE <= STORE_PART_SIZE_LIMIT:
            raise ConfigLoadError(
                f"S3EDIT_MAX_PART_SIZE must be between 1 and {STORE_PART_SIZE_LIMIT}"
            )
        if not 0 < self.MAX_PARTS <= DEFAULT_MAX_PARTS:
            raise ConfigLoadError(
                f"S3EDIT_MAX_PARTS must be between 1 and {DEFAULT_MAX_PARTS}"
            )
        if self.PART_WORKERS < 1:
            raise ConfigLoadError("S3EDIT_PART_WORKERS must be at least 1")

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            S3_STORE_CONFIG=os.environ.get(CONFIG_PATH_ENV),
            MAX_PART_SIZE=_as_int("S3EDIT_MAX_PART_SIZE", cls.MAX_PART_SIZE),
            MAX_PARTS=_as_int("S3EDIT_MAX_PARTS", cls.MAX_PARTS),
            PART_WORKERS=_as_int("S3EDIT_PART_WORKERS", cls.PART_WORKERS),
            PIN_SOURCE_ETAG=_as_bool(
                os.environ.get("S3EDIT_PIN_SOURCE_ETAG"), cls.PIN_SOURCE_ETAG
            ),
            LOG_LEVEL=os.environ.get("S3EDIT_LOG_LEVEL", cls.LOG_LEVEL).upper(),
        )

    def load_store_config(self) -> S3Config:
        if not self.S3_STORE_CONFIG:
            raise ConfigLoadError(
                f"{CONFIG_PATH_ENV} is not set; point it at the store config JSON file"
            )
        return load_s3_config(self.S3_STORE_CONFIG)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
