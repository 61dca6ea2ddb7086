"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "IDXC_"
DEFAULT_CONFIG_PATH = Path("~/.config/index-courier/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("transport", "hosts"): "hosts",
    ("transport", "username"): "username",
    ("transport", "password"): "password",
    ("transport", "timeout"): "request_timeout",
    ("transport", "verify_certs"): "verify_certs",
    ("transport", "pool_maxsize"): "pool_maxsize",
    ("scroll", "keepalive"): "scroll_keepalive",
    ("scroll", "page_size"): "page_size",
    ("scroll", "max_pages"): "max_pages",
    ("bulk", "chunk_size"): "chunk_size",
    ("bulk", "delete_chunk_size"): "delete_chunk_size",
    ("bulk", "retry_on_conflict"): "retry_on_conflict",
    ("bulk", "concurrency"): "bulk_concurrency",
    ("bulk", "refresh"): "bulk_refresh",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    hosts: list[str] = Field(default_factory=lambda: ["http://127.0.0.1:9200"])
    username: str | None = None
    password: str | None = None
    request_timeout: float = 30.0
    verify_certs: bool = True
    pool_maxsize: int = 10
    scroll_keepalive: str = "1m"
    page_size: int = 5000
    max_pages: int = 50
    chunk_size: int = 1000
    delete_chunk_size: int = 20000
    retry_on_conflict: int = 3
    bulk_concurrency: int = 4
    bulk_refresh: str = "false"

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("hosts", mode="before")
    @classmethod
    def _split_hosts(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [host.strip().rstrip("/") for host in value.split(",") if host.strip()]
        if isinstance(value, (list, tuple)):
            return [str(host).strip().rstrip("/") for host in value]
        raise TypeError("hosts must be a list or comma separated string")

    @field_validator(
        "pool_maxsize",
        "page_size",
        "max_pages",
        "chunk_size",
        "delete_chunk_size",
        "bulk_concurrency",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("retry_on_conflict")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retry_on_conflict cannot be negative")
        return value

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username:
            return (self.username, self.password or "")
        return None

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with IDXC_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
