"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from index_courier.core.config import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.scroll_keepalive == "1m"
    assert settings.delete_chunk_size == 20000
    assert settings.retry_on_conflict == 3
    assert settings.auth is None


def test_yaml_sections_and_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "\n".join(
            [
                "transport:",
                "  hosts:",
                "    - \"http://a:9200\"",
                "    - \"http://b:9200/\"",
                "  username: elastic",
                "  password: secret",
                "scroll:",
                "  keepalive: 5m",
                "  page_size: 500",
                "bulk:",
                "  concurrency: 8",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("IDXC_PAGE_SIZE", "250")
    settings = Settings.from_yaml(config)
    assert settings.hosts == ["http://a:9200", "http://b:9200"]
    assert settings.auth == ("elastic", "secret")
    assert settings.scroll_keepalive == "5m"
    assert settings.page_size == 250
    assert settings.bulk_concurrency == 8


def test_comma_separated_hosts_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IDXC_HOSTS", "http://a:9200, http://b:9200")
    assert Settings.from_yaml(Path("/nonexistent.yaml")).hosts == ["http://a:9200", "http://b:9200"]


@pytest.mark.parametrize("field", ["page_size", "max_pages", "chunk_size", "bulk_concurrency"])
def test_sizes_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: 0})
