"""Unit tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from archivist.config import (
    ArchivistConfig,
    ConfigError,
    ConfigManager,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".archivist" / "config.yaml"
    assert path.exists()
    text = path.read_text(encoding="utf-8")
    assert "Archivist configuration file" in text
    assert "Last updated:" in text
    assert "remote.sheet_path" in text
    assert "ARCHIVIST__SECTION__KEY" in text
    assert yaml.safe_load(text)["remote"]["sheet_path"] is None

    config = manager.load(include_env=False)
    assert isinstance(config, ArchivistConfig)
    assert config.images.max_encoded_chars == 42_000
    assert config.remote.endpoint_url is None


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save(
        {
            "remote": {"endpoint_url": "https://script.example/exec"},
            "storage": {"cache_ttl_seconds": 60},
        }
    )

    env = {
        "ARCHIVIST__STORAGE__CACHE_TTL_SECONDS": "120",
        "ARCHIVIST__REMOTE__UPLOAD_IMAGES": "true",
        "UNRELATED": "ignored",
    }
    cli = {"storage.cache_ttl_seconds": 5}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.remote.endpoint_url == "https://script.example/exec"
    assert config.remote.upload_images is True
    # CLI overrides take precedence over environment
    assert config.storage.cache_ttl_seconds == 5


def test_environment_overrides_file_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"images": {"max_dimension": 640}})

    config = manager.load(env_overrides={"ARCHIVIST__IMAGES__MAX_DIMENSION": "512"})

    assert config.images.max_dimension == 512


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_setting_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=ArchivistConfig(),
            file_overrides={"remote": {"endpoint": "https://typo.example"}},
        )


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(ArchivistConfig())

    assert flat["ARCHIVIST__STORAGE__CACHE_TTL_SECONDS"] == "300"
    assert flat["ARCHIVIST__REMOTE__ENDPOINT_URL"] == "null"
    assert flat["ARCHIVIST__IMAGES__INITIAL_QUALITY"] == "0.82"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=ArchivistConfig(),
            file_overrides={"images": {"max_dimension": "not-an-int"}},
        )
