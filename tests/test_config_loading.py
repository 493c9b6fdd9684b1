"""Tests for settings and YAML config loading."""

import json
from pathlib import Path

import pytest

from eventsync.adapters.kv_store import InMemoryKeyValueStore, SqliteKeyValueStore
from eventsync.adapters.store_factory import create_kv_store, create_seen_marker_store
from eventsync.config.settings import Settings, deep_merge, load_all_configs


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("EVENTSYNC_METRICS_DAYS", "EVENTSYNC_LOG_LEVEL", "EVENTSYNC_API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_defaults_without_config_dir(tmp_path: Path) -> None:
    settings = Settings(config_dir=tmp_path / "missing")

    assert settings.api_base_url == "http://localhost:5000"
    assert settings.metrics_days == 14
    assert settings.trend_length == 18
    assert settings.seen_marker_key == "unihub-newest-notification-seen"
    assert "Activity join" in settings.get_surface("participant").interested_titles
    assert "Activity Ended" in settings.get_surface("admin").suppressed_titles


def test_yaml_values_applied(tmp_path: Path) -> None:
    _write(
        tmp_path / "main.yaml",
        """
api:
  base_url: http://backend.test
dashboard:
  metrics_days: 7
storage:
  backend: memory
surfaces:
  leader:
    interested_titles: [Join request]
""",
    )

    settings = Settings(config_dir=tmp_path)

    assert settings.api_base_url == "http://backend.test"
    assert settings.metrics_days == 7
    assert settings.storage_backend == "memory"
    assert settings.get_surface("leader").interested_titles == {"Join request"}
    assert settings.get_surface("leader").broadcast_titles == set()
    assert "participant" in settings.surfaces


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(tmp_path / "main.yaml", "dashboard:\n  metrics_days: 7\n")
    monkeypatch.setenv("EVENTSYNC_METRICS_DAYS", "30")

    settings = Settings(config_dir=tmp_path)

    assert settings.metrics_days == 30


def test_metrics_days_clamped(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "dashboard:\n  metrics_days: 365\n")

    assert Settings(config_dir=tmp_path).metrics_days == 90


def test_later_files_override_main(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "api:\n  base_url: http://a\n  timeout_seconds: 5\n")
    _write(tmp_path / "local.yaml", "api:\n  base_url: http://b\n")

    merged = load_all_configs(tmp_path)

    assert merged["api"] == {"base_url": "http://b", "timeout_seconds": 5}


def test_schema_violation_raises(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "dashboard:\n  trend_length: 1\n")
    _write(
        tmp_path / "schemas" / "main.schema.json",
        json.dumps(
            {
                "type": "object",
                "properties": {
                    "dashboard": {
                        "type": "object",
                        "properties": {"trend_length": {"type": "integer", "minimum": 2}},
                    }
                },
            }
        ),
    )

    with pytest.raises(ValueError, match="Config validation failed for main"):
        load_all_configs(tmp_path)


def test_invalid_yaml_file_is_skipped(tmp_path: Path) -> None:
    _write(tmp_path / "main.yaml", "api: [unclosed\n")

    assert load_all_configs(tmp_path) == {}


def test_unknown_surface_raises(tmp_path: Path) -> None:
    with pytest.raises(KeyError):
        Settings(config_dir=tmp_path).get_surface("guest")


def test_deep_merge_nested() -> None:
    assert deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}}) == {"a": {"b": 1, "c": 3}}


def test_store_factory_backends(tmp_path: Path) -> None:
    memory_settings = Settings(config_dir=tmp_path, storage_backend="memory")
    sqlite_settings = Settings(
        config_dir=tmp_path,
        storage_backend="sqlite",
        storage_path=str(tmp_path / "kv.sqlite"),
    )

    assert isinstance(create_kv_store(memory_settings), InMemoryKeyValueStore)
    assert isinstance(create_kv_store(sqlite_settings), SqliteKeyValueStore)

    store = create_seen_marker_store(memory_settings, namespace="alice@example.com")
    assert store.key == "unihub-newest-notification-seen:alice@example.com"


def test_shipped_config_keys_map_to_settings() -> None:
    config_dir = Path(__file__).resolve().parents[1] / "config"

    merged = load_all_configs(config_dir)

    dashboard_keys = set(merged["dashboard"])
    assert dashboard_keys == {"metrics_days", "trend_length"}
    assert dashboard_keys <= set(Settings.model_fields)
    assert Settings(config_dir=config_dir).trend_length == merged["dashboard"]["trend_length"]
