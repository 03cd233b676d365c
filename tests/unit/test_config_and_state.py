"""
Unit tests for configuration loading and the run state store.
"""

from datetime import datetime, timezone

import pytest

from event_ingest.config import IngestConfig
from event_ingest.core.errors import ConfigError
from event_ingest.core.models import RunState
from event_ingest.state import SqliteRunStateStore


class TestIngestConfig:
    """Tests for IngestConfig."""

    def test_defaults(self):
        config = IngestConfig()

        assert config.get("runner.max_page_index") == 200
        assert config.get("source.page_size") == 50
        assert config.get("store.backend") == "mongo"
        assert config.get("store.timestamp_field") == "created_date"
        assert config.get("runner.before_timestamp") is None

    def test_yaml_merges_over_defaults(self, tmp_path):
        path = tmp_path / "ingest.yaml"
        path.write_text(
            "store:\n"
            "  backend: sqlite\n"
            "  mongo:\n"
            "    database: opensea\n"
            "runner:\n"
            "  max_page_index: 10\n",
            encoding="utf-8",
        )

        config = IngestConfig(config_path=path)

        assert config.get("store.backend") == "sqlite"
        assert config.get("store.mongo.database") == "opensea"
        # Sibling defaults survive the merge
        assert config.get("store.mongo.uri") == "mongodb://localhost:27017"
        assert config.get("runner.max_page_index") == 10

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert IngestConfig(config_path=path).get("runner.max_page_index") == 200

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            IngestConfig(config_path=tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("store: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            IngestConfig(config_path=path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            IngestConfig(config_path=path)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MONGO_URI", "mongodb://db:27017")
        monkeypatch.setenv("MONGO_DATABASE", "opensea")
        monkeypatch.setenv("MONGO_COLLECTION", "events")
        monkeypatch.setenv("INGEST_BEFORE_TIMESTAMP", "1615746153")
        monkeypatch.setenv("OPENSEA_API_KEY", "secret")

        config = IngestConfig()

        assert config.get("store.mongo.uri") == "mongodb://db:27017"
        assert config.get("store.mongo.database") == "opensea"
        assert config.get("store.mongo.collection") == "events"
        assert config.get("runner.before_timestamp") == 1615746153
        assert config.get("source.api_key") == "secret"

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "ingest.yaml"
        path.write_text("runner:\n  max_page_index: 10\n", encoding="utf-8")
        monkeypatch.setenv("INGEST_MAX_PAGE_INDEX", "3")

        assert IngestConfig(config_path=path).get("runner.max_page_index") == 3

    def test_non_integer_env(self, monkeypatch):
        monkeypatch.setenv("INGEST_BEFORE_TIMESTAMP", "yesterday")

        with pytest.raises(ConfigError):
            IngestConfig()

    def test_get_default_and_set(self):
        config = IngestConfig()

        assert config.get("does.not.exist", "fallback") == "fallback"
        config.set("extra.nested.key", 5)
        assert config.get("extra.nested.key") == 5


class TestSqliteRunStateStore:
    """Tests for SqliteRunStateStore."""

    def test_load_missing(self, tmp_path):
        store = SqliteRunStateStore(db_path=tmp_path / "state.db")
        try:
            assert store.load("opensea_events") is None
        finally:
            store.close()

    def test_save_and_load(self, tmp_path):
        run_at = datetime(2021, 3, 14, 12, 30, tzinfo=timezone.utc)
        store = SqliteRunStateStore(db_path=tmp_path / "state.db")
        try:
            store.save("opensea_events", RunState(last_cursor=1615723200, last_run_at=run_at))
            state = store.load("opensea_events")
        finally:
            store.close()

        assert state.last_cursor == 1615723200
        assert state.last_run_at == run_at

    def test_save_replaces(self, tmp_path):
        path = tmp_path / "state.db"
        store = SqliteRunStateStore(db_path=path)
        store.save("job", RunState(last_cursor=200))
        store.save("job", RunState(last_cursor=100))
        store.save("other", RunState(last_cursor=5))
        store.close()

        reopened = SqliteRunStateStore(db_path=path)
        try:
            assert reopened.load("job").last_cursor == 100
            assert reopened.load("other").last_cursor == 5
        finally:
            reopened.close()
