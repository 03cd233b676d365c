"""
Unit tests for the document stores.

SQLite runs against a temporary file; the MongoDB client is mocked.
"""

from unittest.mock import MagicMock

import pytest
from bson.errors import InvalidDocument
from pymongo import ASCENDING
from pymongo.errors import BulkWriteError, ServerSelectionTimeoutError

from event_ingest.core.errors import StoreReadError, StoreWriteError
from event_ingest.storage import SqliteDocumentStore, create_document_store
from event_ingest.storage.mongo_store import MongoDocumentStore


class TestSqliteDocumentStore:
    """Tests for SqliteDocumentStore."""

    def test_insert_and_count(self, sqlite_store):
        inserted = sqlite_store.insert_many([
            {"id": 1, "created_date": "2021-03-14T12:00:00.000000"},
            {"id": 2, "created_date": "2021-03-14T11:00:00.000000"},
        ])

        assert inserted == 2
        assert sqlite_store.count() == 2

    def test_empty_batch_is_noop(self, sqlite_store):
        assert sqlite_store.insert_many([]) == 0
        assert sqlite_store.count() == 0

    def test_documents_round_trip_untouched(self, sqlite_store):
        doc = {"created_date": "2021-03-14T12:00:00", "asset": {"name": "Ünïcode", "ids": [1, 2]}}
        sqlite_store.insert_many([doc])

        assert sqlite_store.find_earliest("created_date") == doc

    def test_earliest_on_empty_store(self, sqlite_store):
        assert sqlite_store.find_earliest("created_date") is None

    def test_orders_by_instant_not_string(self, sqlite_store):
        """Mixed precision would sort wrongly as strings."""
        sqlite_store.insert_many([
            # Lexicographically smaller, chronologically later
            {"id": "later", "created_date": "2021-03-14T12:00:00.5"},
            {"id": "earlier", "created_date": "2021-03-14T12:00:00"},
        ])
        sqlite_store.insert_many([
            {"id": "latest", "created_date": "2021-03-14T12:00:01.000000000"},
        ])

        assert sqlite_store.find_earliest("created_date")["id"] == "earlier"

    def test_unparseable_rows_sort_last(self, sqlite_store):
        sqlite_store.insert_many([
            {"id": "bad", "created_date": "0000-garbage"},
            {"id": "good", "created_date": "2030-01-01T00:00:00"},
        ])

        assert sqlite_store.find_earliest("created_date")["id"] == "good"

    def test_only_unparseable_rows(self, sqlite_store):
        sqlite_store.insert_many([{"id": "bad", "created_date": "garbage"}])

        assert sqlite_store.find_earliest("created_date")["id"] == "bad"

    def test_unknown_field_rejected(self, sqlite_store):
        with pytest.raises(StoreReadError):
            sqlite_store.find_earliest("occurred_at")

    def test_unserializable_document(self, sqlite_store):
        with pytest.raises(StoreWriteError):
            sqlite_store.insert_many([{"created_date": "2021-03-14T12:00:00", "x": object()}])
        assert sqlite_store.count() == 0

    def test_unencodable_text_raises_write_error(self, sqlite_store):
        # A lone surrogate survives json.dumps but not the UTF-8 bind
        with pytest.raises(StoreWriteError):
            sqlite_store.insert_many([{"created_date": "2021-03-14T12:00:00", "name": "\ud83d"}])
        assert sqlite_store.count() == 0

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "nested" / "events.db"
        with SqliteDocumentStore(db_path=path) as store:
            store.insert_many([{"created_date": "2021-03-14T12:00:00"}])

        with SqliteDocumentStore(db_path=path) as store:
            assert store.count() == 1

    def test_context_manager_closes(self, tmp_path):
        with SqliteDocumentStore(db_path=tmp_path / "events.db") as store:
            pass
        assert store.conn is None


class TestMongoDocumentStore:
    """Tests for MongoDocumentStore with a mocked client."""

    def _store(self):
        client = MagicMock()
        collection = MagicMock()
        client.__getitem__.return_value.__getitem__.return_value = collection
        store = MongoDocumentStore(database="opensea", collection="events", client=client)
        return store, client, collection

    def test_requires_names(self):
        with pytest.raises(ValueError):
            MongoDocumentStore(database="opensea", collection=None, client=MagicMock())

    def test_selects_collection(self):
        store, client, collection = self._store()

        client.__getitem__.assert_called_with("opensea")
        client.__getitem__.return_value.__getitem__.assert_called_with("events")
        assert store.collection is collection

    def test_insert_many_ordered_copy(self):
        store, _, collection = self._store()
        collection.insert_many.return_value.inserted_ids = ["a", "b"]
        docs = [{"id": 1}, {"id": 2}]

        inserted = store.insert_many(docs)

        assert inserted == 2
        args, kwargs = collection.insert_many.call_args
        assert args[0] == docs
        assert args[0][0] is not docs[0]
        assert kwargs["ordered"] is True

    def test_insert_failure_raises_write_error(self):
        store, _, collection = self._store()
        collection.insert_many.side_effect = BulkWriteError({"writeErrors": []})

        with pytest.raises(StoreWriteError):
            store.insert_many([{"id": 1}])

    @pytest.mark.parametrize("error", [
        InvalidDocument("cannot encode object"),
        OverflowError("MongoDB can only handle up to 8-byte ints"),
    ])
    def test_encoding_failure_raises_write_error(self, error):
        store, _, collection = self._store()
        collection.insert_many.side_effect = error

        with pytest.raises(StoreWriteError):
            store.insert_many([{"id": 1}])

    def test_empty_batch_skips_driver(self):
        store, _, collection = self._store()

        assert store.insert_many([]) == 0
        collection.insert_many.assert_not_called()

    def test_find_earliest_sorts_ascending(self):
        store, _, collection = self._store()
        collection.find_one.return_value = {"created_date": "2021-03-14T12:00:00"}

        doc = store.find_earliest("created_date")

        collection.find_one.assert_called_once_with({}, sort=[("created_date", ASCENDING)])
        assert doc == {"created_date": "2021-03-14T12:00:00"}

    def test_find_earliest_failure(self):
        store, _, collection = self._store()
        collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StoreReadError):
            store.find_earliest("created_date")

    def test_close_closes_client_once(self):
        store, client, _ = self._store()

        store.close()
        store.close()

        client.close.assert_called_once()


class TestCreateDocumentStore:
    """Tests for the backend factory."""

    def test_sqlite_backend(self, tmp_path):
        store = create_document_store(backend="sqlite", db_path=tmp_path / "e.db")
        try:
            assert store.get_name() == "sqlite"
        finally:
            store.close()

    def test_backend_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("INGEST_STORE_BACKEND", "SQLITE")
        store = create_document_store(db_path=tmp_path / "e.db")
        try:
            assert isinstance(store, SqliteDocumentStore)
        finally:
            store.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_document_store(backend="couchdb")
