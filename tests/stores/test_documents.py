"""Tests for the document stores."""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from repostats.stores import (
    ANALYSIS_COLLECTION,
    ANALYSIS_DOCUMENT,
    FirestoreDocumentStore,
    JsonDocumentStore,
    StoreError,
    push_analysis_results,
)

FIXED = datetime(2024, 3, 4, 5, 6, 7, tzinfo=UTC)


def _clock() -> datetime:
    return FIXED


def test_json_store_put_stamps_and_replaces(tmp_path: Path) -> None:
    store = JsonDocumentStore(tmp_path, clock=_clock)

    store.put("stats", "latest", {"a": 1, "b": 2})
    stored = store.put("stats", "latest", {"a": 3})

    assert stored == {"a": 3, "lastUpdated": "2024-03-04T05:06:07Z"}
    assert store.get("stats", "latest") == stored
    assert (tmp_path / "stats" / "latest.json").is_file()


def test_json_store_get_missing_document(tmp_path: Path) -> None:
    assert JsonDocumentStore(tmp_path).get("stats", "nothing") is None


def test_json_store_rejects_path_traversal(tmp_path: Path) -> None:
    store = JsonDocumentStore(tmp_path)
    with pytest.raises(StoreError):
        store.put("..", "escape", {})
    with pytest.raises(StoreError):
        store.get("stats", "../escape")


def test_json_store_reports_corrupt_documents(tmp_path: Path) -> None:
    (tmp_path / "stats").mkdir()
    (tmp_path / "stats" / "latest.json").write_text("{nope", encoding="utf-8")

    with pytest.raises(StoreError):
        JsonDocumentStore(tmp_path).get("stats", "latest")


def test_push_analysis_results_uses_shared_document(tmp_path: Path) -> None:
    store = JsonDocumentStore(tmp_path, clock=_clock)

    push_analysis_results(store, {"metadata": {"totalRepositories": 0}})

    stored = store.get(ANALYSIS_COLLECTION, ANALYSIS_DOCUMENT)
    assert stored is not None
    assert stored["metadata"] == {"totalRepositories": 0}
    assert stored["lastUpdated"] == "2024-03-04T05:06:07Z"


class _Snapshot:
    def __init__(self, data: Optional[Dict[str, Any]]) -> None:
        self._data = data
        self.exists = data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return self._data


class _DocumentRef:
    def __init__(self, documents: Dict[str, Dict[str, Any]], path: str) -> None:
        self._documents = documents
        self._path = path

    def set(self, payload: Dict[str, Any]) -> None:
        self._documents[self._path] = payload

    def get(self) -> _Snapshot:
        return _Snapshot(self._documents.get(self._path))


class _Collection:
    def __init__(self, documents: Dict[str, Dict[str, Any]], name: str) -> None:
        self._documents = documents
        self._name = name

    def document(self, document_id: str) -> _DocumentRef:
        return _DocumentRef(self._documents, f"{self._name}/{document_id}")


class FakeFirestore:
    def __init__(self) -> None:
        self.documents: Dict[str, Dict[str, Any]] = {}

    def collection(self, name: str) -> _Collection:
        return _Collection(self.documents, name)


def test_firestore_store_writes_through_client() -> None:
    client = FakeFirestore()
    store = FirestoreDocumentStore(None, None, None, client=client, clock=_clock)

    push_analysis_results(store, {"summary": {}})

    assert client.documents["analysis-results/results"] == {
        "summary": {},
        "lastUpdated": "2024-03-04T05:06:07Z",
    }
    assert store.get("analysis-results", "results") == client.documents["analysis-results/results"]
    assert store.get("analysis-results", "other") is None


def test_firestore_store_requires_credentials() -> None:
    store = FirestoreDocumentStore("project", None, None)

    with pytest.raises(StoreError, match="FIREBASE_CLIENT_EMAIL"):
        store.put("analysis-results", "results", {})


def test_firestore_store_reports_missing_library(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "firebase_admin", None)
    store = FirestoreDocumentStore("project", "bot@example.com", "key")

    with pytest.raises(StoreError, match="firebase-admin"):
        store.get("analysis-results", "results")


def test_firestore_client_errors_become_store_errors() -> None:
    class Broken:
        def collection(self, name: str) -> Any:
            raise RuntimeError("permission denied")

    store = FirestoreDocumentStore(None, None, None, client=Broken())

    with pytest.raises(StoreError, match="permission denied"):
        store.put("analysis-results", "results", {})
