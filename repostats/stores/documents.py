"""Document stores that hold the latest exported report."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..logging import get_logger

ANALYSIS_COLLECTION = "analysis-results"
ANALYSIS_DOCUMENT = "results"

_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9._-]+$")


class StoreError(RuntimeError):
    """Raised when a document cannot be written to or read from a store."""


class DocumentStore(ABC):
    """A keyed collection of JSON documents; writes replace the whole document."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def put(self, collection: str, document_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Replace ``collection/document_id`` and return what was stored."""
        payload = dict(document)
        payload["lastUpdated"] = self._clock().isoformat().replace("+00:00", "Z")
        self._write(collection, document_id, payload)
        return payload

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None when it does not exist."""

    @abstractmethod
    def _write(self, collection: str, document_id: str, payload: Dict[str, Any]) -> None:
        ...


class JsonDocumentStore(DocumentStore):
    """Stores each document as ``<root>/<collection>/<document_id>.json``."""

    def __init__(self, root: Path, *, clock: Callable[[], datetime] | None = None) -> None:
        super().__init__(clock)
        self.root = root

    def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(collection, document_id)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Unable to read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StoreError(f"Stored document {path} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Stored document {path} is not a JSON object")
        return data

    def _write(self, collection: str, document_id: str, payload: Dict[str, Any]) -> None:
        path = self._path(collection, document_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Unable to write {path}: {exc}") from exc

    def _path(self, collection: str, document_id: str) -> Path:
        for segment in (collection, document_id):
            if not _SAFE_SEGMENT.match(segment) or segment in {".", ".."}:
                raise StoreError(f"Invalid document path segment: {segment!r}")
        return self.root / collection / f"{document_id}.json"


class FirestoreDocumentStore(DocumentStore):
    """Cloud Firestore backend using service-account credentials.

    ``firebase-admin`` is only imported when no client is supplied, so the
    package installs without it unless the ``firestore`` extra is requested.
    """

    APP_NAME = "repostats"

    def __init__(
        self,
        project_id: str | None,
        client_email: str | None,
        private_key: str | None,
        *,
        client: Any = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(clock)
        self.project_id = project_id
        self.client_email = client_email
        self.private_key = private_key
        self._client = client
        self.logger = get_logger("stores.firestore")

    def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = self._db().collection(collection).document(document_id).get()
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(f"Failed to read {collection}/{document_id}: {exc}") from exc
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def _write(self, collection: str, document_id: str, payload: Dict[str, Any]) -> None:
        try:
            self._db().collection(collection).document(document_id).set(payload)
        except StoreError:
            raise
        except Exception as exc:
            raise StoreError(f"Failed to write {collection}/{document_id}: {exc}") from exc
        self.logger.debug("Wrote %s/%s to Firestore", collection, document_id)

    def _db(self) -> Any:
        if self._client is None:
            self._client = self._connect()
        return self._client

    def _connect(self) -> Any:
        missing = [
            label
            for label, value in (
                ("FIREBASE_PROJECT_ID", self.project_id),
                ("FIREBASE_CLIENT_EMAIL", self.client_email),
                ("FIREBASE_PRIVATE_KEY", self.private_key),
            )
            if not value
        ]
        if missing:
            raise StoreError("Missing Firebase credentials: " + ", ".join(missing))

        try:
            import firebase_admin
            from firebase_admin import credentials, firestore
        except ModuleNotFoundError as exc:
            raise StoreError(
                "firebase-admin is required for the Firestore backend. "
                "Install it with `pip install repostats[firestore]`."
            ) from exc

        try:
            app = firebase_admin.get_app(self.APP_NAME)
        except ValueError:
            certificate = credentials.Certificate(
                {
                    "type": "service_account",
                    "project_id": self.project_id,
                    "client_email": self.client_email,
                    "private_key": self.private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                }
            )
            app = firebase_admin.initialize_app(certificate, name=self.APP_NAME)
        return firestore.client(app)


def push_analysis_results(
    store: DocumentStore,
    report: Dict[str, Any],
    *,
    collection: str = ANALYSIS_COLLECTION,
    document_id: str = ANALYSIS_DOCUMENT,
) -> Dict[str, Any]:
    """Replace the shared analysis document with ``report``."""
    stored = store.put(collection, document_id, report)
    get_logger("stores").info("Stored analysis results in %s/%s", collection, document_id)
    return stored


__all__ = [
    "ANALYSIS_COLLECTION",
    "ANALYSIS_DOCUMENT",
    "DocumentStore",
    "FirestoreDocumentStore",
    "JsonDocumentStore",
    "StoreError",
    "push_analysis_results",
]
