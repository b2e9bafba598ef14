"""Persistence backends for exported reports."""

from .documents import (
    ANALYSIS_COLLECTION,
    ANALYSIS_DOCUMENT,
    DocumentStore,
    FirestoreDocumentStore,
    JsonDocumentStore,
    StoreError,
    push_analysis_results,
)

__all__ = [
    "ANALYSIS_COLLECTION",
    "ANALYSIS_DOCUMENT",
    "DocumentStore",
    "FirestoreDocumentStore",
    "JsonDocumentStore",
    "StoreError",
    "push_analysis_results",
]
