"""Persistence for the vocabulary table and the classifier snapshot."""
from signtalk.backend.storage.database import Base, create_engine, create_session_factory
from signtalk.backend.storage.snapshots import (
    EmptySnapshotError,
    SnapshotNotFoundError,
    SnapshotStore,
    SnapshotStoreError,
)
from signtalk.backend.storage.vocabulary import VocabularyEntry, VocabularyStore, normalize_key

__all__ = [
    'Base',
    'create_engine',
    'create_session_factory',
    'EmptySnapshotError',
    'SnapshotNotFoundError',
    'SnapshotStore',
    'SnapshotStoreError',
    'VocabularyEntry',
    'VocabularyStore',
    'normalize_key',
]
