# src/trigger_adapter/firestore/__init__.py

from .values import ValueDecoder, ValueKind, Timestamp, value_kind, timestamp_from_value
from .reference import DocumentReference, FirestoreClientProvider, build_reference
from .snapshot import DocumentSnapshot, build_snapshot
from .provider import (
    PROVIDER,
    SERVICE,
    document,
    database,
    namespace,
    snapshot_constructor,
    before_snapshot_constructor,
    change_constructor,
)

__all__ = [
    # Value decoding
    "ValueDecoder",
    "ValueKind",
    "Timestamp",
    "value_kind",
    "timestamp_from_value",

    # Snapshots and references
    "DocumentReference",
    "FirestoreClientProvider",
    "build_reference",
    "DocumentSnapshot",
    "build_snapshot",

    # Triggers
    "PROVIDER",
    "SERVICE",
    "document",
    "database",
    "namespace",
    "snapshot_constructor",
    "before_snapshot_constructor",
    "change_constructor",
]
