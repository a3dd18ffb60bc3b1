# src/trigger_adapter/firestore/reference.py

import logging
import threading
from typing import Any, Dict, Optional

from trigger_adapter.config.config import DEFAULT_DATABASE
from trigger_adapter.core.lazy import lazy_property


class FirestoreClientProvider:
    """
    Builds one Firestore client on first use and hands out the same instance.

    Construct one per process and pass it to the decoders that need live
    references. Nothing connects until a reference operation actually runs.
    """

    def __init__(self, project: Optional[str] = None, database: str = DEFAULT_DATABASE):
        self.project = project
        self.database = database
        self._client = None
        self._lock = threading.Lock()

    def get_client(self):
        if self._client is None:
            with self._lock:
                if self._client is None:
                    # Lazy import keeps local tests free of credential lookups
                    from google.cloud import firestore

                    logger = logging.getLogger('trigger_adapter.firestore')
                    logger.debug(f"Creating Firestore client (project={self.project}, database={self.database})")
                    self._client = firestore.Client(project=self.project, database=self.database)
        return self._client


def _split_resource_name(name: str):
    """Split projects/{p}/databases/{d}/documents/{path} into its parts"""
    parts = (name or '').split('/')
    project = parts[1] if len(parts) > 1 else None
    database = parts[3] if len(parts) > 3 else None
    path = parts[5:]
    return project, database, path


class DocumentReference:
    """
    Proxy for a Firestore document location.

    `path` and `id` come from the resource name; the live
    `google.cloud.firestore.DocumentReference` is only built when one of the
    delegating methods runs, then reused.
    """

    def __init__(self, name: str, client_provider: Optional[FirestoreClientProvider] = None):
        self.formatted_name = name
        self.project, self.database, segments = _split_resource_name(name)
        self.path = '/'.join(segments)
        self.id = segments[-1] if segments else None
        self._client_provider = client_provider

    def __repr__(self):
        return f"DocumentReference({self.path!r})"

    def __eq__(self, other):
        if isinstance(other, DocumentReference):
            return self.formatted_name == other.formatted_name
        return NotImplemented

    def __hash__(self):
        return hash(self.formatted_name)

    @lazy_property
    def client(self):
        if self._client_provider is None:
            self._client_provider = FirestoreClientProvider(
                project=self.project if self.project not in (None, '_') else None,
                database=self.database or DEFAULT_DATABASE,
            )
        return self._client_provider.get_client()

    @lazy_property
    def _real_ref(self):
        return self.client.document(self.path)

    @lazy_property
    def parent(self):
        return self._real_ref.parent

    def get(self, *args, **kwargs):
        return self._real_ref.get(*args, **kwargs)

    def collection(self, collection_id: str):
        return self._real_ref.collection(collection_id)

    def collections(self, *args, **kwargs):
        return self._real_ref.collections(*args, **kwargs)

    def create(self, document_data: Dict[str, Any], **kwargs):
        return self._real_ref.create(document_data, **kwargs)

    def set(self, document_data: Dict[str, Any], merge: Any = False, **kwargs):
        return self._real_ref.set(document_data, merge=merge, **kwargs)

    def update(self, field_updates: Dict[str, Any], option=None, **kwargs):
        return self._real_ref.update(field_updates, option=option, **kwargs)

    def delete(self, option=None, **kwargs):
        return self._real_ref.delete(option=option, **kwargs)

    def on_snapshot(self, callback):
        return self._real_ref.on_snapshot(callback)

    def to_proto(self) -> Dict[str, str]:
        return {'referenceValue': self.formatted_name}


def build_reference(name: str, client_provider: Optional[FirestoreClientProvider] = None) -> DocumentReference:
    """Build a lazy reference proxy from a full document resource name"""
    return DocumentReference(name, client_provider)
