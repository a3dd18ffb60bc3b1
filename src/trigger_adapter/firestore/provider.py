# src/trigger_adapter/firestore/provider.py

import os
import posixpath
from typing import Any, Callable, Dict, Optional

from trigger_adapter.config.config import (
    DEFAULT_DATABASE,
    ENV_GCLOUD_PROJECT,
    FIRESTORE_LEGACY_PREFIX,
    FIRESTORE_PROVIDER,
    FIRESTORE_SERVICE,
)
from trigger_adapter.core.change import Change
from trigger_adapter.core.cloud_function import CloudFunction, make_cloud_function
from trigger_adapter.errors import TriggerResourceError
from .snapshot import DocumentSnapshot, build_snapshot
from .values import ValueDecoder

PROVIDER = FIRESTORE_PROVIDER
SERVICE = FIRESTORE_SERVICE


def _resource_name(envelope: Dict[str, Any]) -> Optional[str]:
    resource = envelope['context'].get('resource') or {}
    return resource.get('name') if isinstance(resource, dict) else resource


def snapshot_constructor(envelope: Dict[str, Any], decoder: Optional[ValueDecoder] = None) -> DocumentSnapshot:
    """Snapshot of the document after the write"""
    data = envelope.get('data') or {}
    return build_snapshot(data.get('value'), _resource_name(envelope), decoder)


def before_snapshot_constructor(envelope: Dict[str, Any], decoder: Optional[ValueDecoder] = None) -> DocumentSnapshot:
    """Snapshot of the document before the write"""
    data = envelope.get('data') or {}
    return build_snapshot(data.get('oldValue'), _resource_name(envelope), decoder)


def change_constructor(envelope: Dict[str, Any], decoder: Optional[ValueDecoder] = None) -> Change:
    return Change.from_objects(
        before_snapshot_constructor(envelope, decoder),
        snapshot_constructor(envelope, decoder),
    )


class DocumentBuilder:
    """Binds document triggers to a lazily generated resource template"""

    def __init__(self, trigger_resource: Callable[[], str], decoder: Optional[ValueDecoder] = None):
        self.trigger_resource = trigger_resource
        self.decoder = decoder or ValueDecoder()

    def on_write(self, handler) -> CloudFunction:
        """Respond to all document writes (creates, updates, or deletes)"""
        return self._on_operation(handler, 'document.write', change_constructor)

    def on_update(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'document.update', change_constructor)

    def on_create(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'document.create', snapshot_constructor)

    def on_delete(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'document.delete', before_snapshot_constructor)

    def _on_operation(self, handler, event_type: str, constructor) -> CloudFunction:
        decoder = self.decoder
        return make_cloud_function(
            handler=handler,
            provider=PROVIDER,
            event_type=event_type,
            service=SERVICE,
            trigger_resource=self.trigger_resource,
            legacy_event_type=f"{FIRESTORE_LEGACY_PREFIX}{event_type}",
            data_constructor=lambda envelope: constructor(envelope, decoder),
        )


class NamespaceBuilder:
    def __init__(self, database: str, namespace: Optional[str] = None, decoder: Optional[ValueDecoder] = None):
        self.database = database
        self.namespace = namespace
        self.decoder = decoder

    def document(self, path: str) -> DocumentBuilder:
        def trigger_resource():
            project = os.getenv(ENV_GCLOUD_PROJECT)
            if not project:
                raise TriggerResourceError(f"{ENV_GCLOUD_PROJECT} is not set.")
            database = posixpath.join('projects', project, 'databases', self.database)
            documents = f"documents@{self.namespace}" if self.namespace else 'documents'
            return posixpath.join(database, documents, path.lstrip('/'))

        return DocumentBuilder(trigger_resource, self.decoder)


class DatabaseBuilder:
    def __init__(self, database: str = DEFAULT_DATABASE, decoder: Optional[ValueDecoder] = None):
        self.database = database
        self.decoder = decoder

    def namespace(self, namespace: str) -> NamespaceBuilder:
        return NamespaceBuilder(self.database, namespace, self.decoder)

    def document(self, path: str) -> DocumentBuilder:
        return NamespaceBuilder(self.database, decoder=self.decoder).document(path)


def database(name: str = DEFAULT_DATABASE, decoder: Optional[ValueDecoder] = None) -> DatabaseBuilder:
    return DatabaseBuilder(name, decoder)


def namespace(name: str, decoder: Optional[ValueDecoder] = None) -> NamespaceBuilder:
    return DatabaseBuilder(DEFAULT_DATABASE, decoder).namespace(name)


def document(path: str, decoder: Optional[ValueDecoder] = None) -> DocumentBuilder:
    """
    Select the Firestore document to listen to, e.g. "users/{uid}".

    The resource template reads GCLOUD_PROJECT only when trigger metadata or
    params are needed, so handlers can be defined without it.
    """
    return DatabaseBuilder(DEFAULT_DATABASE, decoder).document(path)
