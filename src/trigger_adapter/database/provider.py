# src/trigger_adapter/database/provider.py

import os
from typing import Any, Callable, Dict, Optional

from trigger_adapter.config.config import (
    DATABASE_LEGACY_PREFIX,
    DATABASE_PROVIDER,
    DATABASE_SERVICE,
    ENV_DATABASE_INSTANCE,
    ENV_GCLOUD_PROJECT,
)
from trigger_adapter.core.change import Change
from trigger_adapter.core.cloud_function import CloudFunction, make_cloud_function
from trigger_adapter.core.paths import normalize_path
from trigger_adapter.errors import TriggerResourceError
from .delta import DeltaSnapshot, instance_url, resource_to_path

PROVIDER = DATABASE_PROVIDER
SERVICE = DATABASE_SERVICE


def delta_snapshot_constructor(envelope: Dict[str, Any]) -> DeltaSnapshot:
    """Root DeltaSnapshot for a database event envelope"""
    ctx = envelope['context']
    resource = ctx.get('resource') or {}
    name = resource.get('name') if isinstance(resource, dict) else resource
    instance, path = resource_to_path(name)
    payload = envelope.get('data') or {}
    return DeltaSnapshot(
        payload.get('data'),
        payload.get('delta'),
        path=path,
        instance=instance_url(instance, ctx.get('domain')),
    )


def change_constructor(envelope: Dict[str, Any]) -> Change:
    snapshot = delta_snapshot_constructor(envelope)
    return Change.from_objects(snapshot.previous, snapshot.current)


def _current_constructor(envelope: Dict[str, Any]) -> DeltaSnapshot:
    return delta_snapshot_constructor(envelope).current


def _previous_constructor(envelope: Dict[str, Any]) -> DeltaSnapshot:
    return delta_snapshot_constructor(envelope).previous


class RefBuilder:
    """Builds triggers for writes under one database ref"""

    def __init__(self, trigger_resource: Callable[[], str]):
        self.trigger_resource = trigger_resource

    def on_write(self, handler) -> CloudFunction:
        """Respond to any write (create, update, or delete) that affects the ref"""
        return self._on_operation(handler, 'ref.write', change_constructor)

    def on_update(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'ref.update', change_constructor)

    def on_create(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'ref.create', _current_constructor)

    def on_delete(self, handler) -> CloudFunction:
        return self._on_operation(handler, 'ref.delete', _previous_constructor)

    def _on_operation(self, handler, event_type: str, constructor) -> CloudFunction:
        return make_cloud_function(
            handler=handler,
            provider=PROVIDER,
            event_type=event_type,
            service=SERVICE,
            trigger_resource=self.trigger_resource,
            legacy_event_type=f"{DATABASE_LEGACY_PREFIX}{event_type}",
            data_constructor=constructor,
        )


def ref(path: str, instance: Optional[str] = None) -> RefBuilder:
    """
    Select the database ref to listen to, e.g. "/messages/{messageId}".

    Args:
        path: Ref path, wildcards allowed
        instance: Database instance name; defaults to FIREBASE_DATABASE_INSTANCE,
            then "{GCLOUD_PROJECT}-default-rtdb"

    Returns:
        RefBuilder whose resource template is resolved on demand
    """
    normalized = normalize_path(path)

    def trigger_resource():
        name = instance or os.getenv(ENV_DATABASE_INSTANCE)
        if not name:
            project = os.getenv(ENV_GCLOUD_PROJECT)
            if not project:
                raise TriggerResourceError(
                    f"Missing {ENV_DATABASE_INSTANCE} and {ENV_GCLOUD_PROJECT}; cannot resolve database instance."
                )
            name = f"{project}-default-rtdb"
        return f"projects/_/instances/{name}/refs/{normalized}"

    return RefBuilder(trigger_resource)
