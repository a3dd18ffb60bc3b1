# src/trigger_adapter/database/__init__.py

from .delta import (
    MISSING,
    DeltaSnapshot,
    apply_change,
    coerce_arrays,
    instance_url,
    prune_nulls,
    resource_to_path,
    value_at,
)
from .provider import PROVIDER, SERVICE, RefBuilder, ref, change_constructor, delta_snapshot_constructor

__all__ = [
    "MISSING",
    "DeltaSnapshot",
    "apply_change",
    "coerce_arrays",
    "instance_url",
    "prune_nulls",
    "resource_to_path",
    "value_at",
    "PROVIDER",
    "SERVICE",
    "RefBuilder",
    "ref",
    "change_constructor",
    "delta_snapshot_constructor",
]
