# src/trigger_adapter/database/delta.py

"""
Realtime Database delta model.

A write event carries the data at the ref before the write (`data`) and a sparse
patch (`delta`) where `None` marks a deleted key. DeltaSnapshot exposes both the
previous and the current tree without ever mutating either.
"""

import copy
import os
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from trigger_adapter.config.config import DATABASE_SERVICE, ENV_DATABASE_EMULATOR_HOST
from trigger_adapter.core.change import apply_field_mask
from trigger_adapter.core.paths import join_path, normalize_path, path_parts


class _Missing:
    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


# Absent path, as opposed to an explicit None
MISSING = _Missing()

_INTEGER_KEY = re.compile(r'0|[1-9][0-9]*')
_RESOURCE_REGEX = re.compile(r'^projects/([^/]+)/instances/([a-zA-Z0-9-]+)/refs(/.+)?')


def prune_nulls(obj: Any) -> Any:
    """Recursively drop None-valued keys from nested dicts, in place"""
    if isinstance(obj, dict):
        for key in list(obj):
            if obj[key] is None:
                del obj[key]
            elif isinstance(obj[key], dict):
                prune_nulls(obj[key])
    return obj


def _merge(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def apply_change(src: Any, dest: Any) -> Any:
    """
    Apply a sparse delta to a tree.

    Args:
        src: Tree before the write
        dest: Sparse delta; None values delete keys

    Returns:
        New merged tree, or `dest` itself when either side is not a dict
    """
    if not isinstance(src, dict) or not isinstance(dest, dict):
        return dest
    return prune_nulls(_merge(copy.deepcopy(src), dest))


def _array_length(node: Dict[str, Any]) -> Optional[int]:
    """Length of the list a dict coerces to, or None when it stays a dict"""
    max_key = 0
    for key in node:
        if not _INTEGER_KEY.fullmatch(str(key)):
            return None
        max_key = max(max_key, int(key))
    if max_key < 2 * len(node):
        return max_key + 1
    return None


def coerce_arrays(node: Any) -> Any:
    """
    Turn dicts keyed by dense non-negative integers into lists, bottom-up.

    A dict converts when every key matches `0|[1-9][0-9]*` and the largest key is
    below twice the number of keys. Missing indexes become None.
    """
    if isinstance(node, list):
        return [coerce_arrays(child) for child in node]
    if not isinstance(node, dict):
        return node

    obj = {key: coerce_arrays(child) for key, child in node.items()}
    length = _array_length(obj)
    if length is not None:
        array = [None] * length
        for key, value in obj.items():
            array[int(key)] = value
        return array
    return obj


def value_at(tree: Any, path: Optional[str]) -> Any:
    """Value at a slash separated path, or MISSING when the path does not exist"""
    node = tree
    for part in path_parts(path):
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return MISSING
    return node


def resource_to_path(resource: str) -> Tuple[str, str]:
    """
    Split a database resource name into instance and ref path.

    Args:
        resource: "projects/_/instances/{instance}/refs/{path}"

    Returns:
        Tuple of (instance name, normalized ref path)

    Raises:
        ValueError: for malformed resources or a project other than "_"
    """
    match = _RESOURCE_REGEX.match(resource or '')
    if not match:
        raise ValueError(
            f"Unexpected resource string for Firebase Realtime Database event: {resource}. "
            'Expected string in the format of "projects/_/instances/{firebaseioSubdomain}/refs/{ref=**}"'
        )
    project, instance, path = match.groups()
    if project != '_':
        raise ValueError("Expect project to be '_' in a Firebase Realtime Database event")
    return instance, normalize_path(path)


def instance_url(instance: str, domain: Optional[str] = None) -> str:
    """Database URL for an instance; honours the emulator host variable"""
    emulator_host = os.getenv(ENV_DATABASE_EMULATOR_HOST)
    if emulator_host:
        return f"http://{emulator_host}/?ns={instance}"
    return f"https://{instance}.{domain or DATABASE_SERVICE}"


class DeltaSnapshot:
    """
    Read view over a Realtime Database write.

    `current` is the tree after the delta is applied and is computed once when the
    root view is built; `child()`, `previous` and `current` return new views that
    share it.
    """

    def __init__(self, data: Any, delta: Any, path: Optional[str] = None,
                 instance: Optional[str] = None, field_mask: Optional[str] = None):
        self._path = normalize_path(path)
        self._delta = delta
        self._new_data = apply_change(data, delta)
        if field_mask:
            data = apply_field_mask(data, self._new_data, field_mask)
        self._data = data
        self._child_path = ''
        self._is_previous = False
        self.instance = instance

    def __repr__(self):
        side = 'previous' if self._is_previous else 'current'
        return f"DeltaSnapshot({self.ref_path!r}, {side})"

    def _dup(self, **overrides) -> 'DeltaSnapshot':
        """Copy this view, replacing the given state (child_path, is_previous)"""
        dup = copy.copy(self)
        for name, value in overrides.items():
            attr = f"_{name}"
            if not hasattr(dup, attr):
                raise AttributeError(f"DeltaSnapshot has no state {name!r}")
            setattr(dup, attr, value)
        return dup

    @property
    def key(self) -> Optional[str]:
        parts = path_parts(self.ref_path)
        return parts[-1] if parts else None

    @property
    def ref_path(self) -> str:
        return '/' + join_path(self._path, self._child_path)

    @property
    def previous(self) -> 'DeltaSnapshot':
        return self if self._is_previous else self._dup(is_previous=True)

    @property
    def current(self) -> 'DeltaSnapshot':
        return self._dup(is_previous=False) if self._is_previous else self

    def val(self) -> Any:
        """Deep copy of the value at this view's path, None when nothing is there"""
        node = self._node()
        if node is MISSING:
            return None
        return coerce_arrays(copy.deepcopy(node))

    def export_val(self) -> Any:
        return self.val()

    def get_priority(self) -> int:
        return 0

    def exists(self) -> bool:
        return self.val() is not None

    def child(self, path: Optional[str] = None) -> 'DeltaSnapshot':
        if not path:
            return self
        return self._dup(child_path=join_path(self._child_path, path))

    def changed(self) -> bool:
        """True when the delta touches this view's path"""
        return value_at(self._delta, self._child_path) is not MISSING

    def for_each(self, action: Callable[['DeltaSnapshot'], Any]) -> bool:
        """
        Call `action` with a child view for each key.

        Returns:
            True if an action returned True and iteration stopped early
        """
        for key in self._child_keys():
            if action(self.child(key)) is True:
                return True
        return False

    def has_child(self, path: str) -> bool:
        return self.child(path).exists()

    def has_children(self) -> bool:
        return len(self._child_keys()) > 0

    def num_children(self) -> int:
        return len(self._child_keys())

    def to_json(self) -> Any:
        return self.val()

    def __iter__(self) -> Iterator['DeltaSnapshot']:
        return (self.child(key) for key in self._child_keys())

    def _node(self) -> Any:
        source = self._data if self._is_previous else self._new_data
        return value_at(source, self._child_path)

    def _child_keys(self) -> List[str]:
        # Lists and dicts that coerce to lists have no children
        node = self._node()
        if not isinstance(node, dict) or _array_length(node) is not None:
            return []
        return list(node)
