# src/trigger_adapter/firestore/snapshot.py

from typing import Any, Dict, Optional

from trigger_adapter.core.lazy import lazy_property
from .reference import DocumentReference, build_reference
from .values import ValueDecoder, timestamp_from_value

_MISSING = object()


def _lookup(data: Any, field_path: str, default: Any = None) -> Any:
    """Dotted lookup into nested dicts"""
    node = data
    for part in str(field_path).split('.'):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


class DocumentSnapshot:
    """
    Read view over one Firestore document taken from a trigger payload.

    Decoding is deferred: `data()` decodes the fields once on first call, and
    `ref` builds its proxy only when read.
    """

    def __init__(self, raw: Optional[Dict[str, Any]], fallback_name: Optional[str],
                 decoder: Optional[ValueDecoder] = None):
        self._raw = raw or {}
        self._fallback_name = fallback_name
        self._decoder = decoder or ValueDecoder()

        self.create_time = timestamp_from_value(self._raw.get('createTime'))
        self.update_time = timestamp_from_value(self._raw.get('updateTime'))
        self.read_time = timestamp_from_value(self._raw.get('readTime'))
        # A document may exist with no fields; only a missing createTime means deleted
        self.exists = self.create_time is not None

    def __repr__(self):
        return f"DocumentSnapshot(name={self.name!r}, exists={self.exists})"

    def __eq__(self, other):
        if not isinstance(other, DocumentSnapshot):
            return NotImplemented
        return (
            self.name == other.name
            and self.update_time == other.update_time
            and self._raw.get('fields') == other._raw.get('fields')
        )

    @property
    def name(self) -> Optional[str]:
        return self._raw.get('name') or self._fallback_name

    @lazy_property
    def ref(self) -> DocumentReference:
        return build_reference(self.name, self._decoder.client_provider)

    @property
    def reference(self) -> DocumentReference:
        return self.ref

    @property
    def id(self) -> Optional[str]:
        return self.ref.id

    @lazy_property
    def _data(self) -> Dict[str, Any]:
        return self._decoder.decode_fields(self._raw.get('fields'))

    def data(self) -> Dict[str, Any]:
        """Decoded fields; the same dict is returned on every call"""
        return self._data

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return self._data if self.exists else None

    def get(self, field_path: str, default: Any = None) -> Any:
        """Read a field by dotted path, e.g. "address.city" """
        return _lookup(self._data, field_path, default)

    def proto_field(self, field_path: str) -> Any:
        """Raw wire value of a top-level or nested map field"""
        node: Any = {'mapValue': {'fields': self._raw.get('fields') or {}}}
        for part in str(field_path).split('.'):
            fields = (node or {}).get('mapValue', {}).get('fields', {})
            node = fields.get(part, _MISSING)
            if node is _MISSING:
                return None
        return node

    def to_document_proto(self) -> Dict[str, Any]:
        return self._raw


def build_snapshot(raw_document: Optional[Dict[str, Any]], fallback_name: Optional[str],
                   decoder: Optional[ValueDecoder] = None) -> DocumentSnapshot:
    """
    Build a snapshot from a raw document payload.

    Args:
        raw_document: Wire document ({name, fields, createTime, updateTime}); empty
            or None when the document was deleted
        fallback_name: Triggering resource name, used when the payload has no name
        decoder: Shared ValueDecoder

    Returns:
        DocumentSnapshot
    """
    return DocumentSnapshot(raw_document, fallback_name, decoder)
