# src/trigger_adapter/firestore/values.py

"""
Decoder for Firestore's tagged `Value` wire format.

Each node carries exactly one tag key (`integerValue`, `mapValue`, ...). The
decoder maps every tag to a plain Python value; a node with no known tag is bad
wire data and raises ValueDecodeError instead of turning into None.
"""

import base64
import binascii
import logging
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Union

from google.api_core.datetime_helpers import DatetimeWithNanoseconds
from google.cloud.firestore_v1 import GeoPoint
from google.protobuf import json_format
from google.protobuf.timestamp_pb2 import Timestamp as TimestampProto

from trigger_adapter.errors import ValueDecodeError
from .reference import FirestoreClientProvider, build_reference


class ValueKind(Enum):
    NULL = 'nullValue'
    BOOLEAN = 'booleanValue'
    INTEGER = 'integerValue'
    DOUBLE = 'doubleValue'
    TIMESTAMP = 'timestampValue'
    STRING = 'stringValue'
    BYTES = 'bytesValue'
    REFERENCE = 'referenceValue'
    GEO_POINT = 'geoPointValue'
    ARRAY = 'arrayValue'
    MAP = 'mapValue'


def value_kind(value: Any) -> ValueKind:
    """
    Classify a wire node by its tag.

    Raises:
        ValueDecodeError: if the node is not a dict or carries no known tag
    """
    if isinstance(value, dict):
        for kind in ValueKind:
            if kind.value in value:
                return kind
    raise ValueDecodeError(
        f"Unexpected parse error. Could not create scalar value for Value {value!r}", value
    )


class Timestamp(NamedTuple):
    """Seconds and nanoseconds since the Unix epoch"""
    seconds: int
    nanoseconds: int

    @classmethod
    def from_rfc3339(cls, text: str) -> 'Timestamp':
        proto = TimestampProto()
        try:
            proto.FromJsonString(text)
        except ValueError as e:
            raise ValueDecodeError(f"Invalid timestamp {text!r}: {e}", text) from e
        return cls(proto.seconds, proto.nanos)

    def to_protobuf(self) -> TimestampProto:
        return TimestampProto(seconds=self.seconds, nanos=self.nanoseconds)

    def to_datetime(self) -> DatetimeWithNanoseconds:
        return DatetimeWithNanoseconds.from_timestamp_pb(self.to_protobuf())

    def isoformat(self) -> str:
        return self.to_protobuf().ToJsonString()


def timestamp_from_value(value: Union[str, Dict[str, Any], Timestamp, None]) -> Optional[Timestamp]:
    """Accept an RFC 3339 string, a {seconds, nanos} dict, or a Timestamp"""
    if value is None or value == '':
        return None
    if isinstance(value, Timestamp):
        return value
    if isinstance(value, str):
        return Timestamp.from_rfc3339(value)
    if isinstance(value, dict):
        return Timestamp(int(value.get('seconds') or 0), int(value.get('nanos') or 0))
    if hasattr(value, 'seconds') and hasattr(value, 'nanos'):
        return Timestamp(int(value.seconds), int(value.nanos))
    raise ValueDecodeError(f"Unsupported timestamp {value!r}", value)


def _decode_integer(raw: Any) -> int:
    """Integers arrive as decimal strings, numbers, or {high, low} long pairs"""
    if isinstance(raw, bool):
        raise ValueDecodeError(f"Invalid integer {raw!r}", raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw, 10)
        except ValueError as e:
            raise ValueDecodeError(f"Invalid integer {raw!r}", raw) from e
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, dict) and 'low' in raw and 'high' in raw:
        value = (int(raw['high']) << 32) | (int(raw['low']) & 0xFFFFFFFF)
        if not raw.get('unsigned') and value >= 1 << 63:
            value -= 1 << 64
        return value
    raise ValueDecodeError(f"Invalid integer {raw!r}", raw)


def _decode_bytes(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise ValueDecodeError(f"Invalid base64 bytes value {raw!r}", raw) from e


class ValueDecoder:
    """
    Recursive decoder for tagged Firestore values.

    Build one per process and pass it to whichever snapshot builder needs it.
    Reference values share the decoder's client provider, so at most one live
    Firestore client exists and only once a reference is actually used.
    """

    def __init__(self, client_provider: Optional[FirestoreClientProvider] = None):
        self.client_provider = client_provider
        self._handlers = {
            ValueKind.NULL: lambda raw: None,
            ValueKind.BOOLEAN: bool,
            ValueKind.INTEGER: _decode_integer,
            ValueKind.DOUBLE: float,
            ValueKind.TIMESTAMP: timestamp_from_value,
            ValueKind.STRING: lambda raw: raw,
            ValueKind.BYTES: _decode_bytes,
            ValueKind.REFERENCE: self._decode_reference,
            ValueKind.GEO_POINT: self._decode_geo_point,
            ValueKind.ARRAY: self._decode_array,
            ValueKind.MAP: self._decode_map,
        }

    def decode(self, value: Dict[str, Any]) -> Any:
        """
        Decode one tagged wire value.

        Args:
            value: Wire node such as {"integerValue": "123"}

        Returns:
            Plain Python value

        Raises:
            ValueDecodeError: for untagged or malformed nodes
        """
        kind = value_kind(value)
        raw = value[kind.value]
        try:
            return self._handlers[kind](raw)
        except ValueDecodeError:
            raise
        except (TypeError, ValueError, AttributeError) as e:
            logging.getLogger('trigger_adapter.firestore').debug(f"Failed to decode {kind.value}: {e}")
            raise ValueDecodeError(f"Invalid {kind.value} {raw!r}: {e}", value) from e

    def decode_fields(self, fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Decode a document's `fields` map"""
        return {key: self.decode(raw) for key, raw in (fields or {}).items()}

    def decode_protobuf(self, message) -> Any:
        """Decode a protobuf (or proto-plus) `Value` message via its JSON form"""
        message_type = type(message)
        if hasattr(message_type, 'pb'):
            message = message_type.pb(message)
        return self.decode(json_format.MessageToDict(message))

    def _decode_reference(self, raw: str):
        return build_reference(raw, self.client_provider)

    def _decode_geo_point(self, raw: Dict[str, Any]) -> GeoPoint:
        return GeoPoint(float(raw.get('latitude', 0.0)), float(raw.get('longitude', 0.0)))

    def _decode_array(self, raw: Optional[Dict[str, Any]]) -> list:
        return [self.decode(item) for item in (raw or {}).get('values') or []]

    def _decode_map(self, raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return self.decode_fields((raw or {}).get('fields'))

