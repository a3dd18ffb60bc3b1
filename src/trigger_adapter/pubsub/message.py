# src/trigger_adapter/pubsub/message.py

import base64
import binascii
import json
from typing import Any, Dict, Optional

from trigger_adapter.core.lazy import lazy_property

_UNSET = object()


class Message:
    """
    A Pub/Sub message as delivered to a topic trigger.

    `data` stays base64 encoded, as on the wire; `json` decodes and parses it on
    first access unless the payload already carried a parsed `json` field.
    """

    def __init__(self, data: Optional[Dict[str, Any]]):
        data = data or {}
        self.data: Optional[str] = data.get('data')
        self.attributes: Dict[str, str] = dict(data.get('attributes') or {})
        self.message_id: Optional[str] = data.get('messageId') or data.get('message_id')
        self.publish_time: Optional[str] = data.get('publishTime') or data.get('publish_time')
        self._json = data.get('json', _UNSET)

    def __repr__(self):
        return f"Message(message_id={self.message_id!r}, attributes={self.attributes!r})"

    @lazy_property
    def json(self) -> Any:
        """Payload decoded from base64 and parsed as JSON"""
        if self._json is not _UNSET:
            return self._json
        if not self.data:
            return None
        try:
            return json.loads(base64.b64decode(self.data).decode('utf-8'))
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"Unable to parse Pub/Sub message data as JSON: {e}") from e

    @property
    def text(self) -> Optional[str]:
        """Payload decoded from base64 as UTF-8 text"""
        if not self.data:
            return None
        return base64.b64decode(self.data).decode('utf-8')

    def to_json(self) -> Dict[str, Any]:
        return {
            'data': self.data,
            'attributes': self.attributes,
        }
