# src/trigger_adapter/core/change.py

import copy
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar('T')


class Change(Generic[T]):
    """State before and after a write, passed to onWrite/onUpdate handlers"""

    def __init__(self, before: T, after: T):
        self.before = before
        self.after = after

    def __repr__(self):
        return f"Change(before={self.before!r}, after={self.after!r})"

    def __eq__(self, other):
        if not isinstance(other, Change):
            return NotImplemented
        return self.before == other.before and self.after == other.after

    @classmethod
    def from_objects(cls, before: T, after: T) -> 'Change[T]':
        return cls(before, after)

    @classmethod
    def from_json(cls, json: Dict[str, Any], customizer: Optional[Callable[[Any], T]] = None) -> 'Change[T]':
        """
        Build a Change from its JSON form.

        Args:
            json: Dict with optional `before`, `after` and `fieldMask` keys
            customizer: Optional function applied to both sides

        Returns:
            Change with customized before/after values
        """
        customizer = customizer or (lambda x: x)
        before = dict(json.get('before') or {})
        after = json.get('after') or {}
        if json.get('fieldMask'):
            before = apply_field_mask(before, after, json['fieldMask'])
        return cls.from_objects(customizer(before or {}), customizer(after))


def apply_field_mask(sparse_before: Optional[Dict[str, Any]], after: Optional[Dict[str, Any]],
                     field_mask: str) -> Dict[str, Any]:
    """
    Rebuild a full `before` state from `after` and a sparse `before`.

    Only masked fields ship in the sparse `before`. Each masked path is taken from
    the sparse value, or deleted when the sparse value does not have it; everything
    else is copied from `after`.

    Args:
        sparse_before: Changed fields only, as they were before the write
        after: Full state after the write
        field_mask: Comma separated dotted paths, e.g. "num,obj.a"

    Returns:
        Reconstructed before state
    """
    before = dict(after or {})
    sparse_before = sparse_before if isinstance(sparse_before, dict) else {}

    for mask in field_mask.split(','):
        parts = mask.split('.')
        head = parts[0]
        if len(parts) > 1:
            nested_after = before.get(head)
            before[head] = apply_field_mask(
                sparse_before.get(head),
                nested_after if isinstance(nested_after, dict) else {},
                '.'.join(parts[1:]),
            )
            continue
        if head in sparse_before:
            before[head] = copy.deepcopy(sparse_before[head])
        else:
            before.pop(head, None)

    return before
