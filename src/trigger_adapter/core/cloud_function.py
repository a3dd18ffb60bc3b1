# src/trigger_adapter/core/cloud_function.py

"""
Event normalizer: turns platform invocations into `handler(data, context)` calls.

Two envelope shapes reach a function:
- current: `{"data": ..., "context": {...}}`, or the background-function
  signature `fn(data, context)` where context may be an object
- legacy: one flat dict carrying `data` next to `eventId`, `eventType`,
  `resource`, ... and a `providers/.../eventTypes/...` event type

Both are reduced to one canonical envelope `{"data": ..., "context": {...}}`
before anything else looks at them.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from trigger_adapter.config.config import DATABASE_PROVIDER
from .auth import apply_auth
from .wildcards import match_wildcards

# Attribute names on functions-framework / GCF context objects
_CONTEXT_ATTRIBUTES = {
    'event_id': 'eventId',
    'timestamp': 'timestamp',
    'event_type': 'eventType',
    'resource': 'resource',
    'params': 'params',
    'auth': 'auth',
}


def _context_to_dict(context: Any) -> Dict[str, Any]:
    """Copy a context dict, or read the known attributes of a context object"""
    if isinstance(context, dict):
        return dict(context)
    result = {}
    for attr, key in _CONTEXT_ATTRIBUTES.items():
        value = getattr(context, attr, None)
        if value is not None:
            result[key] = value
    return result


def normalize_envelope(event: Any, context: Any = None) -> Tuple[Any, Dict[str, Any]]:
    """
    Reduce any supported envelope shape to `(data, context)`.

    Args:
        event: Payload (two-argument form) or a whole envelope dict
        context: Context from the two-argument background-function form

    Returns:
        Tuple of payload and a fresh context dict
    """
    if context is not None:
        data, ctx = event, _context_to_dict(context)
    elif isinstance(event, dict) and 'context' in event:
        data, ctx = event.get('data'), _context_to_dict(event.get('context') or {})
    elif isinstance(event, dict):
        data = event.get('data')
        ctx = {key: value for key, value in event.items() if key != 'data'}
    else:
        data, ctx = event, {}
    return data, ctx


class CloudFunction:
    """
    A handler bound to one trigger.

    Calling the instance runs the full normalization pipeline; `run()` calls the
    handler directly for unit tests.
    """

    def __init__(self,
                 provider: str,
                 event_type: str,
                 service: str,
                 trigger_resource: Callable[[], Optional[str]],
                 handler: Optional[Callable[[Any, Dict[str, Any]], Any]] = None,
                 data_constructor: Optional[Callable[[Dict[str, Any]], Any]] = None,
                 legacy_event_type: Optional[str] = None,
                 before: Optional[Callable[[Dict[str, Any]], None]] = None,
                 after: Optional[Callable[[Dict[str, Any]], None]] = None,
                 labels: Optional[Dict[str, str]] = None,
                 context_only_handler: Optional[Callable[[Dict[str, Any]], Any]] = None):
        if handler is None and context_only_handler is None:
            raise ValueError("A handler or a context-only handler is required")
        self.provider = provider
        self.event_type = event_type
        self.service = service
        self.trigger_resource = trigger_resource
        self.handler = handler
        self.data_constructor = data_constructor or (lambda envelope: envelope['data'])
        self.legacy_event_type = legacy_event_type
        self.before = before
        self.after = after
        self.labels = dict(labels or {})
        self.context_only_handler = context_only_handler

    @property
    def trigger(self) -> Dict[str, Any]:
        """Trigger metadata; resolves the resource template on every read"""
        return {
            'eventTrigger': {
                'eventType': self.legacy_event_type or f"{self.provider}.{self.event_type}",
                'resource': self.trigger_resource(),
                'service': self.service,
            },
            'labels': dict(self.labels),
        }

    @property
    def is_scheduled(self) -> bool:
        return bool(self.labels.get('deployment-scheduled'))

    def run(self, data: Any, context: Any) -> Any:
        """Call the handler directly, skipping params and auth computation"""
        if self.handler is not None:
            return self.handler(data, context)
        return self.context_only_handler(context)

    def normalize(self, event: Any, context: Any = None) -> Dict[str, Any]:
        """
        Build the canonical envelope for one invocation.

        Args:
            event: Raw event in any supported shape
            context: Context for the two-argument form

        Returns:
            {"data": payload, "context": enriched context dict}
        """
        logger = logging.getLogger('trigger_adapter.cloud_function')
        data, ctx = normalize_envelope(event, context)

        if self.legacy_event_type and ctx.get('eventType') == self.legacy_event_type:
            logger.debug(f"Rewriting legacy event type {self.legacy_event_type}")
            ctx['eventType'] = f"{self.provider}.{self.event_type}"
        if isinstance(ctx.get('resource'), str):
            ctx['resource'] = {'service': self.service, 'name': ctx['resource']}

        if self.provider == DATABASE_PROVIDER:
            apply_auth(ctx)
        else:
            ctx.pop('auth', None)

        ctx['params'] = self._make_params(ctx)
        return {'data': data, 'context': ctx}

    def _make_params(self, ctx: Dict[str, Any]) -> Dict[str, str]:
        if ctx.get('params') is not None:
            # Unit tests may supply params directly
            return ctx['params']
        resource = ctx.get('resource')
        if not resource:
            # Unit tests may leave resource out
            return {}
        name = resource.get('name') if isinstance(resource, dict) else None
        return match_wildcards(self.trigger_resource(), name)

    def __call__(self, event: Any, context: Any = None) -> Any:
        logger = logging.getLogger('trigger_adapter.cloud_function')

        envelope = None
        try:
            envelope = self.normalize(event, context)
            ctx = envelope['context']
            logger.debug(f"📥 Invoking {self.provider}.{self.event_type} for event {ctx.get('eventId')}")

            if self.before is not None:
                self.before(envelope)

            if self.context_only_handler is not None and (self.is_scheduled or self.handler is None):
                # Scheduled functions carry no meaningful data
                result = self.context_only_handler(ctx)
            else:
                result = self.handler(self.data_constructor(envelope), ctx)
        except Exception:
            if envelope is not None:
                self._run_after_quietly(envelope)
            raise

        if inspect.isawaitable(result):
            return self._settle(result, envelope)

        if result is None:
            logger.warning("Function returned None, expected awaitable or value")
        self._run_after(envelope)
        return result

    async def _settle(self, awaitable, envelope: Dict[str, Any]) -> Any:
        try:
            result = await awaitable
        except BaseException:
            self._run_after_quietly(envelope)
            raise
        self._run_after(envelope)
        return result

    def _run_after(self, envelope: Dict[str, Any]) -> None:
        if self.after is not None:
            self.after(envelope)

    def _run_after_quietly(self, envelope: Dict[str, Any]) -> None:
        """Run the after hook while a handler error propagates; a hook error is only logged"""
        try:
            self._run_after(envelope)
        except Exception as e:
            logger = logging.getLogger('trigger_adapter.cloud_function')
            logger.error(f"❌ after hook failed while handling an earlier error: {e}", exc_info=True)


def make_cloud_function(**kwargs) -> CloudFunction:
    """Build a CloudFunction; see CloudFunction.__init__ for arguments"""
    return CloudFunction(**kwargs)
