# ===============================================================================
# src/trigger_main.py - Cloud Function entry points for event triggers
# ===============================================================================

import asyncio
import importlib
import inspect
import logging
import os
import re
from functools import lru_cache

import functions_framework

from trigger_adapter.config import init_env
from trigger_adapter.config.config import DATABASE_EVENT_SOURCE, ENV_TRIGGER_TARGET
from trigger_adapter.core.cloud_function import CloudFunction

# Database CloudEvent sources carry a region the trigger templates do not have
_DATABASE_LOCATION = re.compile(r'^(projects/[^/]+/)locations/[^/]+/')


@functions_framework.cloud_event
def main(cloud_event):
    """
    CloudEvent (2nd gen) entry point.

    The event is converted into the `{"data", "context"}` envelope and handed to
    the CloudFunction named by TRIGGER_TARGET ("package.module:attribute").

    Args:
        cloud_event: CloudEvent delivered by functions-framework

    Returns:
        Whatever the handler returned
    """
    init_env()
    logger = logging.getLogger('trigger_adapter.entrypoint')

    envelope = parse_cloud_event(cloud_event)
    logger.info(f"📥 CloudEvent {envelope['context'].get('eventType')} ({envelope['context'].get('eventId')})")
    return dispatch(envelope)


def background(data, context):
    """Background (1st gen) entry point: fn(data, context)"""
    init_env()
    logger = logging.getLogger('trigger_adapter.entrypoint')
    logger.info(f"📥 Background event {getattr(context, 'event_type', None)} ({getattr(context, 'event_id', None)})")
    return dispatch(data, context)


def dispatch(event, context=None):
    """
    Run the configured CloudFunction for one event.

    Awaitable results are driven to completion here, since the platform entry
    points are synchronous.
    """
    logger = logging.getLogger('trigger_adapter.entrypoint')
    target = load_target(os.getenv(ENV_TRIGGER_TARGET, ''))

    try:
        result = target(event, context)
        if inspect.isawaitable(result):
            result = asyncio.run(_await(result))
    except Exception as e:
        logger.error(f"❌ Handler for {target.provider}.{target.event_type} failed: {e}", exc_info=True)
        raise

    logger.info(f"✅ Handler for {target.provider}.{target.event_type} completed")
    return result


async def _await(awaitable):
    return await awaitable


@lru_cache(maxsize=None)
def load_target(target: str) -> CloudFunction:
    """
    Import the CloudFunction named by "package.module:attribute".

    Raises:
        ValueError: if the target string is malformed
        TypeError: if the attribute is not a CloudFunction
    """
    module_name, _, attribute = target.partition(':')
    if not module_name or not attribute:
        raise ValueError(f"{ENV_TRIGGER_TARGET} must look like 'package.module:function', got {target!r}")

    module = importlib.import_module(module_name)
    function = getattr(module, attribute)
    if not isinstance(function, CloudFunction):
        raise TypeError(f"{target} is a {type(function).__name__}, expected a CloudFunction")

    logging.getLogger('trigger_adapter.entrypoint').debug(f"Loaded trigger target {target}")
    return function


def _split_source(source: str):
    """'//pubsub.googleapis.com/projects/p/topics/t' -> ('pubsub.googleapis.com', 'projects/p/topics/t')"""
    if source and source.startswith('//'):
        service, _, name = source[2:].partition('/')
        return service, name
    return None, source


def parse_cloud_event(cloud_event) -> dict:
    """
    Convert a CloudEvent into the current-shape envelope.

    Pub/Sub CloudEvents wrap the message as {"message": {...}, "subscription": ...};
    the inner message is passed on untouched (data stays base64 encoded).
    Realtime Database sources lose their "locations/{region}" segment and the
    "firebasedatabasehost" extension becomes the context domain.

    Args:
        cloud_event: CloudEvent with id, time, type, source, subject attributes

    Returns:
        {"data": ..., "context": {...}}
    """
    logger = logging.getLogger('trigger_adapter.entrypoint')

    data = cloud_event.data
    if isinstance(data, dict) and 'message' in data:
        logger.debug("Unwrapping Pub/Sub message from CloudEvent data")
        data = data['message']

    service, name = _split_source(cloud_event['source'])
    if service == DATABASE_EVENT_SOURCE:
        name = _DATABASE_LOCATION.sub(r'\1', name or '')
    subject = cloud_event.get('subject')
    if subject:
        name = f"{name}/{subject}" if name else subject

    context = {
        'eventId': cloud_event['id'],
        'timestamp': cloud_event.get('time'),
        'eventType': cloud_event['type'],
        'resource': {'service': service, 'name': name},
    }
    if cloud_event.get('firebasedatabasehost'):
        context['domain'] = cloud_event['firebasedatabasehost']
    return {'data': data, 'context': context}
