# src/trigger_adapter/pubsub/provider.py

import os
from typing import Any, Callable, Dict

from trigger_adapter.config.config import (
    ENV_GCLOUD_PROJECT,
    PUBSUB_LEGACY_PREFIX,
    PUBSUB_PROVIDER,
    PUBSUB_SERVICE,
)
from trigger_adapter.core.cloud_function import CloudFunction, make_cloud_function
from trigger_adapter.errors import TriggerResourceError
from .message import Message

PROVIDER = PUBSUB_PROVIDER
SERVICE = PUBSUB_SERVICE


def _project() -> str:
    project = os.getenv(ENV_GCLOUD_PROJECT)
    if not project:
        raise TriggerResourceError(f"{ENV_GCLOUD_PROJECT} is not set.")
    return project


def message_constructor(envelope: Dict[str, Any]) -> Message:
    return Message(envelope.get('data'))


class TopicBuilder:
    def __init__(self, trigger_resource: Callable[[], str]):
        self.trigger_resource = trigger_resource

    def on_publish(self, handler) -> CloudFunction:
        """Respond to every message published on the topic"""
        return make_cloud_function(
            handler=handler,
            provider=PROVIDER,
            event_type='topic.publish',
            service=SERVICE,
            trigger_resource=self.trigger_resource,
            legacy_event_type=f"{PUBSUB_LEGACY_PREFIX}topic.publish",
            data_constructor=message_constructor,
        )


class ScheduleBuilder:
    """Scheduled functions run on a Pub/Sub topic managed by the platform"""

    def __init__(self, schedule: str):
        self.schedule = schedule

    def on_run(self, handler: Callable[[Dict[str, Any]], Any]) -> CloudFunction:
        """
        Bind a handler that only receives the event context.

        Args:
            handler: Called as handler(context)

        Returns:
            CloudFunction labelled as scheduled
        """
        return make_cloud_function(
            context_only_handler=handler,
            provider=PROVIDER,
            event_type='topic.publish',
            service=SERVICE,
            # The deployer appends the topic name
            trigger_resource=lambda: f"projects/{_project()}/topics",
            labels={'deployment-scheduled': 'true'},
        )


def topic(name: str) -> TopicBuilder:
    """
    Select the Pub/Sub topic to listen to.

    Raises:
        ValueError: if the topic name contains "/"
    """
    if '/' in name:
        raise ValueError("Topic name may not have a /")
    return TopicBuilder(lambda: f"projects/{_project()}/topics/{name}")


def schedule(expression: str) -> ScheduleBuilder:
    return ScheduleBuilder(expression)
