# src/trigger_adapter/pubsub/__init__.py

from .message import Message
from .provider import PROVIDER, SERVICE, TopicBuilder, ScheduleBuilder, topic, schedule, message_constructor

__all__ = [
    "Message",
    "PROVIDER",
    "SERVICE",
    "TopicBuilder",
    "ScheduleBuilder",
    "topic",
    "schedule",
    "message_constructor",
]
