# src/trigger_adapter/errors.py

"""
Exception types raised by the adapter layer.

Handler exceptions are never wrapped: they propagate unchanged so the platform
sees the original failure. Only problems with the wire data or the trigger
definition itself use the types below.
"""


class TriggerAdapterError(Exception):
    """Base class for errors raised by trigger_adapter itself"""


class ValueDecodeError(TriggerAdapterError, ValueError):
    """A tagged document value could not be decoded (bad wire data)"""

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class TriggerResourceError(TriggerAdapterError, RuntimeError):
    """A trigger resource template could not be generated"""
