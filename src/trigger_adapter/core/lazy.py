# src/trigger_adapter/core/lazy.py

import threading

_UNSET = object()


class lazy_property:
    """
    Read-only property computed on first access and cached on the instance.

    The getter runs at most once per instance, even with concurrent readers.
    If it raises, nothing is cached and the error surfaces at the access site.
    """

    def __init__(self, func):
        self.func = func
        self.attr = f"_lazy_{func.__name__}"
        self.__doc__ = func.__doc__

    def __set_name__(self, owner, name):
        self.attr = f"_lazy_{name}"

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        value = instance.__dict__.get(self.attr, _UNSET)
        if value is not _UNSET:
            return value
        lock = instance.__dict__.setdefault('_lazy_lock', threading.RLock())
        with lock:
            value = instance.__dict__.get(self.attr, _UNSET)
            if value is _UNSET:
                value = self.func(instance)
                instance.__dict__[self.attr] = value
        return value

    def __set__(self, instance, value):
        raise AttributeError(f"{self.attr[6:]} is read-only")
