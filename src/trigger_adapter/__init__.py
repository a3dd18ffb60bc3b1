# src/trigger_adapter/__init__.py
"""
trigger_adapter package exports.
"""

# ─── Config & errors ─────────────────────────────────────────────────────────
from .config import init_env, get_config, setup_logging
from .errors import TriggerAdapterError, ValueDecodeError, TriggerResourceError

# ─── Event normalizer ────────────────────────────────────────────────────────
from .core import (
    Change,
    CloudFunction,
    make_cloud_function,
    match_wildcards,
    apply_field_mask,
)

# ─── Providers ───────────────────────────────────────────────────────────────
# Imported as modules: firestore.document(...), database.ref(...), pubsub.topic(...)
from . import firestore
from . import database
from . import pubsub

__version__ = "0.1.0"

__all__ = [
    # config & errors
    "init_env",
    "get_config",
    "setup_logging",
    "TriggerAdapterError",
    "ValueDecodeError",
    "TriggerResourceError",
    # normalizer
    "Change",
    "CloudFunction",
    "make_cloud_function",
    "match_wildcards",
    "apply_field_mask",
    # providers
    "firestore",
    "database",
    "pubsub",
]
