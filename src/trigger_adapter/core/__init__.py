# src/trigger_adapter/core/__init__.py

from .paths import normalize_path, path_parts, join_path
from .wildcards import match_wildcards, PathPattern, trim_param
from .auth import detect_auth_type, make_auth, apply_auth, ADMIN, USER, UNAUTHENTICATED
from .change import Change, apply_field_mask
from .lazy import lazy_property
from .cloud_function import CloudFunction, make_cloud_function, normalize_envelope

__all__ = [
    # Paths and wildcards
    "normalize_path",
    "path_parts",
    "join_path",
    "match_wildcards",
    "PathPattern",
    "trim_param",

    # Auth classification
    "detect_auth_type",
    "make_auth",
    "apply_auth",
    "ADMIN",
    "USER",
    "UNAUTHENTICATED",

    # Change model
    "Change",
    "apply_field_mask",

    # Event normalizer
    "CloudFunction",
    "make_cloud_function",
    "normalize_envelope",
    "lazy_property",
]
