# src/trigger_adapter/config/__init__.py

from .config_loader import (
    init_env,
    setup_logging,
    get_environment,
    get_project_id,
    is_running_in_gcp,
    get_config,
    validate_config,
)

__all__ = [
    "init_env",
    "setup_logging",
    "get_environment",
    "get_project_id",
    "is_running_in_gcp",
    "get_config",
    "validate_config",
]
