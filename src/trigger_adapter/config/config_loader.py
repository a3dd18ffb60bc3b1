# src/trigger_adapter/config/config_loader.py

import os
import logging
import requests
from dotenv import load_dotenv

from .config import (
    ENV_GCLOUD_PROJECT,
    ENV_GOOGLE_CLOUD_PROJECT,
    ENV_DATABASE_INSTANCE,
    ENV_LOG_LEVEL,
    ENV_ENVIRONMENT,
    ENV_K_SERVICE,
    METADATA_ZONE_URL,
    METADATA_PROJECT_URL,
    METADATA_HEADERS,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    DEFAULT_LOG_LEVELS,
)


def is_running_in_gcp():
    """Detect if running in Google Cloud"""
    try:
        response = requests.get(METADATA_ZONE_URL, headers=METADATA_HEADERS, timeout=1)
        return response.status_code == 200
    except requests.RequestException:
        return False


def get_environment():
    """Detect environment from Cloud Function name or env var"""
    function_name = os.getenv(ENV_K_SERVICE, '')  # Cloud Run service name
    if 'prod' in function_name:
        return 'production'
    elif 'staging' in function_name:
        return 'staging'

    env = os.getenv(ENV_ENVIRONMENT, '').lower()
    if env in ['production', 'prod']:
        return 'production'
    elif env in ['staging', 'stage']:
        return 'staging'

    return 'development'


def setup_logging(log_level=None):
    """
    Configure structured logging based on environment and optional override

    Args:
        log_level (str, optional): Override log level ('DEBUG', 'INFO', 'WARN', 'ERROR')

    Returns:
        logging.Logger: the adapter's root logger
    """
    env = get_environment()

    final_level = (
        log_level or                           # Caller override
        os.getenv(ENV_LOG_LEVEL) or            # Environment variable
        DEFAULT_LOG_LEVELS.get(env, 'INFO')    # Environment default
    ).upper()

    logging.basicConfig(
        level=getattr(logging, final_level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True  # Override any existing configuration
    )

    logger = logging.getLogger('trigger_adapter')
    logger.info(f"Logging configured - Environment: {env}, Level: {final_level}")

    if final_level == 'DEBUG':
        logger.debug("Debug logging enabled - event envelopes will be logged")

    return logger


def get_project_id():
    """Get project ID from GCP metadata or environment"""
    logger = logging.getLogger('trigger_adapter.config')

    if is_running_in_gcp():
        try:
            response = requests.get(METADATA_PROJECT_URL, headers=METADATA_HEADERS, timeout=2)
            response.raise_for_status()
            project_id = response.text
            logger.debug(f"Retrieved project ID from metadata: {project_id}")
            return project_id
        except requests.RequestException as e:
            logger.error(f"Failed to get project ID from metadata: {e}")
            raise RuntimeError("Failed to determine project ID from metadata server") from e

    # Fall back to environment variable for local dev
    project_id = os.getenv(ENV_GCLOUD_PROJECT) or os.getenv(ENV_GOOGLE_CLOUD_PROJECT)
    if not project_id:
        logger.error("No project ID found in environment variables")
        raise RuntimeError("GCLOUD_PROJECT or GOOGLE_CLOUD_PROJECT must be set for local development")

    logger.debug(f"Using project ID from environment: {project_id}")
    return project_id


def init_env(log_level=None):
    """
    Initialize environment variables from appropriate source

    Trigger resource templates read GCLOUD_PROJECT lazily, so a missing project
    is not an error here; it only surfaces when trigger metadata is requested.

    Args:
        log_level (str, optional): Override log level for this session
    """
    logger = setup_logging(log_level)

    # Always load .env first (no-op in GCP, helpful for local dev)
    load_dotenv()
    logger.debug("Loaded .env file (if present)")

    env = get_environment()
    is_gcp = is_running_in_gcp()

    logger.info(f"Initializing environment - Running in: {'GCP' if is_gcp else 'Local'}, Environment: {env}")

    if not os.getenv(ENV_GCLOUD_PROJECT):
        try:
            project_id = get_project_id()
            os.environ[ENV_GCLOUD_PROJECT] = project_id
            logger.debug(f"Set {ENV_GCLOUD_PROJECT} to {project_id}")
        except RuntimeError as e:
            logger.warning(f"⚠️ Project ID unavailable, trigger metadata will not resolve: {e}")
    else:
        logger.debug(f"Using configured project: {os.getenv(ENV_GCLOUD_PROJECT)}")

    logger.info("Environment initialization completed successfully")
    return logger


def get_config():
    """Get configuration dictionary after init_env() has been called"""
    return {
        'GCLOUD_PROJECT': os.getenv(ENV_GCLOUD_PROJECT) or os.getenv(ENV_GOOGLE_CLOUD_PROJECT),
        'FIREBASE_DATABASE_INSTANCE': os.getenv(ENV_DATABASE_INSTANCE),
        'LOG_LEVEL': os.getenv(ENV_LOG_LEVEL),
        'ENVIRONMENT': get_environment(),
    }


def validate_config(required=('GCLOUD_PROJECT',)):
    """Validate that all required configuration is available"""
    logger = logging.getLogger('trigger_adapter.config')
    config = get_config()
    missing = [key for key in required if not config.get(key)]

    if missing:
        logger.error(f"Configuration validation failed. Missing: {missing}")
        raise RuntimeError(f"Configuration validation failed. Missing: {missing}")

    logger.info("Configuration validation passed")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Validated configuration: {config}")

    return config
