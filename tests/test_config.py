# tests/test_config.py

import logging
import os

import pytest
import requests

import trigger_adapter.config.config_loader as loader


class DummyResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("K_SERVICE", "ENVIRONMENT", "LOG_LEVEL", "GCLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT",
                "FIREBASE_DATABASE_INSTANCE"):
        # setenv first so teardown also removes values written by init_env
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    # Never load a developer's .env during tests
    monkeypatch.setattr(loader, "load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def local_machine(monkeypatch):
    def offline(*args, **kwargs):
        raise requests.ConnectionError("no metadata server")
    monkeypatch.setattr(loader.requests, "get", offline)


@pytest.mark.parametrize("service, env_var, expected", [
    ("trigger-prod", "", "production"),
    ("trigger-staging", "", "staging"),
    ("", "prod", "production"),
    ("", "stage", "staging"),
    ("", "", "development"),
])
def test_get_environment(monkeypatch, service, env_var, expected):
    monkeypatch.setenv("K_SERVICE", service)
    monkeypatch.setenv("ENVIRONMENT", env_var)
    assert loader.get_environment() == expected


def test_not_in_gcp_when_metadata_unreachable(local_machine):
    assert loader.is_running_in_gcp() is False


def test_project_id_from_metadata(monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, headers, timeout: DummyResponse("meta-project"))
    assert loader.get_project_id() == "meta-project"


def test_project_id_from_env(local_machine, monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "env-project")
    assert loader.get_project_id() == "env-project"


def test_project_id_missing(local_machine):
    with pytest.raises(RuntimeError):
        loader.get_project_id()


def test_init_env_exports_project(local_machine, monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "env-project")
    logger = loader.init_env(log_level="DEBUG")
    assert isinstance(logger, logging.Logger)
    assert os.environ["GCLOUD_PROJECT"] == "env-project"
    assert logging.getLogger().level == logging.DEBUG


def test_init_env_tolerates_missing_project(local_machine):
    loader.init_env(log_level="INFO")
    assert "GCLOUD_PROJECT" not in os.environ


def test_setup_logging_levels(monkeypatch):
    loader.setup_logging()
    assert logging.getLogger().level == logging.DEBUG

    monkeypatch.setenv("K_SERVICE", "trigger-prod")
    loader.setup_logging()
    assert logging.getLogger().level == logging.WARNING

    monkeypatch.setenv("LOG_LEVEL", "error")
    loader.setup_logging()
    assert logging.getLogger().level == logging.ERROR


def test_get_and_validate_config(monkeypatch):
    monkeypatch.setenv("GCLOUD_PROJECT", "demo-project")
    monkeypatch.setenv("FIREBASE_DATABASE_INSTANCE", "demo-db")
    config = loader.validate_config()
    assert config == {
        "GCLOUD_PROJECT": "demo-project",
        "FIREBASE_DATABASE_INSTANCE": "demo-db",
        "LOG_LEVEL": None,
        "ENVIRONMENT": "development",
    }


def test_validate_config_reports_missing():
    with pytest.raises(RuntimeError, match="FIREBASE_DATABASE_INSTANCE"):
        loader.validate_config(required=("FIREBASE_DATABASE_INSTANCE",))
