# ===============================================================================
# tests/conftest.py
# Shared fixtures for the trigger adapter test suite
# ===============================================================================

import logging

import pytest

from trigger_adapter.firestore import ValueDecoder

PROJECT_ID = "demo-project"
DOCUMENT_NAME = f"projects/{PROJECT_ID}/databases/(default)/documents/users/alice"


def pytest_configure(config):
    """Quiet noisy third-party loggers during tests"""
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture
def project_env(monkeypatch):
    """GCLOUD_PROJECT set, database instance unset"""
    monkeypatch.setenv("GCLOUD_PROJECT", PROJECT_ID)
    monkeypatch.delenv("FIREBASE_DATABASE_INSTANCE", raising=False)
    monkeypatch.delenv("FIREBASE_DATABASE_EMULATOR_HOST", raising=False)
    return PROJECT_ID


@pytest.fixture
def no_project_env(monkeypatch):
    for key in ("GCLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT", "FIREBASE_DATABASE_INSTANCE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def decoder():
    return ValueDecoder()


@pytest.fixture
def raw_document():
    """A Firestore document as it arrives in a trigger payload"""
    return {
        "name": DOCUMENT_NAME,
        "fields": {
            "name": {"stringValue": "Alice"},
            "age": {"integerValue": "42"},
            "address": {"mapValue": {"fields": {"city": {"stringValue": "Oslo"}}}},
        },
        "createTime": "2017-06-13T00:58:40.349Z",
        "updateTime": "2017-06-13T00:58:42.120Z",
    }
