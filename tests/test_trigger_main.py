# tests/test_trigger_main.py

import base64
import json
from types import SimpleNamespace

import pytest
from cloudevents.http import CloudEvent

import sample_functions
import trigger_main

from conftest import DOCUMENT_NAME


@pytest.fixture(autouse=True)
def isolated_entrypoint(monkeypatch, project_env):
    """No metadata-server calls or logging reconfiguration from init_env"""
    monkeypatch.setattr(trigger_main, "init_env", lambda log_level=None: None)
    trigger_main.load_target.cache_clear()
    sample_functions.received.clear()
    yield
    trigger_main.load_target.cache_clear()


def pubsub_event(payload):
    attributes = {
        "id": "m1",
        "type": "google.cloud.pubsub.topic.v1.messagePublished",
        "source": "//pubsub.googleapis.com/projects/demo-project/topics/events",
        "time": "2024-01-01T00:00:00Z",
    }
    data = {
        "message": {
            "data": base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii"),
            "attributes": {"origin": "test"},
        },
        "subscription": "projects/demo-project/subscriptions/events-sub",
    }
    return CloudEvent(attributes, data)


def test_parse_pubsub_cloud_event():
    envelope = trigger_main.parse_cloud_event(pubsub_event({"n": 1}))
    assert envelope["data"]["attributes"] == {"origin": "test"}
    assert envelope["context"] == {
        "eventId": "m1",
        "timestamp": "2024-01-01T00:00:00Z",
        "eventType": "google.cloud.pubsub.topic.v1.messagePublished",
        "resource": {"service": "pubsub.googleapis.com", "name": "projects/demo-project/topics/events"},
    }


def test_parse_firestore_cloud_event_joins_subject():
    event = CloudEvent({
        "id": "f1",
        "type": "google.cloud.firestore.document.v1.written",
        "source": "//firestore.googleapis.com/projects/demo-project/databases/(default)",
        "subject": "documents/users/alice",
    }, {"value": {}, "oldValue": {}})
    envelope = trigger_main.parse_cloud_event(event)
    assert envelope["context"]["resource"]["name"] == DOCUMENT_NAME


def test_main_dispatches_to_target(monkeypatch):
    monkeypatch.setenv("TRIGGER_TARGET", "sample_functions:on_event")
    assert trigger_main.main(pubsub_event({"n": 1})) == "handled"

    message, ctx = sample_functions.received[0]
    assert message.json == {"n": 1}
    assert message.attributes == {"origin": "test"}
    assert ctx["params"] == {}


def test_main_drives_async_handlers(monkeypatch):
    monkeypatch.setenv("TRIGGER_TARGET", "sample_functions:on_event_async")
    assert trigger_main.main(pubsub_event({"n": 2})) == {"n": 2}


def test_main_reraises_handler_errors(monkeypatch):
    monkeypatch.setenv("TRIGGER_TARGET", "sample_functions:on_event_failing")
    with pytest.raises(RuntimeError, match="handler failed"):
        trigger_main.main(pubsub_event({"n": 3}))


def test_background_entry_point(monkeypatch, raw_document):
    monkeypatch.setenv("TRIGGER_TARGET", "sample_functions:on_user_write")
    context = SimpleNamespace(event_id="e1", timestamp="2024-01-01T00:00:00Z",
                              event_type="providers/cloud.firestore/eventTypes/document.write",
                              resource=DOCUMENT_NAME)

    assert trigger_main.background({"value": raw_document, "oldValue": {}}, context) == "handled"

    change, ctx = sample_functions.received[0]
    assert change.after.get("name") == "Alice"
    assert ctx["eventType"] == "google.firestore.document.write"
    assert ctx["params"] == {"uid": "alice"}


@pytest.mark.parametrize("target, error", [
    ("", ValueError),
    ("sample_functions", ValueError),
    ("sample_functions:not_a_function", TypeError),
])
def test_load_target_rejects_bad_targets(target, error):
    with pytest.raises(error):
        trigger_main.load_target(target)


def database_event():
    return CloudEvent({
        "id": "d1",
        "type": "google.firebase.database.ref.v1.written",
        "source": "//firebasedatabase.googleapis.com/projects/_/locations/us-central1/instances/demo-db",
        "subject": "refs/profiles/alice",
        "firebasedatabasehost": "europe-west1.firebasedatabase.app",
    }, {"data": {"name": "Alice"}, "delta": {"age": 42}})


def test_parse_database_cloud_event_drops_location():
    envelope = trigger_main.parse_cloud_event(database_event())
    assert envelope["context"]["resource"] == {
        "service": "firebasedatabase.googleapis.com",
        "name": "projects/_/instances/demo-db/refs/profiles/alice",
    }
    assert envelope["context"]["domain"] == "europe-west1.firebasedatabase.app"


def test_main_dispatches_database_event(monkeypatch):
    monkeypatch.setenv("TRIGGER_TARGET", "sample_functions:on_profile_write")
    assert trigger_main.main(database_event()) == "handled"

    change, ctx = sample_functions.received[0]
    assert change.before.val() == {"name": "Alice"}
    assert change.after.val() == {"name": "Alice", "age": 42}
    assert change.after.ref_path == "/profiles/alice"
    assert change.after.instance == "https://demo-db.europe-west1.firebasedatabase.app"
    assert ctx["params"] == {"uid": "alice"}
