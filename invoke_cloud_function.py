#!/usr/bin/env python3
"""
invoke_cloud_function.py

A helper that sends a structured CloudEvent to your locally-running Functions
Framework (port 8080), the way Eventarc would deliver it in production.

Usage (from your project root):
  1) Start your Functions Framework in another terminal:
       export TRIGGER_TARGET=my_functions:on_user_write
       functions-framework --source=src/trigger_main.py --target=main --signature-type=cloudevent --debug --port=8080

  2) In this terminal, run:
       python invoke_cloud_function.py --topic my-topic --json '{"hello": "world"}'
       python invoke_cloud_function.py --document users/alice --fields '{"name": {"stringValue": "Alice"}}'
       python invoke_cloud_function.py --help
"""

import argparse
import base64
import json
import sys
import uuid
from datetime import datetime, timezone

import requests
from cloudevents.conversion import to_structured
from cloudevents.http import CloudEvent

# Default URL for local Functions Framework
LOCAL_FF_URL = "http://127.0.0.1:8080/"

PUBSUB_EVENT_TYPE = "google.cloud.pubsub.topic.v1.messagePublished"
FIRESTORE_EVENT_TYPE = "google.cloud.firestore.document.v1.written"


def build_pubsub_event(project: str, topic: str, payload: dict, attributes: dict) -> CloudEvent:
    attrs = {
        "id": str(uuid.uuid4()),
        "type": PUBSUB_EVENT_TYPE,
        "source": f"//pubsub.googleapis.com/projects/{project}/topics/{topic}",
    }
    data = {
        "message": {
            "data": base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii"),
            "attributes": attributes,
            "messageId": attrs["id"],
            "publishTime": datetime.now(timezone.utc).isoformat(),
        },
        "subscription": f"projects/{project}/subscriptions/local-invoke",
    }
    return CloudEvent(attrs, data)


def build_firestore_event(project: str, document: str, fields: dict) -> CloudEvent:
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    name = f"projects/{project}/databases/(default)/documents/{document}"
    attrs = {
        "id": str(uuid.uuid4()),
        "type": FIRESTORE_EVENT_TYPE,
        "source": f"//firestore.googleapis.com/projects/{project}/databases/(default)",
        "subject": f"documents/{document}",
    }
    data = {
        "value": {"name": name, "fields": fields, "createTime": now, "updateTime": now},
        "oldValue": {},
    }
    return CloudEvent(attrs, data)


def main():
    parser = argparse.ArgumentParser(
        description="Send a CloudEvent to the locally-running Cloud Function (port 8080)."
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--topic",
        type=str,
        help="Publish a Pub/Sub message event for this topic."
    )
    target.add_argument(
        "--document",
        type=str,
        help="Send a Firestore document write event for this document path (e.g. users/alice)."
    )
    parser.add_argument(
        "--project",
        type=str,
        default="demo-project",
        help="Project id used in resource names (default: %(default)s)."
    )
    parser.add_argument(
        "--json",
        type=str,
        default="{}",
        help="JSON payload for --topic; it is base64 encoded into message.data."
    )
    parser.add_argument(
        "--attributes",
        type=str,
        default="{}",
        help="JSON object of Pub/Sub message attributes."
    )
    parser.add_argument(
        "--fields",
        type=str,
        default="{}",
        help="JSON object of tagged Firestore values for --document."
    )
    parser.add_argument(
        "--url",
        type=str,
        default=LOCAL_FF_URL,
        help="Base URL of the locally-running Functions Framework (default: %(default)s)."
    )

    args = parser.parse_args()

    try:
        if args.topic:
            event = build_pubsub_event(args.project, args.topic, json.loads(args.json), json.loads(args.attributes))
        else:
            event = build_firestore_event(args.project, args.document, json.loads(args.fields))
    except json.JSONDecodeError as e:
        print(f"⚠️  Invalid JSON argument: {e}")
        sys.exit(2)

    headers, body = to_structured(event)

    url = args.url.rstrip("/")  # ensure no trailing slash
    print(f"→ Sending {event['type']} ({event['id']}) to {url} …")
    try:
        resp = requests.post(url, headers=headers, data=body, timeout=120)
    except requests.exceptions.RequestException as e:
        print(f"⚠️  HTTP request failed: {e}")
        sys.exit(1)

    print(f"\n← Status code: {resp.status_code}\n")
    print("← Response body:\n")
    print(resp.text)


if __name__ == "__main__":
    main()
