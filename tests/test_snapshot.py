# tests/test_snapshot.py

import pytest

from trigger_adapter.firestore import DocumentReference, FirestoreClientProvider, Timestamp, build_snapshot

from conftest import DOCUMENT_NAME


def test_snapshot_with_fields(raw_document, decoder):
    snapshot = build_snapshot(raw_document, None, decoder)
    assert snapshot.exists
    assert snapshot.id == "alice"
    assert snapshot.data() == {"name": "Alice", "age": 42, "address": {"city": "Oslo"}}
    assert snapshot.create_time == Timestamp(1497315520, 349000000)
    assert snapshot.update_time == Timestamp(1497315522, 120000000)


def test_data_is_decoded_once(raw_document, decoder):
    snapshot = build_snapshot(raw_document, None, decoder)
    assert snapshot.data() is snapshot.data()
    assert snapshot.to_dict() is snapshot.data()


def test_dotted_get(raw_document):
    snapshot = build_snapshot(raw_document, None)
    assert snapshot.get("address.city") == "Oslo"
    assert snapshot.get("address.zip") is None
    assert snapshot.get("missing", default="n/a") == "n/a"


def test_document_with_no_fields_still_exists():
    raw = {
        "name": DOCUMENT_NAME,
        "createTime": "2017-06-13T00:58:40.349Z",
        "updateTime": "2017-06-13T00:58:40.349Z",
    }
    snapshot = build_snapshot(raw, None)
    assert snapshot.exists
    assert snapshot.data() == {}


@pytest.mark.parametrize("raw", [{}, None])
def test_deleted_document_resolves_ref_from_fallback(raw):
    snapshot = build_snapshot(raw, DOCUMENT_NAME)
    assert not snapshot.exists
    assert snapshot.to_dict() is None
    assert snapshot.data() == {}
    assert snapshot.id == "alice"
    assert snapshot.ref.path == "users/alice"


def test_ref_is_built_once(raw_document):
    snapshot = build_snapshot(raw_document, None)
    assert snapshot.ref is snapshot.ref
    assert snapshot.reference is snapshot.ref
    assert isinstance(snapshot.ref, DocumentReference)


def test_ref_cannot_be_assigned(raw_document):
    snapshot = build_snapshot(raw_document, None)
    with pytest.raises(AttributeError):
        snapshot.ref = None


def test_proto_field(raw_document):
    snapshot = build_snapshot(raw_document, None)
    assert snapshot.proto_field("age") == {"integerValue": "42"}
    assert snapshot.proto_field("address.city") == {"stringValue": "Oslo"}
    assert snapshot.proto_field("address.zip") is None
    assert snapshot.to_document_proto() is raw_document


def test_snapshot_equality(raw_document):
    assert build_snapshot(raw_document, None) == build_snapshot(dict(raw_document), None)
    changed = dict(raw_document, updateTime="2017-06-13T00:59:00Z")
    assert build_snapshot(raw_document, None) != build_snapshot(changed, None)


class FakeDocumentRef:
    def __init__(self, path):
        self.path = path
        self.parent = f"parent-of-{path}"
        self.calls = []

    def get(self, *args, **kwargs):
        self.calls.append(("get", args, kwargs))
        return "live-snapshot"

    def set(self, data, merge=False, **kwargs):
        self.calls.append(("set", data, merge))


class FakeClient:
    def __init__(self):
        self.documents = []

    def document(self, path):
        ref = FakeDocumentRef(path)
        self.documents.append(ref)
        return ref


class FakeClientProvider(FirestoreClientProvider):
    def __init__(self):
        super().__init__(project="demo-project")
        self.client = FakeClient()
        self.builds = 0

    def get_client(self):
        self.builds += 1
        return self.client


def test_reference_delegates_to_live_ref_lazily():
    provider = FakeClientProvider()
    ref = DocumentReference(DOCUMENT_NAME, provider)
    assert provider.builds == 0

    assert ref.get() == "live-snapshot"
    ref.set({"a": 1}, merge=True)
    assert ref.parent == "parent-of-users/alice"

    assert provider.builds == 1
    assert len(provider.client.documents) == 1
    assert provider.client.documents[0].calls == [("get", (), {}), ("set", {"a": 1}, True)]


def test_reference_equality():
    assert DocumentReference(DOCUMENT_NAME) == DocumentReference(DOCUMENT_NAME)
    assert len({DocumentReference(DOCUMENT_NAME), DocumentReference(DOCUMENT_NAME)}) == 1
