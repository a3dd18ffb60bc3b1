# tests/test_wildcards.py

import pytest

from trigger_adapter.core import PathPattern, join_path, match_wildcards, normalize_path, path_parts, trim_param


def test_single_wildcard():
    params = match_wildcards("projects/p/databases/(default)/documents/users/{uid}",
                             "projects/p/databases/(default)/documents/users/alice")
    assert params == {"uid": "alice"}


def test_multiple_wildcards_are_positional():
    params = match_wildcards("users/{uid}/posts/{postId}", "users/alice/posts/p1")
    assert params == {"uid": "alice", "postId": "p1"}


def test_no_wildcards_returns_empty():
    assert match_wildcards("users/alice", "users/alice") == {}


def test_out_of_range_positions_are_omitted():
    params = match_wildcards("users/{uid}/posts/{postId}", "users/alice")
    assert params == {"uid": "alice"}


@pytest.mark.parametrize("template, instance", [
    (None, "users/alice"),
    ("users/{uid}", None),
    (None, None),
    (42, "users/alice"),
])
def test_malformed_input_never_raises(template, instance):
    assert match_wildcards(template, instance) == {}


def test_wildcard_count_matches_template():
    template = "a/{one}/b/{two}/c/{three}"
    instance = "a/1/b/2/c/3"
    params = match_wildcards(template, instance)
    assert len(params) == 3
    assert params == {"one": "1", "two": "2", "three": "3"}


def test_path_helpers():
    assert normalize_path("/users/alice/") == "users/alice"
    assert normalize_path(None) == ""
    assert path_parts("/") == []
    assert path_parts("/a/b") == ["a", "b"]
    assert join_path("/a/", "b/c") == "a/b/c"
    assert join_path("", "b") == "b"


def test_trim_param():
    assert trim_param("{uid}") == "uid"
    assert trim_param("{path=**}") == "path"


def test_path_pattern_single_captures():
    pattern = PathPattern("users/{uid}/posts/{postId=*}")
    assert pattern.has_wildcards()
    assert pattern.has_captures()
    assert pattern.extract_matches("users/alice/posts/p1") == {"uid": "alice", "postId": "p1"}


def test_path_pattern_multi_capture():
    pattern = PathPattern("{path=**}/settings")
    assert pattern.extract_matches("orgs/acme/teams/red/settings") == {"path": "orgs/acme/teams/red"}


def test_path_pattern_plain_wildcards_do_not_capture():
    pattern = PathPattern("users/*/posts/**")
    assert pattern.has_wildcards()
    assert not pattern.has_captures()
    assert pattern.extract_matches("users/alice/posts/a/b") == {}
    assert pattern.get_value() == "users/*/posts/**"
