# app/utils/test_json_utils.py
"""
재귀 없는 JSON 직렬화 테스트

사용법: python -m pytest app/utils/test_json_utils.py -v
"""
import json
import sys
from datetime import datetime, timezone

import pytest

from app.utils import json_utils

SAMPLE = {
    "post_id": "p1",
    "likes": ["alice", "bob"],
    "counts": (1, 2.5, None, True, False),
    "author": {"username": "앨리스", "avatar": None},
    "comments": [{"replies": [], "meta": {}}],
}


@pytest.mark.parametrize("options", [
    {},
    {"sort_keys": True},
    {"ensure_ascii": False},
    {"indent": 2},
    {"indent": "\t", "sort_keys": True},
    {"separators": (",", ":")},
])
def test_output_matches_standard_json(options):
    assert json_utils.dumps(SAMPLE, **options) == json.dumps(SAMPLE, **options)


def test_non_string_keys_follow_json_rules():
    data = {2: "int", 1.5: "float", False: "bool", None: "none"}
    assert json_utils.dumps(data) == json.dumps(data)


def test_default_is_applied_to_unknown_types():
    created_at = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert json_utils.dumps({"created_at": created_at}, default=lambda value: value.isoformat()) == \
        '{"created_at": "2024-01-15T10:30:00+00:00"}'
    with pytest.raises(TypeError):
        json_utils.dumps({"created_at": created_at})


def test_nesting_deeper_than_recursion_limit():
    depth = sys.getrecursionlimit() * 3
    nested = {"replies": []}
    for _ in range(depth):
        nested = {"replies": [nested]}

    text = json_utils.dumps(nested, separators=(",", ":"))

    assert text.count('"replies"') == depth + 1
    assert text.startswith('{"replies":[{"replies":[')
    assert text.endswith('[]' + '}]' * depth + '}')


def test_circular_reference_is_rejected():
    looped = {"replies": []}
    looped["replies"].append(looped)
    with pytest.raises(ValueError):
        json_utils.dumps(looped)


def test_shared_objects_are_not_mistaken_for_cycles():
    author = {"user_id": "alice"}
    data = [{"author": author}, {"author": author, "replies": [{"author": author}]}]
    assert json_utils.dumps(data) == json.dumps(data)
