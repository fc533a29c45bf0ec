import re
from datetime import datetime

import pytest

from events import normalize_room, resolve_identity, utc_now_iso


@pytest.mark.parametrize(
    "identity, expected",
    [
        (None, "sid-1"),
        ("alice", "alice"),
        ("", "sid-1"),
        ({"uid": "bob"}, "bob"),
        ({"userId": "carol"}, "carol"),
        ({"id": 7}, "7"),
        ({"uid": "u", "userId": "x", "id": "y"}, "u"),
        ({"uid": None, "userId": "x"}, "x"),
        ({"uid": ""}, "sid-1"),
        ({"name": "zed"}, "sid-1"),
        ({"uid": {"nested": 1}}, "[object Object]"),
        ({"id": ["a", "b"]}, "a,b"),
        ({}, "sid-1"),
        ([], "sid-1"),
        (["alice"], "sid-1"),
        (42, "42"),
        (1.0, "1"),
        (0, "sid-1"),
        (True, "true"),
        (False, "sid-1"),
    ],
)
def test_resolve_identity(identity, expected):
    assert resolve_identity(identity, "sid-1") == expected


@pytest.mark.parametrize(
    "room_raw, expected",
    [
        ("lobby", "lobby"),
        ("  lobby \n", "lobby"),
        ("   ", ""),
        ("", ""),
        (None, ""),
        (12, "12"),
        (["a", "b"], "a,b"),
        (["a", None, 3], "a,,3"),
        ({"name": "lobby"}, "[object Object]"),
    ],
)
def test_normalize_room(room_raw, expected):
    assert normalize_room(room_raw) == expected


def test_utc_now_iso_matches_javascript_format():
    stamp = utc_now_iso()

    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", stamp)
    assert datetime.fromisoformat(stamp.replace("Z", "+00:00")).tzinfo is not None
