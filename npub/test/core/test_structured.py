from __future__ import annotations

from npub.core.structured import MISSING, as_str_dict, get_str, get_str_map, lookup


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([("a", 1)]) is None


def test_get_str_strips_and_rejects_empty() -> None:
    table: dict[str, object] = {"a": "  x ", "b": "  ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_str_map() -> None:
    assert get_str_map({"m": {"A": "https://a/"}}, "m") == {"A": "https://a/"}
    assert get_str_map({"m": {"A": ""}}, "m") is None
    assert get_str_map({"m": "nope"}, "m") is None


def test_lookup_distinguishes_null_from_missing() -> None:
    table: dict[str, object] = {"k": None}
    assert lookup(table, "k") is None
    assert lookup(table, "other") is MISSING
