"""Helpers for safely reading untyped JSON structures.

Use these at boundaries where ``package.json`` or ``build.config.json`` is
ingested. Each getter distinguishes "missing" (``None``) from "present".
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_str_map(table: Mapping[str, object], key: str) -> dict[str, str] | None:
    """Get a mapping of string to non-empty string.

    Returns None if missing or if any entry is not a string pair.
    """
    raw = get_table(table, key)
    if raw is None:
        return None
    out: dict[str, str] = {}
    for k, v in raw.items():
        if not isinstance(v, str) or not v.strip():
            return None
        out[k] = v.strip()
    return out


def lookup(table: Mapping[str, object], key: str) -> object:
    """Return the raw value for key, or MISSING when the key is absent.

    Unlike ``table.get``, an explicit JSON ``null`` comes back as ``None``.
    """
    if key not in table:
        return MISSING
    return table[key]
