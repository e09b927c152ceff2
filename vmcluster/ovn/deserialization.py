"""Helpers that pull typed fields out of OVSDB rows."""

from __future__ import annotations

from typing import Any

from vmcluster.ovn.errors import OvnDeserializationFailed


def deserialize_object(value: Any) -> dict[str, Any]:
    """Return the row if it is a JSON object."""
    if not isinstance(value, dict):
        raise OvnDeserializationFailed(f"expected an object, got {value!r}")
    return value


def deserialize_uuid(obj: dict[str, Any]) -> str:
    """Return the row's ``_uuid``, stored as ``["uuid", "<uuid>"]``."""
    pair = obj.get("_uuid")
    if isinstance(pair, list) and len(pair) > 1 and isinstance(pair[1], str):
        return pair[1]
    raise OvnDeserializationFailed(f"row has no usable _uuid: {pair!r}")


def deserialize_string(obj: dict[str, Any], field: str) -> str:
    """Return a string column."""
    value = obj.get(field)
    if isinstance(value, str):
        return value
    raise OvnDeserializationFailed(f"column {field!r} is not a string: {value!r}")


def _uuid_from_pair(pair: Any) -> str:
    if (
        isinstance(pair, list)
        and len(pair) > 1
        and pair[0] == "uuid"
        and isinstance(pair[1], str)
    ):
        return pair[1]
    raise OvnDeserializationFailed(f"expected [\"uuid\", <uuid>], got {pair!r}")


def deserialize_uuid_set(obj: dict[str, Any], field: str) -> list[str]:
    """Return the UUIDs of a column holding either a single UUID or a set of them."""
    value = obj.get(field)
    if not isinstance(value, list):
        raise OvnDeserializationFailed(f"column {field!r} is not an array: {value!r}")

    subtype = value[0] if value and isinstance(value[0], str) else "unknown"
    if subtype == "uuid":
        return [_uuid_from_pair(value)]
    if subtype == "set":
        members = value[1] if len(value) > 1 else None
        if not isinstance(members, list):
            raise OvnDeserializationFailed(f"\"set\" in {field!r} is not followed by an array")
        return [_uuid_from_pair(member) for member in members]
    raise OvnDeserializationFailed(f"unknown type {subtype!r} in column {field!r}")