"""Exceptions raised while talking to the OVN northbound database."""

from __future__ import annotations

from typing import Any


class OvnError(Exception):
    """Base class for every OVN related failure."""


class OvnNotFound(OvnError):
    """No object of the given kind matched the lookup key."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"OVN {kind} not found: {name}")


class OvnDeserializationFailed(OvnError):
    """A row returned by the database did not have the expected shape."""

    def __init__(self, message: str = "failed to deserialize OVN object") -> None:
        super().__init__(message)


class OvnConflict(OvnError):
    """A value (such as a MAC address) is already in use elsewhere."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"OVN conflict: {value} is already in use")


class OvnTransactionError(OvnError):
    """The database rejected a transaction or answered it unexpectedly."""

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(f"OVN transaction failed: {error}")


class JsonRpcError(OvnError):
    """The JSON-RPC connection failed or produced an unusable message."""