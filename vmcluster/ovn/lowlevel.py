"""Transactions against the OVN northbound database."""

from __future__ import annotations

import logging
import threading
from typing import Any

from vmcluster.ovn.errors import OvnTransactionError
from vmcluster.ovn.jsonrpc import JsonRpcConnection

log = logging.getLogger(__name__)

TYPE_LOGICAL_SWITCH = "Logical_Switch"
TYPE_LOGICAL_SWITCH_PORT = "Logical_Switch_Port"
TYPE_LOGICAL_ROUTER = "Logical_Router"
TYPE_LOGICAL_ROUTER_PORT = "Logical_Router_Port"
TYPE_LOGICAL_ROUTER_STATIC_ROUTE = "Logical_Router_Static_Route"
TYPE_DHCP_OPTIONS = "DHCP_Options"

DATABASE = "OVN_Northbound"
DEFAULT_PORT = 6641

_COLUMNS = {
    TYPE_DHCP_OPTIONS: ["_uuid", "cidr"],
    TYPE_LOGICAL_ROUTER: ["_uuid", "name", "static_routes"],
    TYPE_LOGICAL_ROUTER_STATIC_ROUTE: ["_uuid", "ip_prefix", "nexthop"],
    TYPE_LOGICAL_SWITCH: ["_uuid", "name", "ports"],
    TYPE_LOGICAL_SWITCH_PORT: ["_uuid", "name", "addresses", "dynamic_addresses"],
}
_DEFAULT_COLUMNS = ["_uuid", "name"]


class Ovn:
    """A thread-safe handle to the northbound database."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection
        self._lock = threading.Lock()

    @classmethod
    def connect(cls, host: str, port: int = DEFAULT_PORT) -> "Ovn":
        """Connect to the northbound database at ``host:port``."""
        return cls(JsonRpcConnection.connect(host, port))

    def __enter__(self) -> "Ovn":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection."""
        self._connection.close()

    def transact(self, operations: list[Any]) -> list[dict[str, Any]]:
        """Run the operations as one transaction and return their results."""
        log.info("transact")
        params = [DATABASE, *operations]
        with self._lock:
            response = self._connection.request("transact", params)

        if response.error is not None:
            raise OvnTransactionError(response.error)
        results = response.result
        if not isinstance(results, list):
            raise OvnTransactionError(f"result is not an array: {results!r}")
        for result in results:
            if not isinstance(result, dict):
                raise OvnTransactionError(f"result is not an object: {result!r}")
            if result.get("error") is not None:
                raise OvnTransactionError(result)
        return results

    def list_objects(self, object_type: str) -> list[Any]:
        """Return every row of a table with the columns this package uses."""
        select = {
            "op": "select",
            "table": object_type,
            "where": [],
            "columns": _COLUMNS.get(object_type, _DEFAULT_COLUMNS),
        }
        results = self.transact([select])
        if not results:
            raise OvnTransactionError("select returned no result")
        rows = results[0].get("rows")
        if not isinstance(rows, list):
            raise OvnTransactionError(f"select did not return rows: {results[0]!r}")
        return rows

    def insert(self, object_type: str, row: dict[str, Any]) -> None:
        """Insert one row."""
        log.info("insert")
        self.transact([{"op": "insert", "table": object_type, "row": row}])

    def delete_by_uuid(self, object_type: str, uuid: str) -> None:
        """Delete the row with the given UUID."""
        self.transact(
            [
                {
                    "op": "delete",
                    "table": object_type,
                    "where": [["_uuid", "==", ["uuid", uuid]]],
                }
            ]
        )