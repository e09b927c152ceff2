"""Logical routers, their ports and their static routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from vmcluster.ovn.common import OvnNamedObject, OvnObject
from vmcluster.ovn.deserialization import deserialize_string
from vmcluster.ovn.errors import OvnDeserializationFailed, OvnNotFound
from vmcluster.ovn.lowlevel import (
    TYPE_LOGICAL_ROUTER,
    TYPE_LOGICAL_ROUTER_PORT,
    TYPE_LOGICAL_ROUTER_STATIC_ROUTE,
)

log = logging.getLogger(__name__)

ROUTER_PORT_MAC = "02:00:00:00:00:01"


@dataclass(frozen=True)
class Route:
    """A requested static route: traffic to ``cidr`` goes via ``nexthop``."""

    cidr: str
    nexthop: str


class StaticRoute(OvnObject):
    """A static route row of a logical router."""

    ovn_type = TYPE_LOGICAL_ROUTER_STATIC_ROUTE

    def __init__(self, ovn: Any, uuid: str, ip_prefix: str, nexthop: str) -> None:
        super().__init__(ovn, uuid)
        self.ip_prefix = ip_prefix
        self.nexthop = nexthop

    def __repr__(self) -> str:
        return (
            f"StaticRoute(uuid={self.uuid!r}, ip_prefix={self.ip_prefix!r}, "
            f"nexthop={self.nexthop!r})"
        )

    @classmethod
    def _from_fields(cls, ovn: Any, uuid: str, obj: dict[str, Any]) -> "StaticRoute":
        return cls(
            ovn,
            uuid,
            deserialize_string(obj, "ip_prefix"),
            deserialize_string(obj, "nexthop"),
        )

    def matches(self, route: Route) -> bool:
        """Tell whether this row describes the given route."""
        return self.ip_prefix == route.cidr and self.nexthop == route.nexthop


def _static_route_uuids(obj: dict[str, Any]) -> list[str]:
    column = obj.get("static_routes")
    if not isinstance(column, list) or len(column) < 2:
        raise OvnDeserializationFailed(f"static_routes is malformed: {column!r}")
    members = column[1]
    if isinstance(members, str):
        return [members]
    if isinstance(members, list):
        uuids = []
        for item in members:
            if not (isinstance(item, list) and len(item) > 1 and isinstance(item[1], str)):
                raise OvnDeserializationFailed(f"expected [\"uuid\", <uuid>], got {item!r}")
            uuids.append(item[1])
        return uuids
    raise OvnDeserializationFailed(f"unexpected static_routes value: {members!r}")


class LogicalRouter(OvnNamedObject):
    """A logical router and the UUIDs of its static routes."""

    ovn_type = TYPE_LOGICAL_ROUTER

    def __init__(
        self, ovn: Any, uuid: str, name: str, static_route_uuids: Iterable[str] = ()
    ) -> None:
        super().__init__(ovn, uuid, name)
        self.static_route_uuids = list(static_route_uuids)

    @classmethod
    def _from_fields(cls, ovn: Any, uuid: str, obj: dict[str, Any]) -> "LogicalRouter":
        return cls(ovn, uuid, deserialize_string(obj, "name"), _static_route_uuids(obj))

    def lrp(self) -> "LogicalRouterPortBuilder":
        """Return a builder for ports attached to this router."""
        return LogicalRouterPortBuilder(self.ovn, self)

    def get_routes(self) -> list[StaticRoute]:
        """Return this router's static routes in the order they are referenced."""
        by_uuid = {route.uuid: route for route in StaticRoute.list(self.ovn)}
        routes = []
        for uuid in self.static_route_uuids:
            route = by_uuid.get(uuid)
            if route is None:
                raise OvnNotFound(StaticRoute.ovn_type, f"{uuid} for {self.name}")
            routes.append(route)
        return routes

    def set_routes(self, routes: Sequence[Route]) -> None:
        """Make the router's static routes exactly the given ones."""
        old_routes = self.get_routes()
        operations: list[dict[str, Any]] = []
        to_add = []

        new_ids = (f"new_route_{i}" for i in range(len(routes)))
        for route in routes:
            if any(old.matches(route) for old in old_routes):
                continue
            route_id = next(new_ids)
            operations.append(
                {
                    "op": "insert",
                    "table": TYPE_LOGICAL_ROUTER_STATIC_ROUTE,
                    "row": {"ip_prefix": route.cidr, "nexthop": route.nexthop},
                    "uuid-name": route_id,
                }
            )
            to_add.append(["named-uuid", route_id])

        to_remove = [
            ["uuid", old.uuid]
            for old in old_routes
            if not any(old.matches(route) for route in routes)
        ]

        operations.append(
            {
                "mutations": [
                    ["static_routes", "insert", ["set", to_add]],
                    ["static_routes", "delete", ["set", to_remove]],
                ],
                "where": [["_uuid", "==", ["uuid", self.uuid]]],
                "op": "mutate",
                "table": TYPE_LOGICAL_ROUTER,
            }
        )
        self.ovn.transact(operations)


class LogicalRouterPort(OvnNamedObject):
    """An interface row that belongs to a logical router."""

    ovn_type = TYPE_LOGICAL_ROUTER_PORT

    def update(self, networks: str) -> None:
        """Set the networks, keeping the name and MAC address."""
        self.ovn.transact(
            [
                {
                    "op": "update",
                    "table": TYPE_LOGICAL_ROUTER_PORT,
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                    "row": {
                        "name": self.name,
                        "mac": ROUTER_PORT_MAC,
                        "networks": networks,
                    },
                }
            ]
        )


@dataclass
class LogicalRouterPortBuilder:
    """Creates interfaces on a given logical router."""

    ovn: Any
    lr: LogicalRouter

    def create(self, name: str, networks: str) -> LogicalRouterPort:
        """Create an interface on the router and return it."""
        add_lrp = {
            "op": "insert",
            "table": TYPE_LOGICAL_ROUTER_PORT,
            "row": {"name": name, "mac": ROUTER_PORT_MAC, "networks": networks},
            "uuid-name": "new_lrp",
        }
        add_lrp_to_lr = {
            "op": "mutate",
            "table": TYPE_LOGICAL_ROUTER,
            "where": [["_uuid", "==", ["uuid", self.lr.uuid]]],
            "mutations": [["ports", "insert", ["set", [["named-uuid", "new_lrp"]]]]],
        }
        self.ovn.transact([add_lrp, add_lrp_to_lr])
        return LogicalRouterPort.get_by_name(self.ovn, name)

    def create_if_missing(self, name: str, networks: str) -> LogicalRouterPort:
        """Return the named interface, creating it on the router if it does not exist."""
        try:
            return LogicalRouterPort.get_by_name(self.ovn, name)
        except OvnNotFound:
            log.info("ovn: %s %s doesn't exist, creating", LogicalRouterPort.ovn_type, name)
            return self.create(name, networks)