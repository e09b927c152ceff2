"""Logical switches and their ports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from vmcluster.ovn.common import OvnNamedObject
from vmcluster.ovn.deserialization import deserialize_string, deserialize_uuid_set
from vmcluster.ovn.dhcpoptions import DhcpOptions
from vmcluster.ovn.errors import OvnConflict, OvnDeserializationFailed, OvnNotFound
from vmcluster.ovn.lowlevel import TYPE_LOGICAL_SWITCH, TYPE_LOGICAL_SWITCH_PORT

log = logging.getLogger(__name__)


def _optional_string(obj: dict[str, Any], field: str) -> str:
    try:
        return deserialize_string(obj, field)
    except OvnDeserializationFailed:
        return ""


class LogicalSwitch(OvnNamedObject):
    """A logical switch and the UUIDs of its ports."""

    ovn_type = TYPE_LOGICAL_SWITCH

    def __init__(
        self, ovn: Any, uuid: str, name: str, port_ids: Iterable[str] = ()
    ) -> None:
        super().__init__(ovn, uuid, name)
        self.port_ids = list(port_ids)

    @classmethod
    def _from_fields(cls, ovn: Any, uuid: str, obj: dict[str, Any]) -> "LogicalSwitch":
        return cls(
            ovn,
            uuid,
            deserialize_string(obj, "name"),
            deserialize_uuid_set(obj, "ports"),
        )

    def set_cidr(self, cidr: str) -> None:
        """Record the subnet served by this switch."""
        self.ovn.transact(
            [
                {
                    "op": "update",
                    "table": TYPE_LOGICAL_SWITCH,
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                    "row": {"other_config": ["map", [["subnet", cidr]]]},
                }
            ]
        )

    def del_lsp(self, lsp_id: str) -> None:
        """Detach the named port from this switch."""
        lsp = LogicalSwitchPort.get_by_name(self.ovn, lsp_id)
        self.ovn.transact(
            [
                {
                    "op": "mutate",
                    "table": TYPE_LOGICAL_SWITCH,
                    "mutations": [["ports", "delete", ["set", [["uuid", lsp.uuid]]]]],
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                }
            ]
        )

    def lsp(self) -> "LogicalSwitchPortBuilder":
        """Return a builder for ports on this switch."""
        return LogicalSwitchPortBuilder(self.ovn, self)

    @classmethod
    def find_lsp_owner(cls, ovn: Any, lsp: "LogicalSwitchPort") -> "LogicalSwitch":
        """Return the switch that holds the given port."""
        for switch in cls.list(ovn):
            if lsp.uuid in switch.port_ids:
                return switch
        raise OvnNotFound(cls.ovn_type, f"owner of {lsp.uuid}")


class LogicalSwitchPort(OvnNamedObject):
    """An attachment point on a logical switch."""

    ovn_type = TYPE_LOGICAL_SWITCH_PORT

    def __init__(
        self,
        ovn: Any,
        uuid: str,
        name: str,
        addresses: str = "",
        dynamic_addresses: str = "",
    ) -> None:
        super().__init__(ovn, uuid, name)
        self.addresses = addresses
        self.dynamic_addresses = dynamic_addresses

    @classmethod
    def _from_fields(
        cls, ovn: Any, uuid: str, obj: dict[str, Any]
    ) -> "LogicalSwitchPort":
        return cls(
            ovn,
            uuid,
            deserialize_string(obj, "name"),
            _optional_string(obj, "addresses"),
            _optional_string(obj, "dynamic_addresses"),
        )

    def set_address(self, mac_address: str) -> None:
        """Give the port a MAC address with a dynamically assigned IP."""
        if mac_address in self.addresses:
            return
        switch = self.get_ls()
        try:
            switch.lsp().get_by_mac(mac_address)
        except OvnNotFound:
            pass
        else:
            raise OvnConflict(mac_address)
        self.ovn.transact(
            [
                {
                    "op": "update",
                    "table": TYPE_LOGICAL_SWITCH_PORT,
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                    "row": {"addresses": f"{mac_address} dynamic"},
                }
            ]
        )

    def set_dhcp_options(self, cidr: str) -> None:
        """Point the port at the DHCP option set of the given subnet."""
        dhcp_options = DhcpOptions.get_by_cidr(self.ovn, cidr)
        self.ovn.transact(
            [
                {
                    "op": "update",
                    "table": TYPE_LOGICAL_SWITCH_PORT,
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                    "row": {"dhcpv4_options": ["uuid", dhcp_options.uuid]},
                }
            ]
        )

    def dynamic_ip(self) -> str | None:
        """Return the dynamically assigned IP address, if any."""
        parts = self.dynamic_addresses.split(" ")
        return parts[1] if len(parts) > 1 else None

    @classmethod
    def get_by_ip(cls, ovn: Any, ip: str) -> list["LogicalSwitchPort"]:
        """Return every port whose dynamic IP address is ``ip``."""
        return [port for port in cls.list(ovn) if (port.dynamic_ip() or "") == ip]

    def get_ls(self) -> LogicalSwitch:
        """Return the switch this port belongs to."""
        return LogicalSwitch.find_lsp_owner(self.ovn, self)


@dataclass
class LogicalSwitchPortBuilder:
    """Creates and looks up ports on a given logical switch."""

    ovn: Any
    ls: LogicalSwitch

    def create(
        self, name: str, extra_params: Mapping[str, Any] | None = None
    ) -> LogicalSwitchPort:
        """Create a port on the switch and return it."""
        row = dict(extra_params or {})
        row["name"] = name
        add_lsp = {
            "op": "insert",
            "table": TYPE_LOGICAL_SWITCH_PORT,
            "row": row,
            "uuid-name": "new_lsp",
        }
        add_lsp_to_ls = {
            "op": "mutate",
            "table": TYPE_LOGICAL_SWITCH,
            "where": [["_uuid", "==", ["uuid", self.ls.uuid]]],
            "mutations": [["ports", "insert", ["set", [["named-uuid", "new_lsp"]]]]],
        }
        self.ovn.transact([add_lsp, add_lsp_to_ls])
        return LogicalSwitchPort.get_by_name(self.ovn, name)

    def create_if_missing(
        self, name: str, extra_params: Mapping[str, Any] | None = None
    ) -> LogicalSwitchPort:
        """Return the named port, creating it on the switch if it does not exist."""
        try:
            return LogicalSwitchPort.get_by_name(self.ovn, name)
        except OvnNotFound:
            log.info("ovn: %s %s doesn't exist, creating", LogicalSwitchPort.ovn_type, name)
            return self.create(name, extra_params)

    def get_by_mac(self, mac_address: str) -> LogicalSwitchPort:
        """Return the port of this switch whose addresses include ``mac_address``."""
        port_ids = set(self.ls.port_ids)
        for port in LogicalSwitchPort.list(self.ovn):
            if port.uuid in port_ids and mac_address in port.addresses:
                return port
        raise OvnNotFound(LogicalSwitchPort.ovn_type, mac_address)