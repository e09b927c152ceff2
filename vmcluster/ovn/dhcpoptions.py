"""DHCP option sets stored in the northbound database."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Union

from vmcluster.ovn.common import OvnObject
from vmcluster.ovn.deserialization import deserialize_string
from vmcluster.ovn.errors import OvnNotFound
from vmcluster.ovn.lowlevel import TYPE_DHCP_OPTIONS

SERVER_MAC = "c0:ff:ee:00:00:01"

OptionValue = Union[str, int]


@dataclass(frozen=True)
class DhcpSettings:
    """The DHCP settings requested for a network."""

    cidr: str
    lease_time: OptionValue | None = None
    dns_server: OptionValue | None = None
    domain_name: OptionValue | None = None
    router: OptionValue | None = None

    def extra_options(self) -> list[list[str]]:
        """Return the configured optional settings as ``[name, value]`` pairs."""
        options = []
        for name in ("lease_time", "dns_server", "domain_name", "router"):
            value = getattr(self, name)
            if value is None:
                continue
            text = f'"{value}"' if name == "domain_name" else str(value)
            options.append([name, text])
        return options


def _first_host(cidr: str) -> str:
    network = ipaddress.ip_network(cidr, strict=False)
    if network.version == 6 or network.num_addresses <= 2:
        return str(network.network_address)
    return str(network.network_address + 1)


class DhcpOptions(OvnObject):
    """A DHCP option set, identified by the subnet it serves."""

    ovn_type = TYPE_DHCP_OPTIONS

    def __init__(self, ovn: Any, uuid: str, cidr: str) -> None:
        super().__init__(ovn, uuid)
        self.cidr = cidr

    def __repr__(self) -> str:
        return f"DhcpOptions(uuid={self.uuid!r}, cidr={self.cidr!r})"

    @classmethod
    def _from_fields(cls, ovn: Any, uuid: str, obj: dict[str, Any]) -> "DhcpOptions":
        return cls(ovn, uuid, deserialize_string(obj, "cidr"))

    @classmethod
    def create(cls, ovn: Any, cidr: str) -> "DhcpOptions":
        """Insert an option set for the subnet and return it."""
        ovn.transact(
            [
                {
                    "op": "insert",
                    "table": TYPE_DHCP_OPTIONS,
                    "row": {"cidr": cidr},
                    "uuid-name": "new_dhcp_options",
                }
            ]
        )
        return cls.get_by_cidr(ovn, cidr)

    @classmethod
    def get_by_cidr(cls, ovn: Any, cidr: str) -> "DhcpOptions":
        """Return the option set for the subnet or raise OvnNotFound."""
        for options in cls.list(ovn):
            if options.cidr == cidr:
                return options
        raise OvnNotFound(cls.ovn_type, cidr)

    def set_options(self, settings: DhcpSettings) -> None:
        """Write the server identity and the requested settings to the option set."""
        options = [
            ["server_id", _first_host(self.cidr)],
            ["server_mac", SERVER_MAC],
            *settings.extra_options(),
        ]
        self.ovn.transact(
            [
                {
                    "op": "update",
                    "table": TYPE_DHCP_OPTIONS,
                    "where": [["_uuid", "==", ["uuid", self.uuid]]],
                    "row": {"options": ["map", options]},
                }
            ]
        )