"""Wiring logical routers and switches together."""

from __future__ import annotations

from vmcluster.ovn.router import LogicalRouter
from vmcluster.ovn.switch import LogicalSwitch


def connect_router_to_ls(
    router: LogicalRouter, switch: LogicalSwitch, address: str
) -> None:
    """Attach the router to the switch, giving the router port ``address``."""
    lrp_name = f"lr_{router.name}_ls_{switch.name}"
    router.lrp().create_if_missing(lrp_name, address).update(address)

    lsp_name = f"ls_{switch.name}_lr_{router.name}"
    params = {
        "type": "router",
        "addresses": "router",
        "options": ["map", [["router-port", lrp_name]]],
    }
    switch.lsp().create_if_missing(lsp_name, params)