"""JSON-RPC client and object wrappers for the OVN northbound database."""

__all__ = [
    "common",
    "deserialization",
    "dhcpoptions",
    "errors",
    "jsonrpc",
    "lowlevel",
    "router",
    "switch",
    "topology",
]