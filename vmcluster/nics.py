"""MAC addresses and port IDs for virtual machine network interfaces."""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

MAC_PREFIX = "52:54:00"


@dataclass
class NetworkAttachment:
    """A VM network interface attached to an OVN network or a host bridge."""

    name: str | None = None
    bridge: str | None = None
    mac_address: str | None = None
    ovn_id: str | None = None
    queues: int | None = None


def new_uuid() -> str:
    """Return a fresh random UUID in lower-case hyphenated form."""
    return str(uuid.uuid4())


def generate_mac_address(vm_name: str, nic: NetworkAttachment, index: int) -> str:
    """Derive a stable MAC address from the VM name, the NIC target and its index."""
    target = nic.name if nic.name is not None else nic.bridge
    if target is None:
        raise ValueError("bridge or network name should be set")
    digest = hashlib.sha256()
    digest.update(vm_name.encode("utf-8"))
    digest.update(target.encode("utf-8"))
    digest.update(bytes([index & 0xFF]))
    hash_bytes = digest.digest()
    return f"{MAC_PREFIX}:{hash_bytes[29]:x}:{hash_bytes[30]:x}:{hash_bytes[31]:x}"


def find_matching_network(
    networks: Iterable[NetworkAttachment], network: NetworkAttachment
) -> NetworkAttachment | None:
    """Return the attachment with the same target (network name or bridge)."""
    if network.name is not None:
        return next((c for c in networks if c.name == network.name), None)
    if network.bridge is not None:
        return next((c for c in networks if c.bridge == network.bridge), None)
    raise ValueError("a network with neither name nor bridge should not exist")


def merge_nic_status(
    vm_name: str,
    spec_networks: Sequence[NetworkAttachment],
    status_networks: Sequence[NetworkAttachment],
) -> list[NetworkAttachment]:
    """Return the status entries for the spec's NICs, filling in MACs and port IDs."""
    merged = []
    for index, spec in enumerate(spec_networks):
        existing = find_matching_network(status_networks, spec)
        status = (
            replace(existing)
            if existing is not None
            else NetworkAttachment(name=spec.name, bridge=spec.bridge)
        )
        status.queues = spec.queues

        if spec.mac_address is not None:
            status.mac_address = spec.mac_address
        elif status.mac_address is None:
            status.mac_address = generate_mac_address(vm_name, spec, index)

        if spec.name is not None:
            if spec.ovn_id is not None:
                status.ovn_id = spec.ovn_id
            elif status.ovn_id is None:
                status.ovn_id = new_uuid()

        merged.append(status)
    return merged