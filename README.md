# vmcluster

Helpers for the virtual networking of a VM cluster:

- a small JSON-RPC client for the OVN northbound database (OVSDB),
- wrappers for logical switches, switch ports, routers, router ports,
  static routes and DHCP option sets,
- helpers that give virtual machine NICs stable MAC addresses and OVN
  port identifiers.

It needs nothing beyond the Python standard library (3.10 or later).

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Connecting

`Ovn.connect(host, port=6641)` in `vmcluster.ovn.lowlevel` opens a TCP
connection to the northbound database. An `Ovn` object can be used as a
context manager and is closed with `close()`. Its calls are serialised
with a lock, so one object can be shared between threads.

Lower-level calls:

- `transact(operations)` sends the operations as one `transact` request
  to the `OVN_Northbound` database and returns the list of results. An
  error in the response, or in any single result, raises
  `OvnTransactionError`.
- `list_objects(object_type)` selects every row of a table.
- `insert(object_type, row)` and `delete_by_uuid(object_type, uuid)`.

The transport itself is `vmcluster.ovn.jsonrpc.JsonRpcConnection`, which
sends requests with increasing ids and returns the `Response` carrying the
matching id, skipping other messages.

## Objects

Every object type offers `list(ovn)` and `from_row(ovn, row)`. Named types
(`LogicalSwitch`, `LogicalSwitchPort`, `LogicalRouter`,
`LogicalRouterPort`) also offer `get_by_name`, `create`,
`create_if_missing` and `delete`.

```python
from vmcluster.ovn.lowlevel import Ovn
from vmcluster.ovn.router import LogicalRouter, Route
from vmcluster.ovn.switch import LogicalSwitch
from vmcluster.ovn.topology import connect_router_to_ls

with Ovn.connect("192.0.2.10", 6641) as ovn:
    switch = LogicalSwitch.create_if_missing(ovn, "default-frontend")
    switch.set_cidr("192.0.2.0/24")

    router = LogicalRouter.create_if_missing(ovn, "default-edge")
    connect_router_to_ls(router, switch, "192.0.2.1/24")
    router.set_routes([Route(cidr="198.51.100.0/24", nexthop="192.0.2.254")])

    port = switch.lsp().create_if_missing("vm-port-1", None)
    port.set_address("02:00:00:00:00:aa")
    print(port.dynamic_ip())
```

### Switches and ports (`vmcluster.ovn.switch`)

- `LogicalSwitch.set_cidr(cidr)` records the subnet in `other_config`.
- `LogicalSwitch.lsp()` returns a `LogicalSwitchPortBuilder` with
  `create`, `create_if_missing` and `get_by_mac`.
- `LogicalSwitch.del_lsp(name)` detaches a port;
  `LogicalSwitch.find_lsp_owner(ovn, port)` finds the switch holding it.
- `LogicalSwitchPort.set_address(mac)` sets `"<mac> dynamic"`; it does
  nothing if the port already has the address, and raises `OvnConflict`
  if another port on the same switch uses it.
- `LogicalSwitchPort.dynamic_ip()`, `get_by_ip(ovn, ip)`, `get_ls()` and
  `set_dhcp_options(cidr)`.

### Routers (`vmcluster.ovn.router`)

- `LogicalRouter.get_routes()` returns its `StaticRoute` objects.
- `LogicalRouter.set_routes(routes)` takes `Route` values and, in one
  transaction, adds the missing ones and removes those no longer listed.
- `LogicalRouter.lrp()` returns a `LogicalRouterPortBuilder`;
  `LogicalRouterPort.update(networks)` changes a port's networks.
- `vmcluster.ovn.topology.connect_router_to_ls(router, switch, address)`
  creates (if missing) a router port named `lr_<router>_ls_<switch>` and a
  switch port of type `router` named `ls_<switch>_lr_<router>`.

### DHCP (`vmcluster.ovn.dhcpoptions`)

`DhcpOptions.create(ovn, cidr)` and `DhcpOptions.get_by_cidr(ovn, cidr)`
manage an option set. `set_options(settings)` takes a `DhcpSettings`
(`cidr`, and optionally `lease_time`, `dns_server`, `domain_name`,
`router`) and writes `server_id` (the first host of the subnet),
`server_mac` and the given settings; `domain_name` is written quoted.

## Errors

All errors derive from `OvnError` in `vmcluster.ovn.errors`:
`OvnNotFound`, `OvnDeserializationFailed`, `OvnConflict`,
`OvnTransactionError` and `JsonRpcError`.

## VM NICs (`vmcluster.nics`)

These work on `NetworkAttachment` values (`name`, `bridge`,
`mac_address`, `ovn_id`, `queues`):

- `generate_mac_address(vm_name, nic, index)` derives a stable MAC in the
  `52:54:00` range from a SHA-256 of the VM name, the NIC's network name
  (or bridge) and its index; the octets are hex without zero padding. A
  NIC with neither name nor bridge raises `ValueError`.
- `find_matching_network(networks, network)` finds the attachment with
  the same network name, or else the same bridge.
- `merge_nic_status(vm_name, spec_networks, status_networks)` returns
  status entries for the spec's NICs, keeping recorded MAC addresses and
  port ids, taking those the spec sets, and generating the rest (port ids
  only for NICs on a named network).
- `new_uuid()` returns a fresh lower-case hyphenated UUID.

## What this package does not do

It is a library only: there is no command-line tool and no long-running
service. It does not find the northbound database by itself — you pass
the host and port — and it does not watch or store virtual machine or
network definitions; `merge_nic_status` returns the new status for the
caller to save.