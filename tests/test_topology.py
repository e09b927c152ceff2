from vmcluster.ovn.router import LogicalRouter
from vmcluster.ovn.switch import LogicalSwitch
from vmcluster.ovn.topology import connect_router_to_ls


class FakeOvn:
    def __init__(self):
        self.tables = {}
        self.transactions = []
        self._counter = 0

    def list_objects(self, object_type):
        return list(self.tables.get(object_type, []))

    def transact(self, operations):
        self.transactions.append(list(operations))
        for op in operations:
            if op.get("op") == "insert":
                self._counter += 1
                row = {"_uuid": ["uuid", f"generated-{self._counter}"], **op["row"]}
                self.tables.setdefault(op["table"], []).append(row)
        return [{} for _ in operations]


def inserts(ovn, table):
    return [
        op
        for transaction in ovn.transactions
        for op in transaction
        if op["op"] == "insert" and op["table"] == table
    ]


def test_connect_creates_ports_on_both_sides():
    ovn = FakeOvn()
    router = LogicalRouter(ovn, "r-uuid", "r1")
    switch = LogicalSwitch(ovn, "s-uuid", "s1")
    connect_router_to_ls(router, switch, "10.0.0.1/24")

    (lrp,) = inserts(ovn, "Logical_Router_Port")
    assert lrp["row"]["name"] == "lr_r1_ls_s1"
    assert lrp["row"]["networks"] == "10.0.0.1/24"

    (lsp,) = inserts(ovn, "Logical_Switch_Port")
    assert lsp["row"] == {
        "type": "router",
        "addresses": "router",
        "options": ["map", [["router-port", "lr_r1_ls_s1"]]],
        "name": "ls_s1_lr_r1",
    }


def test_connect_updates_router_port_networks():
    ovn = FakeOvn()
    router = LogicalRouter(ovn, "r-uuid", "r1")
    switch = LogicalSwitch(ovn, "s-uuid", "s1")
    connect_router_to_ls(router, switch, "10.0.0.1/24")
    updates = [
        op
        for transaction in ovn.transactions
        for op in transaction
        if op["op"] == "update"
    ]
    assert len(updates) == 1
    assert updates[0]["row"]["networks"] == "10.0.0.1/24"
    assert updates[0]["row"]["name"] == "lr_r1_ls_s1"


def test_connect_twice_does_not_duplicate_ports():
    ovn = FakeOvn()
    router = LogicalRouter(ovn, "r-uuid", "r1")
    switch = LogicalSwitch(ovn, "s-uuid", "s1")
    connect_router_to_ls(router, switch, "10.0.0.1/24")
    connect_router_to_ls(router, switch, "10.0.0.2/24")

    assert len(inserts(ovn, "Logical_Router_Port")) == 1
    assert len(inserts(ovn, "Logical_Switch_Port")) == 1
    last = ovn.transactions[-1][0]
    assert last["op"] == "update"
    assert last["row"]["networks"] == "10.0.0.2/24"