import json
import socket

import pytest

from vmcluster.ovn.errors import JsonRpcError, OvnTransactionError
from vmcluster.ovn.jsonrpc import Response
from vmcluster.ovn.lowlevel import (
    DATABASE,
    TYPE_LOGICAL_SWITCH,
    TYPE_LOGICAL_SWITCH_PORT,
    Ovn,
)


class FakeConnection:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, params):
        self.calls.append((method, params))
        return self.responses.pop(0)

    def close(self):
        self.closed = True


def ok(result):
    return Response(0, result, None)


def test_transact_prefixes_database():
    conn = FakeConnection([ok([{}])])
    op = {"op": "select", "table": "x", "where": []}
    assert Ovn(conn).transact([op]) == [{}]
    assert conn.calls == [("transact", [DATABASE, op])]


def test_transact_rpc_error():
    conn = FakeConnection([Response(0, None, "unknown database")])
    with pytest.raises(OvnTransactionError):
        Ovn(conn).transact([])


def test_transact_operation_error():
    conn = FakeConnection([ok([{"error": "constraint violation", "details": "x"}])])
    with pytest.raises(OvnTransactionError) as info:
        Ovn(conn).transact([{}])
    assert info.value.error["error"] == "constraint violation"


@pytest.mark.parametrize("result", [{"rows": []}, ["not an object"], None])
def test_transact_bad_result_shape(result):
    with pytest.raises(OvnTransactionError):
        Ovn(FakeConnection([ok(result)])).transact([{}])


def test_transact_null_error_fields_accepted():
    results = [{"uuid": ["uuid", "u1"], "error": None}]
    assert Ovn(FakeConnection([ok(results)])).transact([{}]) == results


def test_list_objects_columns_and_rows():
    rows = [{"_uuid": ["uuid", "u1"], "name": "sw", "ports": ["set", []]}]
    conn = FakeConnection([ok([{"rows": rows}])])
    assert Ovn(conn).list_objects(TYPE_LOGICAL_SWITCH) == rows
    select = conn.calls[0][1][1]
    assert select["op"] == "select"
    assert select["table"] == TYPE_LOGICAL_SWITCH
    assert select["columns"] == ["_uuid", "name", "ports"]


def test_list_objects_port_and_default_columns():
    conn = FakeConnection([ok([{"rows": []}]), ok([{"rows": []}])])
    ovn = Ovn(conn)
    ovn.list_objects(TYPE_LOGICAL_SWITCH_PORT)
    ovn.list_objects("Logical_Router_Port")
    assert conn.calls[0][1][1]["columns"] == [
        "_uuid",
        "name",
        "addresses",
        "dynamic_addresses",
    ]
    assert conn.calls[1][1][1]["columns"] == ["_uuid", "name"]


def test_list_objects_without_rows():
    with pytest.raises(OvnTransactionError):
        Ovn(FakeConnection([ok([{}])])).list_objects(TYPE_LOGICAL_SWITCH)
    with pytest.raises(OvnTransactionError):
        Ovn(FakeConnection([ok([])])).list_objects(TYPE_LOGICAL_SWITCH)


def test_insert_operation():
    conn = FakeConnection([ok([{"uuid": ["uuid", "u1"]}])])
    Ovn(conn).insert(TYPE_LOGICAL_SWITCH, {"name": "sw"})
    assert conn.calls[0][1][1] == {
        "op": "insert",
        "table": TYPE_LOGICAL_SWITCH,
        "row": {"name": "sw"},
    }


def test_delete_operation():
    conn = FakeConnection([ok([{"count": 1}])])
    Ovn(conn).delete_by_uuid(TYPE_LOGICAL_SWITCH, "u1")
    assert conn.calls[0][1][1] == {
        "op": "delete",
        "table": TYPE_LOGICAL_SWITCH,
        "where": [["_uuid", "==", ["uuid", "u1"]]],
    }


def test_close_via_context_manager():
    conn = FakeConnection([])
    with Ovn(conn):
        pass
    assert conn.closed


def test_connect_and_transact_over_tcp():
    server = socket.socket()
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    port = server.getsockname()[1]
    try:
        with Ovn.connect("127.0.0.1", port) as ovn:
            peer, _ = server.accept()
            with peer:
                reply = {"id": 0, "result": [{"rows": []}], "error": None}
                peer.sendall(json.dumps(reply).encode())
                assert ovn.list_objects(TYPE_LOGICAL_SWITCH) == []
                sent = json.loads(peer.recv(65536))
                assert sent["method"] == "transact"
                assert sent["params"][0] == DATABASE
    finally:
        server.close()


def test_connect_failure():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(JsonRpcError):
        Ovn.connect("127.0.0.1", port)