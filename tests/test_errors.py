import pytest

from vmcluster.ovn.errors import (
    JsonRpcError,
    OvnConflict,
    OvnDeserializationFailed,
    OvnError,
    OvnNotFound,
    OvnTransactionError,
)


@pytest.mark.parametrize(
    "cls, args, fragment",
    [
        (OvnNotFound, ("Logical_Switch", "ns-net"), "ns-net"),
        (OvnDeserializationFailed, ("bad row",), "bad row"),
        (OvnConflict, ("02:00:00:00:00:02",), "02:00:00:00:00:02"),
        (OvnTransactionError, ({"error": "constraint violation"},), "constraint violation"),
        (JsonRpcError, ("closed",), "closed"),
    ],
)
def test_all_errors_share_base(cls, args, fragment):
    with pytest.raises(OvnError) as info:
        raise cls(*args)
    assert type(info.value) is cls
    assert fragment in str(info.value)


def test_not_found_keeps_kind_and_name():
    exc = OvnNotFound("Logical_Router", "ns-router")
    assert exc.kind == "Logical_Router"
    assert exc.name == "ns-router"
    assert "Logical_Router" in str(exc)
    assert "ns-router" in str(exc)


def test_conflict_keeps_value():
    exc = OvnConflict("02:00:00:00:00:02")
    assert exc.value == "02:00:00:00:00:02"
    assert "02:00:00:00:00:02" in str(exc)


def test_transaction_error_keeps_payload():
    payload = {"error": "referential integrity violation"}
    exc = OvnTransactionError(payload)
    assert exc.error is payload
    assert "referential integrity violation" in str(exc)


def test_deserialization_failed_custom_message():
    exc = OvnDeserializationFailed("bad row")
    assert str(exc) == "bad row"