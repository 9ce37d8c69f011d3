"""Tests for operation records."""

from light_remote.exception import NotConnected
from light_remote.operations_model import OperationRecord


def test_lifecycle_success():
    record = OperationRecord(action="config", command="MODE:A\n")
    assert record.status == "pending"
    assert not record.is_complete()

    record.mark_started()
    assert record.status == "running"
    assert record.started_at is not None

    record.mark_success({"detail": "ok"})
    assert record.ok
    assert record.is_complete()
    assert record.completed_at >= record.started_at


def test_failure_keeps_error_kind():
    record = OperationRecord(action="get_data")
    record.mark_failed(NotConnected("Device not connected"))
    data = record.to_dict()
    assert data["status"] == "failed"
    assert data["error"] == "Device not connected"
    assert data["error_kind"] == "NotConnected"
    assert not record.ok


def test_declined_with_plain_message():
    record = OperationRecord(action="connect")
    record.mark_declined("kept")
    assert record.status == "declined"
    assert record.error == "kept"
    assert record.error_kind is None
    assert record.is_complete()


def test_ids_are_unique():
    assert OperationRecord().id != OperationRecord().id
