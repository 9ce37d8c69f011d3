"""Map failed operation records onto HTTP errors."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException

from ..operations_model import OperationRecord

STATUS_BY_ERROR_KIND = {
    "NotConnected": 400,
    "ReconnectDeclined": 409,
    "ConnectFailed": 502,
    "WriteFailed": 502,
    "TransportUnavailable": 503,
}


def record_or_raise(record: OperationRecord) -> Dict[str, Any]:
    """Return the record as JSON or raise the matching HTTPException."""
    if record.ok:
        return record.to_dict()
    status_code = STATUS_BY_ERROR_KIND.get(record.error_kind or "", 500)
    raise HTTPException(status_code=status_code, detail=record.to_dict())
