"""Session routes (connect, disconnect, snapshot, log, discovery)."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from bleak.exc import BleakError
from fastapi import APIRouter, HTTPException, Query, Request

from ..schemas import ConnectRequest
from ..serializers import log_entries_to_list, snapshot_to_dict
from ..transport import build_transport, discover_ble_devices, list_serial_ports
from .errors import record_or_raise

router = APIRouter(prefix="/api", tags=["session"])


@router.get("/session")
async def get_session(request: Request) -> Dict[str, Any]:
    """Return the current session snapshot."""
    session = request.app.state.session
    return snapshot_to_dict(session.snapshot())


@router.post("/session/connect")
async def connect(request: Request, payload: ConnectRequest) -> Dict[str, Any]:
    """Open the session, replacing an active one only when asked to."""
    session = request.app.state.session
    baud = payload.baud_rate or session.config.serial_baud
    transport = build_transport(
        payload.transport, payload.target, baud=baud, name=payload.name
    )
    record = await session.connect(
        transport, confirm_replace=lambda _device: payload.replace
    )
    result = record_or_raise(record)
    result["session"] = snapshot_to_dict(session.snapshot())
    return result


@router.post("/session/disconnect")
async def disconnect(request: Request) -> Dict[str, Any]:
    """Close the session and reset telemetry."""
    session = request.app.state.session
    record = await session.disconnect()
    return record.to_dict()


@router.get("/session/log")
async def get_log(
    request: Request, limit: int = Query(50, ge=1, le=1000)
) -> list[Dict[str, str]]:
    """Return the newest event log entries first."""
    session = request.app.state.session
    return log_entries_to_list(session.log.recent(limit))


@router.get("/ports")
async def get_ports() -> list[Dict[str, Any]]:
    """List serial ports, including Bluetooth RFCOMM bindings."""
    return await asyncio.to_thread(list_serial_ports)


@router.get("/scan")
async def scan(
    timeout: float = Query(5.0, gt=0, le=30.0)
) -> list[Dict[str, Any]]:
    """Scan for nearby Bluetooth devices."""
    try:
        devices = await discover_ble_devices(timeout=timeout)
    except BleakError as exc:
        raise HTTPException(
            status_code=503, detail=f"Bluetooth unavailable: {exc}"
        ) from exc
    return [{"name": d.name, "address": d.address} for d in devices]
