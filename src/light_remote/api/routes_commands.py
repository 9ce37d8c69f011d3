"""Command routes forwarding UI intents to the session."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from ..schemas import DeviceConfigRequest, SerialSettingsRequest
from .errors import record_or_raise

router = APIRouter(prefix="/api/commands", tags=["commands"])


@router.post("/get-data")
async def get_data(request: Request) -> Dict[str, Any]:
    """Request telemetry once, outside the poll loop."""
    record = await request.app.state.session.request_data()
    return record_or_raise(record)


@router.post("/config")
async def send_config(
    request: Request, payload: DeviceConfigRequest
) -> Dict[str, Any]:
    """Send mode, voltage thresholds and switch-off time."""
    record = await request.app.state.session.send_config(payload.to_config())
    return record_or_raise(record)


@router.post("/settings")
async def send_settings(
    request: Request, payload: SerialSettingsRequest
) -> Dict[str, Any]:
    """Send serial line settings."""
    session = request.app.state.session
    record = await session.send_settings(payload.to_settings())
    return record_or_raise(record)


@router.post("/firmware-update")
async def firmware_update(request: Request) -> Dict[str, Any]:
    """Trigger a firmware update stamped with the current local time."""
    record = await request.app.state.session.update_firmware()
    return record_or_raise(record)
