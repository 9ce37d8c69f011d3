"""Convert session objects into JSON-friendly dictionaries."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .event_log import LogEntry
from .models import DeviceIdentity, DeviceTelemetry, SessionSnapshot


def telemetry_to_dict(telemetry: DeviceTelemetry) -> Dict[str, str]:
    return {
        "voltage": telemetry.voltage,
        "current": telemetry.current,
        "status": telemetry.status,
        "fault_code": telemetry.fault_code,
    }


def device_to_dict(device: DeviceIdentity | None) -> Dict[str, str] | None:
    if device is None:
        return None
    return {"name": device.name, "address": device.address}


def snapshot_to_dict(snapshot: SessionSnapshot) -> Dict[str, Any]:
    """Serialize a session snapshot for API responses."""
    return {
        "state": snapshot.state.value,
        "connected": snapshot.connected,
        "device": device_to_dict(snapshot.device),
        "telemetry": telemetry_to_dict(snapshot.telemetry),
    }


def log_entries_to_list(entries: Iterable[LogEntry]) -> List[Dict[str, str]]:
    return [entry.to_dict() for entry in entries]
