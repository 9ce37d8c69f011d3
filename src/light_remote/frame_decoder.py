"""Decode inbound telemetry chunks from the controller.

The controller answers ``GET_DATA`` with either a JSON snapshot such as
``{"voltage": 231, "current": 1.2, "status": "ON", "faultCode": "NONE"}``
or a compact tagged line such as ``V:231,C:1.2,S:ON,F:NONE``. Serial noise
is expected, so decoding never raises; unusable input decodes to an empty
update.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

from .models import PartialTelemetry


class FrameFormat(str, Enum):
    """Wire format a chunk was decoded from."""

    STRUCTURED = "structured"
    POSITIONAL = "positional"


# JSON key -> telemetry field
STRUCTURED_KEYS = {
    "voltage": "voltage",
    "current": "current",
    "status": "status",
    "faultCode": "fault_code",
}

# token prefix -> telemetry field
POSITIONAL_PREFIXES = {
    "V:": "voltage",
    "C:": "current",
    "S:": "status",
    "F:": "fault_code",
}


def _to_text(value: Any) -> str:
    """Render a JSON value the way the firmware prints it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def try_decode_structured(raw: str) -> Optional[PartialTelemetry]:
    """Decode a JSON object chunk.

    Returns None when ``raw`` is not a JSON object. A JSON object with no
    known keys still counts as structured and yields an empty update.

    A ``null`` value is treated as absent and leaves that field unchanged;
    the object is still decoded as structured rather than being re-read as
    tagged tokens.
    """
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    values: dict[str, str] = {}
    for key, field_name in STRUCTURED_KEYS.items():
        value = payload.get(key)
        if value is None:
            continue
        values[field_name] = _to_text(value)
    return PartialTelemetry(**values)


def try_decode_positional(raw: str) -> Optional[PartialTelemetry]:
    """Decode ``V:``/``C:``/``S:``/``F:`` tagged tokens.

    Unknown tokens and tokens with an empty value are skipped. Returns None
    when no token was recognised.
    """
    values: dict[str, str] = {}
    for token in raw.split(","):
        field_name = POSITIONAL_PREFIXES.get(token[:2])
        if field_name is None:
            continue
        value = token[2:]
        if not value:
            continue
        values[field_name] = value
    if not values:
        return None
    return PartialTelemetry(**values)


def decode_frame(raw: str) -> tuple[PartialTelemetry, FrameFormat | None]:
    """Decode one inbound chunk and report which format matched.

    The structured format wins whenever the chunk is a JSON object, even
    if it contains commas or none of the known keys.
    """
    text = raw.strip()
    if not text:
        return PartialTelemetry(), None
    structured = try_decode_structured(text)
    if structured is not None:
        return structured, FrameFormat.STRUCTURED
    positional = try_decode_positional(text)
    if positional is not None:
        return positional, FrameFormat.POSITIONAL
    return PartialTelemetry(), None


def decode(raw: str) -> PartialTelemetry:
    """Decode one inbound chunk, structured format first."""
    update, _ = decode_frame(raw)
    return update
