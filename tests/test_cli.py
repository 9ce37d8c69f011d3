"""Tests for the typer command line."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from light_remote import cli
from light_remote.exception import TransportError

runner = CliRunner()


@pytest.fixture()
def links(monkeypatch: pytest.MonkeyPatch, make_transport):
    """Hand the CLI a fake transport and record how it was built."""
    monkeypatch.setenv("LIGHT_REMOTE_POLL_INTERVAL", "60")
    state = {"calls": [], "transport": make_transport()}

    def _fake_build(kind, target, *, baud, name=None):
        state["calls"].append((kind, target, baud))
        return state["transport"]

    monkeypatch.setattr(cli, "build_transport", _fake_build)
    return state


def test_get_data(links) -> None:
    result = runner.invoke(cli.app, ["get-data", "/dev/rfcomm0", "--wait", "0"])
    assert result.exit_code == 0, result.output
    assert "get_data: ok" in result.output
    assert links["transport"].commands == ["GET_DATA\n"]
    assert links["calls"] == [("serial", "/dev/rfcomm0", 9600)]


def test_send_config(links) -> None:
    result = runner.invoke(
        cli.app,
        [
            "send-config",
            "/dev/ttyUSB0",
            "--mode",
            "B",
            "--hv",
            "290",
            "--baud",
            "19200",
        ],
    )
    assert result.exit_code == 0, result.output
    assert links["transport"].commands == ["MODE:B,HV:290,LV:150,OFF:22:00\n"]
    assert links["calls"][0][2] == 19200


def test_send_settings(links) -> None:
    result = runner.invoke(
        cli.app,
        [
            "send-settings",
            "/dev/ttyUSB0",
            "--baud-rate",
            "57600",
            "--parity",
            "Odd",
        ],
    )
    assert result.exit_code == 0, result.output
    assert links["transport"].commands == [
        "SETTINGS:BAUD:57600,DATA:8,STOP:1,PARITY:Odd\n"
    ]


def test_send_settings_rejects_unknown_baud(links) -> None:
    result = runner.invoke(
        cli.app, ["send-settings", "/dev/ttyUSB0", "--baud-rate", "1234"]
    )
    assert result.exit_code == 2
    assert links["calls"] == []


def test_update_firmware_requires_confirmation(links) -> None:
    result = runner.invoke(
        cli.app, ["update-firmware", "/dev/ttyUSB0"], input="n\n"
    )
    assert result.exit_code == 1
    assert links["calls"] == []


def test_update_firmware_confirmed(links) -> None:
    result = runner.invoke(cli.app, ["update-firmware", "/dev/ttyUSB0", "--yes"])
    assert result.exit_code == 0, result.output
    (command,) = links["transport"].commands
    assert command.startswith("UPDATE_FIRMWARE,DATETIME:")


def test_connect_failure_exits_nonzero(links, make_transport) -> None:
    links["transport"] = make_transport(open_error=TransportError("no route"))
    result = runner.invoke(cli.app, ["get-data", "/dev/rfcomm0", "--wait", "0"])
    assert result.exit_code == 1
    assert "ConnectFailed" in result.output


def test_ports(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli,
        "list_serial_ports",
        lambda: [
            {
                "device": "/dev/rfcomm0",
                "description": "Bluetooth serial",
                "vid": None,
                "pid": None,
            }
        ],
    )
    result = runner.invoke(cli.app, ["ports"])
    assert result.exit_code == 0
    assert "/dev/rfcomm0" in result.output


def test_ports_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "list_serial_ports", lambda: [])
    result = runner.invoke(cli.app, ["ports"])
    assert "No serial ports found." in result.output
