"""Light remote CLI entrypoint."""

import asyncio
import datetime
from typing import Any, Awaitable, Callable, Coroutine, Optional

import typer
from rich import print
from rich.table import Table
from typing_extensions import Annotated

from .commands import format_device_datetime
from .config import SessionConfig, configure_logging
from .const import (
    BAUD_RATE_CHOICES,
    DATA_BITS_CHOICES,
    STOP_BITS_CHOICES,
    Mode,
    Parity,
    TransportKind,
)
from .event_log import LogEntry
from .models import DeviceConfig, DeviceTelemetry, SerialSettings, SessionSnapshot
from .operations_model import OperationRecord
from .session import SessionManager
from .transport import build_transport, discover_ble_devices, list_serial_ports

app = typer.Typer(help="Remote control for a Bluetooth/serial light controller.")

SessionAction = Callable[[SessionManager], Awaitable[OperationRecord]]

TargetArg = Annotated[
    str, typer.Argument(help="Serial port path or Bluetooth address")
]
TransportOpt = Annotated[
    TransportKind, typer.Option("--transport", "-t", help="Link type")
]
BaudOpt = Annotated[
    Optional[int],
    typer.Option(help="Baud rate used to open a serial port"),
]


def _choice(allowed: tuple[str, ...]) -> Callable[[str], str]:
    """Build a typer callback restricting a text option to ``allowed``."""

    def _validate(value: str) -> str:
        if value not in allowed:
            raise typer.BadParameter(
                f"Invalid value '{value}'. Use one of: {', '.join(allowed)}"
            )
        return value

    return _validate


def _render_telemetry(telemetry: DeviceTelemetry) -> Table:
    """Return a one-row table of the current readings."""
    table = Table("Voltage", "Current", "Status", "Fault")
    status_style = "green" if telemetry.is_on else "red"
    table.add_row(
        f"{telemetry.voltage} V",
        f"{telemetry.current} A",
        f"[{status_style}]{telemetry.status}[/{status_style}]",
        telemetry.fault_code,
    )
    return table


def _render_log(entries: list[LogEntry], limit: int = 15) -> None:
    """Print the newest event log lines."""
    if not entries:
        return
    table = Table("Time", "Event", box=None, pad_edge=False)
    for entry in entries[:limit]:
        table.add_row(entry.timestamp, entry.message)
    print(table)


def _report(record: OperationRecord) -> bool:
    """Print an operation outcome; return True on success."""
    if record.ok:
        print(f"[green]{record.action}: ok[/green]")
        return True
    print(f"[red]{record.action} failed ({record.error_kind}): {record.error}[/red]")
    return False


async def _with_session(
    transport: TransportKind,
    target: str,
    baud: Optional[int],
    action: SessionAction,
    *,
    settle: float = 0.0,
) -> bool:
    """Connect, run ``action``, optionally wait for replies, then disconnect."""
    config = SessionConfig.from_env()
    session = SessionManager(config)
    link = build_transport(
        transport, target, baud=baud or config.serial_baud
    )
    connected = await session.connect(link)
    if not _report(connected):
        _render_log(session.log.entries())
        return False
    try:
        ok = _report(await action(session))
        if ok and settle > 0:
            await asyncio.sleep(settle)
            print(_render_telemetry(session.telemetry))
        return ok
    finally:
        await session.shutdown()
        _render_log(session.log.entries())


def _run(coro: Coroutine[Any, Any, bool]) -> None:
    if not asyncio.run(coro):
        raise typer.Exit(code=1)


@app.callback()
def main(
    log_level: Annotated[
        str, typer.Option(help="Python logging level")
    ] = "WARNING",
) -> None:
    """Configure logging for every subcommand."""
    configure_logging(log_level)


@app.command()
def ports() -> None:
    """List serial ports, including paired Bluetooth RFCOMM ports."""
    found = list_serial_ports()
    if not found:
        print("No serial ports found.")
        return
    table = Table("Port", "Description", "USB ID")
    for info in found:
        usb_id = (
            f"{info['vid']}:{info['pid']}" if info["vid"] and info["pid"] else ""
        )
        table.add_row(info["device"], info["description"] or "", usb_id)
    print(table)


@app.command()
def scan(
    timeout: Annotated[float, typer.Option(help="Scan duration in seconds")] = 5.0,
) -> None:
    """Scan for nearby Bluetooth devices."""
    devices = asyncio.run(discover_ble_devices(timeout=timeout))
    if not devices:
        print("No devices found")
        return
    table = Table("Index", "Name", "Address")
    for idx, device in enumerate(devices):
        table.add_row(str(idx), device.name or "Unknown", device.address)
    print(table)


@app.command()
def monitor(
    target: TargetArg,
    transport: TransportOpt = TransportKind.SERIAL,
    baud: BaudOpt = None,
    duration: Annotated[
        Optional[float],
        typer.Option(help="Stop after this many seconds (default: Ctrl-C)"),
    ] = None,
) -> None:
    """Connect and print telemetry as the poll loop refreshes it."""

    async def _monitor(session: SessionManager) -> OperationRecord:
        last: list[DeviceTelemetry] = []

        def _on_change(snapshot: SessionSnapshot) -> None:
            if snapshot.connected and (not last or last[-1] != snapshot.telemetry):
                last.append(snapshot.telemetry)
                print(_render_telemetry(snapshot.telemetry))

        unsubscribe = session.subscribe(_on_change)
        record = OperationRecord(action="monitor")
        record.mark_started()
        try:
            started = asyncio.get_running_loop().time()
            while session.is_connected:
                await asyncio.sleep(0.2)
                if duration is not None:
                    if asyncio.get_running_loop().time() - started >= duration:
                        break
        finally:
            unsubscribe()
        if session.is_connected:
            record.mark_success({"updates": len(last)})
        else:
            record.mark_failed("Connection lost")
        return record

    try:
        _run(_with_session(transport, target, baud, _monitor))
    except KeyboardInterrupt:
        print("Stopped.")


@app.command("get-data")
def get_data(
    target: TargetArg,
    transport: TransportOpt = TransportKind.SERIAL,
    baud: BaudOpt = None,
    wait: Annotated[
        float, typer.Option(help="Seconds to wait for the reply")
    ] = 2.0,
) -> None:
    """Request telemetry once and print it."""
    _run(
        _with_session(
            transport, target, baud, lambda s: s.request_data(), settle=wait
        )
    )


@app.command("send-config")
def send_config(
    target: TargetArg,
    mode: Annotated[Mode, typer.Option(help="Operating mode")] = Mode.A,
    high_voltage: Annotated[str, typer.Option("--hv")] = "285",
    low_voltage: Annotated[str, typer.Option("--lv")] = "150",
    off_hour: Annotated[str, typer.Option(help="Switch-off hour")] = "22",
    off_minute: Annotated[str, typer.Option(help="Switch-off minute")] = "00",
    transport: TransportOpt = TransportKind.SERIAL,
    baud: BaudOpt = None,
) -> None:
    """Send mode, voltage thresholds and switch-off time."""
    cfg = DeviceConfig(
        mode=mode,
        high_voltage=high_voltage,
        low_voltage=low_voltage,
        off_hour=off_hour,
        off_minute=off_minute,
    )
    _run(_with_session(transport, target, baud, lambda s: s.send_config(cfg)))


@app.command("send-settings")
def send_settings(
    target: TargetArg,
    baud_rate: Annotated[
        str, typer.Option(callback=_choice(BAUD_RATE_CHOICES))
    ] = "9600",
    data_bits: Annotated[
        str, typer.Option(callback=_choice(DATA_BITS_CHOICES))
    ] = "8",
    stop_bits: Annotated[
        str, typer.Option(callback=_choice(STOP_BITS_CHOICES))
    ] = "1",
    parity: Annotated[Parity, typer.Option()] = Parity.NONE,
    transport: TransportOpt = TransportKind.SERIAL,
    baud: BaudOpt = None,
) -> None:
    """Send serial line settings for the controller to apply."""
    settings = SerialSettings(
        baud_rate=baud_rate,
        data_bits=data_bits,
        stop_bits=stop_bits,
        parity=parity,
    )
    _run(
        _with_session(
            transport, target, baud, lambda s: s.send_settings(settings)
        )
    )


@app.command("update-firmware")
def update_firmware(
    target: TargetArg,
    transport: TransportOpt = TransportKind.SERIAL,
    baud: BaudOpt = None,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation")
    ] = False,
) -> None:
    """Trigger a firmware update stamped with the current date/time."""
    now = datetime.datetime.now()
    if not yes:
        typer.confirm(
            f"Send update with current date/time?\n{format_device_datetime(now)}",
            abort=True,
        )
    _run(
        _with_session(
            transport, target, baud, lambda s: s.update_firmware(now)
        )
    )


if __name__ == "__main__":  # pragma: no cover
    app()
