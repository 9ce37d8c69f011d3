"""Tests for the command line encoders."""

import datetime

from light_remote.commands import (
    encode_config,
    encode_firmware_update,
    encode_poll,
    encode_settings,
    format_device_datetime,
)
from light_remote.const import Mode, Parity
from light_remote.models import DeviceConfig, SerialSettings


def test_poll_command():
    assert encode_poll() == "GET_DATA\n"


def test_config_command_uses_enum_value():
    cfg = DeviceConfig(mode=Mode.B)
    assert encode_config(cfg) == "MODE:B,HV:285,LV:150,OFF:22:00\n"


def test_config_fields_are_sent_verbatim():
    cfg = DeviceConfig(
        mode="C", high_voltage="300", low_voltage="90", off_hour="7", off_minute="5"
    )
    assert encode_config(cfg) == "MODE:C,HV:300,LV:90,OFF:7:5\n"


def test_settings_command():
    settings = SerialSettings(
        baud_rate="19200", data_bits="7", stop_bits="2", parity=Parity.ODD
    )
    assert (
        encode_settings(settings)
        == "SETTINGS:BAUD:19200,DATA:7,STOP:2,PARITY:Odd\n"
    )


def test_settings_defaults():
    assert (
        encode_settings(SerialSettings())
        == "SETTINGS:BAUD:9600,DATA:8,STOP:1,PARITY:None\n"
    )


def test_device_datetime_is_zero_padded():
    ts = datetime.datetime(2023, 3, 4, 5, 6, 7)
    assert format_device_datetime(ts) == "2023-03-04 05:06:07"


def test_firmware_update_command():
    ts = datetime.datetime(2024, 12, 31, 23, 59, 1)
    assert (
        encode_firmware_update(ts)
        == "UPDATE_FIRMWARE,DATETIME:2024-12-31 23:59:01\n"
    )


def test_firmware_update_defaults_to_now():
    line = encode_firmware_update()
    assert line.startswith("UPDATE_FIRMWARE,DATETIME:")
    assert line.endswith("\n")
    stamp = line[len("UPDATE_FIRMWARE,DATETIME:") : -1]
    datetime.datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")
