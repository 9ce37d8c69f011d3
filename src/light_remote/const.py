"""Protocol constants and UI choice lists for the light controller."""

from enum import Enum

# Nordic UART service characteristics used by BLE serial modules.
UART_RX_CHAR_UUID = "6E400002-B5A3-F393-E0A9-E50E24DCCA9E"
UART_TX_CHAR_UUID = "6E400003-B5A3-F393-E0A9-E50E24DCCA9E"

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_LOG_CAPACITY = 50
DEFAULT_SERIAL_BAUD = 9600

DEFAULT_VOLTAGE = "0"
DEFAULT_CURRENT = "0"
DEFAULT_STATUS = "OFF"
DEFAULT_FAULT_CODE = "NONE"

BAUD_RATE_CHOICES = ("9600", "19200", "38400", "57600", "115200")
DATA_BITS_CHOICES = ("7", "8")
STOP_BITS_CHOICES = ("1", "2")


class Mode(str, Enum):
    """Controller operating mode."""

    A = "A"
    B = "B"
    C = "C"


class Parity(str, Enum):
    """Parity names as the controller spells them on the wire."""

    NONE = "None"
    EVEN = "Even"
    ODD = "Odd"


class TransportKind(str, Enum):
    """Transport adapters the session can be wired to."""

    SERIAL = "serial"
    BLE = "ble"
