"""Serial port transport built on pyserial."""
from __future__ import annotations

import logging
from typing import Optional

import serial

from ..errors import ConfigurationError, TransportError
from ..models import ConnectionState
from .base import READ_CHUNK_SIZE, READ_TIMEOUT, Transport

logger = logging.getLogger(__name__)

PARITIES = {
    "none": serial.PARITY_NONE,
    "even": serial.PARITY_EVEN,
    "odd": serial.PARITY_ODD,
    "mark": serial.PARITY_MARK,
    "space": serial.PARITY_SPACE,
}

STOP_BITS = {
    1: serial.STOPBITS_ONE,
    1.5: serial.STOPBITS_ONE_POINT_FIVE,
    2: serial.STOPBITS_TWO,
}


class SerialTransport(Transport):
    """Serial port connection to a device.

    The port object is created closed and opened on ``connect()``.

    Args:
        path: Serial port path (e.g., '/dev/ttyUSB0', 'COM3')
        baud_rate: Baud rate
        data_bits: 5, 6, 7 or 8
        parity: 'none', 'even', 'odd', 'mark' or 'space'
        stop_bits: 1, 1.5 or 2
        timeout: Read timeout in seconds
        chunk_size: Maximum bytes to read per chunk
    """

    OPEN_STATUS = ConnectionState.OPENED

    def __init__(self,
                 path: str,
                 baud_rate: int = 9600,
                 data_bits: int = 8,
                 parity: str = "none",
                 stop_bits: float = 1,
                 timeout: float = READ_TIMEOUT,
                 chunk_size: int = READ_CHUNK_SIZE):
        super().__init__(chunk_size=chunk_size)
        try:
            self._parity = PARITIES[str(parity).lower()]
            self._stop_bits = STOP_BITS[stop_bits]
        except KeyError as e:
            raise ConfigurationError(f"Unsupported serial setting: {e}") from e
        self._path = path
        self._baud_rate = baud_rate
        self._data_bits = data_bits
        self._timeout = timeout
        self._serial: Optional[serial.Serial] = None

    @property
    def path(self) -> str:
        return self._path

    def describe(self) -> str:
        return f"serial://{self._path}@{self._baud_rate}"

    def _open(self) -> None:
        self._serial = serial.Serial(
            port=self._path,
            baudrate=self._baud_rate,
            bytesize=self._data_bits,
            parity=self._parity,
            stopbits=self._stop_bits,
            timeout=self._timeout,
        )
        self._serial.reset_input_buffer()

    def _close_handle(self) -> None:
        port, self._serial = self._serial, None
        if port is not None:
            port.close()

    def _read(self) -> Optional[bytes]:
        port = self._serial
        if port is None:
            return None
        # blocks up to the read timeout for the first byte
        return port.read(port.in_waiting or 1)

    def _write(self, data: bytes) -> None:
        if self._serial is None:
            raise TransportError(f"{self.describe()} is not open")
        self._serial.write(data)
        self._serial.flush()
