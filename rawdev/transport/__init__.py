"""Transport layer: raw byte streams over TCP, serial ports or caller streams."""

from .base import Transport, TransportState
from .serial import SerialTransport
from .stream import StreamTransport
from .tcp import TcpTransport

__all__ = [
    "Transport",
    "TransportState",
    "TcpTransport",
    "SerialTransport",
    "StreamTransport",
]
