"""rawdev - talk to devices over TCP, serial ports or streams with one API.

Commands go in as strings (text, hex or '#' directives) and are sent one at
a time with per-command pacing; responses come back as framed, decoded
events.
"""

from .codec import Codec
from .drainer import CommandQueue, DrainState
from .errors import ConfigurationError, RawDeviceError, TransportError
from .events import EventChannel
from .models import (
    Address,
    CommandObject,
    ConnectionData,
    ConnectionState,
    ConnectionStatus,
    EventType,
    LoggerOptions,
    Mode,
    Options,
    ResponseObject,
    SplitterOptions,
)
from .session import Session
from .transport import Transport

__all__ = [
    "Session",
    "Address",
    "Options",
    "SplitterOptions",
    "LoggerOptions",
    "Mode",
    "EventType",
    "ConnectionState",
    "ConnectionStatus",
    "ConnectionData",
    "CommandObject",
    "ResponseObject",
    "Codec",
    "CommandQueue",
    "DrainState",
    "EventChannel",
    "Transport",
    "RawDeviceError",
    "ConfigurationError",
    "TransportError",
]
