"""Immutable data models for device addresses, options, commands and events.

All models are frozen dataclasses. Address and Options hold the defaults a
session starts from; the remaining classes are the payloads published on the
session event channel.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_NAME = "RAWdevice"
DEFAULT_TCP_PORT = 23
DEFAULT_BAUD_RATE = 9600
DEFAULT_ENCODING = "ascii"
DEFAULT_DURATION_MS = 1500
DEFAULT_SPLITTER_TIMEOUT_MS = 1100

# camelCase keys accepted from plain configuration mappings
_ALIASES = {
    "baudRate": "baud_rate",
    "dataBits": "data_bits",
    "stopBits": "stop_bits",
    "includeDelimiter": "include_delimiter",
}


class Mode(str, Enum):
    """Transport mode of a device address."""
    TCP = "tcp"
    SERIAL = "serial"
    STREAM = "stream"


class EventType(str, Enum):
    """Notification kinds published by a session."""
    CONNECTION_STATUS = "connectionStatus"
    CONNECTION_DATA = "connectionData"
    RESPONSE_FROM_DEVICE = "responseFromDevice"
    COMMAND_FOR_DEVICE = "commandForDevice"


class ConnectionState(str, Enum):
    """Values of ConnectionStatus.status."""
    CONNECTED = "connected"
    OPENED = "opened"
    CLOSED = "closed"
    ERROR = "error"


def _known_kwargs(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a configuration mapping onto the dataclass fields of ``cls``."""
    names = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        key = _ALIASES.get(key, key)
        if key in names:
            kwargs[key] = value
        else:
            logger.debug(f"Ignoring unknown {cls.__name__} key: {key}")
    return kwargs


@dataclass(frozen=True)
class Address:
    """Where a device lives.

    Exactly one of host, path or stream selects the mode (checked in that
    order). When none is given, ``mode`` keeps its configured default and the
    session is created without a transport.

    Attributes:
        name: Device identifier used in every event
        mode: Fallback mode when no host/path/stream is set
        host: TCP host name or IP address
        port: TCP port
        path: Serial port path (e.g. '/dev/ttyUSB0')
        baud_rate: Serial baud rate
        data_bits: Serial data bits (5-8)
        parity: Serial parity ('none', 'even', 'odd', 'mark', 'space')
        stop_bits: Serial stop bits (1, 1.5, 2)
        stream: Binary file-like object that is already open

    Raises:
        ConfigurationError: if mode is not 'tcp', 'serial' or 'stream'
    """
    name: str = DEFAULT_DEVICE_NAME
    mode: Mode = Mode.TCP
    host: Optional[str] = None
    port: int = DEFAULT_TCP_PORT
    path: Optional[str] = None
    baud_rate: int = DEFAULT_BAUD_RATE
    data_bits: int = 8
    parity: str = "none"
    stop_bits: float = 1
    stream: Any = None

    def __post_init__(self):
        try:
            mode = Mode(self.mode)
        except ValueError as e:
            raise ConfigurationError(f"Unknown mode: {self.mode!r}") from e
        object.__setattr__(self, "mode", mode)

    @property
    def resolved_mode(self) -> Mode:
        if self.host:
            return Mode.TCP
        if self.path:
            return Mode.SERIAL
        if self.stream is not None:
            return Mode.STREAM
        return self.mode

    @property
    def has_transport(self) -> bool:
        """True if host, path or stream is present."""
        return bool(self.host or self.path or self.stream is not None)

    def describe(self) -> str:
        """Human readable address string used in events."""
        mode = self.resolved_mode
        if mode is Mode.SERIAL:
            return (f"{self.path}:{self.baud_rate},{self.data_bits},"
                    f"{self.parity},{self.stop_bits}")
        if mode is Mode.STREAM:
            return "stream"
        return f"{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Address:
        """Merge a configuration mapping over the address defaults."""
        return cls(**_known_kwargs(cls, data))


@dataclass(frozen=True)
class SplitterOptions:
    """Framing policy for incoming data.

    The first policy present wins: delimiter, then regex, then timeout.
    """
    delimiter: Optional[Union[bytes, str]] = None
    include_delimiter: bool = False
    regex: Optional[Union[re.Pattern, bytes, str]] = None
    timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SplitterOptions:
        return cls(**_known_kwargs(cls, data))


@dataclass(frozen=True)
class LoggerOptions:
    """Toggles for the capture files.

    Attributes:
        devlog: Capture bytes coming from the device
        talklog: Capture bytes in both directions
        directory: Where the capture files are created
    """
    devlog: bool = False
    talklog: bool = False
    directory: str = "."

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LoggerOptions:
        return cls(**_known_kwargs(cls, data))


@dataclass(frozen=True)
class Options:
    """Session configuration.

    Attributes:
        encoding: Codec name for commands and responses, None to skip decoding
        duration: Default pacing after each command, in milliseconds
        disconnect: True closes the transport whenever the queue empties;
            an int > 0 is also used as the TCP idle timeout in milliseconds
        splitter: Framing policy
        logger: Capture file toggles
        dictionary: Command string -> literal string sent instead. The
            mapping is referenced, not copied, and must not change while
            sessions use it.
    """
    encoding: Optional[str] = DEFAULT_ENCODING
    duration: int = DEFAULT_DURATION_MS
    disconnect: Union[bool, int] = True
    splitter: SplitterOptions = field(
        default_factory=lambda: SplitterOptions(timeout=DEFAULT_SPLITTER_TIMEOUT_MS))
    logger: LoggerOptions = field(default_factory=LoggerOptions)
    dictionary: Mapping[str, str] = field(default_factory=dict)

    @property
    def idle_timeout(self) -> Optional[float]:
        """TCP idle timeout in seconds, or None."""
        if isinstance(self.disconnect, bool):
            return None
        try:
            ms = int(self.disconnect)
        except (TypeError, ValueError):
            return None
        return ms / 1000.0 if ms > 0 else None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Options:
        """Merge a configuration mapping over the option defaults.

        Nested ``splitter`` and ``logger`` mappings replace the defaults
        wholesale.
        """
        kwargs = _known_kwargs(cls, data)
        if isinstance(kwargs.get("splitter"), Mapping):
            kwargs["splitter"] = SplitterOptions.from_dict(kwargs["splitter"])
        if isinstance(kwargs.get("logger"), Mapping):
            kwargs["logger"] = LoggerOptions.from_dict(kwargs["logger"])
        return cls(**kwargs)


@dataclass(frozen=True)
class CommandObject:
    """An encoded command ready for the transport.

    An empty ``encoded`` buffer means nothing is transmitted; the drainer
    only waits ``duration`` milliseconds.
    """
    name: str
    command: str
    encodedstr: str = ""
    encoded: bytes = b""
    duration: int = 0


@dataclass(frozen=True)
class ResponseObject:
    """A framed chunk from the device. ``value`` is None without an encoding."""
    name: str
    raw: bytes
    value: Optional[str] = None


@dataclass(frozen=True)
class ConnectionStatus:
    name: str
    address: str
    status: ConnectionState
    more: Optional[str] = None


@dataclass(frozen=True)
class ConnectionData:
    name: str
    address: str
    data: bytes
