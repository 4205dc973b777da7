"""Device session: one API over TCP, serial and stream transports.

A Session owns the transport, the framer, the codec and the command queue of
one device and republishes everything on a single event channel:

- connectionStatus    ConnectionStatus(name, address, status, more)
- connectionData      ConnectionData(name, address, data), raw, pre-framing
- responseFromDevice  ResponseObject(name, raw, value), post-framing
- commandForDevice    CommandObject, after the bytes were written

Example:
    >>> session = Session(Address(host="10.0.0.5", port=23),
    ...                   Options(splitter=SplitterOptions(delimiter=b"\\r\\n")))
    >>> session.subscribe_responses(lambda r: print(r.value))
    >>> session.process("PWR ON", "#pause 500", "INPUT 3")
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from .capture import SessionCapture
from .codec import Codec
from .drainer import CommandQueue
from .events import EventChannel
from .framing import Framer, create_framer
from .models import (
    Address,
    CommandObject,
    ConnectionData,
    ConnectionState,
    ConnectionStatus,
    EventType,
    Mode,
    Options,
    ResponseObject,
)
from .scheduling import Scheduler, start_timer
from .transport import SerialTransport, StreamTransport, TcpTransport, Transport

logger = logging.getLogger(__name__)


class Session:
    """Managed connection to one device.

    Args:
        address: Address or mapping merged over the address defaults
        options: Options or mapping merged over the option defaults
        transport: Pre-built transport, replacing the one ``address`` selects
        scheduler: Delayed-call primitive for pacing and timeout framing

    Raises:
        ConfigurationError: if no framing policy is set or the encoding is
            unknown
    """

    def __init__(self,
                 address: Union[Address, Mapping[str, Any]],
                 options: Optional[Union[Options, Mapping[str, Any]]] = None,
                 transport: Optional[Transport] = None,
                 scheduler: Scheduler = start_timer):
        if not isinstance(address, Address):
            address = Address.from_dict(address)
        if options is None:
            options = Options()
        elif not isinstance(options, Options):
            options = Options.from_dict(options)

        self._address = address
        self._options = options
        self._name = address.name
        self._mode = address.resolved_mode
        self._address_str = address.describe()

        self._events = EventChannel()
        self._codec = Codec(
            name=self._name,
            encoding=options.encoding,
            duration=options.duration,
            dictionary=options.dictionary,
            on_connect=self.connect,
            on_close=self.close,
        )
        self._framer: Framer = create_framer(options.splitter, scheduler=scheduler)
        self._framer.subscribe(self.decode)
        self._queue = CommandQueue(
            encode=self._codec.encode,
            send=self._send,
            on_empty=self._on_queue_empty,
            scheduler=scheduler,
            name=self._name,
        )
        self._capture = SessionCapture(self._name, options.logger)

        self._transport = transport or self._create_transport()
        if self._transport is None:
            logger.warning(f"[{self._name}] No host, path or stream given; "
                           f"session has no transport")
        else:
            self._transport.subscribe_data(self._on_transport_data)
            self._transport.subscribe_status(self._on_transport_status)
            if self._mode is Mode.STREAM:
                # the stream is already live, only start reading
                self._transport.connect()

    def _create_transport(self) -> Optional[Transport]:
        address = self._address
        if not address.has_transport:
            return None
        if self._mode is Mode.TCP:
            return TcpTransport(address.host, address.port,
                                idle_timeout=self._options.idle_timeout)
        if self._mode is Mode.SERIAL:
            return SerialTransport(
                address.path,
                baud_rate=address.baud_rate,
                data_bits=address.data_bits,
                parity=address.parity,
                stop_bits=address.stop_bits,
            )
        return StreamTransport(address.stream)

    # Properties

    @property
    def name(self) -> str:
        return self._name

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def address(self) -> Address:
        return self._address

    @property
    def address_str(self) -> str:
        return self._address_str

    @property
    def options(self) -> Options:
        return self._options

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    @property
    def framer(self) -> Framer:
        return self._framer

    @property
    def pending(self) -> List[str]:
        """Commands not yet completed, front first."""
        return self._queue.pending

    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_connected()

    # Connection lifecycle

    def connect(self) -> None:
        """Open the transport if it is not open yet.

        Failures are reported as a connectionStatus 'error' event.
        """
        if self._transport is None or self._mode is Mode.STREAM:
            return
        self._transport.connect()

    def close(self) -> None:
        """Close the transport if it is open. Safe to call repeatedly."""
        if self._transport is None or self._mode is Mode.STREAM:
            return
        self._transport.close()

    def shutdown(self) -> None:
        """Drop queued commands, then close the transport (any mode), the
        framer and the capture files."""
        self._queue.cancel()
        if self._transport is not None:
            self._transport.close()
        self._framer.close()
        self._capture.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

    # Commands

    def process(self, *commands: str) -> None:
        """Queue commands for the device.

        Commands may be plain text, hex strings ('FF:01:02', '0A-0B')
        or directives ('#pause 500', '#connect', '#close'). They are sent
        in order, one at a time, each followed by its pacing duration.
        Returns at once; connecting and sending happen on timer threads.
        """
        self._queue.process(*commands)

    def encode(self, command: str) -> Optional[CommandObject]:
        return self._codec.encode(command)

    def decode(self, data: bytes) -> ResponseObject:
        """Decode a framed chunk and publish it as responseFromDevice."""
        response = self._codec.decode(data)
        self._events.emit(EventType.RESPONSE_FROM_DEVICE, response)
        return response

    # Subscriptions

    def subscribe(self, event: Union[EventType, str],
                  callback: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to one event type.

        Returns:
            Unsubscribe function
        """
        return self._events.subscribe(event, callback)

    def subscribe_status(self, callback: Callable[[ConnectionStatus], None]) -> Callable[[], None]:
        return self.subscribe(EventType.CONNECTION_STATUS, callback)

    def subscribe_data(self, callback: Callable[[ConnectionData], None]) -> Callable[[], None]:
        return self.subscribe(EventType.CONNECTION_DATA, callback)

    def subscribe_responses(self, callback: Callable[[ResponseObject], None]) -> Callable[[], None]:
        return self.subscribe(EventType.RESPONSE_FROM_DEVICE, callback)

    def subscribe_commands(self, callback: Callable[[CommandObject], None]) -> Callable[[], None]:
        return self.subscribe(EventType.COMMAND_FOR_DEVICE, callback)

    # Internal methods

    def _send(self, cmdo: CommandObject) -> None:
        if self._transport is None:
            logger.warning(f"[{self._name}] Dropping {cmdo.command!r}: no transport")
            return
        self.connect()
        if self._transport.write(cmdo.encoded):
            self._events.emit(EventType.COMMAND_FOR_DEVICE, cmdo)
            self._capture.outgoing(cmdo.encoded)

    def _on_queue_empty(self) -> None:
        if self._options.disconnect is True:
            self.close()

    def _on_transport_data(self, data: bytes) -> None:
        self._events.emit(EventType.CONNECTION_DATA,
                          ConnectionData(self._name, self._address_str, data))
        self._capture.incoming(data)
        self._framer.feed(data)

    def _on_transport_status(self, status: ConnectionState, more: Optional[str]) -> None:
        if status is ConnectionState.ERROR:
            logger.warning(f"[{self._name}] Connection error: {more}")
        self._events.emit(EventType.CONNECTION_STATUS,
                          ConnectionStatus(self._name, self._address_str, status, more))
