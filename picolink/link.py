"""
Duplex serial link
==================

Owns the open serial port for the lifetime of a session. Outbound traffic
is framed commands; inbound traffic is raw device text drained by a
background thread.

The port is wrapped in a :class:`SerialChannel`, which hands out two
capabilities: a :class:`ChannelReader` for the reader thread and a
:class:`ChannelWriter` for the caller. Each capability is released
independently, and the port is only closed once both are gone. Releasing
the writer does not close the port underneath a reader that is still
draining, and a reader that dies does not take the writer with it.

Example:
    >>> from picolink import LinkSession, LedCommand
    >>>
    >>> with LinkSession.open('/dev/ttyACM0', on_text=print) as link:
    ...     link.send(LedCommand(True))
"""

import codecs
import logging
import threading
from enum import Enum
from typing import Callable, Optional

import serial

from .codec import encode, serialize
from .commands import Command
from .constants import DEFAULT_BAUDRATE, READ_TIMEOUT, READER_JOIN_TIMEOUT
from .errors import OpenError, SendError

logger = logging.getLogger(__name__)
device_logger = logging.getLogger("picolink.device")


class LinkState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    FAULTED = "faulted"


# =============================================================================
# Channel and capabilities
# =============================================================================

class SerialChannel:
    """
    Reference-counted owner of one open ``serial.Serial``.

    The lock only guards the reference count; reads and writes go straight
    to the port, which supports both directions concurrently.
    """

    def __init__(self, port: serial.Serial):
        self._port = port
        self._refs = 0
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._port.is_open

    @property
    def references(self) -> int:
        with self._lock:
            return self._refs

    def reader(self) -> 'ChannelReader':
        self._acquire()
        return ChannelReader(self)

    def writer(self) -> 'ChannelWriter':
        self._acquire()
        return ChannelWriter(self)

    def _acquire(self) -> None:
        with self._lock:
            if not self._port.is_open:
                raise OpenError("Serial channel is already closed")
            self._refs += 1

    def _release(self) -> None:
        with self._lock:
            self._refs -= 1
            if self._refs > 0 or not self._port.is_open:
                return
            self._port.close()
        logger.debug("Serial port %s closed", self._port.port)


class _Capability:
    def __init__(self, channel: SerialChannel):
        self._channel = channel
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def close(self) -> None:
        """Drop this handle. The port closes when the last handle is dropped."""
        if self._released:
            return
        self._released = True
        self._channel._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ChannelReader(_Capability):
    """Read side of a channel."""

    def read(self) -> bytes:
        """
        Read what is waiting, or block for at least one byte.

        Returns ``b''`` when the port's read timeout elapses with nothing
        received.
        """
        port = self._channel._port
        return port.read(port.in_waiting or 1)


class ChannelWriter(_Capability):
    """Write side of a channel."""

    def write(self, data: bytes) -> Optional[int]:
        return self._channel._port.write(data)


# =============================================================================
# Session
# =============================================================================

class LinkSession:
    """
    One live link to the board.

    Exactly one background reader thread runs per session. It stops on
    :meth:`close` (via a shutdown event checked between timed reads) or on
    the first non-timeout I/O error, without affecting :meth:`send`.

    Args:
        channel: Open channel to take ownership of
        path: Port path, for logging
        baudrate: Configured baudrate, for reference
        on_text: Called with each chunk of decoded device text. Defaults to
                 logging it on the ``picolink.device`` logger.
        join_timeout: How long :meth:`close` waits for the reader thread
    """

    def __init__(
        self,
        channel: SerialChannel,
        path: str,
        baudrate: int = DEFAULT_BAUDRATE,
        on_text: Optional[Callable[[str], None]] = None,
        join_timeout: float = READER_JOIN_TIMEOUT,
    ):
        self.path = path
        self.baudrate = baudrate
        self.on_text = on_text
        self.join_timeout = join_timeout

        self._channel = channel
        self._writer = channel.writer()
        self._shutdown = threading.Event()
        self._state = LinkState.OPEN

        reader = None
        try:
            reader = channel.reader()
            self._reader_thread = threading.Thread(
                target=self._read_loop,
                args=(reader,),
                name=f"picolink-reader({path})",
                daemon=True,
            )
            self._reader_thread.start()
        except BaseException:
            if reader is not None:
                reader.close()
            self._writer.close()
            self._state = LinkState.CLOSED
            raise

    @classmethod
    def open(
        cls,
        path: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT,
        on_text: Optional[Callable[[str], None]] = None,
    ) -> 'LinkSession':
        """
        Open ``path`` (8N1) and start draining device output.

        Raises:
            OpenError: Port missing, busy, or not permitted
        """
        try:
            port = serial.Serial(
                path,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=timeout,
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise OpenError(f"Could not open {path}: {e}") from e

        logger.info("Opened %s at %d baud", path, baudrate)
        try:
            return cls(SerialChannel(port), path, baudrate, on_text=on_text)
        except BaseException:
            if port.is_open:
                port.close()
            raise

    def __enter__(self) -> 'LinkSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is LinkState.OPEN

    @property
    def reader_running(self) -> bool:
        return self._reader_thread.is_alive()

    # =========================================================================
    # Outbound
    # =========================================================================

    def send(self, command: Command) -> None:
        """
        Encode ``command`` and write the whole frame in one call.

        Raises:
            SendError: Session closed or faulted, or the write failed
        """
        if self._state is LinkState.CLOSED:
            raise SendError("Link is closed")
        if self._state is LinkState.FAULTED:
            raise SendError("Link faulted by an earlier write error")

        frame = encode(command)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Sending %r payload %s", command, serialize(command).hex())

        try:
            written = self._writer.write(frame)
        except (serial.SerialException, OSError) as e:
            self._state = LinkState.FAULTED
            raise SendError(f"Failed to send {command!r} on {self.path}: {e}") from e

        if written is not None and written != len(frame):
            self._state = LinkState.FAULTED
            raise SendError(
                f"Short write on {self.path}: {written} of {len(frame)} bytes"
            )

    # =========================================================================
    # Inbound
    # =========================================================================

    def _read_loop(self, reader: ChannelReader) -> None:
        """Background thread draining device text."""
        decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        try:
            while not self._shutdown.is_set():
                try:
                    data = reader.read()
                except (serial.SerialException, OSError) as e:
                    if not self._shutdown.is_set():
                        logger.error("Reader on %s stopped: %s", self.path, e)
                    return

                if not data:
                    continue  # timeout, nothing available

                text = decoder.decode(data)
                if text:
                    self._emit(text)
        finally:
            reader.close()

    def _emit(self, text: str) -> None:
        try:
            if self.on_text is not None:
                self.on_text(text)
            else:
                device_logger.info("%s", text.rstrip("\r\n"))
        except Exception:
            logger.exception("Device text observer raised")

    # =========================================================================
    # Teardown
    # =========================================================================

    def close(self) -> None:
        """Stop the reader and release the port. Safe to call twice."""
        if self._state is LinkState.CLOSED:
            return

        self._shutdown.set()
        if threading.current_thread() is not self._reader_thread:
            self._reader_thread.join(timeout=self.join_timeout)
            if self._reader_thread.is_alive():
                logger.warning("Reader on %s did not stop within %.1fs",
                               self.path, self.join_timeout)

        self._writer.close()
        self._state = LinkState.CLOSED
        logger.info("Closed %s", self.path)


def open_session(
    path: str,
    baudrate: int = DEFAULT_BAUDRATE,
    timeout: float = READ_TIMEOUT,
    on_text: Optional[Callable[[str], None]] = None,
) -> LinkSession:
    """Shorthand for :meth:`LinkSession.open`."""
    return LinkSession.open(path, baudrate=baudrate, timeout=timeout, on_text=on_text)
