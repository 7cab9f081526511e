"""
Frame codec
===========

Turns commands into self-delimiting frames and back.

Frame layout::

    COBS( discriminant:u8 || payload ) || 0x00

COBS removes every 0x00 from the stuffed body, so the trailing 0x00 is
the only delimiter a receiver has to look for. A dropped or duplicated
byte corrupts at most the frame it lands in; the next 0x00 resynchronises
the stream.
"""

import logging
from typing import List

from cobs import cobs

from .commands import COMMAND_TYPES, Command, CommandType
from .constants import FRAME_DELIMITER, MAX_FRAME_SIZE
from .errors import MalformedFrameError, UnknownVariantError

logger = logging.getLogger(__name__)

DELIMITER = bytes([FRAME_DELIMITER])


def serialize(command: Command) -> bytes:
    """Discriminant byte followed by the command's fixed-width payload."""
    return bytes([int(command.TYPE)]) + command.to_payload()


def deserialize(data: bytes) -> Command:
    """
    Inverse of :func:`serialize`.

    Raises:
        MalformedFrameError: Empty input or payload of the wrong shape
        UnknownVariantError: Discriminant is not a known command
    """
    if not data:
        raise MalformedFrameError("Empty command body")

    try:
        command_type = CommandType(data[0])
    except ValueError:
        raise UnknownVariantError(data[0]) from None

    return COMMAND_TYPES[command_type].from_payload(bytes(data[1:]))


def encode(command: Command) -> bytes:
    """Serialize, COBS-stuff and terminate a command."""
    return cobs.encode(serialize(command)) + DELIMITER


def decode(frame: bytes) -> Command:
    """
    Decode one frame back into a command.

    The trailing delimiter is optional so that frames already split off a
    stream by :class:`FrameBuffer` can be passed straight in.

    Raises:
        MalformedFrameError: Delimiter inside the body or broken stuffing
        UnknownVariantError: Discriminant is not a known command
    """
    body = bytes(frame)
    if body.endswith(DELIMITER):
        body = body[:-1]

    if DELIMITER in body:
        raise MalformedFrameError("Delimiter inside frame body")

    try:
        data = cobs.decode(body)
    except cobs.DecodeError as e:
        raise MalformedFrameError(f"Bad COBS stuffing: {e}") from e

    return deserialize(data)


class FrameBuffer:
    """
    Splits an inbound byte stream into frames.

    Bytes are accumulated until a delimiter arrives; the collected body
    (without the delimiter) is then returned from :meth:`feed`. Partial
    frames that grow past ``max_frame_size`` are discarded up to the
    next delimiter.

    Example:
        >>> buf = FrameBuffer()
        >>> buf.feed(encode(LedCommand(True))[:2])
        []
        >>> [decode(f) for f in buf.feed(encode(LedCommand(True))[2:])]
        [LedCommand(status=True)]
    """

    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE):
        self.max_frame_size = max_frame_size
        self.overflows = 0
        self._buffer = bytearray()
        self._discarding = False

    def feed(self, data: bytes) -> List[bytes]:
        frames = []
        for byte in data:
            if byte == FRAME_DELIMITER:
                if not self._discarding and self._buffer:
                    frames.append(bytes(self._buffer))
                self._buffer.clear()
                self._discarding = False
                continue

            if self._discarding:
                continue

            if len(self._buffer) >= self.max_frame_size:
                logger.warning(
                    "Dropping inbound frame longer than %d bytes", self.max_frame_size
                )
                self.overflows += 1
                self._buffer.clear()
                self._discarding = True
                continue

            self._buffer.append(byte)
        return frames

    def reset(self) -> None:
        self._buffer.clear()
        self._discarding = False

    @property
    def pending(self) -> int:
        """Bytes held for an incomplete frame."""
        return len(self._buffer)
