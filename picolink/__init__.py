"""
PicoLink - Pico Playground Host Link
====================================

A Python library for driving the Pico Playground motor board (four motors
and a status LED) over a COBS-framed USB serial link.

Example:
    >>> from picolink import LinkSession, MotionSequencer, LedCommand, resolve_port
    >>>
    >>> with LinkSession.open(resolve_port()) as link:
    ...     link.send(LedCommand(True))
    ...     MotionSequencer(link).ramp(+1)
"""

from .commands import (
    Command,
    CommandType,
    ResetToBootloader,
    MotorCommand,
    LedCommand,
)
from .codec import encode, decode, serialize, deserialize, FrameBuffer
from .errors import (
    PicoLinkError,
    EnumerationError,
    PortNotFoundError,
    OpenError,
    SendError,
    DecodeError,
    MalformedFrameError,
    UnknownVariantError,
)
from .ports import (
    PortType,
    PortDescriptor,
    UsbPortInfo,
    enumerate_ports,
    resolve_port,
    format_port,
)
from .link import LinkSession, LinkState, SerialChannel, open_session
from .motion import MotionSequencer, hold, ramp, ramp_levels, ramp_plan, stop_motors
from .constants import DEVICE_IDENTITY, DEFAULT_BAUDRATE, DRIVE_LIMIT

__version__ = "0.1.0"
__all__ = [
    "Command",
    "CommandType",
    "ResetToBootloader",
    "MotorCommand",
    "LedCommand",
    "encode",
    "decode",
    "serialize",
    "deserialize",
    "FrameBuffer",
    "PicoLinkError",
    "EnumerationError",
    "PortNotFoundError",
    "OpenError",
    "SendError",
    "DecodeError",
    "MalformedFrameError",
    "UnknownVariantError",
    "PortType",
    "PortDescriptor",
    "UsbPortInfo",
    "enumerate_ports",
    "resolve_port",
    "format_port",
    "LinkSession",
    "LinkState",
    "SerialChannel",
    "open_session",
    "MotionSequencer",
    "hold",
    "ramp",
    "ramp_levels",
    "ramp_plan",
    "stop_motors",
    "DEVICE_IDENTITY",
    "DEFAULT_BAUDRATE",
    "DRIVE_LIMIT",
]
