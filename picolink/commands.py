"""
Command Model for the Pico Playground Board
===========================================

The closed set of instructions the host can send to the board. Each
command is a frozen dataclass, so equality is structural and instances
are hashable.

Every class pins its wire discriminant through :class:`CommandType`
instead of relying on declaration order:

    ResetToBootloader  = 0   (no payload)
    MotorCommand       = 1   (a, b, c, d as int8)
    LedCommand         = 2   (status as one byte, 0/1)

Example:
    >>> MotorCommand(5, -5, 0, 127)
    MotorCommand(a=5, b=-5, c=0, d=127)
    >>> MotorCommand.uniform(-40) == MotorCommand(-40, -40, -40, -40)
    True
"""

import struct
from dataclasses import dataclass, astuple
from enum import IntEnum
from typing import ClassVar, Dict, Type, Union

from .constants import DRIVE_LIMIT
from .errors import MalformedFrameError


class CommandType(IntEnum):
    """Wire discriminants, fixed explicitly."""
    RESET_TO_BOOTLOADER = 0
    MOTOR = 1
    LED = 2


# int8 range of a single drive level on the wire
LEVEL_MIN = -128
LEVEL_MAX = 127


@dataclass(frozen=True)
class ResetToBootloader:
    """Reboot the board into its firmware-update (USB boot) mode."""

    TYPE: ClassVar[CommandType] = CommandType.RESET_TO_BOOTLOADER

    def to_payload(self) -> bytes:
        return b""

    @classmethod
    def from_payload(cls, data: bytes) -> 'ResetToBootloader':
        if data:
            raise MalformedFrameError(
                f"ResetToBootloader carries no payload, got {len(data)} bytes"
            )
        return cls()


@dataclass(frozen=True)
class MotorCommand:
    """
    Drive levels for the four motors.

    Attributes:
        a, b, c, d: Signed level per motor (-128..127).
                    Negative = reverse, 0 = stop, positive = forward.
    """
    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    TYPE: ClassVar[CommandType] = CommandType.MOTOR
    _LAYOUT: ClassVar[struct.Struct] = struct.Struct('<4b')

    def __post_init__(self):
        for name, value in zip('abcd', astuple(self)):
            if not LEVEL_MIN <= value <= LEVEL_MAX:
                raise ValueError(
                    f"Motor level {name}={value} outside {LEVEL_MIN}..{LEVEL_MAX}"
                )

    @classmethod
    def uniform(cls, level: int) -> 'MotorCommand':
        """Same level on all four motors."""
        return cls(level, level, level, level)

    @classmethod
    def stop(cls) -> 'MotorCommand':
        return cls()

    def to_payload(self) -> bytes:
        return self._LAYOUT.pack(self.a, self.b, self.c, self.d)

    @classmethod
    def from_payload(cls, data: bytes) -> 'MotorCommand':
        if len(data) != cls._LAYOUT.size:
            raise MalformedFrameError(
                f"MotorCommand payload must be {cls._LAYOUT.size} bytes, got {len(data)}"
            )
        return cls(*cls._LAYOUT.unpack(data))


@dataclass(frozen=True)
class LedCommand:
    """Switch the status LED on or off."""
    status: bool = False

    TYPE: ClassVar[CommandType] = CommandType.LED

    def __post_init__(self):
        # frozen: bypass __setattr__ to normalise truthy values
        object.__setattr__(self, 'status', bool(self.status))

    def to_payload(self) -> bytes:
        return b'\x01' if self.status else b'\x00'

    @classmethod
    def from_payload(cls, data: bytes) -> 'LedCommand':
        if len(data) != 1:
            raise MalformedFrameError(
                f"LedCommand payload must be 1 byte, got {len(data)}"
            )
        if data[0] not in (0, 1):
            raise MalformedFrameError(f"Invalid LED status byte: {data[0]:#04x}")
        return cls(status=data[0] == 1)


Command = Union[ResetToBootloader, MotorCommand, LedCommand]

COMMAND_TYPES: Dict[CommandType, Type] = {
    cls.TYPE: cls for cls in (ResetToBootloader, MotorCommand, LedCommand)
}


def clamp_level(level: int, limit: int = DRIVE_LIMIT) -> int:
    """Clamp a drive level to ±limit."""
    return max(-limit, min(limit, int(level)))
