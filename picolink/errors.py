"""
Exception hierarchy for picolink.

All errors raised by the library derive from :class:`PicoLinkError` so a
caller can treat any link failure as fatal with a single ``except``.
"""


class PicoLinkError(Exception):
    """Base class for every picolink error."""


class EnumerationError(PicoLinkError):
    """The OS query for available serial ports failed."""


class PortNotFoundError(PicoLinkError):
    """No enumerated port carries the expected device identity."""


class OpenError(PicoLinkError):
    """The serial port could not be opened (missing, busy, no permission)."""


class SendError(PicoLinkError):
    """Writing a frame to the port failed."""


class DecodeError(PicoLinkError):
    """An inbound frame could not be turned back into a command."""


class MalformedFrameError(DecodeError):
    """COBS stuffing or payload layout is inconsistent."""


class UnknownVariantError(DecodeError):
    """The discriminant byte does not name a known command."""

    def __init__(self, discriminant: int):
        super().__init__(f"Unknown command discriminant: {discriminant}")
        self.discriminant = discriminant
