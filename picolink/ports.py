"""
Serial port discovery
=====================

Enumerates the serial endpoints the OS reports and picks the board by its
USB serial-number string.

Descriptors are rebuilt on every call; devices can be attached or removed
between two enumerations, so nothing here is cached.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import serial
import serial.tools.list_ports

from .constants import DEVICE_IDENTITY
from .errors import EnumerationError, PortNotFoundError

logger = logging.getLogger(__name__)


class PortType(Enum):
    USB = "USB"
    BLUETOOTH = "Bluetooth"
    PCI = "PCI"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class UsbPortInfo:
    """USB identity of a port."""
    vid: int
    pid: int
    serial_number: Optional[str] = None
    manufacturer: Optional[str] = None
    product: Optional[str] = None
    interface: Optional[int] = None


@dataclass(frozen=True)
class PortDescriptor:
    """
    One enumerated serial endpoint.

    Attributes:
        name: Platform path or name (e.g. '/dev/ttyACM0', 'COM3')
        port_type: USB / Bluetooth / PCI / Unknown
        usb: USB identity, only set for USB ports
    """
    name: str
    port_type: PortType = PortType.UNKNOWN
    usb: Optional[UsbPortInfo] = None


def _interface_number(location: Optional[str]) -> Optional[int]:
    # pyserial locations look like '1-1.2:1.0'; the number after the last
    # dot of the ':' suffix is bInterfaceNumber
    if not location or ':' not in location:
        return None
    suffix = location.rsplit(':', 1)[1]
    try:
        return int(suffix.rsplit('.', 1)[-1])
    except ValueError:
        return None


def _classify(port_info) -> PortDescriptor:
    """Build a descriptor from a pyserial ListPortInfo."""
    if port_info.vid is not None:
        usb = UsbPortInfo(
            vid=port_info.vid,
            pid=port_info.pid if port_info.pid is not None else 0,
            serial_number=port_info.serial_number,
            manufacturer=port_info.manufacturer,
            product=port_info.product,
            interface=_interface_number(port_info.location),
        )
        return PortDescriptor(port_info.device, PortType.USB, usb)

    description = (port_info.description or "").lower()
    hwid = (port_info.hwid or "")
    if ("bluetooth" in description or "bluetooth" in hwid.lower()
            or "rfcomm" in port_info.device.lower()):
        return PortDescriptor(port_info.device, PortType.BLUETOOTH)
    if hwid.upper().startswith("PCI"):
        return PortDescriptor(port_info.device, PortType.PCI)
    return PortDescriptor(port_info.device, PortType.UNKNOWN)


def enumerate_ports() -> List[PortDescriptor]:
    """
    List every serial endpoint the OS currently reports.

    Order is whatever the OS returns and is not stable across calls.

    Raises:
        EnumerationError: If the OS query fails (e.g. permissions)
    """
    try:
        ports = [_classify(info) for info in serial.tools.list_ports.comports()]
    except (OSError, serial.SerialException) as e:
        raise EnumerationError(f"Failed to enumerate serial ports: {e}") from e

    logger.debug("Enumerated %d serial port(s)", len(ports))
    return ports


def resolve_port(
    explicit_name: Optional[str] = None,
    identity: str = DEVICE_IDENTITY,
    ports: Optional[Iterable[PortDescriptor]] = None,
) -> str:
    """
    Pick the port to open.

    Args:
        explicit_name: Returned unchanged when given; no existence check,
                       a bad name surfaces when the port is opened
        identity: USB serial number to look for (case-insensitive)
        ports: Descriptors to search; enumerated fresh when omitted

    Returns:
        Port path/name

    Raises:
        EnumerationError: Enumeration failed
        PortNotFoundError: No USB port carries ``identity``
    """
    if explicit_name is not None:
        return explicit_name

    if ports is None:
        ports = enumerate_ports()

    wanted = identity.casefold()
    for port in ports:
        if port.port_type is not PortType.USB or port.usb is None:
            continue
        if (port.usb.serial_number or "").casefold() == wanted:
            logger.info("Found %s on %s", identity, port.name)
            return port.name

    raise PortNotFoundError(f"No serial port with serial number '{identity}' found")


def format_port(port: PortDescriptor) -> str:
    """Human-readable multi-line description used by ``--list-ports``."""
    lines = [f"  {port.name}", f"    Type: {port.port_type.value}"]
    if port.port_type is PortType.USB and port.usb is not None:
        usb = port.usb
        interface = "" if usb.interface is None else f"{usb.interface:02x}"
        lines += [
            f"    VID:{usb.vid:04x} PID:{usb.pid:04x}",
            f"     Serial Number: {usb.serial_number or ''}",
            f"      Manufacturer: {usb.manufacturer or ''}",
            f"           Product: {usb.product or ''}",
            f"         Interface: {interface}",
        ]
    return "\n".join(lines)
