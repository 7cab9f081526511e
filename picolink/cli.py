"""
Command-line front end
======================

    picolink --list-ports          Show every serial port the OS reports
    picolink --reset               Reboot the board into its bootloader
    picolink [--port PORT]         LED on, ramp forward, ramp reverse,
                                   stop, LED off

Without ``--port`` the board is found by its USB serial number.
"""

import argparse
import sys
import time
from typing import List, Optional

from .commands import LedCommand, ResetToBootloader
from .constants import (
    DEFAULT_BAUDRATE,
    DRIVE_LIMIT,
    RAMP_STEP_DELAY,
    RESET_SETTLE_DELAY,
)
from .errors import PicoLinkError
from .link import LinkSession
from .motion import MotionSequencer
from .ports import enumerate_ports, format_port, resolve_port
from .tools import configure_logging, log_exceptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="picolink",
        description="Drive the Pico Playground motor board over USB serial",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
    picolink --list-ports
    picolink --port /dev/ttyACM0
    picolink --reset
        """
    )
    parser.add_argument('--port', '-p', default=None,
                        help='Serial port (default: find by USB serial number)')
    parser.add_argument('--baudrate', '-b', type=int, default=DEFAULT_BAUDRATE,
                        help=f'Baudrate (default: {DEFAULT_BAUDRATE})')
    parser.add_argument('--list-ports', action='store_true',
                        help='List serial ports and exit')
    parser.add_argument('--reset', action='store_true',
                        help='Reset the board into its bootloader and exit')
    parser.add_argument('--peak', type=int, default=DRIVE_LIMIT,
                        help=f'Ramp peak level (default: {DRIVE_LIMIT})')
    parser.add_argument('--delay', type=float, default=RAMP_STEP_DELAY,
                        help=f'Seconds between ramp steps (default: {RAMP_STEP_DELAY})')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging (shows every payload sent)')
    return parser


def print_device_text(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def list_ports() -> None:
    for port in enumerate_ports():
        print(format_port(port))


@log_exceptions
def reset_device(link: LinkSession, settle: float = RESET_SETTLE_DELAY) -> None:
    print("Resetting device")
    link.send(ResetToBootloader())
    time.sleep(settle)


@log_exceptions
def run_demo(link: LinkSession, peak: int = DRIVE_LIMIT,
             delay: float = RAMP_STEP_DELAY) -> None:
    """LED on, ramp both ways, stop, LED off."""
    sequencer = MotionSequencer(link, delay=delay)

    link.send(LedCommand(True))
    print("Starting loop")
    sequencer.ramp(+1, peak)
    sequencer.ramp(-1, peak)
    sequencer.stop()
    link.send(LedCommand(False))


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``picolink`` command. Returns the exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.list_ports:
            list_ports()
            return 0

        port_name = resolve_port(args.port)
        link = LinkSession.open(port_name, args.baudrate, on_text=print_device_text)
    except PicoLinkError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    with link:
        try:
            if args.reset:
                reset_device(link)
            else:
                run_demo(link, peak=args.peak, delay=args.delay)
        except PicoLinkError:
            # already logged by log_exceptions
            return 1
        except KeyboardInterrupt:
            print("\nCancelled.", file=sys.stderr)
            if link.is_open:
                try:
                    MotionSequencer(link).stop()
                except PicoLinkError as e:
                    print(f"ERROR: could not stop motors: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
