"""
Shared fixtures for the picolink test suite.

MockSerial stands in for ``serial.Serial`` so the link, the reader thread
and the CLI can be exercised without hardware.
"""

import threading
import time
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from picolink import LinkSession

# unpatched sleep, so tests that patch time.sleep do not make the mock reader spin
_real_sleep = time.sleep


class MockSerial:
    """Mock serial port: records writes, serves injected bytes to reads."""

    def __init__(self, port: str = "/dev/test", timeout: float = 0.01):
        self.port = port
        self.timeout = timeout
        self.is_open = True
        self.written = []
        self.close_calls = 0
        self.write_error = None
        self.short_write = False
        self._read_buffer = bytearray()
        self._read_error = None
        self._lock = threading.Lock()

    # -- serial.Serial surface ------------------------------------------------

    def write(self, data: bytes) -> int:
        with self._lock:
            if self.write_error is not None:
                raise self.write_error
            self.written.append(bytes(data))
            return len(data) - 1 if self.short_write else len(data)

    def read(self, size: int = 1) -> bytes:
        with self._lock:
            if self._read_error is not None:
                error, self._read_error = self._read_error, None
                raise error
            if self._read_buffer:
                chunk = bytes(self._read_buffer[:size])
                del self._read_buffer[:size]
                return chunk
        _real_sleep(self.timeout)
        return b""

    @property
    def in_waiting(self) -> int:
        with self._lock:
            return len(self._read_buffer)

    def close(self):
        self.close_calls += 1
        self.is_open = False

    # -- test helpers ---------------------------------------------------------

    def inject(self, data: bytes):
        """Make ``data`` available to the next reads."""
        with self._lock:
            self._read_buffer.extend(data)

    def fail_next_read(self, error: Exception):
        with self._lock:
            self._read_error = error

    def get_all_frames(self) -> list:
        with self._lock:
            return list(self.written)


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.005) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        _real_sleep(interval)
    return predicate()


def port_info(device, vid=None, pid=None, serial_number=None, manufacturer=None,
              product=None, location=None, description="n/a", hwid="n/a"):
    """Fake pyserial ListPortInfo."""
    return SimpleNamespace(
        device=device, vid=vid, pid=pid, serial_number=serial_number,
        manufacturer=manufacturer, product=product, location=location,
        description=description, hwid=hwid,
    )


@pytest.fixture
def mock_serial():
    """Create a mock serial port."""
    return MockSerial()


@pytest.fixture
def mock_link(mock_serial):
    """Open a session on the mock port; yields (link, serial, received_text)."""
    received = []
    with patch('serial.Serial', return_value=mock_serial):
        link = LinkSession.open('/dev/test', on_text=received.append)

    yield link, mock_serial, received

    link.close()
