"""
Motion sequencing
=================

Generates motor command sequences and drives them through a
:class:`~picolink.link.LinkSession` at a fixed cadence.

Ramp
----
A ramp takes all four motors from 0 up to ``peak`` and back to 0 in steps
of one, with the sign set by ``direction``::

    0, 1, ..., peak, peak, ..., 1, 0      (direction = +1)
    0, -1, ..., -peak, -peak, ..., -1, 0  (direction = -1)

That is ``2 * (peak + 1)`` commands, 202 for the default peak of 100.
Levels are clamped to ±DRIVE_LIMIT, so a ramp never gets near the edge
of the int8 wire range.

Usage Example
-------------
>>> from picolink import LinkSession, MotionSequencer
>>>
>>> with LinkSession.open('/dev/ttyACM0') as link:
...     sequencer = MotionSequencer(link)
...     sequencer.ramp(+1)
...     sequencer.ramp(-1)
...     sequencer.stop()
"""

import logging
import time
from typing import Callable, List, TYPE_CHECKING

from .commands import MotorCommand, clamp_level
from .constants import DRIVE_LIMIT, RAMP_STEP_DELAY

if TYPE_CHECKING:
    from .link import LinkSession

logger = logging.getLogger(__name__)


def ramp_levels(direction: int, peak: int = DRIVE_LIMIT) -> List[int]:
    """
    Signed levels of a ramp.

    Args:
        direction: +1 (forward) or -1 (reverse)
        peak: Highest magnitude reached, clamped to 0..DRIVE_LIMIT

    Raises:
        ValueError: If direction is not +1 or -1
    """
    if direction not in (1, -1):
        raise ValueError(f"direction must be +1 or -1, got {direction!r}")

    peak = max(0, min(DRIVE_LIMIT, int(peak)))
    ascent = list(range(0, peak + 1))
    return [level * direction for level in ascent + ascent[::-1]]


def ramp_plan(direction: int, peak: int = DRIVE_LIMIT) -> List[MotorCommand]:
    """The ramp as a list of uniform motor commands, in send order."""
    return [MotorCommand.uniform(level) for level in ramp_levels(direction, peak)]


class MotionSequencer:
    """
    Sends motor sequences over a link, one command at a time.

    Every step is a blocking send followed by a sleep; steps never overlap.
    A :class:`~picolink.errors.SendError` aborts the running sequence and
    propagates. Nothing is resumed or rolled back, so the board keeps the
    last level it received.

    Parameters
    ----------
    session : LinkSession
        Open link to send on
    delay : float
        Seconds between steps (default 50 ms)
    sleep : callable
        Sleep function, replaceable for tests
    clock : callable
        Monotonic clock used by :meth:`hold`
    """

    def __init__(
        self,
        session: 'LinkSession',
        delay: float = RAMP_STEP_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.delay = delay
        self._sleep = sleep
        self._clock = clock

    def ramp(self, direction: int, peak: int = DRIVE_LIMIT) -> int:
        """
        Run one ramp up to ``peak`` and back down.

        Returns
        -------
        int
            Number of commands sent.
        """
        plan = ramp_plan(direction, peak)
        logger.info("Ramp %+d, %d steps", direction, len(plan))

        for command in plan:
            self.session.send(command)
            self._sleep(self.delay)
        return len(plan)

    def hold(self, level: int, duration: float) -> int:
        """
        Keep re-sending one uniform level until ``duration`` seconds pass.

        Returns the number of commands sent (always at least one).
        """
        command = MotorCommand.uniform(clamp_level(level))
        logger.info("Holding level %d for %.1fs", command.a, duration)

        sent = 0
        start = self._clock()
        while True:
            self.session.send(command)
            sent += 1
            self._sleep(self.delay)
            if self._clock() - start > duration:
                return sent

    def stop(self) -> None:
        """All motors to zero."""
        self.session.send(MotorCommand.stop())


def ramp(
    session: 'LinkSession',
    direction: int,
    peak: int = DRIVE_LIMIT,
    delay: float = RAMP_STEP_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run a single ramp on ``session``; see :meth:`MotionSequencer.ramp`."""
    return MotionSequencer(session, delay=delay, sleep=sleep).ramp(direction, peak)


def hold(
    session: 'LinkSession',
    level: int,
    duration: float,
    interval: float = RAMP_STEP_DELAY,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Drive all motors at ``level`` for ``duration`` seconds, re-sent every ``interval``."""
    sequencer = MotionSequencer(session, delay=interval, sleep=sleep, clock=clock)
    return sequencer.hold(level, duration)


def stop_motors(session: 'LinkSession') -> None:
    session.send(MotorCommand.stop())
