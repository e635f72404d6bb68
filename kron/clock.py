"""
Clocks tell kron what time it is, in the time zone patterns are evaluated in.

``SystemClock`` reads the wall clock. ``ManualClock`` only moves when told to, and is meant for tests of code that
depends on the passing of time.
"""

from datetime import datetime, tzinfo
from threading import Lock
from typing import Protocol, runtime_checkable

import arrow
from arrow.parser import TzinfoParser

__all__ = ["Clock", "ManualClock", "SystemClock"]


@runtime_checkable
class Clock(Protocol):
    """
    A source of the current time. Successive calls to ``now`` never go backwards.
    """

    @property
    def tzinfo(self) -> tzinfo: ...

    def now(self) -> arrow.Arrow: ...


def _resolve_tz(tz: str | tzinfo) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    # Raises ParserError, a ValueError, for unknown names
    return TzinfoParser.parse(tz)


class SystemClock:
    """
    The system wall clock, in a given time zone.

    Args:
        tz: Time zone name (such as ``"Europe/Oslo"``), ``"local"`` for the system time zone, or a ``tzinfo``.
    """

    def __init__(self, tz: str | tzinfo = "local") -> None:
        self._tz = _resolve_tz(tz)

    @property
    def tzinfo(self) -> tzinfo:
        return self._tz

    def now(self) -> arrow.Arrow:
        return arrow.now(self._tz)

    def __repr__(self) -> str:
        return f"SystemClock({self._tz!r})"


class ManualClock:
    """
    A clock that only moves when told to. It can be reset to its initial time, but otherwise never moves backwards.

    Safe to advance from one thread while another reads it.

    .. code-block:: python

        clock = ManualClock("2018-06-06T12:34:56", tz="America/New_York")
        clock.advance(minutes=1)

    Args:
        initial: Initial time. Naive times and ISO strings without an offset are taken to be in ``tz``.
        tz: Time zone of the clock.
    """

    def __init__(self, initial: str | datetime | arrow.Arrow, tz: str | tzinfo = "UTC") -> None:
        self._tz = _resolve_tz(tz)
        self._initial = self._to_arrow(initial)
        self._current = self._initial
        self._lock = Lock()

    def _to_arrow(self, moment: str | datetime | arrow.Arrow) -> arrow.Arrow:
        if isinstance(moment, str):
            moment = datetime.fromisoformat(moment)
        if isinstance(moment, datetime) and moment.tzinfo is None:
            return arrow.get(moment, tzinfo=self._tz)
        return arrow.get(moment).to(self._tz)

    @property
    def tzinfo(self) -> tzinfo:
        return self._tz

    @property
    def current(self) -> arrow.Arrow:
        with self._lock:
            return self._current

    def now(self) -> arrow.Arrow:
        return self.current

    def set(self, moment: str | datetime | arrow.Arrow) -> None:
        """
        Move the clock to the given time.

        Raises:
            ValueError: If the given time is before the current time of the clock.
        """
        new_time = self._to_arrow(moment)
        with self._lock:
            if new_time < self._current:
                raise ValueError("Clock cannot move backwards.")
            self._current = new_time

    def advance(self, *, days: int = 0, hours: int = 0, minutes: int = 0, seconds: float = 0) -> arrow.Arrow:
        """
        Move the clock forward by the given amount of elapsed time.

        Returns:
            The new current time.
        """
        with self._lock:
            advanced = self._current.to("UTC").shift(days=days, hours=hours, minutes=minutes, seconds=seconds)
            if advanced < self._current:
                raise ValueError("Clock cannot move backwards.")
            self._current = advanced.to(self._tz)
            return self._current

    def reset(self) -> None:
        """
        Move the clock back to its initial time. This is the only way to move the clock backwards.
        """
        with self._lock:
            self._current = self._initial

    def __repr__(self) -> str:
        return f"ManualClock({self.current.isoformat()})"
