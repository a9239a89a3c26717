"""
Logical clock supplied by the host.

Creation timestamps are opaque non-decreasing integers (a block height or a
sequence number), not wall-clock time.
"""

from typing import Protocol, runtime_checkable

from achievement_registry.kernel.errors import ClockRegression


@runtime_checkable
class LogicalClock(Protocol):
    """Anything with a ``now()`` returning a non-decreasing integer."""

    def now(self) -> int:
        ...


class SequenceClock:
    """
    Counter-backed clock used when the host provides none.

    Every reading returns the next sequence number, so each creation gets a
    distinct, increasing timestamp.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("Logical time cannot be negative")
        self._value = start

    @property
    def current(self) -> int:
        return self._value

    def now(self) -> int:
        self._value += 1
        return self._value

    def advance_to(self, value: int) -> int:
        """Jump forward to ``value``; moving backwards is rejected."""
        if value < self._value:
            raise ClockRegression(
                f"Logical time {value} is before {self._value}",
                current=self._value,
                requested=value,
            )
        self._value = value
        return self._value


class MonotonicGuard:
    """Wraps a host clock and rejects readings that go backwards."""

    def __init__(self, clock: LogicalClock):
        self._clock = clock
        self._last = 0

    def now(self) -> int:
        value = int(self._clock.now())
        if value < 0 or value < self._last:
            raise ClockRegression(
                f"Host clock returned {value} after {self._last}",
                current=self._last,
                requested=value,
            )
        self._last = value
        return value
