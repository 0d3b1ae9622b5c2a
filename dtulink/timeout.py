"""Millisecond clock and a simple expiring timeout."""

import time
from typing import Callable, Optional

_START = time.monotonic()


def millis() -> int:
    """Milliseconds elapsed since this module was loaded."""
    return int((time.monotonic() - _START) * 1000)


class Timeout:
    """A timeout measured in milliseconds against a clock."""

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or millis
        self.timeout = 0
        self.start = 0

    def set(self, ms: int) -> None:
        """Start a new period of ``ms`` milliseconds from now."""
        self.timeout = ms
        self.start = self._clock()

    def extend(self, ms: int) -> None:
        """Lengthen the current period by ``ms`` milliseconds."""
        self.timeout += ms

    def reset(self) -> None:
        """Restart the current period from now."""
        self.start = self._clock()

    def occurred(self) -> bool:
        """True once the period has elapsed."""
        return self._clock() > self.start + self.timeout