"""Monotonic stopwatch."""

from __future__ import annotations

import time


class Timer:
    """Measures time elapsed since it was created or last started."""

    def __init__(self):
        self._start_ns = 0
        self.start()

    def start(self) -> None:
        """Restart the timer."""
        self._start_ns = time.monotonic_ns()

    def elapsed_ns(self) -> int:
        """Nanoseconds elapsed."""
        return time.monotonic_ns() - self._start_ns

    def elapsed_ms(self) -> float:
        """Milliseconds elapsed."""
        return self.elapsed_ns() / 1.0e6

    def elapsed_seconds(self) -> float:
        """Seconds elapsed."""
        return self.elapsed_ns() / 1.0e9