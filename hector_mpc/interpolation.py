"""Scalar and vector interpolation helpers and a first order low-pass filter."""

from __future__ import annotations

import math


def _check_unit(x: float) -> None:
    if not 0 <= x <= 1:
        raise ValueError(f"interpolation parameter must lie in [0, 1], got {x}")


def lerp(y0, yf, x: float):
    """Linear interpolation between ``y0`` and ``yf`` for ``x`` in [0, 1]."""
    _check_unit(x)
    return y0 + (yf - y0) * x


def cubic_bezier(y0, yf, x: float):
    """Cubic Bezier interpolation between ``y0`` and ``yf`` for ``x`` in [0, 1]."""
    _check_unit(x)
    bezier = x * x * x + 3.0 * (x * x * (1.0 - x))
    return y0 + bezier * (yf - y0)


def cubic_bezier_first_derivative(y0, yf, x: float):
    """Derivative of :func:`cubic_bezier` with respect to ``x``."""
    _check_unit(x)
    return 6.0 * x * (1.0 - x) * (yf - y0)


def cubic_bezier_second_derivative(y0, yf, x: float):
    """Second derivative term of the cubic Bezier, ``-12 x (yf - y0)``."""
    _check_unit(x)
    return -12.0 * x * (yf - y0)


class FirstOrderIIRFilter:
    """First order low-pass filter over scalars or arrays."""

    def __init__(self, alpha: float, initial_value):
        self.alpha = alpha
        self._state = initial_value

    @classmethod
    def from_frequencies(cls, cutoff_frequency: float, sample_frequency: float, initial_value):
        """Build a filter from a cutoff and a sample frequency."""
        alpha = 1.0 - math.exp(-2.0 * math.pi * cutoff_frequency / sample_frequency)
        return cls(alpha, initial_value)

    def update(self, x):
        """Feed a new sample and return the filtered value."""
        self._state = self.alpha * x + (1.0 - self.alpha) * self._state
        return self._state

    def state(self):
        """Current filtered value, without updating."""
        return self._state

    def reset(self) -> None:
        """Reset the filtered value to zero, keeping its shape."""
        self._state = self._state * 0.0