"""One-pole parameter smoothing."""

from __future__ import annotations

import math

# Keeps the recursion out of the subnormal range when target and state are 0.
_DENORMAL_GUARD = 1e-20

_MIN_TIME_CONSTANT = 1e-6


class OnePoleSmoother:
    """Exponential smoother turning stepped targets into a click-free signal.

    ``y[n] = a * (y[n-1] + eps) + (1 - a) * x``, with ``a = exp(-1 / (tau * fs))``.

    Parameters
    ----------
    sample_rate : float
        Sample rate in Hz.  Non-positive values fall back to 48000.
    time_constant : float
        Time constant *tau* in seconds, clamped to at least 1 microsecond.
    value : float
        Initial state.
    """

    __slots__ = ("_sample_rate", "_tau", "_a", "_z")

    def __init__(
        self,
        sample_rate: float = 48000.0,
        time_constant: float = 0.01,
        value: float = 0.0,
    ):
        self._sample_rate = 48000.0
        self._tau = 0.01
        self._a = 0.0
        self._z = float(value)
        self.set_sample_rate(sample_rate)
        self.set_time_constant(time_constant)

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def time_constant(self) -> float:
        return self._tau

    @property
    def coefficient(self) -> float:
        return self._a

    @property
    def value(self) -> float:
        """Current smoothed output."""
        return self._z

    def set_sample_rate(self, fs: float) -> None:
        fs = float(fs)
        self._sample_rate = fs if fs > 0 and math.isfinite(fs) else 48000.0
        self._update_coeff()

    def set_time_constant(self, tau: float) -> None:
        self._tau = max(_MIN_TIME_CONSTANT, float(tau))
        self._update_coeff()

    def reset(self, value: float) -> None:
        """Jump straight to *value* with no transition."""
        self._z = float(value)

    def process(self, target: float) -> float:
        """Advance one sample toward *target* and return the new output."""
        a = self._a
        self._z = a * (self._z + _DENORMAL_GUARD) + (1.0 - a) * target
        return self._z

    def _update_coeff(self) -> None:
        self._a = math.exp(-1.0 / (self._tau * self._sample_rate))

    def __repr__(self) -> str:
        return (
            f"OnePoleSmoother(value={self._z:.6g}, tau={self._tau:g}, "
            f"sr={self._sample_rate:g})"
        )
