"""Sliding-window loudness (RMS) and zero-crossing-rate features."""

from __future__ import annotations

import numpy as np

FRAME_SIZE = 1024


def rms(values) -> float:
    """Root-mean-square of *values*; 0.0 when empty."""
    x = np.asarray(values, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(x * x)))


def zero_crossing_rate(values) -> float:
    """Fraction of adjacent pairs whose sign differs (0 counts as positive).

    Returns 0.0 for fewer than two values.
    """
    x = np.asarray(values)
    if x.size < 2:
        return 0.0
    nonneg = x >= 0
    crossings = np.count_nonzero(nonneg[1:] != nonneg[:-1])
    return crossings / (x.size - 1)


class FeatureExtractor:
    """Fixed-capacity FIFO of mid-channel samples.

    ``push_sample(L, R)`` stores ``(L + R) / 2``; once the window holds
    *capacity* values it is :meth:`ready` and each further push drops the
    oldest value.  The window is only emptied by :meth:`reset`: callers that
    want discrete frames reset after consuming a ready window, callers that
    skip the reset get a trailing statistic instead.

    Parameters
    ----------
    capacity : int
        Window length in samples.
    """

    __slots__ = ("_buf", "_write_pos", "_size", "_capacity")

    def __init__(self, capacity: int = FRAME_SIZE):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._buf = np.zeros(capacity, dtype=np.float32)
        self._write_pos = 0
        self._size = 0
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def push_sample(self, left: float, right: float) -> None:
        self._buf[self._write_pos] = 0.5 * (left + right)
        self._write_pos = (self._write_pos + 1) % self._capacity
        if self._size < self._capacity:
            self._size += 1

    def ready(self) -> bool:
        return self._size == self._capacity

    def reset(self) -> None:
        """Empty the window without reallocating."""
        self._write_pos = 0
        self._size = 0

    def values(self) -> np.ndarray:
        """Copy of the held values, oldest first."""
        if self._size < self._capacity:
            return self._buf[: self._size].copy()
        pos = self._write_pos
        return np.concatenate((self._buf[pos:], self._buf[:pos]))

    def rms(self) -> float:
        return rms(self._buf[: self._size])

    def zcr(self) -> float:
        return zero_crossing_rate(self.values())
