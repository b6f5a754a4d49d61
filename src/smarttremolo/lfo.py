"""LFO waveform generators.

Every waveform maps a phase in [0, 1) to a modulation value in [0, 1].
Shapes are addressed by name; unknown names fall back to ``"sine"``.
"""

from __future__ import annotations

import math

import numpy as np

SHAPES: tuple[str, ...] = ("sine", "triangle", "square", "square-soft")

DEFAULT_SHAPE = "sine"

# Steepness of the tanh used to round the soft square.
_SOFT_SQUARE_DRIVE = 3.0

_TWO_PI = 2.0 * math.pi


def sine(phase: float) -> float:
    return 0.5 * (1.0 + math.sin(_TWO_PI * phase))


def triangle(phase: float) -> float:
    t = phase % 1.0
    tri = t * 4.0 - 1.0 if t < 0.5 else 3.0 - t * 4.0
    return 0.5 * (tri + 1.0)


def square(phase: float) -> float:
    return 1.0 if math.sin(_TWO_PI * phase) >= 0.0 else 0.0


def square_soft(phase: float) -> float:
    s = math.sin(_TWO_PI * phase)
    return 0.5 * (math.tanh(_SOFT_SQUARE_DRIVE * s) + 1.0)


_WAVEFORMS = {
    "sine": sine,
    "triangle": triangle,
    "square": square,
    "square-soft": square_soft,
}

_ALIASES: dict[str, str] = {
    "square_soft": "square-soft",
    "squaresoft": "square-soft",
    "soft-square": "square-soft",
}


def parse_shape(name) -> str:
    """Resolve a shape name, case-insensitively, to one of :data:`SHAPES`.

    Anything unrecognised resolves to ``"sine"``.
    """
    if not isinstance(name, str):
        return DEFAULT_SHAPE
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    return key if key in _WAVEFORMS else DEFAULT_SHAPE


def get_waveform(shape: str):
    """Return the scalar waveform function for *shape*."""
    return _WAVEFORMS[parse_shape(shape)]


def render(shape: str, phases) -> np.ndarray:
    """Evaluate *shape* over an array of phases in [0, 1).

    Vectorised counterpart of the scalar waveform functions.
    """
    ph = np.asarray(phases, dtype=np.float64)
    shape = parse_shape(shape)
    s = np.sin(_TWO_PI * ph)
    if shape == "triangle":
        t = np.mod(ph, 1.0)
        tri = np.where(t < 0.5, t * 4.0 - 1.0, 3.0 - t * 4.0)
        return 0.5 * (tri + 1.0)
    if shape == "square":
        return (s >= 0.0).astype(np.float64)
    if shape == "square-soft":
        return 0.5 * (np.tanh(_SOFT_SQUARE_DRIVE * s) + 1.0)
    return 0.5 * (1.0 + s)
