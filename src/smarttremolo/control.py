"""Controllers: pluggable feedback that retargets tremolo rate and depth.

A controller is called once per completed feature window, synchronously on
the processing path, so ``update`` must be quick and must not block.
"""

from __future__ import annotations


class Controller:
    """Base class for feedback controllers.

    Subclass and override :meth:`update`.
    """

    def update(
        self,
        time_seconds: float,
        rms: float,
        zcr: float,
        rate_hz: float,
        depth: float,
    ) -> tuple[float, float]:
        """Return the new ``(rate_hz, depth)`` targets.

        Parameters
        ----------
        time_seconds : float
            Elapsed time since the start of processing.
        rms : float
            Loudness of the last window.
        zcr : float
            Zero-crossing rate of the last window, 0..1.
        rate_hz, depth : float
            Current base settings.
        """
        raise NotImplementedError


class NoOpController(Controller):
    """Leaves rate and depth untouched."""

    def update(self, time_seconds, rms, zcr, rate_hz, depth):
        return rate_hz, depth


class CallbackController(Controller):
    """Wraps a callable ``(time, rms, zcr, rate_hz, depth) -> (rate_hz, depth)``."""

    def __init__(self, callback):
        self.callback = callback

    def update(self, time_seconds, rms, zcr, rate_hz, depth):
        return self.callback(time_seconds, rms, zcr, rate_hz, depth)


class LoudnessFollower(Controller):
    """Deepens the tremolo as the signal gets louder.

    ``depth = clamp(min_depth + sensitivity * rms, 0, 1)``.  With a non-zero
    *zcr_rate_scale* the rate is also pushed up for noisier, brighter
    material: ``rate = rate_hz * (1 + zcr_rate_scale * zcr)``.
    """

    def __init__(
        self,
        min_depth: float = 0.2,
        sensitivity: float = 1.5,
        zcr_rate_scale: float = 0.0,
    ):
        self.min_depth = min_depth
        self.sensitivity = sensitivity
        self.zcr_rate_scale = zcr_rate_scale

    def update(self, time_seconds, rms, zcr, rate_hz, depth):
        new_depth = min(1.0, max(0.0, self.min_depth + self.sensitivity * rms))
        new_rate = rate_hz * (1.0 + self.zcr_rate_scale * zcr)
        return new_rate, new_depth
