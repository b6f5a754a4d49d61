"""Tremolo engine: per-sample LFO amplitude modulation with smoothed parameters."""

from __future__ import annotations

import math

import numpy as np

from smarttremolo.buffer import AudioBuffer
from smarttremolo.lfo import get_waveform, parse_shape
from smarttremolo.smoothing import OnePoleSmoother

_DENORMAL_GUARD = 1e-20
_MIN_RATE_HZ = 1e-4
_MAX_RATE_HZ = 1e6
_MIN_PHASE_INC = 1e-9
_FALLBACK_SAMPLE_RATE = 48000.0


def _clamp(x: float, lo: float, hi: float) -> float:
    # NaN maps to the upper bound
    if math.isnan(x):
        return hi
    return lo if x < lo else hi if x > hi else x


class Tremolo:
    """Amplitude modulator driven by a waveform-shaped, stereo-offset LFO.

    Rate and depth changes pass through one-pole smoothers, so the values
    applied to each sample are the smoothed ones, never the raw targets.
    Setters clamp out-of-range input and never raise.

    Parameters
    ----------
    sample_rate : float
        Sample rate in Hz.
    rate_hz : float
        LFO rate in Hz (> 0).
    depth : float
        Modulation depth, 0..1.
    wet : float
        Wet/dry mix, 0..1.
    stereo_phase_deg : float
        Right-channel LFO offset in degrees, 0..180.
    shape : str
        ``"sine"``, ``"triangle"``, ``"square"`` or ``"square-soft"``.
    smoothing_time : float
        Time constant of the rate and depth smoothers, in seconds.
    """

    def __init__(
        self,
        sample_rate: float = 48000.0,
        rate_hz: float = 5.0,
        depth: float = 0.6,
        wet: float = 1.0,
        stereo_phase_deg: float = 0.0,
        shape: str = "sine",
        smoothing_time: float = 0.01,
    ):
        self._sr = _FALLBACK_SAMPLE_RATE
        self._rate_hz = 5.0
        self._depth = 0.6
        self._wet = 1.0
        self._stereo_offset = 0.0
        self._shape = "sine"
        self._lfo = get_waveform("sine")
        self._phase = 0.0

        self.set_rate_hz(rate_hz)
        self.set_depth(depth)
        self.set_wet(wet)
        self.set_stereo_phase_deg(stereo_phase_deg)
        self.set_shape(shape)

        self._rate_sm = OnePoleSmoother(time_constant=smoothing_time, value=self._rate_hz)
        self._depth_sm = OnePoleSmoother(time_constant=smoothing_time, value=self._depth)
        self.set_sample_rate(sample_rate)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def sample_rate(self) -> float:
        return self._sr

    @property
    def rate_hz(self) -> float:
        """Rate target (before smoothing)."""
        return self._rate_hz

    @property
    def depth(self) -> float:
        """Depth target (before smoothing)."""
        return self._depth

    @property
    def wet(self) -> float:
        return self._wet

    @property
    def stereo_offset(self) -> float:
        """Right-channel phase offset in cycles, 0..0.5."""
        return self._stereo_offset

    @property
    def stereo_phase_deg(self) -> float:
        return self._stereo_offset * 360.0

    @property
    def shape(self) -> str:
        return self._shape

    @property
    def phase(self) -> float:
        """Oscillator phase in cycles, always in [0, 1)."""
        return self._phase

    @property
    def smoothed_rate_hz(self) -> float:
        return self._rate_sm.value

    @property
    def smoothed_depth(self) -> float:
        return self._depth_sm.value

    def set_sample_rate(self, fs: float) -> None:
        """Change the sample rate without a jump in the smoothed parameters."""
        fs = float(fs)
        self._sr = fs if fs > 0 and math.isfinite(fs) else _FALLBACK_SAMPLE_RATE
        self._rate_sm.set_sample_rate(self._sr)
        self._depth_sm.set_sample_rate(self._sr)

    def set_depth(self, d: float) -> None:
        self._depth = _clamp(float(d), 0.0, 1.0)

    def set_rate_hz(self, r: float) -> None:
        r = float(r)
        if math.isnan(r):
            r = _MIN_RATE_HZ
        self._rate_hz = _clamp(r, _MIN_RATE_HZ, _MAX_RATE_HZ)

    def set_wet(self, w: float) -> None:
        self._wet = _clamp(float(w), 0.0, 1.0)

    def set_stereo_phase_deg(self, deg: float) -> None:
        # 180 degrees -> half a cycle
        self._stereo_offset = _clamp(float(deg), 0.0, 180.0) / 360.0

    def set_shape(self, shape: str) -> None:
        self._shape = parse_shape(shape)
        self._lfo = get_waveform(self._shape)

    def set_smoothing_time(self, tau: float) -> None:
        self._rate_sm.set_time_constant(tau)
        self._depth_sm.set_time_constant(tau)

    def reset(self) -> None:
        """Rewind the oscillator and snap both smoothers to their targets."""
        self._phase = 0.0
        self._rate_sm.reset(self._rate_hz)
        self._depth_sm.reset(self._depth)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def gains(self, frames: int) -> tuple[np.ndarray, np.ndarray]:
        """Advance the oscillator by *frames* samples.

        Returns the per-sample ``(left, right)`` gain curves,
        ``1 - depth * lfo``.
        """
        gain_l = np.empty(frames, dtype=np.float64)
        gain_r = np.empty(frames, dtype=np.float64)

        lfo = self._lfo
        rate_sm = self._rate_sm
        depth_sm = self._depth_sm
        rate = self._rate_hz
        depth = self._depth
        offset = self._stereo_offset
        sr = self._sr
        phase = self._phase

        for i in range(frames):
            inc = max(_MIN_PHASE_INC, rate_sm.process(rate) / sr)
            d_now = depth_sm.process(depth)

            gain_l[i] = 1.0 - d_now * lfo(phase)
            gain_r[i] = 1.0 - d_now * lfo((phase + offset) % 1.0)

            phase += inc
            if phase >= 1.0:
                phase -= math.floor(phase)

        self._phase = phase
        return gain_l, gain_r

    def process(self, data):
        """Apply the tremolo in place.

        *data* is a ``[channels, frames]`` float array or an AudioBuffer.
        Mono input uses the left LFO only.  Returns *data*.
        """
        arr = data.data if isinstance(data, AudioBuffer) else data
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        frames = arr.shape[1]
        if frames == 0 or arr.shape[0] < 1:
            return data

        gain_l, gain_r = self.gains(frames)
        wet = self._wet

        rows = [(0, gain_l)] if arr.shape[0] == 1 else [(0, gain_l), (1, gain_r)]
        for ch, gain in rows:
            dry = arr[ch].astype(np.float64)
            wet_sig = (dry + _DENORMAL_GUARD) * gain
            out = (1.0 - wet) * dry + wet * wet_sig
            np.clip(out, -1.0, 1.0, out=out)
            arr[ch] = out
        return data

    def __repr__(self) -> str:
        return (
            f"Tremolo(rate={self._rate_hz:g}Hz, depth={self._depth:g}, "
            f"wet={self._wet:g}, stereo={self.stereo_phase_deg:g}deg, "
            f"shape='{self._shape}', sr={self._sr:g})"
        )
