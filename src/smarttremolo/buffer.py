"""AudioBuffer -- metadata-carrying wrapper around planar float32 numpy arrays.

Samples are stored ``[channels, frames]`` and normalised to [-1, 1].  The
tremolo pipeline modifies ``AudioBuffer.data`` in place and never resizes it.
"""

from __future__ import annotations

import numpy as np

DEFAULT_SAMPLE_RATE = 48000


class AudioBuffer:
    """A 2D ``[channels, frames]`` float32 audio buffer with metadata.

    Parameters
    ----------
    data : array-like or AudioBuffer
        Audio samples.  1D input is normalised to ``[1, N]``.
    sample_rate : int
        Sample rate in Hz, must be positive.
    label : str or None
        Free-form label carried as metadata.
    """

    __slots__ = ("_data", "_sample_rate", "_label")

    def __init__(
        self,
        data,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        label: str | None = None,
    ):
        if isinstance(data, AudioBuffer):
            arr = data._data.copy()
        else:
            arr = np.asarray(data, dtype=np.float32)

        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        elif arr.ndim != 2:
            raise ValueError(f"AudioBuffer requires 1D or 2D data, got {arr.ndim}D")

        if arr.shape[0] not in (1, 2):
            raise ValueError(
                f"AudioBuffer supports 1 or 2 channels, got {arr.shape[0]}"
            )

        # Ensure contiguous float32
        if arr.dtype != np.float32:
            arr = arr.astype(np.float32)
        if not arr.flags["C_CONTIGUOUS"]:
            arr = np.ascontiguousarray(arr)

        sr = int(sample_rate)
        if sr <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self._data: np.ndarray = arr
        self._sample_rate: int = sr
        self._label: str | None = label

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Raw 2D ``[channels, frames]`` float32 array."""
        return self._data

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    @property
    def frames(self) -> int:
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self._data.shape[1] / self._sample_rate

    @property
    def channel_layout(self) -> str:
        return "mono" if self.channels == 1 else "stereo"

    @property
    def label(self) -> str | None:
        return self._label

    # ------------------------------------------------------------------
    # Channel access
    # ------------------------------------------------------------------

    def channel(self, i: int) -> np.ndarray:
        """Return a 1D numpy view of channel *i*."""
        if i < 0 or i >= self.channels:
            raise IndexError(
                f"Channel {i} out of range for {self.channels}-channel buffer"
            )
        return self._data[i]

    @property
    def mono(self) -> np.ndarray:
        """1D numpy view -- only valid when ``channels == 1``."""
        if self.channels != 1:
            raise ValueError(f"mono requires 1-channel buffer, got {self.channels}")
        return self._data[0]

    def to_mono(self) -> AudioBuffer:
        """Mid (channel average) downmix as a new mono buffer."""
        mixed = self._data.mean(axis=0, keepdims=True)
        return AudioBuffer(
            mixed.astype(np.float32),
            sample_rate=self._sample_rate,
            label=self._label,
        )

    # ------------------------------------------------------------------
    # Numpy interop
    # ------------------------------------------------------------------

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data
        return self._data.astype(dtype)

    def __len__(self) -> int:
        """Number of frames (not channels)."""
        return self.frames

    def __repr__(self) -> str:
        parts = [
            f"channels={self.channels}",
            f"frames={self.frames}",
            f"sr={self.sample_rate}",
            f"layout='{self.channel_layout}'",
        ]
        if self._label is not None:
            parts.append(f"label='{self._label}'")
        return f"AudioBuffer({', '.join(parts)})"

    # ------------------------------------------------------------------
    # Interleaving
    # ------------------------------------------------------------------

    def interleaved(self) -> np.ndarray:
        """Return a frame-interleaved 1D copy: ``[L0, R0, L1, R1, ...]``."""
        return self._data.T.flatten()

    @classmethod
    def from_interleaved(
        cls,
        samples,
        channels: int,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        **kw,
    ) -> AudioBuffer:
        """Build a buffer from interleaved samples."""
        arr = np.asarray(samples, dtype=np.float32)
        if channels < 1 or arr.size % channels:
            raise ValueError(
                f"{arr.size} samples cannot be split into {channels} channels"
            )
        data = arr.reshape(-1, channels).T
        return cls(np.ascontiguousarray(data), sample_rate=sample_rate, **kw)

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def zeros(
        cls,
        channels: int,
        frames: int,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        **kw,
    ) -> AudioBuffer:
        return cls(
            np.zeros((channels, frames), dtype=np.float32),
            sample_rate=sample_rate,
            **kw,
        )

    @classmethod
    def sine(
        cls,
        freq: float,
        channels: int = 1,
        frames: int = 4096,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        amplitude: float = 1.0,
        **kw,
    ) -> AudioBuffer:
        t = np.arange(frames, dtype=np.float64) / sample_rate
        row = (amplitude * np.sin(2.0 * np.pi * freq * t)).astype(np.float32)
        arr = np.tile(row, (channels, 1))
        return cls(arr, sample_rate=sample_rate, **kw)

    @classmethod
    def test_pad(
        cls,
        seconds: float = 2.0,
        sample_rate: int = 44100,
        **kw,
    ) -> AudioBuffer:
        """Gentle stereo dyad (220 Hz left, 330 Hz right) under a slow swell.

        Used as stand-in input when no source file is available.
        """
        seconds = max(float(seconds), 1.0 / sample_rate)
        frames = max(1, int(seconds * sample_rate))
        t = np.arange(frames, dtype=np.float64) / sample_rate
        env = 0.5 * (1.0 - np.cos(2.0 * np.pi * np.minimum(t / seconds, 1.0)))
        left = 0.2 * env * np.sin(2.0 * np.pi * 220.0 * t)
        right = 0.2 * env * np.sin(2.0 * np.pi * 330.0 * t)
        return cls(np.stack([left, right]), sample_rate=sample_rate, **kw)

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    def copy(self) -> AudioBuffer:
        """Deep copy with independent numpy storage."""
        return AudioBuffer(
            self._data.copy(),
            sample_rate=self._sample_rate,
            label=self._label,
        )
