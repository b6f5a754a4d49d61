"""Streaming block processing: features -> controller -> tremolo.

The whole signal is walked in fixed-size blocks.  Inside each block the
feature window and controller run sample by sample (controller decisions are
timing-sensitive), then the tremolo engine processes the block in one call.
The engine still iterates per sample internally, so its state evolves the
same way regardless of block size.
"""

from __future__ import annotations

import math

import numpy as np

from smarttremolo.buffer import AudioBuffer
from smarttremolo.control import Controller, NoOpController
from smarttremolo.features import FeatureExtractor
from smarttremolo.tremolo import Tremolo

BLOCK_SIZE = 512


# ---------------------------------------------------------------------------
# Demo depth ramp
# ---------------------------------------------------------------------------


class DemoRamp:
    """Scripted depth ramp between two timestamps.

    Between *start* and *end* the depth climbs linearly from
    ``floor * base`` to ``base``; after *end* it holds ``base``.

    Parameters
    ----------
    start, end : float
        Ramp boundaries in seconds.
    floor : float
        Fraction of the base depth the ramp starts from.
    """

    __slots__ = ("start", "end", "floor")

    def __init__(self, start: float = 5.0, end: float = 8.0, floor: float = 0.2):
        if end <= start:
            raise ValueError(f"end ({end}) must be after start ({start})")
        self.start = start
        self.end = end
        self.floor = floor

    def depth_at(self, t: float, base_depth: float) -> float | None:
        """Depth override at time *t*, or None before the ramp begins."""
        if t < self.start:
            return None
        if t > self.end:
            return base_depth
        frac = (t - self.start) / (self.end - self.start)
        return base_depth * (self.floor + (1.0 - self.floor) * frac)


# ---------------------------------------------------------------------------
# Analysis summary
# ---------------------------------------------------------------------------


class AnalysisSpan:
    """Mean window features over one stretch of the run."""

    __slots__ = ("start_sec", "end_sec", "mean_rms", "mean_zcr", "windows")

    def __init__(
        self,
        start_sec: float,
        end_sec: float,
        mean_rms: float,
        mean_zcr: float,
        windows: int,
    ):
        self.start_sec = start_sec
        self.end_sec = end_sec
        self.mean_rms = mean_rms
        self.mean_zcr = mean_zcr
        self.windows = windows

    def __repr__(self) -> str:
        return (
            f"AnalysisSpan({self.start_sec:g}s..{self.end_sec:g}s, "
            f"rms={self.mean_rms:.4f}, zcr={self.mean_zcr:.4f}, "
            f"windows={self.windows})"
        )


# ---------------------------------------------------------------------------
# Stream processor
# ---------------------------------------------------------------------------


class StreamProcessor:
    """Drives a :class:`Tremolo` over a whole buffer with controller feedback.

    Parameters
    ----------
    tremolo : Tremolo
        Engine to drive.  Its current rate and depth targets become the base
        settings handed to the controller on every window.
    controller : Controller or None
        Feedback controller, :class:`NoOpController` when None.
    block_size : int
        Frames per processing block.
    features : FeatureExtractor or None
        Feature window, a fresh 1024-sample one when None.
    demo_ramp : DemoRamp or None
        Optional scripted depth ramp.
    """

    def __init__(
        self,
        tremolo: Tremolo,
        controller: Controller | None = None,
        block_size: int = BLOCK_SIZE,
        features: FeatureExtractor | None = None,
        demo_ramp: DemoRamp | None = None,
    ):
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        self.tremolo = tremolo
        self.controller = controller if controller is not None else NoOpController()
        self.block_size = block_size
        self.features = features if features is not None else FeatureExtractor()
        self.demo_ramp = demo_ramp
        self.base_rate_hz = tremolo.rate_hz
        self.base_depth = tremolo.depth
        self.analysis: list[AnalysisSpan] = []
        self._frames = 0
        self._windows = 0
        self._last_mark = 0
        self._rms_acc = 0.0
        self._zcr_acc = 0.0
        self._acc_count = 0

    @property
    def frames_processed(self) -> int:
        return self._frames

    @property
    def time_seconds(self) -> float:
        return self._frames / self.tremolo.sample_rate

    @property
    def windows(self) -> int:
        """Number of completed feature windows (controller invocations)."""
        return self._windows

    def process(self, buf: AudioBuffer) -> AudioBuffer:
        """Process *buf* in place, block by block, and return it."""
        if buf.sample_rate != self.tremolo.sample_rate:
            self.tremolo.set_sample_rate(buf.sample_rate)

        n_frames = buf.frames
        for start in range(0, n_frames, self.block_size):
            end = min(start + self.block_size, n_frames)
            self.process_block(buf.data[:, start:end])

        self._flush_analysis()
        return buf

    def process_block(self, block: np.ndarray) -> np.ndarray:
        """Run features/controller per sample, then the tremolo on the block."""
        arr = block.data if isinstance(block, AudioBuffer) else block
        frames = arr.shape[1]
        left = arr[0]
        right = arr[1] if arr.shape[0] > 1 else arr[0]

        sr = self.tremolo.sample_rate
        feats = self.features
        ramp = self.demo_ramp

        for i in range(frames):
            t = (self._frames + i) / sr
            feats.push_sample(float(left[i]), float(right[i]))

            if feats.ready():
                self._on_window(t)

            if ramp is not None:
                d = ramp.depth_at(t, self.base_depth)
                if d is not None:
                    self.tremolo.set_depth(d)

        self.tremolo.process(arr)
        self._frames += frames
        self._mark_seconds()
        return block

    def reset(self) -> None:
        """Forget all run state; the engine is rewound too."""
        self.tremolo.reset()
        self.features.reset()
        self.analysis.clear()
        self._frames = 0
        self._windows = 0
        self._last_mark = 0
        self._rms_acc = 0.0
        self._zcr_acc = 0.0
        self._acc_count = 0

    # ------------------------------------------------------------------

    def _on_window(self, t: float) -> None:
        feats = self.features
        level = feats.rms()
        crossings = feats.zcr()
        rate, depth = self.controller.update(
            t, level, crossings, self.base_rate_hz, self.base_depth
        )
        self.tremolo.set_rate_hz(rate)
        self.tremolo.set_depth(depth)
        self._rms_acc += level
        self._zcr_acc += crossings
        self._acc_count += 1
        self._windows += 1
        feats.reset()

    def _mark_seconds(self) -> None:
        cur_sec = int(math.floor(self.time_seconds))
        if cur_sec == self._last_mark:
            return
        self._close_span(self._last_mark, cur_sec)
        self._last_mark = cur_sec

    def _flush_analysis(self) -> None:
        t = self.time_seconds
        if t > self._last_mark:
            self._close_span(self._last_mark, t)

    def _close_span(self, start: float, end: float) -> None:
        if self._acc_count > 0:
            n = self._acc_count
            self.analysis.append(
                AnalysisSpan(start, end, self._rms_acc / n, self._zcr_acc / n, n)
            )
        self._rms_acc = 0.0
        self._zcr_acc = 0.0
        self._acc_count = 0


# ---------------------------------------------------------------------------
# One-shot helper
# ---------------------------------------------------------------------------


def process_buffer(
    buf: AudioBuffer,
    rate_hz: float = 5.0,
    depth: float = 0.6,
    wet: float = 1.0,
    stereo_phase_deg: float = 0.0,
    shape: str = "sine",
    controller: Controller | None = None,
    block_size: int = BLOCK_SIZE,
    demo: bool = False,
) -> AudioBuffer:
    """Apply the tremolo to *buf* in place and return it.

    Builds a :class:`Tremolo` and :class:`StreamProcessor` for one pass.
    """
    trem = Tremolo(
        sample_rate=buf.sample_rate,
        rate_hz=rate_hz,
        depth=depth,
        wet=wet,
        stereo_phase_deg=stereo_phase_deg,
        shape=shape,
    )
    proc = StreamProcessor(
        trem,
        controller=controller,
        block_size=block_size,
        demo_ramp=DemoRamp() if demo else None,
    )
    return proc.process(buf)
