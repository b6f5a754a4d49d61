"""Tests for smarttremolo.tremolo (the tremolo engine)."""

import numpy as np
import numpy.testing as npt
import pytest

from smarttremolo.buffer import AudioBuffer
from smarttremolo.lfo import SHAPES, render
from smarttremolo.tremolo import Tremolo

SR = 48000


def _noise(channels=2, frames=4096, seed=7, level=0.5):
    rng = np.random.default_rng(seed)
    return rng.uniform(-level, level, (channels, frames)).astype(np.float32)


# ---------------------------------------------------------------------------
# Parameter setters
# ---------------------------------------------------------------------------


class TestSetters:
    def test_defaults(self):
        trem = Tremolo()
        assert trem.sample_rate == 48000.0
        assert trem.rate_hz == 5.0
        assert trem.depth == 0.6
        assert trem.wet == 1.0
        assert trem.stereo_offset == 0.0
        assert trem.shape == "sine"
        assert trem.phase == 0.0

    def test_depth_clamped(self):
        trem = Tremolo()
        trem.set_depth(1.5)
        assert trem.depth == 1.0
        trem.set_depth(-0.3)
        assert trem.depth == 0.0

    def test_wet_clamped(self):
        trem = Tremolo()
        trem.set_wet(2.0)
        assert trem.wet == 1.0
        trem.set_wet(-1.0)
        assert trem.wet == 0.0

    def test_rate_floored_positive(self):
        trem = Tremolo()
        trem.set_rate_hz(0.0)
        assert trem.rate_hz > 0.0
        trem.set_rate_hz(-10.0)
        assert trem.rate_hz > 0.0

    def test_stereo_phase_degrees_to_cycles(self):
        trem = Tremolo()
        trem.set_stereo_phase_deg(90.0)
        assert trem.stereo_offset == pytest.approx(0.25)
        trem.set_stereo_phase_deg(180.0)
        assert trem.stereo_offset == pytest.approx(0.5)
        trem.set_stereo_phase_deg(400.0)
        assert trem.stereo_offset == pytest.approx(0.5)
        trem.set_stereo_phase_deg(-20.0)
        assert trem.stereo_offset == 0.0

    def test_shape_parsed(self):
        trem = Tremolo()
        trem.set_shape("Triangle")
        assert trem.shape == "triangle"
        trem.set_shape("wobble")
        assert trem.shape == "sine"

    def test_bad_sample_rate_falls_back(self):
        trem = Tremolo(sample_rate=0)
        assert trem.sample_rate == 48000.0

    @pytest.mark.parametrize("fs", [float("nan"), float("inf"), -float("inf")])
    def test_non_finite_sample_rate_falls_back(self, fs):
        trem = Tremolo(sample_rate=fs)
        assert trem.sample_rate == 48000.0

    def test_nan_maps_to_upper_bound(self):
        trem = Tremolo()
        trem.set_depth(float("nan"))
        assert trem.depth == 1.0
        trem.set_wet(float("nan"))
        assert trem.wet == 1.0
        trem.set_stereo_phase_deg(float("nan"))
        assert trem.stereo_offset == pytest.approx(0.5)

    def test_infinities_map_to_matching_bound(self):
        trem = Tremolo()
        trem.set_depth(float("inf"))
        assert trem.depth == 1.0
        trem.set_depth(-float("inf"))
        assert trem.depth == 0.0
        trem.set_wet(-float("inf"))
        assert trem.wet == 0.0

    def test_rate_stays_finite(self):
        trem = Tremolo()
        trem.set_rate_hz(float("inf"))
        assert trem.rate_hz == 1e6
        trem.set_rate_hz(-float("inf"))
        assert trem.rate_hz == pytest.approx(1e-4)
        trem.set_rate_hz(float("nan"))
        assert trem.rate_hz == pytest.approx(1e-4)

    def test_nan_depth_does_not_poison_output(self):
        trem = Tremolo(sample_rate=SR, depth=0.5)
        trem.set_depth(float("nan"))
        data = np.full((1, 64), 0.5, dtype=np.float32)
        trem.process(data)
        assert np.all(np.isfinite(data))
        assert np.all(np.abs(data) <= 1.0)
        trem.set_depth(0.0)
        trem.gains(SR // 10)
        assert trem.smoothed_depth == pytest.approx(0.0, abs=1e-3)

    def test_smoothers_start_at_targets(self):
        trem = Tremolo(rate_hz=3.0, depth=0.4)
        assert trem.smoothed_rate_hz == pytest.approx(3.0)
        assert trem.smoothed_depth == pytest.approx(0.4)

    def test_set_sample_rate_keeps_smoothed_values(self):
        trem = Tremolo(sample_rate=SR, depth=0.2)
        trem.set_depth(1.0)
        trem.gains(100)
        mid = trem.smoothed_depth
        assert 0.2 < mid < 1.0
        trem.set_sample_rate(44100)
        assert trem.smoothed_depth == pytest.approx(mid)
        assert trem.sample_rate == 44100.0


# ---------------------------------------------------------------------------
# Processing properties
# ---------------------------------------------------------------------------


class TestProcess:
    @pytest.mark.parametrize("shape", SHAPES)
    def test_zero_depth_is_identity(self, shape):
        data = _noise()
        expected = data.copy()
        trem = Tremolo(sample_rate=SR, rate_hz=7.0, depth=0.0, shape=shape)
        trem.process(data)
        npt.assert_allclose(data, expected, atol=1e-7)

    @pytest.mark.parametrize("shape", SHAPES)
    def test_zero_wet_is_exact_identity(self, shape):
        data = _noise()
        expected = data.copy()
        trem = Tremolo(sample_rate=SR, rate_hz=9.0, depth=1.0, wet=0.0, shape=shape)
        trem.process(data)
        npt.assert_array_equal(data, expected)

    def test_in_place_no_reallocation(self):
        buf = AudioBuffer(_noise(), sample_rate=SR)
        before = buf.data
        shape = before.shape
        result = Tremolo(sample_rate=SR, depth=1.0).process(buf)
        assert result is buf
        assert buf.data is before
        assert buf.data.shape == shape
        assert buf.data.dtype == np.float32

    def test_output_clamped(self):
        data = np.full((1, 256), 1.0, dtype=np.float32)
        Tremolo(sample_rate=SR, depth=0.0).process(data)
        assert np.all(data <= 1.0)
        assert np.all(data >= -1.0)

    def test_empty_block_is_noop(self):
        trem = Tremolo(sample_rate=SR)
        data = np.zeros((2, 0), dtype=np.float32)
        trem.process(data)
        assert trem.phase == 0.0

    def test_mono_uses_left_gain(self):
        trem_mono = Tremolo(sample_rate=SR, depth=1.0, stereo_phase_deg=180.0)
        trem_st = Tremolo(sample_rate=SR, depth=1.0, stereo_phase_deg=180.0)
        mono = np.full((1, 2000), 0.5, dtype=np.float32)
        stereo = np.full((2, 2000), 0.5, dtype=np.float32)
        trem_mono.process(mono)
        trem_st.process(stereo)
        npt.assert_allclose(mono[0], stereo[0], atol=1e-7)
        assert not np.allclose(stereo[0], stereo[1])

    def test_gain_follows_waveform(self):
        trem = Tremolo(sample_rate=SR, rate_hz=10.0, depth=0.8, shape="triangle")
        data = np.full((1, 4800), 0.5, dtype=np.float32)
        trem.process(data)
        phases = (np.arange(4800) * 10.0 / SR) % 1.0
        expected = 0.5 * (1.0 - 0.8 * render("triangle", phases))
        npt.assert_allclose(data[0], expected, atol=1e-5)

    def test_half_cycle_offset_is_complementary(self):
        trem = Tremolo(sample_rate=SR, rate_hz=3.0, depth=1.0, stereo_phase_deg=180.0)
        gain_l, gain_r = trem.gains(SR)
        # gain = 1 - lfo, so lfoL + lfoR == 1  <=>  gainL + gainR == 1
        npt.assert_allclose(gain_l + gain_r, 1.0, atol=1e-9)

    def test_block_size_does_not_change_result(self):
        a = _noise(frames=3000)
        b = a.copy()
        Tremolo(sample_rate=SR, rate_hz=4.0, depth=0.9, shape="square-soft").process(a)
        trem = Tremolo(sample_rate=SR, rate_hz=4.0, depth=0.9, shape="square-soft")
        for start in range(0, 3000, 128):
            trem.process(b[:, start : start + 128])
        npt.assert_array_equal(a, b)

    def test_depth_change_is_smoothed(self):
        trem = Tremolo(sample_rate=SR, rate_hz=1.0, depth=0.0)
        trem.set_depth(1.0)
        trem.gains(1)
        # one sample later the applied depth has barely moved
        assert trem.smoothed_depth < 0.01
        trem.gains(SR // 10)
        assert trem.smoothed_depth == pytest.approx(1.0, rel=0.01)

    def test_deterministic(self):
        a = _noise(frames=2048)
        b = a.copy()
        Tremolo(sample_rate=SR, rate_hz=6.0, depth=0.7).process(a)
        Tremolo(sample_rate=SR, rate_hz=6.0, depth=0.7).process(b)
        npt.assert_array_equal(a, b)


# ---------------------------------------------------------------------------
# Oscillator phase
# ---------------------------------------------------------------------------


class TestPhase:
    @pytest.mark.parametrize(
        "rate", [0.0001, 0.5, 5.0, 440.0, 24000.0, 1.0e6, float("inf")]
    )
    def test_phase_stays_in_unit_interval(self, rate):
        trem = Tremolo(sample_rate=SR, rate_hz=rate)
        for _ in range(20):
            trem.gains(257)
            assert 0.0 <= trem.phase < 1.0

    def test_phase_advances_by_rate(self):
        trem = Tremolo(sample_rate=SR, rate_hz=5.0)
        trem.gains(SR // 20)  # a quarter cycle at 5 Hz
        assert trem.phase == pytest.approx(0.25, abs=1e-6)

    def test_reset_rewinds(self):
        trem = Tremolo(sample_rate=SR)
        trem.gains(1000)
        trem.reset()
        assert trem.phase == 0.0


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


class TestEndToEnd:
    def test_five_hz_full_depth_has_five_minima(self):
        sr = 48000
        buf = AudioBuffer.sine(1000.0, frames=sr, sample_rate=sr, amplitude=0.8)
        trem = Tremolo(sample_rate=sr, rate_hz=5.0, depth=1.0, wet=1.0, shape="sine")
        trem.process(buf)

        # 1 ms windows hold exactly one carrier period
        env = np.abs(buf.data[0]).reshape(-1, 48).max(axis=1)
        assert env.max() == pytest.approx(0.8, rel=0.02)
        assert env.min() < 0.01 * env.max()

        below = env < 0.1 * env.max()
        troughs = np.count_nonzero(below[1:] & ~below[:-1]) + int(below[0])
        assert troughs == 5

    def test_five_hz_gain_curve_minima(self):
        trem = Tremolo(sample_rate=SR, rate_hz=5.0, depth=1.0)
        gain_l, _ = trem.gains(SR)
        interior = gain_l[1:-1]
        minima = (interior < gain_l[:-2]) & (interior <= gain_l[2:])
        assert np.count_nonzero(minima) == 5
        assert gain_l.min() == pytest.approx(0.0, abs=1e-6)
        assert gain_l.max() == pytest.approx(1.0, abs=1e-6)
