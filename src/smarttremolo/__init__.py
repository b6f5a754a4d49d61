"""
smarttremolo - tremolo effect with smoothed LFO and feature feedback.

Submodules:
    smarttremolo.buffer    - AudioBuffer (planar float32 samples + metadata)
    smarttremolo.smoothing - One-pole parameter smoother
    smarttremolo.lfo       - LFO waveform generators
    smarttremolo.tremolo   - Tremolo engine
    smarttremolo.features  - Sliding-window RMS / zero-crossing features
    smarttremolo.control   - Controller interface and stock controllers
    smarttremolo.stream    - Block-streaming processor tying it all together
    smarttremolo.io        - WAV file I/O
"""

from smarttremolo.buffer import AudioBuffer
from smarttremolo.control import (
    CallbackController,
    Controller,
    LoudnessFollower,
    NoOpController,
)
from smarttremolo.features import FeatureExtractor
from smarttremolo.smoothing import OnePoleSmoother
from smarttremolo.stream import DemoRamp, StreamProcessor, process_buffer
from smarttremolo.tremolo import Tremolo
from smarttremolo import io, lfo

__all__ = [
    "AudioBuffer",
    "CallbackController",
    "Controller",
    "DemoRamp",
    "FeatureExtractor",
    "LoudnessFollower",
    "NoOpController",
    "OnePoleSmoother",
    "StreamProcessor",
    "Tremolo",
    "io",
    "lfo",
    "process_buffer",
]
__version__ = "0.1.0"
