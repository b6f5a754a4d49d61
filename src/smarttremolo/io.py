"""WAV file I/O for AudioBuffer.

Reads 8/16/24/32-bit PCM, writes 16/24-bit PCM, mono or stereo only
(stdlib ``wave``).  Structural problems fail fast with ``ValueError``.
"""

from __future__ import annotations

import wave
from pathlib import Path

import numpy as np

from smarttremolo.buffer import AudioBuffer


def read_wav(path: str | Path) -> AudioBuffer:
    """Read a WAV file and return an AudioBuffer.

    Supports 8-bit unsigned, 16-bit signed, 24-bit signed, and 32-bit signed PCM.
    Output is float32 normalized to [-1, 1].

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        On a malformed header, a non-PCM encoding, an unsupported sample
        width, or a channel count other than 1 or 2.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    try:
        with wave.open(str(path), "rb") as wf:
            n_channels = wf.getnchannels()
            sampwidth = wf.getsampwidth()
            sample_rate = wf.getframerate()
            n_frames = wf.getnframes()
            raw_bytes = wf.readframes(n_frames)
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Malformed or unsupported WAV file {path}: {e}") from e

    if n_channels not in (1, 2):
        raise ValueError(f"Unsupported channel count: {n_channels} (need 1 or 2)")

    n_frames = len(raw_bytes) // (sampwidth * n_channels) if sampwidth else 0
    raw_bytes = raw_bytes[: n_frames * sampwidth * n_channels]

    if sampwidth == 1:
        # 8-bit unsigned
        samples = np.frombuffer(raw_bytes, dtype=np.uint8).astype(np.float32)
        samples = (samples - 128.0) / 128.0
    elif sampwidth == 2:
        samples = np.frombuffer(raw_bytes, dtype="<i2").astype(np.float32)
        samples = samples / 32768.0
    elif sampwidth == 3:
        raw = np.frombuffer(raw_bytes, dtype=np.uint8).reshape(-1, 3)
        padded = np.zeros((len(raw), 4), dtype=np.uint8)
        padded[:, 0:3] = raw
        # Sign extend: if high bit of third byte is set, fill fourth byte
        padded[:, 3] = np.where(raw[:, 2] & 0x80, 0xFF, 0x00)
        samples = padded.view("<i4").flatten().astype(np.float32)
        samples = samples / 8388608.0
    elif sampwidth == 4:
        samples = np.frombuffer(raw_bytes, dtype="<i4").astype(np.float32)
        samples = samples / 2147483648.0
    else:
        raise ValueError(f"Unsupported sample width: {sampwidth} bytes")

    return AudioBuffer.from_interleaved(
        samples, channels=n_channels, sample_rate=sample_rate, label=path.stem
    )


def write_wav(
    path: str | Path,
    buf: AudioBuffer,
    bit_depth: int = 16,
) -> None:
    """Write an AudioBuffer to a WAV file.

    Parameters
    ----------
    path : str or Path
        Output file path.
    buf : AudioBuffer
        Audio data to write.
    bit_depth : int
        Output bit depth: 16 or 24.
    """
    if bit_depth not in (16, 24):
        raise ValueError(f"Unsupported bit_depth: {bit_depth} (use 16 or 24)")

    path = Path(path)
    sampwidth = bit_depth // 8

    interleaved = np.clip(buf.interleaved(), -1.0, 1.0)

    if bit_depth == 16:
        scaled = np.rint(interleaved * 32767.0).astype("<i2")
        raw_bytes = scaled.tobytes()
    else:
        scaled = np.rint(interleaved * 8388607.0).astype("<i4")
        # int32 -> view as uint8 -> take lower 3 bytes (little-endian)
        bytes_4 = scaled.view(np.uint8).reshape(-1, 4)
        raw_bytes = bytes_4[:, :3].tobytes()

    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(buf.channels)
        wf.setsampwidth(sampwidth)
        wf.setframerate(buf.sample_rate)
        wf.writeframes(raw_bytes)


_FORMAT_READERS = {
    ".wav": read_wav,
}

_FORMAT_WRITERS = {
    ".wav": write_wav,
}


def read(path: str | Path) -> AudioBuffer:
    """Read an audio file and return an AudioBuffer.

    Format is detected by file extension.
    """
    path = Path(path)
    ext = path.suffix.lower()
    reader = _FORMAT_READERS.get(ext)
    if reader is None:
        supported = ", ".join(sorted(_FORMAT_READERS))
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: {supported}")
    return reader(path)


def write(
    path: str | Path,
    buf: AudioBuffer,
    bit_depth: int = 16,
) -> None:
    """Write an AudioBuffer to an audio file.

    Format is detected by file extension.
    """
    path = Path(path)
    ext = path.suffix.lower()
    writer = _FORMAT_WRITERS.get(ext)
    if writer is None:
        supported = ", ".join(sorted(_FORMAT_WRITERS))
        raise ValueError(f"Unsupported audio format '{ext}'. Supported: {supported}")
    writer(path, buf, bit_depth=bit_depth)
