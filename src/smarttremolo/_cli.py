"""Tempo-sync parsing and parameter validation for the CLI."""

from __future__ import annotations

# Beats per LFO cycle for each supported note division
RATE_SYNC_DIVISIONS: dict[str, float] = {
    "1": 4.0,
    "1/2": 2.0,
    "1/4": 1.0,
    "1/8": 0.5,
    "1/16": 0.25,
}


# ---------------------------------------------------------------------------
# Tempo sync
# ---------------------------------------------------------------------------


def parse_rate_sync(text: str) -> tuple[float, str] | None:
    """Parse a ``'bpm:120,div:1/8'`` string into ``(bpm, division)``.

    Returns None when the string is malformed.
    """
    if not text:
        return None
    p1 = text.find("bpm:")
    p2 = text.find(",div:")
    if p1 < 0 or p2 < 0 or p2 <= p1:
        return None
    try:
        bpm = float(text[p1 + 4 : p2])
    except ValueError:
        return None
    if not bpm > 0:
        return None
    return bpm, text[p2 + 5 :].strip()


def division_to_hz(bpm: float, division: str) -> float | None:
    """LFO rate for one cycle per *division* at *bpm*; None if unsupported."""
    beats = RATE_SYNC_DIVISIONS.get(division)
    if beats is None:
        return None
    return (bpm / 60.0) / beats


def resolve_rate_sync(text: str) -> tuple[float | None, str]:
    """Turn a rate-sync string into ``(rate_hz, message)``.

    *rate_hz* is None when the string cannot be used; *message* then says
    why, otherwise it describes the resolved rate.
    """
    parsed = parse_rate_sync(text)
    if parsed is None:
        return None, (
            f"Bad --rate-sync format {text!r}. Expected bpm:120,div:1/8 (ignored)"
        )
    bpm, division = parsed
    hz = division_to_hz(bpm, division)
    if hz is None:
        supported = ", ".join(RATE_SYNC_DIVISIONS)
        return None, (
            f"Unsupported division: {division!r} (ignored). Supported: {supported}"
        )
    return hz, f"rate-sync: bpm={bpm:g} div={division} -> rate={hz:g} Hz"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_params(
    rate: float,
    depth: float,
    wet: float,
    stereo_phase: float,
) -> list[str]:
    """Return a message for every out-of-range parameter (empty if all good)."""
    errors: list[str] = []
    if not rate > 0.0:
        errors.append(f"rate must be > 0, got {rate}")
    if not 0.0 <= depth <= 1.0:
        errors.append(f"depth must be in [0, 1], got {depth}")
    if not 0.0 <= wet <= 1.0:
        errors.append(f"wet must be in [0, 1], got {wet}")
    if not 0.0 <= stereo_phase <= 180.0:
        errors.append(f"stereophase must be in [0, 180], got {stereo_phase}")
    return errors
