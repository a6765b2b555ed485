from __future__ import annotations

import math
import random as _random
from dataclasses import dataclass
from typing import Optional

from .resolver import EffectiveParameters
from .structures import PitchMode, SoundAsset, ValueRange, VariationDirection

MUTE_DB = -60.0


def random_in_range(lo: float, hi: float, rng: Optional[_random.Random] = None) -> float:
    rng = rng or _random
    return lo + rng.random() * (hi - lo)


def directional_variation(
    base: float,
    percent: float,
    direction: VariationDirection = VariationDirection.BIPOLAR,
    rng: Optional[_random.Random] = None,
) -> float:
    """Draw a signed variation of at most `base * percent / 100`.

    BIPOLAR draws from [-r, r], NEGATIVE from [-r, 0], POSITIVE from [0, r].
    """
    if percent <= 0:
        return 0.0
    rng = rng or _random
    r = base * (percent / 100.0)
    if direction == VariationDirection.NEGATIVE:
        return -rng.random() * r
    if direction == VariationDirection.POSITIVE:
        return rng.random() * r
    return random_in_range(-r, r, rng)


def db_to_gain(db: float) -> float:
    return 10.0 ** (db / 20.0)


def db_to_linear(db: float) -> float:
    """Track volume conversion; anything at or below -60 dB is silence."""
    if db <= MUTE_DB or math.isinf(db):
        return 0.0
    return db_to_gain(db)


def semitones_to_playrate(semitones: float) -> float:
    return 2.0 ** (semitones / 12.0)


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


@dataclass(frozen=True)
class InstanceAttributes:
    pitch: float
    volume: float
    pan: float
    playrate: float = 1.0


def sample_pitch(params: EffectiveParameters, asset: SoundAsset, rng: Optional[_random.Random] = None) -> float:
    if not params.randomize_pitch:
        return asset.original_pitch
    r: ValueRange = params.pitch_range
    return asset.original_pitch + random_in_range(r.min, r.max, rng)


def sample_volume(params: EffectiveParameters, asset: SoundAsset, rng: Optional[_random.Random] = None) -> float:
    volume = asset.original_volume * db_to_gain(asset.gain_db)
    if not params.randomize_volume:
        return volume
    r = params.volume_range
    return volume * db_to_gain(random_in_range(r.min, r.max, rng))


def sample_pan(params: EffectiveParameters, asset: SoundAsset, rng: Optional[_random.Random] = None) -> float:
    if not params.randomize_pan:
        return asset.original_pan
    r = params.pan_range
    offset = random_in_range(r.min, r.max, rng) / 100.0
    return clamp(asset.original_pan + offset, -1.0, 1.0)


def sample_attributes(
    params: EffectiveParameters,
    asset: SoundAsset,
    rng: Optional[_random.Random] = None,
) -> InstanceAttributes:
    """Draw pitch, volume and pan for one placed instance.

    Each axis is gated by its own randomize flag; a disabled axis passes the
    asset's original value through. STRETCH pitch mode also reports the
    playrate matching the pitch.
    """
    pitch = sample_pitch(params, asset, rng)
    volume = sample_volume(params, asset, rng)
    pan = sample_pan(params, asset, rng)
    playrate = semitones_to_playrate(pitch) if params.pitch_mode == PitchMode.STRETCH else 1.0
    return InstanceAttributes(pitch=pitch, volume=volume, pan=pan, playrate=playrate)
