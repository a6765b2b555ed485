"""Group/Container configuration trees and the sound assets they reference.

Groups own an ordered list of Containers; Containers own the pool of
SoundAssets drawn during generation. Both carry the same randomization,
trigger, chunk and fade settings so a Container can either inherit
them from its Group or override them (see `resolver`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple


class IntervalMode(IntEnum):
    ABSOLUTE = 0
    RELATIVE = 1
    COVERAGE = 2
    CHUNK = 3
    NOISE = 4
    EUCLIDEAN = 5


class VariationDirection(IntEnum):
    NEGATIVE = 0
    BIPOLAR = 1
    POSITIVE = 2


class PitchMode(IntEnum):
    PITCH = 0
    STRETCH = 1


class FadeShape(IntEnum):
    LINEAR = 0
    FAST_START = 1
    FAST_END = 2
    FAST_START_END = 3
    SLOW_START_END = 4
    BEZIER = 5
    S_CURVE = 6


# channel_mode -> output channel count; 0 is plain stereo
CHANNEL_MODES: Dict[int, int] = {0: 2, 1: 4, 2: 5, 3: 7}

DEFAULT_TRIGGER_RATE = 10.0
DEFAULT_TRIGGER_DRIFT = 30.0
DEFAULT_CHUNK_DURATION = 10.0
DEFAULT_CHUNK_SILENCE = 5.0
DEFAULT_CHUNK_VARIATION = 20.0


@dataclass(frozen=True)
class ValueRange:
    min: float
    max: float


@dataclass(frozen=True)
class SoundArea:
    """Named sub-region [start, end) of an asset's source, in seconds."""

    name: str
    start: float
    end: float

    @property
    def length(self) -> float:
        return max(0.0, self.end - self.start)


@dataclass(frozen=True)
class SoundAsset:
    name: str
    file_path: str
    start_offset: float = 0.0
    length: float = 1.0
    original_pitch: float = 0.0
    original_volume: float = 1.0
    original_pan: float = 0.0
    channel_count: int = 2
    gain_db: float = 0.0
    areas: Tuple[SoundArea, ...] = ()


@dataclass
class SharedSettings:
    """Settings a Container may inherit from its Group."""

    randomize_pitch: bool = True
    randomize_volume: bool = True
    randomize_pan: bool = True
    pitch_range: ValueRange = field(default_factory=lambda: ValueRange(-3.0, 3.0))
    volume_range: ValueRange = field(default_factory=lambda: ValueRange(-3.0, 3.0))
    pan_range: ValueRange = field(default_factory=lambda: ValueRange(-100.0, 100.0))
    pitch_mode: PitchMode = PitchMode.PITCH

    trigger_rate: float = DEFAULT_TRIGGER_RATE  # negative values request overlap
    trigger_drift: float = DEFAULT_TRIGGER_DRIFT
    trigger_drift_direction: VariationDirection = VariationDirection.BIPOLAR
    interval_mode: IntervalMode = IntervalMode.ABSOLUTE

    chunk_duration: float = DEFAULT_CHUNK_DURATION
    chunk_silence: float = DEFAULT_CHUNK_SILENCE
    chunk_duration_variation: float = DEFAULT_CHUNK_VARIATION
    chunk_silence_variation: float = DEFAULT_CHUNK_VARIATION
    chunk_duration_var_direction: VariationDirection = VariationDirection.BIPOLAR
    chunk_silence_var_direction: VariationDirection = VariationDirection.BIPOLAR

    # None means "not set here"; see resolver for how the flag falls through
    fade_in_enabled: Optional[bool] = None
    fade_out_enabled: Optional[bool] = None
    fade_in_duration: float = 0.0
    fade_out_duration: float = 0.0
    fade_in_use_percentage: bool = False
    fade_out_use_percentage: bool = False
    fade_in_shape: int = FadeShape.LINEAR
    fade_out_shape: int = FadeShape.LINEAR
    fade_in_curve: float = 0.0
    fade_out_curve: float = 0.0


@dataclass
class Container(SharedSettings):
    name: str = "New Container"
    items: List[SoundAsset] = field(default_factory=list)
    override_parent: bool = False
    channel_mode: int = 0
    track_volume_db: float = 0.0


@dataclass
class Group(SharedSettings):
    name: str = "New Group"
    containers: List[Container] = field(default_factory=list)
    fade_in_enabled: Optional[bool] = True
    fade_out_enabled: Optional[bool] = True
    track_volume_db: float = 0.0
