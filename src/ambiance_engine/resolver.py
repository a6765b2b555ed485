from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Optional, Tuple, Union

from .structures import (
    Container,
    Group,
    IntervalMode,
    PitchMode,
    SharedSettings,
    SoundAsset,
    ValueRange,
    VariationDirection,
)

# Fields a non-overriding Container takes from its Group. Fade enable
# flags are handled separately (see _inherit_flag).
INHERITED_FIELDS: Tuple[str, ...] = (
    "randomize_pitch",
    "randomize_volume",
    "randomize_pan",
    "pitch_range",
    "volume_range",
    "pan_range",
    "pitch_mode",
    "trigger_rate",
    "trigger_drift",
    "trigger_drift_direction",
    "interval_mode",
    "chunk_duration",
    "chunk_silence",
    "chunk_duration_variation",
    "chunk_silence_variation",
    "chunk_duration_var_direction",
    "chunk_silence_var_direction",
    "fade_in_duration",
    "fade_out_duration",
    "fade_in_use_percentage",
    "fade_out_use_percentage",
    "fade_in_shape",
    "fade_out_shape",
    "fade_in_curve",
    "fade_out_curve",
)


@dataclass(frozen=True)
class EffectiveParameters:
    """Resolved settings for one generation pass of one Container."""

    container_name: str
    items: Tuple[SoundAsset, ...]
    channel_mode: int
    track_volume_db: float

    randomize_pitch: bool
    randomize_volume: bool
    randomize_pan: bool
    pitch_range: ValueRange
    volume_range: ValueRange
    pan_range: ValueRange
    pitch_mode: PitchMode

    trigger_rate: float
    trigger_drift: float
    trigger_drift_direction: VariationDirection
    interval_mode: IntervalMode

    chunk_duration: float
    chunk_silence: float
    chunk_duration_variation: float
    chunk_silence_variation: float
    chunk_duration_var_direction: VariationDirection
    chunk_silence_var_direction: VariationDirection

    fade_in_enabled: bool
    fade_out_enabled: bool
    fade_in_duration: float
    fade_out_duration: float
    fade_in_use_percentage: bool
    fade_out_use_percentage: bool
    fade_in_shape: int
    fade_out_shape: int
    fade_in_curve: float
    fade_out_curve: float


@dataclass(frozen=True)
class Own:
    """Container overrides its parent: every field comes from the Container."""

    container: Container


@dataclass(frozen=True)
class Inherited:
    """Container defers to its Group for the shared settings."""

    group: Group
    container: Container


Resolution = Union[Own, Inherited]


def resolution_for(group: Optional[Group], container: Container) -> Resolution:
    if container.override_parent or group is None:
        return Own(container)
    return Inherited(group, container)


def _shared_values(source: SharedSettings) -> dict:
    names = {f.name for f in fields(SharedSettings)}
    return {name: getattr(source, name) for name in names}


def _inherit_flag(container_value: Optional[bool], group_value: Optional[bool]) -> bool:
    if container_value is not None:
        return bool(container_value)
    if group_value is not None:
        return bool(group_value)
    return False


def _effective_from(container: Container, shared: dict) -> EffectiveParameters:
    params = EffectiveParameters(
        container_name=container.name,
        items=tuple(container.items),
        channel_mode=int(container.channel_mode or 0),
        track_volume_db=float(container.track_volume_db),
        **shared,
    )
    if params.channel_mode > 0 and params.randomize_pan:
        # channel identity replaces stereo pan
        params = replace(params, randomize_pan=False)
    return params


def resolve(resolution: Resolution) -> EffectiveParameters:
    if isinstance(resolution, Own):
        container = resolution.container
        shared = _shared_values(container)
        shared["fade_in_enabled"] = bool(container.fade_in_enabled)
        shared["fade_out_enabled"] = bool(container.fade_out_enabled)
        return _effective_from(container, shared)

    group, container = resolution.group, resolution.container
    shared = _shared_values(container)
    for name in INHERITED_FIELDS:
        shared[name] = getattr(group, name)
    shared["fade_in_enabled"] = _inherit_flag(container.fade_in_enabled, group.fade_in_enabled)
    shared["fade_out_enabled"] = _inherit_flag(container.fade_out_enabled, group.fade_out_enabled)
    return _effective_from(container, shared)


def resolve_parameters(group: Optional[Group], container: Container) -> EffectiveParameters:
    """Merge Container and Group settings into one EffectiveParameters value."""
    return resolve(resolution_for(group, container))
