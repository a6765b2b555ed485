from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, Dict, List, Optional, Type

from .errors import ConfigurationError
from .structures import (
    Container,
    Group,
    IntervalMode,
    PitchMode,
    SharedSettings,
    SoundArea,
    SoundAsset,
    ValueRange,
    VariationDirection,
)


@dataclass
class ProjectConfig:
    window_start: float = 0.0
    window_end: float = 60.0
    seed: Optional[int] = None
    out: str = "out/ambiance.mid"
    log_path: Optional[str] = None
    crossfade_shape: int = 0
    groups: List[Group] = field(default_factory=list)


def _snake(key: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", key).lower()


def _normalise_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    # camelCase keys from preset trees map onto the snake_case field names
    return {_snake(k): v for k, v in d.items()}


def _enum(cls: Type[IntEnum], value: Any, what: str) -> IntEnum:
    try:
        if isinstance(value, str):
            return cls[value.strip().upper()]
        return cls(int(value))
    except (KeyError, ValueError, TypeError) as e:
        raise ConfigurationError(f"invalid {what}: {value!r}") from e


def _range(value: Any, what: str) -> ValueRange:
    if isinstance(value, dict):
        return ValueRange(float(value.get("min", 0.0)), float(value.get("max", 0.0)))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return ValueRange(float(value[0]), float(value[1]))
    raise ConfigurationError(f"invalid {what}: {value!r}")


_ENUM_FIELDS = {
    "interval_mode": IntervalMode,
    "pitch_mode": PitchMode,
    "trigger_drift_direction": VariationDirection,
    "chunk_duration_var_direction": VariationDirection,
    "chunk_silence_var_direction": VariationDirection,
}
_RANGE_FIELDS = ("pitch_range", "volume_range", "pan_range")
_BOOL_FIELDS = (
    "randomize_pitch",
    "randomize_volume",
    "randomize_pan",
    "fade_in_use_percentage",
    "fade_out_use_percentage",
)
_TRISTATE_FIELDS = ("fade_in_enabled", "fade_out_enabled")


def _shared_kwargs(d: Dict[str, Any]) -> Dict[str, Any]:
    kw: Dict[str, Any] = {}
    for f in fields(SharedSettings):
        name = f.name
        if name not in d:
            continue
        value = d[name]
        if name in _ENUM_FIELDS:
            kw[name] = _enum(_ENUM_FIELDS[name], value, name)
        elif name in _RANGE_FIELDS:
            kw[name] = _range(value, name)
        elif name in _BOOL_FIELDS:
            kw[name] = bool(value)
        elif name in _TRISTATE_FIELDS:
            kw[name] = None if value is None else bool(value)
        elif name in ("fade_in_shape", "fade_out_shape"):
            kw[name] = int(value)
        else:
            try:
                kw[name] = float(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"invalid {name}: {value!r}") from e
    return kw


def _area_from_dict(raw: Dict[str, Any]) -> SoundArea:
    d = _normalise_keys(raw)
    start = float(d.get("start", d.get("start_pos", 0.0)))
    end = float(d.get("end", d.get("end_pos", start)))
    return SoundArea(name=str(d.get("name", "area")), start=start, end=end)


def asset_from_dict(raw: Dict[str, Any]) -> SoundAsset:
    d = _normalise_keys(raw)
    if "file_path" not in d:
        raise ConfigurationError(f"asset {d.get('name', '?')!r} has no file_path")
    return SoundAsset(
        name=str(d.get("name", d["file_path"])),
        file_path=str(d["file_path"]),
        start_offset=float(d.get("start_offset", 0.0)),
        length=float(d.get("length", 1.0)),
        original_pitch=float(d.get("original_pitch", 0.0)),
        original_volume=float(d.get("original_volume", 1.0)),
        original_pan=float(d.get("original_pan", 0.0)),
        channel_count=int(d.get("channel_count", d.get("num_channels", 2))),
        gain_db=float(d.get("gain_db", 0.0)),
        areas=tuple(_area_from_dict(a) for a in d.get("areas", []) or []),
    )


def container_from_dict(raw: Dict[str, Any]) -> Container:
    d = _normalise_keys(raw)
    kw = _shared_kwargs(d)
    # containers inherit their fade switches unless they set them explicitly
    kw.setdefault("fade_in_enabled", None)
    kw.setdefault("fade_out_enabled", None)
    return Container(
        name=str(d.get("name", "New Container")),
        items=[asset_from_dict(a) for a in d.get("items", []) or []],
        override_parent=bool(d.get("override_parent", False)),
        channel_mode=int(d.get("channel_mode", 0) or 0),
        track_volume_db=float(d.get("track_volume", d.get("track_volume_db", 0.0))),
        **kw,
    )


def group_from_dict(raw: Dict[str, Any]) -> Group:
    d = _normalise_keys(raw)
    kw = _shared_kwargs(d)
    return Group(
        name=str(d.get("name", "New Group")),
        containers=[container_from_dict(c) for c in d.get("containers", []) or []],
        track_volume_db=float(d.get("track_volume", d.get("track_volume_db", 0.0))),
        **kw,
    )


def project_config_from_dict(raw: Dict[str, Any]) -> ProjectConfig:
    d = _normalise_keys(raw)
    window = _normalise_keys(d.get("window", {}) or {})
    seed = d.get("seed")
    return ProjectConfig(
        window_start=float(window.get("start", d.get("start_time", 0.0))),
        window_end=float(window.get("end", d.get("end_time", 60.0))),
        seed=None if seed is None else int(seed),
        out=str(d.get("out", "out/ambiance.mid")),
        log_path=d.get("log_path"),
        crossfade_shape=int(d.get("crossfade_shape", 0)),
        groups=[group_from_dict(g) for g in d.get("groups", []) or []],
    )


def load_project_config(path: str) -> ProjectConfig:
    with open(path, "r") as f:
        raw = json.load(f)
    return project_config_from_dict(raw)
