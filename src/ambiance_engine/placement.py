"""Placement scheduling: turns EffectiveParameters and a time window into
an ordered list of PlacementEvents for one target track.

The scheduler is pure: it never touches the timeline host. A cursor walks
the window from its start; every iteration either places one event (and
moves the cursor to that event's end) or skips an asset that is too short
for the requested overlap (and nudges the cursor by SKIP_STEP). The window
end is finite and the cursor always advances, so the loop halts.
"""

from __future__ import annotations

import logging
import random as _random
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .crossfade import CrossfadeRequest, link_crossfade
from .intervals import compute_interval
from .randomize import directional_variation, sample_attributes
from .resolver import EffectiveParameters
from .structures import IntervalMode, SoundAsset

logger = logging.getLogger(__name__)

SKIP_STEP = 0.1
MIN_CHUNK_ACTIVE = 0.1
MAX_ITEMS_PER_CHUNK = 1000


@dataclass
class PlacementEvent:
    asset: SoundAsset
    start_time: float
    length: float
    channel_index: int = 0
    pitch: float = 0.0
    volume: float = 1.0
    pan: float = 0.0
    playrate: float = 1.0
    fade_in: Optional[float] = None  # None: fade left untouched
    fade_out: Optional[float] = None
    fade_in_shape: int = 0
    fade_out_shape: int = 0
    fade_in_curve: float = 0.0
    fade_out_curve: float = 0.0

    @property
    def end(self) -> float:
        return self.start_time + self.length


@dataclass
class SkipReport:
    """Assets that could not honor a negative interval."""

    count: int = 0
    min_required_length: float = 0.0

    def record(self, required_length: float) -> None:
        self.count += 1
        if required_length > self.min_required_length:
            self.min_required_length = required_length

    def merge(self, other: "SkipReport") -> None:
        self.count += other.count
        self.min_required_length = max(self.min_required_length, other.min_required_length)


@dataclass
class TrackPlan:
    channel_index: int = 0
    events: List[PlacementEvent] = field(default_factory=list)
    crossfades: List[CrossfadeRequest] = field(default_factory=list)
    skips: SkipReport = field(default_factory=SkipReport)
    active_spans: List[Tuple[float, float]] = field(default_factory=list)
    interval: float = 0.0


def draw_asset(items: Sequence[SoundAsset], rng: Optional[_random.Random] = None) -> SoundAsset:
    """Uniformly pick an asset; assets with areas resolve to one random area."""
    rng = rng or _random
    asset = items[rng.randrange(len(items))]
    if asset.areas:
        area = asset.areas[rng.randrange(len(asset.areas))]
        asset = replace(asset, start_offset=area.start, length=area.length)
    return asset


def drift_offset(interval: float, params: EffectiveParameters, rng: Optional[_random.Random] = None) -> float:
    # trigger_drift % of |interval| is the full jitter width, centered on zero
    return directional_variation(abs(interval) * 0.5, params.trigger_drift, params.trigger_drift_direction, rng)


def resolve_fade(enabled: bool, duration: float, use_percentage: bool, length: float) -> Optional[float]:
    if not enabled:
        return None
    seconds = (duration / 100.0) * length if use_percentage else duration
    return max(0.0, min(seconds, length))


def build_event(
    params: EffectiveParameters,
    asset: SoundAsset,
    position: float,
    length: float,
    channel_index: int = 0,
    rng: Optional[_random.Random] = None,
) -> PlacementEvent:
    attrs = sample_attributes(params, asset, rng)
    return PlacementEvent(
        asset=asset,
        start_time=position,
        length=length,
        channel_index=channel_index,
        pitch=attrs.pitch,
        volume=attrs.volume,
        pan=attrs.pan,
        playrate=attrs.playrate,
        fade_in=resolve_fade(params.fade_in_enabled, params.fade_in_duration, params.fade_in_use_percentage, length),
        fade_out=resolve_fade(params.fade_out_enabled, params.fade_out_duration, params.fade_out_use_percentage, length),
        fade_in_shape=params.fade_in_shape,
        fade_out_shape=params.fade_out_shape,
        fade_in_curve=params.fade_in_curve,
        fade_out_curve=params.fade_out_curve,
    )


def schedule_range(
    params: EffectiveParameters,
    interval: float,
    range_start: float,
    range_end: float,
    plan: TrackPlan,
    rng: Optional[_random.Random] = None,
    crossfade_shape: int = 0,
    coverage: bool = False,
    in_chunk: bool = False,
    max_items: Optional[int] = None,
) -> TrackPlan:
    """Fill [range_start, range_end) with events, appending to `plan`.

    Absolute/Relative/Chunk spacing is measured from the end of the previous
    event. Coverage spacing is measured on an onset grid that starts at
    `range_start`; coverage events are pushed back to the previous end
    instead of overlapping it.
    """
    rng = rng or _random
    if not params.items or range_end <= range_start:
        return plan

    range_length = range_end - range_start
    cursor = range_start
    grid = range_start
    prior_index: Optional[int] = None
    is_first = True
    attempts = 0

    while cursor < range_end:
        if max_items is not None and attempts >= max_items:
            logger.debug("chunk item cap %d reached for '%s'", max_items, params.container_name)
            break
        attempts += 1

        asset = draw_asset(params.items, rng)
        if asset.length <= 0:
            cursor += SKIP_STEP
            continue

        if interval < 0 and asset.length < abs(interval):
            plan.skips.record(abs(interval))
            cursor += SKIP_STEP
            continue

        if coverage:
            ideal = grid
            if params.trigger_drift > 0 and interval > 0:
                ideal += drift_offset(interval, params, rng)
            position = max(ideal, cursor, range_start)
        elif is_first and interval > 0:
            span = min(interval, range_length) if in_chunk else interval
            position = range_start + rng.random() * span
        elif is_first and in_chunk:
            position = range_start
        else:
            position = cursor + interval + drift_offset(interval, params, rng)
            position = max(position, range_start)

        if position >= range_end:
            break

        length = min(asset.length, range_end - position)
        event = build_event(params, asset, position, length, plan.channel_index, rng)
        plan.events.append(event)
        index = len(plan.events) - 1

        prior_end = plan.events[prior_index].end if prior_index is not None else cursor
        request = link_crossfade(prior_index, index, event, prior_end, crossfade_shape)
        if request is not None:
            plan.crossfades.append(request)

        # the cursor never stalls, even when an overlap exactly cancels the item length
        cursor = max(position + length, cursor + SKIP_STEP)
        grid += interval
        prior_index = index
        is_first = False

    return plan


def chunk_spans(
    params: EffectiveParameters,
    window_start: float,
    window_end: float,
    rng: Optional[_random.Random] = None,
) -> List[Tuple[float, float]]:
    """Active spans of chunk mode, each with jittered active and silence lengths."""
    rng = rng or _random
    spans: List[Tuple[float, float]] = []
    cursor = window_start
    while cursor < window_end:
        active = params.chunk_duration * (
            1 + directional_variation(1.0, params.chunk_duration_variation, params.chunk_duration_var_direction, rng)
        )
        active = max(MIN_CHUNK_ACTIVE, active)
        silence = params.chunk_silence * (
            1 + directional_variation(1.0, params.chunk_silence_variation, params.chunk_silence_var_direction, rng)
        )
        silence = max(0.0, silence)

        chunk_end = min(cursor + active, window_end)
        if chunk_end > cursor:
            spans.append((cursor, chunk_end))
        cursor += active + silence
    return spans


def schedule_chunks(
    params: EffectiveParameters,
    interval: float,
    window_start: float,
    window_end: float,
    plan: TrackPlan,
    rng: Optional[_random.Random] = None,
    crossfade_shape: int = 0,
) -> TrackPlan:
    for start, end in chunk_spans(params, window_start, window_end, rng):
        plan.active_spans.append((start, end))
        schedule_range(
            params,
            interval,
            start,
            end,
            plan,
            rng=rng,
            crossfade_shape=crossfade_shape,
            in_chunk=True,
            max_items=MAX_ITEMS_PER_CHUNK,
        )
    return plan


def schedule_track(
    params: EffectiveParameters,
    window_start: float,
    window_end: float,
    rng: Optional[_random.Random] = None,
    channel_index: int = 0,
    crossfade_shape: int = 0,
) -> TrackPlan:
    """Plan one track's events over [window_start, window_end)."""
    plan = TrackPlan(channel_index=channel_index)
    if not params.items:
        return plan

    interval = compute_interval(params, window_end - window_start)
    plan.interval = interval
    mode = IntervalMode(params.interval_mode)
    if mode == IntervalMode.CHUNK:
        return schedule_chunks(params, interval, window_start, window_end, plan, rng, crossfade_shape)
    return schedule_range(
        params,
        interval,
        window_start,
        window_end,
        plan,
        rng=rng,
        crossfade_shape=crossfade_shape,
        coverage=mode == IntervalMode.COVERAGE,
    )
