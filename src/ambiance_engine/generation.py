"""Generation passes: plan placements, then apply them to a timeline host.

Planning (`plan_for`) is pure. Application (`apply_plan`) is best-effort:
a failing host call is logged and counted, and the pass carries on with
the remaining work. Every public pass runs inside one host batch, which
the host releases on every exit path.
"""

from __future__ import annotations

import csv
import logging
import os
import random as _random
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, List, Optional, Tuple

from .errors import AmbianceError, HostMutationFailure, validate_window
from .fanout import ContainerPlan, plan_container
from .host import TimelineHost
from .randomize import db_to_linear
from .resolver import EffectiveParameters, resolve_parameters
from .structures import Container, Group, PitchMode

logger = logging.getLogger(__name__)

LOG_FIELDS = [
    "group",
    "container",
    "channel",
    "asset",
    "start",
    "length",
    "pitch",
    "volume",
    "pan",
    "fade_in",
    "fade_out",
]


@dataclass
class GenerationContext:
    """Everything a generation pass needs, passed explicitly to each call."""

    host: TimelineHost
    groups: List[Group] = field(default_factory=list)
    rng: Optional[_random.Random] = None
    crossfade_shape: int = 0


@dataclass
class ContainerResult:
    group_name: str
    container_name: str
    events_planned: int = 0
    events_placed: int = 0  # items the host actually created
    skipped_count: int = 0
    min_required_length: float = 0.0
    host_failures: int = 0
    error: Optional[str] = None
    plan: Optional[ContainerPlan] = None


@dataclass
class GenerationResult:
    containers: List[ContainerResult] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return sum(c.skipped_count for c in self.containers)

    @property
    def min_required_length(self) -> float:
        return max((c.min_required_length for c in self.containers), default=0.0)

    @property
    def events_planned(self) -> int:
        return sum(c.events_planned for c in self.containers)

    @property
    def events_placed(self) -> int:
        return sum(c.events_placed for c in self.containers)

    @property
    def host_failures(self) -> int:
        return sum(c.host_failures for c in self.containers)

    @property
    def errors(self) -> List[str]:
        return [c.error for c in self.containers if c.error]

    def extend(self, other: "GenerationResult") -> None:
        self.containers.extend(other.containers)


class _Applier:
    """Runs host calls, turning failures into logged, counted HostMutationFailures."""

    def __init__(self, host: TimelineHost) -> None:
        self.host = host
        self.failures = 0

    def call(self, operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except Exception as e:  # host errors must not abort the batch
            self.failures += 1
            logger.warning("%s", HostMutationFailure(operation, e))
            return None


def plan_for(
    group: Optional[Group],
    container: Container,
    window_start: float,
    window_end: float,
    rng: Optional[_random.Random] = None,
    crossfade_shape: int = 0,
) -> ContainerPlan:
    params = resolve_parameters(group, container)
    return plan_container(params, window_start, window_end, rng=rng, crossfade_shape=crossfade_shape)


def apply_plan(
    host: TimelineHost,
    group_name: str,
    params: EffectiveParameters,
    plan: ContainerPlan,
) -> Tuple[int, int]:
    """Write a container plan to the host.

    Returns `(items_created, failed_host_calls)`. A track that cannot be
    looked up is counted as one failure and its events are not written.
    """
    applier = _Applier(host)
    created = 0
    container_track = applier.call("track_for", host.track_for, group_name, params.container_name)
    if container_track is None:
        return created, applier.failures
    applier.call("set_track_volume", host.set_track_volume, container_track, db_to_linear(params.track_volume_db))

    for track_plan in plan.tracks:
        track: Hashable = container_track
        if plan.multichannel:
            track = applier.call(
                "track_for", host.track_for, group_name, params.container_name, track_plan.channel_index
            )
            if track is None:
                continue
        applier.call("clear_items", host.clear_items, track)

        handles: List[Any] = []
        for event in track_plan.events:
            item = applier.call("create_item", host.create_item, track, event.asset, event.start_time, event.length)
            handles.append(item)
            if item is None:
                continue
            created += 1
            applier.call("set_item_gain", host.set_item_gain, item, event.volume)
            if params.pitch_mode == PitchMode.STRETCH:
                applier.call("set_item_playrate", host.set_item_playrate, item, event.playrate)
            else:
                applier.call("set_item_pitch", host.set_item_pitch, item, event.pitch)
            applier.call("set_item_pan", host.set_item_pan, item, event.pan)
            if event.fade_in is not None or event.fade_out is not None:
                applier.call(
                    "set_item_fades",
                    host.set_item_fades,
                    item,
                    event.fade_in or 0.0,
                    event.fade_in_shape,
                    event.fade_in_curve,
                    event.fade_out or 0.0,
                    event.fade_out_shape,
                    event.fade_out_curve,
                )

        for request in track_plan.crossfades:
            first, second = handles[request.first], handles[request.second]
            if first is None or second is None:
                continue
            applier.call("create_crossfade", host.create_crossfade, first, second, request.shape, request.length)

    return created, applier.failures


def _generate_one(
    ctx: GenerationContext,
    group: Group,
    container: Container,
    window_start: float,
    window_end: float,
) -> ContainerResult:
    result = ContainerResult(group_name=group.name, container_name=container.name)
    try:
        params = resolve_parameters(group, container)
        plan = plan_container(params, window_start, window_end, rng=ctx.rng, crossfade_shape=ctx.crossfade_shape)
    except AmbianceError as e:
        logger.warning("container '%s' in group '%s' not generated: %s", container.name, group.name, e)
        result.error = str(e)
        return result

    result.plan = plan
    result.skipped_count = plan.skips.count
    result.min_required_length = plan.skips.min_required_length
    result.events_planned = plan.event_count
    result.events_placed, result.host_failures = apply_plan(ctx.host, group.name, params, plan)
    return result


def generate_container(
    ctx: GenerationContext,
    window_start: float,
    window_end: float,
    group: Group,
    container: Container,
) -> GenerationResult:
    """Regenerate one container of a group over [window_start, window_end)."""
    validate_window(window_start, window_end)
    with ctx.host.batch(f"Regenerate container '{container.name}' in group '{group.name}'"):
        result = GenerationResult([_generate_one(ctx, group, container, window_start, window_end)])
    logger.info("container '%s': %d event(s), %d skipped", container.name, result.events_placed, result.skipped_count)
    return result


def _generate_group_unbatched(ctx: GenerationContext, window_start: float, window_end: float, group: Group) -> GenerationResult:
    result = GenerationResult()
    for container in group.containers:
        result.containers.append(_generate_one(ctx, group, container, window_start, window_end))
    return result


def generate_group(ctx: GenerationContext, window_start: float, window_end: float, group: Group) -> GenerationResult:
    """Regenerate every container of a group; the result carries the skip summary."""
    validate_window(window_start, window_end)
    with ctx.host.batch(f"Regenerate group '{group.name}'"):
        result = _generate_group_unbatched(ctx, window_start, window_end, group)
    logger.info("group '%s': %d event(s), %d skipped", group.name, result.events_placed, result.skipped_count)
    return result


def generate_project(ctx: GenerationContext, window_start: float, window_end: float) -> GenerationResult:
    validate_window(window_start, window_end)
    result = GenerationResult()
    with ctx.host.batch("Generate all groups"):
        for group in ctx.groups:
            result.extend(_generate_group_unbatched(ctx, window_start, window_end, group))
    logger.info(
        "generated %d group(s): %d event(s), %d skipped, %d host failure(s)",
        len(ctx.groups),
        result.events_placed,
        result.skipped_count,
        result.host_failures,
    )
    return result


def write_placement_log(log_path: str, result: GenerationResult) -> None:
    """CSV with one row per planned event."""
    directory = os.path.dirname(log_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(log_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=LOG_FIELDS)
        writer.writeheader()
        for c in result.containers:
            if c.plan is None:
                continue
            for track in c.plan.tracks:
                for ev in track.events:
                    writer.writerow({
                        "group": c.group_name,
                        "container": c.container_name,
                        "channel": ev.channel_index,
                        "asset": ev.asset.name,
                        "start": round(ev.start_time, 6),
                        "length": round(ev.length, 6),
                        "pitch": round(ev.pitch, 4),
                        "volume": round(ev.volume, 6),
                        "pan": round(ev.pan, 4),
                        "fade_in": "" if ev.fade_in is None else round(ev.fade_in, 6),
                        "fade_out": "" if ev.fade_out is None else round(ev.fade_out, 6),
                    })
