from __future__ import annotations

import logging
import random as _random
from dataclasses import dataclass, field
from typing import List, Optional

from .placement import SkipReport, TrackPlan, schedule_track
from .resolver import EffectiveParameters
from .structures import CHANNEL_MODES

logger = logging.getLogger(__name__)


def output_channel_count(channel_mode: int) -> int:
    if not channel_mode:
        return CHANNEL_MODES[0]
    return CHANNEL_MODES.get(int(channel_mode), CHANNEL_MODES[0])


def channel_rng(rng: Optional[_random.Random] = None) -> _random.Random:
    """Independent stream derived from the parent stream."""
    rng = rng or _random
    return _random.Random(rng.getrandbits(64))


@dataclass
class ContainerPlan:
    container_name: str
    tracks: List[TrackPlan] = field(default_factory=list)
    skips: SkipReport = field(default_factory=SkipReport)

    @property
    def multichannel(self) -> bool:
        return len(self.tracks) > 1

    @property
    def event_count(self) -> int:
        return sum(len(t.events) for t in self.tracks)


def warn_skipped(plan: ContainerPlan) -> None:
    if plan.skips.count <= 0:
        return
    logger.warning(
        "%d item(s) skipped in container '%s': too short for the requested overlap; "
        "minimum required item length %.2f s",
        plan.skips.count,
        plan.container_name,
        plan.skips.min_required_length,
    )


def plan_container(
    params: EffectiveParameters,
    window_start: float,
    window_end: float,
    rng: Optional[_random.Random] = None,
    crossfade_shape: int = 0,
) -> ContainerPlan:
    """Plan every output track of a container.

    Stereo containers get one track on the shared stream. Multichannel
    containers schedule each output channel on its own stream, so asset
    picks, positions and drift differ per channel.
    """
    plan = ContainerPlan(container_name=params.container_name)
    if params.channel_mode > 0:
        for channel in range(output_channel_count(params.channel_mode)):
            track = schedule_track(
                params,
                window_start,
                window_end,
                rng=channel_rng(rng),
                channel_index=channel,
                crossfade_shape=crossfade_shape,
            )
            plan.tracks.append(track)
    else:
        plan.tracks.append(
            schedule_track(params, window_start, window_end, rng=rng, channel_index=0, crossfade_shape=crossfade_shape)
        )

    for track in plan.tracks:
        plan.skips.merge(track.skips)
    warn_skipped(plan)
    logger.debug("planned %d event(s) on %d track(s) for '%s'", plan.event_count, len(plan.tracks), plan.container_name)
    return plan
