from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .placement import PlacementEvent


@dataclass(frozen=True)
class CrossfadeRequest:
    """Crossfade between two events of the same track, by index in its event list."""

    first: int
    second: int
    shape: int
    length: float


def overlap_length(prior_end: float, event: "PlacementEvent") -> float:
    return max(0.0, prior_end - event.start_time)


def link_crossfade(
    prior_index: Optional[int],
    new_index: int,
    event: "PlacementEvent",
    prior_end: float,
    shape: int = 0,
) -> Optional[CrossfadeRequest]:
    """Pair the new event with the previous one when it starts before `prior_end`.

    `prior_end` is where the previous event actually ends, which can sit
    before the scheduler cursor. A true gap needs no crossfade.
    """
    if prior_index is None:
        return None
    if event.start_time >= prior_end:
        return None
    return CrossfadeRequest(
        first=prior_index,
        second=new_index,
        shape=int(shape),
        length=overlap_length(prior_end, event),
    )
