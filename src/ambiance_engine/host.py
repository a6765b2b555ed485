from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Optional, Protocol, Set, Tuple

from .structures import SoundAsset


class HostError(RuntimeError):
    """Raised by a host when it cannot perform a timeline mutation."""


class TimelineHost(Protocol):
    """Project surface the generator writes placements into."""

    def track_for(self, group_name: str, container_name: str, channel: Optional[int] = None) -> Hashable: ...

    def clear_items(self, track: Hashable) -> None: ...

    def create_item(self, track: Hashable, asset: SoundAsset, start: float, length: float) -> Any: ...

    def set_item_gain(self, item: Any, value: float) -> None: ...

    def set_item_pitch(self, item: Any, value: float) -> None: ...

    def set_item_playrate(self, item: Any, value: float) -> None: ...

    def set_item_pan(self, item: Any, value: float) -> None: ...

    def set_item_fades(
        self,
        item: Any,
        in_len: float,
        in_shape: int,
        in_curve: float,
        out_len: float,
        out_shape: int,
        out_curve: float,
    ) -> None: ...

    def create_crossfade(self, first: Any, second: Any, shape: int, length: float) -> None: ...

    def set_track_volume(self, track: Hashable, linear: float) -> None: ...

    def batch(self, label: str) -> Any: ...


@dataclass
class RecordedItem:
    track: Hashable
    asset: SoundAsset
    start: float
    length: float
    gain: float = 1.0
    pitch: float = 0.0
    playrate: float = 1.0
    pan: float = 0.0
    fade_in: float = 0.0
    fade_out: float = 0.0
    fade_in_shape: int = 0
    fade_out_shape: int = 0
    fade_in_curve: float = 0.0
    fade_out_curve: float = 0.0

    @property
    def end(self) -> float:
        return self.start + self.length


@dataclass
class RecordingHost:
    """In-memory host; keeps every mutation so callers can inspect the result.

    `fail_on` names host operations (e.g. "set_item_pan") that raise
    HostError, for exercising best-effort application.
    """

    items: Dict[Hashable, List[RecordedItem]] = field(default_factory=dict)
    crossfades: List[Tuple[RecordedItem, RecordedItem, int, float]] = field(default_factory=list)
    track_volumes: Dict[Hashable, float] = field(default_factory=dict)
    batches: List[str] = field(default_factory=list)
    open_batches: int = 0
    fail_on: Set[str] = field(default_factory=set)

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise HostError(f"host refused {op}")

    def track_for(self, group_name: str, container_name: str, channel: Optional[int] = None) -> Hashable:
        if channel is None:
            return (group_name, container_name)
        return (group_name, container_name, channel)

    def clear_items(self, track: Hashable) -> None:
        self._check("clear_items")
        self.items[track] = []

    def create_item(self, track: Hashable, asset: SoundAsset, start: float, length: float) -> RecordedItem:
        self._check("create_item")
        item = RecordedItem(track=track, asset=asset, start=start, length=length)
        self.items.setdefault(track, []).append(item)
        return item

    def set_item_gain(self, item: RecordedItem, value: float) -> None:
        self._check("set_item_gain")
        item.gain = value

    def set_item_pitch(self, item: RecordedItem, value: float) -> None:
        self._check("set_item_pitch")
        item.pitch = value

    def set_item_playrate(self, item: RecordedItem, value: float) -> None:
        self._check("set_item_playrate")
        item.playrate = value

    def set_item_pan(self, item: RecordedItem, value: float) -> None:
        self._check("set_item_pan")
        item.pan = value

    def set_item_fades(self, item, in_len, in_shape, in_curve, out_len, out_shape, out_curve) -> None:
        self._check("set_item_fades")
        item.fade_in, item.fade_in_shape, item.fade_in_curve = in_len, in_shape, in_curve
        item.fade_out, item.fade_out_shape, item.fade_out_curve = out_len, out_shape, out_curve

    def create_crossfade(self, first: RecordedItem, second: RecordedItem, shape: int, length: float) -> None:
        self._check("create_crossfade")
        first.fade_out, first.fade_out_shape = length, shape
        second.fade_in, second.fade_in_shape = length, shape
        self.crossfades.append((first, second, shape, length))

    def set_track_volume(self, track: Hashable, linear: float) -> None:
        self._check("set_track_volume")
        self.track_volumes[track] = linear

    @contextmanager
    def batch(self, label: str) -> Iterator["RecordingHost"]:
        self.batches.append(label)
        self.open_batches += 1
        try:
            yield self
        finally:
            self.open_batches -= 1

    def all_items(self) -> List[RecordedItem]:
        out: List[RecordedItem] = []
        for track_items in self.items.values():
            out.extend(track_items)
        return out
