from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, List

from mido import Message, MetaMessage, MidiFile, MidiTrack, bpm2tempo

from .host import RecordedItem, RecordingHost
from .timebase import seconds_to_ticks

PREVIEW_PPQ = 960
PREVIEW_BPM = 120.0
BASE_NOTE = 60


def _clamp_int(v: float, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(round(v))))


def item_note(item: RecordedItem, base_note: int = BASE_NOTE) -> int:
    return _clamp_int(base_note + item.pitch, 0, 127)


def item_velocity(item: RecordedItem) -> int:
    return _clamp_int(100 * item.gain, 1, 127)


def item_pan_cc(item: RecordedItem) -> int:
    return _clamp_int((item.pan + 1.0) * 63.5, 0, 127)


def _track_name(track: Hashable) -> str:
    if isinstance(track, tuple):
        return "/".join(str(p) for p in track)
    return str(track)


def write_preview_midi(
    items_by_track: Dict[Hashable, List[RecordedItem]],
    out_path: str,
    ppq: int = PREVIEW_PPQ,
    bpm: float = PREVIEW_BPM,
    base_note: int = BASE_NOTE,
) -> None:
    """
    Write a type-1 MIDI sketch of placed items, one MIDI track per timeline track.
    Steps:
      - tempo meta on a conductor track
      - per track: pan CC + note_on at item start, note_off at item end
      - sort by (tick, note_off before note_on) and delta-encode
    """
    mid = MidiFile(type=1)
    mid.ticks_per_beat = int(ppq)

    conductor = MidiTrack()
    mid.tracks.append(conductor)
    conductor.append(MetaMessage("set_tempo", tempo=bpm2tempo(bpm), time=0))

    for idx, (track, items) in enumerate(items_by_track.items()):
        channel = idx % 16
        out = MidiTrack()
        mid.tracks.append(out)
        out.append(MetaMessage("track_name", name=_track_name(track), time=0))

        msgs = []
        for item in items:
            start = seconds_to_ticks(item.start, ppq, bpm)
            end = max(start + 1, seconds_to_ticks(item.end, ppq, bpm))
            note = item_note(item, base_note)
            msgs.append((start, 1, Message("control_change", control=10, value=item_pan_cc(item), channel=channel, time=0)))
            msgs.append((start, 2, Message("note_on", note=note, velocity=item_velocity(item), channel=channel, time=0)))
            msgs.append((end, 0, Message("note_off", note=note, velocity=0, channel=channel, time=0)))

        msgs.sort(key=lambda t: (t[0], t[1]))

        last_t = 0
        for abs_t, _prio, msg in msgs:
            msg.time = max(0, abs_t - last_t)
            out.append(msg)
            last_t = abs_t

    mid.save(out_path)


@dataclass
class MidiPreviewHost(RecordingHost):
    """Recording host that can render what it received as a MIDI file."""

    ppq: int = PREVIEW_PPQ
    bpm: float = PREVIEW_BPM
    base_note: int = BASE_NOTE

    def save(self, out_path: str) -> None:
        tracks = {track: items for track, items in self.items.items() if items}
        write_preview_midi(tracks, out_path, ppq=self.ppq, bpm=self.bpm, base_note=self.base_note)
