"""Seconds <-> MIDI tick conversion for the preview renderer."""

from __future__ import annotations


def ticks_per_second(ppq: int, bpm: float) -> float:
    # a quarter note lasts 60/bpm seconds and holds ppq ticks
    return (ppq * bpm) / 60.0


def seconds_to_ticks(seconds: float, ppq: int, bpm: float) -> int:
    """Timeline seconds to the nearest whole tick."""
    return int(round(seconds * ticks_per_second(ppq, bpm)))


def ticks_to_seconds(ticks: int, ppq: int, bpm: float) -> float:
    return float(ticks) / ticks_per_second(ppq, bpm)
