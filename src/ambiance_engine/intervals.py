from __future__ import annotations

import logging
from typing import Callable, Dict, Sequence

from .errors import UnsupportedIntervalMode
from .resolver import EffectiveParameters
from .structures import IntervalMode, SoundAsset

logger = logging.getLogger(__name__)

IntervalFn = Callable[[EffectiveParameters, float], float]


def nominal_length(asset: SoundAsset) -> float:
    """Expected drawn length of an asset (mean area length when it has areas)."""
    if asset.areas:
        return sum(a.length for a in asset.areas) / len(asset.areas)
    return float(asset.length)


def average_asset_length(items: Sequence[SoundAsset]) -> float:
    if not items:
        return 0.0
    return sum(nominal_length(a) for a in items) / len(items)


def absolute_interval(params: EffectiveParameters, window_length: float) -> float:
    return float(params.trigger_rate)


def relative_interval(params: EffectiveParameters, window_length: float) -> float:
    return window_length * params.trigger_rate / 100.0


def coverage_interval(params: EffectiveParameters, window_length: float) -> float:
    avg = average_asset_length(params.items)
    ratio = params.trigger_rate / 100.0
    count = (window_length * ratio) / avg if avg > 0 else 0.0
    if count <= 0:
        logger.debug(
            "coverage for '%s' gives no items (avg length %.3f, coverage %.1f%%); using window length",
            params.container_name,
            avg,
            params.trigger_rate,
        )
        return window_length
    return window_length / count


def chunk_interval(params: EffectiveParameters, window_length: float) -> float:
    # trigger rate is reused as the spacing inside each active chunk
    return float(params.trigger_rate)


def _unsupported(mode: IntervalMode) -> IntervalFn:
    def fn(params: EffectiveParameters, window_length: float) -> float:
        raise UnsupportedIntervalMode(
            f"interval mode {mode.name.lower()} has no placement algorithm (container '{params.container_name}')"
        )

    return fn


INTERVAL_STRATEGIES: Dict[IntervalMode, IntervalFn] = {
    IntervalMode.ABSOLUTE: absolute_interval,
    IntervalMode.RELATIVE: relative_interval,
    IntervalMode.COVERAGE: coverage_interval,
    IntervalMode.CHUNK: chunk_interval,
    IntervalMode.NOISE: _unsupported(IntervalMode.NOISE),
    IntervalMode.EUCLIDEAN: _unsupported(IntervalMode.EUCLIDEAN),
}


def compute_interval(params: EffectiveParameters, window_length: float) -> float:
    """Nominal gap in seconds for the placement loop (negative means overlap)."""
    try:
        fn = INTERVAL_STRATEGIES[IntervalMode(params.interval_mode)]
    except ValueError as e:
        raise UnsupportedIntervalMode(f"unknown interval mode {params.interval_mode!r}") from e
    return fn(params, window_length)
