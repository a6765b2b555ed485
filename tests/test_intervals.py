from __future__ import annotations

import math

import pytest

from ambiance_engine.errors import ConfigurationError, UnsupportedIntervalMode
from ambiance_engine.intervals import average_asset_length, compute_interval
from ambiance_engine.resolver import resolve_parameters
from ambiance_engine.structures import Container, IntervalMode, SoundArea, SoundAsset


def _params(mode: IntervalMode, rate: float, lengths=(2.0,)):
    items = [SoundAsset(name=f"a{i}", file_path=f"/a{i}.wav", length=l) for i, l in enumerate(lengths)]
    container = Container(name="c", items=items, override_parent=True, interval_mode=mode, trigger_rate=rate)
    return resolve_parameters(None, container)


def test_absolute_uses_trigger_rate_verbatim():
    assert compute_interval(_params(IntervalMode.ABSOLUTE, 3.0), 60.0) == 3.0
    assert compute_interval(_params(IntervalMode.ABSOLUTE, -1.5), 60.0) == -1.5


def test_relative_is_percentage_of_window():
    assert math.isclose(compute_interval(_params(IntervalMode.RELATIVE, 10.0), 20.0), 2.0)


def test_coverage_spacing_from_average_length():
    # W=100, c=0.5, mean length 2 -> 25 items -> one every 4 s
    params = _params(IntervalMode.COVERAGE, 50.0, lengths=(1.0, 3.0))
    assert math.isclose(compute_interval(params, 100.0), 4.0)


def test_coverage_falls_back_to_window_length():
    assert compute_interval(_params(IntervalMode.COVERAGE, 0.0), 30.0) == 30.0
    assert compute_interval(_params(IntervalMode.COVERAGE, 50.0, lengths=(0.0,)), 30.0) == 30.0


def test_chunk_reuses_trigger_rate():
    assert compute_interval(_params(IntervalMode.CHUNK, 0.75), 100.0) == 0.75


@pytest.mark.parametrize("mode", [IntervalMode.NOISE, IntervalMode.EUCLIDEAN])
def test_open_modes_are_rejected(mode):
    with pytest.raises(UnsupportedIntervalMode):
        compute_interval(_params(mode, 1.0), 10.0)
    assert issubclass(UnsupportedIntervalMode, ConfigurationError)


def test_average_length_uses_areas():
    asset = SoundAsset(
        name="long",
        file_path="/long.wav",
        length=30.0,
        areas=(SoundArea("a", 0.0, 1.0), SoundArea("b", 10.0, 13.0)),
    )
    assert average_asset_length([asset]) == 2.0
    assert average_asset_length([]) == 0.0
