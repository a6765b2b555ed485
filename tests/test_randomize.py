from __future__ import annotations

import math
import random

from ambiance_engine.randomize import (
    db_to_gain,
    db_to_linear,
    directional_variation,
    sample_attributes,
    semitones_to_playrate,
)
from ambiance_engine.resolver import resolve_parameters
from ambiance_engine.structures import Container, PitchMode, SoundAsset, ValueRange, VariationDirection


def _params(**kw):
    base = dict(name="c", override_parent=True)
    base.update(kw)
    return resolve_parameters(None, Container(**base))


ASSET = SoundAsset(
    name="bell",
    file_path="/sfx/bell.wav",
    length=1.5,
    original_pitch=2.0,
    original_volume=0.5,
    original_pan=0.25,
)


def test_disabled_axes_pass_original_values_through():
    params = _params(randomize_pitch=False, randomize_volume=False, randomize_pan=False)
    attrs = sample_attributes(params, ASSET, random.Random(1))
    assert attrs.pitch == 2.0
    assert attrs.volume == 0.5
    assert attrs.pan == 0.25
    assert attrs.playrate == 1.0


def test_offsets_are_added_to_original_values():
    params = _params(
        pitch_range=ValueRange(3.0, 3.0),
        volume_range=ValueRange(6.0, 6.0),
        pan_range=ValueRange(-50.0, -50.0),
    )
    attrs = sample_attributes(params, ASSET, random.Random(1))
    assert math.isclose(attrs.pitch, 5.0)
    assert math.isclose(attrs.volume, 0.5 * 10 ** (6.0 / 20))
    assert math.isclose(attrs.pan, -0.25)


def test_pan_is_clamped_to_unit_range():
    params = _params(randomize_pitch=False, randomize_volume=False, pan_range=ValueRange(100.0, 100.0))
    attrs = sample_attributes(params, ASSET, random.Random(1))
    assert attrs.pan == 1.0


def test_sampled_values_stay_inside_ranges():
    rng = random.Random(7)
    params = _params(pitch_range=ValueRange(-3.0, 3.0), volume_range=ValueRange(-6.0, 0.0))
    for _ in range(200):
        attrs = sample_attributes(params, ASSET, rng)
        assert -1.0 <= attrs.pitch <= 5.0
        assert 0.5 * db_to_gain(-6.0) - 1e-12 <= attrs.volume <= 0.5 + 1e-12
        assert -1.0 <= attrs.pan <= 1.0


def test_asset_gain_applies_without_volume_randomization():
    asset = SoundAsset(name="x", file_path="/x.wav", original_volume=1.0, gain_db=-6.0)
    params = _params(randomize_volume=False)
    attrs = sample_attributes(params, asset, random.Random(1))
    assert math.isclose(attrs.volume, db_to_gain(-6.0))


def test_stretch_mode_reports_playrate():
    params = _params(pitch_mode=PitchMode.STRETCH, randomize_pitch=False)
    attrs = sample_attributes(params, ASSET, random.Random(1))
    assert math.isclose(attrs.playrate, semitones_to_playrate(2.0))
    assert math.isclose(semitones_to_playrate(12.0), 2.0)


def test_directional_variation_bounds():
    rng = random.Random(3)
    for _ in range(200):
        assert -1.0 <= directional_variation(2.0, 50, VariationDirection.BIPOLAR, rng) <= 1.0
        assert -1.0 <= directional_variation(2.0, 50, VariationDirection.NEGATIVE, rng) <= 0.0
        assert 0.0 <= directional_variation(2.0, 50, VariationDirection.POSITIVE, rng) <= 1.0
    assert directional_variation(2.0, 0, VariationDirection.BIPOLAR, rng) == 0.0


def test_track_volume_mutes_at_floor():
    assert db_to_linear(-60.0) == 0.0
    assert db_to_linear(float("-inf")) == 0.0
    assert math.isclose(db_to_linear(0.0), 1.0)
