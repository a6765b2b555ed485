from __future__ import annotations

import math
import random
from typing import List

from ambiance_engine.placement import SKIP_STEP, draw_asset, resolve_fade, schedule_track
from ambiance_engine.resolver import resolve_parameters
from ambiance_engine.structures import Container, IntervalMode, SoundArea, SoundAsset


class PinnedRng:
    """Every draw returns the low end of its range."""

    def random(self) -> float:
        return 0.0

    def randrange(self, n: int) -> int:
        return 0

    def getrandbits(self, k: int) -> int:
        return 0


class CountingRng(random.Random):
    def __init__(self, seed: int) -> None:
        super().__init__(seed)
        self.picks: List[int] = []

    def randrange(self, *args, **kwargs):  # type: ignore[override]
        value = super().randrange(*args, **kwargs)
        self.picks.append(value)
        return value


def _asset(name: str, length: float) -> SoundAsset:
    return SoundAsset(name=name, file_path=f"/sfx/{name}.wav", length=length)


def _params(items, rate: float, drift: float = 0.0, mode: IntervalMode = IntervalMode.ABSOLUTE, **kw):
    container = Container(
        name="c",
        items=list(items),
        override_parent=True,
        interval_mode=mode,
        trigger_rate=rate,
        trigger_drift=drift,
        **kw,
    )
    return resolve_parameters(None, container)


def test_gap_spacing_with_trim_at_window_end():
    # 1 s gaps after 2 s items: onsets every 3 s, last item cut at the window end
    params = _params([_asset("rain", 2.0)], rate=1.0)
    plan = schedule_track(params, 0.0, 10.0, rng=PinnedRng())

    starts = [e.start_time for e in plan.events]
    lengths = [e.length for e in plan.events]
    assert len(plan.events) == 4
    assert all(math.isclose(a, b) for a, b in zip(starts, [0.0, 3.0, 6.0, 9.0]))
    assert all(math.isclose(a, b) for a, b in zip(lengths, [2.0, 2.0, 2.0, 1.0]))
    assert not plan.crossfades


def test_absolute_count_and_window_bounds():
    rng = random.Random(11)
    for gap, length in [(1.0, 2.0), (0.5, 0.5), (4.0, 1.0)]:
        params = _params([_asset("a", length)], rate=gap)
        plan = schedule_track(params, 5.0, 65.0, rng=rng)
        expected = math.floor(60.0 / (gap + length))
        assert abs(len(plan.events) - expected) <= 1
        for ev in plan.events:
            assert 5.0 <= ev.start_time < 65.0
            assert ev.end <= 65.0 + 1e-9


def test_first_item_lands_inside_first_gap():
    params = _params([_asset("a", 1.0)], rate=5.0)
    rng = random.Random(2)
    for _ in range(50):
        plan = schedule_track(params, 10.0, 30.0, rng=rng)
        assert 10.0 <= plan.events[0].start_time < 15.0


def test_drift_stays_within_half_width():
    # 40 % drift of a 2 s gap jitters each onset by at most +-0.4 s
    params = _params([_asset("a", 1.0)], rate=2.0, drift=40.0)
    plan = schedule_track(params, 0.0, 200.0, rng=random.Random(5))
    gaps = [b.start_time - a.end for a, b in zip(plan.events, plan.events[1:])]
    assert gaps
    assert all(1.6 - 1e-9 <= g <= 2.4 + 1e-9 for g in gaps)
    assert any(abs(g - 2.0) > 1e-6 for g in gaps)


def test_negative_interval_overlaps_and_requests_crossfades():
    params = _params([_asset("a", 3.0)], rate=-1.0)
    plan = schedule_track(params, 0.0, 10.0, rng=PinnedRng(), crossfade_shape=6)

    starts = [e.start_time for e in plan.events]
    assert all(math.isclose(a, b) for a, b in zip(starts, [0.0, 2.0, 4.0, 6.0, 8.0]))
    assert len(plan.crossfades) == 4
    for req in plan.crossfades:
        assert req.second == req.first + 1
        assert req.shape == 6
        assert math.isclose(req.length, 1.0)


def test_overlap_equal_to_item_length_crossfades_match_real_overlap():
    # each new item would start where the previous one starts; the cursor bump moves it on
    params = _params([_asset("a", 2.0)], rate=-2.0)
    plan = schedule_track(params, 0.0, 10.0, rng=PinnedRng())

    assert len(plan.events) > 3
    assert plan.crossfades
    for req in plan.crossfades:
        first, second = plan.events[req.first], plan.events[req.second]
        assert math.isclose(req.length, first.end - second.start_time)
    assert math.isclose(plan.crossfades[1].length, 1.9)


def test_three_second_interval_is_a_gap_after_each_item():
    # a 3 s interval after 2 s items puts onsets 5 s apart, not 3 s
    params = _params([_asset("rain", 2.0)], rate=3.0)
    plan = schedule_track(params, 0.0, 10.0, rng=PinnedRng())

    assert [e.start_time for e in plan.events] == [0.0, 5.0]
    assert [e.length for e in plan.events] == [2.0, 2.0]


def test_too_short_assets_are_all_skipped():
    params = _params([_asset("tick", 0.5)], rate=-1.0)
    rng = CountingRng(1)
    plan = schedule_track(params, 0.0, 10.0, rng=rng)

    assert plan.events == []
    assert plan.skips.count == len(rng.picks)
    assert plan.skips.count >= int(10.0 / SKIP_STEP)
    assert plan.skips.min_required_length == 1.0


def test_skip_count_matches_draws_of_short_asset():
    params = _params([_asset("short", 0.5), _asset("long", 4.0)], rate=-1.0, drift=20.0)
    rng = CountingRng(9)
    plan = schedule_track(params, 0.0, 60.0, rng=rng)

    assert plan.events
    assert all(ev.asset.name == "long" for ev in plan.events)
    assert plan.skips.count == rng.picks.count(0)


def test_regeneration_with_pinned_randomness_is_repeatable():
    params = _params([_asset("a", 1.0), _asset("b", 2.5)], rate=1.5, drift=30.0)
    first = schedule_track(params, 0.0, 120.0, rng=random.Random(42))
    second = schedule_track(params, 0.0, 120.0, rng=random.Random(42))

    assert len(first.events) == len(second.events)
    assert [e.start_time for e in first.events] == [e.start_time for e in second.events]
    assert [e.asset.name for e in first.events] == [e.asset.name for e in second.events]


def test_coverage_places_expected_count():
    params = _params([_asset("a", 1.0)], rate=50.0, mode=IntervalMode.COVERAGE)
    plan = schedule_track(params, 0.0, 100.0, rng=random.Random(4))
    assert len(plan.events) == 50
    assert math.isclose(plan.interval, 2.0)

    drifted = _params([_asset("a", 1.0)], rate=50.0, drift=30.0, mode=IntervalMode.COVERAGE)
    plan = schedule_track(drifted, 0.0, 100.0, rng=random.Random(4))
    assert 47 <= len(plan.events) <= 51
    assert not plan.crossfades
    for a, b in zip(plan.events, plan.events[1:]):
        assert b.start_time >= a.end - 1e-9


def test_fades_resolve_seconds_or_percentage():
    assert resolve_fade(False, 1.0, False, 2.0) is None
    assert resolve_fade(True, 0.5, False, 2.0) == 0.5
    assert resolve_fade(True, 5.0, False, 2.0) == 2.0
    assert math.isclose(resolve_fade(True, 25.0, True, 2.0), 0.5)
    assert resolve_fade(True, 300.0, True, 2.0) == 2.0

    params = _params(
        [_asset("a", 2.0)],
        rate=1.0,
        fade_in_enabled=True,
        fade_in_duration=10.0,
        fade_in_use_percentage=True,
        fade_out_enabled=False,
    )
    plan = schedule_track(params, 0.0, 10.0, rng=PinnedRng())
    assert math.isclose(plan.events[0].fade_in, 0.2)
    assert plan.events[-1].fade_in <= plan.events[-1].length
    assert plan.events[0].fade_out is None


def test_areas_replace_offset_and_length():
    asset = SoundAsset(
        name="forest",
        file_path="/sfx/forest.wav",
        length=60.0,
        areas=(SoundArea("birds", 12.0, 14.5),),
    )
    drawn = draw_asset([asset], random.Random(1))
    assert drawn.start_offset == 12.0
    assert drawn.length == 2.5

    plan = schedule_track(_params([asset], rate=1.0), 0.0, 30.0, rng=random.Random(1))
    assert all(ev.length <= 2.5 for ev in plan.events)


def test_empty_pool_plans_nothing():
    plan = schedule_track(_params([], rate=1.0), 0.0, 10.0, rng=random.Random(1))
    assert plan.events == [] and plan.skips.count == 0
