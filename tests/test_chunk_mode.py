from __future__ import annotations

import random

from ambiance_engine.placement import MAX_ITEMS_PER_CHUNK, MIN_CHUNK_ACTIVE, chunk_spans, schedule_track
from ambiance_engine.resolver import resolve_parameters
from ambiance_engine.structures import Container, IntervalMode, SoundAsset, VariationDirection


def _params(rate: float = 0.5, length: float = 0.3, **kw):
    base = dict(
        name="chunks",
        items=[SoundAsset(name="crackle", file_path="/sfx/crackle.wav", length=length)],
        override_parent=True,
        interval_mode=IntervalMode.CHUNK,
        trigger_rate=rate,
        trigger_drift=0.0,
        chunk_duration=2.0,
        chunk_silence=3.0,
        chunk_duration_variation=0.0,
        chunk_silence_variation=0.0,
    )
    base.update(kw)
    return resolve_parameters(None, Container(**base))


def _inside_some_span(start: float, end: float, spans) -> bool:
    return any(s <= start and end <= e + 1e-9 for s, e in spans)


def test_fixed_chunks_alternate_with_silence():
    plan = schedule_track(_params(), 0.0, 20.0, rng=random.Random(1))
    assert plan.active_spans == [(0.0, 2.0), (5.0, 7.0), (10.0, 12.0), (15.0, 17.0)]
    assert plan.events
    for ev in plan.events:
        assert _inside_some_span(ev.start_time, ev.end, plan.active_spans)


def test_jittered_chunks_never_exceed_window_and_silence_stays_empty():
    params = _params(
        chunk_duration=4.0,
        chunk_silence=2.0,
        chunk_duration_variation=60.0,
        chunk_silence_variation=90.0,
        chunk_silence_var_direction=VariationDirection.NEGATIVE,
    )
    rng = random.Random(21)
    for _ in range(20):
        plan = schedule_track(params, 3.0, 63.0, rng=rng)
        assert sum(e - s for s, e in plan.active_spans) <= 60.0 + 1e-9
        for s, e in plan.active_spans:
            assert 3.0 <= s < e <= 63.0
        for ev in plan.events:
            assert _inside_some_span(ev.start_time, ev.end, plan.active_spans)


def test_active_span_is_floored():
    params = _params(chunk_duration=0.0, chunk_silence=0.0)
    spans = chunk_spans(params, 0.0, 1.0, random.Random(1))
    assert spans
    assert all(e - s >= MIN_CHUNK_ACTIVE - 1e-9 or e == 1.0 for s, e in spans)


def test_item_cap_bounds_near_zero_intervals():
    params = _params(rate=0.0, length=0.01, chunk_duration=200.0, chunk_silence=0.0)
    plan = schedule_track(params, 0.0, 200.0, rng=random.Random(1))
    assert len(plan.active_spans) == 1
    assert len(plan.events) == MAX_ITEMS_PER_CHUNK


def test_negative_chunk_interval_skips_short_items():
    plan = schedule_track(_params(rate=-1.0, length=0.5), 0.0, 20.0, rng=random.Random(1))
    assert plan.events == []
    assert plan.skips.count > 0
    assert plan.skips.min_required_length == 1.0
