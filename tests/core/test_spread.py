from __future__ import annotations

import numpy as np
import pytest

from firespread.core.constants import BURNING, BURNT_OUT, UNBURNT
from firespread.core.models import PointField, WindState
from firespread.core.spatial_index import SpatialIndex
from firespread.core.spread import SpreadEngine, SpreadParameters

SPACING = 0.0001
WESTERLY = WindState(speed=50.0, direction=270.0)  # pushes fire east


def make_line(criticality: list[float]) -> tuple[PointField, SpatialIndex]:
    n = len(criticality)
    lon = 76.8 + np.arange(n) * SPACING
    lat = np.full(n, 9.9)
    points = PointField(lon=lon, lat=lat, criticality=criticality)
    return points, SpatialIndex.build(points.lon, points.lat)


def test_parameters_validation():
    with pytest.raises(ValueError):
        SpreadParameters(burn_duration=0)
    with pytest.raises(ValueError):
        SpreadParameters(search_radius=-1.0)
    with pytest.raises(ValueError):
        SpreadParameters(upwind_penalty_ratio=0.0)


def test_burning_point_counts_down_and_spreads():
    points, index = make_line([0.0, 1.0, 0.0, 0.0, 0.0])
    engine = SpreadEngine(SpreadParameters(spread_threshold=0.0, decay_rate=0.0))
    points.ignite(0, burn_time=2)

    result = engine.step(
        points, index, WindState.calm(), 1, np.random.default_rng(0)
    )

    assert points.state[0] == BURNING
    assert points.burn_time_remaining[0] == 1
    # probability 1.0 always ignites
    assert points.state[1] == BURNING
    assert points.burn_time_remaining[1] == engine.params.burn_duration
    # criticality 0 never spreads
    assert np.all(points.state[2:] == UNBURNT)
    np.testing.assert_array_equal(result.ignited, [1])
    assert result.burnt_out.size == 0


def test_point_burning_out_does_not_spread():
    points, index = make_line([0.0, 1.0, 0.0, 0.0, 0.0])
    engine = SpreadEngine(SpreadParameters(spread_threshold=0.0, decay_rate=0.0))
    points.ignite(0, burn_time=1)

    result = engine.step(
        points, index, WindState.calm(), 1, np.random.default_rng(0)
    )

    assert points.state[0] == BURNT_OUT
    assert points.state[1] == UNBURNT
    np.testing.assert_array_equal(result.burnt_out, [0])
    assert result.ignited.size == 0


def test_new_ignitions_do_not_spread_in_the_same_step():
    points, index = make_line([1.0, 1.0, 1.0, 1.0, 1.0])
    params = SpreadParameters(
        spread_threshold=0.0, decay_rate=0.0, search_radius=1.5 * SPACING
    )
    engine = SpreadEngine(params)
    points.ignite(0, burn_time=5)

    engine.step(points, index, WindState.calm(), 1, np.random.default_rng(0))

    np.testing.assert_array_equal(
        points.state, [BURNING, BURNING, UNBURNT, UNBURNT, UNBURNT]
    )

    engine.step(points, index, WindState.calm(), 2, np.random.default_rng(0))

    np.testing.assert_array_equal(
        points.state, [BURNING, BURNING, BURNING, UNBURNT, UNBURNT]
    )


def test_neighbor_nominated_twice_ignites_once():
    points, index = make_line([1.0, 1.0, 1.0])
    params = SpreadParameters(
        spread_threshold=0.0, decay_rate=0.0, burn_duration=3
    )
    engine = SpreadEngine(params)
    points.ignite(0, burn_time=3)
    points.ignite(2, burn_time=3)

    result = engine.step(
        points, index, WindState.calm(), 1, np.random.default_rng(0)
    )

    np.testing.assert_array_equal(result.ignited, [1])
    assert points.burn_time_remaining[1] == 3


def test_threshold_gate_ignores_wind():
    # decayed criticality 0.5 * 0.997 is below the default threshold
    points, index = make_line([0.9, 0.5])
    engine = SpreadEngine()
    assert engine.candidate_probability(points, 0, 1, 1, WESTERLY) == 0.0

    for seed in range(200):
        points.reset()
        points.ignite(0, burn_time=5)
        engine.step(points, index, WESTERLY, 1, np.random.default_rng(seed))
        assert points.state[1] == UNBURNT


def test_downwind_bonus_makes_spread_certain():
    points, index = make_line([0.9, 0.6])
    engine = SpreadEngine()

    assert engine.candidate_probability(points, 0, 1, 1, WESTERLY) == 1.0

    points.ignite(0, burn_time=5)
    engine.step(points, index, WESTERLY, 1, np.random.default_rng(3))
    assert points.state[1] == BURNING


def test_upwind_penalty_suppresses_spread():
    points, index = make_line([1.0, 1.0])
    engine = SpreadEngine()
    easterly = WindState(speed=50.0, direction=90.0)

    assert engine.candidate_probability(points, 0, 1, 1, easterly) == 0.0
    # same pair, the other way round, is downwind
    assert engine.candidate_probability(points, 1, 0, 1, easterly) == 1.0


def test_criticality_decays_with_time():
    points, _ = make_line([1.0, 0.8])
    engine = SpreadEngine(SpreadParameters(spread_threshold=0.0))
    calm = WindState.calm()

    early = engine.candidate_probability(points, 0, 1, 1, calm)
    late = engine.candidate_probability(points, 0, 1, 100, calm)
    floor = engine.candidate_probability(points, 0, 1, 10_000, calm)

    assert early == pytest.approx(0.8 * 0.997)
    assert late == pytest.approx(0.8 * 0.7)
    assert floor == pytest.approx(0.8 * 0.1)


def test_step_never_mutates_static_data():
    points, index = make_line([0.7, 0.9, 0.8, 0.95, 0.6])
    lon, lat, k = points.lon.copy(), points.lat.copy(), points.criticality.copy()
    engine = SpreadEngine(SpreadParameters(spread_threshold=0.0))
    points.ignite(2, burn_time=5)
    rng = np.random.default_rng(11)

    for step in range(1, 10):
        engine.step(points, index, WESTERLY, step, rng)

    np.testing.assert_array_equal(points.lon, lon)
    np.testing.assert_array_equal(points.lat, lat)
    np.testing.assert_array_equal(points.criticality, k)
