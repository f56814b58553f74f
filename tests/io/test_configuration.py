import json

import pytest
from pydantic import ValidationError

from firespread.core.constants import (
    INITIAL_FIRE_STARTS,
    MAX_BURN_DURATION_STEPS,
    SPREAD_THRESHOLD,
)
from firespread.core.models import BoundaryConditions, WindState
from firespread.io.configuration import (
    SimulationConfiguration,
    TimedInput,
    WindConfiguration,
    load_configuration,
)


def test_defaults_match_constants():
    cfg = SimulationConfiguration()

    assert cfg.initial_fire_starts == INITIAL_FIRE_STARTS
    assert cfg.burn_duration == MAX_BURN_DURATION_STEPS
    assert cfg.spread_threshold == SPREAD_THRESHOLD
    assert cfg.wind.to_wind_state() == WindState.calm()
    assert cfg.boundary_conditions == []


def test_spread_parameters_follow_configuration():
    cfg = SimulationConfiguration(
        burn_duration=7,
        search_radius=0.001,
        spread_threshold=0.3,
        decay_rate=0.01,
        wind_scaler=0.1,
        max_wind_bonus=0.5,
        upwind_penalty_ratio=2.0,
    )

    params = cfg.spread_parameters()

    assert params.burn_duration == 7
    assert params.search_radius == 0.001
    assert params.spread_threshold == 0.3
    assert params.decay_rate == 0.01
    assert params.wind_scaler == 0.1
    assert params.max_wind_bonus == 0.5
    assert params.upwind_penalty_ratio == 2.0


def test_seeded_rng_is_reproducible():
    cfg = SimulationConfiguration(seed=99)

    assert cfg.make_rng().random() == cfg.make_rng().random()


@pytest.mark.parametrize(
    "field, value",
    [
        ("burn_duration", 0),
        ("spread_threshold", 1.5),
        ("search_radius", -0.1),
        ("upwind_penalty_ratio", 0.0),
        ("unknown_option", 1),
    ],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        SimulationConfiguration(**{field: value})


def test_wind_direction_is_normalized():
    assert WindConfiguration(speed=1.0, direction=-90).direction == 270.0
    assert WindConfiguration(speed=1.0, direction=720).direction == 0.0
    assert WindConfiguration(speed=1.0, direction=None).direction is None
    with pytest.raises(ValidationError):
        WindConfiguration(speed=-2.0)


def test_boundary_conditions_are_converted():
    cfg = SimulationConfiguration(
        boundary_conditions=[
            {"step": 3, "wind": {"speed": 4.0, "direction": 90}},
            {"step": 1, "ignitions": [2, 5]},
        ]
    )

    bcs = cfg.get_boundary_conditions()

    assert bcs == [
        BoundaryConditions(step=3, wind=WindState(speed=4.0, direction=90.0)),
        BoundaryConditions(step=1, ignitions=(2, 5)),
    ]


def test_duplicate_boundary_steps_are_rejected():
    with pytest.raises(ValidationError):
        SimulationConfiguration(
            boundary_conditions=[{"step": 2}, {"step": 2, "ignitions": [1]}]
        )


def test_timed_input_validation():
    with pytest.raises(ValidationError):
        TimedInput(step=0)
    with pytest.raises(ValidationError):
        TimedInput(step=1, ignitions=[-1])


def test_load_yaml_configuration(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "name: ridge\n"
        "seed: 12\n"
        "initial_fire_starts: 1\n"
        "wind:\n"
        "  speed: 3.5\n"
        "  direction: 200\n"
        "boundary_conditions:\n"
        "  - step: 4\n"
        "    ignitions: [0]\n",
        encoding="utf-8",
    )

    cfg = load_configuration(path)

    assert cfg.name == "ridge"
    assert cfg.seed == 12
    assert cfg.initial_fire_starts == 1
    assert cfg.wind.to_wind_state() == WindState(speed=3.5, direction=200.0)
    assert cfg.boundary_conditions[0].step == 4


def test_load_json_configuration(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"burn_duration": 2}), encoding="utf-8")

    assert load_configuration(path).burn_duration == 2


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    assert load_configuration(path) == SimulationConfiguration()


def test_non_mapping_configuration_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_configuration(path)
