import json

import pytest

from firespread.cli.console import format_status
from firespread.cli.main import FireSpreadCLI, main, read_points
from firespread.core.models import PointField


@pytest.fixture
def points_file(tmp_path):
    records = [
        {"lat": 9.9 + (i // 10) * 0.0001, "lon": 76.8 + (i % 10) * 0.0001, "K": 0.9}
        for i in range(100)
    ]
    path = tmp_path / "points.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "seed: 5\nwind:\n  speed: 2.0\n  direction: 270\n", encoding="utf-8"
    )
    return path


def test_read_points_requires_a_list(tmp_path):
    path = tmp_path / "points.json"
    path.write_text(json.dumps({"lat": 1.0}), encoding="utf-8")

    with pytest.raises(ValueError):
        read_points(path)


def test_cli_overrides_configuration(points_file, config_file):
    cli = FireSpreadCLI(
        _cli_parse_args=[
            "--points",
            str(points_file),
            "--config",
            str(config_file),
            "--seed",
            "11",
            "--steps",
            "4",
            "--wind_dir",
            "90",
        ]
    )

    cfg = cli.build_configuration()

    assert cfg.seed == 11
    assert cfg.max_steps == 4
    assert cfg.wind.speed == 2.0
    assert cfg.wind.direction == 90.0


def test_main_runs_a_simulation(points_file, config_file, capsys):
    code = main(
        [
            "--points",
            str(points_file),
            "--config",
            str(config_file),
            "--steps",
            "3",
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Step:     0" in out
    assert "Step:     3" in out


def test_main_reports_invalid_points(tmp_path):
    path = tmp_path / "points.json"
    path.write_text(json.dumps([{"lat": "a", "lon": 0.0, "K": 1.0}]))

    assert main(["--points", str(path)]) == 1


def test_format_status():
    points = PointField(lon=[0.0, 1.0], lat=[0.0, 0.0], criticality=[1.0, 1.0])
    points.ignite(1, 2)

    line = format_status(points.snapshot(step=12), verbose=True)

    assert line == (
        "Step:    12 | Burning:     1 | Burnt out:     0 | Unburnt:      1"
    )
