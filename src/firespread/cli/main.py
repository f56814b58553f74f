import json
import logging
import time
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, CliImplicitFlag, SettingsConfigDict

from firespread.cli.console import (
    error_msg,
    info_msg,
    ok_msg,
    print_boundary_conditions_table,
    print_table,
    setup_console,
    status_msg,
)
from firespread.core.models import BurnSnapshot, FireSpreadError
from firespread.io.configuration import (
    SimulationConfiguration,
    WindConfiguration,
    load_configuration,
)
from firespread.io.records import simulation_from_records
from firespread.logging_config import configure_logger


# --- CLI configuration -------------------------------------------------------
class FireSpreadCLI(BaseSettings):
    model_config = SettingsConfigDict(
        cli_parse_args=True, env_prefix="FIRESPREAD_"
    )

    points: Path = Field(
        ...,
        description="Path to the criticality points (JSON list of "
        "{lat, lon, criticality} objects)",
    )
    config: Optional[Path] = Field(
        None, description="Path to configuration file (YAML or JSON)"
    )
    steps: Optional[int] = Field(
        None, gt=0, description="Maximum number of steps to run"
    )
    seed: Optional[int] = Field(None, description="Random seed")
    wind_speed: Optional[float] = Field(
        None, ge=0.0, description="Wind speed [m/s], overrides config"
    )
    wind_dir: Optional[float] = Field(
        None,
        description="Wind direction FROM [deg, north=0], overrides config",
    )
    record: Optional[Path] = Field(
        None, description="Folder where the run log is exported"
    )

    verbose: CliImplicitFlag[bool] = Field(
        False,
        description="Enable verbose output",
    )

    # ---------- checks ----------
    @field_validator("points", mode="before")
    @classmethod
    def _check_points_file(cls, v: str | Path) -> Path:
        if isinstance(v, str):
            v = Path(v)
        if not v.is_file():
            raise ValueError("Points file not found.")
        return v

    @field_validator("config", mode="before")
    @classmethod
    def _check_config_file(cls, v: str | Path | None) -> Optional[Path]:
        if v is None:
            return None
        if isinstance(v, str):
            v = Path(v)
        if not v.is_file():
            raise ValueError("Configuration file not found.")
        return v

    def build_configuration(self) -> SimulationConfiguration:
        """Load the configuration file and apply command line overrides."""
        if self.config is not None:
            cfg = load_configuration(self.config)
        else:
            cfg = SimulationConfiguration()

        updates: dict[str, Any] = {}
        if self.seed is not None:
            updates["seed"] = self.seed
        if self.steps is not None:
            updates["max_steps"] = self.steps
        if self.wind_speed is not None or self.wind_dir is not None:
            updates["wind"] = WindConfiguration(
                speed=(
                    self.wind_speed
                    if self.wind_speed is not None
                    else cfg.wind.speed
                ),
                direction=(
                    self.wind_dir
                    if self.wind_dir is not None
                    else cfg.wind.direction
                ),
            )
        return cfg.model_copy(update=updates)


def read_points(path: str | Path) -> list[Any]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("Points file must contain a JSON list")
    return data


# --- main function -----------------------------------------------------------
def main(argv: Optional[Sequence[str]] = None) -> int:
    start = time.time()

    # pydantic-settings is taking care of it
    cli = FireSpreadCLI(
        _cli_parse_args=list(argv) if argv is not None else None
    )  # type: ignore

    if cli.record is not None:
        setup_console(record_path=cli.record, basename="run")
    else:
        setup_console()
    if cli.verbose:
        configure_logger(logging.INFO)

    cfg = cli.build_configuration()

    if cli.verbose:
        table_data: dict[str, BaseModel | dict] = {
            "CLI Args": cli,
            "Loaded Config": cfg,
        }
        print_table(
            table_data,
            title="Simulation Configuration",
            skip_fields=["boundary_conditions", "verbose"],
            header_style="bold green",
            section_style="bold yellow",
        )
        if cfg.boundary_conditions:
            print_boundary_conditions_table(cfg.boundary_conditions)

    def on_snapshot(snapshot: BurnSnapshot) -> None:
        status_msg(snapshot, cli.verbose)

    try:
        simulation = simulation_from_records(read_points(cli.points), cfg)
        simulation.subscribe(on_snapshot)
        simulation.start()
        simulation.run(max_steps=cfg.max_steps)
    except FireSpreadError as e:
        error_msg(f"Simulation failed: {e}")
        return 1

    if simulation.is_running():
        simulation.stop()
        info_msg(f"Step limit reached at step {simulation.current_step}")
    else:
        ok_msg(f"Fire burnt out after {simulation.current_step} steps")

    if cli.verbose:
        info_msg(f"Execution time: {time.time() - start:.2f} seconds")
    return 0


# %%
if __name__ == "__main__":
    raise SystemExit(main())
