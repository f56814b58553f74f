from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import numpy as np
import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from firespread.core.constants import (
    DECAY_RATE,
    INITIAL_FIRE_STARTS,
    MAX_BURN_DURATION_STEPS,
    MAX_WIND_BONUS,
    MIN_DECAY_FACTOR,
    NEIGHBOR_SEARCH_RADIUS,
    SPREAD_THRESHOLD,
    UPWIND_PENALTY_RATIO,
    WIND_EFFECT_SCALER,
)
from firespread.core.models import BoundaryConditions, WindState
from firespread.core.spread import SpreadParameters


# ---- simulation inputs ------------------------------------------------------
class WindConfiguration(BaseModel):
    """Ambient wind, already resolved by the weather collaborator."""

    speed: float = Field(0.0, ge=0.0, description="wind speed in m/s")
    direction: Optional[float] = Field(
        None,
        description="direction the wind blows FROM, clockwise in degrees "
        "from north (north=0); null when unknown",
    )

    @field_validator("direction", mode="before")
    @classmethod
    def _coerce_direction(cls, v):
        if v is None:
            return v
        x = float(v)
        if not np.isfinite(x):
            return None
        return x % 360

    def to_wind_state(self) -> WindState:
        return WindState(speed=self.speed, direction=self.direction)


class TimedInput(BaseModel):
    """Conditions applied at the start of a given step."""

    step: int = Field(..., ge=1, description="step the conditions apply to")
    wind: Optional[WindConfiguration] = None
    ignitions: Optional[List[int]] = Field(
        None, description="ids of points to ignite"
    )

    @field_validator("ignitions")
    @classmethod
    def _ids_nonnegative(cls, v):
        if v is not None and any(i < 0 for i in v):
            raise ValueError("ignition ids must be >= 0")
        return v

    def get_boundary_conditions(self) -> BoundaryConditions:
        return BoundaryConditions(
            step=self.step,
            wind=self.wind.to_wind_state() if self.wind is not None else None,
            ignitions=tuple(self.ignitions) if self.ignitions else None,
        )


# ---- configuration ----------------------------------------------------------
class SimulationConfiguration(BaseModel):
    """Fire spread simulation configuration"""

    model_config = ConfigDict(extra="forbid")

    # --- basic info ---
    name: Optional[str] = Field(
        None, description="Name of the simulation (optional)"
    )
    seed: Optional[int] = Field(
        None, description="Seed of the random source, random if omitted"
    )
    max_steps: Optional[int] = Field(
        None, gt=0, description="Stop after this many steps (optional)"
    )

    # --- spread rule ---
    initial_fire_starts: int = Field(
        INITIAL_FIRE_STARTS, ge=0, description="Random initial ignitions"
    )
    burn_duration: int = Field(
        MAX_BURN_DURATION_STEPS, ge=1, description="Burn duration [steps]"
    )
    search_radius: float = Field(
        NEIGHBOR_SEARCH_RADIUS, ge=0.0, description="Neighbor radius [deg]"
    )
    spread_threshold: float = Field(
        SPREAD_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum decayed criticality for spread",
    )
    decay_rate: float = Field(
        DECAY_RATE, ge=0.0, description="Criticality decay per step"
    )
    min_decay_factor: float = Field(
        MIN_DECAY_FACTOR, ge=0.0, le=1.0, description="Floor of the decay"
    )

    # --- wind model ---
    wind_scaler: float = Field(
        WIND_EFFECT_SCALER, ge=0.0, description="Wind sensitivity"
    )
    max_wind_bonus: float = Field(
        MAX_WIND_BONUS, ge=0.0, description="Cap on downwind bonus"
    )
    upwind_penalty_ratio: float = Field(
        UPWIND_PENALTY_RATIO,
        gt=0.0,
        description="Upwind penalty cap relative to the downwind cap",
    )

    # --- inputs ---
    wind: WindConfiguration = Field(default_factory=WindConfiguration)
    boundary_conditions: List[TimedInput] = Field(
        default_factory=list, description="List of boundary conditions"
    )

    # ---------- checks ----------
    @model_validator(mode="after")
    def _check_boundary_conditions(self):
        steps = [bc.step for bc in self.boundary_conditions]
        if len(steps) != len(set(steps)):
            raise ValueError("boundary_conditions have duplicate steps.")
        return self

    def spread_parameters(self) -> SpreadParameters:
        return SpreadParameters(
            burn_duration=self.burn_duration,
            search_radius=self.search_radius,
            spread_threshold=self.spread_threshold,
            decay_rate=self.decay_rate,
            min_decay_factor=self.min_decay_factor,
            wind_scaler=self.wind_scaler,
            max_wind_bonus=self.max_wind_bonus,
            upwind_penalty_ratio=self.upwind_penalty_ratio,
        )

    def make_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    def get_boundary_conditions(self) -> List[BoundaryConditions]:
        return [bc.get_boundary_conditions() for bc in self.boundary_conditions]


def load_configuration(path: str | Path) -> SimulationConfiguration:
    """Read a configuration file, YAML or JSON depending on the suffix."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping")
    return SimulationConfiguration(**data)
