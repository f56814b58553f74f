"""Ingestion of already-decoded criticality records.

Decoding a particular file format is the caller's job; this module starts
from a sequence of mappings (or `(lat, lon, criticality)` triples), validates
each one, drops the invalid ones with a warning, and builds the point field.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from firespread.core.models import InvalidInputError, PointField, WindState
from firespread.core.simulation import Simulation
from firespread.io.configuration import SimulationConfiguration

logger = logging.getLogger(__name__)


class CriticalityRecord(BaseModel):
    """A single sampled location."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    lat: float = Field(
        ...,
        strict=True,
        allow_inf_nan=False,
        validation_alias=AliasChoices("lat", "latitude"),
    )
    lon: float = Field(
        ...,
        strict=True,
        allow_inf_nan=False,
        validation_alias=AliasChoices("lon", "long", "lng", "longitude"),
    )
    criticality: float = Field(
        ...,
        strict=True,
        allow_inf_nan=False,
        validation_alias=AliasChoices("criticality", "K", "k"),
        description="clamped to [0, 1] when the field is built",
    )


def _as_mapping(record: Any) -> Mapping[str, Any]:
    if isinstance(record, Mapping):
        return record
    if isinstance(record, Sequence) and not isinstance(record, (str, bytes)):
        if len(record) != 3:
            raise ValueError("expected a (lat, lon, criticality) triple")
        lat, lon, k = record
        return {"lat": lat, "lon": lon, "criticality": k}
    raise ValueError(f"unsupported record type {type(record).__name__}")


def parse_records(records: Iterable[Any]) -> list[CriticalityRecord]:
    """Validate records, dropping the invalid ones.

    Raises
    ------
    InvalidInputError
        If no record is valid.
    """
    valid: list[CriticalityRecord] = []
    n_rows = 0
    for row, record in enumerate(records, start=1):
        n_rows += 1
        try:
            valid.append(CriticalityRecord.model_validate(_as_mapping(record)))
        except (ValidationError, ValueError) as e:
            logger.warning("Invalid criticality record in row %d: %s", row, e)

    if not valid:
        raise InvalidInputError(
            f"No valid criticality records ({n_rows} rows read)."
        )
    if len(valid) < n_rows:
        logger.warning("Dropped %d invalid record(s)", n_rows - len(valid))
    logger.info("Loaded %d valid criticality points", len(valid))
    return valid


def load_points(records: Iterable[Any]) -> PointField:
    """Build a point field; ids follow the order of the valid records."""
    parsed = parse_records(records)
    return PointField(
        lon=[r.lon for r in parsed],
        lat=[r.lat for r in parsed],
        criticality=[r.criticality for r in parsed],
    )


def simulation_from_records(
    records: Iterable[Any],
    config: Optional[SimulationConfiguration] = None,
    wind: Optional[WindState] = None,
) -> Simulation:
    """Load points, build the index and set up an idle simulation.

    Parameters
    ----------
    records : Iterable
        Decoded criticality records.
    config : SimulationConfiguration, optional
        Simulation settings; defaults are used when omitted.
    wind : WindState, optional
        Overrides the wind of the configuration.
    """
    if config is None:
        config = SimulationConfiguration()

    points = load_points(records)
    simulation = Simulation(
        points=points,
        wind=wind if wind is not None else config.wind.to_wind_state(),
        params=config.spread_parameters(),
        initial_fire_starts=config.initial_fire_starts,
        rng=config.make_rng(),
    )
    simulation.build_index()
    for boundary_condition in config.get_boundary_conditions():
        simulation.set_boundary_conditions(boundary_condition)
    return simulation
