"""Input parameters of the surface area solvation model."""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from flax.struct import dataclass, field

from solvax.chem.radii import assign_vdw_radii
from solvax.geometry.lebedev import GridSize
from solvax.physics.constants import (
  DEFAULT_CUTOFF_OFFSET,
  DEFAULT_GRID_POINTS,
  DEFAULT_SMOOTHING,
  DEFAULT_TOLERANCE,
)

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset(
  {
    "probe_radius",
    "vdw_radii",
    "surface_tension",
    "smoothing",
    "grid_size",
    "cutoff_offset",
    "tolerance",
  },
)


@dataclass(frozen=True)
class SASAInput:
  """Parameters of the solvent accessible surface area model.

  This is a data container, immutable once loaded. All per-species sequences are
  indexed by species.

  Attributes:
    probe_radius: Solvent probe radius added to every van der Waals radius.
    vdw_radii: Van der Waals radius of every species.
    surface_tension: Surface tension of every species, before scaling.
    smoothing: Half-width of the switching region.
    grid_size: Angular grid used for every atom.
    cutoff_offset: Margin added to the real-space cutoff.
    tolerance: Grid points with a smaller exposure are skipped.

  """

  probe_radius: float = field(pytree_node=False)
  vdw_radii: tuple[float, ...] = field(pytree_node=False)
  surface_tension: tuple[float, ...] = field(pytree_node=False)
  smoothing: float = field(pytree_node=False, default=DEFAULT_SMOOTHING)
  grid_size: GridSize = field(pytree_node=False, default=GridSize(DEFAULT_GRID_POINTS))
  cutoff_offset: float = field(pytree_node=False, default=DEFAULT_CUTOFF_OFFSET)
  tolerance: float = field(pytree_node=False, default=DEFAULT_TOLERANCE)

  @property
  def n_species(self) -> int:
    return len(self.vdw_radii)

  @property
  def probe_radii(self) -> tuple[float, ...]:
    """Probe-expanded radius of every species."""
    return tuple(radius + self.probe_radius for radius in self.vdw_radii)

  def validate(self) -> SASAInput:
    """Check parameter ranges and consistency.

    Returns:
        SASAInput: ``self``, for chaining.

    Raises:
        ValueError: If any parameter is out of range or the per-species
            sequences disagree in length.

    """
    values = (self.probe_radius, self.smoothing, self.cutoff_offset, self.tolerance)
    if not all(math.isfinite(value) for value in values):
      msg = f"Non-finite SASA parameter in {values}"
      raise ValueError(msg)
    if self.smoothing <= 0.0:
      msg = f"Smoothing half-width must be positive, got {self.smoothing}"
      raise ValueError(msg)
    if self.probe_radius < 0.0:
      msg = f"Probe radius must not be negative, got {self.probe_radius}"
      raise ValueError(msg)
    if self.tolerance < 0.0:
      msg = f"Exposure tolerance must not be negative, got {self.tolerance}"
      raise ValueError(msg)
    if self.n_species == 0:
      msg = "At least one species is required"
      raise ValueError(msg)
    if len(self.surface_tension) != self.n_species:
      msg = (
        f"Got {self.n_species} van der Waals radii but "
        f"{len(self.surface_tension)} surface tensions"
      )
      raise ValueError(msg)
    too_small = [radius for radius in self.probe_radii if radius <= self.smoothing]
    if too_small:
      msg = (
        f"Probe-expanded radii {too_small} do not exceed the smoothing "
        f"half-width {self.smoothing}"
      )
      raise ValueError(msg)
    return self

  @classmethod
  def from_dict(
    cls,
    data: Mapping[str, Any],
    species_names: Sequence[str] | None = None,
  ) -> SASAInput:
    """Build and validate an input from plain data.

    ``vdw_radii`` may be omitted when ``species_names`` is given, in which case
    Bondi radii are used. A scalar ``surface_tension`` applies to every species.

    Args:
        data: Mapping with the attribute names of this class as keys.
        species_names: Element symbol of every species.

    Returns:
        Validated SASAInput.

    Raises:
        ValueError: On unknown keys, missing values or invalid parameters.
        UnsupportedGridSizeError: If ``grid_size`` is not a Lebedev grid.

    Example:
        >>> sasa_input = SASAInput.from_dict(
        ...     {"probe_radius": 1.4, "surface_tension": 1.0}, species_names=["C", "H"]
        ... )
        >>> sasa_input.vdw_radii
        (1.7, 1.2)

    """
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
      msg = f"Unknown SASA input keys: {sorted(unknown)}"
      raise ValueError(msg)
    if "probe_radius" not in data:
      msg = "SASA input requires 'probe_radius'"
      raise ValueError(msg)

    if "vdw_radii" in data:
      vdw_radii = tuple(float(radius) for radius in data["vdw_radii"])
    elif species_names is not None:
      vdw_radii = tuple(assign_vdw_radii(species_names))
      logger.info("Using Bondi radii for species %s", list(species_names))
    else:
      msg = "SASA input requires 'vdw_radii' or species names to assign default radii"
      raise ValueError(msg)
    if species_names is not None and len(species_names) != len(vdw_radii):
      msg = f"Got {len(species_names)} species names but {len(vdw_radii)} van der Waals radii"
      raise ValueError(msg)

    if "surface_tension" not in data:
      msg = "SASA input requires 'surface_tension'"
      raise ValueError(msg)
    tension = data["surface_tension"]
    if isinstance(tension, int | float):
      surface_tension = (float(tension),) * len(vdw_radii)
    else:
      surface_tension = tuple(float(value) for value in tension)

    return cls(
      probe_radius=float(data["probe_radius"]),
      vdw_radii=vdw_radii,
      surface_tension=surface_tension,
      smoothing=float(data.get("smoothing", DEFAULT_SMOOTHING)),
      grid_size=GridSize.from_points(data.get("grid_size", DEFAULT_GRID_POINTS)),
      cutoff_offset=float(data.get("cutoff_offset", DEFAULT_CUTOFF_OFFSET)),
      tolerance=float(data.get("tolerance", DEFAULT_TOLERANCE)),
    ).validate()

  def to_dict(self) -> dict[str, Any]:
    return {
      "probe_radius": self.probe_radius,
      "vdw_radii": list(self.vdw_radii),
      "surface_tension": list(self.surface_tension),
      "smoothing": self.smoothing,
      "grid_size": int(self.grid_size),
      "cutoff_offset": self.cutoff_offset,
      "tolerance": self.tolerance,
    }


def load_sasa_input(
  path: str | Path,
  species_names: Sequence[str] | None = None,
) -> SASAInput:
  """Load SASA model parameters from a JSON file.

  Args:
      path: JSON file holding a mapping accepted by ``SASAInput.from_dict``.
      species_names: Element symbol of every species, used for default radii.

  Returns:
      Validated SASAInput.

  """
  path = Path(path)
  logger.info("Loading SASA parameters from %s", path)
  with path.open() as f:
    data = json.load(f)
  if not isinstance(data, dict):
    msg = f"Expected a JSON object in {path}, got {type(data).__name__}"
    raise ValueError(msg)  # noqa: TRY004
  return SASAInput.from_dict(data, species_names=species_names)
