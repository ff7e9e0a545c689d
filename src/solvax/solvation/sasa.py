"""Non-polar solvation from the smooth solvent accessible surface area."""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from typing import Any

import jax.numpy as jnp
import numpy as np

from solvax.config import SASAInput
from solvax.errors import PreconditionViolationError
from solvax.geometry.lebedev import build_angular_grid
from solvax.physics.constants import SURFACE_TENSION_SCALE
from solvax.physics.sasa import compute_surface_area
from solvax.physics.smoothing import build_integration_parameters
from solvax.solvation.base import register_solvation
from solvax.types import (
  AtomicAreas,
  AtomicEnergies,
  Coordinates,
  Gradients,
  ImageToCentral,
  LatticeVectors,
  NeighborIndices,
  ShellShifts,
  SpeciesIndices,
  StressTensor,
)

logger = logging.getLogger(__name__)


class ModelState(enum.IntEnum):
  """Update stages of a solvation model. Later stages imply the earlier ones."""

  UNINITIALIZED = 0
  COORDS_VALID = 1
  CHARGED = 2


@register_solvation("sasa")
class SASACont:
  """Cavity solvation energy proportional to the solvent accessible surface area.

  The energy of atom ``i`` is its smooth surface area times the scaled surface
  tension of its species. The contribution does not depend on charges, but it
  follows the same staging as charge-dependent models: ``update_coordinates``,
  then ``update_charges``, then queries. Calls out of order raise
  ``PreconditionViolationError``.

  Not thread-safe; callers serialize updates and queries.

  Args:
    sasa_input: Model parameters.
    n_atoms: Number of atoms in the central cell.
    species: Species index of every atom, shape (n_atoms,).
    species_names: Name of every species.
    lattice_vectors: Lattice vectors as rows, shape (3, 3). Selects periodic mode.

  Example:
    >>> model = SASACont(sasa_input, 2, jnp.array([0, 0]), ["C"])
    >>> model.update_coordinates(neighbors, None, coordinates, jnp.array([0, 0]))
    >>> model.update_charges(jnp.array([0, 0]), neighbors, None, None, None)
    >>> energies = model.get_energies()

  """

  def __init__(
    self,
    sasa_input: SASAInput,
    n_atoms: int,
    species: SpeciesIndices,
    species_names: Sequence[str],
    lattice_vectors: LatticeVectors | None = None,
  ) -> None:
    sasa_input.validate()
    species = np.asarray(species)
    if species.shape != (n_atoms,):
      msg = f"Expected species of shape ({n_atoms},), got {species.shape}"
      raise PreconditionViolationError(msg)
    if len(species_names) != sasa_input.n_species:
      msg = (
        f"Got {len(species_names)} species names for {sasa_input.n_species} "
        "parametrized species"
      )
      raise PreconditionViolationError(msg)
    if n_atoms > 0 and (species.min() < 0 or species.max() >= sasa_input.n_species):
      msg = f"Species indices must lie in [0, {sasa_input.n_species}), got {species.tolist()}"
      raise PreconditionViolationError(msg)

    self.sasa_input = sasa_input
    self.n_atoms = n_atoms
    self.species = jnp.asarray(species)
    self.species_names = list(species_names)
    self.is_periodic = lattice_vectors is not None
    self.lattice_vectors = jnp.zeros((3, 3))
    self.volume = 0.0

    self.grid = build_angular_grid(sasa_input.grid_size)
    self.switch, self.coefficients = build_integration_parameters(
      sasa_input.smoothing,
      jnp.asarray(sasa_input.probe_radii),
    )
    self.surface_tension = (
      jnp.asarray(sasa_input.surface_tension)[self.species] * SURFACE_TENSION_SCALE
    )
    self.cutoff = (
      2.0 * (max(sasa_input.probe_radii) + sasa_input.smoothing) + sasa_input.cutoff_offset
    )

    self.surface_area = jnp.zeros(n_atoms)
    self.energies = jnp.zeros(n_atoms)
    self.area_gradient = jnp.zeros((n_atoms, n_atoms, 3))
    self.area_strain = jnp.zeros((n_atoms, 3, 3))
    self.gradient = jnp.zeros((n_atoms, 3))
    self.stress = jnp.zeros((3, 3))
    self._state = ModelState.UNINITIALIZED

    if self.is_periodic:
      self.update_lattice_vectors(lattice_vectors)
    logger.info("SASA model: %s", self.summary())

  @classmethod
  def from_input(
    cls,
    sasa_input: SASAInput,
    n_atoms: int,
    species: SpeciesIndices,
    species_names: Sequence[str],
    lattice_vectors: LatticeVectors | None = None,
  ) -> SASACont:
    """Build a model from parsed input, as the host does for every registered model."""
    return cls(sasa_input, n_atoms, species, species_names, lattice_vectors)

  @property
  def state(self) -> ModelState:
    return self._state

  def _require(self, required: ModelState, operation: str) -> None:
    if self._state < required:
      msg = f"{operation} requires state {required.name}, model is {self._state.name}"
      raise PreconditionViolationError(msg)

  def summary(self) -> str:
    """Describe the integration grid, as total and per-atom grid points."""
    n_points = self.grid.n_points
    return (
      f"Grid points: {float(self.n_atoms * n_points):.6e} total, {n_points} per atom, "
      f"cutoff {self.cutoff:.4f}"
    )

  def update_lattice_vectors(self, lattice_vectors: LatticeVectors) -> None:
    """Store new lattice vectors and invalidate all geometry-derived results."""
    if not self.is_periodic:
      msg = "Lattice vectors can only be updated for a periodic system"
      raise PreconditionViolationError(msg)
    lattice_vectors = jnp.asarray(lattice_vectors)
    if lattice_vectors.shape != (3, 3):
      msg = f"Expected lattice vectors of shape (3, 3), got {lattice_vectors.shape}"
      raise PreconditionViolationError(msg)
    self.lattice_vectors = lattice_vectors
    self.volume = float(jnp.abs(jnp.linalg.det(lattice_vectors)))
    self._state = ModelState.UNINITIALIZED

  def update_coordinates(
    self,
    neighbors: NeighborIndices,
    image_to_central: ImageToCentral | None,
    coordinates: Coordinates,
    species: SpeciesIndices,
  ) -> None:
    """Recompute surface areas, energies and their derivatives.

    Args:
        neighbors: Neighbor indices into ``coordinates`` covering at least
            ``get_cutoff()``, shape (n_atoms, max_neighbors). Entries outside
            ``[0, n_all)`` are padding.
        image_to_central: Central atom of every row of ``coordinates``, shape (n_all,).
            ``None`` for a system without periodic images.
        coordinates: Central atoms followed by periodic images, shape (n_all, 3).
        species: Species of every central atom, shape (n_atoms,). Must equal the
            species the model was built with.

    """
    coordinates = jnp.asarray(coordinates)
    species = jnp.asarray(species)
    neighbors = jnp.asarray(neighbors)
    if coordinates.ndim != 2 or coordinates.shape[1] != 3 or coordinates.shape[0] < self.n_atoms:  # noqa: PLR2004
      msg = f"Expected coordinates of shape (>={self.n_atoms}, 3), got {coordinates.shape}"
      raise PreconditionViolationError(msg)
    if species.shape != (self.n_atoms,):
      msg = f"Expected species of shape ({self.n_atoms},), got {species.shape}"
      raise PreconditionViolationError(msg)
    if not bool(jnp.array_equal(species, self.species)):
      msg = "Species indices differ from the species the model was initialized with"
      raise PreconditionViolationError(msg)
    if neighbors.ndim != 2 or neighbors.shape[0] != self.n_atoms:  # noqa: PLR2004
      msg = f"Expected neighbors of shape ({self.n_atoms}, max_neighbors), got {neighbors.shape}"
      raise PreconditionViolationError(msg)
    if image_to_central is None:
      if coordinates.shape[0] != self.n_atoms:
        msg = "An image-to-central map is required when coordinates include periodic images"
        raise PreconditionViolationError(msg)
      image_to_central = jnp.arange(self.n_atoms)
    image_to_central = jnp.asarray(image_to_central)
    if image_to_central.shape != (coordinates.shape[0],):
      msg = (
        f"Expected image-to-central map of shape ({coordinates.shape[0]},), "
        f"got {image_to_central.shape}"
      )
      raise PreconditionViolationError(msg)

    result = compute_surface_area(
      coordinates,
      species,
      neighbors,
      image_to_central,
      self.grid,
      self.switch,
      self.coefficients,
      self.cutoff,
      self.sasa_input.tolerance,
    )
    self.surface_area = result.area
    self.area_gradient = result.area_gradient
    self.area_strain = result.area_strain
    self.energies = result.area * self.surface_tension
    self.gradient = jnp.einsum("i,ikx->kx", self.surface_tension, result.area_gradient)
    self.stress = -jnp.einsum("i,ixy->xy", self.surface_tension, result.area_strain)
    logger.debug("Total surface area %.6f for %d atoms", float(jnp.sum(result.area)), self.n_atoms)

    self._state = ModelState.COORDS_VALID

  def update_charges(
    self,
    species: SpeciesIndices,  # noqa: ARG002
    neighbors: NeighborIndices,  # noqa: ARG002
    charges: Any,  # noqa: ARG002
    reference_charges: Any,  # noqa: ARG002
    image_to_central: ImageToCentral | None,  # noqa: ARG002
  ) -> None:
    """Mark charges as current. The surface area term does not depend on them."""
    self._require(ModelState.COORDS_VALID, "update_charges")
    self._state = ModelState.CHARGED

  def get_cutoff(self) -> float:
    """Real-space cutoff the neighbor list has to cover."""
    return self.cutoff

  def get_surface_area(self) -> AtomicAreas:
    self._require(ModelState.COORDS_VALID, "get_surface_area")
    return self.surface_area

  def get_energies(self) -> AtomicEnergies:
    self._require(ModelState.CHARGED, "get_energies")
    return self.energies

  def add_gradients(self, gradients: Gradients) -> Gradients:
    """Return ``gradients`` with the surface energy gradient added.

    Args:
        gradients: Gradient buffer of the host, shape (n_atoms, 3).

    Returns:
        The accumulated gradients.

    """
    self._require(ModelState.CHARGED, "add_gradients")
    gradients = jnp.asarray(gradients)
    if gradients.shape != (self.n_atoms, 3):
      msg = f"Expected gradients of shape ({self.n_atoms}, 3), got {gradients.shape}"
      raise PreconditionViolationError(msg)
    return gradients + self.gradient

  def get_stress(self) -> StressTensor:
    """Stress tensor of the surface energy, ``-dE/d(strain) / volume``."""
    self._require(ModelState.CHARGED, "get_stress")
    if not self.is_periodic:
      msg = "Stress is only available for periodic systems"
      raise PreconditionViolationError(msg)
    if self.volume <= 0.0:
      msg = f"Cell volume must be positive, got {self.volume}"
      raise PreconditionViolationError(msg)
    return self.stress / self.volume

  def get_shifts(self, n_shells: int) -> tuple[AtomicEnergies, ShellShifts]:
    """Potential shifts per atom and per shell, always zero for this model."""
    self._require(ModelState.CHARGED, "get_shifts")
    if n_shells < 0:
      msg = f"Number of shells must not be negative, got {n_shells}"
      raise PreconditionViolationError(msg)
    return jnp.zeros(self.n_atoms), jnp.zeros((n_shells, self.n_atoms))
