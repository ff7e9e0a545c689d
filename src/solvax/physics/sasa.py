"""Smooth solvent accessible surface area by angular quadrature.

Every atom is represented by its probe-expanded sphere. Points of an angular grid
on that sphere are buried by neighboring spheres through a smooth switching
function, and the exposed fraction is integrated into a per-atom area. Because the
switching function is differentiable, the area has analytic derivatives with
respect to atomic positions and cell strain.

References:
    Im, Lee, Brooks, "Generalized Born model with a simple smoothing function",
    J. Comput. Chem. 24, 1691-1702 (2003).
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from flax.struct import dataclass
from jax_md import space

from solvax.geometry.lebedev import AngularGrid
from solvax.physics.smoothing import SpeciesCoefficients, SwitchCoefficients, switching_function
from solvax.types import (
  AreaGradients,
  AreaStrainDerivatives,
  AtomicAreas,
  Coordinates,
  ExposureDerivatives,
  GridDirections,
  ImageToCentral,
  NeighborIndices,
  PointExposure,
  SpeciesIndices,
)


@dataclass(frozen=True)
class SurfaceResult:
  """Surface areas and their derivatives for one set of coordinates.

  Attributes:
    area: Surface area of every atom. Shape (n_atoms,).
    area_gradient: ``area_gradient[i, k]`` is the derivative of ``area[i]`` with
      respect to the position of central atom ``k``. Shape (n_atoms, n_atoms, 3).
    area_strain: Derivative of ``area[i]`` with respect to a homogeneous strain
      of the whole system. Shape (n_atoms, 3, 3).

  """

  area: AtomicAreas
  area_gradient: AreaGradients
  area_strain: AreaStrainDerivatives


def compute_point_exposure(
  points: GridDirections,
  neighbor_positions: jax.Array,
  neighbor_species: jax.Array,
  neighbor_mask: jax.Array,
  switch: SwitchCoefficients,
  coefficients: SpeciesCoefficients,
) -> tuple[PointExposure, ExposureDerivatives]:
  r"""Exposure of surface points to solvent.

  The exposure of a point is the product of switching values over all neighbors
  whose switching region contains it. A point inside the inner threshold of any
  neighbor is buried and has zero exposure.

  Alongside the exposure this returns, per neighbor, the logarithmic derivative

  $$
    \frac{s'(u_j)}{s(u_j)\, d_j} (\mathbf{p} - \mathbf{r}_j)
  $$

  which is zero for neighbors outside their switching region. It is only
  meaningful where the exposure is non-zero.

  Args:
      points: Surface points, shape (n_points, 3).
      neighbor_positions: Neighbor coordinates, shape (max_neighbors, 3).
      neighbor_species: Species of every neighbor, shape (max_neighbors,).
      neighbor_mask: True for real neighbors, False for padding, shape (max_neighbors,).
      switch: Switching function coefficients.
      coefficients: Per-species thresholds and radii.

  Returns:
      Tuple of (exposure, derivatives):
      - exposure: (n_points,) values in [0, 1]
      - derivatives: (n_points, max_neighbors, 3) logarithmic derivative directions

  """
  displacements = points[:, None, :] - neighbor_positions[None, :, :]
  dist2 = space.square_distance(displacements)

  lower = coefficients.thresholds[neighbor_species, 0]
  upper = coefficients.thresholds[neighbor_species, 1]
  buried = jnp.any(neighbor_mask & (dist2 < lower), axis=1)
  in_band = neighbor_mask & (dist2 >= lower) & (dist2 < upper)

  dist = jnp.sqrt(jnp.where(in_band, dist2, 1.0))
  u = dist - coefficients.probe_radii[neighbor_species]
  value, derivative = switching_function(u, switch)
  value = jnp.where(in_band, value, 1.0)

  exposure = jnp.where(buried, 0.0, jnp.prod(value, axis=1))
  # Points with zero exposure never reach the division below.
  safe_value = jnp.where(exposure[:, None] > 0.0, value, 1.0)
  log_derivative = jnp.where(in_band, derivative / (safe_value * dist), 0.0)
  return exposure, log_derivative[..., None] * displacements


@jax.jit
def compute_surface_area(
  coordinates: Coordinates,
  species: SpeciesIndices,
  neighbors: NeighborIndices,
  image_to_central: ImageToCentral,
  grid: AngularGrid,
  switch: SwitchCoefficients,
  coefficients: SpeciesCoefficients,
  cutoff: float,
  tolerance: float,
) -> SurfaceResult:
  """Integrate the smooth surface area of every atom.

  Atoms are processed one after another, grid points and neighbors of an atom are
  vectorized. Each accepted grid point contributes ``w_p * radial_weight * exposure``
  to the area of its atom, and its derivative is paired between the atom and every
  neighbor inside the switching region, so the rows of ``area_gradient`` sum to zero.

  Args:
      coordinates: Central atoms followed by periodic images, shape (n_all, 3).
      species: Species of every central atom, shape (n_atoms,).
      neighbors: Neighbor indices into ``coordinates`` for every central atom,
          shape (n_atoms, max_neighbors). Entries outside ``[0, n_all)`` are padding.
      image_to_central: Central atom of every row of ``coordinates``, shape (n_all,).
      grid: Angular quadrature with weights summing to one.
      switch: Switching function coefficients.
      coefficients: Per-species probe radii, thresholds and radial weights.
      cutoff: Neighbors further than this from the central atom are ignored.
      tolerance: Grid points with an exposure at or below this value are dropped.

  Returns:
      SurfaceResult with areas, position gradients and strain derivatives.

  Example:
      >>> grid = build_angular_grid(GridSize.LEBEDEV_110)
      >>> switch, params = build_integration_parameters(0.3, jnp.array([1.5]))
      >>> result = compute_surface_area(
      ...     jnp.zeros((1, 3)), jnp.array([0]), jnp.full((1, 1), 1), jnp.array([0]),
      ...     grid, switch, params, 5.6, 1e-6,
      ... )
      >>> print(result.area)  # 1.5**2 + 0.3**2 / 5
      [2.268]

  """
  n_atoms = species.shape[0]
  n_all = coordinates.shape[0]
  central_positions = coordinates[:n_atoms]
  atom_indices = jnp.arange(n_atoms)

  valid = (neighbors >= 0) & (neighbors < n_all) & (neighbors != atom_indices[:, None])
  safe_neighbors = jnp.where(valid, neighbors, 0)
  neighbor_positions = coordinates[safe_neighbors]
  neighbor_central = image_to_central[safe_neighbors]
  neighbor_species = species[neighbor_central]

  pair_displacements = central_positions[:, None, :] - neighbor_positions
  valid = valid & (space.square_distance(pair_displacements) <= cutoff**2)

  def atom_surface(
    args: tuple[jax.Array, ...],
  ) -> tuple[jax.Array, jax.Array, jax.Array]:
    index, position, atom_species, positions, central, nbr_species, mask, pair_disp = args
    points = position + coefficients.probe_radii[atom_species] * grid.directions
    exposure, derivatives = compute_point_exposure(
      points,
      positions,
      nbr_species,
      mask,
      switch,
      coefficients,
    )

    accepted = exposure > tolerance
    weights = jnp.where(
      accepted,
      grid.weights * coefficients.radial_weights[atom_species] * exposure,
      0.0,
    )
    derivatives = jnp.where(accepted[:, None, None], derivatives, 0.0)
    contributions = jnp.einsum("p,pmx->mx", weights, derivatives)

    gradient_row = jnp.zeros((n_atoms, 3), dtype=contributions.dtype)
    gradient_row = gradient_row.at[index].add(jnp.sum(contributions, axis=0))
    gradient_row = gradient_row.at[central].add(-contributions)
    strain = jnp.einsum("mx,my->xy", contributions, pair_disp)
    return jnp.sum(weights), gradient_row, strain

  area, area_gradient, area_strain = jax.lax.map(
    atom_surface,
    (
      atom_indices,
      central_positions,
      species,
      neighbor_positions,
      neighbor_central,
      neighbor_species,
      valid,
      pair_displacements,
    ),
  )
  return SurfaceResult(area=area, area_gradient=area_gradient, area_strain=area_strain)
