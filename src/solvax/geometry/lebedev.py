"""Lebedev-Laikov angular quadrature grids on the unit sphere.

The surface of every atom is integrated on one of these grids. Tables are taken
from SciPy and renormalized so that the weights of a full sphere sum to one.
"""

from __future__ import annotations

import enum
import functools
import logging
import operator

import jax.numpy as jnp
import numpy as np
from flax.struct import dataclass
from scipy.integrate import lebedev_rule

from solvax.errors import UnsupportedGridSizeError
from solvax.types import GridDirections, GridWeights

logger = logging.getLogger(__name__)

# Number of grid points -> highest spherical harmonic degree integrated exactly.
_LEBEDEV_DEGREES = {
  6: 3,
  14: 5,
  26: 7,
  38: 9,
  50: 11,
  74: 13,
  86: 15,
  110: 17,
  146: 19,
  170: 21,
  194: 23,
  230: 25,
  266: 27,
  302: 29,
  350: 31,
  434: 35,
  590: 41,
  770: 47,
  974: 53,
  1202: 59,
  1454: 65,
  1730: 71,
  2030: 77,
  2354: 83,
  2702: 89,
  3074: 95,
  3470: 101,
  3890: 107,
  4334: 113,
  4802: 119,
  5294: 125,
  5810: 131,
}


class GridSize(enum.IntEnum):
  """Supported angular grids, valued by their number of points."""

  LEBEDEV_6 = 6
  LEBEDEV_14 = 14
  LEBEDEV_26 = 26
  LEBEDEV_38 = 38
  LEBEDEV_50 = 50
  LEBEDEV_74 = 74
  LEBEDEV_86 = 86
  LEBEDEV_110 = 110
  LEBEDEV_146 = 146
  LEBEDEV_170 = 170
  LEBEDEV_194 = 194
  LEBEDEV_230 = 230
  LEBEDEV_266 = 266
  LEBEDEV_302 = 302
  LEBEDEV_350 = 350
  LEBEDEV_434 = 434
  LEBEDEV_590 = 590
  LEBEDEV_770 = 770
  LEBEDEV_974 = 974
  LEBEDEV_1202 = 1202
  LEBEDEV_1454 = 1454
  LEBEDEV_1730 = 1730
  LEBEDEV_2030 = 2030
  LEBEDEV_2354 = 2354
  LEBEDEV_2702 = 2702
  LEBEDEV_3074 = 3074
  LEBEDEV_3470 = 3470
  LEBEDEV_3890 = 3890
  LEBEDEV_4334 = 4334
  LEBEDEV_4802 = 4802
  LEBEDEV_5294 = 5294
  LEBEDEV_5810 = 5810

  @property
  def degree(self) -> int:
    """Quadrature order passed to the Lebedev rule."""
    return _LEBEDEV_DEGREES[self.value]

  @classmethod
  def from_points(cls, n_points: int) -> GridSize:
    """Look up a grid by its number of points.

    Raises:
        UnsupportedGridSizeError: If ``n_points`` is not an integer or no Lebedev
            grid has that many points.

    """
    try:
      return cls(operator.index(n_points))
    except (TypeError, ValueError) as e:
      msg = (
        f"Unsupported angular grid size: {n_points}. "
        f"Available sizes: {[member.value for member in cls]}"
      )
      raise UnsupportedGridSizeError(msg) from e


@dataclass(frozen=True)
class AngularGrid:
  """Directions and weights of an angular quadrature.

  Attributes:
    directions: Unit vectors on the sphere. Shape (n_points, 3).
    weights: Non-negative quadrature weights summing to one. Shape (n_points,).

  """

  directions: GridDirections
  weights: GridWeights

  @property
  def n_points(self) -> int:
    return self.weights.shape[0]


@functools.cache
def _lebedev_table(grid_size: GridSize) -> tuple[np.ndarray, np.ndarray]:
  points, weights = lebedev_rule(grid_size.degree)
  directions = np.ascontiguousarray(np.asarray(points, dtype=np.float64).T)
  weights = np.asarray(weights, dtype=np.float64)
  weights = weights / weights.sum()
  directions.setflags(write=False)
  weights.setflags(write=False)
  logger.debug("Built Lebedev grid with %d points (degree %d).", grid_size.value, grid_size.degree)
  return directions, weights


def build_angular_grid(grid_size: GridSize | int) -> AngularGrid:
  """Build the angular quadrature for a supported grid size.

  Args:
      grid_size (GridSize | int): Grid resolution, either a ``GridSize`` member or
          its number of points.

  Returns:
      AngularGrid: Unit directions and weights normalized to sum to one.

  Raises:
      UnsupportedGridSizeError: If ``grid_size`` is not a Lebedev grid.

  Example:
      >>> grid = build_angular_grid(GridSize.LEBEDEV_110)
      >>> grid.directions.shape
      (110, 3)

  """
  grid_size = GridSize.from_points(grid_size)
  directions, weights = _lebedev_table(grid_size)
  return AngularGrid(directions=jnp.asarray(directions), weights=jnp.asarray(weights))
