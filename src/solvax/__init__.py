"""Solvax: differentiable cavity solvation from the solvent accessible surface area.

The surface of every atom is integrated on a Lebedev grid, with neighboring atoms
burying grid points through a smooth switching function, so that energies come
with analytic forces and stress.
"""

from solvax.config import SASAInput, load_sasa_input
from solvax.errors import PreconditionViolationError, SolvationError, UnsupportedGridSizeError
from solvax.geometry.lebedev import AngularGrid, GridSize, build_angular_grid
from solvax.physics.sasa import SurfaceResult, compute_surface_area
from solvax.physics.smoothing import build_integration_parameters
from solvax.solvation import ModelState, SASACont, Solvation, new_solvation

__version__ = "0.1.0"

__all__ = [
  "AngularGrid",
  "GridSize",
  "ModelState",
  "PreconditionViolationError",
  "SASACont",
  "SASAInput",
  "Solvation",
  "SolvationError",
  "SurfaceResult",
  "UnsupportedGridSizeError",
  "build_angular_grid",
  "build_integration_parameters",
  "compute_surface_area",
  "load_sasa_input",
  "new_solvation",
]
