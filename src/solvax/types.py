"""Type definitions for solvax."""

from __future__ import annotations

import numpy as np
from jaxtyping import Array, Float, Int

ArrayLike = Array | np.ndarray

# Structural Types
Coordinates = Float[ArrayLike, "num_all_atoms 3"]
LatticeVectors = Float[ArrayLike, "3 3"]
SpeciesIndices = Int[ArrayLike, "num_atoms"]
NeighborIndices = Int[ArrayLike, "num_atoms max_neighbors"]
ImageToCentral = Int[ArrayLike, "num_all_atoms"]

# Quadrature Types
GridDirections = Float[ArrayLike, "num_points 3"]
GridWeights = Float[ArrayLike, "num_points"]
PointExposure = Float[ArrayLike, "num_points"]
ExposureDerivatives = Float[ArrayLike, "num_points max_neighbors 3"]

# Per-species Types
SpeciesRadii = Float[ArrayLike, "num_species"]
SpeciesThresholds = Float[ArrayLike, "num_species 2"]
RadialWeights = Float[ArrayLike, "num_species"]

# Physics Types
AtomicAreas = Float[ArrayLike, "num_atoms"]
AtomicEnergies = Float[ArrayLike, "num_atoms"]
Gradients = Float[ArrayLike, "num_atoms 3"]
AreaGradients = Float[ArrayLike, "num_atoms num_atoms 3"]
AreaStrainDerivatives = Float[ArrayLike, "num_atoms 3 3"]
StressTensor = Float[ArrayLike, "3 3"]
ShellShifts = Float[ArrayLike, "num_shells num_atoms"]
