"""Constants and defaults for the surface area solvation model.

Lengths are in Angstroms.
"""

from __future__ import annotations

import math

# Surface tension scaling: 1e-5 unit conversion times the 4*pi full-sphere factor,
# since angular grid weights are normalized to one.
SURFACE_TENSION_SCALE = 4.0e-5 * math.pi

# Smooth surface integration defaults
DEFAULT_SMOOTHING = 0.3  # Half-width of the switching region (Angstroms)
DEFAULT_CUTOFF_OFFSET = 2.0  # Margin added to the real-space cutoff (Angstroms)
DEFAULT_TOLERANCE = 1.0e-6  # Grid points with smaller exposure are dropped
DEFAULT_GRID_POINTS = 230
