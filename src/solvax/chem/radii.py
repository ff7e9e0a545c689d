"""Default van der Waals radii by element.

Reference:
    Bondi, "van der Waals Volumes and Radii", J. Phys. Chem. 68, 441-451 (1964),
    with the alkali metal and transition metal extensions used by most SASA codes.
"""

from __future__ import annotations

from collections.abc import Sequence

# Angstroms
BONDI_RADII: dict[str, float] = {
  "H": 1.20,
  "He": 1.40,
  "Li": 1.82,
  "C": 1.70,
  "N": 1.55,
  "O": 1.52,
  "F": 1.47,
  "Ne": 1.54,
  "Na": 2.27,
  "Mg": 1.73,
  "Si": 2.10,
  "P": 1.80,
  "S": 1.80,
  "Cl": 1.75,
  "Ar": 1.88,
  "K": 2.75,
  "Ni": 1.63,
  "Cu": 1.40,
  "Zn": 1.39,
  "Ga": 1.87,
  "As": 1.85,
  "Se": 1.90,
  "Br": 1.85,
  "Kr": 2.02,
  "Pd": 1.63,
  "Ag": 1.72,
  "Cd": 1.58,
  "In": 1.93,
  "Sn": 2.17,
  "Te": 2.06,
  "I": 1.98,
  "Xe": 2.16,
  "Pt": 1.75,
  "Au": 1.66,
  "Hg": 1.55,
  "Tl": 1.96,
  "Pb": 2.02,
  "U": 1.86,
}


def normalize_element(symbol: str) -> str:
  """Normalize an element symbol, e.g. ``"CL"`` or ``" cl"`` to ``"Cl"``."""
  symbol = symbol.strip()
  return symbol[:1].upper() + symbol[1:].lower()


def get_vdw_radius(symbol: str) -> float:
  """Return the Bondi radius of an element.

  Raises:
      ValueError: If no radius is tabulated for the element.

  """
  element = normalize_element(symbol)
  if element not in BONDI_RADII:
    msg = f"No default van der Waals radius for element '{symbol}'"
    raise ValueError(msg)
  return BONDI_RADII[element]


def assign_vdw_radii(species_names: Sequence[str]) -> list[float]:
  """Assign default van der Waals radii to a list of species.

  Args:
      species_names: Element symbol of every species.

  Returns:
      List of radii in Angstroms, one per species.

  Example:
      >>> assign_vdw_radii(["C", "O", "H"])
      [1.7, 1.52, 1.2]

  """
  return [get_vdw_radius(name) for name in species_names]
