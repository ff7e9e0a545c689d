"""Common interface of solvation contributions.

A host engine drives every solvation model through the same staged sequence:
coordinates (and lattice vectors) first, then charges, then queries for energies,
gradients, stress and potential shifts. Models implement the ``Solvation``
protocol and register a constructor under a short name.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from solvax.types import (
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


@runtime_checkable
class Solvation(Protocol):
  """Protocol for solvation free energy contributions."""

  def update_lattice_vectors(self, lattice_vectors: LatticeVectors) -> None: ...

  def update_coordinates(
    self,
    neighbors: NeighborIndices,
    image_to_central: ImageToCentral | None,
    coordinates: Coordinates,
    species: SpeciesIndices,
  ) -> None: ...

  def update_charges(
    self,
    species: SpeciesIndices,
    neighbors: NeighborIndices,
    charges: Any,
    reference_charges: Any,
    image_to_central: ImageToCentral | None,
  ) -> None: ...

  def get_cutoff(self) -> float: ...

  def get_energies(self) -> AtomicEnergies: ...

  def add_gradients(self, gradients: Gradients) -> Gradients: ...

  def get_stress(self) -> StressTensor: ...

  def get_shifts(self, n_shells: int) -> tuple[AtomicEnergies, ShellShifts]: ...


# Registry of solvation model constructors
_SOLVATION_MODELS: dict[str, Callable[..., Solvation]] = {}


def register_solvation(kind: str):
  """Decorator to register a solvation model under a name.

  Example:
    >>> @register_solvation("my_model")
    ... class MyModel:
    ...     ...

  """

  def decorator(cls):
    _SOLVATION_MODELS[kind] = cls
    return cls

  return decorator


def available_solvation_models() -> list[str]:
  return sorted(_SOLVATION_MODELS)


def new_solvation(kind: str, *args: Any, **kwargs: Any) -> Solvation:
  """Construct a registered solvation model.

  Args:
    kind: Registered model name, e.g. ``"sasa"``.
    *args: Positional arguments of the model constructor.
    **kwargs: Keyword arguments of the model constructor.

  Returns:
    The constructed model.

  Raises:
    ValueError: If no model is registered under ``kind``.

  """
  if kind not in _SOLVATION_MODELS:
    msg = f"Unknown solvation model: {kind}. Available: {available_solvation_models()}"
    raise ValueError(msg)
  return _SOLVATION_MODELS[kind](*args, **kwargs)
