"""Switching function and per-species parameters for smooth surface integration."""

from __future__ import annotations

import jax
import jax.numpy as jnp
from flax.struct import dataclass

from solvax.types import RadialWeights, SpeciesRadii, SpeciesThresholds


@dataclass(frozen=True)
class SwitchCoefficients:
  r"""Coefficients of the cubic switching function.

  $$
    s(u) = a_0 + (a_1 + a_2 u^2) u, \quad u \in [-w, w]
  $$

  rising from $s(-w) = 0$ inside a neighbor to $s(w) = 1$ outside it, with
  vanishing slope at both ends.
  """

  a0: jax.Array
  a1: jax.Array
  a2: jax.Array


@dataclass(frozen=True)
class SpeciesCoefficients:
  """Per-species integration parameters.

  Attributes:
    probe_radii: Van der Waals radius plus solvent probe radius. Shape (n_species,).
    thresholds: Squared inner and outer edges of the switching region,
      ``(r - w)**2`` and ``(r + w)**2``. Shape (n_species, 2).
    radial_weights: Radial normalization turning angular weights into areas.
      Shape (n_species,).

  """

  probe_radii: SpeciesRadii
  thresholds: SpeciesThresholds
  radial_weights: RadialWeights


def build_switch_coefficients(half_width: float) -> SwitchCoefficients:
  """Build the smoothstep coefficients for a switching half-width ``w``.

  Args:
      half_width (float): Half-width of the switching region, must be positive.

  Returns:
      SwitchCoefficients: ``a0 = 1/2``, ``a1 = 3/(4w)``, ``a2 = -1/(4w^3)``.

  Raises:
      ValueError: If ``half_width`` is not positive.

  """
  if not half_width > 0.0:
    msg = f"Smoothing half-width must be positive, got {half_width}"
    raise ValueError(msg)
  return SwitchCoefficients(
    a0=jnp.asarray(0.5),
    a1=jnp.asarray(3.0 / (4.0 * half_width)),
    a2=jnp.asarray(-1.0 / (4.0 * half_width**3)),
  )


def switching_function(
  u: jax.Array,
  coefficients: SwitchCoefficients,
) -> tuple[jax.Array, jax.Array]:
  """Evaluate the switching function and its derivative.

  Args:
      u (jax.Array): Distance from the neighbor's probe sphere, ``dist - r``.
      coefficients (SwitchCoefficients): Switching coefficients.

  Returns:
      tuple[jax.Array, jax.Array]: ``s(u)`` and ``ds/du``, same shape as ``u``.

  Example:
      >>> coefficients = build_switch_coefficients(0.3)
      >>> s, ds = switching_function(jnp.array([-0.3, 0.0, 0.3]), coefficients)
      >>> print(s)
      [0.  0.5 1. ]

  """
  a2u2 = coefficients.a2 * u * u
  value = coefficients.a0 + (coefficients.a1 + a2u2) * u
  derivative = coefficients.a1 + 3.0 * a2u2
  return value, derivative


def compute_radial_weights(
  half_width: float,
  probe_radii: SpeciesRadii,
  coefficients: SwitchCoefficients,
) -> RadialWeights:
  r"""Closed-form radial normalization of the smooth surface.

  Integrates $r^2$ against $ds/du$ over the switching region, which gives
  $r^2 + w^2/5$ for every species.
  """
  rad = jnp.asarray(probe_radii)
  c1 = 0.25 / half_width

  def antiderivative(x: jax.Array) -> jax.Array:
    return (c1 + 3.0 * coefficients.a2 * (0.2 * x * x - 0.5 * x * rad + rad * rad / 3.0)) * x**3

  return antiderivative(rad + half_width) - antiderivative(rad - half_width)


def build_integration_parameters(
  half_width: float,
  probe_radii: SpeciesRadii,
) -> tuple[SwitchCoefficients, SpeciesCoefficients]:
  """Build switching coefficients, thresholds and radial weights for all species.

  Args:
      half_width (float): Half-width of the switching region.
      probe_radii (SpeciesRadii): Probe-expanded radius of every species, shape (n_species,).

  Returns:
      tuple[SwitchCoefficients, SpeciesCoefficients]: Coefficients shared by all species
      and the per-species parameters.

  Raises:
      ValueError: If ``half_width`` is not positive or a probe radius does not exceed it.

  Example:
      >>> switch, species = build_integration_parameters(0.3, jnp.array([1.5]))
      >>> print(species.thresholds)
      [[1.44 3.24]]

  """
  switch = build_switch_coefficients(half_width)
  rad = jnp.asarray(probe_radii)
  if rad.ndim != 1:
    msg = f"Probe radii must be one value per species, got shape {rad.shape}"
    raise ValueError(msg)
  if bool(jnp.any(rad <= half_width)):
    msg = f"Probe radii must exceed the smoothing half-width {half_width}, got {rad.tolist()}"
    raise ValueError(msg)

  rm = rad - half_width
  rp = rad + half_width
  thresholds = jnp.stack([rm**2, rp**2], axis=-1)
  radial_weights = compute_radial_weights(half_width, rad, switch)
  return switch, SpeciesCoefficients(
    probe_radii=rad,
    thresholds=thresholds,
    radial_weights=radial_weights,
  )
