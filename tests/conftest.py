"""Shared test fixtures."""

import itertools

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from solvax.config import SASAInput
from solvax.geometry.lebedev import GridSize, build_angular_grid
from solvax.physics.smoothing import build_integration_parameters

# Analytic gradients are compared against autodiff at double precision.
jax.config.update("jax_enable_x64", True)


def dense_neighbor_list(coordinates, n_atoms, cutoff):
    """Brute-force neighbor list in the padded (n_atoms, max_neighbors) layout."""
    coordinates = np.asarray(coordinates)
    n_all = coordinates.shape[0]
    rows = []
    for i in range(n_atoms):
        distances = np.linalg.norm(coordinates - coordinates[i], axis=1)
        rows.append([j for j in np.flatnonzero(distances <= cutoff) if j != i])
    width = max(1, max((len(row) for row in rows), default=0))
    neighbors = np.full((n_atoms, width), n_all, dtype=np.int32)
    for i, row in enumerate(rows):
        neighbors[i, : len(row)] = row
    return jnp.asarray(neighbors)


def periodic_images(central, lattice):
    """Central atoms followed by their images in the 26 surrounding cells."""
    central = np.asarray(central)
    lattice = np.asarray(lattice)
    coordinates = [central]
    image_to_central = [np.arange(central.shape[0])]
    for shift in itertools.product((-1, 0, 1), repeat=3):
        if shift == (0, 0, 0):
            continue
        coordinates.append(central + np.asarray(shift) @ lattice)
        image_to_central.append(np.arange(central.shape[0]))
    return jnp.asarray(np.concatenate(coordinates)), jnp.asarray(np.concatenate(image_to_central))


@pytest.fixture
def neighbor_list_fn():
    """Returns a brute-force neighbor list builder."""
    return dense_neighbor_list


@pytest.fixture
def periodic_images_fn():
    """Returns a builder of explicit periodic images."""
    return periodic_images


@pytest.fixture
def sasa_input() -> SASAInput:
    """Single species with probe-expanded radius 1.5 and smoothing 0.3."""
    return SASAInput(
        probe_radius=0.4,
        vdw_radii=(1.1,),
        surface_tension=(1.0,),
        smoothing=0.3,
        grid_size=GridSize.LEBEDEV_110,
    ).validate()


@pytest.fixture
def two_species_input() -> SASAInput:
    """Two species with different radii and surface tensions."""
    return SASAInput(
        probe_radius=0.4,
        vdw_radii=(1.1, 1.4),
        surface_tension=(1.0, -0.5),
        smoothing=0.3,
        grid_size=GridSize.LEBEDEV_110,
    ).validate()


@pytest.fixture
def integration_parameters(two_species_input):
    """Grid, switching coefficients, species parameters, cutoff and tolerance."""
    grid = build_angular_grid(two_species_input.grid_size)
    switch, coefficients = build_integration_parameters(
        two_species_input.smoothing, jnp.asarray(two_species_input.probe_radii),
    )
    cutoff = 2.0 * (max(two_species_input.probe_radii) + two_species_input.smoothing) + 2.0
    return grid, switch, coefficients, cutoff, two_species_input.tolerance


@pytest.fixture
def cluster_positions():
    """Six atoms packed closely enough that many grid points are partially buried."""
    return jnp.array([
        [0.0, 0.0, 0.0],
        [1.9, 0.3, -0.2],
        [-0.4, 2.1, 0.5],
        [0.8, -1.2, 1.7],
        [2.6, 2.2, 1.1],
        [-1.8, -0.6, -1.3],
    ])


@pytest.fixture
def cluster_species():
    return jnp.array([0, 1, 0, 1, 0, 0])
