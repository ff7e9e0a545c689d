"""Tests for smooth surface area integration."""

import chex
import jax
import jax.numpy as jnp
import numpy as np
import pytest

from solvax.geometry.lebedev import GridSize, build_angular_grid
from solvax.physics.sasa import compute_point_exposure, compute_surface_area
from solvax.physics.smoothing import build_integration_parameters


@pytest.fixture
def reference_parameters():
    """One species with probe radius 1.5 and half-width 0.3."""
    grid = build_angular_grid(GridSize.LEBEDEV_230)
    switch, coefficients = build_integration_parameters(0.3, jnp.array([1.5]))
    cutoff = 2.0 * (1.5 + 0.3) + 2.0
    return grid, switch, coefficients, cutoff, 1e-6


def _surface(positions, species, neighbors, parameters, image_to_central=None):
    grid, switch, coefficients, cutoff, tolerance = parameters
    if image_to_central is None:
        image_to_central = jnp.arange(positions.shape[0])
    return compute_surface_area(
        positions, species, neighbors, image_to_central, grid, switch, coefficients, cutoff, tolerance,
    )


def test_isolated_atom_area_is_radial_weight(reference_parameters):
    """Without neighbors every grid point is fully exposed."""
    positions = jnp.array([[0.3, -1.0, 2.0]])
    neighbors = jnp.full((1, 1), 1)

    result = _surface(positions, jnp.array([0]), neighbors, reference_parameters)

    chex.assert_trees_all_close(result.area, jnp.array([1.5**2 + 0.3**2 / 5.0]), rtol=1e-12)
    chex.assert_trees_all_close(result.area_gradient, jnp.zeros((1, 1, 3)))
    chex.assert_trees_all_close(result.area_strain, jnp.zeros((1, 3, 3)))


def test_isolated_atoms_per_species(integration_parameters):
    _, _, coefficients, _, _ = integration_parameters
    positions = jnp.array([[0.0, 0.0, 0.0], [20.0, 0.0, 0.0]])
    neighbors = jnp.array([[1], [0]])

    result = _surface(positions, jnp.array([0, 1]), neighbors, integration_parameters)

    chex.assert_trees_all_close(result.area, coefficients.radial_weights, rtol=1e-12)


def test_distant_pair_keeps_isolated_area(reference_parameters, neighbor_list_fn):
    """At 5.0 apart no grid point is within 1.8 of the other atom."""
    positions = jnp.array([[0.0, 0.0, 0.0], [5.0, 0.0, 0.0]])
    neighbors = neighbor_list_fn(positions, 2, reference_parameters[3])
    assert neighbors.shape == (2, 1)

    result = _surface(positions, jnp.array([0, 0]), neighbors, reference_parameters)

    isolated = 1.5**2 + 0.3**2 / 5.0
    chex.assert_trees_all_close(result.area, jnp.full(2, isolated), rtol=1e-12)
    chex.assert_trees_all_close(result.area_gradient, jnp.zeros((2, 2, 3)), atol=1e-14)


def test_overlapping_pair_buries_facing_hemisphere(reference_parameters, neighbor_list_fn):
    """At 0.5 apart grid points facing the neighbor are inside its inner threshold."""
    grid, switch, coefficients, cutoff, _ = reference_parameters
    positions = jnp.array([[0.0, 0.0, 0.0], [0.5, 0.0, 0.0]])
    neighbors = neighbor_list_fn(positions, 2, cutoff)

    result = _surface(positions, jnp.array([0, 0]), neighbors, reference_parameters)

    isolated = 1.5**2 + 0.3**2 / 5.0
    assert jnp.all(result.area < isolated)
    chex.assert_trees_all_close(result.area[0], result.area[1], rtol=1e-10)

    points = positions[0] + 1.5 * grid.directions
    exposure, _ = compute_point_exposure(
        points, positions[1:], jnp.array([0]), jnp.array([True]), switch, coefficients,
    )
    # |p - r_j|^2 = 2.5 - 1.5 x, below 1.44 for x > 0.7067 and above 3.24 for x < -0.4934
    facing = grid.directions[:, 0] > 0.71
    away = grid.directions[:, 0] < -0.5
    assert jnp.any(facing)
    assert jnp.all(exposure[facing] == 0.0)
    assert jnp.all(exposure[away] == 1.0)
    assert jnp.all((exposure >= 0.0) & (exposure <= 1.0))


@pytest.mark.parametrize("tolerance", [0.0, 0.3, 0.9])
def test_grid_points_at_or_below_tolerance_are_dropped(reference_parameters, tolerance):
    grid, switch, coefficients, cutoff, _ = reference_parameters
    positions = jnp.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    neighbors = jnp.array([[1], [0]])

    result = compute_surface_area(
        positions, jnp.array([0, 0]), neighbors, jnp.arange(2), grid, switch, coefficients, cutoff, tolerance,
    )

    points = positions[0] + 1.5 * grid.directions
    exposure, derivatives = compute_point_exposure(
        points, positions[1:], jnp.array([0]), jnp.array([True]), switch, coefficients,
    )
    weights = jnp.where(exposure > tolerance, grid.weights * coefficients.radial_weights[0] * exposure, 0.0)
    contribution = jnp.einsum("p,px->x", weights, derivatives[:, 0])

    if tolerance > 0.0:
        assert jnp.any((exposure > 0.0) & (exposure <= tolerance))
    chex.assert_trees_all_close(result.area[0], jnp.sum(weights), rtol=1e-12)
    chex.assert_trees_all_close(result.area_gradient[0, 0], contribution, rtol=1e-10, atol=1e-14)
    chex.assert_trees_all_close(result.area_gradient[0, 1], -contribution, rtol=1e-10, atol=1e-14)


def test_higher_tolerance_removes_area(reference_parameters):
    grid, switch, coefficients, cutoff, _ = reference_parameters
    positions = jnp.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    neighbors = jnp.array([[1], [0]])

    areas = [
        compute_surface_area(
            positions, jnp.array([0, 0]), neighbors, jnp.arange(2), grid, switch, coefficients, cutoff, tolerance,
        ).area[0]
        for tolerance in (0.0, 0.3, 0.9)
    ]

    assert areas[0] > areas[1] > areas[2] > 0.0


def test_padding_and_self_entries_are_ignored(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    cutoff = integration_parameters[3]
    neighbors = neighbor_list_fn(cluster_positions, 6, cutoff)
    n_atoms = cluster_positions.shape[0]
    noisy = jnp.concatenate(
        [neighbors, jnp.arange(n_atoms)[:, None], jnp.full((n_atoms, 1), -1), jnp.full((n_atoms, 1), 99)],
        axis=1,
    )

    clean = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)
    padded = _surface(cluster_positions, cluster_species, noisy, integration_parameters)

    chex.assert_trees_all_close(padded, clean, atol=1e-14)


def test_neighbors_beyond_cutoff_are_ignored(reference_parameters):
    grid, switch, coefficients, _, tolerance = reference_parameters
    positions = jnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    neighbors = jnp.array([[1], [0]])

    result = compute_surface_area(
        positions, jnp.array([0, 0]), neighbors, jnp.arange(2), grid, switch, coefficients, 0.5, tolerance,
    )

    chex.assert_trees_all_close(result.area, jnp.full(2, 1.5**2 + 0.3**2 / 5.0), rtol=1e-12)


def test_adding_neighbor_never_increases_area(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    cutoff = integration_parameters[3]
    previous = None
    for n_atoms in range(1, cluster_positions.shape[0] + 1):
        positions = cluster_positions[:n_atoms]
        neighbors = neighbor_list_fn(positions, n_atoms, cutoff)
        area = _surface(positions, cluster_species[:n_atoms], neighbors, integration_parameters).area
        if previous is not None:
            assert jnp.all(area[: n_atoms - 1] <= previous + 1e-14)
        previous = area


def test_gradient_rows_sum_to_zero(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    """Every grid point contribution is paired between the atom and its neighbors."""
    neighbors = neighbor_list_fn(cluster_positions, 6, integration_parameters[3])

    result = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)

    assert jnp.any(jnp.abs(result.area_gradient) > 1e-3)
    chex.assert_trees_all_close(jnp.sum(result.area_gradient, axis=1), jnp.zeros((6, 3)), atol=1e-12)
    chex.assert_trees_all_close(jnp.sum(result.area_gradient, axis=(0, 1)), jnp.zeros(3), atol=1e-12)


def test_gradient_matches_autodiff(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    neighbors = neighbor_list_fn(cluster_positions, 6, integration_parameters[3])

    result = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)
    jacobian = jax.jacfwd(
        lambda pos: _surface(pos, cluster_species, neighbors, integration_parameters).area,
    )(cluster_positions)

    chex.assert_shape(result.area_gradient, (6, 6, 3))
    chex.assert_trees_all_close(result.area_gradient, jacobian, atol=1e-10)


def test_repeated_evaluation_is_bitwise_identical(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    neighbors = neighbor_list_fn(cluster_positions, 6, integration_parameters[3])

    first = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)
    second = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)

    np.testing.assert_array_equal(first.area, second.area)
    np.testing.assert_array_equal(first.area_gradient, second.area_gradient)
    np.testing.assert_array_equal(first.area_strain, second.area_strain)


def test_translation_invariance(integration_parameters, cluster_positions, cluster_species, neighbor_list_fn):
    neighbors = neighbor_list_fn(cluster_positions, 6, integration_parameters[3])

    result = _surface(cluster_positions, cluster_species, neighbors, integration_parameters)
    shifted = _surface(cluster_positions + jnp.array([3.0, -1.0, 0.5]), cluster_species, neighbors, integration_parameters)

    chex.assert_trees_all_close(shifted.area, result.area, atol=1e-12)


class TestPeriodicSystem:
    """Explicit periodic images in a cubic cell."""

    @pytest.fixture
    def periodic_system(self, integration_parameters, periodic_images_fn, neighbor_list_fn):
        central = jnp.array([
            [0.4, 0.2, 0.1],
            [2.3, 1.1, 0.6],
            [5.3, 5.6, 0.9],
        ])
        lattice = 6.0 * jnp.eye(3)
        coordinates, image_to_central = periodic_images_fn(central, lattice)
        neighbors = neighbor_list_fn(coordinates, 3, integration_parameters[3])
        return central, coordinates, image_to_central, neighbors, jnp.array([0, 1, 0])

    def test_images_resolve_to_central_atoms(self, integration_parameters, periodic_system):
        central, coordinates, image_to_central, neighbors, species = periodic_system

        result = _surface(coordinates, species, neighbors, integration_parameters, image_to_central)

        chex.assert_shape(result.area_gradient, (3, 3, 3))
        chex.assert_trees_all_close(jnp.sum(result.area_gradient, axis=1), jnp.zeros((3, 3)), atol=1e-12)
        assert jnp.all(result.area < integration_parameters[2].radial_weights[species])

    def test_gradient_matches_autodiff(self, integration_parameters, periodic_system):
        central, coordinates, image_to_central, neighbors, species = periodic_system
        shifts = coordinates - central[image_to_central]

        result = _surface(coordinates, species, neighbors, integration_parameters, image_to_central)
        jacobian = jax.jacfwd(
            lambda pos: _surface(
                pos[image_to_central] + shifts, species, neighbors, integration_parameters, image_to_central,
            ).area,
        )(central)

        chex.assert_trees_all_close(result.area_gradient, jacobian, atol=1e-10)

    def test_strain_derivative_matches_autodiff(self, integration_parameters, periodic_system):
        _, coordinates, image_to_central, neighbors, species = periodic_system

        def total_area(strain):
            deformed = coordinates @ (jnp.eye(3) + strain).T
            return jnp.sum(
                _surface(deformed, species, neighbors, integration_parameters, image_to_central).area,
            )

        result = _surface(coordinates, species, neighbors, integration_parameters, image_to_central)
        expected = jax.grad(total_area)(jnp.zeros((3, 3)))

        assert jnp.any(jnp.abs(expected) > 1e-3)
        chex.assert_trees_all_close(jnp.sum(result.area_strain, axis=0), expected, atol=1e-10)
