from __future__ import annotations

import math

import numpy as np
import pytest


def _min_image_min_distance(coords: np.ndarray, width: float, height: float) -> float:
    delta = coords[:, None, :2] - coords[None, :, :2]
    size = np.array([width, height])
    delta -= size * np.round(delta / size)
    dist = np.hypot(delta[..., 0], delta[..., 1])
    np.fill_diagonal(dist, np.inf)
    return float(dist.min())


class TestPoissonDiscLattice:

    def test_same_seed_gives_identical_ordered_points(self):
        from grafen.lattice import PoissonDiscLattice
        lattice = PoissonDiscLattice(density=20.0)

        first = lattice.generate(2.0, 2.0, rng=np.random.default_rng(1234))
        second = lattice.generate(2.0, 2.0, rng=np.random.default_rng(1234))
        assert np.array_equal(first.coords, second.coords)

    def test_different_seeds_differ(self):
        from grafen.lattice import PoissonDiscLattice
        lattice = PoissonDiscLattice(density=20.0)

        first = lattice.generate(2.0, 2.0, rng=np.random.default_rng(1))
        second = lattice.generate(2.0, 2.0, rng=np.random.default_rng(2))
        assert first.coords.shape != second.coords.shape or not np.allclose(first.coords, second.coords)

    def test_points_inside_half_open_box(self):
        from grafen.lattice import PoissonDiscLattice
        points = PoissonDiscLattice(rmin=0.1).generate(1.5, 2.5, rng=np.random.default_rng(3))

        assert np.all((points.coords[:, 0] >= 0.0) & (points.coords[:, 0] < 1.5))
        assert np.all((points.coords[:, 1] >= 0.0) & (points.coords[:, 1] < 2.5))
        assert np.all(points.coords[:, 2] == 0.0)

    def test_minimum_distance_respected_across_boundaries(self):
        from grafen.lattice import PoissonDiscLattice
        rmin = 0.1
        points = PoissonDiscLattice(rmin=rmin).generate(1.5, 1.5, rng=np.random.default_rng(5))
        assert _min_image_min_distance(points.coords, 1.5, 1.5) >= rmin - 1e-12

    def test_density_close_to_requested(self):
        from grafen.lattice import PoissonDiscLattice
        density = 50.0
        points = PoissonDiscLattice(density=density).generate(3.0, 3.0, rng=np.random.default_rng(7))

        expected = density * 9.0
        assert abs(len(points) - expected) / expected < 0.3

    def test_box_is_not_adjusted(self):
        from grafen.lattice import PoissonDiscLattice
        points = PoissonDiscLattice(density=10.0).generate(1.23, 4.56, rng=np.random.default_rng(0))
        assert points.box_size == (1.23, 4.56)

    def test_density_converted_to_minimum_distance(self):
        from grafen.lattice import PoissonDiscLattice
        lattice = PoissonDiscLattice(density=10.0)
        assert lattice.min_distance == pytest.approx(math.sqrt(2.0 / (math.pi * 10.0)))
        assert lattice.spacing == lattice.min_distance

    def test_tiny_box_still_gives_a_point(self):
        from grafen.lattice import PoissonDiscLattice
        points = PoissonDiscLattice(rmin=1.0).generate(0.1, 0.1, rng=np.random.default_rng(0))
        assert len(points) == 1

    @pytest.mark.parametrize("kwargs", [
        {},
        {"density": 1.0, "rmin": 0.1},
        {"density": 0.0},
        {"rmin": -0.1},
    ])
    def test_bad_parameters_raise(self, kwargs):
        from grafen.errors import InvalidSpacing
        from grafen.lattice import PoissonDiscLattice
        with pytest.raises(InvalidSpacing):
            PoissonDiscLattice(**kwargs)

    def test_non_positive_footprint_raises(self):
        from grafen.errors import InvalidFootprint
        from grafen.lattice import PoissonDiscLattice
        with pytest.raises(InvalidFootprint):
            PoissonDiscLattice(rmin=0.1).generate(0.0, 1.0)


class TestSampler:

    def test_fewer_candidates_give_sparser_sampling(self):
        """Active sites retire after num_candidates rejected annulus samples."""
        from grafen.lattice.poisson import poisson_disc_sample

        sparse = poisson_disc_sample(0.1, 2.0, 2.0, np.random.default_rng(9), num_candidates=1)
        dense = poisson_disc_sample(0.1, 2.0, 2.0, np.random.default_rng(9), num_candidates=30)
        assert 1 <= len(sparse) <= len(dense)
