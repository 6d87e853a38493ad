"""Tests for knot vector utilities."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from basis_splines._knots_impl import _check_knots_info, _greville_impl
from basis_splines.knots import (
    create_uniform_open_knot_vector,
    merge_knots,
    to_breakpoints,
    to_knots,
)


class TestCheckKnotsInfo:
    """Tests for `_check_knots_info`."""

    def test_valid_inputs(self) -> None:
        """Accept a well-formed knot vector."""
        _check_knots_info(np.array([0.0, 0.0, 1.0, 1.0]), 2)

    def test_not_1d(self) -> None:
        """Reject multi-dimensional knots."""
        with pytest.raises(TypeError, match="knots must be a 1D array"):
            _check_knots_info(np.zeros((2, 2)), 1)

    def test_order_too_small(self) -> None:
        """Reject orders below 1."""
        with pytest.raises(ValueError, match="order must be at least 1"):
            _check_knots_info(np.array([0.0, 1.0]), 0)

    def test_not_enough_knots(self) -> None:
        """Reject knot vectors without any basis function."""
        with pytest.raises(ValueError, match="at least order\\+1 elements"):
            _check_knots_info(np.array([0.0, 0.0, 1.0]), 3)

    def test_decreasing(self) -> None:
        """Reject decreasing knots."""
        with pytest.raises(ValueError, match="non-decreasing"):
            _check_knots_info(np.array([0.0, 1.0, 0.5]), 1)

    def test_not_finite(self) -> None:
        """Reject infinite knots."""
        with pytest.raises(ValueError, match="finite"):
            _check_knots_info(np.array([0.0, np.inf]), 1)


class TestToKnots:
    """Tests for `to_knots`."""

    def test_known_values(self) -> None:
        """Each breakpoint is repeated ``order - continuity`` times."""
        knots = to_knots([0.0, 0.5, 1.0], [0, 2, 0], 3)
        nptest.assert_array_equal(knots, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])

    def test_reduced_continuity(self) -> None:
        """Lower continuity repeats the interior breakpoint."""
        knots = to_knots([0.0, 0.25, 0.5, 1.0], [0, 1, 0, 0], 3)
        nptest.assert_array_equal(
            knots, [0.0, 0.0, 0.0, 0.25, 0.25, 0.5, 0.5, 0.5, 1.0, 1.0, 1.0]
        )

    def test_preserves_float32(self) -> None:
        """The breakpoint dtype is preserved."""
        knots = to_knots(np.array([0.0, 1.0], dtype=np.float32), [0, 0], 2)
        assert knots.dtype == np.float32

    def test_size_mismatch(self) -> None:
        """Breakpoints and continuities must have the same size."""
        with pytest.raises(ValueError, match="same size"):
            to_knots([0.0, 1.0], [0], 2)

    def test_not_strictly_increasing(self) -> None:
        """Breakpoints must be strictly increasing."""
        with pytest.raises(ValueError, match="strictly increasing"):
            to_knots([0.0, 0.5, 0.5, 1.0], [0, 1, 1, 0], 2)

    @pytest.mark.parametrize("continuity", [-1, 3])
    def test_continuity_out_of_range(self, continuity: int) -> None:
        """Continuities must be in [0, order-1]."""
        with pytest.raises(ValueError, match="continuities must be between 0 and 2"):
            to_knots([0.0, 0.5, 1.0], [0, continuity, 0], 3)

    def test_too_few_breakpoints(self) -> None:
        """At least two breakpoints are required."""
        with pytest.raises(ValueError, match="at least two breakpoints"):
            to_knots([0.0], [0], 2)


class TestToBreakpoints:
    """Tests for `to_breakpoints`."""

    def test_known_values(self) -> None:
        """Continuity is the order minus the multiplicity."""
        breakpoints, continuities = to_breakpoints([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], 3)
        nptest.assert_array_equal(breakpoints, [0.0, 0.5, 1.0])
        nptest.assert_array_equal(continuities, [0, 2, 0])

    def test_merges_within_tolerance(self) -> None:
        """Knots closer than the tolerance are merged into the previous breakpoint."""
        breakpoints, continuities = to_breakpoints([0.0, 0.0, 0.5, 0.5 + 1e-9, 1.0, 1.0], 2)
        nptest.assert_array_equal(breakpoints, [0.0, 0.5, 1.0])
        nptest.assert_array_equal(continuities, [0, 0, 0])

    def test_explicit_tolerance(self) -> None:
        """A zero tolerance only merges identical knots."""
        breakpoints, _ = to_breakpoints([0.0, 0.0, 0.5, 0.5 + 1e-9, 1.0, 1.0], 2, tol=0.0)
        assert breakpoints.size == 4

    @pytest.mark.parametrize(
        ("breakpoints", "continuities", "order"),
        [
            ([0.0, 1.0], [0, 0], 1),
            ([0.0, 0.5, 1.0], [0, 1, 0], 2),
            ([0.0, 0.3, 0.7, 1.0], [0, 2, 1, 0], 3),
            ([-1.0, 0.0, 2.0, 3.5, 4.0], [0, 3, 0, 2, 0], 4),
        ],
    )
    def test_round_trip(
        self, breakpoints: list[float], continuities: list[int], order: int
    ) -> None:
        """Expanding and collapsing again gives the same knot vector."""
        knots = to_knots(breakpoints, continuities, order)
        new_breakpoints, new_continuities = to_breakpoints(knots, order)
        nptest.assert_array_equal(new_breakpoints, breakpoints)
        nptest.assert_array_equal(new_continuities, continuities)
        nptest.assert_array_equal(to_knots(new_breakpoints, new_continuities, order), knots)

    def test_empty(self) -> None:
        """Empty knot vectors are rejected."""
        with pytest.raises(ValueError, match="must not be empty"):
            to_breakpoints([], 2)

    def test_decreasing(self) -> None:
        """Decreasing knot vectors are rejected."""
        with pytest.raises(ValueError, match="non-decreasing"):
            to_breakpoints([1.0, 0.0], 1)

    def test_negative_tolerance(self) -> None:
        """Negative tolerances are rejected."""
        with pytest.raises(ValueError, match="tol must be non-negative"):
            to_breakpoints([0.0, 1.0], 1, tol=-1.0)


class TestMergeKnots:
    """Tests for `merge_knots`."""

    def test_coalesces_common_knots(self) -> None:
        """Common knots are emitted once per shared occurrence."""
        merged = merge_knots([0.0, 0.0, 0.5, 1.0, 1.0], [0.0, 0.0, 0.25, 0.5, 1.0, 1.0])
        nptest.assert_array_equal(merged, [0.0, 0.0, 0.25, 0.5, 1.0, 1.0])

    def test_keeps_maximum_multiplicity(self) -> None:
        """The multiplicity of a site is the larger of both inputs."""
        merged = merge_knots([0.0, 0.5, 0.5, 1.0], [0.0, 0.5, 1.0])
        nptest.assert_array_equal(merged, [0.0, 0.5, 0.5, 1.0])

    def test_within_tolerance(self) -> None:
        """Knots closer than the tolerance are coalesced."""
        merged = merge_knots([0.0, 0.5, 1.0], [0.0, 0.5 + 1e-9, 1.0])
        assert merged.size == 3

    def test_is_sorted(self) -> None:
        """The result is sorted for interleaved inputs."""
        rng = np.random.default_rng(3)
        knots_a = np.sort(rng.random(7))
        knots_b = np.sort(rng.random(5))
        merged = merge_knots(knots_a, knots_b)
        assert merged.size == 12
        assert np.all(np.diff(merged) >= 0)

    def test_unsorted_raises(self) -> None:
        """Unsorted inputs are rejected."""
        with pytest.raises(ValueError, match="knots_b must be non-decreasing"):
            merge_knots([0.0, 1.0], [1.0, 0.0])


class TestGreville:
    """Tests for `_greville_impl`."""

    def test_quadratic(self) -> None:
        """Sites are averages of order-1 consecutive interior knots."""
        knots = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
        nptest.assert_allclose(_greville_impl(knots, 3), [0.0, 0.25, 0.75, 1.0])

    def test_linear(self) -> None:
        """For order 2 the sites are the interior knots."""
        knots = np.array([0.0, 0.0, 0.3, 0.6, 1.0, 1.0])
        nptest.assert_allclose(_greville_impl(knots, 2), [0.0, 0.3, 0.6, 1.0])

    def test_order_one(self) -> None:
        """For order 1 the knots themselves are returned."""
        knots = np.array([0.0, 0.5, 1.0])
        nptest.assert_array_equal(_greville_impl(knots, 1), knots)


class TestCreateUniformOpenKnotVector:
    """Tests for `create_uniform_open_knot_vector`."""

    def test_default(self) -> None:
        """Default maximum smoothness on [0, 1]."""
        knots = create_uniform_open_knot_vector(2, 3)
        nptest.assert_allclose(knots, [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0])
        assert knots.dtype == np.float64

    def test_continuity_and_domain(self) -> None:
        """Interior knots are repeated ``order - continuity`` times."""
        knots = create_uniform_open_knot_vector(2, 3, continuity=0, domain=(-1.0, 1.0))
        nptest.assert_allclose(knots, [-1.0, -1.0, -1.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0])

    def test_float32(self) -> None:
        """The dtype can be chosen."""
        knots = create_uniform_open_knot_vector(4, 2, dtype=np.float32)
        assert knots.dtype == np.float32
        assert knots.size == 7

    def test_num_intervals_error(self) -> None:
        """At least one interval is required."""
        with pytest.raises(ValueError, match="num_intervals must be positive"):
            create_uniform_open_knot_vector(0, 2)

    def test_continuity_error(self) -> None:
        """The continuity must be below the order."""
        with pytest.raises(ValueError, match="Continuity must be between 0 and 1"):
            create_uniform_open_knot_vector(2, 2, continuity=2)

    def test_domain_error(self) -> None:
        """The domain end must be after its start."""
        with pytest.raises(ValueError, match="end must be greater than start"):
            create_uniform_open_knot_vector(2, 2, domain=(1.0, 0.0))

    def test_dtype_error(self) -> None:
        """Only float32 and float64 are supported."""
        with pytest.raises(ValueError, match="dtype must be float64 or float32"):
            create_uniform_open_knot_vector(2, 2, dtype=np.int32)
