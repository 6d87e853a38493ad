"""Tests for the Spline class."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from basis_splines import Basis, Interpolation, Spline, create_uniform_open_knot_vector

KNOTS_O3 = [0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0]
KNOTS_O4 = [0.0, 0.0, 0.0, 0.0, 0.25, 0.5, 0.8, 1.0, 1.0, 1.0, 1.0]

PTS = np.linspace(0.0, 1.0, 57)


def _random_spline(knots: list[float], order: int, outputs: int = 1, seed: int = 0) -> Spline:
    rng = np.random.default_rng(seed)
    basis = Basis(knots, order)
    return Spline(basis, rng.standard_normal((basis.dim, outputs)))


@pytest.fixture
def square() -> Spline:
    """The function t**2 on a clamped cubic basis."""
    basis = Basis(create_uniform_open_knot_vector(5, 4), 4)
    return Spline(basis, Interpolation(basis).fit(lambda t: t**2))


class TestSplineInit:
    """Construction and basic properties."""

    def test_vector_coefficients(self) -> None:
        """1D coefficients define a single output."""
        basis = Basis(KNOTS_O3, 3)
        spline = Spline(basis, [1, 2, 3, 4])
        assert spline.output_dimension == 1
        assert spline.coefficients.shape == (4, 1)
        assert spline.coefficients.dtype == np.float64
        assert spline.order == 3
        assert spline.basis is basis
        nptest.assert_allclose(spline.domain, (0.0, 1.0))

    def test_coefficients_are_copies(self) -> None:
        """Modifying the returned coefficients does not change the spline."""
        spline = Spline(Basis(KNOTS_O3, 3), np.zeros((4, 2)))
        spline.coefficients[0, 0] = 5.0
        assert spline.coefficients[0, 0] == 0.0

    def test_wrong_number_of_rows(self) -> None:
        """The coefficient rows must match the basis dimension."""
        with pytest.raises(ValueError, match="must match the basis dimension"):
            Spline(Basis(KNOTS_O3, 3), np.zeros(5))

    def test_wrong_ndim(self) -> None:
        """Coefficients must be 1D or 2D."""
        with pytest.raises(ValueError, match="1D or 2D"):
            Spline(Basis(KNOTS_O3, 3), np.zeros((4, 1, 1)))

    def test_basis_type(self) -> None:
        """The basis argument must be a Basis."""
        with pytest.raises(TypeError, match="basis must be a Basis"):
            Spline(KNOTS_O3, np.zeros(4))  # type: ignore[arg-type]


class TestSplineEvaluate:
    """Evaluation shapes and values."""

    def test_values(self) -> None:
        """Linear splines interpolate their coefficients at the knots."""
        spline = Spline(Basis([0.0, 0.0, 0.5, 1.0, 1.0], 2), [0.0, 1.0, 0.25])
        nptest.assert_allclose(spline([0.0, 0.25, 0.5, 0.75, 1.0])[:, 0], [0, 0.5, 1, 0.625, 0.25])

    def test_shapes(self) -> None:
        """The output dimension is appended to the shape of the points."""
        spline = _random_spline(KNOTS_O3, 3, outputs=2)
        assert spline(0.5).shape == (2,)
        assert spline([0.1, 0.2, 0.3]).shape == (3, 2)
        assert spline(np.full((2, 5), 0.3)).shape == (2, 5, 2)

    def test_negate(self) -> None:
        """Negation flips the sign of the values."""
        spline = _random_spline(KNOTS_O4, 4, outputs=3)
        nptest.assert_allclose((-spline)(PTS), -spline(PTS))
        assert spline.negate().basis is spline.basis


class TestSplineArithmetic:
    """Sums, differences and products."""

    @pytest.mark.parametrize(("knots_right", "order_right"), [(KNOTS_O3, 3), (KNOTS_O4, 4)])
    def test_add(self, knots_right: list[float], order_right: int) -> None:
        """The sum is represented exactly."""
        left = _random_spline(KNOTS_O3, 3, seed=1)
        right = _random_spline(knots_right, order_right, seed=2)
        result = left + right
        assert result.order == max(3, order_right)
        nptest.assert_allclose(result(PTS), left(PTS) + right(PTS), atol=1e-8)

    @pytest.mark.parametrize(("knots_right", "order_right"), [(KNOTS_O3, 3), (KNOTS_O4, 4)])
    def test_sub(self, knots_right: list[float], order_right: int) -> None:
        """The difference is represented exactly."""
        left = _random_spline(KNOTS_O3, 3, seed=3)
        right = _random_spline(knots_right, order_right, seed=4)
        nptest.assert_allclose((left - right)(PTS), left(PTS) - right(PTS), atol=1e-8)
        nptest.assert_allclose(left.sub(left)(PTS), 0.0, atol=1e-8)

    @pytest.mark.parametrize(("knots_right", "order_right"), [(KNOTS_O3, 3), (KNOTS_O4, 4)])
    def test_prod(self, knots_right: list[float], order_right: int) -> None:
        """The product is represented exactly on a basis of order L+R-1."""
        left = _random_spline(KNOTS_O3, 3, seed=5)
        right = _random_spline(knots_right, order_right, seed=6)
        result = left * right
        assert result.order == 2 + order_right
        nptest.assert_allclose(result(PTS), left(PTS) * right(PTS), atol=1e-8)

    def test_broadcast_single_output(self) -> None:
        """A single-output spline is broadcast against a multi-output one."""
        scalar = _random_spline(KNOTS_O3, 3, outputs=1, seed=7)
        vector = _random_spline(KNOTS_O4, 4, outputs=3, seed=8)

        total = scalar + vector
        assert total.output_dimension == 3
        nptest.assert_allclose(total(PTS), scalar(PTS) + vector(PTS), atol=1e-8)

        product = vector * scalar
        assert product.output_dimension == 3
        nptest.assert_allclose(product(PTS), vector(PTS) * scalar(PTS), atol=1e-8)

    def test_incompatible_outputs(self) -> None:
        """Output dimensions must match unless one of them is 1."""
        left = _random_spline(KNOTS_O3, 3, outputs=2)
        right = _random_spline(KNOTS_O3, 3, outputs=3)
        with pytest.raises(ValueError, match="Incompatible output dimensions"):
            left.add(right)
        with pytest.raises(ValueError, match="Incompatible output dimensions"):
            left.prod(right)

    def test_type_errors(self) -> None:
        """Only splines can be added, and only splines or reals multiplied."""
        spline = _random_spline(KNOTS_O3, 3)
        with pytest.raises(TypeError, match="Expected a Spline"):
            spline.add(Basis(KNOTS_O3, 3))  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            spline + 1.0  # type: ignore[operator]
        with pytest.raises(TypeError):
            spline * "2"  # type: ignore[operator]

    def test_scalar_multiplication(self) -> None:
        """Real scalars scale the coefficients on the same basis."""
        spline = _random_spline(KNOTS_O4, 4, outputs=2)
        for scaled in (2.5 * spline, spline * 2.5):
            assert scaled.basis is spline.basis
            nptest.assert_allclose(scaled.coefficients, 2.5 * spline.coefficients)
        nptest.assert_allclose((spline * 3).coefficients, 3.0 * spline.coefficients)

    def test_custom_fit(self) -> None:
        """An injected fit function is used for the sum."""
        calls = []

        def fit(basis: Basis, observations: np.ndarray, points: np.ndarray) -> np.ndarray:
            calls.append(basis.dim)
            return np.linalg.solve(basis(points), observations)

        left = _random_spline(KNOTS_O3, 3, seed=9)
        right = _random_spline(KNOTS_O3, 3, seed=10)
        result = left.add(right, fit=fit)
        assert calls == [4]
        nptest.assert_allclose(result(PTS), left(PTS) + right(PTS), atol=1e-10)


class TestSplineRefinement:
    """Knot insertion and order elevation."""

    def test_insert_knots(self) -> None:
        """Inserting knots does not change the function."""
        spline = _random_spline(KNOTS_O4, 4, outputs=2, seed=11)
        refined = spline.insert_knots([0.4, 0.5, 0.6])
        assert refined.basis.dim == spline.basis.dim + 3
        nptest.assert_allclose(refined(PTS), spline(PTS), atol=1e-6)

    def test_order_elevation(self) -> None:
        """Elevating the order does not change the function."""
        spline = _random_spline(KNOTS_O3, 3, seed=12)
        elevated = spline.order_elevation(2)
        assert elevated.order == 5
        nptest.assert_allclose(elevated(PTS), spline(PTS), atol=1e-8)


class TestSplineCalculus:
    """Derivatives and integrals."""

    def test_derivatives(self, square: Spline) -> None:
        """Derivatives of t**2."""
        first = square.derivative()
        second = square.derivative(2)
        assert first.order == 3
        assert second.order == 2
        nptest.assert_allclose(first(PTS)[:, 0], 2.0 * PTS, atol=1e-10)
        nptest.assert_allclose(second(PTS)[:, 0], 2.0, atol=1e-10)

    def test_integrals(self, square: Spline) -> None:
        """Integrals of t**2 vanish at the first knot."""
        first = square.integral()
        second = square.integral(2)
        assert first.order == 5
        assert second.order == 6
        nptest.assert_allclose(first(PTS)[:, 0], PTS**3 / 3.0, atol=1e-10)
        nptest.assert_allclose(second(PTS)[:, 0], PTS**4 / 12.0, atol=1e-10)

    def test_integral_of_derivative(self) -> None:
        """Integrating the derivative recovers the spline up to its start value."""
        spline = _random_spline(KNOTS_O4, 4, outputs=2, seed=13)
        recovered = spline.derivative().integral()
        nptest.assert_allclose(recovered.basis.knots, spline.basis.knots)
        nptest.assert_allclose(recovered(PTS), spline(PTS) - spline(0.0), atol=1e-10)

    def test_scaled_basis(self) -> None:
        """On x in [0, 2] with t = x / 2, the spline t**2 has derivative x / 2."""
        spline = Spline(Basis([0, 0, 0, 1, 1, 1], 3, scale=0.5), [0.0, 0.0, 1.0])
        t = np.linspace(0.0, 1.0, 11)
        x = 2.0 * t
        nptest.assert_allclose(spline.derivative()(t)[:, 0], x / 2.0, atol=1e-12)
        nptest.assert_allclose(spline.derivative(2)(t)[:, 0], 0.5, atol=1e-12)
        nptest.assert_allclose(spline.integral()(t)[:, 0], x**3 / 12.0, atol=1e-12)

    def test_derivative_across_repeated_knot(self) -> None:
        """A kink of a linear spline gives a piecewise constant derivative."""
        spline = Spline(Basis([0.0, 0.0, 0.5, 0.5, 1.0, 1.0], 2), [0.0, 1.0, 1.0, 3.0])
        derivative = spline.derivative()
        assert derivative.basis.dim == 2
        nptest.assert_allclose(derivative([0.1, 0.4, 0.6, 0.9])[:, 0], [2.0, 2.0, 4.0, 4.0])

    def test_derivative_order_error(self, square: Spline) -> None:
        """Derivative orders must be below the spline order."""
        with pytest.raises(ValueError, match="Derivative order"):
            square.derivative(4)


class TestSplineSegments:
    """Segment extraction and clamping."""

    def test_segment_open(self) -> None:
        """The open segment coincides with the spline on its domain."""
        spline = _random_spline(create_uniform_open_knot_vector(4, 3).tolist(), 3, 2, seed=14)
        segment = spline.get_segment(1, 2, clamped=False)
        assert not segment.basis.is_clamped()
        nptest.assert_allclose(segment.domain, (0.25, 0.75))

        pts = np.linspace(0.25, 0.75, 21)
        nptest.assert_allclose(segment(pts), spline(pts), atol=1e-12)

    def test_segment_clamped(self) -> None:
        """The clamped segment coincides with the spline on its domain."""
        spline = _random_spline(create_uniform_open_knot_vector(4, 3).tolist(), 3, 2, seed=15)
        segment = spline.get_segment(1, 2)
        assert segment.basis.is_clamped()
        nptest.assert_allclose(segment.basis.knots, [0.25, 0.25, 0.25, 0.5, 0.75, 0.75, 0.75])

        pts = np.linspace(0.25, 0.75, 21)
        nptest.assert_allclose(segment(pts), spline(pts), atol=1e-10)

    def test_get_clamped_end_values(self) -> None:
        """The end coefficients of the clamped spline are its end values."""
        spline = _random_spline([0, 1, 2, 3, 4, 5, 6], 3, seed=16)
        clamped = spline.get_clamped()
        nptest.assert_allclose(clamped.basis.knots, [2, 2, 2, 3, 4, 4, 4])
        nptest.assert_allclose(clamped.coefficients[0], spline(2.0), atol=1e-12)
        nptest.assert_allclose(clamped.coefficients[-1], spline(4.0), atol=1e-12)

        pts = np.linspace(2.0, 4.0, 17)
        nptest.assert_allclose(clamped(pts), spline(pts), atol=1e-10)

    def test_get_clamped_small_basis(self) -> None:
        """Bases with fewer than three functions are fitted directly."""
        spline = Spline(Basis([-1.0, 0.0, 1.0, 2.0], 2), [1.0, 3.0])
        clamped = spline.get_clamped()
        nptest.assert_allclose(clamped.basis.knots, [0.0, 0.0, 1.0, 1.0])
        nptest.assert_allclose(clamped.coefficients[:, 0], [1.0, 3.0], atol=1e-12)

    def test_segment_out_of_range(self) -> None:
        """Segment indices are validated."""
        spline = _random_spline(KNOTS_O3, 3)
        with pytest.raises(ValueError, match="Segment indices"):
            spline.get_segment(0, 2)

    def test_segment_outside_domain(self) -> None:
        """Segments outside the domain of an open basis are rejected."""
        spline = _random_spline([0, 1, 2, 3, 4, 5, 6], 3)
        with pytest.raises(ValueError, match="Segment indices 0 to 0 .* outside the domain"):
            spline.get_segment(0, 0)
        with pytest.raises(ValueError, match="outside the domain"):
            spline.get_segment(2, 4, clamped=False)
