"""Spline class: a basis and a matrix of coefficients."""

from collections.abc import Callable
from numbers import Real
from typing import Any

import numpy as np
from numpy import typing as npt

from ._basis_utils import _get_input_shape, _normalize_basis_output_1D, _normalize_coefficients
from .basis import Basis
from .interpolation import FitFunction, _solve_least_squares, fit_least_squares


class Spline:
    """A piecewise polynomial function in B-spline form.

    The coefficients have one row per basis function and one column per
    output, so a spline may hold several scalar-valued splines sharing the
    same basis. Splines are immutable: every operation returns a new spline.

    Attributes:
        _basis (Basis): The spline basis. It may be shared by other splines.
        _coefficients (npt.NDArray[np.float32 | np.float64]): 2D array of shape
            (basis.dim, output_dimension).
    """

    def __init__(self, basis: Basis, coefficients: npt.ArrayLike) -> None:
        """Initialize a spline.

        Args:
            basis (Basis): The spline basis.
            coefficients (npt.ArrayLike): The coefficients, 1D (one output) or 2D
                with `basis.dim` rows.

        Raises:
            TypeError: If `basis` is not a Basis.
            ValueError: If the number of coefficient rows differs from the
                basis dimension.
        """
        if not isinstance(basis, Basis):
            raise TypeError(f"basis must be a Basis. Got {type(basis).__name__}.")
        self._basis = basis
        self._coefficients = _normalize_coefficients(coefficients, basis.dim)

    def __repr__(self) -> str:
        return f"Spline(basis={self._basis!r}, output_dimension={self.output_dimension})"

    @property
    def basis(self) -> Basis:
        """The spline basis."""
        return self._basis

    @property
    def coefficients(self) -> npt.NDArray[np.float32 | np.float64]:
        """A copy of the coefficients, of shape (basis.dim, output_dimension)."""
        return self._coefficients.copy()

    @property
    def output_dimension(self) -> int:
        """The number of outputs (coefficient columns)."""
        return int(self._coefficients.shape[1])

    @property
    def order(self) -> int:
        """The order of the spline basis."""
        return self._basis.order

    @property
    def domain(self) -> tuple[np.float32 | np.float64, np.float32 | np.float64]:
        """The domain of the spline basis."""
        return self._basis.domain

    def evaluate(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the spline at the given points.

        Args:
            pts (npt.ArrayLike): Evaluation points, a scalar or an array of any shape.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Spline values. For a scalar the
                shape is ``(output_dimension,)``, for an array of shape ``S`` it
                is ``S + (output_dimension,)``.

        Example:
            >>> spline = Spline(Basis([0, 0, 0.5, 1, 1], 2), [0.0, 1.0, 0.25])
            >>> spline.evaluate([0.0, 0.25, 0.5, 1.0])
            array([[0.  ],
                   [0.5 ],
                   [1.  ],
                   [0.25]])
        """
        input_shape = _get_input_shape(pts)
        values = self._basis.evaluate(np.ravel(pts)) @ self._coefficients
        return _normalize_basis_output_1D(values, input_shape)

    def __call__(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        return self.evaluate(pts)

    def negate(self) -> "Spline":
        """Get the spline with negated coefficients on the same basis."""
        return Spline(self._basis, -self._coefficients)

    def derivative(self, order: int = 1) -> "Spline":
        """Get the derivative of the spline.

        Args:
            order (int): Derivative order. Must be smaller than the spline order.

        Returns:
            Spline: The derivative, on the order-decreased basis.

        Raises:
            ValueError: If `order` is out of range.
        """
        coefficients, basis = self._basis.derivative_coefficients(self._coefficients, order)
        return Spline(basis, coefficients)

    def integral(self, order: int = 1) -> "Spline":
        """Get the integral of the spline, vanishing at the first knot.

        Args:
            order (int): Integral order. Must be positive.

        Returns:
            Spline: The integral, on the order-increased basis.

        Raises:
            ValueError: If `order` is not positive.
        """
        coefficients, basis = self._basis.integral_coefficients(self._coefficients, order)
        return Spline(basis, coefficients)

    def _check_other(self, other: object) -> "Spline":
        if not isinstance(other, Spline):
            raise TypeError(f"Expected a Spline. Got {type(other).__name__}.")
        if (
            self.output_dimension != other.output_dimension
            and self.output_dimension != 1
            and other.output_dimension != 1
        ):
            raise ValueError(
                f"Incompatible output dimensions {self.output_dimension} and "
                f"{other.output_dimension}."
            )
        return other

    def _refit(
        self,
        basis: Basis,
        values_at: Callable[[npt.NDArray[Any]], npt.NDArray[Any]],
        fit: FitFunction | None,
    ) -> "Spline":
        """Fit a spline on `basis` to a function sampled at its Greville sites."""
        fit = fit_least_squares if fit is None else fit
        sites = basis.greville()
        return Spline(basis, fit(basis, values_at(sites), sites))

    def add(self, other: "Spline", fit: FitFunction | None = None) -> "Spline":
        """Get the sum of two splines.

        The sum is fitted on the combination of both bases at the larger order.
        A spline with a single output is broadcast against the other one.

        Args:
            other (Spline): Spline to add.
            fit (FitFunction | None): Fit strategy. Defaults to least squares.

        Returns:
            Spline: The sum.

        Raises:
            TypeError: If `other` is not a Spline.
            ValueError: If the output dimensions are incompatible.
        """
        other = self._check_other(other)
        basis = self._basis.combine(other._basis, max(self.order, other.order))
        return self._refit(basis, lambda sites: self(sites) + other(sites), fit)

    def sub(self, other: "Spline", fit: FitFunction | None = None) -> "Spline":
        """Get the difference of two splines.

        Args:
            other (Spline): Spline to subtract.
            fit (FitFunction | None): Fit strategy. Defaults to least squares.

        Returns:
            Spline: The difference.

        Raises:
            TypeError: If `other` is not a Spline.
            ValueError: If the output dimensions are incompatible.
        """
        other = self._check_other(other)
        return self.add(other.negate(), fit)

    def prod(self, other: "Spline", fit: FitFunction | None = None) -> "Spline":
        """Get the pointwise product of two splines.

        The product is fitted on the combination of both bases at order
        ``self.order + other.order - 1``. A spline with a single output is
        broadcast against the other one.

        Args:
            other (Spline): Spline to multiply with.
            fit (FitFunction | None): Fit strategy. Defaults to least squares.

        Returns:
            Spline: The product.

        Raises:
            TypeError: If `other` is not a Spline.
            ValueError: If the output dimensions are incompatible.
        """
        other = self._check_other(other)
        basis = self._basis.combine(other._basis, self.order + other.order - 1)
        return self._refit(basis, lambda sites: self(sites) * other(sites), fit)

    def __neg__(self) -> "Spline":
        return self.negate()

    def __add__(self, other: object) -> "Spline":
        if not isinstance(other, Spline):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> "Spline":
        if not isinstance(other, Spline):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other: object) -> "Spline":
        if isinstance(other, Real):
            return Spline(self._basis, self._coefficients * float(other))
        if not isinstance(other, Spline):
            return NotImplemented
        return self.prod(other)

    def __rmul__(self, other: object) -> "Spline":
        if isinstance(other, Real):
            return Spline(self._basis, self._coefficients * float(other))
        return NotImplemented

    def insert_knots(self, knots: npt.ArrayLike, fit: FitFunction | None = None) -> "Spline":
        """Get the same spline on a basis with additional knots.

        Args:
            knots (npt.ArrayLike): Knots to insert.
            fit (FitFunction | None): Fit strategy. Defaults to least squares.

        Returns:
            Spline: The spline on the refined basis.

        Raises:
            ValueError: If a knot is outside the knot vector or a knot
                multiplicity would exceed the order.
        """
        return self._refit(self._basis.insert_knots(knots), self, fit)

    def order_elevation(self, k: int = 1) -> "Spline":
        """Get the same spline on a basis of order ``order + k``.

        Args:
            k (int): Order increment. Must be non-negative.

        Returns:
            Spline: The spline on the elevated basis.
        """
        return self._refit(self._basis.order_elevation(k), self, None)

    def get_segment(self, first: int, last: int, clamped: bool = True) -> "Spline":
        """Restrict the spline to a range of segments between breakpoints.

        Args:
            first (int): Index of the first segment.
            last (int): Index of the last segment (inclusive).
            clamped (bool): Whether to clamp the segment basis at its ends.
                Defaults to True.

        Returns:
            Spline: A spline that coincides with this one between breakpoints
            `first` and `last + 1`.

        Raises:
            ValueError: If the segment indices are out of range, not ordered,
                or the segments lie outside the domain.
        """
        first_fn, last_fn = self._basis.get_segment_range(first, last)
        segment = Spline(
            self._basis.get_segment(first, last),
            self._coefficients[first_fn : last_fn + 1],
        )
        return segment.get_clamped() if clamped else segment

    def get_clamped(self) -> "Spline":
        """Get the same spline on the clamped version of its basis.

        The first and last coefficients are the spline values at the domain
        ends. The interior coefficients are fitted at the Greville sites.

        Returns:
            Spline: The spline on the clamped basis.
        """
        basis = self._basis.get_clamped()
        sites = basis.greville()
        values = self(sites)
        if basis.dim < 3:  # noqa: PLR2004
            return Spline(basis, fit_least_squares(basis, values, sites))

        start, end = basis.domain
        first = self(start)[np.newaxis, :]
        last = self(end)[np.newaxis, :]

        matrix = basis.evaluate(sites)
        rhs = values - matrix[:, [0]] * first - matrix[:, [-1]] * last
        interior = _solve_least_squares(matrix[:, 1:-1], rhs)
        return Spline(basis, np.vstack([first, interior, last]))
