"""B-spline basis defined by a knot vector and an order."""

import logging
from typing import cast

import numpy as np
from numpy import typing as npt

from ._basis_impl import (
    _derivative_coefficients_impl,
    _derivative_transform_impl,
    _evaluate_basis_impl,
    _integral_coefficients_impl,
    _integral_transform_impl,
)
from ._basis_utils import (
    _get_input_shape,
    _normalize_basis_output_1D,
    _normalize_coefficients,
    _normalize_points_1D,
)
from ._knots_impl import (
    _check_knots_info,
    _greville_impl,
    _merge_knots_impl,
    _to_knots_impl,
)
from .interpolation import FitFunction, fit_least_squares
from .knots import _as_float_array, _validate_breakpoints, to_breakpoints
from .linalg import khatri_rao
from .tolerance import ToleranceLike, resolve_tolerance

logger = logging.getLogger(__name__)


def _check_scale(scale: float) -> float:
    value = float(scale)
    if not (np.isfinite(value) and value > 0.0):
        raise ValueError(f"scale must be positive and finite. Got {scale}.")
    return value


class Basis:
    """A 1D B-spline basis.

    The basis is the set of ``dim = len(knots) - order`` B-spline functions of
    the given order (degree + 1) defined over a non-decreasing knot vector.
    Apart from :meth:`set_breakpoints` and :meth:`set_continuities`, every
    operation returns a new basis and leaves this one untouched.

    Attributes:
        _knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        _order (int): Order of the basis functions.
        _tol (float): Tolerance for repeated knots, breakpoint merging and
            domain boundaries.
        _scale (float): Derivative of the knot parameter with respect to the
            differentiation variable.
    """

    _knots: npt.NDArray[np.float32 | np.float64]
    _order: int
    _tol: float
    _scale: float

    def __init__(
        self,
        knots: npt.ArrayLike,
        order: int,
        tol: ToleranceLike = None,
        scale: float = 1.0,
    ) -> None:
        """Initialize a basis.

        Args:
            knots (npt.ArrayLike): Non-decreasing knot vector with at least
                `order` + 1 entries. Integer knots are promoted to float64.
            order (int): Order of the basis functions (degree + 1). Must be at least 1.
            tol (ToleranceLike): Tolerance for numerical comparisons, a
                non-negative number or a preset name (``"default"``,
                ``"strict"``, ``"conservative"``). Defaults to the default
                tolerance of the knots dtype.
            scale (float): Derivative of the knot parameter with respect to the
                variable the splines are differentiated and integrated in.
                See :attr:`scale`. Defaults to 1.

        Raises:
            TypeError: If `knots` is not 1-dimensional.
            ValueError: If the order is smaller than 1, there are not enough
                knots, the knots are not finite or not non-decreasing, a knot
                multiplicity exceeds the order, `tol` is invalid, or `scale` is
                not positive.
        """
        knots_arr = _as_float_array(knots, "knots")
        order = int(order)
        _check_knots_info(knots_arr, order)
        tol = resolve_tolerance(tol, knots_arr.dtype)

        _, continuities = to_breakpoints(knots_arr, order, tol)
        if np.min(continuities) < 0:
            raise ValueError(f"Knot multiplicities cannot exceed the order {order}")

        self._knots = knots_arr.copy()
        self._order = order
        self._tol = tol
        self._scale = _check_scale(scale)

    def __repr__(self) -> str:
        return f"Basis(knots={self._knots.tolist()}, order={self._order}, scale={self._scale})"

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get a copy of the knot vector.

        Returns:
            npt.NDArray[np.float32 | np.float64]: The knot vector.
        """
        return self._knots.copy()

    @property
    def order(self) -> int:
        """Get the order (degree + 1) of the basis functions.

        Returns:
            int: The order.
        """
        return self._order

    @property
    def dim(self) -> int:
        """Get the number of basis functions.

        Returns:
            int: ``len(knots) - order``.
        """
        return int(self._knots.size - self._order)

    @property
    def dtype(self) -> np.dtype:
        """Get the data type of the knot vector (and used in computations).

        Returns:
            np.dtype: Either float32 or float64.
        """
        return self._knots.dtype

    @property
    def tolerance(self) -> float:
        """Get the tolerance value used for numerical comparisons.

        Returns:
            float: The tolerance value.
        """
        return self._tol

    @property
    def scale(self) -> float:
        """Get or set the parameter scale of the basis.

        The knots parametrize the splines by `t`. When the splines are functions
        of another variable `x` with ``t = scale * x + c``, derivatives with respect
        to `x` are ``scale**k`` times the derivatives with respect to `t`, and
        integrals with respect to `x` are divided by ``scale**k``. Evaluation does
        not depend on the scale.

        Setting the scale modifies this basis in place, and with it every spline
        that shares it. Bases derived from this one inherit its scale.

        Raises:
            ValueError: If the new scale is not positive and finite.

        Example:
            >>> basis = Basis([0, 0, 1, 1], 2, scale=0.5)
            >>> basis.derivative()[0]
            array([[-0.5,  0.5]])
        """
        return self._scale

    @scale.setter
    def scale(self, value: float) -> None:
        self._scale = _check_scale(value)

    @property
    def domain(self) -> tuple[np.float32 | np.float64, np.float32 | np.float64]:
        """Get the domain of the basis.

        The domain spans from the knot at index ``order-1`` to the knot at index
        ``dim``. For clamped bases these are the first and last knots.

        Returns:
            tuple[np.float32 | np.float64, np.float32 | np.float64]: Tuple of
            (start_value, end_value).

        Example:
            >>> Basis([0, 0, 0, 1, 2, 2, 2], 3).domain
            (0.0, 2.0)
        """
        return (self._knots[self._order - 1], self._knots[self.dim])

    def is_clamped(self) -> bool:
        """Check if the first and last knots have multiplicity `order`.

        Returns:
            bool: True if both ends are clamped, False otherwise.
        """
        left = self._knots[self._order - 1] - self._knots[0] <= self._tol
        right = self._knots[-1] - self._knots[-self._order] <= self._tol
        return bool(left and right)

    def evaluate(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate all the basis functions at the given points.

        Points outside the knot vector (beyond the tolerance) evaluate to zero.

        Args:
            pts (npt.ArrayLike): Evaluation points, a scalar or an array of any shape.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Basis values. For a scalar the
                shape is ``(dim,)``, for an array of shape ``S`` it is ``S + (dim,)``.

        Raises:
            ValueError: If the points are not finite real numbers.

        Example:
            >>> Basis([0, 0, 0.5, 1, 1], 2).evaluate([0.25, 1.0])
            array([[0.5, 0.5, 0. ],
                   [0. , 0. , 1. ]])
        """
        input_shape = _get_input_shape(pts)
        pts_arr = _normalize_points_1D(pts, self.dtype)
        values = _evaluate_basis_impl(self._knots, self._order, pts_arr, self._tol)
        return _normalize_basis_output_1D(values, input_shape)

    def __call__(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate all the basis functions at the given points.

        See :meth:`evaluate`.
        """
        return self.evaluate(pts)

    def get_breakpoints(
        self, tol: ToleranceLike = None
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
        """Get the breakpoints of the knot vector and the continuity at each of them.

        Args:
            tol (ToleranceLike): Merge tolerance, a number or a preset name.
                Defaults to the basis tolerance.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple of
            (breakpoints, continuities) with ``continuities[i] = order - multiplicity``.

        Example:
            >>> Basis([0, 0, 0, 0.5, 1, 1, 1], 3).get_breakpoints()
            (array([0. , 0.5, 1. ]), array([0, 2, 0]))
        """
        return to_breakpoints(self._knots, self._order, self._tol if tol is None else tol)

    @staticmethod
    def _patch(
        current: npt.NDArray[np.generic],
        values: npt.ArrayLike,
        indices: npt.ArrayLike | None,
        name: str,
    ) -> npt.NDArray[np.generic]:
        """Return a copy of `current` with the entries at `indices` replaced by `values`.

        Args:
            current (npt.NDArray[np.generic]): Array to patch.
            values (npt.ArrayLike): New values.
            indices (npt.ArrayLike | None): Indices to replace. If None, all the
                entries are replaced.
            name (str): Name used in error messages.

        Returns:
            npt.NDArray[np.generic]: The patched copy.

        Raises:
            ValueError: If the number of values and indices differ or an index
                is out of range.
        """
        values_arr = np.atleast_1d(np.asarray(values)).ravel()
        if indices is None:
            index_arr = np.arange(current.size)
        else:
            index_arr = np.atleast_1d(np.asarray(indices, dtype=np.int_)).ravel()

        if values_arr.size != index_arr.size:
            raise ValueError(
                f"The number of {name} must match the number of indices. "
                f"Got {values_arr.size} {name} and {index_arr.size} indices."
            )
        if np.any(index_arr < 0) or np.any(index_arr >= current.size):
            raise ValueError(f"{name} indices must be between 0 and {current.size - 1}")

        patched = current.copy()
        patched[index_arr] = values_arr.astype(current.dtype)
        return patched

    def _set_knots_from_breakpoints(
        self,
        breakpoints: npt.NDArray[np.float32 | np.float64],
        continuities: npt.NDArray[np.int_],
    ) -> None:
        """Validate (breakpoints, continuities) and only then replace the knot vector."""
        _validate_breakpoints(breakpoints, continuities, self._order)
        knots = _to_knots_impl(breakpoints, continuities, self._order)
        _check_knots_info(knots, self._order)
        self._knots = knots

    def set_breakpoints(self, values: npt.ArrayLike, indices: npt.ArrayLike | None = None) -> None:
        """Move breakpoints of the basis, keeping their continuities.

        The knot vector is only modified if the resulting breakpoints are valid.

        Args:
            values (npt.ArrayLike): New breakpoint values.
            indices (npt.ArrayLike | None): Indices of the breakpoints to move.
                If None, all breakpoints are replaced.

        Raises:
            ValueError: If the resulting breakpoints are not strictly increasing,
                or if the values and indices are inconsistent.
        """
        breakpoints, continuities = self.get_breakpoints()
        breakpoints = self._patch(breakpoints, values, indices, "breakpoints")
        if not np.all(np.isfinite(breakpoints)):
            raise ValueError("breakpoints must be finite")
        self._set_knots_from_breakpoints(breakpoints, continuities)

    def set_continuities(self, values: npt.ArrayLike, indices: npt.ArrayLike | None = None) -> None:
        """Change the continuity at breakpoints of the basis.

        The knot vector is only modified if the resulting continuities are valid.

        Args:
            values (npt.ArrayLike): New continuities, in ``[0, order - 1]``.
            indices (npt.ArrayLike | None): Indices of the breakpoints to change.
                If None, all continuities are replaced.

        Raises:
            ValueError: If a continuity is negative or not smaller than the order,
                if the values and indices are inconsistent, or if the resulting
                knot vector has no basis function.
        """
        breakpoints, continuities = self.get_breakpoints()
        values_arr = np.asarray(values)
        if not np.all(np.equal(np.mod(values_arr, 1), 0)):
            raise ValueError("continuities must be integers")
        continuities = self._patch(continuities, values_arr, indices, "continuities")
        self._set_knots_from_breakpoints(breakpoints, continuities)

    def greville(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the Greville abscissae of the basis.

        Site `n` is the average of the knots ``k_{n+1}, ..., k_{n+order-1}``.
        For order 1 the knots themselves are returned.

        Returns:
            npt.NDArray[np.float32 | np.float64]: The Greville sites.

        Example:
            >>> Basis([0, 0, 0, 0.5, 1, 1, 1], 3).greville()
            array([0.  , 0.25, 0.75, 1.  ])
        """
        return cast(npt.NDArray[np.float32 | np.float64], _greville_impl(self._knots, self._order))

    def _check_basis(self, other: object) -> "Basis":
        if not isinstance(other, Basis):
            raise TypeError(f"Expected a Basis. Got {type(other).__name__}.")
        return other

    def combine(self, other: "Basis", order: int | None = None) -> "Basis":
        """Create a basis that contains the function spaces of both bases at a common order.

        Both bases are converted to (breakpoints, continuities), their continuities
        are capped at ``order - 1``, and the expanded knot vectors are merged
        keeping the largest multiplicity of every breakpoint.

        Args:
            other (Basis): Basis to combine with.
            order (int | None): Order of the combined basis. Defaults to the
                largest order of both bases.

        Returns:
            Basis: The combined basis, with the larger tolerance of both bases
            and their common scale.

        Raises:
            TypeError: If `other` is not a Basis.
            ValueError: If `order` is smaller than 1 or the scales differ.
        """
        other = self._check_basis(other)
        order = max(self._order, other._order) if order is None else int(order)
        if order < 1:
            raise ValueError("order must be at least 1")
        if self._scale != other._scale:
            raise ValueError(
                f"Cannot combine bases with different scales {self._scale} and {other._scale}"
            )

        tol = max(self._tol, other._tol)
        dtype = np.result_type(self.dtype, other.dtype)

        expanded = []
        for basis in (self, other):
            breakpoints, continuities = to_breakpoints(basis._knots, basis._order, tol)
            continuities = np.clip(continuities, 0, order - 1)
            expanded.append(_to_knots_impl(breakpoints.astype(dtype), continuities, order))

        knots = _merge_knots_impl(expanded[0], expanded[1], tol)
        logger.debug(
            "Combined bases of orders %d and %d into order %d with %d knots",
            self._order,
            other._order,
            order,
            knots.size,
        )
        return Basis(knots, order, tol, self._scale)

    def insert_knots(self, knots: npt.ArrayLike) -> "Basis":
        """Create a refined basis with additional knots.

        The represented function space grows, so every spline of this basis can
        be reproduced exactly in the refined one.

        Args:
            knots (npt.ArrayLike): Knots to insert, inside the knot vector range.

        Returns:
            Basis: The refined basis.

        Raises:
            ValueError: If a knot is outside the knot vector range or if a knot
                multiplicity would exceed the order.
        """
        new_knots = np.atleast_1d(np.asarray(knots, dtype=self.dtype)).ravel()
        if new_knots.size == 0:
            return Basis(self._knots, self._order, self._tol, self._scale)
        if not np.all(np.isfinite(new_knots)):
            raise ValueError("knots must be finite")
        if np.any(new_knots < self._knots[0] - self._tol) or np.any(
            new_knots > self._knots[-1] + self._tol
        ):
            raise ValueError(
                f"Inserted knots must be inside [{self._knots[0]}, {self._knots[-1]}]"
            )

        merged = np.sort(np.concatenate([self._knots, new_knots]))
        return Basis(merged, self._order, self._tol, self._scale)

    def order_decrease(self, k: int = 1) -> "Basis":
        """Remove `k` knots at each end and decrease the order by `k`.

        This is the basis of the `k`-th derivative of the splines of this basis.
        Interior breakpoints whose multiplicity exceeds the new order (the
        derivative is discontinuous there) keep only ``order - k`` knots.

        Args:
            k (int): Order decrement. Must be in ``[0, order - 1]``.

        Returns:
            Basis: The order-decreased basis.

        Raises:
            ValueError: If `k` is out of range or the resulting basis is empty.
        """
        if k < 0 or k >= self._order:
            raise ValueError(f"k must be between 0 and {self._order - 1}")
        if k >= self.dim:
            raise ValueError(f"Cannot decrease the order by {k} of a basis of dimension {self.dim}")
        order = self._order - k
        knots = self._knots[k : self._knots.size - k]

        breakpoints, continuities = to_breakpoints(knots, order, self._tol)
        if np.min(continuities) < 0:
            knots = _to_knots_impl(breakpoints, np.maximum(continuities, 0), order)
        return Basis(knots, order, self._tol, self._scale)

    def order_increase(self, k: int = 1) -> "Basis":
        """Repeat the first and last knots `k` more times and increase the order by `k`.

        This is the basis of the `k`-th integral of the splines of this basis.
        It has `k` more functions, one per integration constant.

        Args:
            k (int): Order increment. Must be non-negative.

        Returns:
            Basis: The order-increased basis.

        Raises:
            ValueError: If `k` is negative.
        """
        if k < 0:
            raise ValueError("k must be non-negative")
        knots = np.concatenate(
            [
                np.full(k, self._knots[0], dtype=self.dtype),
                self._knots,
                np.full(k, self._knots[-1], dtype=self.dtype),
            ]
        )
        return Basis(knots, self._order + k, self._tol, self._scale)

    def order_elevation(self, k: int = 1) -> "Basis":
        """Increase the order by `k` keeping the continuity at every breakpoint.

        Every breakpoint multiplicity grows by `k`, so the elevated basis
        contains the function space of this one.

        Args:
            k (int): Order increment. Must be non-negative.

        Returns:
            Basis: The elevated basis.

        Raises:
            ValueError: If `k` is negative.

        Example:
            >>> Basis([0, 0, 0.5, 1, 1], 2).order_elevation().knots
            array([0. , 0. , 0. , 0.5, 0.5, 1. , 1. , 1. ])
        """
        if k < 0:
            raise ValueError("k must be non-negative")
        breakpoints, continuities = self.get_breakpoints()
        knots = _to_knots_impl(breakpoints, continuities, self._order + k)
        return Basis(knots, self._order + k, self._tol, self._scale)

    def _check_derivative_order(self, order: int) -> None:
        if order < 1:
            raise ValueError("Derivative order must be positive")
        if order >= self._order:
            raise ValueError(
                f"Derivative order must be smaller than the basis order {self._order}. Got {order}."
            )

    def _derivative_rows(self) -> npt.NDArray[np.bool_]:
        """Rows of the first derivative transform kept in the order-decreased basis.

        Row `i` belongs to a function supported on ``[k_{i+1}, k_{i+order}]``.
        It vanishes identically when that span is empty, which happens at
        breakpoints of continuity zero, and :meth:`order_decrease` drops the
        corresponding knot.
        """
        spans = self._knots[self._order : self._knots.size - 1] - self._knots[1 : self.dim]
        return spans > self._tol

    def derivative(self, order: int = 1) -> tuple[npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Get the transform mapping coefficients to the coefficients of their derivative.

        The transforms of every derivative level are bidiagonal and are composed
        against the progressively order-decreased bases. Each level is
        multiplied by :attr:`scale`.

        Args:
            order (int): Derivative order. Must be in ``[1, self.order - 1]``.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], Basis]: Tuple of
            (transform, basis). `transform` has shape ``(basis.dim, dim)``, which
            is ``(dim - order, dim)`` unless the basis has breakpoints of
            continuity zero, and `basis` is the order-decreased basis of the
            derivative.

        Raises:
            ValueError: If `order` is out of range.
        """
        self._check_derivative_order(order)
        basis = self
        transform = np.eye(self.dim, dtype=self.dtype)
        for _ in range(order):
            step = _derivative_transform_impl(basis._knots, basis._order, basis._tol)
            transform = basis._scale * step[basis._derivative_rows()] @ transform
            basis = basis.order_decrease(1)
        return transform, basis

    def derivative_coefficients(
        self, coefficients: npt.ArrayLike, order: int = 1
    ) -> tuple[npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Apply the derivative transform to coefficients without building it.

        Args:
            coefficients (npt.ArrayLike): Coefficients, 1D or 2D with `dim` rows.
            order (int): Derivative order. Must be in ``[1, self.order - 1]``.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], Basis]: Tuple of
            (coefficients, basis) of the derivative. The coefficients have the
            same number of dimensions as the input.

        Raises:
            ValueError: If `order` is out of range or the coefficients do not
                match the basis.
        """
        self._check_derivative_order(order)
        is_vector = np.ndim(coefficients) == 1
        coeffs = _normalize_coefficients(coefficients, self.dim).astype(self.dtype)

        basis = self
        for _ in range(order):
            coeffs = _derivative_coefficients_impl(basis._knots, basis._order, coeffs, basis._tol)
            coeffs = basis._scale * coeffs[basis._derivative_rows()]
            basis = basis.order_decrease(1)
        return (coeffs.ravel() if is_vector else coeffs), basis

    def integral(self, order: int = 1) -> tuple[npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Get the transform mapping coefficients to the coefficients of their integral.

        The integral vanishes at the first knot. Each level is divided by
        :attr:`scale`.

        Args:
            order (int): Integral order. Must be positive.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], Basis]: Tuple of
            (transform, basis). `transform` has shape ``(dim + order, dim)`` and
            `basis` is the order-increased basis of the integral.

        Raises:
            ValueError: If `order` is not positive.
        """
        if order < 1:
            raise ValueError("Integral order must be positive")
        basis = self
        transform = np.eye(self.dim, dtype=self.dtype)
        for _ in range(order):
            step = _integral_transform_impl(basis._knots, basis._order)
            transform = step @ transform / basis._scale
            basis = basis.order_increase(1)
        return transform, basis

    def integral_coefficients(
        self, coefficients: npt.ArrayLike, order: int = 1
    ) -> tuple[npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Apply the integral transform to coefficients without building it.

        Args:
            coefficients (npt.ArrayLike): Coefficients, 1D or 2D with `dim` rows.
            order (int): Integral order. Must be positive.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], Basis]: Tuple of
            (coefficients, basis) of the integral. The coefficients have the
            same number of dimensions as the input.

        Raises:
            ValueError: If `order` is not positive or the coefficients do not
                match the basis.
        """
        if order < 1:
            raise ValueError("Integral order must be positive")
        is_vector = np.ndim(coefficients) == 1
        coeffs = _normalize_coefficients(coefficients, self.dim).astype(self.dtype)

        basis = self
        for _ in range(order):
            coeffs = _integral_coefficients_impl(basis._knots, basis._order, coeffs) / basis._scale
            basis = basis.order_increase(1)
        return (coeffs.ravel() if is_vector else coeffs), basis

    def add(
        self, other: "Basis", fit: FitFunction | None = None
    ) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Get the transforms mapping two coefficient sets to the coefficients of their sum.

        For coefficients `c_left` of this basis and `c_right` of `other`, the sum
        of both splines has coefficients ``transform_left @ c_left + transform_right @ c_right``
        in the returned basis.

        Args:
            other (Basis): Basis of the right operand.
            fit (FitFunction | None): Fit strategy used to map every basis
                function onto the combined basis. Defaults to least squares at
                the Greville sites.

        Returns:
            tuple[npt.NDArray, npt.NDArray, Basis]: Tuple of (transform_left,
            transform_right, basis) with shapes ``(basis.dim, self.dim)`` and
            ``(basis.dim, other.dim)``.

        Raises:
            TypeError: If `other` is not a Basis.
        """
        other = self._check_basis(other)
        fit = fit_least_squares if fit is None else fit

        basis = self.combine(other, max(self._order, other._order))
        sites = basis.greville()
        transform_left = fit(basis, self.evaluate(sites), sites)
        transform_right = fit(basis, other.evaluate(sites), sites)
        return transform_left, transform_right, basis

    def prod(
        self, other: "Basis", fit: FitFunction | None = None
    ) -> tuple[npt.NDArray[np.float32 | np.float64], "Basis"]:
        """Get the transform mapping two coefficient sets to the coefficients of their product.

        For coefficients `c_left` of this basis and `c_right` of `other`, the
        product of both splines has coefficients ``transform @ kron(c_left, c_right)``
        in the returned basis, whose order is ``self.order + other.order - 1``.

        Args:
            other (Basis): Basis of the right operand.
            fit (FitFunction | None): Fit strategy used to map the pairwise
                products of basis functions onto the combined basis. Defaults
                to least squares at the Greville sites.

        Returns:
            tuple[npt.NDArray[np.float32 | np.float64], Basis]: Tuple of
            (transform, basis) where `transform` has shape
            ``(basis.dim, self.dim * other.dim)``.

        Raises:
            TypeError: If `other` is not a Basis.
        """
        other = self._check_basis(other)
        fit = fit_least_squares if fit is None else fit

        basis = self.combine(other, self._order + other._order - 1)
        sites = basis.greville()
        products = khatri_rao(self.evaluate(sites), other.evaluate(sites))
        return fit(basis, products, sites), basis

    def get_segment_range(self, first: int, last: int) -> tuple[int, int]:
        """Get the indices of the basis functions supported on a range of segments.

        Segment `i` spans from breakpoint `i` to breakpoint `i + 1`.

        Args:
            first (int): Index of the first segment.
            last (int): Index of the last segment (inclusive).

        Returns:
            tuple[int, int]: Indices of the first and last (inclusive) basis
            functions that do not vanish on the segments.

        Raises:
            ValueError: If the segment indices are out of range, not ordered,
                or the segments lie outside the domain.
        """
        breakpoints, _ = self.get_breakpoints()
        num_segments = breakpoints.size - 1
        if not (0 <= first <= last < num_segments):
            raise ValueError(
                f"Segment indices must satisfy 0 <= first <= last < {num_segments}. "
                f"Got first={first} and last={last}."
            )

        start = breakpoints[first]
        end = breakpoints[last + 1]
        domain_start, domain_end = self.domain
        if start < domain_start - self._tol or end > domain_end + self._tol:
            raise ValueError(
                f"Segment indices {first} to {last} span [{start}, {end}], which lies "
                f"outside the domain [{domain_start}, {domain_end}]."
            )
        start_idx = int(np.searchsorted(self._knots, start + self._tol, side="right")) - 1
        end_idx = int(np.searchsorted(self._knots, end - self._tol, side="left"))

        first_fn = max(start_idx - self._order + 1, 0)
        last_fn = min(end_idx - 1, self.dim - 1)
        return first_fn, last_fn

    def get_segment(self, first: int, last: int) -> "Basis":
        """Extract the basis functions supported on a range of segments.

        The returned basis keeps the full knot support of these functions, so
        its ends may be open (not clamped). Use :meth:`get_clamped` to clamp it.

        Args:
            first (int): Index of the first segment.
            last (int): Index of the last segment (inclusive).

        Returns:
            Basis: The segment basis, whose functions coincide with functions
            ``get_segment_range(first, last)`` of this basis.

        Raises:
            ValueError: If the segment indices are out of range, not ordered,
                or the segments lie outside the domain.
        """
        first_fn, last_fn = self.get_segment_range(first, last)
        knots = self._knots[first_fn : last_fn + self._order + 1]
        return Basis(knots, self._order, self._tol, self._scale)

    def get_clamped(self) -> "Basis":
        """Get the basis with the same interior knots and clamped ends.

        The first and last `order` knots are replaced by the domain ends.
        Interior knots at the domain ends are dropped, together with the
        functions that vanish on the domain, so the dimension only changes
        for bases with repeated knots at the domain ends.

        Returns:
            Basis: The clamped basis.

        Example:
            >>> Basis([0, 1, 2, 3, 4, 5, 6], 3).get_clamped().knots
            array([2., 2., 2., 3., 4., 4., 4.])
        """
        start, end = self.domain
        interior = self._knots[self._order : self.dim]
        interior = interior[(interior > start + self._tol) & (interior < end - self._tol)]
        knots = np.concatenate(
            [
                np.full(self._order, start, dtype=self.dtype),
                interior,
                np.full(self._order, end, dtype=self.dtype),
            ]
        )
        return Basis(knots, self._order, self._tol, self._scale)
