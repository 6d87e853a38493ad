"""Implementation functions for B-spline basis operations.

This module provides low-level, Numba-accelerated implementations of basis
function evaluation and of the exact coefficient transforms for derivatives
and integrals.

Inputs are assumed to be validated by the caller: knot vectors are contiguous,
non-decreasing, float32/float64 and evaluation points share their dtype.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from ._knots_impl import nb_jit


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_knot_interval_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    pt: float,
    tol: float,
) -> int:
    """Get the index of the non-empty knot interval containing a point.

    Intervals are half-open, ``[k_i, k_{i+1})``, except the last non-empty one
    which is also closed on the right. Points up to `tol` outside the first or
    last knot are assigned to the first or last non-empty interval.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        pt (float): Point to locate.
        tol (float): Domain boundary tolerance.

    Returns:
        int: Index `i` with ``k_i < k_{i+1}`` such that the point belongs to
            ``[k_i, k_{i+1})``, or -1 if the point is outside the knot vector
            or the knot vector has no non-empty interval.
    """
    first = knots[0]
    last = knots[-1]

    if pt < first - tol or pt > last + tol:
        return -1

    if pt >= last:
        idx = np.searchsorted(knots, last, side="left") - 1
    elif pt < first:
        idx = np.searchsorted(knots, first, side="right") - 1
    else:
        idx = np.searchsorted(knots, pt, side="right") - 1

    if idx < 0 or idx >= knots.size - 1:
        return -1
    return idx


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_basis_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    pts: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate all the basis functions at the given points.

    Uses the Cox-de Boor recursion

        b_{n,p}(t) = wL b_{n,p-1}(t) + wR b_{n+1,p-1}(t),
        wL = (t - k_n) / (k_{n+p-1} - k_n),
        wR = (k_{n+p} - t) / (k_{n+p} - k_{n+1}),

    where a weight is zero if its denominator is not larger than `tol`.
    Only the `order` functions that do not vanish on the knot interval of
    every point are computed, in place, in a single local table.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order.
        pts (npt.NDArray[np.float32 | np.float64]): 1D array of points.
        tol (float): Tolerance for repeated knots and for the domain boundaries.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape (number of points, dim)
            with the value of every basis function at every point. Rows of points
            outside the knot vector are zero.
    """
    dtype = knots.dtype
    zero = dtype.type(0.0)
    one = dtype.type(1.0)

    n_knots = knots.size
    dim = n_knots - order
    values = np.zeros((pts.size, dim), dtype=dtype)
    local = np.zeros(order + 1, dtype=dtype)

    for pt_id in range(pts.size):
        idx = _find_knot_interval_impl(knots, pts[pt_id], tol)
        if idx < 0:
            continue

        # points within tolerance outside the knot vector are snapped to it
        pt = min(max(pts[pt_id], knots[0]), knots[-1])

        # local[j] holds the function with index n = idx - order + 1 + j
        local[:] = zero
        local[order - 1] = one

        for sub_order in range(2, order + 1):
            for j in range(order - sub_order, order):
                n = idx - order + 1 + j
                if n < 0 or n + sub_order > n_knots - 1:
                    local[j] = zero
                    continue

                denom_left = knots[n + sub_order - 1] - knots[n]
                weight_left = (pt - knots[n]) / denom_left if abs(denom_left) > tol else zero

                denom_right = knots[n + sub_order] - knots[n + 1]
                weight_right = (
                    (knots[n + sub_order] - pt) / denom_right if abs(denom_right) > tol else zero
                )

                local[j] = weight_left * local[j] + weight_right * local[j + 1]

        for j in range(order):
            n = idx - order + 1 + j
            if n >= 0 and n < dim:
                values[pt_id, n] = local[j]

    return values


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _derivative_weights_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    tol: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Get the factors ``(order-1) / (k_{i+order} - k_{i+1})`` of the derivative.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order. Must be at least 2.
        tol (float): Tolerance below which a knot difference is zero.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of size dim-1. Factors with a
            vanishing knot difference are zero.
    """
    dim = knots.size - order
    weights = np.zeros(dim - 1, dtype=knots.dtype)
    for i in range(dim - 1):
        denom = knots[i + order] - knots[i + 1]
        if denom > tol:
            weights[i] = (order - 1) / denom
    return weights


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _derivative_transform_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    tol: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create the first derivative transform matrix.

    Row `i` is ``c_i * (e_{i+1} - e_i)`` with ``c_i = (order-1) / (k_{i+order} - k_{i+1})``,
    so that multiplying the coefficients of a spline gives the coefficients of its
    derivative in the order-decreased basis.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order. Must be at least 2.
        tol (float): Tolerance below which a knot difference is zero.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Bidiagonal matrix of shape (dim-1, dim).
    """
    dim = knots.size - order
    weights = _derivative_weights_impl(knots, order, tol)
    transform = np.zeros((dim - 1, dim), dtype=knots.dtype)
    for i in range(dim - 1):
        transform[i, i] = -weights[i]
        transform[i, i + 1] = weights[i]
    return transform


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _derivative_coefficients_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    coefficients: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Apply the first derivative transform to coefficients without building it.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order. Must be at least 2.
        coefficients (npt.NDArray[np.float32 | np.float64]): 2D array of shape
            (dim, number of outputs).
        tol (float): Tolerance below which a knot difference is zero.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Derivative coefficients of shape
            (dim-1, number of outputs).
    """
    dim = knots.size - order
    weights = _derivative_weights_impl(knots, order, tol)
    result = np.empty((dim - 1, coefficients.shape[1]), dtype=coefficients.dtype)
    for i in range(dim - 1):
        for col in range(coefficients.shape[1]):
            result[i, col] = weights[i] * (coefficients[i + 1, col] - coefficients[i, col])
    return result


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _integral_weights_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Get the factors ``(k_{j+order} - k_j) / order``, the integrals of the basis functions.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of size dim.
    """
    dim = knots.size - order
    weights = np.empty(dim, dtype=knots.dtype)
    for j in range(dim):
        weights[j] = (knots[j + order] - knots[j]) / order
    return weights


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _integral_transform_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create the first integral transform matrix.

    Column `j` holds ``(k_{j+order} - k_j) / order`` in every row below row `j`.
    The first row is zero: the integral vanishes at the first knot.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Lower triangular matrix of shape (dim+1, dim).
    """
    dim = knots.size - order
    weights = _integral_weights_impl(knots, order)
    transform = np.zeros((dim + 1, dim), dtype=knots.dtype)
    for j in range(dim):
        for i in range(j + 1, dim + 1):
            transform[i, j] = weights[j]
    return transform


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _integral_coefficients_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    coefficients: npt.NDArray[np.float32 | np.float64],
) -> npt.NDArray[np.float32 | np.float64]:
    """Apply the first integral transform to coefficients without building it.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order.
        coefficients (npt.NDArray[np.float32 | np.float64]): 2D array of shape
            (dim, number of outputs).

    Returns:
        npt.NDArray[np.float32 | np.float64]: Integral coefficients of shape
            (dim+1, number of outputs), with a zero first row.
    """
    dim = knots.size - order
    weights = _integral_weights_impl(knots, order)
    result = np.zeros((dim + 1, coefficients.shape[1]), dtype=coefficients.dtype)
    for i in range(1, dim + 1):
        for col in range(coefficients.shape[1]):
            result[i, col] = result[i - 1, col] + weights[i - 1] * coefficients[i - 1, col]
    return result


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)
    pts_dummy = np.array([0.0, 0.25, 1.0], dtype=np.float64)
    coeffs_dummy = np.ones((4, 1), dtype=np.float64)
    order_dummy = 3
    tol_dummy = 1e-6

    _evaluate_basis_impl(knots_dummy, order_dummy, pts_dummy, tol_dummy)
    _derivative_transform_impl(knots_dummy, order_dummy, tol_dummy)
    _derivative_coefficients_impl(knots_dummy, order_dummy, coeffs_dummy, tol_dummy)
    _integral_transform_impl(knots_dummy, order_dummy)
    _integral_coefficients_impl(knots_dummy, order_dummy, coeffs_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_derivative_coefficients_impl",
    "_derivative_transform_impl",
    "_evaluate_basis_impl",
    "_find_knot_interval_impl",
    "_integral_coefficients_impl",
    "_integral_transform_impl",
]
