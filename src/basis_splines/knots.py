"""Knot vector utilities.

This module converts knot vectors to and from their (breakpoints,
continuities) representation, merges knot vectors and creates uniform
clamped knot vectors.
"""

from typing import Any, cast

import numpy as np
import numpy.typing as npt

from ._knots_impl import (
    _merge_knots_impl,
    _to_breakpoints_impl,
    _to_knots_impl,
)
from .tolerance import ToleranceLike, resolve_tolerance


def _as_float_array(values: npt.ArrayLike, name: str) -> npt.NDArray[np.float32 | np.float64]:
    """Convert values into a contiguous 1D float32 or float64 array.

    Args:
        values (npt.ArrayLike): Values to convert.
        name (str): Name used in error messages.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Contiguous 1D array. Integer input
            is promoted to float64.

    Raises:
        TypeError: If the values are not 1-dimensional.
        ValueError: If the values are not real numbers.
    """
    array = np.asarray(values)
    if array.ndim != 1:
        raise TypeError(f"{name} must be a 1D array")
    if array.dtype not in (np.float32, np.float64):
        if not (np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)):
            raise ValueError(f"{name} must contain real numbers")
        array = array.astype(np.float64)
    return np.ascontiguousarray(array)


def _validate_breakpoints(
    breakpoints: npt.NDArray[np.float32 | np.float64],
    continuities: npt.NDArray[np.int_],
    order: int,
) -> None:
    """Validate a (breakpoints, continuities) pair for a given order.

    Args:
        breakpoints (npt.NDArray[np.float32 | np.float64]): Breakpoints.
        continuities (npt.NDArray[np.int_]): Continuities at the breakpoints.
        order (int): Basis order.

    Raises:
        ValueError: If the order is smaller than 1, the sizes differ, the
            breakpoints are not strictly increasing, or a continuity is
            negative or not smaller than `order`.
    """
    if order < 1:
        raise ValueError("order must be at least 1")
    if breakpoints.size != continuities.size:
        raise ValueError(
            f"breakpoints and continuities must have the same size. "
            f"Got {breakpoints.size} and {continuities.size}."
        )
    if breakpoints.size < 2:  # noqa: PLR2004
        raise ValueError("at least two breakpoints are required")
    if not np.all(np.diff(breakpoints) > 0):
        raise ValueError("breakpoints must be strictly increasing")
    if np.any(continuities < 0) or np.any(continuities >= order):
        raise ValueError(f"continuities must be between 0 and {order - 1} for order {order}")


def to_knots(
    breakpoints: npt.ArrayLike,
    continuities: npt.ArrayLike,
    order: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Convert breakpoints and continuities into a knot vector.

    Each breakpoint ``i`` is repeated ``order - continuities[i]`` times.

    Args:
        breakpoints (npt.ArrayLike): Strictly increasing breakpoints.
        continuities (npt.ArrayLike): Number of continuous derivatives at
            every breakpoint. Must be in ``[0, order - 1]``.
        order (int): Basis order (degree + 1).

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector.

    Raises:
        ValueError: If the inputs are inconsistent.

    Example:
        >>> to_knots([0.0, 0.5, 1.0], [0, 2, 0], 3)
        array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    bps = _as_float_array(breakpoints, "breakpoints")
    conts = np.ascontiguousarray(np.asarray(continuities, dtype=np.int_))
    if conts.ndim != 1:
        raise TypeError("continuities must be a 1D array")
    _validate_breakpoints(bps, conts, int(order))
    return cast(npt.NDArray[np.float32 | np.float64], _to_knots_impl(bps, conts, int(order)))


def to_breakpoints(
    knots: npt.ArrayLike,
    order: int,
    tol: ToleranceLike = None,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Convert a knot vector into breakpoints and continuities.

    Knots within `tol` of the last emitted breakpoint are merged into it.

    Args:
        knots (npt.ArrayLike): Non-decreasing knot vector.
        order (int): Basis order (degree + 1).
        tol (ToleranceLike): Merge tolerance, a number or a preset name.
            Defaults to the default tolerance of the knots dtype.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple of
            (breakpoints, continuities) with ``continuities[i] = order - multiplicity``.

    Raises:
        ValueError: If the knots are empty or not non-decreasing, or if the order
            is smaller than 1.

    Example:
        >>> to_breakpoints([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], 3)
        (array([0. , 0.5, 1. ]), array([0, 2, 0]))
    """
    knots_arr = _as_float_array(knots, "knots")
    if knots_arr.size == 0:
        raise ValueError("knots must not be empty")
    if order < 1:
        raise ValueError("order must be at least 1")
    if not np.all(np.diff(knots_arr) >= 0):
        raise ValueError("knots must be non-decreasing")
    tol = resolve_tolerance(tol, knots_arr.dtype)
    return cast(
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]],
        _to_breakpoints_impl(knots_arr, int(order), tol),
    )


def merge_knots(
    knots_a: npt.ArrayLike,
    knots_b: npt.ArrayLike,
    tol: ToleranceLike = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Merge two knot vectors, coalescing knots closer than `tol`.

    The multiplicity of every site in the result is the maximum of its
    multiplicities in both inputs.

    Args:
        knots_a (npt.ArrayLike): First non-decreasing knot vector.
        knots_b (npt.ArrayLike): Second non-decreasing knot vector.
        tol (ToleranceLike): Coalescing tolerance, a number or a preset name.
            Defaults to the default tolerance of the result dtype.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Merged knot vector.

    Example:
        >>> merge_knots([0.0, 0.0, 0.5, 1.0, 1.0], [0.0, 0.0, 0.25, 0.5, 1.0, 1.0])
        array([0.  , 0.  , 0.25, 0.5 , 1.  , 1.  ])
    """
    arr_a = _as_float_array(knots_a, "knots_a")
    arr_b = _as_float_array(knots_b, "knots_b")
    dtype = np.result_type(arr_a.dtype, arr_b.dtype)
    arr_a = arr_a.astype(dtype, copy=False)
    arr_b = arr_b.astype(dtype, copy=False)
    for name, arr in (("knots_a", arr_a), ("knots_b", arr_b)):
        if not np.all(np.diff(arr) >= 0):
            raise ValueError(f"{name} must be non-decreasing")
    tol = resolve_tolerance(tol, dtype)
    return cast(npt.NDArray[np.float32 | np.float64], _merge_knots_impl(arr_a, arr_b, tol))


def _get_ends_and_dtype(
    domain: tuple[float | np.floating[Any], float | np.floating[Any]] | None,
    dtype: npt.DTypeLike | None,
) -> tuple[np.floating[Any], np.floating[Any], np.dtype[np.floating[Any]]]:
    """Get the start, end, and dtype for a knot vector.

    Args:
        domain (tuple[float | np.floating, float | np.floating] | None): Domain
            boundaries as (start, end). Defaults to (0.0, 1.0) if not provided.
        dtype (npt.DTypeLike | None): Data type for the knot vector. If None,
            inferred from the domain values or defaults to float64.

    Returns:
        tuple[np.floating, np.floating, np.dtype]: Tuple of (start, end, dtype).

    Raises:
        ValueError: If the dtype is not float32 or float64, or if end <= start.
    """
    start, end = (0.0, 1.0) if domain is None else domain

    if dtype is None:
        dtype_obj = np.result_type(np.asarray(start), np.asarray(end))
        if dtype_obj.kind != "f":
            dtype_obj = np.dtype(np.float64)
    else:
        dtype_obj = np.dtype(dtype)
    if dtype_obj not in (np.dtype(np.float32), np.dtype(np.float64)):
        raise ValueError("dtype must be float64 or float32")

    start_value = dtype_obj.type(start)
    end_value = dtype_obj.type(end)
    if end_value <= start_value:
        raise ValueError("end must be greater than start")

    return start_value, end_value, cast(np.dtype[np.floating[Any]], dtype_obj)


def create_uniform_open_knot_vector(
    num_intervals: int,
    order: int,
    continuity: int | None = None,
    domain: tuple[float | np.floating[Any], float | np.floating[Any]] | None = None,
    dtype: npt.DTypeLike | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a uniform open (clamped) knot vector.

    The first and last knots are repeated `order` times, so that the basis is
    a partition of unity on the whole domain and interpolates its first and
    last coefficients.

    Args:
        num_intervals (int): Number of intervals in the domain. Must be positive.
        order (int): Basis order (degree + 1). Must be at least 1.
        continuity (int | None): Continuity at interior knots. Must be between
            0 and order-1. Defaults to order-1 (maximum smoothness).
        domain (tuple[float | np.floating, float | np.floating] | None): Domain
            boundaries as (start, end). Defaults to (0.0, 1.0).
        dtype (npt.DTypeLike | None): Data type for the knot vector. If None,
            inferred from the domain or defaults to float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Clamped knot vector with uniform spacing.

    Raises:
        ValueError: If any parameter is invalid.

    Example:
        >>> create_uniform_open_knot_vector(2, 3)
        array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    if num_intervals < 1:
        raise ValueError("num_intervals must be positive")
    if order < 1:
        raise ValueError("order must be at least 1")

    continuity = order - 1 if continuity is None else continuity
    if continuity < 0 or continuity >= order:
        raise ValueError(f"Continuity must be between 0 and {order - 1} for order {order}.")

    start, end, dtype_obj = _get_ends_and_dtype(domain, dtype)

    breakpoints = np.linspace(start, end, num_intervals + 1, dtype=dtype_obj)
    continuities = np.full(num_intervals + 1, continuity, dtype=np.int_)
    continuities[0] = 0
    continuities[-1] = 0

    return to_knots(breakpoints, continuities, order)
