"""Knot vector kernels.

This module provides low-level, Numba-accelerated implementations of knot
vector manipulations: conversion between knots and (breakpoints, continuities),
tolerant ordered merge of two knot vectors and Greville abscissae.

Inputs are assumed to be validated by the caller.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


def _check_knots_info(knots: npt.NDArray[np.float32 | np.float64], order: int) -> None:
    """Validate basic constraints on a knot vector and a basis order.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector to check.
        order (int): Basis order (degree + 1).

    Raises:
        TypeError: If `knots` is not 1-dimensional.
        ValueError: If `order` is smaller than 1, if there are fewer than
            `order+1` knots, if the knots are not finite, or if the knot vector
            is not non-decreasing.
    """
    if knots.ndim != 1:
        raise TypeError("knots must be a 1D array")
    if order < 1:
        raise ValueError("order must be at least 1")
    if knots.size < order + 1:
        raise ValueError("knots must have at least order+1 elements")
    if not np.all(np.isfinite(knots)):
        raise ValueError("knots must be finite")
    if not np.all(np.diff(knots) >= 0):
        raise ValueError("knots must be non-decreasing")


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _to_breakpoints_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
    tol: float,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Collapse a knot vector into breakpoints and continuities.

    A knot is merged into the last emitted breakpoint if it is not larger
    than that breakpoint plus `tol`.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Non-decreasing knot vector.
        order (int): Basis order.
        tol (float): Merge tolerance.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple of
            (breakpoints, continuities) where continuities[i] is `order` minus
            the number of knots merged into breakpoints[i].
    """
    n = knots.size
    breakpoints = np.empty(n, dtype=knots.dtype)
    continuities = np.empty(n, dtype=np.int_)

    j = 0
    breakpoints[0] = knots[0]
    continuities[0] = order - 1

    for i in range(1, n):
        if knots[i] > breakpoints[j] + tol:
            j += 1
            breakpoints[j] = knots[i]
            continuities[j] = order
        continuities[j] -= 1

    return breakpoints[: j + 1].copy(), continuities[: j + 1].copy()


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _to_knots_impl(
    breakpoints: npt.NDArray[np.float32 | np.float64],
    continuities: npt.NDArray[np.int_],
    order: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Expand breakpoints into a knot vector.

    Breakpoint `i` is repeated `order - continuities[i]` times.

    Args:
        breakpoints (npt.NDArray[np.float32 | np.float64]): Strictly increasing breakpoints.
        continuities (npt.NDArray[np.int_]): Continuity at every breakpoint.
        order (int): Basis order.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector.
    """
    num_knots = 0
    for i in range(breakpoints.size):
        num_knots += order - continuities[i]

    knots = np.empty(num_knots, dtype=breakpoints.dtype)
    k = 0
    for i in range(breakpoints.size):
        for _ in range(order - continuities[i]):
            knots[k] = breakpoints[i]
            k += 1

    return knots


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _merge_knots_impl(
    knots_a: npt.NDArray[np.float32 | np.float64],
    knots_b: npt.NDArray[np.float32 | np.float64],
    tol: float,
) -> npt.NDArray[np.float32 | np.float64]:
    """Ordered merge of two knot vectors coalescing coincident knots.

    Two knots closer than `tol` are emitted once. The multiplicity of a
    site in the result is therefore the maximum of its multiplicities in
    both inputs.

    Args:
        knots_a (npt.NDArray[np.float32 | np.float64]): First non-decreasing knot vector.
        knots_b (npt.NDArray[np.float32 | np.float64]): Second non-decreasing knot vector,
            with the same dtype as `knots_a`.
        tol (float): Coalescing tolerance.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Merged knot vector.
    """
    size_a = knots_a.size
    size_b = knots_b.size
    merged = np.empty(size_a + size_b, dtype=knots_a.dtype)

    i = 0
    j = 0
    k = 0
    while i < size_a and j < size_b:
        if abs(knots_a[i] - knots_b[j]) <= tol:
            merged[k] = knots_a[i]
            i += 1
            j += 1
        elif knots_a[i] < knots_b[j]:
            merged[k] = knots_a[i]
            i += 1
        else:
            merged[k] = knots_b[j]
            j += 1
        k += 1

    while i < size_a:
        merged[k] = knots_a[i]
        i += 1
        k += 1

    while j < size_b:
        merged[k] = knots_b[j]
        j += 1
        k += 1

    return merged[:k].copy()


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _greville_impl(
    knots: npt.NDArray[np.float32 | np.float64],
    order: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Compute the Greville abscissae (knot averages).

    For order 1 the knots themselves are returned.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        order (int): Basis order.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Greville sites, one per basis
            function (one per knot if `order` is 1).
    """
    if order == 1:
        return knots.copy()

    dim = knots.size - order
    sites = np.empty(dim, dtype=knots.dtype)
    for n in range(dim):
        acc = 0.0
        for i in range(n + 1, n + order):
            acc += knots[i]
        sites[n] = acc / (order - 1)

    return sites


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0], dtype=np.float64)
    order_dummy = 3
    tol_dummy = 1e-6

    bps, conts = _to_breakpoints_impl(knots_dummy, order_dummy, tol_dummy)
    _to_knots_impl(bps, conts, order_dummy)
    _merge_knots_impl(knots_dummy, knots_dummy, tol_dummy)
    _greville_impl(knots_dummy, order_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_check_knots_info",
    "_greville_impl",
    "_merge_knots_impl",
    "_to_breakpoints_impl",
    "_to_knots_impl",
    "nb_jit",
]
