"""Least-squares fitting of spline coefficients.

The default fit solves ``basis(points) @ coefficients ~= observations`` with a
column-pivoted QR decomposition. When the points are the Greville sites of the
basis the system is square and the fit is an interpolation.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import numpy as np
import scipy.linalg
from numpy import typing as npt

from ._basis_utils import _normalize_points_1D

if TYPE_CHECKING:
    from .basis import Basis

logger = logging.getLogger(__name__)

FitFunction = Callable[["Basis", npt.NDArray[Any], npt.NDArray[Any]], npt.NDArray[Any]]
"""Fit strategy: maps (basis, observations, points) to coefficients."""


class RankDeficientFitWarning(UserWarning):
    """Warning emitted when a least-squares design matrix is rank deficient.

    The returned coefficients are then one of infinitely many least-squares
    solutions.
    """


def _as_observations(observations: npt.ArrayLike, num_points: int) -> npt.NDArray[np.floating]:
    """Convert observations into a 1D or 2D float array with one row per point.

    Args:
        observations (npt.ArrayLike): Observations.
        num_points (int): Number of points.

    Returns:
        npt.NDArray[np.floating]: The observations array.

    Raises:
        ValueError: If the observations are not 1D or 2D, or if their number
            of rows differs from the number of points.
    """
    obs = np.asarray(observations)
    if not np.issubdtype(obs.dtype, np.floating):
        obs = obs.astype(np.float64)
    if obs.ndim not in (1, 2):
        raise ValueError(f"observations must be a 1D or 2D array. Got {obs.ndim} dimensions.")
    if obs.shape[0] != num_points:
        raise ValueError(
            f"The number of observations must match the number of points. "
            f"Got {obs.shape[0]} observations and {num_points} points."
        )
    return obs


def _solve_least_squares(
    matrix: npt.NDArray[np.floating], rhs: npt.NDArray[np.floating]
) -> npt.NDArray[np.floating]:
    """Solve ``matrix @ x ~= rhs`` with a column-pivoted QR decomposition.

    Args:
        matrix (npt.NDArray[np.floating]): Design matrix.
        rhs (npt.NDArray[np.floating]): Right-hand side, 1D or 2D.

    Returns:
        npt.NDArray[np.floating]: Least-squares solution with the same number
        of dimensions as `rhs`.

    Warns:
        RankDeficientFitWarning: If the rank of `matrix` is smaller than its
            number of columns.
    """
    solution, _, rank, _ = scipy.linalg.lstsq(matrix, rhs, lapack_driver="gelsy")
    logger.debug("Solved least-squares system of shape %s with rank %d", matrix.shape, rank)
    if rank < matrix.shape[1]:
        warnings.warn(
            f"The design matrix of shape {matrix.shape} has rank {rank}. "
            "The fitted coefficients are not unique.",
            RankDeficientFitWarning,
            stacklevel=3,
        )
    return solution


def fit_least_squares(
    basis: Basis, observations: npt.ArrayLike, points: npt.ArrayLike
) -> npt.NDArray[np.floating]:
    """Fit coefficients of a basis to observations at points.

    Args:
        basis (Basis): Basis of the fitted spline.
        observations (npt.ArrayLike): Observed values, 1D (one output) or 2D
            with one row per point and one column per output.
        points (npt.ArrayLike): 1D array of points.

    Returns:
        npt.NDArray[np.floating]: Coefficients with `basis.dim` rows and the
        same number of dimensions as the observations.

    Raises:
        ValueError: If no points are given or the observations do not match them.

    Warns:
        RankDeficientFitWarning: If the points do not determine the coefficients.

    Example:
        >>> basis = Basis([0, 0, 0.5, 1, 1], 2)
        >>> fit_least_squares(basis, [0.0, 1.0, 0.25], basis.greville())
        array([0.  , 1.  , 0.25])
    """
    pts = _normalize_points_1D(points, basis.dtype)
    if pts.size == 0:
        raise ValueError("At least one point is required")
    obs = _as_observations(observations, pts.size)
    return _solve_least_squares(basis.evaluate(pts), obs)


class Interpolation:
    """Fits spline coefficients of a fixed basis.

    Attributes:
        _basis (Basis): The basis of the fitted splines.
    """

    def __init__(self, basis: Basis) -> None:
        """Initialize the interpolation.

        Args:
            basis (Basis): The basis of the fitted splines.
        """
        self._basis = basis

    @property
    def basis(self) -> Basis:
        """Get the basis of the fitted splines.

        Returns:
            Basis: The basis.
        """
        return self._basis

    def fit(
        self,
        observations: npt.ArrayLike | Callable[[npt.NDArray[Any]], npt.ArrayLike],
        points: npt.ArrayLike | None = None,
    ) -> npt.NDArray[np.floating]:
        """Fit coefficients to observations.

        Args:
            observations (npt.ArrayLike | Callable): Observed values at the points,
                or a function that is sampled at the points.
            points (npt.ArrayLike | None): Points of the observations. Defaults to
                the Greville sites of the basis.

        Returns:
            npt.NDArray[np.floating]: Coefficients with `basis.dim` rows.

        Raises:
            ValueError: If the observations do not match the points.
        """
        if points is None:
            pts = self._basis.greville()
        else:
            pts = _normalize_points_1D(points, self._basis.dtype)

        if callable(observations):
            observations = observations(pts)
        return fit_least_squares(self._basis, observations, pts)

    def fit_with_derivatives(
        self,
        observations: npt.ArrayLike,
        derivative_orders: npt.ArrayLike,
        points: npt.ArrayLike,
    ) -> npt.NDArray[np.floating]:
        """Fit coefficients to observations of values and derivatives.

        Row `i` of the design matrix is the `derivative_orders[i]`-th derivative
        of every basis function at `points[i]`, which allows Hermite-like
        interpolation.

        Args:
            observations (npt.ArrayLike): Observed values or derivatives, one row per point.
            derivative_orders (npt.ArrayLike): Derivative order of every observation.
                Zero stands for a value.
            points (npt.ArrayLike): Points of the observations. May be repeated
                with different derivative orders.

        Returns:
            npt.NDArray[np.floating]: Coefficients with `basis.dim` rows.

        Raises:
            ValueError: If the inputs have inconsistent sizes or a derivative order
                is negative or not smaller than the basis order.

        Example:
            >>> interp = Interpolation(Basis([0, 0, 0, 0, 1, 1, 1, 1], 4))
            >>> interp.fit_with_derivatives([0, 0, 1, 3], [0, 1, 0, 1], [0, 0, 1, 1])
            array([0., 0., 0., 1.])
        """
        pts = _normalize_points_1D(points, self._basis.dtype)
        orders = np.atleast_1d(np.asarray(derivative_orders, dtype=np.int_)).ravel()
        if orders.size != pts.size:
            raise ValueError(
                f"The number of derivative orders must match the number of points. "
                f"Got {orders.size} orders and {pts.size} points."
            )
        if pts.size == 0:
            raise ValueError("At least one point is required")
        obs = _as_observations(observations, pts.size)

        matrix = np.zeros((pts.size, self._basis.dim), dtype=self._basis.dtype)
        for order in np.unique(orders):
            mask = orders == order
            if order == 0:
                matrix[mask] = self._basis.evaluate(pts[mask])
            else:
                transform, derivative_basis = self._basis.derivative(int(order))
                matrix[mask] = derivative_basis.evaluate(pts[mask]) @ transform

        return _solve_least_squares(matrix, obs)
