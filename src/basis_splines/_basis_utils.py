"""Utility functions for basis and spline evaluation."""

import numpy as np
from numpy import typing as npt


def _get_input_shape(pts: npt.ArrayLike) -> tuple[int, ...]:
    """Get the shape of the evaluation points before normalization.

    Args:
        pts (npt.ArrayLike): Evaluation points (scalar, list, tuple or array).

    Returns:
        tuple[int, ...]: Shape of the points, ``()`` for scalars.
    """
    if isinstance(pts, np.ndarray):
        return pts.shape
    elif isinstance(pts, list | tuple):
        return np.array(pts).shape
    else:  # scalar
        return ()


def _normalize_points_1D(
    pts: npt.ArrayLike, dtype: npt.DTypeLike
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize points to a contiguous 1D array of the given float dtype.

    Zero-dimensional arrays (scalars) are converted to 1D arrays with a single
    element. Multi-dimensional arrays are flattened.

    Args:
        pts (npt.ArrayLike): Evaluation points.
        dtype (npt.DTypeLike): Target dtype, the dtype of the knot vector.

    Returns:
        npt.NDArray[np.float32 | np.float64]: A contiguous 1D array.

    Raises:
        ValueError: If the points are not real numbers or are not finite.
    """
    array = np.asarray(pts)
    if not (np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)):
        raise ValueError("pts must contain real numbers")

    array = np.ascontiguousarray(array.ravel(), dtype=dtype)
    if not np.all(np.isfinite(array)):
        raise ValueError("pts must be finite")
    return array


def _normalize_basis_output_1D(
    arr: npt.NDArray[np.float32 | np.float64], input_shape: tuple[int, ...]
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize the output of a 1D evaluation to the input shape.

    The output array will be reshaped to have the same shape as the input points,
    with the last dimension being the number of basis functions (or outputs).

    Args:
        arr (npt.NDArray[np.float32 | np.float64]): The output array, one row per point.
        input_shape (tuple[int, ...]): The shape of the input points (before normalization).

    Returns:
        npt.NDArray[np.float32 | np.float64]: The normalized output array.
    """
    if len(input_shape) == 0:
        return arr.reshape(arr.shape[-1])
    else:
        return arr.reshape(*input_shape, arr.shape[-1])


def _normalize_coefficients(
    coefficients: npt.ArrayLike, num_rows: int
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize spline coefficients to a contiguous 2D float array.

    Args:
        coefficients (npt.ArrayLike): 1D array (one output) or 2D array with one
            row per basis function and one column per output.
        num_rows (int): Expected number of rows, the basis dimension.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape (num_rows, number of outputs).
            Integer input is promoted to float64.

    Raises:
        ValueError: If the coefficients are not 1D or 2D, have the wrong number
            of rows, no columns, or are not real numbers.
    """
    array = np.asarray(coefficients)
    if array.dtype not in (np.float32, np.float64):
        if not (np.issubdtype(array.dtype, np.integer) or np.issubdtype(array.dtype, np.floating)):
            raise ValueError("coefficients must contain real numbers")
        array = array.astype(np.float64)

    if array.ndim == 1:
        array = array.reshape(-1, 1)
    elif array.ndim != 2:  # noqa: PLR2004
        raise ValueError(f"coefficients must be a 1D or 2D array. Got {array.ndim} dimensions.")

    if array.shape[0] != num_rows:
        raise ValueError(
            f"The number of coefficient rows must match the basis dimension. "
            f"Got {array.shape[0]} rows and dimension {num_rows}."
        )
    if array.shape[1] == 0:
        raise ValueError("coefficients must have at least one column")

    return np.ascontiguousarray(array)
