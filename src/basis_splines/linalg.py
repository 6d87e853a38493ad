"""Matrix products used to express spline coefficient transforms."""

import numpy as np
from numpy import typing as npt


def kron(left: npt.ArrayLike, right: npt.ArrayLike) -> npt.NDArray[np.floating]:
    """Kronecker product of two matrices (or vectors).

    Block ``(i, j)`` of the result is ``left[i, j] * right``.

    Args:
        left (npt.ArrayLike): Left operand, 1D or 2D.
        right (npt.ArrayLike): Right operand, 1D or 2D.

    Returns:
        npt.NDArray[np.floating]: Kronecker product. For two 2D operands of shapes
            ``(m, n)`` and ``(p, q)`` the shape is ``(m * p, n * q)``.

    Raises:
        ValueError: If any operand has more than two dimensions.

    Example:
        >>> kron([[1, 2], [3, 4]], [[0, 1], [2, 3]])
        array([[0, 1, 0, 2],
               [2, 3, 4, 6],
               [0, 3, 0, 4],
               [6, 9, 8, 12]])
    """
    left = np.asarray(left)
    right = np.asarray(right)
    if left.ndim > 2 or right.ndim > 2:  # noqa: PLR2004
        raise ValueError("kron operands must be 1D or 2D arrays")
    return np.kron(left, right)


def khatri_rao(left: npt.ArrayLike, right: npt.ArrayLike) -> npt.NDArray[np.floating]:
    """Row-wise Khatri-Rao (face-splitting) product of two matrices.

    Row ``r`` of the result is ``kron(left[r], right[r])``, i.e. all pairwise
    products of the entries of both rows, the left column index running slowest.

    Args:
        left (npt.ArrayLike): Left 2D operand of shape ``(m, n)``.
        right (npt.ArrayLike): Right 2D operand of shape ``(m, q)``.

    Returns:
        npt.NDArray[np.floating]: Array of shape ``(m, n * q)``.

    Raises:
        ValueError: If the operands are not 2D or have different number of rows.

    Example:
        >>> khatri_rao([[1, 2], [3, 4]], [[5, 6], [7, 8]])
        array([[ 5,  6, 10, 12],
               [21, 24, 28, 32]])
    """
    left = np.asarray(left)
    right = np.asarray(right)
    if left.ndim != 2 or right.ndim != 2:  # noqa: PLR2004
        raise ValueError("khatri_rao operands must be 2D arrays")
    if left.shape[0] != right.shape[0]:
        raise ValueError(
            f"khatri_rao operands must have the same number of rows. "
            f"Got {left.shape[0]} and {right.shape[0]}."
        )

    n_rows = left.shape[0]
    return (left[:, :, np.newaxis] * right[:, np.newaxis, :]).reshape(
        n_rows, left.shape[1] * right.shape[1]
    )
