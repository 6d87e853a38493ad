"""Tolerance policy for knot comparisons.

Every :class:`~basis_splines.basis.Basis` carries a single tolerance. It decides
when two knots belong to the same breakpoint, when a knot span counts as empty
in the Cox-de Boor recursion and in the derivative transform, and how far
outside the knot vector a point is still snapped onto it.

A tolerance is given either as a non-negative number or as the name of a
preset. Presets depend on the floating dtype of the knot vector:

=========  ============  ========  ========
dtype      conservative  default   strict
=========  ============  ========  ========
float32    1e-3          1e-4      1e-6
float64    1e-4          1e-6      1e-10
=========  ============  ========  ========

Numerical results of exact operations (derivative, integral, sum, product,
knot insertion) do not depend on this value as long as it separates distinct
breakpoints.
"""

from typing import Final, Literal, TypeAlias, get_args

import numpy as np
from numpy import typing as npt

TolerancePreset: TypeAlias = Literal["default", "strict", "conservative"]
ToleranceLike: TypeAlias = float | TolerancePreset | None

_PRESETS: Final[dict[str, dict[str, float]]] = {
    "float32": {"conservative": 1e-3, "default": 1e-4, "strict": 1e-6},
    "float64": {"conservative": 1e-4, "default": 1e-6, "strict": 1e-10},
}


def get_tolerance(dtype: npt.DTypeLike, preset: TolerancePreset = "default") -> float:
    """Get the tolerance of a preset for a knot dtype.

    Args:
        dtype (npt.DTypeLike): Knot vector dtype, float32 or float64.
        preset (TolerancePreset): One of ``"default"``, ``"strict"`` or
            ``"conservative"``.

    Returns:
        float: The tolerance.

    Raises:
        ValueError: If the dtype or the preset is not supported.

    Example:
        >>> get_tolerance(np.float32, "strict")
        1e-06
    """
    name = np.dtype(dtype).name
    if name not in _PRESETS:
        raise ValueError(f"Unsupported dtype: {name}. Expected float32 or float64.")
    if preset not in _PRESETS[name]:
        raise ValueError(
            f"Unknown tolerance preset '{preset}'. Expected one of {get_args(TolerancePreset)}."
        )
    return _PRESETS[name][preset]


def get_default_tolerance(dtype: npt.DTypeLike) -> float:
    """Get the tolerance used when none is given.

    Args:
        dtype (npt.DTypeLike): Knot vector dtype, float32 or float64.

    Returns:
        float: The ``"default"`` preset for `dtype`.

    Example:
        >>> get_default_tolerance("float64")
        1e-06
    """
    return get_tolerance(dtype, "default")


def resolve_tolerance(tol: ToleranceLike, dtype: npt.DTypeLike) -> float:
    """Turn a tolerance argument into a number.

    Args:
        tol (ToleranceLike): None for the default preset, a preset name, or a
            non-negative number.
        dtype (npt.DTypeLike): Knot vector dtype used to look up presets.

    Returns:
        float: The tolerance.

    Raises:
        ValueError: If `tol` is negative, not finite, or an unknown preset.
    """
    if tol is None:
        return get_default_tolerance(dtype)
    if isinstance(tol, str):
        return get_tolerance(dtype, tol)  # type: ignore[arg-type]

    value = float(tol)
    if not (np.isfinite(value) and value >= 0.0):
        raise ValueError(f"tol must be non-negative and finite. Got {tol}.")
    return value
