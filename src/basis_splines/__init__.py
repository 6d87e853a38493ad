"""Public API surface for BasisSplines.

Defines package metadata and exported interfaces.
"""

from typing import Final

# Private kernels stay reachable as basis_splines._basis_impl, etc.
from . import (
    _basis_impl,  # noqa: F401
    _knots_impl,  # noqa: F401
)

# Public API imports
from .basis import Basis
from .interpolation import (
    FitFunction,
    Interpolation,
    RankDeficientFitWarning,
    fit_least_squares,
)
from .knots import (
    create_uniform_open_knot_vector,
    merge_knots,
    to_breakpoints,
    to_knots,
)
from .linalg import khatri_rao, kron
from .spline import Spline
from .tolerance import (
    TolerancePreset,
    get_default_tolerance,
    get_tolerance,
    resolve_tolerance,
)

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "MIT"
__author__: Final[str] = "BasisSplines contributors"

__all__ = [
    "Basis",
    "FitFunction",
    "Interpolation",
    "RankDeficientFitWarning",
    "Spline",
    "TolerancePreset",
    "__author__",
    "__license__",
    "__version__",
    "create_uniform_open_knot_vector",
    "fit_least_squares",
    "get_default_tolerance",
    "get_tolerance",
    "khatri_rao",
    "kron",
    "merge_knots",
    "resolve_tolerance",
    "to_breakpoints",
    "to_knots",
]
