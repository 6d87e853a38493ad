"""Pytest configuration for the test suite.

Puts the `src` directory on `sys.path` so the tests run against a checkout
without installing `basis_splines`.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_PATH: Path = Path(__file__).resolve().parents[1] / "src"

if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))
