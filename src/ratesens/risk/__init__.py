"""
Risk package - AD and finite-difference sensitivity engines.

Provides:
- Single-curve key-rate durations, DV01 and convexities (zero or par rates)
- Two-curve (base / credit) IR01, CS01 and cross convexities
- Bump-and-reprice cross-checks
- Measure dispatch API
"""

from .single_curve import (
    SensitivityResult,
    compute_sensitivities,
    compute_par_sensitivities,
)
from .two_curve import (
    validate_tenor_grids,
    TwoCurveSensitivityResult,
    compute_two_curve_sensitivities,
)
from .bumping import BumpEngine
from .measures import (
    RiskMeasure,
    ConvexityBlocks,
    SensitivityReport,
    TwoCurveSensitivityReport,
    duration,
    convexity,
    sensitivities,
)

__all__ = [
    "SensitivityResult",
    "compute_sensitivities",
    "compute_par_sensitivities",
    "validate_tenor_grids",
    "TwoCurveSensitivityResult",
    "compute_two_curve_sensitivities",
    "BumpEngine",
    "RiskMeasure",
    "ConvexityBlocks",
    "SensitivityReport",
    "TwoCurveSensitivityReport",
    "duration",
    "convexity",
    "sensitivities",
]
