"""
Calculators Package

Provides the commission calculation steps and the per-record strategies used
when rolling payments up.
"""

from .commission import (
    CommissionCalculator,
    apply_margin,
    attach_commission,
    compute_base,
    compute_commission,
    split_pool,
)
from .strategies import (
    FALLBACK_COMMISSION_RATE,
    EstimationStrategy,
    ExactCommissionStrategy,
    select_strategy,
)

__all__ = [
    "CommissionCalculator",
    "compute_base",
    "apply_margin",
    "split_pool",
    "compute_commission",
    "ExactCommissionStrategy",
    "EstimationStrategy",
    "FALLBACK_COMMISSION_RATE",
    "select_strategy",
    "attach_commission",
]
