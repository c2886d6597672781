"""
COMMISSION CALCULATION & TIME-SERIES ENGINE
"""

from .calculators import compute_commission
from .models import CommissionResult, Payment, Policy, RoleSplit, RollupOptions, TimeSeriesData
from .processor import CommissionProcessor
from .timeseries import fill_month_gaps, get_date_range, months_back, rollup_monthly

__all__ = [
    'CommissionProcessor',
    'Payment',
    'Policy',
    'RoleSplit',
    'CommissionResult',
    'RollupOptions',
    'TimeSeriesData',
    'compute_commission',
    'rollup_monthly',
    'fill_month_gaps',
    'months_back',
    'get_date_range',
]
