"""
Technical Indicators Package

Provides:
- Volatility indicators (True Range, ATR, average spread)
- Volume indicators (up/down volume, volume trend, volume ratio, VPA metrics)
- Data validation utilities

All indicator functions accept a pandas DataFrame with OHLCV columns.
"""

from wyckoff_vpa.indicators.volatility import (
    compute_true_range,
    compute_atr,
    compute_average_spread,
)

from wyckoff_vpa.indicators.volume import (
    compute_up_down_volume,
    compute_volume_trend,
    compute_volume_ratio,
    compute_vpa_metrics,
    has_volume,
)

from wyckoff_vpa.indicators.validation_utils import (
    validate_ohlcv,
    DataValidationError,
)

__all__ = [
    # Volatility
    'compute_true_range',
    'compute_atr',
    'compute_average_spread',
    # Volume
    'compute_up_down_volume',
    'compute_volume_trend',
    'compute_volume_ratio',
    'compute_vpa_metrics',
    'has_volume',
    # Validation
    'validate_ohlcv',
    'DataValidationError',
]
