"""
OHLCV Data Validation Utilities

Input checks run once per derive_signal call, before any window is sliced,
so corrupt broker data fails loudly instead of leaking NaN into levels and
confidence scores.
"""

from typing import List, Optional
import pandas as pd
import logging

logger = logging.getLogger(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close"]


class DataValidationError(ValueError):
    """Raised when OHLCV data fails validation checks."""


def _price_errors(df: pd.DataFrame, check_nan: bool, check_positive_prices: bool) -> List[str]:
    errors = []
    for col in PRICE_COLUMNS:
        if check_nan and df[col].isna().any():
            errors.append(f"Column '{col}' has {int(df[col].isna().sum())} NaN values")
        if check_positive_prices and (df[col] <= 0).any():
            errors.append(f"Column '{col}' has {int((df[col] <= 0).sum())} non-positive values")
    return errors


def validate_ohlcv(
    df: pd.DataFrame,
    require_volume: bool = False,
    check_nan: bool = True,
    check_positive_prices: bool = True,
    check_candle_integrity: bool = True,
    check_positive_volume: bool = True,
    min_rows: Optional[int] = None,
    raise_on_error: bool = True,
) -> dict:
    """
    Validate an OHLCV DataFrame before analysis.

    FX tick volume is optional, so volume is not required by default. Zero
    volume is never an error: the pipeline reads it as "no volume".

    Args:
        df: DataFrame with OHLCV columns
        require_volume: Require a 'volume' column
        check_nan: Reject NaN prices
        check_positive_prices: Reject prices <= 0
        check_candle_integrity: Reject candles with high < low
        check_positive_volume: Reject negative volume
        min_rows: Minimum required rows (None = no minimum)
        raise_on_error: Raise DataValidationError instead of returning

    Returns:
        dict with ``valid`` (bool), ``errors`` and ``warnings`` (lists of str)

    Raises:
        DataValidationError: If validation fails and raise_on_error=True
    """
    required = PRICE_COLUMNS + (["volume"] if require_volume else [])
    missing = [col for col in required if col not in df.columns]

    errors: List[str] = []
    warnings: List[str] = []

    if missing:
        errors.append(f"Missing required columns: {missing}")
    else:
        if min_rows is not None and len(df) < min_rows:
            errors.append(f"DataFrame too short: need {min_rows} rows, got {len(df)}")

        errors.extend(_price_errors(df, check_nan, check_positive_prices))

        inverted = int((df["high"] < df["low"]).sum()) if check_candle_integrity else 0
        if inverted:
            errors.append(f"Found {inverted} inverted candles (high < low)")

        if "volume" in df.columns:
            negative = int((df["volume"] < 0).sum()) if check_positive_volume else 0
            if negative:
                errors.append(f"Found {negative} negative volume values")
            zero = int((df["volume"] == 0).sum())
            if 0 < zero < len(df):
                warnings.append(f"{zero} of {len(df)} candles have zero volume")

        if not df.index.is_monotonic_increasing:
            warnings.append("Candles are not in ascending time order")

    for warning in warnings:
        logger.debug("OHLCV validation warning: %s", warning)

    if errors and raise_on_error:
        raise DataValidationError("; ".join(errors))

    return {"valid": not errors, "errors": errors, "warnings": warnings}
