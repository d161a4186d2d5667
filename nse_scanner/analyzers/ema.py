"""
EMA Analysis Module for the NSE Scanner

This module provides functions to calculate Exponential Moving Averages (EMA)
over daily price series and to classify the current price against them.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence
import pandas as pd
import numpy as np
import talib as ta

from config.settings import ScannerConfig
from nse_scanner.data.models import EmaRelation, EmaScanResult, PricePoint

logger = logging.getLogger(__name__)


def _extract_prices(series: Sequence[PricePoint], price_field: str) -> np.ndarray:
    return np.array([point.price(price_field) for point in series], dtype=float)


def compute_ema(
    series: Sequence[PricePoint],
    period: int,
    price_field: str = "close"
) -> List[Optional[float]]:
    """Calculate the Exponential Moving Average series for a given period.

    The first EMA value is seeded with the Simple Moving Average of the first
    `period` prices, then smoothed with k = 2 / (period + 1).

    Args:
        series: Price points sorted by date ascending
        period: Number of periods for the moving average
        price_field: PricePoint field to use as price (default close)

    Returns:
        EMA values aligned with the input series; None where not yet computable.
        Empty list for empty input or a non-positive period.
    """
    if not series or period <= 0:
        return []

    if len(series) < period:
        return [None] * len(series)

    prices = _extract_prices(series, price_field)

    # A missing price makes every later value of the recurrence undefined.
    # ta.EMA would instead skip leading NaNs and seed later.
    missing = np.flatnonzero(np.isnan(prices))
    defined = int(missing[0]) if missing.size else len(prices)
    if defined < len(prices):
        logger.warning(f"Missing price at index {defined}, EMA({period}) undefined from there on")

    values = [None] * len(prices)
    if defined < period:
        return values

    # k == 1 for a single period, the average is the price itself
    if period == 1:
        ema = prices[:defined]
    else:
        ema = ta.EMA(prices[:defined], timeperiod=period)

    values[:defined] = [None if np.isnan(value) else float(value) for value in ema]
    return values


def price_relation_to_ema(
    current_price: Optional[float],
    ema_value: Optional[float]
) -> Optional[EmaRelation]:
    """Check if the current price is above or below an EMA.

    Equal values resolve to 'below'.
    """
    if ema_value is None or current_price is None:
        return None
    if math.isnan(ema_value):
        return None
    return "above" if current_price > ema_value else "below"


def sort_by_date(series: Sequence[PricePoint], ascending: bool = True) -> List[PricePoint]:
    """Return the series ordered by date.

    Dates must be ISO formatted. Unparseable dates are logged and ordered
    before all valid ones, so they never become the latest point.
    """
    if not series:
        return []

    dates = [point.date for point in series]
    df = pd.DataFrame({'date': pd.to_datetime(dates, format='ISO8601', errors='coerce')})

    invalid = [dates[i] for i in df.index[df['date'].isna()]]
    if invalid:
        logger.warning(f"Unparseable dates in price series: {invalid}")

    df = df.sort_values('date', ascending=ascending, kind='mergesort', na_position='first')
    return [series[i] for i in df.index]


def compute_all_emas(series: Sequence[PricePoint]) -> Dict:
    """Calculate the 10, 20, 50 and 200 day EMAs for a price series.

    Unlike compute_ema, the series may be in any order.

    Returns:
        Dictionary with the full EMA series ('ema_10' ...), the latest close
        ('current_price') and the latest EMA values ('current_ema_10' ...)
    """
    if not series:
        return _get_empty_emas()

    ordered = sort_by_date(series)

    emas = {}
    for period in ScannerConfig.EMA_PERIODS:
        values = compute_ema(ordered, period)
        emas[f'ema_{period}'] = values
        emas[f'current_ema_{period}'] = values[-1] if values else None

    emas['current_price'] = ordered[-1].close
    return emas


def _get_empty_emas() -> Dict:
    """Return the result of compute_all_emas for an empty series."""
    emas = {'current_price': None}
    for period in ScannerConfig.EMA_PERIODS:
        emas[f'ema_{period}'] = []
        emas[f'current_ema_{period}'] = None
    return emas


def build_scan_result(symbol: str, company_name: str, series: Sequence[PricePoint]) -> EmaScanResult:
    """Create the EMA snapshot for one symbol from its price history."""
    if not series:
        raise ValueError(f"No historical data for symbol {symbol}")

    emas = compute_all_emas(series)
    current_price = emas['current_price']

    fields = {}
    for period in ScannerConfig.EMA_PERIODS:
        ema_value = emas[f'current_ema_{period}']
        fields[f'ema_{period}'] = ema_value
        fields[f'relation_to_ema_{period}'] = price_relation_to_ema(current_price, ema_value)

    logger.debug(f"{symbol}: price {current_price}, EMAs {fields}")

    return EmaScanResult(
        symbol=symbol,
        company_name=company_name,
        current_price=current_price,
        **fields
    )
