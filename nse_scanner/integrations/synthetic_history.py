"""
Synthetic but realistic daily price history, for running the scanner when
the NSE API is unavailable.
"""

import logging
import zlib
from datetime import date, timedelta
from typing import List
import numpy as np

from nse_scanner.data.models import PricePoint

logger = logging.getLogger(__name__)

MIN_PRICE = 10.0


def generate_historical_data(
    symbol: str,
    start: date,
    end: date,
    base_price: float = 1000.0,
    rng: np.random.Generator = None
) -> List[PricePoint]:
    """Generate a random-walk price history for a symbol.

    Args:
        symbol: Stock symbol
        start: First date of the range
        end: Last date of the range
        base_price: Price the walk starts from
        rng: Random generator (a fresh one if not given)

    Returns:
        One price point per weekday in the range, oldest first
    """
    rng = rng or np.random.default_rng()

    data = []
    previous_close = base_price
    current = start
    while current <= end:
        # Skip weekends (Monday=0, Sunday=6)
        if current.weekday() < 5:
            change_percent = rng.uniform(-0.02, 0.02)

            open_price = max(MIN_PRICE, previous_close * (1 + rng.uniform(-0.005, 0.005)))
            close_price = max(MIN_PRICE, open_price * (1 + change_percent))
            high_price = max(open_price, close_price) * (1 + rng.uniform(0, 0.01))
            low_price = min(open_price, close_price) * (1 - rng.uniform(0, 0.01))

            # More volume on bigger moves
            volume = round(100000 + abs(change_percent) * 2000000 + rng.uniform(0, 500000))

            data.append(PricePoint(
                date=current.isoformat(),
                open=round(open_price, 2),
                high=round(high_price, 2),
                low=round(low_price, 2),
                close=round(close_price, 2),
                volume=volume
            ))
            previous_close = close_price
        current += timedelta(days=1)

    logger.debug(f"Generated {len(data)} synthetic price points for {symbol}")
    return data


class SyntheticHistoryProvider:
    """History provider serving generated data, reproducible per symbol."""

    def __init__(self, seed: int = 0, base_price: float = 1000.0):
        self.seed = seed
        self.base_price = base_price

    async def get_historical_data(self, symbol: str, start: date, end: date) -> List[PricePoint]:
        rng = np.random.default_rng([self.seed, zlib.crc32(symbol.encode("utf-8"))])
        return generate_historical_data(symbol, start, end, base_price=self.base_price, rng=rng)
